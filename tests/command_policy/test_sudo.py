"""Tests for the sudo check and security advice."""

from unittest.mock import AsyncMock, patch

import pytest

from warden.command_policy import check_sudo_config, security_recommendations
from warden.subprocess_manager import CompletedCommand


@pytest.mark.asyncio
class TestCheckSudoConfig:
    async def test_not_linux(self, darwin_profile):
        status = await check_sudo_config(darwin_profile)
        assert status.available is False
        assert "darwin" in status.error

    async def test_sudo_missing(self, linux_profile):
        with patch("warden.command_policy.sudo.shutil.which", return_value=None):
            status = await check_sudo_config(linux_profile)
        assert status.available is False
        assert status.error == "sudo is not installed"

    async def test_passwordless(self, linux_profile):
        runner = AsyncMock(return_value=CompletedCommand(["sudo"], 0, "", ""))
        with patch("warden.command_policy.sudo.shutil.which", return_value="/usr/bin/sudo"), patch(
            "warden.command_policy.sudo.run_command", runner
        ):
            status = await check_sudo_config(linux_profile)
        assert status.available and status.no_password
        runner.assert_awaited_once()
        assert runner.await_args.args[0] == ["/usr/bin/sudo", "-n", "true"]

    async def test_password_required(self, linux_profile):
        result = CompletedCommand(["sudo"], 1, "", "sudo: a password is required\n")
        with patch("warden.command_policy.sudo.shutil.which", return_value="/usr/bin/sudo"), patch(
            "warden.command_policy.sudo.run_command", AsyncMock(return_value=result)
        ):
            status = await check_sudo_config(linux_profile)
        assert status.available is True
        assert status.no_password is False
        assert status.error == "sudo: a password is required"


def test_security_recommendations(windows_profile, linux_profile):
    win = security_recommendations(windows_profile)
    assert win["general"]
    assert any("diskpart" in line for line in win["platform_specific"])
    assert any("sudoers" in line for line in security_recommendations(linux_profile)["platform_specific"])
