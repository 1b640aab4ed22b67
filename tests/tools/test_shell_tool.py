"""Tests for the shell tool and its confirmation protocol."""

import json
import sys
from unittest.mock import AsyncMock, patch

import pytest

from warden import outcome
from warden.subprocess_manager import CompletedCommand
from warden.tools_pkg import shell_execute


def _completed(stdout="done\n", returncode=0, timed_out=False):
    return CompletedCommand(["bash"], returncode, stdout, "", timed_out=timed_out)


@pytest.fixture
def runner():
    with patch("warden.tools_pkg.shell.run_command", new=AsyncMock()) as mock:
        mock.return_value = _completed()
        yield mock


@pytest.mark.asyncio
class TestShellTool:
    async def test_allowed_command_runs_in_root(self, ctx, sandbox, runner):
        result = await shell_execute(ctx, "ls -la")

        assert outcome.status_of(result) is outcome.Status.OK
        assert result["output"] == "done\n"
        assert result["metadata"]["exit_code"] == 0
        assert result["metadata"]["verdict"]["level"] == "allow"
        runner.assert_awaited_once()
        argv = runner.await_args.args[0]
        assert argv == ["/bin/bash", "-c", "ls -la"]
        assert runner.await_args.kwargs["cwd"] == str(sandbox)
        assert runner.await_args.kwargs["timeout"] == 30

    async def test_warn_command_needs_confirmation_first(self, ctx, runner):
        result = await shell_execute(ctx, "rm -rf build")

        assert outcome.status_of(result) is outcome.Status.NEED_CONFIRM
        assert result["metadata"]["verdict"]["matched_rule"] == "recursive-delete"
        runner.assert_not_awaited()

        result = await shell_execute(ctx, "rm -rf build", confirmed=True)

        assert outcome.status_of(result) is outcome.Status.OK
        assert result["metadata"]["confirmed"] is True
        runner.assert_awaited_once()

    async def test_confirmation_is_not_remembered(self, ctx, runner):
        await shell_execute(ctx, "rm -rf build", confirmed=True)
        result = await shell_execute(ctx, "rm -rf build")
        assert outcome.status_of(result) is outcome.Status.NEED_CONFIRM
        assert runner.await_count == 1

    async def test_denied_command_never_runs(self, ctx, config, runner):
        result = await shell_execute(ctx, "rm -rf /", confirmed=True)

        assert outcome.status_of(result) is outcome.Status.ERROR
        assert result["metadata"]["error"] == "DangerousCommand"
        assert result["metadata"]["exit_code"] == -2
        runner.assert_not_awaited()

        entries = config.commands.audit_log_file.read_text().splitlines()
        assert json.loads(entries[-1])["decision"] == "denied"

    async def test_working_directory_inside_root(self, ctx, sandbox, runner):
        (sandbox / "sub").mkdir()
        await shell_execute(ctx, "pwd", working_directory="sub")
        assert runner.await_args.kwargs["cwd"] == str(sandbox / "sub")

    async def test_working_directory_outside_root(self, ctx, tmp_path, runner):
        result = await shell_execute(ctx, "pwd", working_directory=str(tmp_path))
        assert result["metadata"]["error"] == "PathDenied"
        runner.assert_not_awaited()

    async def test_timeout_reported(self, ctx, runner):
        runner.return_value = _completed("", -1, timed_out=True)
        result = await shell_execute(ctx, "sleep 100", timeout=50)

        assert outcome.status_of(result) is outcome.Status.OK
        assert result["metadata"]["timed_out"] is True
        assert result["metadata"]["exit_code"] == -1
        assert runner.await_args.kwargs["timeout"] == 0.05

    @pytest.mark.parametrize("timeout", [0, -5, "10", True])
    async def test_bad_timeout(self, ctx, runner, timeout):
        result = await shell_execute(ctx, "ls", timeout=timeout)
        assert result["metadata"]["error"] == "InvalidArgument"
        runner.assert_not_awaited()

    async def test_empty_command(self, ctx, runner):
        result = await shell_execute(ctx, "   ")
        assert outcome.status_of(result) is outcome.Status.ERROR
        runner.assert_not_awaited()

    async def test_missing_shell(self, ctx, runner):
        runner.side_effect = FileNotFoundError("no such file")
        result = await shell_execute(ctx, "ls")
        assert result["metadata"]["error"] == "InvalidArgument"
        assert result["metadata"]["exit_code"] == -2


@pytest.mark.asyncio
@pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/bash")
async def test_real_command(ctx, sandbox):
    (sandbox / "hello.txt").write_text("hi")
    result = await shell_execute(ctx, "ls && echo oops >&2 && exit 4")

    assert result["metadata"]["exit_code"] == 4
    assert "hello.txt" in result["output"]
    assert "oops" in result["output"]
