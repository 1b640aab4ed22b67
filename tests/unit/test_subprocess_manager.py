"""Tests for subprocess lifecycle management."""

import sys

import pytest

from warden.subprocess_manager import (
    cleanup_all_subprocesses,
    get_registry,
    managed_subprocess,
    reset_registry,
    run_command,
)


@pytest.fixture(autouse=True)
def fresh_registry():
    reset_registry()
    yield
    reset_registry()


@pytest.mark.asyncio
class TestRunCommand:
    async def test_captures_output(self):
        result = await run_command([sys.executable, "-c", "print('hi'); import sys; sys.exit(3)"])
        assert result.returncode == 3
        assert result.stdout.strip() == "hi"
        assert result.ok is False
        assert len(get_registry()) == 0

    async def test_timeout(self):
        result = await run_command(
            [sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.2
        )
        assert result.timed_out is True
        assert result.returncode == -1
        assert len(get_registry()) == 0

    async def test_cwd(self, tmp_path):
        result = await run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=str(tmp_path)
        )
        assert result.stdout.strip() == str(tmp_path)

    async def test_missing_program(self):
        with pytest.raises(FileNotFoundError):
            await run_command(["definitely-not-a-real-program-xyz"])


@pytest.mark.asyncio
async def test_managed_subprocess_registers_and_terminates():
    async with managed_subprocess([sys.executable, "-c", "import time; time.sleep(10)"]) as proc:
        assert len(get_registry()) == 1
    assert proc.returncode is not None
    assert len(get_registry()) == 0


@pytest.mark.asyncio
async def test_cleanup_all_terminates_live_processes():
    registry = get_registry()
    async with managed_subprocess([sys.executable, "-c", "import time; time.sleep(10)"]) as proc:
        await cleanup_all_subprocesses(timeout=2.0)
        assert len(registry) == 0
        assert proc.returncode is not None
