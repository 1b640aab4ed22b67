"""
Subprocess lifecycle management for Warden.

Every process Warden spawns (shell commands, attrib/icacls calls, the sudo
check) goes through ``managed_subprocess`` so it is tracked and torn down
before the event loop closes.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class CompletedCommand:
    """Captured result of a finished (or timed out) process."""

    argv: list[str]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class SubprocessRegistry:
    """Tracks live subprocesses so they can be terminated together."""

    def __init__(self) -> None:
        self._processes: set[asyncio.subprocess.Process] = set()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._processes)

    async def register(self, process: asyncio.subprocess.Process) -> None:
        async with self._lock:
            self._processes.add(process)

    async def unregister(self, process: asyncio.subprocess.Process) -> None:
        async with self._lock:
            self._processes.discard(process)

    async def cleanup_all(self, timeout: float = 2.0) -> None:
        """
        Terminate every registered subprocess.

        Args:
            timeout: Maximum time to wait for processes to terminate gracefully
        """
        async with self._lock:
            if not self._processes:
                return
            processes = list(self._processes)
            self._processes.clear()

        running = [p for p in processes if p.returncode is None]
        for process in running:
            try:
                process.terminate()
            except ProcessLookupError:
                pass

        if not running:
            return

        try:
            await asyncio.wait_for(
                asyncio.gather(*[p.wait() for p in running], return_exceptions=True),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            for process in running:
                if process.returncode is None:
                    await _kill(process)


_registry: SubprocessRegistry | None = None


def get_registry() -> SubprocessRegistry:
    """Get or create the global subprocess registry."""
    global _registry
    if _registry is None:
        _registry = SubprocessRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (for testing)."""
    global _registry
    _registry = None


async def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
        await asyncio.wait_for(process.wait(), timeout=1.0)
    except (ProcessLookupError, asyncio.TimeoutError) as e:
        logger.debug("Error killing process %s: %s", process.pid, e)


@asynccontextmanager
async def managed_subprocess(
    argv: Sequence[str], **kwargs
) -> AsyncIterator[asyncio.subprocess.Process]:
    """
    Spawn ``argv`` (no shell interpretation) and track it until exit.

    Usage:
        async with managed_subprocess(["attrib", path], stdout=PIPE) as process:
            await process.wait()
    """
    registry = get_registry()
    process = await asyncio.create_subprocess_exec(*argv, **kwargs)

    try:
        await registry.register(process)
        yield process
    finally:
        await registry.unregister(process)
        if process.returncode is None:
            try:
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=1.0)
            except (ProcessLookupError, asyncio.TimeoutError):
                await _kill(process)


async def run_command(
    argv: Sequence[str], timeout: float | None = None, cwd: str | None = None
) -> CompletedCommand:
    """
    Run ``argv`` to completion and capture its output.

    Args:
        argv: Program and arguments
        timeout: Seconds before the process is killed, None for no limit
        cwd: Working directory for the process

    Returns:
        CompletedCommand; a timeout yields ``returncode == -1`` and ``timed_out``

    Raises:
        FileNotFoundError: The program does not exist
    """
    async with managed_subprocess(
        list(argv),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    ) as process:
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            await _kill(process)
            logger.info("Command timed out after %ss: %s", timeout, argv[0])
            return CompletedCommand(list(argv), -1, "", "", timed_out=True)

    return CompletedCommand(
        argv=list(argv),
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


async def cleanup_all_subprocesses(timeout: float = 2.0) -> None:
    """Terminate all tracked subprocesses; call before closing the event loop."""
    await get_registry().cleanup_all(timeout=timeout)
