"""Shell execution tool."""

import logging
import time
import uuid
from typing import Any

from warden import outcome
from warden.exceptions import ConfirmationRequired, InvalidArgumentError, WardenError
from warden.subprocess_manager import run_command
from warden.tools_pkg.context import ToolContext
from warden.tools_pkg.utils import cap_lines

logger = logging.getLogger(__name__)


async def shell_execute(
    ctx: ToolContext,
    command: str,
    timeout: int | None = None,
    confirmed: bool = False,
    working_directory: str | None = None,
) -> dict[str, Any]:
    """Authorize and run a shell command.

    The command gate runs first. A warn-tier command without ``confirmed``
    returns a ``need_confirm`` outcome and nothing is spawned; re-invoking
    with ``confirmed=True`` runs it exactly once.

    Args:
        ctx: Tool context of the caller
        command: Command string for the platform shell
        timeout: Milliseconds before the process is killed
        confirmed: Caller's confirmation for a warn-tier command
        working_directory: Directory to run in, confined like any path

    Returns:
        Outcome with ``exit_code`` and the verdict in metadata
    """
    title = command if isinstance(command, str) else "shell"
    try:
        verdict = ctx.gate.authorize(command, confirmed=confirmed)
    except ConfirmationRequired as e:
        return outcome.need_confirm(title, e, exit_code=None)
    except WardenError as e:
        return outcome.error(title, e, exit_code=-2)

    timeout_ms = timeout if timeout is not None else ctx.config.commands.default_timeout_ms
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int) or timeout_ms <= 0:
        return outcome.error(
            title, InvalidArgumentError(f"timeout must be a positive integer, got {timeout!r}")
        )

    try:
        if working_directory:
            cwd = ctx.resolver.resolve(working_directory, must_exist=True).absolute_path
        else:
            cwd = ctx.resolver.confinement_root()
    except WardenError as e:
        return outcome.error(title, e, exit_code=-2)

    shell_id = str(uuid.uuid4())[:8]
    argv = ctx.platform.shell.argv(command)
    start_time = time.time()
    logger.debug("Running [%s] in %s: %s", shell_id, cwd, command)

    try:
        result = await run_command(argv, timeout=timeout_ms / 1000, cwd=cwd)
    except OSError as e:
        return outcome.error(
            title,
            InvalidArgumentError(f"Could not start {argv[0]}: {e}", shell=argv[0]),
            exit_code=-2,
        )

    metadata = {
        "exit_code": result.returncode,
        "shell_id": shell_id,
        "duration": round(time.time() - start_time, 3),
        "verdict": verdict.to_dict(),
        "confirmed": verdict.matched_rule is not None,
    }

    if result.timed_out:
        return outcome.ok(title, f"Command timed out after {timeout_ms}ms", timed_out=True, **metadata)

    output = result.stdout
    if result.stderr:
        output = output + "\n" + result.stderr if output else result.stderr
    output, truncated = cap_lines(output)

    return outcome.ok(title, output or "(no output)", truncated=truncated, **metadata)
