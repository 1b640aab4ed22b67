"""Tool execution dispatcher."""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from warden import outcome
from warden.exceptions import InvalidArgumentError
from warden.tools_pkg.context import ToolContext
from warden.tools_pkg.file_ops import ls_execute, path_info_execute, read_execute, write_execute
from warden.tools_pkg.file_permissions import permissions_get_execute, permissions_set_execute
from warden.tools_pkg.file_watch import watch_execute
from warden.tools_pkg.registry import get_tool
from warden.tools_pkg.shell import shell_execute

logger = logging.getLogger(__name__)

ToolFunc = Callable[..., Awaitable[dict[str, Any]]]

# Canonical tool aliases accepted from callers.
TOOL_ALIASES = {
    "bash": "shell",
    "execute_command": "shell",
    "chmod": "permissions_set",
    "get_permissions": "permissions_get",
    "set_permissions": "permissions_set",
    "file_watch": "watch",
    "read_file": "read",
    "write_file": "write",
    "list_directory": "ls",
}

TOOL_FUNCS: dict[str, ToolFunc] = {
    "shell": shell_execute,
    "read": read_execute,
    "write": write_execute,
    "ls": ls_execute,
    "path_info": path_info_execute,
    "permissions_get": permissions_get_execute,
    "permissions_set": permissions_set_execute,
    "watch": watch_execute,
}


def _canonicalize_tool_name(tool_name: str) -> str:
    """Normalize tool aliases to registered tool names."""
    return TOOL_ALIASES.get(tool_name, tool_name)


def _check_arguments(name: str, arguments: dict[str, Any]) -> None:
    spec = get_tool(name)
    unknown = sorted(set(arguments) - set(spec.parameters))
    if unknown:
        raise InvalidArgumentError(
            f"Unknown argument(s) for {name}: {', '.join(unknown)}", tool=name
        )
    missing = [p for p in spec.required_params if arguments.get(p) is None]
    if missing:
        raise InvalidArgumentError(
            f"Missing required argument(s) for {name}: {', '.join(missing)}", tool=name
        )


async def execute_tool(
    ctx: ToolContext, name: str, arguments: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Execute a tool call by name and return its outcome.

    Unknown tools and malformed arguments become ``InvalidArgument`` error
    outcomes; nothing is raised to the caller.

    Args:
        ctx: Tool context of the caller
        name: Tool name or one of its aliases
        arguments: Keyword arguments for the tool
    """
    arguments = dict(arguments or {})
    canonical = _canonicalize_tool_name(name)
    if canonical != name:
        logger.warning("Canonicalized tool alias '%s' to '%s'", name, canonical)

    func = TOOL_FUNCS.get(canonical)
    if func is None:
        return outcome.error(name, InvalidArgumentError(f"Unknown tool: {name}", tool=name))

    try:
        _check_arguments(canonical, arguments)
    except InvalidArgumentError as e:
        return outcome.error(canonical, e)

    start_time = time.time()
    result = await func(ctx, **arguments)
    logger.debug(
        "Tool %s finished with status %s in %.3fs",
        canonical,
        outcome.status_of(result).value,
        time.time() - start_time,
    )
    return result
