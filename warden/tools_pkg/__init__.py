"""
Tool front-ends for Warden.

Every tool takes a ToolContext first and returns an outcome dictionary
(see ``warden.outcome``). The executor dispatches calls by name.
"""

from warden.tools_pkg.context import ToolContext
from warden.tools_pkg.executor import TOOL_ALIASES, execute_tool
from warden.tools_pkg.file_ops import ls_execute, path_info_execute, read_execute, write_execute
from warden.tools_pkg.file_permissions import (
    build_request,
    permissions_get_execute,
    permissions_set_execute,
)
from warden.tools_pkg.file_watch import watch_execute
from warden.tools_pkg.registry import ToolSpec, get_tool_schemas
from warden.tools_pkg.shell import shell_execute

__all__ = [
    "ToolContext",
    "execute_tool",
    "TOOL_ALIASES",
    "get_tool_schemas",
    "ToolSpec",
    "shell_execute",
    "read_execute",
    "write_execute",
    "ls_execute",
    "path_info_execute",
    "permissions_get_execute",
    "permissions_set_execute",
    "build_request",
    "watch_execute",
]
