"""Tool registry: function schemas for every mediated operation."""

from dataclasses import dataclass, field
from typing import Any


class ToolCategory:
    """Tool categories for grouping."""

    SHELL = "shell"
    FILE_READ = "file_read"
    FILE_WRITE = "file_write"
    PERMISSIONS = "permissions"
    WATCH = "watch"


@dataclass
class ToolSpec:
    """Definition of one tool as exposed to a caller."""

    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)
    required_params: list[str] = field(default_factory=list)
    category: str = ToolCategory.FILE_READ

    def to_llm_schema(self) -> dict:
        """Convert to LLM function schema format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": self.parameters,
                    "required": self.required_params,
                },
            },
        }


_ACL_LIST = {
    "type": "array",
    "items": {"type": "string"},
    "description": "Entries as 'principal:rights', e.g. 'Users:RX'",
}


SHELL = ToolSpec(
    name="shell",
    description=(
        "Run a command in the platform shell, inside the sandbox root. Commands are "
        "classified first: blocked commands are refused, risky ones return "
        "need_confirm and must be re-sent with confirmed=true."
    ),
    parameters={
        "command": {"type": "string", "description": "The command to execute"},
        "timeout": {"type": "integer", "description": "Timeout in milliseconds"},
        "confirmed": {
            "type": "boolean",
            "description": "Confirm a command previously answered with need_confirm",
        },
        "working_directory": {
            "type": "string",
            "description": "Directory to run in; must lie inside the sandbox root",
        },
    },
    required_params=["command"],
    category=ToolCategory.SHELL,
)

READ = ToolSpec(
    name="read",
    description="Read a text file with line numbers.",
    parameters={
        "file_path": {"type": "string", "description": "Path of the file to read"},
        "offset": {"type": "integer", "description": "Line to start from (0-based)"},
        "limit": {"type": "integer", "description": "Maximum number of lines"},
    },
    required_params=["file_path"],
)

WRITE = ToolSpec(
    name="write",
    description="Write content to a file, creating parent directories as needed.",
    parameters={
        "file_path": {"type": "string", "description": "Path of the file to write"},
        "content": {"type": "string", "description": "Full file content"},
    },
    required_params=["file_path", "content"],
    category=ToolCategory.FILE_WRITE,
)

LS = ToolSpec(
    name="ls",
    description="List the entries of a directory.",
    parameters={
        "path": {"type": "string", "description": "Directory to list"},
        "show_hidden": {"type": "boolean", "description": "Include dot entries"},
    },
)

PATH_INFO = ToolSpec(
    name="path_info",
    description="Show how a path resolves against the sandbox root and what it points at.",
    parameters={"path": {"type": "string", "description": "Path to inspect"}},
    required_params=["path"],
)

PERMISSIONS_GET = ToolSpec(
    name="permissions_get",
    description="Show the permissions of a file or directory in a platform-neutral form.",
    parameters={"path": {"type": "string", "description": "Path to inspect"}},
    required_params=["path"],
    category=ToolCategory.PERMISSIONS,
)

PERMISSIONS_SET = ToolSpec(
    name="permissions_set",
    description=(
        "Change permissions. Use 'mode' on POSIX systems; use readonly/hidden/system and "
        "grant/deny ACL entries on Windows. Recursive changes are bounded by max_depth."
    ),
    parameters={
        "path": {"type": "string", "description": "Target path"},
        "mode": {"type": "string", "description": "Octal mode such as '755' (POSIX)"},
        "readonly": {"type": "boolean", "description": "Set or clear read-only (Windows)"},
        "hidden": {"type": "boolean", "description": "Set or clear hidden (Windows)"},
        "system": {"type": "boolean", "description": "Set or clear system (Windows)"},
        "grant": _ACL_LIST,
        "deny": _ACL_LIST,
        "recursive": {"type": "boolean", "description": "Apply to the whole subtree"},
        "max_depth": {"type": "integer", "description": "Deepest level to modify"},
        "skip_errors": {
            "type": "boolean",
            "description": "Keep going past failures instead of aborting",
        },
    },
    required_params=["path"],
    category=ToolCategory.PERMISSIONS,
)

WATCH = ToolSpec(
    name="watch",
    description="Watch a directory for a while and report created, modified and deleted entries.",
    parameters={
        "path": {"type": "string", "description": "Directory to watch"},
        "events": {
            "type": "string",
            "description": "Comma separated subset of create,modify,delete",
        },
        "duration": {"type": "number", "description": "Seconds to watch"},
        "recursive": {"type": "boolean", "description": "Include subdirectories"},
        "max_depth": {"type": "integer", "description": "Deepest directory level watched"},
        "debounce_ms": {"type": "integer", "description": "Quiet period for coalescing"},
        "output_format": {"type": "string", "enum": ["text", "json"]},
    },
    required_params=["path"],
    category=ToolCategory.WATCH,
)


TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (SHELL, READ, WRITE, LS, PATH_INFO, PERMISSIONS_GET, PERMISSIONS_SET, WATCH)
}


def get_tool(name: str) -> ToolSpec | None:
    return TOOLS.get(name)


def get_tool_schemas(excluded_tools: set[str] | None = None) -> list[dict[str, Any]]:
    """Get all tool schemas.

    Args:
        excluded_tools: Set of tool names to exclude (e.g., {"shell"})
    """
    excluded_tools = excluded_tools or set()
    return [spec.to_llm_schema() for name, spec in TOOLS.items() if name not in excluded_tools]
