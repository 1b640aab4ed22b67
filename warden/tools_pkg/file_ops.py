"""File tools that only ever touch resolved paths."""

from typing import Any

from warden import outcome
from warden.exceptions import InvalidArgumentError, NotFoundError, PathDeniedError, WardenError
from warden.path_guard import ResolvedPath, describe_path, validate_path_safety
from warden.tools_pkg.constants import DEFAULT_READ_LIMIT, MAX_LINE_LENGTH
from warden.tools_pkg.context import ToolContext
from warden.tools_pkg.utils import format_size, is_binary_file


async def _read(resolved: ResolvedPath, offset: int, limit: int) -> dict[str, Any]:
    path = resolved.path
    title = resolved.absolute_path
    if not path.is_file():
        return outcome.error(title, InvalidArgumentError(f"Not a file: {title}", path=title))
    if is_binary_file(path):
        return outcome.error(
            title, InvalidArgumentError(f"Cannot read binary file: {title}", path=title)
        )

    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        return outcome.error(title, InvalidArgumentError(f"Error reading file: {e}", path=title))

    lines = content.split("\n")
    total_lines = len(lines)
    end_line = min(offset + limit, total_lines) if limit > 0 else total_lines
    selected = lines[offset:end_line]

    formatted = []
    for i, line in enumerate(selected):
        if len(line) > MAX_LINE_LENGTH:
            line = line[:MAX_LINE_LENGTH] + "..."
        formatted.append(f"{offset + i + 1:5d}| {line}")

    header = f'<file path="{title}" lines="{total_lines}">\n'
    footer = "\n</file>"
    if end_line < total_lines:
        footer = f"\n\n(File has more lines. Use offset={end_line} to continue reading)\n</file>"

    return outcome.ok(
        title,
        header + "\n".join(formatted) + footer,
        total_lines=total_lines,
        showing_lines=len(selected),
        offset=offset,
        truncated=end_line < total_lines,
    )


async def read_execute(
    ctx: ToolContext, file_path: str, offset: int = 0, limit: int = DEFAULT_READ_LIMIT
) -> dict[str, Any]:
    """Read a text file with line numbers."""
    if offset < 0:
        return outcome.error(file_path, InvalidArgumentError("offset must be >= 0"))
    return await ctx.middleware.execute_with_path_check(
        _read, file_path=file_path, must_exist=True, offset=offset, limit=limit
    )


async def _write(resolved: ResolvedPath, content: str) -> dict[str, Any]:
    path = resolved.path
    title = resolved.absolute_path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        return outcome.error(title, InvalidArgumentError(f"Error writing file: {e}", path=title))
    return outcome.ok(title, f"Successfully wrote {len(content)} bytes to {title}", size=len(content))


async def write_execute(ctx: ToolContext, file_path: str, content: str) -> dict[str, Any]:
    """Write ``content`` to a file, creating parent directories."""
    if not isinstance(content, str):
        return outcome.error(file_path, InvalidArgumentError("content must be a string"))
    return await ctx.middleware.execute_with_path_check(
        _write, file_path=file_path, content=content
    )


async def _ls(resolved: ResolvedPath, show_hidden: bool) -> dict[str, Any]:
    target = resolved.path
    title = f"ls: {resolved.absolute_path}"
    if not target.is_dir():
        return outcome.error(
            title,
            InvalidArgumentError(f"Not a directory: {resolved.absolute_path}"),
        )

    entries = []
    try:
        children = sorted(target.iterdir())
    except OSError as e:
        return outcome.error(title, InvalidArgumentError(f"Error listing directory: {e}"))

    for entry in children:
        if entry.name.startswith(".") and not show_hidden:
            continue
        if entry.is_symlink():
            entries.append(f"{entry.name}@")
        elif entry.is_dir():
            entries.append(f"{entry.name}/")
        else:
            try:
                entries.append(f"{entry.name} ({format_size(entry.stat().st_size)})")
            except OSError:
                entries.append(entry.name)

    if not entries:
        return outcome.ok(title, "(empty directory)", count=0)
    return outcome.ok(title, "\n".join(entries), count=len(entries))


async def ls_execute(ctx: ToolContext, path: str = ".", show_hidden: bool = False) -> dict[str, Any]:
    """List directory contents."""
    return await ctx.middleware.execute_with_path_check(
        _ls, file_path=path, must_exist=True, show_hidden=show_hidden
    )


async def path_info_execute(ctx: ToolContext, path: str) -> dict[str, Any]:
    """Report how ``path`` resolves and what lies behind it, without raising."""
    report = validate_path_safety(ctx.resolver, path)
    if not report.safe:
        return outcome.error(
            path,
            _report_error(report.errors[0] if report.errors else "Path not allowed", report.code),
            safety=report.to_dict(),
        )

    info = describe_path(ctx.resolver.resolve(path))
    lines = [f"Resolved: {report.normalized_path}", f"Exists: {info['exists']}"]
    if info["exists"]:
        kind = "directory" if info["is_directory"] else "symlink" if info["is_symlink"] else "file"
        lines.append(f"Type: {kind}")
        lines.append(f"Size: {format_size(info['size'])}")
    lines.extend(f"Warning: {w}" for w in report.warnings)
    return outcome.ok(path, "\n".join(lines), info=info, safety=report.to_dict())


def _report_error(message: str, code: str | None) -> WardenError:
    if code == "E_NOT_FOUND":
        return NotFoundError(message)
    if code == "E_INVALID_ARGS":
        return InvalidArgumentError(message)
    return PathDeniedError(message, code=code)
