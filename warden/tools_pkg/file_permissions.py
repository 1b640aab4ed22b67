"""Permission inspection and mutation tools."""

import logging
from typing import Any

from warden import outcome
from warden.exceptions import InvalidArgumentError, WardenError
from warden.permissions import (
    AclEntry,
    MutationResult,
    PermissionRequest,
    PermissionSnapshot,
    PosixModeRequest,
    WindowsAttributeRequest,
    validate_request,
)
from warden.tools_pkg.context import ToolContext

logger = logging.getLogger(__name__)


def _format_snapshot(snapshot: PermissionSnapshot) -> str:
    lines = [
        f"Path: {snapshot.path}",
        f"Type: {'directory' if snapshot.is_directory else 'file'}",
        f"Readable: {snapshot.readable}",
        f"Writable: {snapshot.writable}",
        f"Executable: {snapshot.executable}",
    ]
    if snapshot.octal is not None:
        lines.append(f"Mode: {snapshot.octal} ({snapshot.symbolic})")
    for name, value in snapshot.attributes.items():
        lines.append(f"Attribute {name}: {value}")
    for principal, rights in snapshot.acl.items():
        lines.append(f"ACL {principal}: {', '.join(rights)}")
    return "\n".join(lines)


def _format_mutation(result: MutationResult) -> str:
    lines = [f"Permission change on {result.root}: {result.summary()}"]
    for item in result.items:
        if item.skipped:
            lines.append(f"  - {item.path}: skipped ({item.reason})")
        elif item.success:
            ops = ", ".join(f"{op.operation}={op.value}" for op in item.operations)
            lines.append(f"  ✓ {item.path}: {ops}")
        else:
            lines.append(f"  ✗ {item.path}: {item.first_error}")
    return "\n".join(lines)


def _acl_entries(value: str | list[str] | None) -> tuple[AclEntry, ...]:
    if not value:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(AclEntry.parse(item) for item in items if item.strip())


def build_request(
    mode: int | str | None = None,
    readonly: bool | None = None,
    hidden: bool | None = None,
    system: bool | None = None,
    grant: str | list[str] | None = None,
    deny: str | list[str] | None = None,
) -> PermissionRequest:
    """Turn tool arguments into one permission request.

    Raises:
        InvalidArgumentError: Both or neither request kinds were given
    """
    windows_args = any(v is not None for v in (readonly, hidden, system)) or grant or deny
    if mode is not None and windows_args:
        raise InvalidArgumentError("Give either mode or Windows attributes/ACL entries, not both")
    if mode is not None:
        return PosixModeRequest.parse(mode)
    if not windows_args:
        raise InvalidArgumentError("No permission change requested")
    return WindowsAttributeRequest(
        readonly=readonly,
        hidden=hidden,
        system=system,
        grant=_acl_entries(grant),
        deny=_acl_entries(deny),
    )


async def permissions_get_execute(ctx: ToolContext, path: str) -> dict[str, Any]:
    """Return the normalized permission snapshot of ``path``."""
    try:
        resolved = ctx.resolver.resolve(path, must_exist=True)
        snapshot = await ctx.permissions.get(resolved)
    except WardenError as e:
        return outcome.error(path, e)

    return outcome.ok(path, _format_snapshot(snapshot), permissions=snapshot.to_dict())


async def permissions_set_execute(
    ctx: ToolContext,
    path: str,
    mode: int | str | None = None,
    readonly: bool | None = None,
    hidden: bool | None = None,
    system: bool | None = None,
    grant: str | list[str] | None = None,
    deny: str | list[str] | None = None,
    recursive: bool = False,
    max_depth: int | None = None,
    skip_errors: bool = False,
) -> dict[str, Any]:
    """Change permissions of ``path`` (and optionally its subtree)."""
    try:
        request = build_request(mode, readonly, hidden, system, grant, deny)
        resolved = ctx.resolver.resolve(path, must_exist=True)
        result = await ctx.permissions.set(
            resolved,
            request,
            recursive=recursive,
            max_depth=max_depth,
            skip_errors=skip_errors,
        )
    except WardenError as e:
        return outcome.error(path, e)

    warnings = validate_request(request, ctx.platform)["warnings"]
    output = _format_mutation(result)
    if warnings:
        output += "\n\nWarnings:\n" + "\n".join(f"  - {w}" for w in warnings)

    if result.aborted or (not recursive and not result.success):
        err = InvalidArgumentError(
            f"Permission change failed: {result.error}", code="E_PERMISSION_FAILED", path=path
        )
        failed = outcome.error(path, err, result=result.to_dict(), warnings=warnings)
        failed["output"] = output
        return failed

    return outcome.ok(path, output, result=result.to_dict(), warnings=warnings)
