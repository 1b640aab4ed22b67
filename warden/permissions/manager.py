"""Cross-platform permission manager with bounded recursion."""

import logging
import os
from collections.abc import Iterator
from typing import Any

from warden.exceptions import (
    InvalidArgumentError,
    LimitReachedError,
    NotFoundError,
    PlatformUnsupportedError,
)
from warden.path_guard.models import ResolvedPath
from warden.permissions.base import PermissionAdapter
from warden.permissions.models import (
    MutationResult,
    PathMutation,
    PermissionRequest,
    PermissionSnapshot,
    PosixModeRequest,
    WindowsAttributeRequest,
)
from warden.permissions.posix import PosixPermissionAdapter
from warden.permissions.windows import CommandRunner, WindowsPermissionAdapter
from warden.platform_profile import PermissionModel, PlatformProfile, profile

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 5


class PermissionManager:
    """Read and change permissions of resolved paths.

    Picks the backend from the platform's permission model. Only
    ResolvedPath values are accepted, so every target has already passed
    the path guard.

    Usage:
        manager = PermissionManager()
        snapshot = await manager.get(resolver.resolve("script.sh"))
        result = await manager.set(resolved, PosixModeRequest(0o755), recursive=True)
    """

    def __init__(
        self,
        platform: PlatformProfile | None = None,
        default_max_depth: int = DEFAULT_MAX_DEPTH,
        windows_runner: CommandRunner | None = None,
    ) -> None:
        self._profile = platform or profile()
        self._default_max_depth = default_max_depth
        if self._profile.permission_model is PermissionModel.ACL_ATTRIBUTES:
            self._adapter: PermissionAdapter = WindowsPermissionAdapter(windows_runner)
        else:
            self._adapter = PosixPermissionAdapter()

    @property
    def adapter(self) -> PermissionAdapter:
        return self._adapter

    async def get(self, resolved: ResolvedPath) -> PermissionSnapshot:
        """Return the normalized permission snapshot of ``resolved``."""
        path = self._target(resolved)
        try:
            return await self._adapter.snapshot(path)
        except FileNotFoundError as e:
            raise NotFoundError(f"Path does not exist: {path}", path=path) from e

    async def set(
        self,
        resolved: ResolvedPath,
        request: PermissionRequest,
        recursive: bool = False,
        max_depth: int | None = None,
        skip_errors: bool = False,
    ) -> MutationResult:
        """Apply ``request`` to ``resolved`` and, optionally, its subtree.

        Args:
            resolved: Target produced by the path guard
            request: PosixModeRequest or WindowsAttributeRequest
            recursive: Also apply to every entry below a directory target
            max_depth: Deepest entry (root is depth 0) that may be changed
            skip_errors: Record failures per item and keep going

        Returns:
            MutationResult with one PathMutation per visited entry

        Raises:
            InvalidArgumentError: Not a ResolvedPath, empty request, bad depth
            NotFoundError: Target does not exist
            PlatformUnsupportedError: Request type has no mapping here
            LimitReachedError: Tree deeper than ``max_depth`` and not skip_errors
        """
        path = self._target(resolved)
        self._check_request(request)

        depth_limit = self._default_max_depth if max_depth is None else max_depth
        if isinstance(depth_limit, bool) or not isinstance(depth_limit, int) or depth_limit < 0:
            raise InvalidArgumentError(f"max_depth must be a non-negative integer: {max_depth!r}")

        result = MutationResult(root=path, recursive=recursive, max_depth=depth_limit)
        if not recursive or not os.path.isdir(path) or os.path.islink(path):
            result.items.append(await self._mutate(path, 0, request))
            result.error = result.items[0].first_error
            return result

        if not skip_errors:
            deepest = _tree_depth(path)
            if deepest > depth_limit:
                raise LimitReachedError(
                    f"Directory tree is {deepest} levels deep, limit is {depth_limit}",
                    path=path,
                    max_depth=depth_limit,
                    depth=deepest,
                )

        logger.info(
            "Recursive permission change on %s (max_depth=%d, skip_errors=%s)",
            path,
            depth_limit,
            skip_errors,
        )
        for entry, depth, is_link in _walk(path, depth_limit):
            if is_link:
                result.items.append(
                    PathMutation(entry, depth, skipped=True, reason="symbolic link not followed")
                )
                continue
            if depth > depth_limit:
                result.items.append(
                    PathMutation(entry, depth, skipped=True, reason="beyond max_depth")
                )
                continue

            item = await self._mutate(entry, depth, request)
            result.items.append(item)
            if not item.success and not skip_errors:
                result.aborted = True
                result.error = item.first_error
                logger.warning("Recursive permission change aborted at %s: %s", entry, result.error)
                break

        logger.info("Permission change on %s: %s", path, result.summary())
        return result

    async def _mutate(self, path: str, depth: int, request: PermissionRequest) -> PathMutation:
        operations = await self._adapter.apply(path, request)
        return PathMutation(path, depth, operations)

    def _target(self, resolved: ResolvedPath) -> str:
        if not isinstance(resolved, ResolvedPath):
            raise InvalidArgumentError(
                "Permission operations require a ResolvedPath from the path guard"
            )
        path = resolved.absolute_path
        if not os.path.lexists(path):
            raise NotFoundError(f"Path does not exist: {path}", path=path)
        return path

    def _check_request(self, request: PermissionRequest) -> None:
        if not isinstance(request, (PosixModeRequest, WindowsAttributeRequest)):
            raise InvalidArgumentError(f"Unsupported permission request: {request!r}")
        if not self._adapter.supports(request):
            hint = ""
            if isinstance(request, PosixModeRequest):
                hint = " (use map_mode_to_windows for an explicit conversion)"
            raise PlatformUnsupportedError(
                f"{type(request).__name__} is not supported on {self._profile.system}{hint}",
                request=type(request).__name__,
            )
        if isinstance(request, WindowsAttributeRequest) and request.is_empty:
            raise InvalidArgumentError("Permission request does not change anything")


def _tree_depth(root: str) -> int:
    """Depth of the deepest entry under ``root`` without following links."""
    deepest = 0
    stack = [(root, 0)]
    while stack:
        current, depth = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            logger.debug("Cannot scan %s: %s", current, e)
            continue
        for entry in entries:
            deepest = max(deepest, depth + 1)
            if entry.is_dir(follow_symlinks=False):
                stack.append((entry.path, depth + 1))
    return deepest


def _walk(root: str, max_depth: int) -> Iterator[tuple[str, int, bool]]:
    """Depth-first walk yielding (path, depth, is_symlink).

    Entries one level past ``max_depth`` are yielded but not descended into.
    """
    yield root, 0, False
    stack = [(root, 0)]
    while stack:
        current, depth = stack.pop()
        if depth >= max_depth + 1:
            continue
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.debug("Cannot scan %s: %s", current, e)
            continue
        children = []
        for entry in entries:
            is_link = entry.is_symlink()
            yield entry.path, depth + 1, is_link
            if not is_link and entry.is_dir(follow_symlinks=False):
                children.append((entry.path, depth + 1))
        stack.extend(reversed(children))


def validate_request(
    request: PermissionRequest, platform: PlatformProfile | None = None
) -> dict[str, Any]:
    """Check a request against the platform without touching the filesystem."""
    prof = platform or profile()
    report: dict[str, Any] = {"valid": True, "errors": [], "warnings": []}

    if isinstance(request, PosixModeRequest):
        if prof.is_windows:
            report["valid"] = False
            report["errors"].append("Mode bits are not supported on Windows")
        if request.mode & 0o002:
            report["warnings"].append("Mode makes the target writable by everyone")
        if request.mode & 0o4000:
            report["warnings"].append("Mode sets the setuid bit")
        if request.mode & 0o2000:
            report["warnings"].append("Mode sets the setgid bit")
    elif isinstance(request, WindowsAttributeRequest):
        if not prof.is_windows:
            report["valid"] = False
            report["errors"].append("Windows attributes are not supported on this platform")
        if request.is_empty:
            report["valid"] = False
            report["errors"].append("Request does not change anything")
        if request.system is not None:
            report["warnings"].append("Changing the system attribute can affect Windows itself")
        if request.deny:
            report["warnings"].append("Deny entries take precedence over every grant")
    else:
        report["valid"] = False
        report["errors"].append(f"Unsupported request type: {type(request).__name__}")

    return report


def permission_recommendations(platform: PlatformProfile | None = None) -> dict[str, Any]:
    """Platform advice for permission changes."""
    prof = platform or profile()
    if prof.is_windows:
        advice = [
            "Use attrib to set file attributes",
            "Be careful when changing ACLs with icacls",
            "Do not remove the read-only attribute from system files",
            "Use takeown to take ownership of files when needed",
        ]
    else:
        advice = [
            "Use chmod to set permissions and avoid 777",
            "Use chown to change owner and group",
            "Use the setuid, setgid and sticky bits sparingly",
            "Symbolic links are not followed by recursive changes",
        ]
    return {"platform": prof.family.value, "recommendations": advice}
