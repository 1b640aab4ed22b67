"""Middleware for path-checked tool execution."""

import logging
from collections.abc import Awaitable
from typing import Any, Callable

from warden import outcome
from warden.exceptions import WardenError
from warden.path_guard.models import ResolvedPath
from warden.path_guard.resolver import PathResolver

logger = logging.getLogger(__name__)


class PathGuardMiddleware:
    """Middleware for path-checked tool execution.

    Resolves the caller's path before the tool runs, so the tool only ever
    sees a ResolvedPath. Guard failures become error outcomes and the tool
    is not called.

    Usage:
        middleware = PathGuardMiddleware(resolver)
        result = await middleware.execute_with_path_check(
            write_tool_func,
            file_path="notes/todo.txt",
            content="hello",
        )
    """

    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver

    async def execute_with_path_check(
        self,
        tool_func: Callable[..., Awaitable[dict[str, Any]]],
        *,
        file_path: str,
        working_root: str | None = None,
        must_exist: bool = False,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Resolve ``file_path`` then execute ``tool_func(resolved=..., **kwargs)``.

        Args:
            tool_func: Async function taking a ``resolved`` keyword
            file_path: Caller-supplied path
            working_root: Optional per-call confinement root
            must_exist: Require the target to exist
            **kwargs: Additional arguments to pass to tool_func

        Returns:
            Result from tool_func, or an error outcome if resolution failed
        """
        try:
            resolved: ResolvedPath = self._resolver.resolve(
                file_path, working_root=working_root, must_exist=must_exist
            )
        except WardenError as e:
            logger.info("Path check failed for %r: %s", file_path, e.code)
            return outcome.error(str(file_path), e)

        return await tool_func(resolved=resolved, **kwargs)
