"""Path resolution and confinement.

This module turns caller-supplied path strings into a single canonical,
confinement-checked absolute path. It fails closed: any violation raises,
there is never a best-guess path.
"""

import logging
import os
import re

from warden.exceptions import InvalidArgumentError, NotFoundError, PathDeniedError
from warden.path_guard.config import PathGuardConfig
from warden.path_guard.models import ResolvedPath
from warden.platform_profile import PlatformProfile, profile

logger = logging.getLogger(__name__)

_LONG_PATH_RE = re.compile(r"^[\\/]{2}[?.][\\/]")
_UNC_RE = re.compile(r"^[\\/]{2}[^\\/?.][^\\/]*[\\/]+[^\\/]+")


class PathResolver:
    """Resolve and confine paths for one caller.

    The resolver holds no mutable state; it is reentrant and safe to share.

    Usage:
        resolver = PathResolver(PathGuardConfig(home="/home/alice"))
        resolved = resolver.resolve("notes/todo.txt")
        resolved.absolute_path  # "/home/alice/notes/todo.txt"
    """

    def __init__(
        self,
        config: PathGuardConfig | None = None,
        platform: PlatformProfile | None = None,
    ) -> None:
        self._config = config or PathGuardConfig()
        self._profile = platform or profile()
        self._path = self._profile.pathmod

    @property
    def config(self) -> PathGuardConfig:
        return self._config

    @property
    def platform(self) -> PlatformProfile:
        return self._profile

    @property
    def home(self) -> str:
        """Home directory used as the default confinement root."""
        if self._config.home:
            return self._config.home
        return os.path.expanduser("~")

    def resolve(
        self,
        path: str,
        working_root: str | None = None,
        allow_symlink_escape: bool | None = None,
        must_exist: bool = False,
    ) -> ResolvedPath:
        """Resolve ``path`` and prove it is confined to the active root.

        Args:
            path: Caller-supplied path (relative, absolute, or ``~``-prefixed)
            working_root: Per-call confinement root override
            allow_symlink_escape: Override the configured symlink policy
            must_exist: Raise NotFoundError if the target does not exist

        Returns:
            ResolvedPath whose ``absolute_path`` is the root or a descendant

        Raises:
            InvalidArgumentError: Empty, non-string or NUL-containing input
            PathDeniedError: Any confinement violation
            NotFoundError: ``must_exist`` and the target is missing
        """
        if not isinstance(path, str) or not path.strip():
            raise InvalidArgumentError("Path must be a non-empty string", path=repr(path))
        if "\x00" in path:
            raise InvalidArgumentError("Path contains a NUL byte", path=repr(path))

        if allow_symlink_escape is None:
            allow_symlink_escape = self._config.allow_symlink_escape

        root = self.confinement_root(working_root)
        candidate = self._strip_special_forms(self._expand_home(path), path)
        if not self._path.isabs(candidate):
            candidate = self._path.join(root, candidate)
        normalized = self._path.normpath(candidate)
        self._strip_special_forms(normalized, path)

        if len(normalized) > self._profile.max_path_length:
            raise PathDeniedError(
                f"Path exceeds the maximum length ({self._profile.max_path_length})",
                code="E_PATH_TOO_LONG",
                path=path,
            )

        final = normalized if allow_symlink_escape else self._real(normalized)
        if not self.is_within(final, root):
            if final != normalized and self.is_within(normalized, root):
                logger.warning("Symlink escape blocked: %s -> %s (root %s)", path, final, root)
                raise PathDeniedError(
                    f"Path resolves outside the allowed root through a symbolic link: {path}",
                    code="E_SYMLINK_ESCAPE",
                    path=path,
                )
            logger.info("Path denied: %s (root %s)", path, root)
            raise PathDeniedError(f"Path not allowed: {path}", path=path)

        if must_exist and self._profile.native and not os.path.lexists(final):
            raise NotFoundError(f"Path does not exist: {path}", path=path)

        return ResolvedPath(absolute_path=final, within_root=True, root=root)

    def confinement_root(self, working_root: str | None = None) -> str:
        """Return the canonical confinement root for a call.

        A per-call ``working_root`` must itself lie inside the configured root
        unless ``allow_external_working_root`` is set.
        """
        base = self._canonical_root(self._config.working_root or self.home)
        if not working_root:
            return base

        root = self._canonical_root(working_root)
        if not self._config.allow_external_working_root and not self.is_within(root, base):
            raise PathDeniedError(
                f"Working root is outside the allowed root: {working_root}",
                code="E_PATH_DENIED",
                path=working_root,
            )
        return root

    def is_within(self, path: str, root: str) -> bool:
        """Whether ``path`` equals ``root`` or is a strict descendant of it."""
        # normcase lower-cases on Windows and is the identity on POSIX.
        p = self._path.normcase(path)
        r = self._path.normcase(root)
        if p == r:
            return True
        sep = self._profile.path_separator
        prefix = r if r.endswith(sep) else r + sep
        return p.startswith(prefix)

    def _canonical_root(self, raw: str) -> str:
        if not isinstance(raw, str) or not raw.strip():
            raise InvalidArgumentError("Confinement root must be a non-empty string")
        expanded = self._expand_home(raw)
        if not self._path.isabs(expanded):
            raise InvalidArgumentError(
                f"Confinement root must be an absolute path: {raw}", path=raw
            )
        return self._real(self._path.normpath(expanded))

    def _expand_home(self, text: str) -> str:
        if text == "~":
            return self.home
        if text.startswith("~/") or (self._profile.is_windows and text.startswith("~\\")):
            return self._path.join(self.home, text[2:])
        return text

    def _strip_special_forms(self, text: str, original: str) -> str:
        """Reject or unwrap Windows UNC and long-path forms."""
        if not self._profile.is_windows:
            return text

        if _LONG_PATH_RE.match(text):
            if not self._config.allow_long_path:
                raise PathDeniedError(
                    f"Long-path form is not allowed: {original}",
                    code="E_LONG_PATH_DENIED",
                    path=original,
                )
            inner = text[4:]
            if inner[:4].upper() == "UNC\\":
                inner = "\\\\" + inner[4:]
            text = inner

        if _UNC_RE.match(text) and not self._config.allow_unc:
            raise PathDeniedError(
                f"UNC path is not allowed: {original}",
                code="E_UNC_PATH_DENIED",
                path=original,
            )
        return text

    def _real(self, path: str) -> str:
        # Only the host filesystem can be consulted for links.
        if not self._profile.native:
            return path
        return os.path.realpath(path)
