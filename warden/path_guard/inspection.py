"""Non-raising path checks and path descriptions."""

import os
import re
import stat
from typing import Any

from warden.exceptions import WardenError
from warden.path_guard.models import PathSafetyReport, ResolvedPath
from warden.path_guard.resolver import PathResolver

_WINDOWS_INVALID_CHARS = re.compile(r'[<>:"|?*]')
_WINDOWS_RESERVED_NAMES = re.compile(r"^(CON|PRN|AUX|NUL|COM[1-9]|LPT[1-9])$", re.IGNORECASE)


def validate_path_safety(resolver: PathResolver, path: str, **resolve_kwargs: Any) -> PathSafetyReport:
    """Check a path without raising.

    Args:
        resolver: Resolver for the active caller
        path: Caller-supplied path
        **resolve_kwargs: Forwarded to ``PathResolver.resolve``

    Returns:
        PathSafetyReport with the normalized path, warnings and errors
    """
    report = PathSafetyReport(safe=True)

    try:
        resolved = resolver.resolve(path, **resolve_kwargs)
        report.normalized_path = resolved.absolute_path
    except WardenError as e:
        report.safe = False
        report.errors.append(e.message)
        report.code = e.code
        return report

    pathmod = resolver.platform.pathmod
    if resolver.platform.is_windows:
        base = pathmod.basename(path)
        if _WINDOWS_INVALID_CHARS.search(base):
            report.warnings.append("Path contains characters reserved on Windows")
        stem = pathmod.splitext(base)[0]
        if _WINDOWS_RESERVED_NAMES.match(stem):
            report.warnings.append("Path uses a Windows reserved device name")

    segments = re.split(r"[\\/]", path)
    if ".." in segments:
        report.warnings.append("Path contains parent directory segments")

    return report


def describe_path(resolved: ResolvedPath) -> dict[str, Any]:
    """Describe the filesystem object behind a resolved path."""
    info: dict[str, Any] = {
        "path": resolved.absolute_path,
        "root": resolved.root,
        "relative": os.path.relpath(resolved.absolute_path, resolved.root),
        "hidden": os.path.basename(resolved.absolute_path).startswith("."),
        "exists": False,
    }

    try:
        st = os.lstat(resolved)
    except FileNotFoundError:
        return info

    info.update(
        exists=True,
        is_file=stat.S_ISREG(st.st_mode),
        is_directory=stat.S_ISDIR(st.st_mode),
        is_symlink=stat.S_ISLNK(st.st_mode),
        size=st.st_size,
        modified=st.st_mtime,
    )
    return info
