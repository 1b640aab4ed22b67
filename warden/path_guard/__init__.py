"""Path guard - confinement of caller-supplied paths.

Public API:
    PathResolver: Canonicalizes paths and proves confinement
    ResolvedPath: Value produced by a successful resolution
    PathGuardConfig: Configuration management
    PathGuardMiddleware: Resolve-then-execute wrapper for tools
    validate_path_safety / describe_path: Non-raising inspection helpers
"""

from warden.path_guard.config import PathGuardConfig
from warden.path_guard.inspection import describe_path, validate_path_safety
from warden.path_guard.middleware import PathGuardMiddleware
from warden.path_guard.models import PathSafetyReport, ResolvedPath
from warden.path_guard.resolver import PathResolver

__all__ = [
    "PathResolver",
    "ResolvedPath",
    "PathSafetyReport",
    "PathGuardConfig",
    "PathGuardMiddleware",
    "validate_path_safety",
    "describe_path",
]
