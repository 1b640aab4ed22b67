"""Permissions - one mutation interface over POSIX modes and Windows ACLs.

Public API:
    PermissionManager: get / set on ResolvedPath targets
    PosixModeRequest, WindowsAttributeRequest, AclEntry: Requests
    PermissionSnapshot, MutationResult, PathMutation, SubOperation: Results
    map_mode_to_windows: Explicit POSIX -> Windows conversion
    validate_request / permission_recommendations: Advisory helpers
"""

from warden.permissions.manager import (
    PermissionManager,
    permission_recommendations,
    validate_request,
)
from warden.permissions.models import (
    AclEntry,
    MutationResult,
    PathMutation,
    PermissionRequest,
    PermissionSnapshot,
    PosixModeRequest,
    SubOperation,
    WindowsAttributeRequest,
    format_symbolic,
    map_mode_to_windows,
)

__all__ = [
    "PermissionManager",
    "permission_recommendations",
    "validate_request",
    "AclEntry",
    "MutationResult",
    "PathMutation",
    "PermissionRequest",
    "PermissionSnapshot",
    "PosixModeRequest",
    "SubOperation",
    "WindowsAttributeRequest",
    "format_symbolic",
    "map_mode_to_windows",
]
