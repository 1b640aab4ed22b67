"""Warden - mediation layer between an agent and the local machine.

Paths are confined to a root, commands are classified before they run,
permission changes go through one cross-platform interface and directory
watches emulate recursion where the platform lacks it.
"""

from warden.exceptions import (
    ConfirmationRequired,
    DangerousCommandError,
    ErrorKind,
    InvalidArgumentError,
    LimitReachedError,
    NotFoundError,
    PathDeniedError,
    PlatformUnsupportedError,
    WardenConfigError,
    WardenError,
)
from warden.platform_profile import PlatformProfile, profile

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "PlatformProfile",
    "profile",
    "ErrorKind",
    "WardenError",
    "WardenConfigError",
    "PathDeniedError",
    "NotFoundError",
    "InvalidArgumentError",
    "DangerousCommandError",
    "ConfirmationRequired",
    "LimitReachedError",
    "PlatformUnsupportedError",
]
