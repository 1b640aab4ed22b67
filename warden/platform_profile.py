"""Platform capability model.

Every platform-dependent decision in Warden (path flavour, permission model,
watch strategy, shell convention) is read from one ``PlatformProfile`` so the
components cannot drift apart.

Usage:
    from warden.platform_profile import profile

    prof = profile()
    if prof.supports_native_recursive_watch:
        ...
"""

import ntpath
import os
import platform
import posixpath
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from types import ModuleType


class OSFamily(str, Enum):
    """Operating system families."""

    POSIX = "posix"
    WINDOWS = "windows"


class PermissionModel(str, Enum):
    """How file permissions are expressed on a platform."""

    MODE_BITS = "mode-bits"
    ACL_ATTRIBUTES = "acl-attributes"


@dataclass(frozen=True)
class ShellConvention:
    """How a command string is handed to the platform shell."""

    shell: str
    alternative_shell: str
    executable: str
    args: tuple[str, ...]

    def argv(self, command: str) -> list[str]:
        """Build the argv that runs ``command`` through this shell."""
        return [self.executable, *self.args, command]


POSIX_SHELL = ShellConvention(
    shell="bash", alternative_shell="sh", executable="/bin/bash", args=("-c",)
)
WINDOWS_SHELL = ShellConvention(
    shell="cmd", alternative_shell="powershell", executable="cmd.exe", args=("/c",)
)


@dataclass(frozen=True)
class PlatformProfile:
    """Immutable description of the platform Warden runs on.

    Attributes:
        family: POSIX-like or Windows-like
        system: Lower-case OS name (linux, darwin, windows, ...)
        path_separator: Primary path separator
        max_path_length: Longest path accepted by the resolver
        case_sensitive: Whether path comparison is case-sensitive
        supports_native_recursive_watch: One registration can watch a subtree
        permission_model: Mode bits or ACL/attributes
        shell: Shell invocation convention
        native: True when the profile describes the running host
    """

    family: OSFamily
    system: str
    path_separator: str
    max_path_length: int
    case_sensitive: bool
    supports_native_recursive_watch: bool
    permission_model: PermissionModel
    shell: ShellConvention
    native: bool = False

    @property
    def is_windows(self) -> bool:
        return self.family is OSFamily.WINDOWS

    @property
    def is_posix(self) -> bool:
        return self.family is OSFamily.POSIX

    @property
    def is_linux(self) -> bool:
        return self.system == "linux"

    @property
    def pathmod(self) -> ModuleType:
        """The ``os.path`` flavour matching this profile."""
        return ntpath if self.is_windows else posixpath

    @classmethod
    def for_system(cls, system: str, native: bool = False) -> "PlatformProfile":
        """Build the profile for a named operating system.

        Args:
            system: OS name as reported by ``platform.system()`` (any case)
            native: Whether this profile describes the running host

        Returns:
            PlatformProfile for that system
        """
        name = system.lower()
        if name.startswith("win"):
            return cls(
                family=OSFamily.WINDOWS,
                system="windows",
                path_separator="\\",
                max_path_length=32767,
                case_sensitive=False,
                supports_native_recursive_watch=True,
                permission_model=PermissionModel.ACL_ATTRIBUTES,
                shell=WINDOWS_SHELL,
                native=native,
            )
        return cls(
            family=OSFamily.POSIX,
            system=name or "unknown",
            path_separator="/",
            max_path_length=4096,
            case_sensitive=True,
            # macOS (FSEvents) watches subtrees natively; Linux inotify does not.
            supports_native_recursive_watch=name == "darwin",
            permission_model=PermissionModel.MODE_BITS,
            shell=POSIX_SHELL,
            native=native,
        )

    def describe(self) -> dict[str, object]:
        """Return a JSON-friendly summary of the profile."""
        return {
            "family": self.family.value,
            "system": self.system,
            "path_separator": self.path_separator,
            "max_path_length": self.max_path_length,
            "case_sensitive": self.case_sensitive,
            "supports_native_recursive_watch": self.supports_native_recursive_watch,
            "permission_model": self.permission_model.value,
            "shell": self.shell.shell,
            "architecture": platform.machine(),
        }


def _host_system() -> str:
    if os.name == "nt":
        return "windows"
    return platform.system()


@lru_cache(maxsize=1)
def profile() -> PlatformProfile:
    """Return the PlatformProfile of the running host.

    Computed once per process; later calls return the same instance.
    """
    return PlatformProfile.for_system(_host_system(), native=True)
