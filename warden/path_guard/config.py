"""Configuration management for the path guard."""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from warden.path_guard.resolver import PathResolver
    from warden.platform_profile import PlatformProfile


@dataclass
class PathGuardConfig:
    """Configuration for path confinement.

    Attributes:
        home: Caller home directory (default confinement root). ``None`` means
            the process user's home directory.
        working_root: Explicit default confinement root; overrides ``home``
        allow_symlink_escape: Check confinement against the apparent path
            instead of the real one (dangerous)
        allow_unc: Accept Windows ``\\\\server\\share`` paths
        allow_long_path: Accept Windows ``\\\\?\\`` paths
        allow_external_working_root: Accept per-call working roots that lie
            outside the configured root
    """

    home: str | None = None
    working_root: str | None = None
    allow_symlink_escape: bool = False
    allow_unc: bool = False
    allow_long_path: bool = False
    allow_external_working_root: bool = False

    def create_resolver(self, platform: "PlatformProfile | None" = None) -> "PathResolver":
        """Create a PathResolver from this configuration.

        Args:
            platform: Profile to resolve for; defaults to the host profile

        Returns:
            PathResolver configured with this config
        """
        from warden.path_guard.resolver import PathResolver

        return PathResolver(self, platform=platform)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PathGuardConfig":
        """Create config from dictionary (for YAML loading).

        Args:
            data: Dictionary with the ``sandbox`` section keys

        Returns:
            PathGuardConfig instance
        """
        home = data.get("home")
        working_root = data.get("working_root")

        return cls(
            home=str(Path(home).expanduser()) if home else None,
            working_root=str(Path(working_root).expanduser()) if working_root else None,
            allow_symlink_escape=bool(data.get("allow_symlink_escape", False)),
            allow_unc=bool(data.get("allow_unc", False)),
            allow_long_path=bool(data.get("allow_long_path", False)),
            allow_external_working_root=bool(data.get("allow_external_working_root", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (for YAML serialization)."""
        return {
            "home": self.home,
            "working_root": self.working_root,
            "allow_symlink_escape": self.allow_symlink_escape,
            "allow_unc": self.allow_unc,
            "allow_long_path": self.allow_long_path,
            "allow_external_working_root": self.allow_external_working_root,
        }
