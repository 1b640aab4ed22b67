"""Core data models for the path guard."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class ResolvedPath:
    """Canonical, confinement-checked absolute path.

    Only ever produced by ``PathResolver.resolve``. Instances can be passed
    straight to ``os`` functions (they implement ``__fspath__``).
    """

    absolute_path: str
    within_root: bool
    root: str

    @property
    def path(self) -> Path:
        return Path(self.absolute_path)

    @property
    def is_root(self) -> bool:
        return self.absolute_path == self.root

    def __fspath__(self) -> str:
        return self.absolute_path

    def __str__(self) -> str:
        return self.absolute_path


@dataclass
class PathSafetyReport:
    """Result of a non-raising path safety check."""

    safe: bool
    normalized_path: str | None = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    code: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "safe": self.safe,
            "normalized_path": self.normalized_path,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "code": self.code,
        }
