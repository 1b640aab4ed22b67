"""Data models for permission inspection and mutation."""

import re
from dataclasses import asdict, dataclass, field
from typing import Any

from warden.exceptions import InvalidArgumentError

MAX_MODE = 0o7777

_OCTAL_RE = re.compile(r"^(?:0o?)?([0-7]{1,4})$", re.IGNORECASE)


@dataclass(frozen=True)
class PosixModeRequest:
    """Set POSIX mode bits (permission bits plus setuid/setgid/sticky)."""

    mode: int

    def __post_init__(self) -> None:
        if isinstance(self.mode, bool) or not isinstance(self.mode, int):
            raise InvalidArgumentError(f"Mode must be an integer, got {self.mode!r}")
        if not 0 <= self.mode <= MAX_MODE:
            raise InvalidArgumentError(f"Mode out of range: {self.mode:o}", mode=self.mode)

    @classmethod
    def parse(cls, value: int | str) -> "PosixModeRequest":
        """Build a request from an int or an octal string (``"755"``, ``"0o755"``)."""
        if isinstance(value, str):
            match = _OCTAL_RE.match(value.strip())
            if not match:
                raise InvalidArgumentError(f"Invalid octal mode: {value!r}", mode=value)
            return cls(int(match.group(1), 8))
        return cls(value)

    @property
    def octal(self) -> str:
        return format(self.mode, "o").zfill(3)


@dataclass(frozen=True)
class AclEntry:
    """One ACL grant or deny: a principal and an icacls rights string."""

    principal: str
    rights: str

    def __post_init__(self) -> None:
        if not self.principal.strip() or not self.rights.strip():
            raise InvalidArgumentError("ACL entries need a principal and rights")

    @classmethod
    def parse(cls, spec: str) -> "AclEntry":
        """Parse ``"principal:rights"``, e.g. ``"Users:(R)"`` or ``"alice:RX"``."""
        principal, sep, rights = spec.rpartition(":")
        if not sep:
            raise InvalidArgumentError(f"ACL entry must be 'principal:rights': {spec!r}")
        return cls(principal.strip(), rights.strip())

    def spec(self) -> str:
        return f"{self.principal}:{self.rights}"


@dataclass(frozen=True)
class WindowsAttributeRequest:
    """Set Windows attribute flags and/or ACL entries.

    Flags left as None are not touched.
    """

    readonly: bool | None = None
    hidden: bool | None = None
    system: bool | None = None
    grant: tuple[AclEntry, ...] = ()
    deny: tuple[AclEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return (
            self.readonly is None
            and self.hidden is None
            and self.system is None
            and not self.grant
            and not self.deny
        )

    def flags(self) -> list[tuple[str, bool]]:
        """Attribute flags that are set, in a stable order."""
        pairs = [("readonly", self.readonly), ("hidden", self.hidden), ("system", self.system)]
        return [(name, value) for name, value in pairs if value is not None]


PermissionRequest = PosixModeRequest | WindowsAttributeRequest


def map_mode_to_windows(mode: int | str) -> WindowsAttributeRequest:
    """Explicitly convert a POSIX mode to the closest Windows request.

    Only the owner write bit carries over: clear means read-only.
    """
    request = PosixModeRequest.parse(mode)
    return WindowsAttributeRequest(readonly=not request.mode & 0o200)


def format_symbolic(mode: int) -> str:
    """Render mode bits as ``rwxr-xr-x`` including special bits."""

    def triad(read: int, write: int, execute: int, special: int, letter: str) -> str:
        x = mode & execute
        s = mode & special
        return (
            ("r" if mode & read else "-")
            + ("w" if mode & write else "-")
            + (letter if x and s else letter.upper() if s else "x" if x else "-")
        )

    return (
        triad(0o400, 0o200, 0o100, 0o4000, "s")
        + triad(0o040, 0o020, 0o010, 0o2000, "s")
        + triad(0o004, 0o002, 0o001, 0o1000, "t")
    )


def mode_breakdown(mode: int) -> dict[str, dict[str, bool]]:
    """Split mode bits into owner/group/others and special-bit flags."""

    def klass(shift: int) -> dict[str, bool]:
        return {
            "read": bool(mode & (0o4 << shift)),
            "write": bool(mode & (0o2 << shift)),
            "execute": bool(mode & (0o1 << shift)),
        }

    return {
        "owner": klass(6),
        "group": klass(3),
        "others": klass(0),
        "special": {
            "setuid": bool(mode & 0o4000),
            "setgid": bool(mode & 0o2000),
            "sticky": bool(mode & 0o1000),
        },
    }


@dataclass
class PermissionSnapshot:
    """Normalized, platform-neutral view of a path's permissions.

    Attributes:
        path: Absolute path inspected
        is_directory: Whether the path is a directory
        readable / writable / executable: Effective access for the caller
        mode: Permission bits (POSIX) or the st_mode reported on Windows
        octal / symbolic: Mode renderings, POSIX only
        attributes: Windows attribute flags (readonly, hidden, system, archive)
        acl: Windows ACL, principal -> rights
        raw: Platform-specific fields for diagnostics
    """

    path: str
    is_directory: bool
    readable: bool
    writable: bool
    executable: bool
    mode: int | None = None
    octal: str | None = None
    symbolic: str | None = None
    attributes: dict[str, bool] = field(default_factory=dict)
    acl: dict[str, list[str]] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SubOperation:
    """One attempted platform call (a chmod, an attrib flag, an icacls entry)."""

    operation: str
    success: bool
    value: Any = None
    error: str | None = None


@dataclass
class PathMutation:
    """Everything attempted on a single path."""

    path: str
    depth: int = 0
    operations: list[SubOperation] = field(default_factory=list)
    skipped: bool = False
    reason: str | None = None

    @property
    def success(self) -> bool:
        return not self.skipped and all(op.success for op in self.operations)

    @property
    def first_error(self) -> str | None:
        for op in self.operations:
            if not op.success:
                return op.error or f"{op.operation} failed"
        return None


@dataclass
class MutationResult:
    """Per-path outcome of a (possibly recursive) permission change."""

    root: str
    recursive: bool = False
    max_depth: int | None = None
    items: list[PathMutation] = field(default_factory=list)
    aborted: bool = False
    error: str | None = None

    @property
    def changed(self) -> list[PathMutation]:
        return [item for item in self.items if item.success]

    @property
    def failed(self) -> list[PathMutation]:
        return [item for item in self.items if not item.skipped and not item.success]

    @property
    def skipped(self) -> list[PathMutation]:
        return [item for item in self.items if item.skipped]

    @property
    def success(self) -> bool:
        return not self.aborted and not self.failed

    def summary(self) -> str:
        text = (
            f"{len(self.changed)} changed, {len(self.failed)} failed, "
            f"{len(self.skipped)} skipped"
        )
        if self.aborted:
            text += f" (aborted: {self.error})"
        return text

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["success"] = self.success
        return data
