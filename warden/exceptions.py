"""Exception hierarchy for Warden.

Every failure the mediation layer reports carries a machine-readable kind so a
calling agent (and its tests) can branch on it deterministically instead of
parsing free text.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine-readable error kinds surfaced to callers."""

    PATH_DENIED = "PathDenied"
    NOT_FOUND = "NotFound"
    INVALID_ARGUMENT = "InvalidArgument"
    DANGEROUS_COMMAND = "DangerousCommand"
    NEEDS_CONFIRMATION = "NeedsConfirmation"
    LIMIT_REACHED = "LimitReached"
    PLATFORM_UNSUPPORTED = "PlatformUnsupported"


class WardenError(Exception):
    """Base exception for all Warden-specific errors.

    Attributes:
        message: The error message.
        code: Machine code such as ``E_PATH_DENIED``.
        session_id: Optional identifier of the caller session.
        context: Arbitrary keyword arguments providing additional error context.

    Example:
        >>> raise PathDeniedError("outside root", path="/etc/passwd")
    """

    kind: ErrorKind | None = None
    default_code: str = "E_WARDEN"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        session_id: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.session_id = session_id
        self.context = context

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        parts = [f"message={self.message!r}", f"code={self.code!r}"]

        if self.session_id:
            parts.append(f"session_id={self.session_id!r}")

        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            parts.append(f"context={{{ctx_str}}}")

        return f"{self.__class__.__name__}({', '.join(parts)})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the metadata shape used by tool outcomes."""
        data: dict[str, Any] = {
            "error": self.kind.value if self.kind else "Error",
            "code": self.code,
            "message": self.message,
        }
        for key, value in self.context.items():
            data.setdefault(key, value if isinstance(value, (str, int, float, bool)) else str(value))
        return data


class WardenConfigError(WardenError):
    """Raised for missing or malformed configuration values."""

    kind = ErrorKind.INVALID_ARGUMENT
    default_code = "E_CONFIG"


class PathDeniedError(WardenError):
    """Raised when a path fails confinement.

    Covers traversal out of the root, symlink escape, oversized paths and
    UNC / long-path forms that were not explicitly allowed.
    """

    kind = ErrorKind.PATH_DENIED
    default_code = "E_PATH_DENIED"


class NotFoundError(WardenError):
    """Raised when a target must exist and does not."""

    kind = ErrorKind.NOT_FOUND
    default_code = "E_NOT_FOUND"


class InvalidArgumentError(WardenError):
    """Raised for malformed request shapes."""

    kind = ErrorKind.INVALID_ARGUMENT
    default_code = "E_INVALID_ARGS"


class DangerousCommandError(WardenError):
    """Raised for deny-tier commands."""

    kind = ErrorKind.DANGEROUS_COMMAND
    default_code = "E_DANGEROUS_CMD"


class ConfirmationRequired(WardenError):  # noqa: N818
    """Raised when a warn-tier command needs an explicit confirmation.

    This is a control flow exception, not an error condition. The caller may
    re-invoke with the confirmation flag set.

    Attributes:
        verdict: The CommandVerdict that triggered the pause.
    """

    kind = ErrorKind.NEEDS_CONFIRMATION
    default_code = "E_NEEDS_CONFIRMATION"

    def __init__(self, message: str, verdict: Any = None, **context: Any) -> None:
        super().__init__(message, **context)
        self.verdict = verdict


class LimitReachedError(WardenError):
    """Raised when a recursive operation exceeds its depth bound."""

    kind = ErrorKind.LIMIT_REACHED
    default_code = "E_LIMIT_REACHED"


class PlatformUnsupportedError(WardenError):
    """Raised when a request has no mapping on the active platform."""

    kind = ErrorKind.PLATFORM_UNSUPPORTED
    default_code = "E_PLATFORM_UNSUPPORTED"
