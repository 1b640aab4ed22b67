"""Caller-visible tool outcomes.

Every tool returns the same dictionary shape::

    {
        "title": "shell: rm -rf build",
        "output": "human readable text",
        "metadata": {"status": "ok" | "need_confirm" | "error", ...},
    }

Error outcomes also carry ``metadata["error"]`` (an ErrorKind value) and
``metadata["code"]`` so a calling agent can decide to retry with confirmation
without parsing ``output``.
"""

from enum import Enum
from typing import Any

from warden.exceptions import ConfirmationRequired, WardenError


class Status(str, Enum):
    """Outcome status of a tool call."""

    OK = "ok"
    NEED_CONFIRM = "need_confirm"
    ERROR = "error"


def ok(title: str, output: str, **metadata: Any) -> dict[str, Any]:
    """Build a successful outcome."""
    return {
        "title": title,
        "output": output,
        "metadata": {"status": Status.OK.value, **metadata},
    }


def need_confirm(title: str, exc: ConfirmationRequired, **metadata: Any) -> dict[str, Any]:
    """Build a paused outcome for a warn-tier command awaiting confirmation."""
    verdict = exc.verdict
    data: dict[str, Any] = {
        "status": Status.NEED_CONFIRM.value,
        "error": exc.kind.value,
        "code": exc.code,
    }
    if verdict is not None:
        data["verdict"] = verdict.to_dict()
    data.update(metadata)
    return {
        "title": title,
        "output": (
            f"Confirmation required: {exc.message}. "
            "Re-run with confirmed=true to execute this command once."
        ),
        "metadata": data,
    }


def error(title: str, exc: WardenError, **metadata: Any) -> dict[str, Any]:
    """Build an error outcome from a WardenError."""
    if isinstance(exc, ConfirmationRequired):
        return need_confirm(title, exc, **metadata)
    data = {"status": Status.ERROR.value, **exc.to_dict(), **metadata}
    return {"title": title, "output": f"Error: {exc.message}", "metadata": data}


def status_of(result: dict[str, Any]) -> Status:
    """Read the status of an outcome dictionary."""
    return Status(result.get("metadata", {}).get("status", Status.ERROR.value))
