"""Tests for caller-visible tool outcomes."""

from warden import outcome
from warden.command_policy import classify
from warden.exceptions import ConfirmationRequired, DangerousCommandError


def test_ok():
    result = outcome.ok("title", "text", count=2)
    assert result == {"title": "title", "output": "text", "metadata": {"status": "ok", "count": 2}}
    assert outcome.status_of(result) is outcome.Status.OK


def test_error_carries_kind_and_code():
    result = outcome.error("rm -rf /", DangerousCommandError("blocked", rule="wipe-root"))
    meta = result["metadata"]
    assert meta["status"] == "error"
    assert meta["error"] == "DangerousCommand"
    assert meta["code"] == "E_DANGEROUS_CMD"
    assert meta["rule"] == "wipe-root"
    assert result["output"] == "Error: blocked"


def test_need_confirm(linux_profile):
    verdict = classify("rm -rf build", platform=linux_profile)
    exc = ConfirmationRequired(verdict.reason, verdict=verdict)

    result = outcome.error("rm -rf build", exc)

    assert outcome.status_of(result) is outcome.Status.NEED_CONFIRM
    assert result["metadata"]["error"] == "NeedsConfirmation"
    assert result["metadata"]["verdict"]["matched_rule"] == "recursive-delete"
    assert "confirmed=true" in result["output"]


def test_status_defaults_to_error():
    assert outcome.status_of({}) is outcome.Status.ERROR
