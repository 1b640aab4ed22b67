"""Tests for the non-raising path helpers, middleware and config."""

import pytest

from warden.path_guard import (
    PathGuardConfig,
    PathGuardMiddleware,
    PathResolver,
    describe_path,
    validate_path_safety,
)


class MockToolFunc:
    """Mock async tool function."""

    def __init__(self):
        self.called_with = None

    async def __call__(self, **kwargs):
        self.called_with = kwargs
        return {"title": "t", "output": "success", "metadata": {"status": "ok"}}


def test_validate_safe_path_with_parent_segment(linux_profile):
    resolver = PathResolver(PathGuardConfig(home="/home/alice"), platform=linux_profile)
    report = validate_path_safety(resolver, "a/../b.txt")
    assert report.safe
    assert report.normalized_path == "/home/alice/b.txt"
    assert any("parent directory" in w for w in report.warnings)


def test_validate_denied_path_reports_code(linux_profile):
    resolver = PathResolver(PathGuardConfig(home="/home/alice"), platform=linux_profile)
    report = validate_path_safety(resolver, "/etc/shadow")
    assert report.safe is False
    assert report.code == "E_PATH_DENIED"
    assert report.errors


def test_validate_windows_reserved_name(windows_profile):
    resolver = PathResolver(PathGuardConfig(home="C:\\Users\\alice"), platform=windows_profile)
    report = validate_path_safety(resolver, "CON.txt")
    assert report.safe
    assert any("reserved device name" in w for w in report.warnings)


def test_describe_existing_and_missing(resolver, sandbox):
    (sandbox / "data.txt").write_text("hello")
    info = describe_path(resolver.resolve("data.txt"))
    assert info["exists"] is True
    assert info["is_file"] is True
    assert info["size"] == 5
    assert info["relative"] == "data.txt"

    missing = describe_path(resolver.resolve("nope.txt"))
    assert missing["exists"] is False


@pytest.mark.asyncio
class TestPathGuardMiddleware:
    async def test_tool_receives_resolved_path(self, resolver, sandbox):
        tool = MockToolFunc()
        middleware = PathGuardMiddleware(resolver)

        result = await middleware.execute_with_path_check(
            tool, file_path="notes.txt", content="x"
        )

        assert result["output"] == "success"
        assert tool.called_with["resolved"].absolute_path == str(sandbox / "notes.txt")
        assert tool.called_with["content"] == "x"

    async def test_denied_path_never_reaches_tool(self, resolver):
        tool = MockToolFunc()
        middleware = PathGuardMiddleware(resolver)

        result = await middleware.execute_with_path_check(tool, file_path="../../etc/passwd")

        assert tool.called_with is None
        assert result["metadata"]["status"] == "error"
        assert result["metadata"]["error"] == "PathDenied"

    async def test_must_exist(self, resolver):
        tool = MockToolFunc()
        middleware = PathGuardMiddleware(resolver)

        result = await middleware.execute_with_path_check(
            tool, file_path="missing.txt", must_exist=True
        )

        assert tool.called_with is None
        assert result["metadata"]["error"] == "NotFound"


def test_config_round_trip():
    config = PathGuardConfig(home="/home/alice", allow_unc=True)
    restored = PathGuardConfig.from_dict(config.to_dict())
    assert restored == config


def test_config_expands_user(monkeypatch):
    monkeypatch.setenv("HOME", "/home/carol")
    config = PathGuardConfig.from_dict({"working_root": "~/work"})
    assert config.working_root == "/home/carol/work"
