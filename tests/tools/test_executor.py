"""Tests for tool dispatch by name."""

import pytest

from warden import outcome
from warden.tools_pkg import TOOL_ALIASES, execute_tool, get_tool_schemas
from warden.tools_pkg.executor import TOOL_FUNCS
from warden.tools_pkg.registry import TOOLS


def test_every_registered_tool_is_dispatchable():
    assert set(TOOLS) == set(TOOL_FUNCS)
    assert set(TOOL_ALIASES.values()) <= set(TOOLS)


def test_schemas():
    schemas = get_tool_schemas()
    names = [s["function"]["name"] for s in schemas]
    assert names[0] == "shell"
    assert "permissions_set" in names

    shell = schemas[0]["function"]
    assert shell["parameters"]["required"] == ["command"]
    assert "confirmed" in shell["parameters"]["properties"]


def test_schemas_exclude():
    names = [s["function"]["name"] for s in get_tool_schemas({"shell", "write"})]
    assert "shell" not in names
    assert "write" not in names
    assert "read" in names


@pytest.mark.asyncio
class TestExecuteTool:
    async def test_dispatch(self, ctx, sandbox):
        result = await execute_tool(ctx, "write", {"file_path": "a.txt", "content": "hi"})
        assert outcome.status_of(result) is outcome.Status.OK
        assert (sandbox / "a.txt").read_text() == "hi"

    async def test_alias(self, ctx, sandbox, caplog):
        (sandbox / "a.txt").write_text("hello")
        result = await execute_tool(ctx, "read_file", {"file_path": "a.txt"})
        assert "hello" in result["output"]
        assert "Canonicalized tool alias 'read_file' to 'read'" in caplog.text

    async def test_unknown_tool(self, ctx):
        result = await execute_tool(ctx, "format_disk", {})
        assert result["metadata"]["error"] == "InvalidArgument"
        assert "Unknown tool" in result["output"]

    async def test_unknown_argument(self, ctx):
        result = await execute_tool(ctx, "ls", {"path": ".", "colour": True})
        assert result["metadata"]["error"] == "InvalidArgument"
        assert "colour" in result["output"]

    async def test_missing_argument(self, ctx):
        result = await execute_tool(ctx, "write", {"file_path": "a.txt"})
        assert result["metadata"]["error"] == "InvalidArgument"
        assert "content" in result["output"]

    async def test_shell_confirmation_through_dispatch(self, ctx):
        result = await execute_tool(ctx, "bash", {"command": "sudo ls"})
        assert outcome.status_of(result) is outcome.Status.NEED_CONFIRM
        assert result["metadata"]["verdict"]["matched_rule"] == "privilege-elevation"

    async def test_denied_shell_through_dispatch(self, ctx):
        result = await execute_tool(ctx, "shell", {"command": "mkfs.ext4 /dev/sda1"})
        assert result["metadata"]["error"] == "DangerousCommand"
