"""Tests for the path-checked file, permission and watch tools."""

import asyncio
import json
import os
import sys

import pytest

from warden import outcome
from warden.exceptions import InvalidArgumentError
from warden.permissions import PosixModeRequest, WindowsAttributeRequest
from warden.tools_pkg import (
    build_request,
    ls_execute,
    path_info_execute,
    permissions_get_execute,
    permissions_set_execute,
    read_execute,
    watch_execute,
    write_execute,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX mode bits")


@pytest.mark.asyncio
class TestReadWrite:
    async def test_write_then_read(self, ctx, sandbox):
        result = await write_execute(ctx, "notes/todo.txt", "one\ntwo\nthree")
        assert outcome.status_of(result) is outcome.Status.OK
        assert (sandbox / "notes" / "todo.txt").read_text() == "one\ntwo\nthree"

        result = await read_execute(ctx, "notes/todo.txt", offset=1, limit=1)
        assert "    2| two" in result["output"]
        assert "one" not in result["output"]
        assert result["metadata"]["total_lines"] == 3
        assert result["metadata"]["truncated"] is True
        assert "offset=2" in result["output"]

    async def test_write_outside_root_is_denied(self, ctx, tmp_path):
        result = await write_execute(ctx, "../escape.txt", "x")
        assert result["metadata"]["error"] == "PathDenied"
        assert not (tmp_path / "escape.txt").exists()

    async def test_read_missing(self, ctx):
        result = await read_execute(ctx, "absent.txt")
        assert result["metadata"]["error"] == "NotFound"

    async def test_read_binary(self, ctx, sandbox):
        (sandbox / "blob.bin").write_bytes(b"\x00\x01\x02")
        result = await read_execute(ctx, "blob.bin")
        assert result["metadata"]["error"] == "InvalidArgument"

    async def test_read_negative_offset(self, ctx, sandbox):
        (sandbox / "a.txt").write_text("a")
        result = await read_execute(ctx, "a.txt", offset=-1)
        assert result["metadata"]["error"] == "InvalidArgument"

    async def test_write_requires_string(self, ctx):
        result = await write_execute(ctx, "a.txt", 42)
        assert result["metadata"]["error"] == "InvalidArgument"


@pytest.mark.asyncio
class TestListing:
    async def test_ls(self, ctx, sandbox):
        (sandbox / "dir").mkdir()
        (sandbox / "file.txt").write_text("hello")
        (sandbox / ".hidden").write_text("")

        result = await ls_execute(ctx)

        assert result["output"].splitlines() == ["dir/", "file.txt (5B)"]
        result = await ls_execute(ctx, show_hidden=True)
        assert result["metadata"]["count"] == 3

    async def test_ls_empty(self, ctx):
        result = await ls_execute(ctx, ".")
        assert result["output"] == "(empty directory)"

    async def test_ls_file(self, ctx, sandbox):
        (sandbox / "file.txt").write_text("x")
        result = await ls_execute(ctx, "file.txt")
        assert result["metadata"]["error"] == "InvalidArgument"

    async def test_path_info(self, ctx, sandbox):
        (sandbox / "file.txt").write_text("x")
        result = await path_info_execute(ctx, "file.txt")
        assert f"Resolved: {sandbox / 'file.txt'}" in result["output"]
        assert "Type: file" in result["output"]
        assert result["metadata"]["info"]["exists"] is True

    async def test_path_info_denied(self, ctx):
        result = await path_info_execute(ctx, "../../etc/passwd")
        assert result["metadata"]["error"] == "PathDenied"
        assert result["metadata"]["safety"]["safe"] is False


class TestBuildRequest:
    def test_mode(self):
        assert build_request(mode="750") == PosixModeRequest(0o750)

    def test_windows_flags_and_acl(self):
        request = build_request(readonly=True, grant="Users:RX,alice:F")
        assert isinstance(request, WindowsAttributeRequest)
        assert request.readonly is True
        assert [e.principal for e in request.grant] == ["Users", "alice"]

    def test_both_kinds(self):
        with pytest.raises(InvalidArgumentError):
            build_request(mode="755", hidden=False)

    def test_nothing_requested(self):
        with pytest.raises(InvalidArgumentError):
            build_request()


@posix_only
@pytest.mark.asyncio
class TestPermissionTools:
    async def test_get(self, ctx, sandbox):
        target = sandbox / "script.sh"
        target.write_text("#!/bin/sh\n")
        os.chmod(target, 0o640)

        result = await permissions_get_execute(ctx, "script.sh")

        assert result["metadata"]["permissions"]["octal"] == "640"
        assert "Mode: 640 (rw-r-----)" in result["output"]

    async def test_set_mode(self, ctx, sandbox):
        target = sandbox / "script.sh"
        target.write_text("#!/bin/sh\n")

        result = await permissions_set_execute(ctx, "script.sh", mode="755")

        assert outcome.status_of(result) is outcome.Status.OK
        assert (target.stat().st_mode & 0o777) == 0o755
        assert result["metadata"]["result"]["success"] is True

    async def test_set_recursive_depth_limit(self, ctx, sandbox):
        deep = sandbox / "a" / "b" / "c"
        deep.mkdir(parents=True)
        (deep / "f.txt").write_text("x")

        result = await permissions_set_execute(
            ctx, "a", mode="755", recursive=True, max_depth=1
        )

        assert result["metadata"]["error"] == "LimitReached"

    async def test_windows_request_unsupported(self, ctx, sandbox):
        (sandbox / "f.txt").write_text("x")
        result = await permissions_set_execute(ctx, "f.txt", readonly=True)
        assert result["metadata"]["error"] == "PlatformUnsupported"

    async def test_outside_root(self, ctx):
        result = await permissions_get_execute(ctx, "/")
        assert result["metadata"]["error"] == "PathDenied"


@pytest.mark.asyncio
class TestWatchTool:
    async def test_reports_changes(self, ctx, sandbox):
        async def touch():
            await asyncio.sleep(0.2)
            (sandbox / "new.txt").write_text("x")

        task = asyncio.create_task(touch())
        result = await watch_execute(ctx, ".", duration=0.8, output_format="json")
        await task

        assert outcome.status_of(result) is outcome.Status.OK
        assert result["metadata"]["count"] == 1
        event = result["metadata"]["events"][0]
        assert event["type"] == "create"
        assert event["path"] == str(sandbox / "new.txt")
        assert json.loads(result["output"])["state"] == "stopped"
        assert len(ctx.watches) == 0

    async def test_no_changes(self, ctx, sandbox):
        result = await watch_execute(ctx, ".", duration=0.1)
        assert result["output"] == f"No changes under {sandbox} in 0.1s"

    @pytest.mark.parametrize("duration", [0, -1, "5", 10_000])
    async def test_bad_duration(self, ctx, duration):
        result = await watch_execute(ctx, ".", duration=duration)
        assert result["metadata"]["error"] == "InvalidArgument"

    async def test_bad_events(self, ctx):
        result = await watch_execute(ctx, ".", events="rename", duration=0.1)
        assert result["metadata"]["error"] == "InvalidArgument"

    async def test_missing_directory(self, ctx):
        result = await watch_execute(ctx, "absent", duration=0.1)
        assert result["metadata"]["error"] == "NotFound"
