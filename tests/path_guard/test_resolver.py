"""Tests for PathResolver confinement."""

import os
import sys

import pytest

from warden.exceptions import InvalidArgumentError, NotFoundError, PathDeniedError
from warden.path_guard import PathGuardConfig, PathResolver, ResolvedPath


@pytest.fixture
def alice(linux_profile):
    return PathResolver(PathGuardConfig(home="/home/alice"), platform=linux_profile)


@pytest.fixture
def win_alice(windows_profile):
    return PathResolver(PathGuardConfig(home="C:\\Users\\alice"), platform=windows_profile)


class TestPosixResolution:
    def test_relative_path_joins_home(self, alice):
        resolved = alice.resolve("notes/todo.txt")
        assert isinstance(resolved, ResolvedPath)
        assert resolved.absolute_path == "/home/alice/notes/todo.txt"
        assert resolved.within_root is True
        assert resolved.root == "/home/alice"

    def test_tilde_expands_to_home(self, alice):
        assert alice.resolve("~/a/b").absolute_path == "/home/alice/a/b"
        assert alice.resolve("~").absolute_path == "/home/alice"

    def test_root_itself_is_allowed(self, alice):
        resolved = alice.resolve("/home/alice")
        assert resolved.is_root

    def test_dot_segments_are_normalized(self, alice):
        assert alice.resolve("a/./b/../c").absolute_path == "/home/alice/a/c"

    def test_parent_escape_denied(self, alice):
        with pytest.raises(PathDeniedError) as exc_info:
            alice.resolve("../bob/secret")
        assert exc_info.value.code == "E_PATH_DENIED"

    def test_absolute_outside_denied(self, alice):
        with pytest.raises(PathDeniedError):
            alice.resolve("/etc/passwd")

    def test_sibling_with_shared_prefix_denied(self, alice):
        with pytest.raises(PathDeniedError):
            alice.resolve("/home/alice2/file")

    @pytest.mark.parametrize("bad", ["", "   ", None, 42])
    def test_malformed_input(self, alice, bad):
        with pytest.raises(InvalidArgumentError):
            alice.resolve(bad)

    def test_nul_byte_rejected(self, alice):
        with pytest.raises(InvalidArgumentError):
            alice.resolve("a\x00b")

    def test_oversized_path_denied(self, alice):
        with pytest.raises(PathDeniedError) as exc_info:
            alice.resolve("a/" * 3000)
        assert exc_info.value.code == "E_PATH_TOO_LONG"

    def test_working_root_scopes_the_call(self, alice):
        resolved = alice.resolve("src/main.py", working_root="/home/alice/project")
        assert resolved.absolute_path == "/home/alice/project/src/main.py"
        assert resolved.root == "/home/alice/project"

        with pytest.raises(PathDeniedError):
            alice.resolve("../other/file", working_root="/home/alice/project")

    def test_working_root_outside_configured_root_denied(self, alice):
        with pytest.raises(PathDeniedError):
            alice.resolve("x", working_root="/tmp")

    def test_external_working_root_can_be_enabled(self, linux_profile):
        resolver = PathResolver(
            PathGuardConfig(home="/home/alice", allow_external_working_root=True),
            platform=linux_profile,
        )
        assert resolver.resolve("x", working_root="/tmp").absolute_path == "/tmp/x"

    def test_explicit_working_root_overrides_home(self, linux_profile):
        resolver = PathResolver(
            PathGuardConfig(home="/home/alice", working_root="/srv/app"), platform=linux_profile
        )
        assert resolver.confinement_root() == "/srv/app"
        with pytest.raises(PathDeniedError):
            resolver.resolve("/home/alice/file")

    def test_relative_root_rejected(self, linux_profile):
        resolver = PathResolver(PathGuardConfig(working_root="relative/root"), platform=linux_profile)
        with pytest.raises(InvalidArgumentError):
            resolver.resolve("x")

    def test_resolution_is_idempotent(self, alice):
        first = alice.resolve("a/../b/c")
        assert alice.resolve(first.absolute_path) == first


class TestWindowsResolution:
    def test_relative_path(self, win_alice):
        resolved = win_alice.resolve("Documents\\report.docx")
        assert resolved.absolute_path == "C:\\Users\\alice\\Documents\\report.docx"

    def test_forward_slashes_accepted(self, win_alice):
        assert win_alice.resolve("a/b").absolute_path == "C:\\Users\\alice\\a\\b"

    def test_comparison_is_case_insensitive(self, win_alice):
        resolved = win_alice.resolve("c:\\users\\ALICE\\notes.txt")
        assert resolved.within_root

    def test_other_drive_denied(self, win_alice):
        with pytest.raises(PathDeniedError):
            win_alice.resolve("D:\\data\\file.txt")

    def test_unc_denied_by_default(self, win_alice):
        with pytest.raises(PathDeniedError) as exc_info:
            win_alice.resolve("\\\\server\\share\\file.txt")
        assert exc_info.value.code == "E_UNC_PATH_DENIED"

    def test_unc_allowed_still_confined(self, windows_profile):
        resolver = PathResolver(
            PathGuardConfig(home="C:\\Users\\alice", allow_unc=True), platform=windows_profile
        )
        with pytest.raises(PathDeniedError) as exc_info:
            resolver.resolve("\\\\server\\share\\file.txt")
        assert exc_info.value.code == "E_PATH_DENIED"

    def test_long_path_denied_by_default(self, win_alice):
        with pytest.raises(PathDeniedError) as exc_info:
            win_alice.resolve("\\\\?\\C:\\Users\\alice\\file.txt")
        assert exc_info.value.code == "E_LONG_PATH_DENIED"

    def test_long_path_unwrapped_when_allowed(self, windows_profile):
        resolver = PathResolver(
            PathGuardConfig(home="C:\\Users\\alice", allow_long_path=True),
            platform=windows_profile,
        )
        resolved = resolver.resolve("\\\\?\\C:\\Users\\alice\\file.txt")
        assert resolved.absolute_path == "C:\\Users\\alice\\file.txt"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")
class TestNativeFilesystem:
    def test_symlink_escape_denied(self, resolver, sandbox, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("secret")
        os.symlink(outside, sandbox / "link")

        with pytest.raises(PathDeniedError) as exc_info:
            resolver.resolve("link/secret.txt")
        assert exc_info.value.code == "E_SYMLINK_ESCAPE"

    def test_symlink_escape_can_be_allowed_per_call(self, resolver, sandbox, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        os.symlink(outside, sandbox / "link")

        resolved = resolver.resolve("link/file", allow_symlink_escape=True)
        assert resolved.absolute_path == str(sandbox / "link" / "file")

    def test_internal_symlink_resolves_to_target(self, resolver, sandbox):
        (sandbox / "real").mkdir()
        os.symlink(sandbox / "real", sandbox / "alias")
        assert resolver.resolve("alias/x").absolute_path == str(sandbox / "real" / "x")

    def test_must_exist(self, resolver, sandbox):
        (sandbox / "present.txt").write_text("x")
        assert resolver.resolve("present.txt", must_exist=True).path.exists()
        with pytest.raises(NotFoundError):
            resolver.resolve("missing.txt", must_exist=True)

    def test_missing_path_is_still_resolvable(self, resolver, sandbox):
        resolved = resolver.resolve("new/dir/file.txt")
        assert resolved.absolute_path == str(sandbox / "new" / "dir" / "file.txt")
        assert os.fspath(resolved) == resolved.absolute_path
