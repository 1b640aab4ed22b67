"""Tests for the platform capability model."""

import ntpath
import posixpath

from warden.platform_profile import OSFamily, PermissionModel, PlatformProfile, profile


def test_linux_profile_has_no_native_recursive_watch(linux_profile):
    assert linux_profile.family is OSFamily.POSIX
    assert linux_profile.is_linux
    assert linux_profile.supports_native_recursive_watch is False
    assert linux_profile.permission_model is PermissionModel.MODE_BITS
    assert linux_profile.pathmod is posixpath
    assert linux_profile.case_sensitive


def test_darwin_profile_watches_recursively(darwin_profile):
    assert darwin_profile.is_posix
    assert not darwin_profile.is_linux
    assert darwin_profile.supports_native_recursive_watch is True


def test_windows_profile(windows_profile):
    assert windows_profile.is_windows
    assert windows_profile.path_separator == "\\"
    assert windows_profile.case_sensitive is False
    assert windows_profile.permission_model is PermissionModel.ACL_ATTRIBUTES
    assert windows_profile.pathmod is ntpath
    assert windows_profile.supports_native_recursive_watch is True


def test_system_name_is_case_insensitive():
    assert PlatformProfile.for_system("WINDOWS").is_windows
    assert PlatformProfile.for_system("win32").is_windows
    assert PlatformProfile.for_system("FreeBSD").system == "freebsd"


def test_shell_argv(linux_profile, windows_profile):
    assert linux_profile.shell.argv("echo hi") == ["/bin/bash", "-c", "echo hi"]
    assert windows_profile.shell.argv("dir") == ["cmd.exe", "/c", "dir"]


def test_host_profile_is_cached_and_native():
    first = profile()
    assert first is profile()
    assert first.native is True


def test_describe_is_json_friendly(windows_profile):
    info = windows_profile.describe()
    assert info["family"] == "windows"
    assert info["permission_model"] == "acl-attributes"
    assert info["shell"] == "cmd"
