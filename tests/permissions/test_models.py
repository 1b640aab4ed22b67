"""Tests for permission request and result models."""

import pytest

from warden.exceptions import InvalidArgumentError
from warden.permissions import (
    AclEntry,
    MutationResult,
    PathMutation,
    PosixModeRequest,
    SubOperation,
    WindowsAttributeRequest,
    format_symbolic,
    map_mode_to_windows,
)


@pytest.mark.parametrize("value", ["755", "0755", "0o755", "0O755", 0o755])
def test_mode_parse(value):
    request = PosixModeRequest.parse(value)
    assert request.mode == 0o755
    assert request.octal == "755"


@pytest.mark.parametrize("value", ["899", "abc", "", "77777", 0o17777, -1, True, 7.5])
def test_mode_parse_rejects(value):
    with pytest.raises(InvalidArgumentError):
        PosixModeRequest.parse(value)


def test_special_bits_are_accepted():
    assert PosixModeRequest.parse("4755").octal == "4755"


def test_acl_entry_parse():
    entry = AclEntry.parse("DOMAIN\\bob:(OI)(CI)RX")
    assert entry.principal == "DOMAIN\\bob"
    assert entry.rights == "(OI)(CI)RX"
    assert entry.spec() == "DOMAIN\\bob:(OI)(CI)RX"

    with pytest.raises(InvalidArgumentError):
        AclEntry.parse("no-separator")
    with pytest.raises(InvalidArgumentError):
        AclEntry.parse("Users:")


def test_windows_request_flags():
    request = WindowsAttributeRequest(readonly=True, hidden=False)
    assert request.flags() == [("readonly", True), ("hidden", False)]
    assert not request.is_empty
    assert WindowsAttributeRequest().is_empty


def test_map_mode_to_windows():
    assert map_mode_to_windows(0o444).readonly is True
    assert map_mode_to_windows("644").readonly is False


@pytest.mark.parametrize(
    "mode, expected",
    [
        (0o755, "rwxr-xr-x"),
        (0o640, "rw-r-----"),
        (0o4755, "rwsr-xr-x"),
        (0o2644, "rw-r-Sr--"),
        (0o1777, "rwxrwxrwt"),
    ],
)
def test_format_symbolic(mode, expected):
    assert format_symbolic(mode) == expected


def test_mutation_result_accounting():
    result = MutationResult(root="/r", recursive=True, max_depth=2)
    result.items = [
        PathMutation("/r", 0, [SubOperation("chmod", True, "755")]),
        PathMutation("/r/a", 1, [SubOperation("chmod", False, "755", "Operation not permitted")]),
        PathMutation("/r/l", 1, skipped=True, reason="symbolic link not followed"),
    ]
    assert [m.path for m in result.changed] == ["/r"]
    assert [m.path for m in result.failed] == ["/r/a"]
    assert [m.path for m in result.skipped] == ["/r/l"]
    assert result.success is False
    assert result.failed[0].first_error == "Operation not permitted"
    assert result.summary() == "1 changed, 1 failed, 1 skipped"
    assert result.to_dict()["success"] is False
