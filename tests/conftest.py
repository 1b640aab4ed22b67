"""Pytest configuration for all warden tests.

Ensures the project root is on sys.path and provides shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path
_root = Path(__file__).resolve().parents[1]
if _root not in [Path(p) for p in sys.path]:
    sys.path.insert(0, str(_root))

from warden.config import Config  # noqa: E402
from warden.path_guard import PathGuardConfig, PathResolver  # noqa: E402
from warden.platform_profile import PlatformProfile  # noqa: E402
from warden.tools_pkg import ToolContext  # noqa: E402
from warden.watch import ObserverHandleFactory  # noqa: E402


@pytest.fixture
def linux_profile():
    """Non-native Linux profile: pure string resolution, no filesystem lookups."""
    return PlatformProfile.for_system("Linux")


@pytest.fixture
def windows_profile():
    return PlatformProfile.for_system("Windows")


@pytest.fixture
def darwin_profile():
    return PlatformProfile.for_system("Darwin")


@pytest.fixture
def host_profile():
    """The running host, but reported as Linux so native recursion is off."""
    return PlatformProfile.for_system("Linux", native=True)


@pytest.fixture
def sandbox(tmp_path):
    """A real, canonical directory to use as the confinement root."""
    root = tmp_path.resolve() / "sandbox"
    root.mkdir()
    return root


@pytest.fixture
def resolver(sandbox, host_profile):
    return PathResolver(PathGuardConfig(working_root=str(sandbox)), platform=host_profile)


@pytest.fixture
def config(sandbox, tmp_path):
    cfg = Config.from_dict(
        {
            "sandbox": {"working_root": str(sandbox)},
            "commands": {"audit_log_file": str(tmp_path / "audit.log")},
            "watch": {"debounce_ms": 50, "poll_interval_ms": 20, "default_duration_s": 1},
        }
    )
    return cfg


@pytest.fixture
def ctx(config, host_profile):
    return ToolContext.create(
        config,
        platform=host_profile,
        session_id="test-session",
        watch_handle_factory=ObserverHandleFactory(polling=True, poll_interval=0.02),
    )
