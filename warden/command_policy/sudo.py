"""Privilege elevation probing and platform security advice."""

import logging
import shutil
from dataclasses import asdict, dataclass
from typing import Any

from warden.platform_profile import PlatformProfile, profile
from warden.subprocess_manager import run_command

logger = logging.getLogger(__name__)

SUDO_CHECK_TIMEOUT = 3.0


@dataclass
class SudoStatus:
    """Whether sudo is present and usable without a password prompt."""

    available: bool = False
    no_password: bool = False
    path: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


async def check_sudo_config(platform: PlatformProfile | None = None) -> SudoStatus:
    """Check sudo on Linux hosts.

    ``sudo -n true`` fails immediately instead of prompting when a password
    would be required, so the check can never block on input.
    """
    prof = platform or profile()
    if not prof.is_linux:
        return SudoStatus(error=f"sudo probing is not supported on {prof.system}")

    sudo = shutil.which("sudo")
    if sudo is None:
        return SudoStatus(error="sudo is not installed")

    status = SudoStatus(available=True, path=sudo)
    try:
        result = await run_command([sudo, "-n", "true"], timeout=SUDO_CHECK_TIMEOUT)
    except OSError as e:
        logger.warning("sudo check failed: %s", e)
        status.error = str(e)
        return status

    status.no_password = result.ok
    if not result.ok:
        status.error = "timed out" if result.timed_out else result.stderr.strip() or None
    logger.debug("sudo check: %s", status)
    return status


_GENERAL_ADVICE = [
    "Avoid commands with system-wide effects",
    "Back up data before running high-risk commands",
    "Apply the principle of least privilege",
]

_PLATFORM_ADVICE = {
    "windows": [
        "Avoid disk tools such as diskpart and format",
        "Be careful with PowerShell Remove-* cmdlets",
        "Do not modify the HKLM registry hive",
        "Give icacls explicit paths and rights",
    ],
    "linux": [
        "Configure sudoers for password-less sudo limited to specific commands",
        "Avoid rm -rf on important directories",
        "Be careful stopping core services with systemctl",
        "Avoid mode 777 with chmod",
    ],
    "darwin": [
        "Be careful with diskutil",
        "Avoid changing permissions of system directories",
        "Mind service dependencies when using launchctl",
    ],
}


def security_recommendations(platform: PlatformProfile | None = None) -> dict[str, Any]:
    """Return general and platform-specific command safety advice."""
    prof = platform or profile()
    return {
        "platform": prof.describe(),
        "general": list(_GENERAL_ADVICE),
        "platform_specific": list(_PLATFORM_ADVICE.get(prof.system, [])),
    }
