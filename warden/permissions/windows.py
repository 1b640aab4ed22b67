"""Windows attribute and ACL backend (attrib / icacls)."""

import logging
import os
import re
import stat
from collections.abc import Awaitable, Callable, Sequence

from warden.permissions.base import PermissionAdapter
from warden.permissions.models import (
    AclEntry,
    PermissionSnapshot,
    SubOperation,
    WindowsAttributeRequest,
)
from warden.subprocess_manager import CompletedCommand, run_command

logger = logging.getLogger(__name__)

CommandRunner = Callable[[Sequence[str]], Awaitable[CompletedCommand]]

COMMAND_TIMEOUT = 30.0

_ATTRIB_FLAGS = {"readonly": "R", "hidden": "H", "system": "S"}
_ATTRIB_TOKEN = re.compile(r"^[ARHSIOXVPUBL]+$")
_ACL_ENTRY = re.compile(r"^(?P<principal>[^:]+?):(?P<rights>(?:\([^)]*\))+)\s*$")
_ACL_RIGHT = re.compile(r"\(([^)]*)\)")


async def _default_runner(argv: Sequence[str]) -> CompletedCommand:
    return await run_command(argv, timeout=COMMAND_TIMEOUT)


def parse_attrib_output(output: str) -> dict[str, bool]:
    """Parse the first line of ``attrib <path>`` output.

    attrib prints the attribute letters in fixed columns before the path, so
    only tokens preceding the first path-like token are read.

    Raises:
        ValueError: The output does not look like an attrib listing
    """
    line = next((ln for ln in output.splitlines() if ln.strip()), "")
    letters = ""
    for token in line.split():
        if ":" in token or "\\" in token or "/" in token:
            break
        if not _ATTRIB_TOKEN.match(token):
            raise ValueError(f"Unexpected attrib output: {line!r}")
        letters += token
    else:
        raise ValueError(f"Unexpected attrib output: {line!r}")

    return {
        "readonly": "R" in letters,
        "hidden": "H" in letters,
        "system": "S" in letters,
        "archive": "A" in letters,
    }


def parse_icacls_output(output: str, path: str) -> dict[str, list[str]]:
    """Parse ``icacls <path>`` output into principal -> rights.

    The first entry shares its line with the path; the trailing summary line
    is ignored. Lines that do not look like entries are skipped.
    """
    acl: dict[str, list[str]] = {}
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line or line.lower().startswith(("successfully processed", "failed processing")):
            continue
        if line.lower().startswith(path.lower()):
            line = line[len(path):].strip()
        match = _ACL_ENTRY.match(line)
        if not match:
            continue
        acl.setdefault(match.group("principal").strip(), []).extend(
            _ACL_RIGHT.findall(match.group("rights"))
        )
    return acl


class WindowsPermissionAdapter(PermissionAdapter):
    """attrib / icacls adapter.

    Each attribute flag becomes one ``attrib`` call and each ACL entry one
    ``icacls`` call. The runner is injectable so the adapter can be driven
    without a Windows host.
    """

    request_type = WindowsAttributeRequest

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or _default_runner

    async def snapshot(self, path: str) -> PermissionSnapshot:
        st = os.stat(path)
        attributes = {
            "readonly": not st.st_mode & stat.S_IWRITE,
            "hidden": False,
            "system": False,
            "archive": False,
        }
        raw: dict[str, object] = {"st_mode": st.st_mode}

        attrib = await self._run(["attrib", path])
        if attrib is not None:
            try:
                attributes.update(parse_attrib_output(attrib.stdout))
            except ValueError as e:
                logger.warning("Could not parse attrib output for %s: %s", path, e)
                raw["attrib_error"] = str(e)
            raw["attrib"] = attrib.stdout

        acl: dict[str, list[str]] = {}
        icacls = await self._run(["icacls", path])
        if icacls is not None:
            acl = parse_icacls_output(icacls.stdout, path)
            if not acl:
                logger.warning("No ACL entries parsed for %s", path)
            raw["icacls"] = icacls.stdout

        return PermissionSnapshot(
            path=path,
            is_directory=stat.S_ISDIR(st.st_mode),
            readable=True,
            writable=not attributes["readonly"],
            executable=False,
            mode=st.st_mode,
            attributes=attributes,
            acl=acl,
            raw=raw,
        )

    async def apply(self, path: str, request: WindowsAttributeRequest) -> list[SubOperation]:
        operations: list[SubOperation] = []

        for name, value in request.flags():
            flag = ("+" if value else "-") + _ATTRIB_FLAGS[name]
            operations.append(await self._attempt(name, value, ["attrib", flag, path]))

        for entry in request.grant:
            operations.append(await self._acl("acl_grant", "/grant", entry, path))
        for entry in request.deny:
            operations.append(await self._acl("acl_deny", "/deny", entry, path))

        return operations

    async def _acl(self, operation: str, switch: str, entry: AclEntry, path: str) -> SubOperation:
        return await self._attempt(operation, entry.spec(), ["icacls", path, switch, entry.spec()])

    async def _attempt(self, operation: str, value: object, argv: list[str]) -> SubOperation:
        try:
            result = await self._runner(argv)
        except OSError as e:
            return SubOperation(operation, False, value, str(e))
        if result.ok:
            return SubOperation(operation, True, value)
        message = (result.stderr or result.stdout).strip() or f"exit code {result.returncode}"
        if result.timed_out:
            message = "timed out"
        return SubOperation(operation, False, value, message)

    async def _run(self, argv: list[str]) -> CompletedCommand | None:
        try:
            result = await self._runner(argv)
        except OSError as e:
            logger.warning("%s failed: %s", argv[0], e)
            return None
        if not result.ok:
            logger.warning("%s exited with %s: %s", argv[0], result.returncode, result.stderr.strip())
            return None
        return result
