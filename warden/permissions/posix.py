"""POSIX mode-bit backend."""

import logging
import os
import stat

from warden.permissions.base import PermissionAdapter
from warden.permissions.models import (
    PermissionSnapshot,
    PosixModeRequest,
    SubOperation,
    format_symbolic,
    mode_breakdown,
)

logger = logging.getLogger(__name__)


class PosixPermissionAdapter(PermissionAdapter):
    """chmod-based adapter: one request, one chmod."""

    request_type = PosixModeRequest

    async def snapshot(self, path: str) -> PermissionSnapshot:
        st = os.stat(path)
        mode = stat.S_IMODE(st.st_mode)
        return PermissionSnapshot(
            path=path,
            is_directory=stat.S_ISDIR(st.st_mode),
            readable=os.access(path, os.R_OK),
            writable=os.access(path, os.W_OK),
            executable=os.access(path, os.X_OK),
            mode=mode,
            octal=format(mode, "o").zfill(3),
            symbolic=format_symbolic(mode),
            raw={
                "uid": st.st_uid,
                "gid": st.st_gid,
                "st_mode": st.st_mode,
                **mode_breakdown(mode),
            },
        )

    async def apply(self, path: str, request: PosixModeRequest) -> list[SubOperation]:
        try:
            os.chmod(path, request.mode)
        except OSError as e:
            logger.debug("chmod %s %s failed: %s", request.octal, path, e)
            return [SubOperation("chmod", False, request.octal, e.strerror or str(e))]
        return [SubOperation("chmod", True, request.octal)]
