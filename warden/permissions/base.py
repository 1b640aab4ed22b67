"""Permission adapter interface."""

from abc import ABC, abstractmethod

from warden.permissions.models import PermissionRequest, PermissionSnapshot, SubOperation


class PermissionAdapter(ABC):
    """Platform backend used by PermissionManager.

    Adapters work on plain absolute paths; confinement has already been
    proven by the time they are called.
    """

    request_type: type

    @abstractmethod
    async def snapshot(self, path: str) -> PermissionSnapshot:
        """Read the permissions of ``path``."""
        pass

    @abstractmethod
    async def apply(self, path: str, request: PermissionRequest) -> list[SubOperation]:
        """Apply ``request`` to ``path``.

        Every sub-operation is attempted; failures are reported in the
        returned list rather than raised.
        """
        pass

    def supports(self, request: PermissionRequest) -> bool:
        return isinstance(request, self.request_type)
