"""Explicit collection of live watch sessions."""

import logging
import uuid

from warden.exceptions import NotFoundError
from warden.watch.session import WatchSession

logger = logging.getLogger(__name__)


class WatchRegistry:
    """Live watch sessions owned by one tool context.

    Passed by reference to whoever needs it; there is no module-level
    registry.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, WatchSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, watch_id: str) -> bool:
        return watch_id in self._sessions

    def add(self, session: WatchSession) -> str:
        watch_id = str(uuid.uuid4())[:8]
        self._sessions[watch_id] = session
        return watch_id

    def get(self, watch_id: str) -> WatchSession:
        try:
            return self._sessions[watch_id]
        except KeyError:
            raise NotFoundError(f"No watch session {watch_id!r}", watch_id=watch_id) from None

    def describe(self) -> dict[str, dict[str, object]]:
        return {
            watch_id: {"root": s.root, "state": s.state.value, "handles": len(s.active_handles)}
            for watch_id, s in self._sessions.items()
        }

    async def stop(self, watch_id: str) -> WatchSession:
        """Stop and forget one session."""
        session = self.get(watch_id)
        try:
            await session.stop()
        finally:
            self._sessions.pop(watch_id, None)
        return session

    async def stop_all(self) -> None:
        """Stop every session."""
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await session.stop()
        if sessions:
            logger.info("Stopped %d watch sessions", len(sessions))
