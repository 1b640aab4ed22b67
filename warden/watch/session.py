"""Watch sessions: handle management, debouncing and lifecycle."""

import asyncio
import logging
import os
import time
from collections.abc import Callable
from typing import Any

from warden.exceptions import InvalidArgumentError, NotFoundError, WardenError
from warden.path_guard.models import ResolvedPath
from warden.platform_profile import PlatformProfile, profile
from warden.watch.handles import HandleFactory, ObserverHandleFactory, WatchHandle
from warden.watch.models import (
    ChangeEvent,
    ChangeType,
    RawEvent,
    RawEventType,
    WatchOptions,
    WatchState,
    WatchStats,
)

logger = logging.getLogger(__name__)


class WatchSession:
    """Watch one directory tree for create / modify / delete changes.

    When the platform can watch a subtree natively and ``recursive`` is set,
    a single recursive handle covers the root. Otherwise one handle is armed
    per directory down to ``max_depth``, and directories created later are
    armed as their create events are flushed.

    Raw events from handles go through a bounded queue to a single consumer
    task that owns the debounce buffer; nothing else touches it. The
    ``active_handles`` map is shared with start/stop and guarded by a lock.

    Usage:
        session = WatchSession(resolver.resolve("src"), WatchOptions(max_depth=2))
        events = await session.run(duration=30)
    """

    def __init__(
        self,
        root: ResolvedPath,
        options: WatchOptions | None = None,
        platform: PlatformProfile | None = None,
        handle_factory: HandleFactory | None = None,
        on_event: Callable[[ChangeEvent], None] | None = None,
    ) -> None:
        if not isinstance(root, ResolvedPath):
            raise InvalidArgumentError("Watching requires a ResolvedPath from the path guard")
        self.root = root.absolute_path
        self.options = options or WatchOptions()
        self._profile = platform or profile()
        self._factory = handle_factory or ObserverHandleFactory(
            polling=self.options.polling, poll_interval=self.options.poll_interval_ms / 1000
        )
        self._on_event = on_event

        self.state = WatchState.IDLE
        self.active_handles: dict[str, WatchHandle] = {}
        self.pending_events: dict[tuple[RawEventType, str], tuple[RawEvent, float]] = {}
        self.events: list[ChangeEvent] = []
        self.errors: list[dict[str, str]] = []
        self.stats = WatchStats()

        self._lock = asyncio.Lock()
        self._queue: asyncio.Queue[RawEvent] | None = None
        self._consumer: asyncio.Task | None = None

    @property
    def native_recursive(self) -> bool:
        """Whether one handle covers the whole tree."""
        return self.options.recursive and self._profile.supports_native_recursive_watch

    async def start(self) -> None:
        """Arm handles and begin delivering events.

        Raises:
            InvalidArgumentError: Session already started, or root not a directory
            NotFoundError: Root does not exist
            WardenError: A handle could not be armed and the session is not resilient
        """
        if self.state is not WatchState.IDLE:
            raise InvalidArgumentError(f"Watch session already {self.state.value}")
        if not os.path.exists(self.root):
            raise NotFoundError(f"Path does not exist: {self.root}", path=self.root)
        if not os.path.isdir(self.root):
            raise InvalidArgumentError(f"Not a directory: {self.root}", path=self.root)

        self.state = WatchState.STARTING
        self.stats.started_at = time.time()
        self._queue = asyncio.Queue(maxsize=self.options.queue_size)
        self._consumer = asyncio.create_task(
            self._consume(self._queue), name=f"watch-consumer:{self.root}"
        )

        try:
            async with self._lock:
                if self.native_recursive:
                    await self._arm(self.root, recursive=True)
                elif self.options.recursive:
                    await self._arm_tree(self.root)
                else:
                    await self._arm(self.root, recursive=False)
        except WardenError:
            await self._teardown()
            raise

        self.state = WatchState.ACTIVE
        logger.info(
            "Watch started on %s (%d handles, %s)",
            self.root,
            len(self.active_handles),
            "native recursive" if self.native_recursive else "per-directory",
        )

    async def stop(self) -> None:
        """Close every handle and drop pending events. Idempotent."""
        if self.state in (WatchState.STOPPING, WatchState.STOPPED):
            return
        if self.state is WatchState.IDLE:
            self.state = WatchState.STOPPED
            return
        await self._teardown()
        logger.info(
            "Watch stopped on %s (%d events, %d raw)",
            self.root,
            self.stats.dispatched,
            self.stats.raw_events,
        )

    async def run(self, duration: float) -> list[ChangeEvent]:
        """Start, watch for ``duration`` seconds, then stop.

        Returns:
            The events delivered during the session
        """
        await self.start()
        try:
            await asyncio.sleep(duration)
        finally:
            await self.stop()
        return list(self.events)

    def summary(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "state": self.state.value,
            "mode": "native-recursive" if self.native_recursive else "per-directory",
            "stats": self.stats.to_dict(),
            "events": [e.to_dict() for e in self.events],
            "errors": list(self.errors),
        }

    async def _teardown(self) -> None:
        self.state = WatchState.STOPPING

        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            try:
                await consumer
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Watch consumer for %s failed", self.root)

        async with self._lock:
            handles = list(self.active_handles.values())
            self.active_handles.clear()
            self.stats.handles = 0
        for handle in handles:
            try:
                await handle.close()
            except OSError as e:
                logger.warning("Closing watch on %s failed: %s", handle.path, e)

        self.pending_events.clear()
        if self._queue is not None:
            while not self._queue.empty():
                self._queue.get_nowait()

        self.stats.stopped_at = time.time()
        self.state = WatchState.STOPPED

    # -- handle management; callers hold self._lock -------------------------

    async def _arm(self, path: str, recursive: bool) -> None:
        if path in self.active_handles:
            return
        handle = self._factory(path, recursive, self._enqueue)
        try:
            await handle.start()
        except OSError as e:
            await handle.close()
            if not self.options.resilient:
                raise InvalidArgumentError(f"Cannot watch {path}: {e}", path=path) from e
            logger.warning("Skipping unwatchable directory %s: %s", path, e)
            self.errors.append({"path": path, "error": str(e)})
            return
        self.active_handles[path] = handle
        self.stats.handles = len(self.active_handles)

    async def _arm_tree(self, top: str) -> None:
        """Arm ``top`` and its subdirectories down to max_depth."""
        stack = [top]
        while stack:
            current = stack.pop()
            depth = self._depth(current)
            if depth > self.options.max_depth:
                continue
            await self._arm(current, recursive=False)
            if depth == self.options.max_depth:
                continue
            try:
                with os.scandir(current) as it:
                    subdirs = [e.path for e in it if e.is_dir(follow_symlinks=False)]
            except OSError as e:
                if not self.options.resilient:
                    raise InvalidArgumentError(f"Cannot list {current}: {e}", path=current) from e
                self.errors.append({"path": current, "error": str(e)})
                continue
            stack.extend(sorted(subdirs, reverse=True))

    async def _disarm_tree(self, top: str) -> None:
        prefix = top.rstrip(os.sep) + os.sep
        doomed = [p for p in self.active_handles if p == top or p.startswith(prefix)]
        for path in doomed:
            handle = self.active_handles.pop(path)
            await handle.close()
        self.stats.handles = len(self.active_handles)
        if doomed:
            logger.debug("Closed %d handles under deleted %s", len(doomed), top)

    def _depth(self, path: str) -> int:
        rel = os.path.relpath(path, self.root)
        return 0 if rel == os.curdir else rel.count(os.sep) + 1

    # -- event pipeline ----------------------------------------------------

    def _enqueue(self, event: RawEvent) -> None:
        if self.state not in (WatchState.STARTING, WatchState.ACTIVE) or self._queue is None:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.stats.dropped += 1
            logger.debug("Watch queue full, dropped %s %s", event.type.value, event.path)

    async def _consume(self, queue: asyncio.Queue) -> None:
        debounce = self.options.debounce_ms / 1000
        loop = asyncio.get_running_loop()

        while True:
            timeout = None
            if self.pending_events:
                earliest = min(deadline for _, deadline in self.pending_events.values())
                timeout = max(0.0, earliest - loop.time())
            try:
                event = await asyncio.wait_for(queue.get(), timeout=timeout)
            except asyncio.TimeoutError:
                event = None

            if event is not None:
                self.stats.raw_events += 1
                key = (event.type, event.path)
                if key in self.pending_events:
                    self.stats.coalesced += 1
                self.pending_events[key] = (event, loop.time() + debounce)

            now = loop.time()
            due = [k for k, (_, deadline) in self.pending_events.items() if deadline <= now]
            for key in due:
                raw, _ = self.pending_events.pop(key)
                await self._flush(raw)

    async def _flush(self, raw: RawEvent) -> None:
        if raw.type is RawEventType.CHANGE:
            if not os.path.lexists(raw.path):
                return
            change = ChangeType.MODIFY
        else:
            change = ChangeType.CREATE if os.path.lexists(raw.path) else ChangeType.DELETE

        is_dir = change is not ChangeType.DELETE and os.path.isdir(raw.path)
        if change is ChangeType.DELETE:
            is_dir = raw.path in self.active_handles

        if not self.native_recursive and self.options.recursive:
            async with self._lock:
                if self.state is not WatchState.ACTIVE:
                    return
                if change is ChangeType.CREATE and is_dir and not os.path.islink(raw.path):
                    if self._depth(raw.path) <= self.options.max_depth:
                        try:
                            await self._arm_tree(raw.path)
                        except WardenError as e:
                            logger.warning("Could not watch new directory %s: %s", raw.path, e)
                            self.errors.append({"path": raw.path, "error": e.message})
                elif change is ChangeType.DELETE:
                    await self._disarm_tree(raw.path)

        if change not in self.options.events:
            return

        event = ChangeEvent(change, raw.path, raw.timestamp, is_dir)
        self.events.append(event)
        self.stats.dispatched += 1
        logger.debug("Watch event %s %s", change.value, raw.path)
        if self._on_event is not None:
            try:
                self._on_event(event)
            except Exception:
                logger.exception("Watch callback failed for %s %s", change.value, raw.path)
