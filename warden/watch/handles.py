"""Watch handles built on watchdog observers.

A handle is one scheduled watch on one directory (or on a whole subtree when
the platform watches recursively). Observer threads report filesystem events;
handles pass them to the session's event loop as raw ``rename`` / ``change``
events.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch
from watchdog.observers.polling import PollingObserver

from warden.watch.models import RawEvent, RawEventType

logger = logging.getLogger(__name__)

EventSink = Callable[[RawEvent], None]


def raw_events_for(event: FileSystemEvent) -> list[RawEvent]:
    """Translate one watchdog event into raw events.

    Creations, deletions and both ends of a move become ``rename``; the
    session tells them apart by existence when it flushes. Directory
    modifications are dropped since their mtime moves whenever an entry does.
    """
    if event.event_type in (EVENT_TYPE_CREATED, EVENT_TYPE_DELETED):
        return [RawEvent(RawEventType.RENAME, os.fsdecode(event.src_path))]
    if event.event_type == EVENT_TYPE_MOVED:
        return [
            RawEvent(RawEventType.RENAME, os.fsdecode(event.src_path)),
            RawEvent(RawEventType.RENAME, os.fsdecode(event.dest_path)),
        ]
    if event.event_type == EVENT_TYPE_MODIFIED and not event.is_directory:
        return [RawEvent(RawEventType.CHANGE, os.fsdecode(event.src_path))]
    return []


class WatchHandle(ABC):
    """One armed watch registration."""

    def __init__(self, path: str, sink: EventSink) -> None:
        self.path = path
        self._sink = sink
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    @abstractmethod
    def recursive(self) -> bool:
        pass

    @abstractmethod
    async def start(self) -> None:
        """Arm the handle.

        Raises:
            OSError: The directory cannot be watched
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Disarm the handle. Idempotent."""
        pass

    def deliver(self, event: RawEvent) -> None:
        """Hand ``event`` to the session unless the handle is closed."""
        if not self._closed:
            self._sink(event)


class _LoopForwarder(FileSystemEventHandler):
    """Runs on the observer thread and forwards events to the handle's loop."""

    def __init__(self, handle: WatchHandle, loop: asyncio.AbstractEventLoop) -> None:
        self._handle = handle
        self._loop = loop

    def on_any_event(self, event: FileSystemEvent) -> None:
        for raw in raw_events_for(event):
            try:
                self._loop.call_soon_threadsafe(self._handle.deliver, raw)
            except RuntimeError:
                logger.debug("Event loop closed, dropped %s %s", raw.type.value, raw.path)
                return


class ObserverHandle(WatchHandle):
    """A watchdog schedule on one directory."""

    def __init__(
        self, path: str, sink: EventSink, recursive: bool, factory: "ObserverHandleFactory"
    ) -> None:
        super().__init__(path, sink)
        self._recursive = recursive
        self._factory = factory
        self._handler: _LoopForwarder | None = None
        self._watch: ObservedWatch | None = None

    @property
    def recursive(self) -> bool:
        return self._recursive

    async def start(self) -> None:
        # Observer threads report unreadable directories on their own thread,
        # so fail here first.
        with os.scandir(self.path):
            pass
        self._handler = _LoopForwarder(self, asyncio.get_running_loop())
        self._watch = await self._factory.schedule(self._handler, self.path, self._recursive)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._watch is not None:
            watch, self._watch = self._watch, None
            await self._factory.unschedule(self._handler, watch)


class ObserverHandleFactory:
    """Creates observer-backed handles; the default HandleFactory.

    All handles from one factory share a single watchdog observer, started
    with the first handle and stopped when the last one closes. With
    ``polling=True`` a PollingObserver rescans every ``poll_interval``
    seconds instead of using the platform's notification API.
    """

    def __init__(self, polling: bool = False, poll_interval: float = 0.25) -> None:
        self.polling = polling
        self.poll_interval = poll_interval
        self._observer: BaseObserver | None = None
        self._users: dict[ObservedWatch, int] = {}

    def __call__(self, path: str, recursive: bool, sink: EventSink) -> WatchHandle:
        return ObserverHandle(path, sink, recursive, self)

    def _ensure_observer(self) -> BaseObserver:
        if self._observer is None:
            if self.polling:
                observer = PollingObserver(timeout=self.poll_interval)
            else:
                observer = Observer(timeout=self.poll_interval)
            observer.daemon = True
            observer.start()
            self._observer = observer
            logger.debug("Started %s", type(observer).__name__)
        return self._observer

    async def schedule(
        self, handler: FileSystemEventHandler, path: str, recursive: bool
    ) -> ObservedWatch:
        """Schedule ``handler`` on ``path``, starting the observer if needed."""
        observer = self._ensure_observer()
        try:
            watch = observer.schedule(handler, path, recursive=recursive)
        except OSError:
            if not self._users:
                await self._shutdown()
            raise
        self._users[watch] = self._users.get(watch, 0) + 1
        return watch

    async def unschedule(self, handler: FileSystemEventHandler, watch: ObservedWatch) -> None:
        """Drop ``handler``; the last handle out stops the observer."""
        observer = self._observer
        if observer is None:
            return
        remaining = self._users.get(watch, 1) - 1
        if remaining > 0:
            self._users[watch] = remaining
            observer.remove_handler_for_watch(handler, watch)
            return

        self._users.pop(watch, None)
        if not self._users:
            await self._shutdown()
        else:
            await asyncio.to_thread(observer.unschedule, watch)

    async def _shutdown(self) -> None:
        observer, self._observer = self._observer, None
        self._users.clear()
        if observer is None:
            return
        await asyncio.to_thread(_stop_observer, observer)
        logger.debug("Stopped %s", type(observer).__name__)


def _stop_observer(observer: BaseObserver) -> None:
    observer.stop()
    observer.join()


HandleFactory = Callable[[str, bool, EventSink], WatchHandle]
