"""Watch - debounced create / modify / delete monitoring of a directory tree.

Public API:
    WatchSession: Lifecycle, handle management and debouncing
    WatchOptions: Session options
    WatchRegistry: Explicit collection of live sessions
    ChangeEvent, ChangeType, WatchState, WatchStats: Models
    ObserverHandleFactory, WatchHandle: watchdog-backed handle layer (injectable)
"""

from warden.watch.handles import ObserverHandle, ObserverHandleFactory, WatchHandle
from warden.watch.models import (
    ChangeEvent,
    ChangeType,
    RawEvent,
    RawEventType,
    WatchOptions,
    WatchState,
    WatchStats,
    parse_events,
)
from warden.watch.registry import WatchRegistry
from warden.watch.session import WatchSession

__all__ = [
    "WatchSession",
    "WatchOptions",
    "WatchRegistry",
    "ChangeEvent",
    "ChangeType",
    "RawEvent",
    "RawEventType",
    "WatchState",
    "WatchStats",
    "parse_events",
    "WatchHandle",
    "ObserverHandle",
    "ObserverHandleFactory",
]
