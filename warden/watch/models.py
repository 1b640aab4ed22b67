"""Data models for change watching."""

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from warden.exceptions import InvalidArgumentError


class ChangeType(str, Enum):
    """Change events delivered to callers."""

    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


class RawEventType(str, Enum):
    """Low-level notifications reported by handles.

    ``rename`` covers both appearance and disappearance of an entry and is
    disambiguated at flush time by checking existence.
    """

    RENAME = "rename"
    CHANGE = "change"


class WatchState(str, Enum):
    """Lifecycle of a WatchSession."""

    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    STOPPING = "stopping"
    STOPPED = "stopped"


ALL_CHANGES = frozenset(ChangeType)


@dataclass(frozen=True)
class RawEvent:
    type: RawEventType
    path: str
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ChangeEvent:
    """One debounced change."""

    type: ChangeType
    path: str
    timestamp: float
    is_directory: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "path": self.path,
            "timestamp": datetime.fromtimestamp(self.timestamp).isoformat(),
            "is_directory": self.is_directory,
        }


def parse_events(value: str | Iterable[str | ChangeType] | None) -> frozenset[ChangeType]:
    """Parse an event filter such as ``"create,delete"``."""
    if value is None:
        return ALL_CHANGES
    items = value.split(",") if isinstance(value, str) else list(value)
    selected = set()
    for item in items:
        name = item.value if isinstance(item, ChangeType) else str(item).strip().lower()
        if not name:
            continue
        try:
            selected.add(ChangeType(name))
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown event type {name!r}; expected create, modify or delete"
            ) from None
    if not selected:
        raise InvalidArgumentError("Event filter selects no event types")
    return frozenset(selected)


@dataclass
class WatchOptions:
    """Options for one watch session.

    Attributes:
        recursive: Watch the whole tree rather than the root directory only
        max_depth: Deepest directory (root is depth 0) armed in manual mode
        debounce_ms: Quiet period before a raw event is flushed
        poll_interval_ms: Rescan interval of the polling observer (observer timeout otherwise)
        polling: Use watchdog's PollingObserver instead of native notifications
        events: Change types delivered to the caller
        resilient: Record per-handle arming failures instead of aborting
        queue_size: Capacity of the raw event queue
    """

    recursive: bool = True
    max_depth: int = 5
    debounce_ms: int = 100
    poll_interval_ms: int = 250
    polling: bool = False
    events: frozenset[ChangeType] = ALL_CHANGES
    resilient: bool = False
    queue_size: int = 1024

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise InvalidArgumentError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.debounce_ms < 0:
            raise InvalidArgumentError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        if self.poll_interval_ms <= 0:
            raise InvalidArgumentError(
                f"poll_interval_ms must be > 0, got {self.poll_interval_ms}"
            )
        if self.queue_size <= 0:
            raise InvalidArgumentError(f"queue_size must be > 0, got {self.queue_size}")
        self.events = parse_events(self.events)


@dataclass
class WatchStats:
    raw_events: int = 0
    coalesced: int = 0
    dispatched: int = 0
    dropped: int = 0
    handles: int = 0
    started_at: float | None = None
    stopped_at: float | None = None

    @property
    def duration(self) -> float:
        if self.started_at is None:
            return 0.0
        end = self.stopped_at if self.stopped_at is not None else time.time()
        return end - self.started_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_events": self.raw_events,
            "coalesced": self.coalesced,
            "dispatched": self.dispatched,
            "dropped": self.dropped,
            "handles": self.handles,
            "duration": round(self.duration, 3),
        }
