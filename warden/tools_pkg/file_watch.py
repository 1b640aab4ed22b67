"""Directory watch tool."""

import json
import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from warden import outcome
from warden.exceptions import InvalidArgumentError, WardenError
from warden.tools_pkg.constants import DEFAULT_WATCH_EVENTS
from warden.tools_pkg.context import ToolContext
from warden.watch import ChangeEvent, WatchOptions, WatchSession, parse_events

logger = logging.getLogger(__name__)


def _format_events(root: str, events: list[ChangeEvent], duration: float) -> str:
    if not events:
        return f"No changes under {root} in {duration:g}s"
    lines = [f"{len(events)} changes under {root} in {duration:g}s:"]
    for event in events:
        stamp = datetime.fromtimestamp(event.timestamp).strftime("%H:%M:%S.%f")[:-3]
        suffix = "/" if event.is_directory else ""
        lines.append(f"  [{stamp}] {event.type.value.upper():<6} {event.path}{suffix}")
    return "\n".join(lines)


async def watch_execute(
    ctx: ToolContext,
    path: str,
    events: str | Iterable[str] = DEFAULT_WATCH_EVENTS,
    duration: float | None = None,
    recursive: bool = True,
    max_depth: int | None = None,
    debounce_ms: int | None = None,
    output_format: str = "text",
) -> dict[str, Any]:
    """Watch ``path`` for ``duration`` seconds and report the changes seen.

    Args:
        ctx: Tool context of the caller
        path: Directory to watch
        events: Change types to report, e.g. ``"create,delete"``
        duration: Seconds to watch; bounded by ``watch.max_duration_s``
        recursive: Include subdirectories
        max_depth: Deepest directory level armed when emulating recursion
        debounce_ms: Quiet period used to coalesce raw notifications
        output_format: ``"text"`` or ``"json"``
    """
    settings = ctx.config.watch
    duration = settings.default_duration_s if duration is None else duration
    try:
        if isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration <= 0:
            raise InvalidArgumentError(f"duration must be a positive number, got {duration!r}")
        if duration > settings.max_duration_s:
            raise InvalidArgumentError(
                f"duration {duration}s exceeds the limit of {settings.max_duration_s:g}s"
            )
        if output_format not in ("text", "json"):
            raise InvalidArgumentError(f"Unknown output_format {output_format!r}")

        options = WatchOptions(
            recursive=recursive,
            max_depth=settings.max_depth if max_depth is None else max_depth,
            debounce_ms=settings.debounce_ms if debounce_ms is None else debounce_ms,
            poll_interval_ms=settings.poll_interval_ms,
            polling=settings.polling,
            events=parse_events(events),
            queue_size=settings.queue_size,
        )
        resolved = ctx.resolver.resolve(path, must_exist=True)
        session = WatchSession(
            resolved, options, platform=ctx.platform, handle_factory=ctx.watch_handle_factory
        )
    except WardenError as e:
        return outcome.error(str(path), e)

    watch_id = ctx.watches.add(session)
    try:
        changes = await session.run(duration)
    except WardenError as e:
        return outcome.error(str(path), e)
    finally:
        await ctx.watches.stop(watch_id)

    summary = session.summary()
    if output_format == "json":
        text = json.dumps(summary, indent=2, ensure_ascii=False)
    else:
        text = _format_events(session.root, changes, duration)

    return outcome.ok(
        str(path),
        text,
        watch_id=watch_id,
        count=len(changes),
        events=summary["events"],
        stats=summary["stats"],
        errors=summary["errors"],
        mode=summary["mode"],
    )
