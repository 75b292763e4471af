# produce_tracker/services/event_deriver.py

"""Turn analytics rows into date-keyed produce feed events."""

import logging
from datetime import date, datetime, time, timedelta
from urllib.parse import quote
from zoneinfo import ZoneInfo

from produce_tracker.config.settings import Settings
from produce_tracker.models.analytics_row import AnalyticsRow
from produce_tracker.models.produce_event import ProduceEvent, ProduceEventItem

logger = logging.getLogger("produce_tracker.events")

# Punctuation left unescaped in the item name, matching the site's links
_URI_COMPONENT_SAFE = "-_.!~*'()"


def produce_hash(name: str) -> str:
    """djb2 hash of *name* as a 7-character hex string."""
    value = 5381
    for ch in name:
        value = ((value << 5) + value + ord(ch)) & 0xFFFFFFFF
    return format(value, "x").zfill(7)[-7:]


def produce_item_url(name: str) -> str:
    """Link to the price table filtered to one item."""
    encoded = quote(name, safe=_URI_COMPONENT_SAFE)
    return f"/produce?item={produce_hash(name)}&name={encoded}"


def _event_item(row: AnalyticsRow) -> ProduceEventItem:
    return ProduceEventItem(
        name=row.name,
        display_name=row.display_name,
        item_hash=produce_hash(row.name),
        url=produce_item_url(row.name),
    )


def _sorted_items(rows: list[AnalyticsRow]) -> list[ProduceEventItem]:
    ordered = sorted(rows, key=lambda r: (r.display_name.lower(), r.name))
    return [_event_item(r) for r in ordered]


def derive_events(rows: list[AnalyticsRow]) -> list[ProduceEvent]:
    """Group arrivals and departures into one event per date.

    Arrivals are new rows with a known first-seen date; departures are
    unavailable rows with a known unavailable-since date.  Events are
    returned newest first.
    """
    arrivals: dict[str, list[AnalyticsRow]] = {}
    departures: dict[str, list[AnalyticsRow]] = {}

    for row in rows:
        if row.is_new and row.first_seen_date:
            arrivals.setdefault(row.first_seen_date, []).append(row)
        if row.is_unavailable and row.unavailable_since_date:
            departures.setdefault(
                row.unavailable_since_date, []
            ).append(row)

    events: list[ProduceEvent] = []
    for day in sorted(set(arrivals) | set(departures), reverse=True):
        events.append(ProduceEvent(
            id=day,
            date=day,
            new_arrivals=_sorted_items(arrivals.get(day, [])),
            out_of_stock=_sorted_items(departures.get(day, [])),
        ))

    logger.info(
        "Derived %d produce events from %d rows", len(events), len(rows),
    )
    return events


def event_timestamp(event: ProduceEvent) -> datetime:
    """Return the event as a local-time datetime for feed ordering.

    The date is a local calendar day, pinned to the morning so that
    it never shifts to a neighbouring day across time zones.
    """
    day = date.fromisoformat(event.date)
    return datetime.combine(
        day,
        time(hour=Settings.EVENT_LOCAL_HOUR),
        tzinfo=ZoneInfo(Settings.TIMEZONE),
    )


def prune_events(
    events: list[ProduceEvent],
    now: datetime | None = None,
    window_days: int | None = None,
) -> list[ProduceEvent]:
    """Drop events more than *window_days* in the past or future."""
    span = timedelta(
        days=Settings.FEED_WINDOW_DAYS if window_days is None else window_days
    )
    current = now or datetime.now(ZoneInfo(Settings.TIMEZONE))
    if current.tzinfo is None:
        current = current.replace(tzinfo=ZoneInfo(Settings.TIMEZONE))

    kept = [
        e for e in events
        if abs(event_timestamp(e) - current) <= span
    ]
    if len(kept) != len(events):
        logger.debug(
            "Pruned %d produce events outside %s",
            len(events) - len(kept),
            span,
        )
    return kept
