# produce_tracker/services/table_view.py

"""Sorting, searching and change figures for the price table.

A change is only reported for a row with a parsed, currently listed
price and a baseline.  Everything else has no change (``None``), which
sorts after every real value in both directions instead of posing as
zero.
"""

import logging
from collections.abc import Callable

from produce_tracker.models.analytics_row import AnalyticsRow

logger = logging.getLogger("produce_tracker.table")

SORT_FIELDS: tuple[str, ...] = (
    "name",
    "price",
    "day_change",
    "day_change_pct",
    "week_change",
    "month_change",
)


def _live_price(row: AnalyticsRow) -> float | None:
    """The row's price, or ``None`` when it is unparsed or stale."""
    if not row.price_parsed or row.is_unavailable:
        return None
    return row.price


def price_change(row: AnalyticsRow, baseline: float | None) -> float | None:
    """Absolute change from *baseline*, or ``None`` without a comparison."""
    current = _live_price(row)
    if current is None or baseline is None:
        return None
    return current - baseline


def percent_change(row: AnalyticsRow, baseline: float | None) -> float | None:
    """Percent change from *baseline*; ``None`` for a missing or zero one."""
    change = price_change(row, baseline)
    if change is None or not baseline:
        return None
    return change / baseline * 100.0


_SORT_KEYS: dict[str, Callable[[AnalyticsRow], float | str | None]] = {
    "name": lambda r: r.display_name.lower(),
    "price": lambda r: r.price if r.price_parsed else None,
    "day_change": lambda r: price_change(r, r.prev_day_price),
    "day_change_pct": lambda r: percent_change(r, r.prev_day_price),
    "week_change": lambda r: percent_change(r, r.prev_week_price),
    "month_change": lambda r: percent_change(r, r.prev_month_price),
}


def sort_rows(
    rows: list[AnalyticsRow],
    field: str = "name",
    descending: bool = False,
) -> list[AnalyticsRow]:
    """Return *rows* ordered by *field*, rows without a value last.

    ``week_change`` and ``month_change`` compare percentages, so items
    with different price levels rank fairly.  Ties keep display-name
    order.

    Raises:
        ValueError: if *field* is not one of :data:`SORT_FIELDS`.
    """
    if field not in _SORT_KEYS:
        raise ValueError(
            f"Unknown sort field '{field}'. "
            f"Valid: {', '.join(SORT_FIELDS)}"
        )
    key = _SORT_KEYS[field]

    by_name = sorted(rows, key=lambda r: (r.display_name.lower(), r.name))
    present = [r for r in by_name if key(r) is not None]
    missing = [r for r in by_name if key(r) is None]
    present.sort(key=key, reverse=descending)  # type: ignore[arg-type]
    return present + missing


def filter_rows(rows: list[AnalyticsRow], query: str | None) -> list[AnalyticsRow]:
    """Keep rows whose display name or origin contains *query*.

    Matching is case-insensitive; an empty query keeps every row.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return rows

    kept = [
        r for r in rows
        if needle in r.display_name.lower() or needle in r.origin.lower()
    ]
    logger.debug(
        "Search '%s' matched %d of %d rows", needle, len(kept), len(rows),
    )
    return kept
