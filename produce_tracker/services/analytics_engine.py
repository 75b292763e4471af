# produce_tracker/services/analytics_engine.py

"""Current-price analytics over one or more monthly partitions.

Everything is computed relative to ``latest``, the most recent date in
the union of the supplied partitions:

* ``prev_day_price``: the price on the single most recent earlier date.
* ``prev_week_price`` / ``prev_month_price``: mean price over
  ``[latest - 7d, latest - 1d]`` / ``[latest - 30d, latest - 1d]``.
* ``is_new``: no listing at all in the calendar month before
  ``latest``'s month (a calendar comparison, not a rolling window).
* departures: variants last seen within 30 days before ``latest`` but
  not on it are emitted as extra ``is_unavailable`` rows.

Rows with an unparsed price never feed a baseline or a high/low.
The computation is pure: no I/O, no shared state.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd
import pyarrow as pa

from produce_tracker.config.settings import Settings
from produce_tracker.filters.classifiers import display_name
from produce_tracker.models.analytics_row import (
    AnalyticsRow,
    PriceHistory,
    PricePoint,
)
from produce_tracker.models.partition import MonthlyPartition

logger = logging.getLogger("produce_tracker.analytics")

_ONE_DAY = pd.Timedelta(days=1)


class NoProduceDataError(LookupError):
    """Raised when there are no partitions or no records to analyse."""


def _union(partitions: Sequence[MonthlyPartition]) -> pd.DataFrame:
    """Union all partitions into one frame with a parsed ``day`` column."""
    if not partitions:
        raise NoProduceDataError("No produce data available")

    table = pa.concat_tables([p.table for p in partitions])
    df = table.to_pandas()
    if df.empty:
        raise NoProduceDataError("No produce records in loaded partitions")

    df["day"] = pd.to_datetime(df["date"], format="%Y-%m-%d")
    return df


def _window(
    frame: pd.DataFrame, start: pd.Timestamp, end: pd.Timestamp,
) -> pd.DataFrame:
    """Rows whose day falls in ``[start, end]`` inclusive."""
    return frame[(frame["day"] >= start) & (frame["day"] <= end)]


def _mean_by_name(frame: pd.DataFrame) -> dict[str, float]:
    return frame.groupby("name")["price"].mean().to_dict()


def _high_low(frame: pd.DataFrame) -> tuple[dict[str, float], dict[str, float]]:
    grouped = frame.groupby("name")["price"]
    return grouped.max().to_dict(), grouped.min().to_dict()


def _opt(mapping: Mapping[str, Any], name: str) -> float | None:
    """Look up a baseline, mapping a miss (or NaN) to ``None``."""
    value = mapping.get(name)
    if value is None or pd.isna(value):
        return None
    return float(value)


def _iso(day: pd.Timestamp) -> str:
    return day.strftime("%Y-%m-%d")


def latest_date(partitions: Sequence[MonthlyPartition]) -> str:
    """Return the most recent ISO date across *partitions*."""
    return _iso(_union(partitions)["day"].max())


def compute_current(
    partitions: Sequence[MonthlyPartition],
) -> list[AnalyticsRow]:
    """Compute one analytics row per current or recently departed variant.

    Raises :class:`NoProduceDataError` when there is nothing to analyse,
    which callers must keep distinct from an empty result.
    """
    df = _union(partitions)
    latest: pd.Timestamp = df["day"].max()
    priced = df[df["price_parsed"]]

    # --- Previous listing day ------------------------------------------
    earlier = df.loc[df["day"] < latest, "day"]
    prev_day: pd.Timestamp | None = (
        earlier.max() if not earlier.empty else None
    )
    prev_day_price: dict[str, float] = {}
    if prev_day is not None:
        prev_day_price = (
            priced[priced["day"] == prev_day]
            .groupby("name")["price"]
            .first()
            .to_dict()
        )

    # --- Trailing averages ---------------------------------------------
    week_start = latest - pd.Timedelta(days=Settings.WEEK_WINDOW_DAYS)
    month_start = latest - pd.Timedelta(days=Settings.MONTH_WINDOW_DAYS)
    prev_week_price = _mean_by_name(
        _window(priced, week_start, latest - _ONE_DAY)
    )
    prev_month_price = _mean_by_name(
        _window(priced, month_start, latest - _ONE_DAY)
    )

    # --- Ranges (inclusive of the latest day) ----------------------------
    day_high, day_low = _high_low(
        _window(priced, prev_day if prev_day is not None else latest, latest)
    )
    week_high, week_low = _high_low(_window(priced, week_start, latest))
    month_high, month_low = _high_low(_window(priced, month_start, latest))

    # --- Arrival tracking (calendar months) ----------------------------
    periods = df["day"].dt.to_period("M")
    latest_period = latest.to_period("M")
    prev_month_names = set(df.loc[periods == latest_period - 1, "name"])
    first_seen = (
        df[periods == latest_period].groupby("name")["day"].min().to_dict()
    )

    # --- Current listings ----------------------------------------------
    current = df[df["day"] == latest]
    duplicated = current["name"].duplicated()
    if duplicated.any():
        logger.warning(
            "%d duplicate names on %s, keeping first of each: %s",
            int(duplicated.sum()),
            _iso(latest),
            sorted(set(current.loc[duplicated, "name"])),
        )
        current = current[~duplicated]

    # --- Departure tracking --------------------------------------------
    last_seen = df.groupby("name")["day"].max()
    lookback_start = latest - pd.Timedelta(
        days=Settings.UNAVAILABLE_LOOKBACK_DAYS
    )
    departed = last_seen[(last_seen < latest) & (last_seen >= lookback_start)]
    last_rows = (
        df[df["name"].isin(departed.index)]
        .sort_values(["name", "day"], kind="mergesort")
        .drop_duplicates("name", keep="last")
    )

    def build(
        rec: dict[str, Any],
        *,
        is_new: bool,
        first_seen_date: str | None,
        unavailable_since: str | None,
    ) -> AnalyticsRow:
        name = str(rec["name"])
        return AnalyticsRow(
            name=name,
            display_name=display_name(name),
            price=float(rec["price"]),
            unit=str(rec["unit"]),
            origin=str(rec["origin"] or ""),
            price_parsed=bool(rec["price_parsed"]),
            is_organic=bool(rec["is_organic"]),
            is_ipm=bool(rec["is_ipm"]),
            is_waxed=bool(rec["is_waxed"]),
            is_local=bool(rec["is_local"]),
            is_hydroponic=bool(rec["is_hydroponic"]),
            prev_day_price=_opt(prev_day_price, name),
            prev_week_price=_opt(prev_week_price, name),
            prev_month_price=_opt(prev_month_price, name),
            day_high=_opt(day_high, name),
            day_low=_opt(day_low, name),
            week_high=_opt(week_high, name),
            week_low=_opt(week_low, name),
            month_high=_opt(month_high, name),
            month_low=_opt(month_low, name),
            is_new=is_new,
            first_seen_date=first_seen_date,
            is_unavailable=unavailable_since is not None,
            unavailable_since_date=unavailable_since,
        )

    rows: list[AnalyticsRow] = []
    for rec in current.to_dict("records"):
        is_new = rec["name"] not in prev_month_names
        seen = first_seen.get(rec["name"]) if is_new else None
        rows.append(build(
            rec,
            is_new=is_new,
            first_seen_date=_iso(seen) if seen is not None else None,
            unavailable_since=None,
        ))

    for rec in last_rows.to_dict("records"):
        rows.append(build(
            rec,
            is_new=False,
            first_seen_date=None,
            unavailable_since=_iso(rec["day"]),
        ))

    rows.sort(key=lambda r: (r.display_name.lower(), r.name))

    logger.info(
        "Computed %d analytics rows for %s (%d current, %d departed)",
        len(rows),
        _iso(latest),
        len(current),
        len(last_rows),
    )
    return rows


def price_history(
    partitions: Sequence[MonthlyPartition],
    days: int | None = None,
) -> PriceHistory:
    """Return parsed price points per variant over the trailing window."""
    span = Settings.HISTORY_DAYS if days is None else days
    df = _union(partitions)
    latest: pd.Timestamp = df["day"].max()
    start = latest - pd.Timedelta(days=span)

    recent = _window(df[df["price_parsed"]], start, latest).sort_values(
        ["name", "day"], kind="mergesort",
    )

    history = PriceHistory(start=_iso(start), end=_iso(latest))
    for rec in recent.to_dict("records"):
        history.points.setdefault(rec["name"], []).append(
            PricePoint(
                name=rec["name"],
                date=rec["date"],
                price=float(rec["price"]),
            )
        )
    return history
