# produce_tracker/models/analytics_row.py

"""Query-scoped analytics models (never persisted)."""

from dataclasses import dataclass, field


@dataclass
class AnalyticsRow:
    """Current state of one produce variant with its price baselines.

    Baselines and ranges are ``None`` when no data fell in the window;
    callers render that as a gap, never as zero.
    """

    name: str
    display_name: str
    price: float
    unit: str
    origin: str = ""
    price_parsed: bool = True
    is_organic: bool = False
    is_ipm: bool = False
    is_waxed: bool = False
    is_local: bool = False
    is_hydroponic: bool = False
    prev_day_price: float | None = None
    prev_week_price: float | None = None
    prev_month_price: float | None = None
    day_high: float | None = None
    day_low: float | None = None
    week_high: float | None = None
    week_low: float | None = None
    month_high: float | None = None
    month_low: float | None = None
    is_new: bool = False
    first_seen_date: str | None = None
    is_unavailable: bool = False
    unavailable_since_date: str | None = None


@dataclass
class PricePoint:
    """One observed price of one variant on one date."""

    name: str
    date: str
    price: float


@dataclass
class PriceHistory:
    """Recent price points grouped by raw name."""

    start: str
    end: str
    points: dict[str, list[PricePoint]] = field(
        default_factory=lambda: dict[str, list[PricePoint]]()
    )

    def for_name(self, name: str) -> list[PricePoint]:
        """Return the points for *name*, oldest first."""
        return list(self.points.get(name, []))
