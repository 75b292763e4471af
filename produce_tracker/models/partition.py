# produce_tracker/models/partition.py

"""Monthly partition models and rebuild reports."""

from dataclasses import dataclass, field

import pyarrow as pa


@dataclass
class PartitionInfo:
    """A stored monthly partition as listed for the query surface."""

    month: str
    url: str
    size: int = 0
    is_current_month: bool = False


@dataclass
class MonthlyPartition:
    """A loaded monthly partition, ready for analytics."""

    month: str
    url: str
    table: pa.Table

    @property
    def num_rows(self) -> int:
        """Number of item records in the partition."""
        return int(self.table.num_rows)


@dataclass
class PartitionResult:
    """Outcome of rebuilding one month's partition."""

    month: str
    url: str
    item_count: int
    days_count: int


@dataclass
class MonthFailure:
    """A month whose rebuild raised during a backfill."""

    month: str
    error: str


@dataclass
class BackfillReport:
    """Aggregate outcome of rebuilding every stored month."""

    results: list[PartitionResult] = field(
        default_factory=lambda: list[PartitionResult]()
    )
    failures: list[MonthFailure] = field(
        default_factory=lambda: list[MonthFailure]()
    )

    @property
    def total_items(self) -> int:
        """Items written across all successful months."""
        return sum(r.item_count for r in self.results)

    @property
    def success(self) -> bool:
        """True when every month rebuilt cleanly."""
        return not self.failures
