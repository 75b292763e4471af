# produce_tracker/services/produce_service.py

"""Query surface for the price table and the produce feed."""

import logging
from datetime import datetime

from produce_tracker.config.settings import Settings
from produce_tracker.models.analytics_row import AnalyticsRow, PriceHistory
from produce_tracker.models.partition import MonthlyPartition, PartitionInfo
from produce_tracker.models.produce_event import ProduceEvent
from produce_tracker.services.analytics_engine import (
    compute_current,
    price_history,
)
from produce_tracker.services.event_deriver import derive_events, prune_events
from produce_tracker.services.ingestion import today_in_timezone
from produce_tracker.storage.partition_codec import parquet_to_table
from produce_tracker.storage.snapshot_store import SnapshotStore, partition_month
from produce_tracker.storage.ttl_cache import TTLCache

logger = logging.getLogger("produce_tracker.service")


def list_months(
    store: SnapshotStore, today: str | None = None,
) -> list[PartitionInfo]:
    """List stored partitions, most recent month first."""
    current_month = (today or today_in_timezone())[:7]
    infos: list[PartitionInfo] = []
    for blob in store.list(Settings.PARTITION_PREFIX):
        month = partition_month(blob.path)
        if month is None:
            continue
        infos.append(PartitionInfo(
            month=month,
            url=blob.url,
            size=blob.size,
            is_current_month=month == current_month,
        ))
    infos.sort(key=lambda i: i.month, reverse=True)
    return infos


def load_partitions(
    store: SnapshotStore, infos: list[PartitionInfo],
) -> list[MonthlyPartition]:
    """Read and decode the listed partitions."""
    partitions = [
        MonthlyPartition(
            month=info.month,
            url=info.url,
            table=parquet_to_table(store.read(info.url)),
        )
        for info in infos
    ]
    logger.debug(
        "Loaded %d partitions (%d rows)",
        len(partitions),
        sum(p.num_rows for p in partitions),
    )
    return partitions


class ProduceService:
    """Cached access to months, analytics rows, history and events."""

    def __init__(
        self, store: SnapshotStore, cache: TTLCache | None = None,
    ) -> None:
        self.store = store
        self.cache = cache or TTLCache()

    def months(self) -> list[PartitionInfo]:
        """Stored partitions, newest first."""
        return self.cache.get_or_compute(
            "months", lambda: list_months(self.store),
        )

    def partitions(self) -> list[MonthlyPartition]:
        """Every stored partition, loaded."""
        return self.cache.get_or_compute(
            "partitions",
            lambda: load_partitions(self.store, self.months()),
        )

    def current_rows(self) -> list[AnalyticsRow]:
        """Analytics rows for the most recent date."""
        return self.cache.get_or_compute(
            "current", lambda: compute_current(self.partitions()),
        )

    def history(self, days: int | None = None) -> PriceHistory:
        """Trailing price history per variant."""
        return self.cache.get_or_compute(
            f"history:{days}",
            lambda: price_history(self.partitions(), days),
        )

    def events(self, now: datetime | None = None) -> list[ProduceEvent]:
        """Produce feed events inside the feed window."""
        return prune_events(derive_events(self.current_rows()), now=now)

    def invalidate(self) -> int:
        """Drop every cached result."""
        return self.cache.invalidate()
