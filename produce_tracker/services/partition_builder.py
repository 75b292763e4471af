# produce_tracker/services/partition_builder.py

"""Rebuild a month's Parquet partition from its daily snapshots."""

import logging

from produce_tracker.config.settings import Settings
from produce_tracker.models.partition import PartitionResult
from produce_tracker.models.produce_item import ItemRecord
from produce_tracker.scrapers.page_parser import PageParseError, parse_produce_html
from produce_tracker.storage.partition_codec import records_to_parquet
from produce_tracker.storage.snapshot_store import (
    SnapshotStore,
    SnapshotStoreError,
    partition_path,
    read_snapshot,
    snapshot_date,
)

logger = logging.getLogger("produce_tracker.partitions")


def rebuild_month(store: SnapshotStore, month: str) -> PartitionResult:
    """Re-derive the whole partition for *month* and replace it.

    Best effort over readable snapshots: a snapshot that cannot be
    read, decoded or parsed is logged and left out, and only the
    snapshots that contributed are counted in ``days_count``.  A
    failure to list the month's snapshots, or to write the partition,
    propagates.
    """
    blobs = store.list(f"{Settings.SNAPSHOT_PREFIX}{month}")

    records: list[ItemRecord] = []
    days_count = 0
    skipped = 0

    for blob in blobs:
        date = snapshot_date(blob.path)
        if date is None or not date.startswith(month):
            continue

        try:
            snapshot = read_snapshot(store, blob)
            items = parse_produce_html(snapshot.raw_html, snapshot.date)
        except (SnapshotStoreError, PageParseError) as exc:
            skipped += 1
            logger.warning(
                "Skipping snapshot %s: %s", blob.path, exc, exc_info=True,
            )
            continue

        records.extend(items)
        days_count += 1

    data = records_to_parquet(records)
    written = store.write(partition_path(month), data, overwrite=True)

    logger.info(
        "Rebuilt partition %s: %d items from %d days (%d skipped)",
        month,
        len(records),
        days_count,
        skipped,
    )
    return PartitionResult(
        month=month,
        url=written.url,
        item_count=len(records),
        days_count=days_count,
    )
