# produce_tracker/services/backfill.py

"""Rebuild every monthly partition from the stored snapshots."""

import logging

from produce_tracker.config.settings import Settings
from produce_tracker.models.partition import BackfillReport, MonthFailure
from produce_tracker.services.partition_builder import rebuild_month
from produce_tracker.storage.snapshot_store import SnapshotStore, snapshot_date

logger = logging.getLogger("produce_tracker.backfill")


def snapshot_months(store: SnapshotStore) -> list[str]:
    """Return the distinct ``YYYY-MM`` months with snapshots, ascending."""
    months: set[str] = set()
    for blob in store.list(Settings.SNAPSHOT_PREFIX):
        date = snapshot_date(blob.path)
        if date:
            months.add(date[:7])
    return sorted(months)


def rebuild_all(store: SnapshotStore) -> BackfillReport:
    """Rebuild every month sequentially, collecting failures.

    One month failing never stops the remaining months; its error is
    recorded in the report alongside the successful results.
    """
    months = snapshot_months(store)
    report = BackfillReport()
    logger.info("Backfill starting for %d months", len(months))

    for month in months:
        try:
            result = rebuild_month(store, month)
        except Exception as exc:
            logger.error(
                "Backfill failed for %s: %s", month, exc, exc_info=True,
            )
            report.failures.append(
                MonthFailure(month=month, error=str(exc))
            )
            continue
        report.results.append(result)

    logger.info(
        "Backfill complete: %d months rebuilt, %d failed, %d items",
        len(report.results),
        len(report.failures),
        report.total_items,
    )
    return report
