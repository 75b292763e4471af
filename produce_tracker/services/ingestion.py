# produce_tracker/services/ingestion.py

"""Scheduled scrape and backfill triggers."""

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from produce_tracker.config.settings import Settings
from produce_tracker.models.partition import BackfillReport, PartitionResult
from produce_tracker.scrapers.produce_scraper import ProduceScraper
from produce_tracker.services.backfill import rebuild_all
from produce_tracker.services.partition_builder import rebuild_month
from produce_tracker.models.snapshot import Snapshot
from produce_tracker.storage.snapshot_store import SnapshotStore, write_snapshot
from produce_tracker.storage.ttl_cache import TTLCache

logger = logging.getLogger("produce_tracker.ingestion")


class UnauthorizedError(PermissionError):
    """Raised when a trigger is invoked without the shared secret."""


@dataclass
class ScrapeResult:
    """Outcome of one scheduled scrape."""

    success: bool
    date: str
    url: str = ""
    size: int = 0
    partition: PartitionResult | None = None
    error: str = ""


def today_in_timezone(
    tz_name: str | None = None, now: datetime | None = None,
) -> str:
    """Return today's ISO date in the named time zone."""
    zone = ZoneInfo(tz_name or Settings.TIMEZONE)
    current = now.astimezone(zone) if now else datetime.now(zone)
    return current.date().isoformat()


class IngestionService:
    """Runs the scrape and backfill jobs behind a shared secret."""

    def __init__(
        self,
        store: SnapshotStore,
        scraper: ProduceScraper | None = None,
        secret: str | None = None,
        cache: TTLCache | None = None,
    ) -> None:
        self.store = store
        self.scraper = scraper or ProduceScraper()
        self._secret = Settings.CRON_SECRET if secret is None else secret
        self.cache = cache

    def _authorize(self, secret: str) -> None:
        if not self._secret or not hmac.compare_digest(
            secret.encode("utf-8"), self._secret.encode("utf-8"),
        ):
            logger.warning("Rejected trigger with invalid secret")
            raise UnauthorizedError("Unauthorized")

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate()

    def run_scrape(
        self, secret: str, now: datetime | None = None,
    ) -> ScrapeResult:
        """Fetch today's page, store it, and rebuild its month.

        A failed fetch writes nothing.  A rebuild failure after the
        snapshot was stored still counts as a successful scrape; the
        error is reported on the result.
        """
        self._authorize(secret)
        date = today_in_timezone(now=now)

        html = self.scraper.fetch_page()
        if html is None:
            return ScrapeResult(
                success=False,
                date=date,
                error="Failed to fetch produce page",
            )

        blob = write_snapshot(self.store, Snapshot(date=date, raw_html=html))
        logger.info("Stored snapshot %s (%d bytes)", blob.path, blob.size)
        result = ScrapeResult(
            success=True, date=date, url=blob.url, size=blob.size,
        )

        try:
            result.partition = rebuild_month(self.store, date[:7])
        except Exception as exc:
            logger.error(
                "Rebuild after scrape failed for %s: %s",
                date[:7],
                exc,
                exc_info=True,
            )
            result.error = f"Partition rebuild failed: {exc}"

        self._invalidate()
        return result

    def run_backfill(self, secret: str) -> BackfillReport:
        """Rebuild every monthly partition."""
        self._authorize(secret)
        report = rebuild_all(self.store)
        self._invalidate()
        return report
