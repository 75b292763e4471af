# produce_tracker/scrapers/produce_scraper.py

"""Fetcher for the coop's produce price-list page."""

import logging
import time

from curl_cffi import requests as curl_requests

from produce_tracker.config.settings import Settings


class ProduceScraper:
    """Fetch the raw produce page HTML.

    The page is a plain server-rendered table; a browser-impersonating
    curl_cffi session is enough.  Parsing happens later, from the
    stored snapshot, so a fetch only has to return the markup.
    """

    def __init__(self, url: str | None = None) -> None:
        self.logger = logging.getLogger("produce_tracker.scraper")
        self.settings = Settings()
        self.url = url or self.settings.PRODUCE_URL
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def fetch_page(self) -> str | None:
        """Fetch the page, returning its HTML or ``None``.

        Makes up to ``MAX_RETRIES`` attempts; the first HTTP 200 wins.
        """
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self.url,
        }
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    self.url,
                    headers=headers,
                    timeout=self.settings.REQUEST_TIMEOUT,
                )
                if resp.status_code == 200:
                    self.logger.info(
                        "[produce] Fetched %d bytes on attempt %d",
                        len(resp.text),
                        attempt + 1,
                    )
                    return str(resp.text)
                self.logger.warning(
                    "[produce] HTTP %d on attempt %d",
                    resp.status_code,
                    attempt + 1,
                )
            except Exception as exc:
                self.logger.warning(
                    "[produce] Request error on attempt %d: %s",
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(
                    self.settings.REQUEST_DELAY * (attempt + 1)
                )
        self.logger.error(
            "[produce] Failed to fetch %s after %d attempts",
            self.url,
            self.settings.MAX_RETRIES,
        )
        return None
