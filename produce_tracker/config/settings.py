# produce_tracker/config/settings.py

"""Central configuration for the produce price tracker."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the produce price tracker."""

    # --- Scraping ---
    PRODUCE_URL: str = "https://www.foodcoop.com/produce"
    REQUEST_DELAY: float = 2.0          # Seconds between retry attempts
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Upstream page fetch attempts

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Scheduling ---
    TIMEZONE: str = "America/New_York"  # Resolves "today" for snapshots
    CRON_SECRET: str = os.getenv("CRON_SECRET", "")

    # --- Storage layout ---
    SNAPSHOT_PREFIX: str = "produce/"
    PARTITION_PREFIX: str = "produce-data/"

    # --- Classification ---
    LOCAL_DISTANCE_MILES: int = 500

    # --- Analytics windows (days) ---
    WEEK_WINDOW_DAYS: int = 7
    MONTH_WINDOW_DAYS: int = 30
    UNAVAILABLE_LOOKBACK_DAYS: int = 30
    HISTORY_DAYS: int = 30
    ANALYTICS_CACHE_TTL: float = 300.0  # Query surface cache (secs)

    # --- Feed ---
    FEED_WINDOW_DAYS: int = 45
    EVENT_LOCAL_HOUR: int = 7

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = Path(__file__).resolve().parent / "selectors.json"
    DATA_DIR: Path = Path(
        os.getenv("PRODUCE_DATA_DIR", str(BASE_DIR / "data"))
    )
    STORE_DIR: Path = DATA_DIR / "store"
    CHARTS_DIR: Path = DATA_DIR / "charts"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv("PRODUCE_LOG_LEVEL", "WARNING").upper()
    LOG_RETENTION_RUNS: int = 30        # Log files kept per CLI job
