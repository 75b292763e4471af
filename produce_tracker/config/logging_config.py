# produce_tracker/config/logging_config.py

"""Per-job timestamped logging for produce_tracker.

Every CLI invocation writes its own file under ``logs/``, named after
the job and the launch time (``logs/scrape_20250129_070000.log``), so
the daily scrape and an ad-hoc backfill never interleave.  Older files
for the same job are pruned down to ``Settings.LOG_RETENTION_RUNS``.

The file captures everything from ``produce_tracker.*`` at DEBUG,
including tracebacks for skipped snapshots and failed months.  The
console gets ``Settings.CONSOLE_LOG_LEVEL`` and above.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from produce_tracker.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | "
    "%(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _prune_old_logs(directory: Path, job: str, keep: int) -> int:
    """Delete all but the newest *keep* logs for *job*."""
    runs = sorted(directory.glob(f"{job}_*.log"), reverse=True)
    stale = runs[keep:]
    for path in stale:
        path.unlink(missing_ok=True)
    return len(stale)


def setup_logging(
    job: str = "run", logs_dir: Path | None = None,
) -> Path:
    """Attach file and console handlers to the ``produce_tracker`` logger.

    Only the first call in a process installs handlers; later calls
    return the would-be path without touching the logger.
    """
    directory = logs_dir or Settings.LOGS_DIR
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = directory / f"{job}_{stamp}.log"

    project_logger = logging.getLogger("produce_tracker")
    project_logger.setLevel(logging.DEBUG)
    if project_logger.handlers:
        return log_file

    directory.mkdir(parents=True, exist_ok=True)
    pruned = _prune_old_logs(
        directory, job, max(Settings.LOG_RETENTION_RUNS - 1, 0),
    )

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, _DATE_FORMAT))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(Settings.CONSOLE_LOG_LEVEL)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)

    project_logger.info(
        "Logging %s job to %s (%d old logs pruned)", job, log_file, pruned,
    )
    return log_file
