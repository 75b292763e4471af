# produce_tracker/storage/snapshot_store.py

"""Blob storage for daily page snapshots and monthly partitions.

Paths encode their content: ``produce/<YYYY-MM-DD>.html`` for raw
snapshots and ``produce-data/<YYYY-MM>.parquet`` for partitions.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

from produce_tracker.config.settings import Settings
from produce_tracker.models.snapshot import Snapshot, StoredBlob

logger = logging.getLogger("produce_tracker.store")

_SNAPSHOT_RE = re.compile(r"^produce/(\d{4}-\d{2}-\d{2})\.html$")
_PARTITION_RE = re.compile(r"^produce-data/(\d{4}-\d{2})\.parquet$")


class SnapshotStoreError(OSError):
    """Raised when the store cannot list, read, or write a blob."""


class SnapshotStore(Protocol):
    """Minimal blob store interface used by the pipeline."""

    def list(self, prefix: str) -> list[StoredBlob]:
        ...

    def read(self, url: str) -> bytes:
        ...

    def write(
        self, path: str, data: bytes, overwrite: bool = True,
    ) -> StoredBlob:
        ...


def snapshot_path(date: str) -> str:
    """Return the store path of the snapshot for *date*."""
    return f"{Settings.SNAPSHOT_PREFIX}{date}.html"


def partition_path(month: str) -> str:
    """Return the store path of the partition for *month*."""
    return f"{Settings.PARTITION_PREFIX}{month}.parquet"


def snapshot_date(path: str) -> str | None:
    """Extract the ISO date from a snapshot path, if it is one."""
    match = _SNAPSHOT_RE.match(path)
    return match.group(1) if match else None


def partition_month(path: str) -> str | None:
    """Extract the ``YYYY-MM`` month from a partition path, if it is one."""
    match = _PARTITION_RE.match(path)
    return match.group(1) if match else None


def write_snapshot(store: SnapshotStore, snapshot: Snapshot) -> StoredBlob:
    """Store *snapshot* under its date, replacing any earlier capture."""
    return store.write(
        snapshot_path(snapshot.date),
        snapshot.raw_html.encode("utf-8"),
        overwrite=True,
    )


def read_snapshot(store: SnapshotStore, blob: StoredBlob) -> Snapshot:
    """Load the snapshot stored at *blob*.

    Undecodable bytes are replaced rather than rejected; the parser
    only needs the table markup.
    """
    date = snapshot_date(blob.path)
    if date is None:
        raise SnapshotStoreError(f"Not a snapshot path: {blob.path}")
    raw = store.read(blob.url)
    return Snapshot(date=date, raw_html=raw.decode("utf-8", errors="replace"))


class LocalSnapshotStore:
    """Filesystem-backed snapshot store.

    Blob URLs are ``file://`` URIs.  Every write lands in a temporary
    file beside the target and is moved into place with a single
    :func:`os.replace`, so a reader sees either the old or the new
    blob, never a partial one.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root: Path = (root or Settings.STORE_DIR).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.debug("LocalSnapshotStore opened at %s", self.root)

    def _blob(self, target: Path) -> StoredBlob:
        return StoredBlob(
            path=target.relative_to(self.root).as_posix(),
            url=target.as_uri(),
            size=target.stat().st_size,
        )

    def list(self, prefix: str) -> list[StoredBlob]:
        """List blobs whose path starts with *prefix*, sorted by path."""
        try:
            blobs = [
                self._blob(p)
                for p in self.root.rglob("*")
                if p.is_file()
                and not p.name.startswith(".")
                and p.relative_to(self.root).as_posix().startswith(prefix)
            ]
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to list '{prefix}': {exc}"
            ) from exc
        blobs.sort(key=lambda b: b.path)
        return blobs

    def read(self, url: str) -> bytes:
        """Read a blob by the URL returned from :meth:`list`."""
        parsed = urlparse(url)
        if parsed.scheme != "file":
            raise SnapshotStoreError(f"Unsupported blob URL: {url}")
        target = Path(unquote(parsed.path))
        try:
            return target.read_bytes()
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to read {url}: {exc}"
            ) from exc

    def write(
        self, path: str, data: bytes, overwrite: bool = True,
    ) -> StoredBlob:
        """Write *data* at *path*, atomically replacing any prior blob."""
        target = self.root / path
        if target.exists() and not overwrite:
            raise SnapshotStoreError(f"Blob already exists: {path}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=".tmp-",
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise SnapshotStoreError(
                f"Failed to write {path}: {exc}"
            ) from exc

        logger.info("Wrote %d bytes to %s", len(data), path)
        return self._blob(target)
