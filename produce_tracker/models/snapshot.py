# produce_tracker/models/snapshot.py

"""Raw page snapshot and stored blob models."""

from dataclasses import dataclass


@dataclass
class Snapshot:
    """Raw price-list markup captured for one calendar date."""

    date: str
    raw_html: str


@dataclass
class StoredBlob:
    """A blob as reported by the snapshot store."""

    path: str
    url: str
    size: int = 0
