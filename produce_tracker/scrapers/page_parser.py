# produce_tracker/scrapers/page_parser.py

"""Parse a produce price-list page into item records."""

import json
import logging
from functools import lru_cache
from typing import Any

from bs4 import BeautifulSoup, Tag

from produce_tracker.config.settings import Settings
from produce_tracker.filters.classifiers import (
    is_local_origin,
    make_item_id,
    parse_attributes,
    parse_price,
)
from produce_tracker.filters.deduplicator import RecordDeduplicator
from produce_tracker.models.produce_item import ItemRecord

logger = logging.getLogger("produce_tracker.parser")

_MIN_CELLS = 4


class PageParseError(ValueError):
    """Raised when a page has no recognisable price-list table."""


@lru_cache(maxsize=1)
def load_selectors() -> dict[str, str]:
    """Load the price-list CSS selectors from selectors.json."""
    with open(Settings.SELECTORS_PATH, encoding="utf-8") as f:
        all_selectors: dict[str, Any] = json.load(f)
    result: dict[str, str] = all_selectors.get("produce", {})
    return result


def _cell_text(cell: Tag) -> str:
    return cell.get_text(" ", strip=True)


def _name_text(cell: Tag, name_selector: str) -> str:
    """Return the name from the cell's first ``div``, else the cell text."""
    inner = cell.select_one(name_selector)
    if inner is not None:
        return inner.get_text(" ", strip=True)
    return _cell_text(cell)


def parse_row(
    cells: list[Tag],
    date: str,
    name_selector: str = "div",
) -> ItemRecord | None:
    """Build one record from a row's cells, or ``None`` if unusable.

    A row needs four cells, a non-empty name and a non-empty price
    cell.  Locality is read from the origin cell and also from the
    attributes cell, where the page sometimes puts "Locally Grown".
    """
    if len(cells) < _MIN_CELLS:
        return None

    name = _name_text(cells[0], name_selector)
    price_cell = _cell_text(cells[1])
    attrs_cell = _cell_text(cells[2])
    origin = _cell_text(cells[3])

    if not name or not price_cell:
        return None

    price, unit, parsed = parse_price(price_cell)
    attrs = parse_attributes(attrs_cell, name)

    return ItemRecord(
        id=make_item_id(date, name),
        date=date,
        name=name,
        price=price,
        unit=unit,
        is_organic=attrs.is_organic,
        is_ipm=attrs.is_ipm,
        is_waxed=attrs.is_waxed,
        is_local=is_local_origin(origin) or is_local_origin(attrs_cell),
        is_hydroponic=attrs.is_hydroponic,
        origin=origin,
        price_parsed=parsed,
    )


def parse_produce_html(html: str, date: str) -> list[ItemRecord]:
    """Parse one day's price-list markup into item records.

    Malformed rows are skipped without error.  Raises
    :class:`PageParseError` if the page has no price-list table.
    """
    selectors = load_selectors()
    soup = BeautifulSoup(html, "lxml")

    if soup.select_one(selectors["table"]) is None:
        raise PageParseError(f"No produce table found for {date}")

    records: list[ItemRecord] = []
    skipped = 0
    for row in soup.select(selectors["row"]):
        cells = row.find_all(selectors["cell"], recursive=False)
        record = parse_row(cells, date, selectors["name"])
        if record is None:
            skipped += 1
            logger.debug(
                "Skipped malformed row on %s: %r",
                date,
                row.get_text(" ", strip=True)[:80],
            )
            continue
        if not record.price_parsed:
            logger.debug(
                "Unparsed price for '%s' on %s", record.name, date,
            )
        records.append(record)

    records, merged = RecordDeduplicator.resolve_ids(records)

    logger.info(
        "Parsed %d items for %s (%d rows skipped, %d merged)",
        len(records),
        date,
        skipped,
        merged,
    )
    return records
