# produce_tracker/filters/classifiers.py

"""Heuristic classifiers for produce price-list cells.

Every classifier here is a plain substring or regex test over the cell
text, not a semantic parse.  The known misclassifications are listed
on each function so the heuristics can be tightened in one place.
"""

import re
from dataclasses import dataclass

from produce_tracker.config.settings import Settings
from produce_tracker.models.produce_item import ProduceUnit

# First decimal number: "2.40", ".99", "3"
_PRICE_RE = re.compile(r"\d*\.?\d+")

# "ipm" starting a word and ending at a word boundary: "IPM," and "IPM)"
# match, "shipment" does not
_IPM_TOKEN_RE = re.compile(r"(?:^|\s)ipm\b")

_SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")

# Trailing variant markers, e.g. "Carrots -" or "Kale *"
_TRAILING_MARKER_RE = re.compile(r"[\s\-–—*†]+$")


@dataclass
class AttributeFlags:
    """Growing-practice flags detected on a row."""

    is_organic: bool = False
    is_ipm: bool = False
    is_waxed: bool = False
    is_hydroponic: bool = False


def classify_unit(text: str) -> ProduceUnit:
    """Infer the pricing unit from a price cell.

    Priority: ``pound``/``lb`` → per-pound, ``bunch`` → per-bunch,
    anything else → each.

    Known false positive: any word containing ``lb`` (``"album"``)
    reads as per-pound.
    """
    lower = text.lower()
    if "pound" in lower or "lb" in lower:
        return ProduceUnit.POUND
    if "bunch" in lower:
        return ProduceUnit.BUNCH
    return ProduceUnit.EACH


def parse_price(text: str) -> tuple[float, ProduceUnit, bool]:
    """Extract ``(price, unit, parsed)`` from a price cell.

    The first decimal number wins (``"$2.40 / lb"`` → ``2.40``).  A
    cell with no number (``"market price"``) yields ``0.0`` with
    ``parsed=False``.  Thousands separators are dropped first.
    """
    unit = classify_unit(text)
    match = _PRICE_RE.search(text.replace(",", ""))
    if not match:
        return 0.0, unit, False
    return float(match.group(0)), unit, True


def parse_attributes(attrs_cell: str, raw_name: str) -> AttributeFlags:
    """Detect growing-practice flags across attributes and name.

    Some flags only appear in the name text (``"Apples Organic"``), so
    both cells are searched together.

    Known false positive: a name that merely mentions a practice
    (``"Not Waxed Lemons"``) is flagged.
    Known false negative: ``"IPM"`` directly after punctuation, as in
    ``"Grown (IPM)"``, is missed.
    """
    combined = f"{attrs_cell} {raw_name}".lower()
    return AttributeFlags(
        is_organic="organic" in combined,
        is_ipm=(
            "integrated pest management" in combined
            or bool(_IPM_TOKEN_RE.search(combined))
        ),
        is_waxed="waxed" in combined,
        is_hydroponic="hydroponic" in combined,
    )


def is_local_origin(origin: str) -> bool:
    """Return True if the text signals a nearby origin.

    Matches the literal phrase ``locally grown`` or the distance marker
    ``"500 miles"`` (threshold from settings).

    Known false negatives: distances written any other way
    (``"300 mi"``, ``"within 200 miles"``) or phrases like ``"nearby"``.
    """
    lower = origin.lower()
    distance_marker = f"{Settings.LOCAL_DISTANCE_MILES} miles"
    return "locally grown" in lower or distance_marker in lower


def slugify(name: str) -> str:
    """Lowercase and collapse every non-alphanumeric run to ``-``."""
    return _SLUG_SEPARATOR_RE.sub("-", name.lower()).strip("-")


def make_item_id(date: str, name: str) -> str:
    """Build the per-date record id, e.g. ``2025-01-29-apple-honeycrisp``."""
    return f"{date}-{slugify(name)}"


def display_name(raw_name: str) -> str:
    """Strip trailing variant markers for presentation and sorting."""
    cleaned = _TRAILING_MARKER_RE.sub("", raw_name)
    return cleaned or raw_name.strip()
