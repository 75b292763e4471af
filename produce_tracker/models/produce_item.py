# produce_tracker/models/produce_item.py

"""Parsed produce row model for inter-module data flow."""

from dataclasses import dataclass
from enum import Enum


class ProduceUnit(str, Enum):
    """Pricing unit of a produce listing."""

    POUND = "pound"
    BUNCH = "bunch"
    EACH = "each"


@dataclass
class ItemRecord:
    """One parsed price-list row for one date.

    ``name`` is the verbatim label from the page and is the join key
    across dates, so organic and conventional listings of the same
    produce stay separate.  ``price_parsed`` is ``False`` when the price
    cell held no number; ``price`` is then ``0.0`` and must not be read
    as a real price.
    """

    id: str
    date: str
    name: str
    price: float
    unit: ProduceUnit = ProduceUnit.EACH
    is_organic: bool = False
    is_ipm: bool = False
    is_waxed: bool = False
    is_local: bool = False
    is_hydroponic: bool = False
    origin: str = ""
    price_parsed: bool = True
