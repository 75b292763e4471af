# produce_tracker/models/produce_event.py

"""Feed event model for produce arrivals and departures."""

from dataclasses import dataclass, field


@dataclass
class ProduceEventItem:
    """A single item mentioned in a produce feed event."""

    name: str
    display_name: str
    item_hash: str
    url: str


@dataclass
class ProduceEvent:
    """Items that arrived or went out of stock on one date."""

    id: str
    date: str
    new_arrivals: list[ProduceEventItem] = field(
        default_factory=lambda: list[ProduceEventItem]()
    )
    out_of_stock: list[ProduceEventItem] = field(
        default_factory=lambda: list[ProduceEventItem]()
    )
