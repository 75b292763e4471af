# produce_tracker/filters/deduplicator.py

"""Record id collision handling within a single snapshot date."""

import logging
from dataclasses import replace

from produce_tracker.models.produce_item import ItemRecord

logger = logging.getLogger("produce_tracker.filters")


class RecordDeduplicator:
    """Resolve records whose slug-based ids collide on the same date."""

    @staticmethod
    def resolve_ids(
        records: list[ItemRecord],
    ) -> tuple[list[ItemRecord], int]:
        """Make record ids unique per date.

        Collision strategy:
        1. Same id *and* same raw name: a repeated row, merged by
           keeping the first occurrence.
        2. Same id, different raw name (``"Apples!"`` vs
           ``"Apples?"``): both kept, later ones get ``-2``, ``-3``, …
           appended to their id.

        Returns the resolved list and the count of merged rows.
        """
        if not records:
            return [], 0

        names_by_id: dict[str, set[str]] = {}
        used_ids: set[str] = set()
        kept: list[ItemRecord] = []
        merged = 0

        for record in records:
            names = names_by_id.setdefault(record.id, set())

            if record.name in names:
                logger.warning(
                    "Duplicate row for '%s' on %s merged",
                    record.name,
                    record.date,
                )
                merged += 1
                continue

            names.add(record.name)
            if record.id not in used_ids:
                used_ids.add(record.id)
                kept.append(record)
                continue

            suffix = 2
            while f"{record.id}-{suffix}" in used_ids:
                suffix += 1
            new_id = f"{record.id}-{suffix}"
            logger.warning(
                "Id collision for '%s' on %s, reassigned %s",
                record.name,
                record.date,
                new_id,
            )
            used_ids.add(new_id)
            kept.append(replace(record, id=new_id))

        return kept, merged
