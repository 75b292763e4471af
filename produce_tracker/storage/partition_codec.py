# produce_tracker/storage/partition_codec.py

"""Parquet encoding of monthly produce partitions."""

import io
import logging

import pyarrow as pa
import pyarrow.parquet as pq

from produce_tracker.models.produce_item import ItemRecord, ProduceUnit

logger = logging.getLogger("produce_tracker.partitions")

PRODUCE_SCHEMA = pa.schema([
    ("id", pa.string()),
    ("date", pa.string()),
    ("name", pa.string()),
    ("price", pa.float64()),
    ("unit", pa.string()),
    ("is_organic", pa.bool_()),
    ("is_ipm", pa.bool_()),
    ("is_waxed", pa.bool_()),
    ("is_local", pa.bool_()),
    ("is_hydroponic", pa.bool_()),
    ("origin", pa.string()),
    ("price_parsed", pa.bool_()),
])


def records_to_table(records: list[ItemRecord]) -> pa.Table:
    """Build an Arrow table, rows ordered by ``(date, id)``."""
    ordered = sorted(records, key=lambda r: (r.date, r.id))
    rows = [
        {
            "id": r.id,
            "date": r.date,
            "name": r.name,
            "price": float(r.price),
            "unit": ProduceUnit(r.unit).value,
            "is_organic": r.is_organic,
            "is_ipm": r.is_ipm,
            "is_waxed": r.is_waxed,
            "is_local": r.is_local,
            "is_hydroponic": r.is_hydroponic,
            "origin": r.origin,
            "price_parsed": r.price_parsed,
        }
        for r in ordered
    ]
    return pa.Table.from_pylist(rows, schema=PRODUCE_SCHEMA)


def records_to_parquet(records: list[ItemRecord]) -> bytes:
    """Encode records as a Parquet file.

    Rows are sorted and no wall-clock metadata is written, so the same
    records always encode to the same bytes.
    """
    table = records_to_table(records)
    sink = io.BytesIO()
    pq.write_table(table, sink, compression="zstd")
    data = sink.getvalue()
    logger.debug(
        "Encoded %d records into %d bytes", table.num_rows, len(data),
    )
    return data


def parquet_to_table(data: bytes) -> pa.Table:
    """Decode a Parquet partition, conforming it to the produce schema.

    Partitions written before ``price_parsed`` existed get the column
    back-filled as ``price > 0``.
    """
    table = pq.read_table(io.BytesIO(data))
    if "price_parsed" not in table.column_names:
        parsed = [
            p is not None and p > 0
            for p in table.column("price").to_pylist()
        ]
        table = table.append_column(
            "price_parsed", pa.array(parsed, type=pa.bool_()),
        )
    return table.select(PRODUCE_SCHEMA.names).cast(PRODUCE_SCHEMA)


def table_to_records(table: pa.Table) -> list[ItemRecord]:
    """Convert a produce table back into item records."""
    return [
        ItemRecord(
            id=row["id"],
            date=row["date"],
            name=row["name"],
            price=row["price"],
            unit=ProduceUnit(row["unit"]),
            is_organic=row["is_organic"],
            is_ipm=row["is_ipm"],
            is_waxed=row["is_waxed"],
            is_local=row["is_local"],
            is_hydroponic=row["is_hydroponic"],
            origin=row["origin"],
            price_parsed=row["price_parsed"],
        )
        for row in table.to_pylist()
    ]

