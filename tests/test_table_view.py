# tests/test_table_view.py

"""Tests for price table sorting, searching and change figures."""

import unittest

from produce_tracker.models.analytics_row import AnalyticsRow
from produce_tracker.services.table_view import (
    SORT_FIELDS,
    filter_rows,
    percent_change,
    price_change,
    sort_rows,
)


def _row(name: str, price: float, **kwargs) -> AnalyticsRow:
    return AnalyticsRow(
        name=name,
        display_name=name,
        price=price,
        unit="per pound",
        **kwargs,
    )


def _names(rows: list[AnalyticsRow]) -> list[str]:
    return [r.name for r in rows]


def _sample() -> list[AnalyticsRow]:
    """Five rows, listed out of order on purpose."""
    return [
        _row(
            "Endive", 3.00, origin="Belgium",
            is_unavailable=True, unavailable_since_date="2025-01-20",
            prev_day_price=1.00,
        ),
        _row(
            "Cherry", 6.00, origin="Washington",
            prev_week_price=4.00, prev_month_price=6.00,
        ),
        _row(
            "Apple", 2.40, origin="New York",
            prev_day_price=2.00, prev_week_price=2.00, prev_month_price=3.00,
        ),
        _row(
            "Durian", 0.0, origin="Thailand", price_parsed=False,
            prev_day_price=10.00, prev_week_price=10.00,
            prev_month_price=10.00,
        ),
        _row(
            "Banana", 0.50, origin="Ecuador",
            prev_day_price=0.40, prev_week_price=0.25,
        ),
    ]


class TestChangeFigures(unittest.TestCase):
    """Absolute and percent change against a baseline."""

    def test_live_row(self) -> None:
        """A listed, parsed price is compared to its baseline."""
        row = _row("Apple", 2.50, prev_day_price=2.00)
        self.assertAlmostEqual(price_change(row, 2.00), 0.50)
        self.assertAlmostEqual(percent_change(row, 2.00), 25.0)

    def test_missing_baseline(self) -> None:
        """No baseline means no change, not zero."""
        row = _row("Apple", 2.50)
        self.assertIsNone(price_change(row, None))
        self.assertIsNone(percent_change(row, None))

    def test_zero_baseline(self) -> None:
        """A zero baseline has an absolute change but no percent."""
        row = _row("Apple", 2.50)
        self.assertAlmostEqual(price_change(row, 0.0), 2.50)
        self.assertIsNone(percent_change(row, 0.0))

    def test_unparsed_price(self) -> None:
        """An unparsed price's placeholder zero is never compared."""
        row = _row("Chanterelles", 0.0, price_parsed=False)
        self.assertIsNone(price_change(row, 20.0))
        self.assertIsNone(percent_change(row, 20.0))

    def test_unavailable_row(self) -> None:
        """A departed item's last price is not a live quote."""
        row = _row("Kale", 3.00, is_unavailable=True)
        self.assertIsNone(price_change(row, 1.00))
        self.assertIsNone(percent_change(row, 1.00))


class TestSortRows(unittest.TestCase):
    """Ordering the table by each column."""

    def test_default_is_name(self) -> None:
        """Without a field, rows sort by display name."""
        self.assertEqual(
            _names(sort_rows(_sample())),
            ["Apple", "Banana", "Cherry", "Durian", "Endive"],
        )

    def test_name_descending(self) -> None:
        self.assertEqual(
            _names(sort_rows(_sample(), "name", descending=True)),
            ["Endive", "Durian", "Cherry", "Banana", "Apple"],
        )

    def test_name_ignores_case(self) -> None:
        """Lower-case names sort among the others."""
        rows = [_row("banana", 1.0), _row("Apple", 1.0), _row("Cherry", 1.0)]
        self.assertEqual(
            _names(sort_rows(rows)), ["Apple", "banana", "Cherry"],
        )

    def test_price_unparsed_last(self) -> None:
        """Unparsed prices sort after every real price both ways."""
        self.assertEqual(
            _names(sort_rows(_sample(), "price")),
            ["Banana", "Apple", "Endive", "Cherry", "Durian"],
        )
        self.assertEqual(
            _names(sort_rows(_sample(), "price", descending=True)),
            ["Cherry", "Endive", "Apple", "Banana", "Durian"],
        )

    def test_day_change_missing_last(self) -> None:
        """Rows without a day change trail in name order both ways."""
        self.assertEqual(
            _names(sort_rows(_sample(), "day_change")),
            ["Banana", "Apple", "Cherry", "Durian", "Endive"],
        )
        self.assertEqual(
            _names(sort_rows(_sample(), "day_change", descending=True)),
            ["Apple", "Banana", "Cherry", "Durian", "Endive"],
        )

    def test_day_change_pct(self) -> None:
        """Percent ranks Banana's smaller rise above Apple's."""
        self.assertEqual(
            _names(sort_rows(_sample(), "day_change_pct", descending=True)),
            ["Banana", "Apple", "Cherry", "Durian", "Endive"],
        )

    def test_week_change_by_percent(self) -> None:
        self.assertEqual(
            _names(sort_rows(_sample(), "week_change")),
            ["Apple", "Cherry", "Banana", "Durian", "Endive"],
        )

    def test_month_change_missing_last(self) -> None:
        """Banana has no month baseline and trails the priced rows."""
        self.assertEqual(
            _names(sort_rows(_sample(), "month_change")),
            ["Apple", "Cherry", "Banana", "Durian", "Endive"],
        )
        self.assertEqual(
            _names(sort_rows(_sample(), "month_change", descending=True)),
            ["Cherry", "Apple", "Banana", "Durian", "Endive"],
        )

    def test_ties_keep_name_order(self) -> None:
        """Equal keys stay in name order even when descending."""
        rows = [_row("Pear", 1.0), _row("Fig", 1.0), _row("Kiwi", 2.0)]
        self.assertEqual(
            _names(sort_rows(rows, "price", descending=True)),
            ["Kiwi", "Fig", "Pear"],
        )

    def test_every_field_accepted(self) -> None:
        for field in SORT_FIELDS:
            with self.subTest(field=field):
                self.assertEqual(len(sort_rows(_sample(), field)), 5)

    def test_unknown_field(self) -> None:
        """An unknown field is rejected with the valid choices."""
        with self.assertRaises(ValueError) as ctx:
            sort_rows(_sample(), "origin")
        self.assertIn("day_change_pct", str(ctx.exception))

    def test_input_untouched(self) -> None:
        """Sorting returns a new list."""
        rows = _sample()
        before = _names(rows)
        sort_rows(rows, "price")
        self.assertEqual(_names(rows), before)


class TestFilterRows(unittest.TestCase):
    """Searching by name and origin."""

    def test_matches_name(self) -> None:
        self.assertEqual(_names(filter_rows(_sample(), "ana")), ["Banana"])

    def test_matches_origin_case_insensitive(self) -> None:
        """Origin matches ignore case."""
        self.assertEqual(
            _names(filter_rows(_sample(), "NEW york")), ["Apple"],
        )

    def test_matches_name_or_origin(self) -> None:
        """Cherry matches by name, Apple by New York; order is kept."""
        self.assertEqual(
            _names(filter_rows(_sample(), "y")), ["Cherry", "Apple"],
        )

    def test_empty_query_keeps_all(self) -> None:
        """None, empty and blank queries keep every row."""
        for query in (None, "", "   "):
            with self.subTest(query=query):
                self.assertEqual(len(filter_rows(_sample(), query)), 5)

    def test_no_match(self) -> None:
        self.assertEqual(filter_rows(_sample(), "rambutan"), [])


if __name__ == "__main__":
    unittest.main()
