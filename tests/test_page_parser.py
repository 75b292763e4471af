# tests/test_page_parser.py

"""Tests for the produce price-list page parser."""

import unittest
from pathlib import Path

from produce_tracker.models.produce_item import ProduceUnit
from produce_tracker.scrapers.page_parser import (
    PageParseError,
    parse_produce_html,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _page(*rows: str) -> str:
    """Wrap table rows in a minimal produce page."""
    body = "\n".join(rows)
    return (
        "<html><body><table class='produce'><tbody>"
        f"{body}"
        "</tbody></table></body></html>"
    )


def _row(name: str, price: str, attrs: str = "", origin: str = "") -> str:
    return (
        f"<tr><td><div>{name}</div></td><td>{price}</td>"
        f"<td>{attrs}</td><td>{origin}</td></tr>"
    )


class TestParseFixturePage(unittest.TestCase):
    """Parse a captured-style page end to end."""

    def setUp(self) -> None:
        html = (FIXTURES_DIR / "produce_page.html").read_text()
        self.records = parse_produce_html(html, "2025-01-29")
        self.by_name = {r.name: r for r in self.records}

    def test_valid_rows_only(self) -> None:
        """Rows without a name, price, or four cells are skipped."""
        self.assertEqual(len(self.records), 6)
        self.assertNotIn("Kale", self.by_name)

    def test_all_records_dated(self) -> None:
        """Every record carries the snapshot date."""
        self.assertTrue(all(r.date == "2025-01-29" for r in self.records))

    def test_prices_and_units_valid(self) -> None:
        """Prices are non-negative and units from the enumeration."""
        for record in self.records:
            with self.subTest(name=record.name):
                self.assertGreaterEqual(record.price, 0)
                self.assertIsInstance(record.unit, ProduceUnit)

    def test_name_from_first_div(self) -> None:
        """The name comes from the first div, not sibling notes."""
        self.assertIn("Apples, Honeycrisp", self.by_name)

    def test_carrots_scenario(self) -> None:
        """Locality in the attributes cell marks the row local."""
        carrots = self.by_name["Carrots -"]
        self.assertTrue(carrots.is_organic)
        self.assertTrue(carrots.is_local)
        self.assertEqual(carrots.unit, ProduceUnit.BUNCH)
        self.assertEqual(carrots.price, 1.25)

    def test_unparseable_price(self) -> None:
        """'market price' yields 0 with an explicit unparsed marker."""
        item = self.by_name["Chanterelles"]
        self.assertEqual(item.price, 0.0)
        self.assertEqual(item.unit, ProduceUnit.EACH)
        self.assertFalse(item.price_parsed)

    def test_ipm_and_local_origin(self) -> None:
        """IPM phrase and locally-grown origin are detected."""
        apples = self.by_name["Apples, Honeycrisp"]
        self.assertTrue(apples.is_ipm)
        self.assertTrue(apples.is_local)
        self.assertFalse(apples.is_organic)
        self.assertEqual(apples.unit, ProduceUnit.POUND)

    def test_variants_kept_separate(self) -> None:
        """Organic and conventional variants are distinct records."""
        conventional = self.by_name["Apples, Honeycrisp"]
        organic = self.by_name["Apples, Honeycrisp -"]
        self.assertEqual(conventional.price, 2.40)
        self.assertEqual(organic.price, 3.10)
        self.assertTrue(organic.is_organic)

    def test_colliding_slugs_get_unique_ids(self) -> None:
        """Variants whose slugs collide get distinct ids."""
        ids = [r.id for r in self.records]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(
            self.by_name["Apples, Honeycrisp"].id,
            "2025-01-29-apples-honeycrisp",
        )
        self.assertEqual(
            self.by_name["Apples, Honeycrisp -"].id,
            "2025-01-29-apples-honeycrisp-2",
        )

    def test_hydroponic_ipm_abbreviation(self) -> None:
        """'Hydroponic IPM' sets both flags."""
        lettuce = self.by_name["Lettuce, Boston"]
        self.assertTrue(lettuce.is_hydroponic)
        self.assertTrue(lettuce.is_ipm)


class TestParseEdgeCases(unittest.TestCase):
    """Edge cases of page structure."""

    def test_missing_table_raises(self) -> None:
        """A page without the price table is a parse failure."""
        with self.assertRaises(PageParseError):
            parse_produce_html("<html><body>Down</body></html>", "2025-01-29")

    def test_empty_table(self) -> None:
        """An empty table parses to no records."""
        self.assertEqual(parse_produce_html(_page(), "2025-01-29"), [])

    def test_table_without_tbody(self) -> None:
        """Rows directly under the table are still found."""
        html = (
            "<table class='produce'>"
            + _row("Pears", "$1.50 per pound")
            + "</table>"
        )
        records = parse_produce_html(html, "2025-02-01")
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].name, "Pears")

    def test_name_without_div(self) -> None:
        """A bare name cell falls back to the cell text."""
        html = _page(
            "<tr><td>Figs</td><td>$4.00 each</td><td></td><td></td></tr>"
        )
        records = parse_produce_html(html, "2025-02-01")
        self.assertEqual(records[0].name, "Figs")

    def test_duplicate_rows_merged(self) -> None:
        """An identical repeated row is merged into one record."""
        html = _page(
            _row("Apple", "$2.00 per pound"),
            _row("Apple", "$2.10 per pound"),
        )
        records = parse_produce_html(html, "2025-01-28")
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].price, 2.00)


if __name__ == "__main__":
    unittest.main()
