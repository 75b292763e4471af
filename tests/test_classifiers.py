# tests/test_classifiers.py

"""Tests for the heuristic cell classifiers."""

import unittest

from produce_tracker.filters.classifiers import (
    classify_unit,
    display_name,
    is_local_origin,
    make_item_id,
    parse_attributes,
    parse_price,
    slugify,
)
from produce_tracker.models.produce_item import ProduceUnit


class TestParsePrice(unittest.TestCase):
    """Price and unit extraction from the price cell."""

    def test_per_pound(self) -> None:
        """'$2.40 per pound' parses as 2.40 per pound."""
        self.assertEqual(
            parse_price("$2.40 per pound"),
            (2.40, ProduceUnit.POUND, True),
        )

    def test_lb_abbreviation(self) -> None:
        """'lb' is treated as per pound."""
        price, unit, parsed = parse_price("$3.10/lb")
        self.assertEqual(price, 3.10)
        self.assertEqual(unit, ProduceUnit.POUND)
        self.assertTrue(parsed)

    def test_bunch(self) -> None:
        """'bunch' maps to per bunch."""
        _, unit, _ = parse_price("$1.25 per bunch")
        self.assertEqual(unit, ProduceUnit.BUNCH)

    def test_each_default(self) -> None:
        """Anything else defaults to each."""
        _, unit, _ = parse_price("$0.69 each")
        self.assertEqual(unit, ProduceUnit.EACH)

    def test_pound_beats_bunch(self) -> None:
        """Pound has priority over bunch."""
        _, unit, _ = parse_price("$4.00 per pound (about a bunch)")
        self.assertEqual(unit, ProduceUnit.POUND)

    def test_unparseable_price(self) -> None:
        """No number yields 0.0, each, and parsed=False."""
        self.assertEqual(
            parse_price("market price"),
            (0.0, ProduceUnit.EACH, False),
        )

    def test_first_number_wins(self) -> None:
        """Only the first decimal number is used."""
        price, _, _ = parse_price("$1.99 each or 3 for $5")
        self.assertEqual(price, 1.99)

    def test_leading_decimal_point(self) -> None:
        """'$.99' parses as 0.99."""
        price, _, parsed = parse_price("$.99 each")
        self.assertEqual(price, 0.99)
        self.assertTrue(parsed)

    def test_thousands_separator(self) -> None:
        """Commas are dropped before parsing."""
        price, _, _ = parse_price("$1,299.00 each")
        self.assertEqual(price, 1299.0)

    def test_price_never_negative(self) -> None:
        """A dash before the number is not a sign."""
        price, _, _ = parse_price("-$2.00 each")
        self.assertGreaterEqual(price, 0)


class TestClassifyUnit(unittest.TestCase):
    """Unit inference, including its known false positive."""

    def test_case_insensitive(self) -> None:
        """Matching ignores case."""
        self.assertEqual(classify_unit("PER POUND"), ProduceUnit.POUND)
        self.assertEqual(classify_unit("Bunch"), ProduceUnit.BUNCH)

    def test_known_false_positive(self) -> None:
        """Any word containing 'lb' reads as per pound."""
        self.assertEqual(classify_unit("album"), ProduceUnit.POUND)


class TestParseAttributes(unittest.TestCase):
    """Growing-practice flags across attributes and name."""

    def test_organic_from_attributes(self) -> None:
        """Organic is read from the attributes cell."""
        flags = parse_attributes("Organic", "Carrots")
        self.assertTrue(flags.is_organic)
        self.assertFalse(flags.is_ipm)

    def test_organic_from_name(self) -> None:
        """Some flags only appear in the name."""
        flags = parse_attributes("", "Apples Organic")
        self.assertTrue(flags.is_organic)

    def test_ipm_full_phrase(self) -> None:
        """The full phrase sets the IPM flag."""
        flags = parse_attributes("Integrated Pest Management", "Pears")
        self.assertTrue(flags.is_ipm)

    def test_ipm_abbreviation_token(self) -> None:
        """'IPM' as a standalone token sets the flag."""
        flags = parse_attributes("Hydroponic IPM", "Lettuce")
        self.assertTrue(flags.is_ipm)
        self.assertTrue(flags.is_hydroponic)

    def test_ipm_in_comma_separated_list(self) -> None:
        """'IPM' followed by punctuation still sets the flag."""
        flags = parse_attributes("Organic, IPM, Waxed", "Apples")
        self.assertTrue(flags.is_ipm)
        self.assertTrue(flags.is_organic)
        self.assertTrue(flags.is_waxed)
        self.assertTrue(parse_attributes("Locally Grown IPM)", "Pears").is_ipm)

    def test_ipm_not_inside_word(self) -> None:
        """'ipm' inside another word does not match."""
        flags = parse_attributes("Shipment delayed", "Figs")
        self.assertFalse(flags.is_ipm)

    def test_waxed(self) -> None:
        """Waxed is detected."""
        self.assertTrue(parse_attributes("Waxed", "Lemons").is_waxed)

    def test_known_false_positive_negation(self) -> None:
        """A negated mention still sets the flag."""
        flags = parse_attributes("", "Not Waxed Lemons")
        self.assertTrue(flags.is_waxed)


class TestIsLocalOrigin(unittest.TestCase):
    """Locality heuristic, including its false negatives."""

    def test_locally_grown(self) -> None:
        """The explicit phrase marks the item local."""
        self.assertTrue(is_local_origin("New York, Locally Grown"))

    def test_distance_marker(self) -> None:
        """The 500-mile marker marks the item local."""
        self.assertTrue(is_local_origin("(within 500 miles)"))

    def test_far_origin(self) -> None:
        """An ordinary origin is not local."""
        self.assertFalse(is_local_origin("California"))

    def test_known_false_negatives(self) -> None:
        """Other distance phrasings are missed."""
        self.assertFalse(is_local_origin("within 300 mi"))
        self.assertFalse(is_local_origin("nearby farm"))


class TestIdentity(unittest.TestCase):
    """Slug, id and display-name helpers."""

    def test_slugify(self) -> None:
        """Runs of non-alphanumerics collapse to one dash."""
        self.assertEqual(slugify("Apples, Honeycrisp"), "apples-honeycrisp")

    def test_slugify_trims_separators(self) -> None:
        """Leading and trailing separators are trimmed."""
        self.assertEqual(slugify("  Carrots - "), "carrots")

    def test_make_item_id(self) -> None:
        """Ids join date and slug."""
        self.assertEqual(
            make_item_id("2025-01-29", "Apple Honeycrisp"),
            "2025-01-29-apple-honeycrisp",
        )

    def test_display_name_strips_marker(self) -> None:
        """Trailing variant markers are stripped."""
        self.assertEqual(display_name("Carrots -"), "Carrots")
        self.assertEqual(display_name("Kale *"), "Kale")

    def test_display_name_keeps_plain_name(self) -> None:
        """A plain name is unchanged."""
        self.assertEqual(display_name("Lemons"), "Lemons")


if __name__ == "__main__":
    unittest.main()
