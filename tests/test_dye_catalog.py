# tests/test_dye_catalog.py

"""Tests for the dye catalog and color distance."""

import json
import math
import tempfile
import unittest
from pathlib import Path

from dye_budget.catalog.dye_catalog import (
    DyeCatalog,
    color_distance,
    hex_to_rgb,
)
from dye_budget.models.dye import Dye


class TestColorDistance(unittest.TestCase):
    """hex_to_rgb and color_distance."""

    def test_hex_to_rgb(self) -> None:
        """Six-digit hex parses to an RGB triple."""
        self.assertEqual(hex_to_rgb("#F9F8F4"), (249, 248, 244))

    def test_short_hex(self) -> None:
        """Three-digit hex expands each digit."""
        self.assertEqual(hex_to_rgb("#fff"), (255, 255, 255))

    def test_invalid_hex_raises(self) -> None:
        """Malformed input raises ValueError."""
        with self.assertRaises(ValueError):
            hex_to_rgb("#12345")

    def test_identical_colors_zero(self) -> None:
        """A color is distance 0 from itself."""
        self.assertEqual(color_distance("#1E1E1E", "#1e1e1e"), 0.0)

    def test_black_white_distance(self) -> None:
        """Black to white spans the RGB cube diagonal."""
        self.assertAlmostEqual(
            color_distance("#000000", "#FFFFFF"), math.sqrt(3 * 255 ** 2)
        )

    def test_symmetric(self) -> None:
        """Distance does not depend on argument order."""
        self.assertEqual(
            color_distance("#E4DFD0", "#F9F8F4"),
            color_distance("#F9F8F4", "#E4DFD0"),
        )


class TestDyeCatalog(unittest.TestCase):
    """Catalog lookups against the bundled data file."""

    @classmethod
    def setUpClass(cls) -> None:
        cls.catalog = DyeCatalog.from_json()

    def test_bundled_catalog_not_empty(self) -> None:
        """The shipped catalog has dyes."""
        self.assertGreater(len(self.catalog), 0)

    def test_item_ids_unique(self) -> None:
        """No two dyes share an item id."""
        ids = [d.item_id for d in self.catalog.get_all()]
        self.assertEqual(len(ids), len(set(ids)))

    def test_get_by_id(self) -> None:
        """Known ids resolve."""
        dye = self.catalog.get_by_id(5762)
        assert dye is not None
        self.assertEqual(dye.name, "Pure White")

    def test_get_by_id_unknown(self) -> None:
        """Unknown ids give None."""
        self.assertIsNone(self.catalog.get_by_id(999999))

    def test_get_by_name_case_insensitive(self) -> None:
        """Exact name match ignores case and whitespace."""
        dye = self.catalog.get_by_name("  jet BLACK ")
        assert dye is not None
        self.assertEqual(dye.item_id, 5763)

    def test_get_by_name_unknown(self) -> None:
        """Unknown names give None."""
        self.assertIsNone(self.catalog.get_by_name("Fake Dye 12345"))

    def test_search_by_name_partial(self) -> None:
        """Substring search matches case-insensitively."""
        results = self.catalog.search_by_name("WHITE")
        self.assertGreater(len(results), 0)
        for dye in results:
            self.assertIn("white", dye.name.lower())

    def test_search_no_match(self) -> None:
        """No matches → empty list."""
        self.assertEqual(self.catalog.search_by_name("xyz123"), [])

    def test_autocomplete_format(self) -> None:
        """Labels include the category, values are item ids."""
        choices = self.catalog.autocomplete("pure white")
        self.assertEqual(choices, [("Pure White (Special)", "5762")])

    def test_autocomplete_limit(self) -> None:
        """Autocomplete honours its limit."""
        self.assertEqual(len(self.catalog.autocomplete("", limit=3)), 3)

    def test_categories_unique(self) -> None:
        """Categories are listed once each."""
        categories = self.catalog.categories()
        self.assertEqual(len(categories), len(set(categories)))
        self.assertIn("Neutral", categories)

    def test_get_all_returns_copy(self) -> None:
        """Mutating the returned list leaves the catalog intact."""
        dyes = self.catalog.get_all()
        dyes.clear()
        self.assertGreater(len(self.catalog.get_all()), 0)


class TestDyeCatalogFromJson(unittest.TestCase):
    """Loading a custom catalog file."""

    def test_loads_custom_file(self) -> None:
        """from_json reads the given path."""
        path = Path(tempfile.mkdtemp()) / "dyes.json"
        path.write_text(
            json.dumps([
                {"item_id": 1, "name": "Test Red", "hex": "#FF0000"},
            ]),
            encoding="utf-8",
        )
        catalog = DyeCatalog.from_json(path)
        self.assertEqual(
            catalog.get_all(),
            [Dye(item_id=1, name="Test Red", hex="#FF0000", category="")],
        )


if __name__ == "__main__":
    unittest.main()
