# tests/test_quick_picks.py

"""Tests for the quick-pick presets."""

import unittest

from dye_budget.catalog.dye_catalog import DyeCatalog
from dye_budget.services.quick_picks import (
    QUICK_PICKS,
    get_quick_pick,
    quick_pick_choices,
)


class TestQuickPicks(unittest.TestCase):
    """Preset table and lookups."""

    def test_ids_unique(self) -> None:
        """Preset ids do not repeat."""
        ids = [p.id for p in QUICK_PICKS]
        self.assertEqual(len(ids), len(set(ids)))

    def test_targets_exist_in_catalog(self) -> None:
        """Every preset points at a catalog dye with the same name."""
        catalog = DyeCatalog.from_json()
        for pick in QUICK_PICKS:
            dye = catalog.get_by_id(pick.target_dye_id)
            assert dye is not None, pick.id
            self.assertEqual(dye.name, pick.name)

    def test_lookup(self) -> None:
        """Known presets resolve."""
        pick = get_quick_pick("jet_black")
        assert pick is not None
        self.assertEqual(pick.target_dye_id, 5763)

    def test_lookup_unknown(self) -> None:
        """Unknown preset ids give None."""
        self.assertIsNone(get_quick_pick("rainbow"))

    def test_choices(self) -> None:
        """One labelled choice per preset."""
        choices = quick_pick_choices()
        self.assertEqual(len(choices), len(QUICK_PICKS))
        self.assertEqual(choices[0][1], "pure_white")
        self.assertIn("Pure White", choices[0][0])


if __name__ == "__main__":
    unittest.main()
