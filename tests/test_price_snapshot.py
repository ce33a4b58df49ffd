# tests/test_price_snapshot.py

"""Tests for the PriceSnapshot dataclass."""

import dataclasses
import json
import unittest

from dye_budget.models.price_snapshot import PriceSnapshot


def _snapshot() -> PriceSnapshot:
    return PriceSnapshot(
        item_id=5762,
        min_price=75000,
        average_price=80125,
        max_price=99000,
        listing_count=4,
        last_update=1760000000000,
        world="Crystal",
        fetched_at="2026-10-18T12:00:00+00:00",
    )


class TestPriceSnapshot(unittest.TestCase):
    """PriceSnapshot unit tests."""

    def test_is_immutable(self) -> None:
        """Snapshots cannot be modified after construction."""
        snap = _snapshot()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            snap.min_price = 1  # type: ignore[misc]

    def test_to_dict_is_json_serialisable(self) -> None:
        """to_dict output survives a JSON dump."""
        data = json.loads(json.dumps(_snapshot().to_dict()))
        self.assertEqual(data["item_id"], 5762)
        self.assertEqual(data["world"], "Crystal")

    def test_from_dict_restores_equal_snapshot(self) -> None:
        """from_dict rebuilds an equal snapshot."""
        snap = _snapshot()
        self.assertEqual(PriceSnapshot.from_dict(snap.to_dict()), snap)

    def test_from_dict_coerces_numeric_strings(self) -> None:
        """Numeric fields stored as strings come back as ints."""
        data = _snapshot().to_dict()
        data["min_price"] = "75000"
        self.assertEqual(PriceSnapshot.from_dict(data).min_price, 75000)

    def test_from_dict_missing_field_raises(self) -> None:
        """A malformed record raises KeyError."""
        data = _snapshot().to_dict()
        del data["world"]
        with self.assertRaises(KeyError):
            PriceSnapshot.from_dict(data)


if __name__ == "__main__":
    unittest.main()
