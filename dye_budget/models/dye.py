# dye_budget/models/dye.py

"""Dye catalog entry model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Dye:
    """A dye from the catalog, keyed by its market item id."""

    item_id: int
    name: str
    hex: str
    category: str = ""
