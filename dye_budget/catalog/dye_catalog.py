# dye_budget/catalog/dye_catalog.py

"""Read-only dye catalog with color distance."""

import json
import logging
import math
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from dye_budget.config.settings import Settings
from dye_budget.models.dye import Dye

logger = logging.getLogger("dye_budget.catalog")


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Parse ``#RRGGBB`` (or ``#RGB``) into an RGB triple."""
    value = hex_color.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return (
        int(value[0:2], 16),
        int(value[2:4], 16),
        int(value[4:6], 16),
    )


def color_distance(hex_a: str, hex_b: str) -> float:
    """Euclidean distance between two colors in RGB space."""
    r1, g1, b1 = hex_to_rgb(hex_a)
    r2, g2, b2 = hex_to_rgb(hex_b)
    return math.sqrt((r1 - r2) ** 2 + (g1 - g2) ** 2 + (b1 - b2) ** 2)


class DyeCatalog:
    """In-memory dye list indexed by item id."""

    def __init__(self, dyes: Iterable[Dye]) -> None:
        self._dyes: list[Dye] = list(dyes)
        self._by_id: dict[int, Dye] = {d.item_id: d for d in self._dyes}

    @classmethod
    def from_json(cls, path: Path | None = None) -> "DyeCatalog":
        """Load the catalog from a JSON list of dye objects."""
        source = path or Settings.DYES_PATH
        with open(source, encoding="utf-8") as f:
            raw: list[dict[str, Any]] = json.load(f)
        dyes = [
            Dye(
                item_id=int(d["item_id"]),
                name=str(d["name"]),
                hex=str(d["hex"]),
                category=str(d.get("category", "")),
            )
            for d in raw
        ]
        logger.debug("Loaded %d dyes from %s", len(dyes), source)
        return cls(dyes)

    def get_by_id(self, item_id: int) -> Dye | None:
        return self._by_id.get(item_id)

    def get_all(self) -> list[Dye]:
        return list(self._dyes)

    def get_by_name(self, name: str) -> Dye | None:
        """Exact, case-insensitive name match."""
        wanted = name.strip().lower()
        for dye in self._dyes:
            if dye.name.lower() == wanted:
                return dye
        return None

    def search_by_name(self, query: str) -> list[Dye]:
        """Dyes whose name contains *query*, case-insensitively."""
        wanted = query.strip().lower()
        return [d for d in self._dyes if wanted in d.name.lower()]

    def autocomplete(
        self, query: str, limit: int = Settings.AUTOCOMPLETE_LIMIT,
    ) -> list[tuple[str, str]]:
        """``(label, item id)`` pairs for matching dyes."""
        return [
            (f"{d.name} ({d.category})", str(d.item_id))
            for d in self.search_by_name(query)[:limit]
        ]

    def categories(self) -> list[str]:
        """Distinct categories in catalog order."""
        return list(dict.fromkeys(d.category for d in self._dyes))

    def color_distance(self, hex_a: str, hex_b: str) -> float:
        return color_distance(hex_a, hex_b)

    def __len__(self) -> int:
        return len(self._dyes)
