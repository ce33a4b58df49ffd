# dye_budget/models/price_snapshot.py

"""Market board price snapshot model."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class PriceSnapshot:
    """A single price observation for one item on one world."""

    item_id: int
    min_price: int
    average_price: int
    max_price: int
    listing_count: int
    last_update: int  # upload time at the source, ms since epoch
    world: str
    fetched_at: str  # ISO-8601 UTC time this process fetched it

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict for JSON storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceSnapshot":
        """Rebuild a snapshot from :meth:`to_dict` output."""
        return cls(
            item_id=int(data["item_id"]),
            min_price=int(data["min_price"]),
            average_price=int(data["average_price"]),
            max_price=int(data["max_price"]),
            listing_count=int(data["listing_count"]),
            last_update=int(data["last_update"]),
            world=str(data["world"]),
            fetched_at=str(data["fetched_at"]),
        )
