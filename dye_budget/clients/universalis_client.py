# dye_budget/clients/universalis_client.py

"""Client for market board prices served by the Universalis proxy."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from dye_budget.clients.price_source import PriceSource, ProxyResponse
from dye_budget.config.settings import Settings
from dye_budget.models.errors import (
    MarketPriceError,
    MarketTimeoutError,
    RemoteError,
    TooManyItemsError,
    UnconfiguredError,
)
from dye_budget.models.price_snapshot import PriceSnapshot

logger = logging.getLogger("dye_budget.universalis")

# Raised while reading a decoded body that is not shaped as expected
_SHAPE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


@dataclass(frozen=True)
class World:
    """A game world as listed by Universalis."""

    id: int
    name: str


@dataclass(frozen=True)
class DataCenter:
    """A data center and the ids of the worlds it hosts."""

    name: str
    region: str
    worlds: tuple[int, ...]


@dataclass(frozen=True)
class Choice:
    """An autocomplete choice: display label plus submitted value."""

    name: str
    value: str


def _error_message(resp: ProxyResponse) -> str:
    """Best-effort error text from a failed response body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message"):
            if body.get(key):
                return str(body[key])
    return f"Universalis API error: {resp.status_code}"


def _malformed(path: str, exc: Exception) -> MarketPriceError:
    """Typed error for a 200 response whose body has the wrong shape."""
    logger.error("Unexpected Universalis response for %s: %r", path, exc)
    return MarketPriceError(500, "Unexpected Universalis response shape")


def _weighted_average(listings: list[dict[str, Any]], fallback: int) -> int:
    """Quantity-weighted mean unit price, rounded half up."""
    total_value = sum(
        int(lst["pricePerUnit"]) * int(lst["quantity"]) for lst in listings
    )
    total_quantity = sum(int(lst["quantity"]) for lst in listings)
    if total_quantity <= 0:
        return fallback
    return (2 * total_value + total_quantity) // (2 * total_quantity)


def parse_aggregated(
    payload: dict[str, Any], world: str, fetched_at: str,
) -> dict[int, PriceSnapshot]:
    """Convert an aggregated response into snapshots.

    Items without NQ listings are left out of the result.
    """
    prices: dict[int, PriceSnapshot] = {}
    results: dict[str, Any] = payload.get("results") or {}
    for item_key, data in results.items():
        nq = data.get("nq") if isinstance(data, dict) else None
        listings = (nq or {}).get("listings") or []
        if not listings:
            continue
        item_id = int(item_key)
        min_price = int(nq["minPrice"])
        prices[item_id] = PriceSnapshot(
            item_id=item_id,
            min_price=min_price,
            average_price=_weighted_average(listings, min_price),
            max_price=int(nq["maxPrice"]),
            listing_count=len(listings),
            last_update=int(data.get("lastUploadTime") or 0),
            world=world,
            fetched_at=fetched_at,
        )
    return prices


class UniversalisClient:
    """Fetches prices and world metadata through a :class:`PriceSource`.

    Every failure surfaces as a :class:`MarketPriceError` subclass.  No
    retries happen here.
    """

    def __init__(
        self,
        source: PriceSource | None,
        timeout_ms: int | None = None,
        max_batch_size: int | None = None,
    ) -> None:
        self._source = source
        self.timeout_ms: int = (
            timeout_ms if timeout_ms is not None else Settings.REQUEST_TIMEOUT_MS
        )
        self.max_batch_size: int = (
            max_batch_size
            if max_batch_size is not None
            else Settings.MAX_BATCH_SIZE
        )

    @property
    def is_enabled(self) -> bool:
        """True when a transport is configured."""
        return self._source is not None

    async def close(self) -> None:
        """Release the underlying transport."""
        if self._source is not None:
            await self._source.close()

    # ── Core request ─────────────────────────────────────

    async def _request(self, path: str) -> Any:
        """GET *path* and decode the JSON body, normalising errors."""
        if self._source is None:
            raise UnconfiguredError()

        try:
            resp = await asyncio.wait_for(
                self._source.send(path),
                timeout=self.timeout_ms / 1000,
            )
            if not resp.ok:
                raise RemoteError(resp.status_code, _error_message(resp))
            return resp.json()
        except MarketPriceError:
            raise
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Universalis request timed out after %dms: %s",
                self.timeout_ms,
                path,
            )
            raise MarketTimeoutError() from exc
        except Exception as exc:
            logger.error(
                "Universalis request failed via %s: %s",
                self._source.name,
                path,
                exc_info=True,
            )
            raise MarketPriceError(
                500, "Failed to communicate with Universalis API",
            ) from exc

    # ── Prices ───────────────────────────────────────────

    async def fetch_prices(
        self, world: str, item_ids: list[int],
    ) -> dict[int, PriceSnapshot]:
        """Fetch one batch of aggregated prices.

        Raises :class:`TooManyItemsError` without touching the network
        when the batch exceeds ``max_batch_size``.
        """
        if not item_ids:
            return {}
        if len(item_ids) > self.max_batch_size:
            raise TooManyItemsError(len(item_ids), self.max_batch_size)

        ids = ",".join(str(i) for i in item_ids)
        path = f"/api/v2/aggregated/{quote(world, safe='')}/{ids}"
        payload = await self._request(path)

        fetched_at = datetime.now(timezone.utc).isoformat()
        try:
            if not isinstance(payload, dict):
                raise TypeError(f"expected object, got {type(payload).__name__}")
            prices = parse_aggregated(payload, world, fetched_at)
        except _SHAPE_ERRORS as exc:
            raise _malformed(path, exc) from exc
        logger.debug(
            "Fetched %d/%d prices for %s", len(prices), len(item_ids), world,
        )
        return prices

    async def fetch_prices_batched(
        self, world: str, item_ids: list[int],
    ) -> dict[int, PriceSnapshot]:
        """Fetch any number of items in ceiling-sized chunks, in order."""
        result: dict[int, PriceSnapshot] = {}
        for start in range(0, len(item_ids), self.max_batch_size):
            batch = item_ids[start:start + self.max_batch_size]
            result.update(await self.fetch_prices(world, batch))
        return result

    # ── Worlds & data centers ────────────────────────────

    async def fetch_worlds(self) -> list[World]:
        """All worlds known to Universalis."""
        path = "/api/v2/worlds"
        payload = await self._request(path)
        try:
            return [
                World(id=int(w["id"]), name=str(w["name"])) for w in payload
            ]
        except _SHAPE_ERRORS as exc:
            raise _malformed(path, exc) from exc

    async def fetch_data_centers(self) -> list[DataCenter]:
        """All data centers known to Universalis."""
        path = "/api/v2/data-centers"
        payload = await self._request(path)
        try:
            return [
                DataCenter(
                    name=str(dc["name"]),
                    region=str(dc.get("region", "")),
                    worlds=tuple(int(w) for w in dc.get("worlds", [])),
                )
                for dc in payload
            ]
        except _SHAPE_ERRORS as exc:
            raise _malformed(path, exc) from exc

    async def validate_world(self, world_or_dc: str) -> str | None:
        """Canonical world or data center name for user input, else ``None``.

        Worlds are checked before data centers.  Transport errors
        propagate.
        """
        wanted = world_or_dc.strip().lower()
        if not wanted:
            return None

        for world in await self.fetch_worlds():
            if world.name.lower() == wanted:
                return world.name

        for dc in await self.fetch_data_centers():
            if dc.name.lower() == wanted:
                return dc.name

        return None

    async def world_autocomplete(self, query: str) -> list[Choice]:
        """Matching data centers first, then worlds; empty on failure."""
        wanted = query.strip().lower()
        try:
            worlds, data_centers = await asyncio.gather(
                self.fetch_worlds(), self.fetch_data_centers(),
            )
        except MarketPriceError as exc:
            logger.error("World autocomplete failed: %s", exc, exc_info=True)
            return []

        choices: list[Choice] = [
            Choice(name=f"{dc.name} ({dc.region} Data Center)", value=dc.name)
            for dc in data_centers
            if wanted in dc.name.lower()
        ]
        choices.extend(
            Choice(name=w.name, value=w.name)
            for w in worlds
            if wanted in w.name.lower()
        )
        return choices[:Settings.AUTOCOMPLETE_LIMIT]
