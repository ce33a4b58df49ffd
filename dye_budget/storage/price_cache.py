# dye_budget/storage/price_cache.py

"""TTL-aware price cache over a key-value store, with cache-aside fetching.

Entries are fresh for ``ttl`` seconds and remain servable as *stale* up
to ``stale_threshold`` seconds.  Storage failures never reach the
caller: reads degrade to a miss and writes become a no-op.
"""

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field

from dye_budget.config.settings import Settings
from dye_budget.models.price_snapshot import PriceSnapshot
from dye_budget.storage.kv_store import KeyValueStore

logger = logging.getLogger("dye_budget.cache")

FetchFn = Callable[[list[int]], Awaitable[dict[int, PriceSnapshot]]]


def build_price_key(
    world: str,
    item_id: int,
    schema_version: str = Settings.CACHE_SCHEMA_VERSION,
) -> str:
    """Storage key for one (world, item) pair; world is case-insensitive."""
    return f"budget:prices:{schema_version}:{world.lower()}:{item_id}"


@dataclass
class StaleRead:
    """Result of a read that tolerates stale entries."""

    data: PriceSnapshot | None
    is_stale: bool = False


@dataclass
class FetchResult:
    """Merged price map plus where each entry came from."""

    prices: dict[int, PriceSnapshot] = field(
        default_factory=lambda: dict[int, PriceSnapshot]()
    )
    from_cache: int = 0
    from_api: int = 0


class PriceCache:
    """Price snapshots keyed by (world, item) in a :class:`KeyValueStore`."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl: int | None = None,
        stale_threshold: int | None = None,
        expiry_buffer: int | None = None,
    ) -> None:
        self._store = store
        self.ttl: int = ttl if ttl is not None else Settings.PRICE_CACHE_TTL
        self.stale_threshold: int = (
            stale_threshold
            if stale_threshold is not None
            else Settings.PRICE_STALE_THRESHOLD
        )
        buffer = (
            expiry_buffer
            if expiry_buffer is not None
            else Settings.PRICE_CACHE_EXPIRY_BUFFER
        )
        # The store must keep records at least as long as a stale read
        # can still use them.
        self.expiration_ttl: int = max(self.ttl, self.stale_threshold) + buffer

    # ── Single entries ───────────────────────────────────

    async def _read_entry(
        self, world: str, item_id: int,
    ) -> tuple[PriceSnapshot, float] | None:
        """Load and decode one entry.  Returns ``(snapshot, age)``."""
        raw = await self._store.get(build_price_key(world, item_id))
        if raw is None:
            return None
        entry = json.loads(raw)
        snapshot = PriceSnapshot.from_dict(entry["data"])
        age = time.time() - float(entry["cached_at"])
        return snapshot, age

    async def get(
        self, world: str, item_id: int,
    ) -> PriceSnapshot | None:
        """Return the cached snapshot if it is still fresh."""
        try:
            found = await self._read_entry(world, item_id)
        except Exception:
            logger.error(
                "Failed to get cached price for %s/%d",
                world,
                item_id,
                exc_info=True,
            )
            return None
        if found is None:
            return None
        snapshot, age = found
        if age > self.ttl:
            return None
        return snapshot

    async def get_with_stale(
        self, world: str, item_id: int,
    ) -> StaleRead:
        """Return cached data up to the stale threshold, flagging staleness."""
        try:
            found = await self._read_entry(world, item_id)
        except Exception:
            logger.error(
                "Failed to get cached price (stale allowed) for %s/%d",
                world,
                item_id,
                exc_info=True,
            )
            return StaleRead(data=None)
        if found is None:
            return StaleRead(data=None)
        snapshot, age = found
        if age > self.stale_threshold:
            return StaleRead(data=None)
        return StaleRead(data=snapshot, is_stale=age > self.ttl)

    async def set(
        self, world: str, item_id: int, snapshot: PriceSnapshot,
    ) -> None:
        """Store a snapshot stamped with the current time."""
        entry = {"data": snapshot.to_dict(), "cached_at": time.time()}
        try:
            await self._store.put(
                build_price_key(world, item_id),
                json.dumps(entry),
                expiration_ttl=self.expiration_ttl,
            )
        except Exception:
            logger.error(
                "Failed to cache price for %s/%d",
                world,
                item_id,
                exc_info=True,
            )

    async def invalidate(self, world: str, item_id: int) -> None:
        """Drop one entry.  Expiry is the normal eviction path."""
        try:
            await self._store.delete(build_price_key(world, item_id))
        except Exception:
            logger.error(
                "Failed to invalidate cached price for %s/%d",
                world,
                item_id,
                exc_info=True,
            )
        else:
            logger.info("Invalidated cached price for %s/%d", world, item_id)

    # ── Batches ──────────────────────────────────────────

    async def get_many(
        self, world: str, item_ids: Iterable[int],
    ) -> dict[int, PriceSnapshot]:
        """Fresh snapshots for *item_ids*; misses are simply absent."""
        ids = list(item_ids)
        snapshots = await asyncio.gather(
            *(self.get(world, item_id) for item_id in ids)
        )
        return {
            item_id: snapshot
            for item_id, snapshot in zip(ids, snapshots)
            if snapshot is not None
        }

    async def set_many(
        self, world: str, prices: Mapping[int, PriceSnapshot],
    ) -> None:
        """Store every snapshot in *prices* concurrently."""
        await asyncio.gather(
            *(
                self.set(world, item_id, snapshot)
                for item_id, snapshot in prices.items()
            )
        )

    # ── Cache-aside fetch ────────────────────────────────

    async def fetch_with_cache(
        self,
        world: str,
        item_ids: Iterable[int],
        fetch_fn: FetchFn,
    ) -> FetchResult:
        """Serve what the cache holds and fetch only the gap.

        *fetch_fn* is called at most once, with the uncached ids in
        input order.  Fetched snapshots are written back before this
        returns.
        """
        ids = list(dict.fromkeys(item_ids))
        cached = await self.get_many(world, ids)
        uncached = [i for i in ids if i not in cached]

        if not uncached:
            logger.debug(
                "All %d prices for %s served from cache", len(cached), world,
            )
            return FetchResult(
                prices=cached, from_cache=len(cached), from_api=0,
            )

        fetched = await fetch_fn(uncached)
        await self.set_many(world, fetched)

        combined: dict[int, PriceSnapshot] = dict(cached)
        combined.update(fetched)
        logger.info(
            "Prices for %s: %d cached, %d fetched, %d without listings",
            world,
            len(cached),
            len(fetched),
            len(uncached) - len(fetched),
        )
        return FetchResult(
            prices=combined,
            from_cache=len(cached),
            from_api=len(fetched),
        )
