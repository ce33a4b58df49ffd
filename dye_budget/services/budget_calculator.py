# dye_budget/services/budget_calculator.py

"""Finds cheaper dyes that are close in color to an expensive one."""

import logging
from datetime import datetime, timezone

from dye_budget.catalog.dye_catalog import DyeCatalog
from dye_budget.clients.universalis_client import UniversalisClient
from dye_budget.models.budget import (
    BudgetFindResult,
    BudgetSuggestion,
    SearchOptions,
    SortOption,
)
from dye_budget.models.errors import TargetNotFoundError
from dye_budget.models.price_snapshot import PriceSnapshot
from dye_budget.storage.price_cache import PriceCache

logger = logging.getLogger("dye_budget.budget")


def calculate_value_score(color_distance: float, price: int) -> float:
    """Combined ranking number, lower is better.

    Color distance counts double: distance 10 at 5,000 gil scores
    20 + 5 = 25.
    """
    return color_distance * 2 + price / 1000


def _sort_key(sort_by: SortOption):
    if sort_by is SortOption.PRICE:
        return lambda s: (
            s.price.min_price if s.price is not None else float("inf")
        )
    if sort_by is SortOption.COLOR_MATCH:
        return lambda s: s.color_distance
    return lambda s: s.value_score


class BudgetCalculator:
    """Ranks catalog dyes as budget alternatives to a target dye."""

    def __init__(
        self,
        catalog: DyeCatalog,
        cache: PriceCache,
        client: UniversalisClient,
    ) -> None:
        self.catalog = catalog
        self.cache = cache
        self.client = client

    async def find_cheaper_alternatives(
        self,
        target_dye_id: int,
        world: str,
        options: SearchOptions | None = None,
    ) -> BudgetFindResult:
        """Return up to ``options.limit`` cheaper, similar dyes.

        1. Resolve the target dye (unknown id raises
           :class:`TargetNotFoundError`).
        2. Price the whole catalog through the cache.
        3. Keep dyes that are priced, strictly cheaper than the target
           (when its price is known), within ``max_price`` and within
           ``max_distance``.
        4. Sort by the requested criterion and truncate.

        Client errors propagate unchanged.
        """
        opts = options or SearchOptions()

        target = self.catalog.get_by_id(target_dye_id)
        if target is None:
            raise TargetNotFoundError(target_dye_id)

        all_dyes = self.catalog.get_all()
        fetch = await self.cache.fetch_with_cache(
            world,
            [d.item_id for d in all_dyes],
            lambda ids: self.client.fetch_prices_batched(world, ids),
        )
        prices = fetch.prices
        logger.info(
            "Price fetch complete for %s: %d from cache, %d from API, %d dyes",
            world,
            fetch.from_cache,
            fetch.from_api,
            len(all_dyes),
        )

        target_price = prices.get(target_dye_id)
        alternatives: list[BudgetSuggestion] = []

        for dye in all_dyes:
            if dye.item_id == target_dye_id:
                continue

            price = prices.get(dye.item_id)
            if price is None:
                continue

            # Equal price is no saving
            if (
                target_price is not None
                and price.min_price >= target_price.min_price
            ):
                continue

            if opts.max_price is not None and price.min_price > opts.max_price:
                continue

            distance = self.catalog.color_distance(target.hex, dye.hex)
            if distance > opts.max_distance:
                continue

            savings = (
                target_price.min_price - price.min_price
                if target_price is not None
                else 0
            )
            savings_percent = (
                savings / target_price.min_price * 100
                if target_price is not None and target_price.min_price > 0
                else 0.0
            )

            alternatives.append(
                BudgetSuggestion(
                    dye=dye,
                    price=price,
                    color_distance=distance,
                    savings=savings,
                    savings_percent=savings_percent,
                    value_score=calculate_value_score(
                        distance, price.min_price
                    ),
                )
            )

        alternatives.sort(key=_sort_key(opts.sort_by))

        logger.debug(
            "%d alternatives for %s on %s before limit %d",
            len(alternatives),
            target.name,
            world,
            opts.limit,
        )

        return BudgetFindResult(
            target_dye=target,
            target_price=target_price,
            world=world,
            search_options=opts,
            prices_as_of=_prices_as_of(prices),
            alternatives=alternatives[:opts.limit],
            from_cache=fetch.from_cache,
            from_api=fetch.from_api,
        )


def _prices_as_of(prices: dict[int, PriceSnapshot]) -> str:
    """Fetch time of the first snapshot, or now when there are none."""
    for snapshot in prices.values():
        if snapshot.fetched_at:
            return snapshot.fetched_at
    return datetime.now(timezone.utc).isoformat()
