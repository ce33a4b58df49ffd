# dye_budget/cli/runner.py

"""Headless CLI commands on top of the budget calculator."""

import json
import logging
import sys
from dataclasses import dataclass

from rich.console import Console
from rich.table import Table

from dye_budget.catalog.dye_catalog import DyeCatalog
from dye_budget.clients.price_source import select_source
from dye_budget.clients.universalis_client import UniversalisClient
from dye_budget.config.settings import Settings
from dye_budget.models.budget import (
    SORT_LABELS,
    BudgetFindResult,
    SearchOptions,
    SortOption,
    distance_quality,
)
from dye_budget.models.dye import Dye
from dye_budget.models.errors import MarketPriceError, TargetNotFoundError
from dye_budget.services.budget_calculator import BudgetCalculator
from dye_budget.services.quick_picks import get_quick_pick, quick_pick_choices
from dye_budget.storage.kv_store import KeyValueStore, SQLiteKeyValueStore
from dye_budget.storage.price_cache import PriceCache
from dye_budget.storage.user_preferences import UserPreferences

logger = logging.getLogger("dye_budget.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


@dataclass
class BudgetServices:
    """Everything a command needs, wired around one key-value store."""

    catalog: DyeCatalog
    client: UniversalisClient
    calculator: BudgetCalculator
    preferences: UserPreferences
    store: KeyValueStore

    async def close(self) -> None:
        await self.client.close()
        self.store.close()


def build_services(
    store: KeyValueStore | None = None,
    client: UniversalisClient | None = None,
    catalog: DyeCatalog | None = None,
) -> BudgetServices:
    """Wire the default services from :class:`Settings`.

    A default SQLite store is purged of expired rows when opened.
    """
    if store is None:
        sqlite_store = SQLiteKeyValueStore()
        sqlite_store.purge_expired()
        store = sqlite_store
    price_client = client or UniversalisClient(
        select_source(base_url=Settings.PROXY_URL)
    )
    dye_catalog = catalog or DyeCatalog.from_json()
    cache = PriceCache(store)
    return BudgetServices(
        catalog=dye_catalog,
        client=price_client,
        calculator=BudgetCalculator(dye_catalog, cache, price_client),
        preferences=UserPreferences(store),
        store=store,
    )


def resolve_dye(catalog: DyeCatalog, text: str) -> Dye | None:
    """Find a dye by item id or exact name."""
    text = text.strip()
    if text.isdigit():
        return catalog.get_by_id(int(text))
    return catalog.get_by_name(text)


def _result_to_dict(result: BudgetFindResult) -> dict[str, object]:
    """Serialise a find result to plain JSON-ready data."""
    opts = result.search_options
    return {
        "target": {
            "item_id": result.target_dye.item_id,
            "name": result.target_dye.name,
            "hex": result.target_dye.hex,
            "min_price": (
                result.target_price.min_price
                if result.target_price
                else None
            ),
        },
        "world": result.world,
        "prices_as_of": result.prices_as_of,
        "from_cache": result.from_cache,
        "from_api": result.from_api,
        "search_options": {
            "max_price": opts.max_price,
            "max_distance": opts.max_distance,
            "sort_by": opts.sort_by.value,
            "limit": opts.limit,
        },
        "alternatives": [
            {
                "item_id": s.dye.item_id,
                "name": s.dye.name,
                "hex": s.dye.hex,
                "min_price": s.price.min_price,
                "average_price": s.price.average_price,
                "listing_count": s.price.listing_count,
                "color_distance": round(s.color_distance, 2),
                "savings": s.savings,
                "savings_percent": round(s.savings_percent, 2),
                "value_score": round(s.value_score, 2),
            }
            for s in result.alternatives
        ],
    }


def _print_table(result: BudgetFindResult) -> None:
    """Render a Rich table of alternatives to stdout."""
    target_price = (
        f"{result.target_price.min_price:,} gil"
        if result.target_price
        else "no listings"
    )
    table = Table(
        title=(
            f"Budget alternatives to {result.target_dye.name} "
            f"({target_price}) on {result.world}"
        ),
        caption=(
            f"{SORT_LABELS[result.search_options.sort_by]} · "
            f"prices as of {result.prices_as_of}"
        ),
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Dye")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Saves", justify="right")
    table.add_column("Match", justify="center")
    table.add_column("Score", justify="right", style="magenta")

    for idx, s in enumerate(result.alternatives, 1):
        saves = (
            f"{s.savings:,} ({s.savings_percent:.0f}%)"
            if result.target_price
            else "—"
        )
        table.add_row(
            str(idx),
            f"{s.dye.name} [dim]{s.dye.hex}[/dim]",
            f"{s.price.min_price:,}",
            saves,
            f"{distance_quality(s.color_distance)} ({s.color_distance:.1f})",
            f"{s.value_score:.1f}",
        )

    Console().print(table)


async def _resolve_world(
    services: BudgetServices, world: str | None, user: str,
) -> str | None:
    """Explicit world first, then the user's saved preference."""
    if world:
        return world
    pref = await services.preferences.get_world(user)
    return pref.world if pref else None


async def cli_find(
    dye: str,
    world: str | None = None,
    max_price: int | None = None,
    max_distance: float | None = None,
    sort_by: str | None = None,
    limit: int | None = None,
    output_format: str = "json",
    user: str | None = None,
    services: BudgetServices | None = None,
) -> int:
    """Run a budget search and return an exit code (0=ok, 1=fail)."""
    svc = services or build_services()
    try:
        target = resolve_dye(svc.catalog, dye)
        if target is None:
            _err.print(f"[red]Unknown dye: {dye}[/red]")
            suggestions = svc.catalog.autocomplete(dye, limit=5)
            if suggestions:
                names = ", ".join(label for label, _ in suggestions)
                _err.print(f"[dim]Did you mean: {names}[/dim]")
            return 1

        resolved_world = await _resolve_world(
            svc, world, user or Settings.DEFAULT_USER
        )
        if resolved_world is None:
            _err.print(
                "[yellow]No world given and no preference saved. "
                "Use --world or `set-world` first.[/yellow]"
            )
            return 1

        options = SearchOptions(max_price=max_price)
        if max_distance is not None:
            options.max_distance = max_distance
        if sort_by is not None:
            options.sort_by = SortOption(sort_by)
        if limit is not None:
            options.limit = limit

        _err.print(
            f"[bold]Finding alternatives:[/bold] {target.name}  "
            f"[dim]world={resolved_world}[/dim]"
        )
        try:
            result = await svc.calculator.find_cheaper_alternatives(
                target.item_id, resolved_world, options
            )
        except TargetNotFoundError as exc:
            _err.print(f"[red]{exc}[/red]")
            return 1
        except MarketPriceError as exc:
            logger.error("Budget search failed: %r", exc)
            _err.print(
                f"[red]Price lookup failed ({exc.status}): {exc.message}[/red]"
            )
            return 1

        if not result.alternatives:
            _err.print("[yellow]No cheaper alternatives found.[/yellow]")

        if output_format == "table":
            _print_table(result)
        else:
            json.dump(
                _result_to_dict(result),
                sys.stdout,
                ensure_ascii=False,
                indent=2,
            )
            sys.stdout.write("\n")
        return 0
    finally:
        if services is None:
            await svc.close()


async def cli_quick(
    preset: str,
    world: str | None = None,
    max_price: int | None = None,
    max_distance: float | None = None,
    sort_by: str | None = None,
    limit: int | None = None,
    output_format: str = "json",
    user: str | None = None,
    services: BudgetServices | None = None,
) -> int:
    """Run :func:`cli_find` for a quick-pick preset."""
    pick = get_quick_pick(preset)
    if pick is None:
        valid = ", ".join(pick_id for _, pick_id in quick_pick_choices())
        _err.print(f"[red]Unknown preset: {preset}[/red]")
        _err.print(f"[dim]Available: {valid}[/dim]")
        return 1
    return await cli_find(
        str(pick.target_dye_id),
        world=world,
        max_price=max_price,
        max_distance=max_distance,
        sort_by=sort_by,
        limit=limit,
        output_format=output_format,
        user=user,
        services=services,
    )


async def cli_set_world(
    world: str,
    user: str | None = None,
    services: BudgetServices | None = None,
) -> int:
    """Validate *world* and save it as the user's preference."""
    svc = services or build_services()
    try:
        try:
            canonical = await svc.client.validate_world(world)
        except MarketPriceError as exc:
            _err.print(
                f"[red]Could not validate world ({exc.status}): "
                f"{exc.message}[/red]"
            )
            return 1
        if canonical is None:
            _err.print(f"[red]World or data center not found: {world}[/red]")
            return 1

        user_id = user or Settings.DEFAULT_USER
        if not await svc.preferences.set_world(user_id, canonical):
            _err.print("[red]Failed to save world preference.[/red]")
            return 1
        _err.print(f"[green]✓ World set to {canonical}[/green]")
        return 0
    finally:
        if services is None:
            await svc.close()


async def cli_worlds(
    query: str = "",
    services: BudgetServices | None = None,
) -> int:
    """Print worlds and data centers matching *query*."""
    svc = services or build_services()
    try:
        choices = await svc.client.world_autocomplete(query)
        if not choices:
            _err.print("[yellow]No matching worlds.[/yellow]")
            return 1
        table = Table(title="Worlds & Data Centers", title_style="bold cyan")
        table.add_column("Name")
        table.add_column("Value", style="dim")
        for choice in choices:
            table.add_row(choice.name, choice.value)
        Console().print(table)
        return 0
    finally:
        if services is None:
            await svc.close()


async def cli_clear_world(
    user: str | None = None,
    services: BudgetServices | None = None,
) -> int:
    """Forget the user's saved world."""
    svc = services or build_services()
    try:
        user_id = user or Settings.DEFAULT_USER
        if not await svc.preferences.clear_world(user_id):
            _err.print("[red]Failed to clear world preference.[/red]")
            return 1
        _err.print("[green]✓ World preference cleared[/green]")
        return 0
    finally:
        if services is None:
            await svc.close()


def cli_dyes(
    query: str = "",
    category: str | None = None,
    catalog: DyeCatalog | None = None,
) -> int:
    """Print catalog dyes, grouped by category, matching *query*."""
    dye_catalog = catalog or DyeCatalog.from_json()
    categories = dye_catalog.categories()
    if category is not None:
        wanted = category.strip().lower()
        categories = [c for c in categories if c.lower() == wanted]
        if not categories:
            _err.print(f"[red]Unknown category: {category}[/red]")
            _err.print(
                f"[dim]Available: {', '.join(dye_catalog.categories())}[/dim]"
            )
            return 1

    matches = dye_catalog.search_by_name(query)
    table = Table(title="Dyes", title_style="bold cyan")
    table.add_column("Category")
    table.add_column("Dye")
    table.add_column("Item ID", justify="right", style="dim")
    table.add_column("Hex")
    rows = 0
    for cat in categories:
        for dye in matches:
            if dye.category == cat:
                table.add_row(cat, dye.name, str(dye.item_id), dye.hex)
                rows += 1

    if not rows:
        _err.print("[yellow]No matching dyes.[/yellow]")
        return 1
    Console().print(table)
    return 0
