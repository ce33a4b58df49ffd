# main.py

"""Entry point for the dye_budget price finder CLI."""

import argparse
import asyncio
import logging
import sys

from dye_budget.config.logging_config import setup_logging
from dye_budget.models.budget import SortOption
from dye_budget.services.quick_picks import quick_pick_choices

logger = logging.getLogger("dye_budget.main")


def _add_search_options(parser: argparse.ArgumentParser) -> None:
    """Options shared by ``find`` and ``quick``."""
    parser.add_argument(
        "-w",
        "--world",
        default=None,
        help="World or data center (default: saved preference).",
    )
    parser.add_argument(
        "--max-price",
        type=int,
        default=None,
        dest="max_price",
        help="Ignore alternatives above this many gil.",
    )
    parser.add_argument(
        "--max-distance",
        type=float,
        default=None,
        dest="max_distance",
        help="Maximum color distance from the target (default: 50).",
    )
    parser.add_argument(
        "--sort",
        choices=[s.value for s in SortOption],
        default=None,
        dest="sort_by",
        help="Result ordering (default: value_score).",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=None,
        help="Number of alternatives to show (default: 5).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-u",
        "--user",
        default=None,
        help="User whose saved world to use.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    presets = ", ".join(
        f"{pick_id} ({label})" for label, pick_id in quick_pick_choices()
    )

    parser = argparse.ArgumentParser(
        prog="dye_budget",
        description="Find cheaper dyes that look like expensive ones.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    find = sub.add_parser("find", help="Find alternatives to a dye.")
    find.add_argument("dye", help="Dye item id or exact name.")
    _add_search_options(find)

    quick = sub.add_parser(
        "quick",
        help="Find alternatives to a popular dye preset.",
        epilog=f"Available presets: {presets}",
    )
    quick.add_argument("preset", help="Preset id.")
    _add_search_options(quick)

    set_world = sub.add_parser(
        "set-world", help="Save your preferred world or data center."
    )
    set_world.add_argument("world")
    set_world.add_argument("-u", "--user", default=None)

    clear_world = sub.add_parser(
        "clear-world", help="Forget your saved world or data center."
    )
    clear_world.add_argument("-u", "--user", default=None)

    worlds = sub.add_parser(
        "worlds", help="List worlds and data centers matching a query."
    )
    worlds.add_argument("query", nargs="?", default="")

    dyes = sub.add_parser("dyes", help="List catalog dyes by category.")
    dyes.add_argument("query", nargs="?", default="")
    dyes.add_argument(
        "-c", "--category", default=None, help="Only this category."
    )

    return parser


def _run(args: argparse.Namespace) -> int:
    """Dispatch a parsed command and return its exit code."""
    from dye_budget.cli.runner import (
        cli_clear_world,
        cli_dyes,
        cli_find,
        cli_quick,
        cli_set_world,
        cli_worlds,
    )

    if args.command == "set-world":
        return asyncio.run(cli_set_world(args.world, user=args.user))
    if args.command == "worlds":
        return asyncio.run(cli_worlds(args.query))
    if args.command == "clear-world":
        return asyncio.run(cli_clear_world(user=args.user))
    if args.command == "dyes":
        return cli_dyes(args.query, category=args.category)

    search = dict(
        world=args.world,
        max_price=args.max_price,
        max_distance=args.max_distance,
        sort_by=args.sort_by,
        limit=args.limit,
        output_format=args.output_format,
        user=args.user,
    )
    if args.command == "quick":
        return asyncio.run(cli_quick(args.preset, **search))
    return asyncio.run(cli_find(args.dye, **search))


def main() -> None:
    """Parse arguments and run the selected command."""
    log_file = setup_logging()
    logger.info("dye_budget starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    try:
        exit_code = _run(args)
    except Exception:
        logger.critical("Fatal error during %s", args.command, exc_info=True)
        raise
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
