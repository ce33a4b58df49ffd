# dye_budget/services/quick_picks.py

"""Preset targets for dyes people most often want cheaper stand-ins for."""

from dye_budget.models.budget import QuickPick

QUICK_PICKS: list[QuickPick] = [
    QuickPick(
        id="pure_white",
        name="Pure White",
        target_dye_id=5762,
        description="Most sought-after for clean glamours",
        emoji="⬜",
    ),
    QuickPick(
        id="jet_black",
        name="Jet Black",
        target_dye_id=5763,
        description="Darkest black, popular for edgy looks",
        emoji="⬛",
    ),
    QuickPick(
        id="metallic_silver",
        name="Metallic Silver",
        target_dye_id=13099,
        description="Premium metallic sheen",
        emoji="🔘",
    ),
    QuickPick(
        id="metallic_gold",
        name="Metallic Gold",
        target_dye_id=13098,
        description="Luxurious gold finish",
        emoji="🥇",
    ),
    QuickPick(
        id="pastel_pink",
        name="Pastel Pink",
        target_dye_id=13111,
        description="Popular for cute aesthetics",
        emoji="🩷",
    ),
]


def get_quick_pick(pick_id: str) -> QuickPick | None:
    """Look up a preset by its id."""
    for pick in QUICK_PICKS:
        if pick.id == pick_id:
            return pick
    return None


def quick_pick_choices() -> list[tuple[str, str]]:
    """``(label, id)`` pairs suitable for a choice list."""
    return [(f"{p.emoji} {p.name}", p.id) for p in QUICK_PICKS]
