# dye_budget/models/budget.py

"""Data models for the budget alternative finder."""

from dataclasses import dataclass, field
from enum import Enum

from dye_budget.config.settings import Settings
from dye_budget.models.dye import Dye
from dye_budget.models.price_snapshot import PriceSnapshot


class SortOption(str, Enum):
    """Ordering applied to budget suggestions."""

    PRICE = "price"
    COLOR_MATCH = "color_match"
    VALUE_SCORE = "value_score"


SORT_LABELS: dict[SortOption, str] = {
    SortOption.PRICE: "Lowest Price",
    SortOption.COLOR_MATCH: "Best Color Match",
    SortOption.VALUE_SCORE: "Best Value",
}


@dataclass
class SearchOptions:
    """Constraints for a single budget search."""

    max_price: int | None = None
    max_distance: float = Settings.DEFAULT_MAX_DISTANCE
    sort_by: SortOption = SortOption.VALUE_SCORE
    limit: int = Settings.DEFAULT_LIMIT

    def __post_init__(self) -> None:
        self.sort_by = SortOption(self.sort_by)


@dataclass
class BudgetSuggestion:
    """A cheaper dye that is close in color to the target."""

    dye: Dye
    price: PriceSnapshot
    color_distance: float
    savings: int
    savings_percent: float
    value_score: float  # lower is better


@dataclass
class BudgetFindResult:
    """Ranked alternatives for one target dye on one world."""

    target_dye: Dye
    target_price: PriceSnapshot | None
    world: str
    search_options: SearchOptions
    prices_as_of: str
    alternatives: list[BudgetSuggestion] = field(default_factory=list)
    from_cache: int = 0
    from_api: int = 0


@dataclass(frozen=True)
class WorldPreference:
    """A user's saved world or data center."""

    world: str
    set_at: str


@dataclass(frozen=True)
class QuickPick:
    """Preset target for a popular, expensive dye."""

    id: str
    name: str
    target_dye_id: int
    description: str
    emoji: str


def distance_quality(distance: float) -> str:
    """Human label for how close a color distance is."""
    if distance == 0:
        return "Perfect"
    if distance < 10:
        return "Excellent"
    if distance < 25:
        return "Good"
    if distance < 50:
        return "Fair"
    return "Approximate"
