"""
Category table.

Single source of truth for the geographic categories: display metadata for
clients, the structured news query and the community tip pages per category.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from ..exceptions import InvalidCategory


class Category(str, Enum):
    GHANA = "ghana"
    AFRICA = "africa"
    WORLD = "world"


@dataclass(frozen=True)
class CategoryProfile:
    label: str
    badge_color: str
    news_query: str
    tip_paths: Tuple[str, ...]


CATEGORY_PROFILES: Dict[Category, CategoryProfile] = {
    Category.GHANA: CategoryProfile(
        label="Ghana",
        badge_color="green",
        news_query='technology AND (Ghana OR "Ghanaian tech")',
        tip_paths=("/t/ghana", "/search?q=ghana+tech"),
    ),
    Category.AFRICA: CategoryProfile(
        label="Africa",
        badge_color="yellow",
        news_query="technology AND Africa NOT Ghana",
        tip_paths=("/t/africa", "/search?q=africa+tech"),
    ),
    Category.WORLD: CategoryProfile(
        label="World",
        badge_color="blue",
        news_query="technology",
        tip_paths=("/t/javascript/top/week", "/t/technology/top/week"),
    ),
}


def parse_category(value) -> Category:
    if isinstance(value, Category):
        return value
    try:
        return Category(value)
    except ValueError:
        raise InvalidCategory(value) from None


def get_profile(category: Category) -> CategoryProfile:
    return CATEGORY_PROFILES[parse_category(category)]
