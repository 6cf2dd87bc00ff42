"""Detect the attendance category a chat message is marked with."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .models import Category, CategorySpec

CATEGORY_SPECS: Dict[Category, CategorySpec] = {
    Category.ZANGYO: CategorySpec(Category.ZANGYO, (":zangyo:",), "#ff2424"),
    Category.TEIJI: CategorySpec(Category.TEIJI, (":teiji:",), "#3aff3a"),
    Category.YUKYU: CategorySpec(Category.YUKYU, (":yukyu:",), "#3983ff"),
    # Slack hands unicode emoji back as shortcodes, so both forms are markers.
    Category.NOMIKAI: CategorySpec(
        Category.NOMIKAI, ("🍺", "🍻", ":beer:", ":beers:"), "#ffc22a"
    ),
}


def get_spec(category: Category) -> CategorySpec:
    return CATEGORY_SPECS[category]


def aliases_for(category: Category) -> Tuple[str, ...]:
    return CATEGORY_SPECS[category].aliases


def color_for(category: Category) -> str:
    return CATEGORY_SPECS[category].display_color


def _first_offset(text: str, aliases: Tuple[str, ...]) -> Optional[int]:
    offsets = [text.find(alias) for alias in aliases]
    found = [offset for offset in offsets if offset >= 0]
    return min(found) if found else None


def classify(text: str) -> Optional[Category]:
    """Return the category whose marker appears first in ``text``.

    Categories are scanned in enumeration order and only a strictly smaller
    offset replaces the current winner, so equal offsets resolve to the
    earlier category.
    """

    if not text:
        return None

    winner: Optional[Category] = None
    winner_offset: Optional[int] = None
    for category in Category:
        offset = _first_offset(text, aliases_for(category))
        if offset is None:
            continue
        if winner_offset is None or offset < winner_offset:
            winner = category
            winner_offset = offset
    return winner


__all__ = ["CATEGORY_SPECS", "get_spec", "aliases_for", "color_for", "classify"]
