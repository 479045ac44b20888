"""Map Zotero highlight colors to emoji markers."""

from __future__ import annotations

YELLOW = "\U0001F7E1"
RED = "\U0001F534"
GREEN = "\U0001F7E2"
BLUE = "\U0001F535"
PURPLE = "\U0001F7E3"
ORANGE = "\U0001F7E0"
GRAY = "⚪"

# Zotero's annotation palette
COLOR_EMOJI_MAP: dict[str, str] = {
    "#ffd400": YELLOW,
    "#ff6666": RED,
    "#5fb236": GREEN,
    "#2ea8e5": BLUE,
    "#a28ae5": PURPLE,
    "#e56eee": PURPLE,  # magenta
    "#f19837": ORANGE,
    "#aaaaaa": GRAY,
}

DEFAULT_EMOJI = YELLOW


def color_to_emoji(hex_color: str | None) -> str:
    """
    Return the emoji marker for a highlight color.

    Comparison is case-insensitive; absent or unknown colors map to the yellow default.
    """
    if not hex_color:
        return DEFAULT_EMOJI
    return COLOR_EMOJI_MAP.get(hex_color.strip().lower(), DEFAULT_EMOJI)


def resolve_color(hex_color: str | None, default: str = "#ffd400") -> str:
    """Return the lower-cased palette color, or `default` when absent or outside the palette."""
    if not hex_color:
        return default
    normalized = hex_color.strip().lower()
    return normalized if normalized in COLOR_EMOJI_MAP else default
