"""Unit tests for highlight color classification."""

from src.domain.services.color_classifier import (
    BLUE,
    GRAY,
    GREEN,
    ORANGE,
    PURPLE,
    RED,
    YELLOW,
    color_to_emoji,
    resolve_color,
)


def test_palette_colors_map_to_their_emoji():
    assert color_to_emoji("#ffd400") == YELLOW
    assert color_to_emoji("#ff6666") == RED
    assert color_to_emoji("#5fb236") == GREEN
    assert color_to_emoji("#2ea8e5") == BLUE
    assert color_to_emoji("#a28ae5") == PURPLE
    assert color_to_emoji("#e56eee") == PURPLE
    assert color_to_emoji("#f19837") == ORANGE
    assert color_to_emoji("#aaaaaa") == GRAY


def test_lookup_is_case_insensitive():
    assert color_to_emoji("#FFD400") == YELLOW
    assert color_to_emoji("#5FB236") == GREEN


def test_absent_or_unknown_color_falls_back_to_yellow():
    assert color_to_emoji(None) == YELLOW
    assert color_to_emoji("") == YELLOW
    assert color_to_emoji("#000000") == YELLOW
    assert color_to_emoji("not-a-color") == YELLOW


def test_resolve_color_normalizes_palette_colors():
    assert resolve_color("#5FB236") == "#5fb236"


def test_resolve_color_uses_default_outside_palette():
    assert resolve_color(None) == "#ffd400"
    assert resolve_color("#123456") == "#ffd400"
    assert resolve_color("#123456", default="#aaaaaa") == "#aaaaaa"
