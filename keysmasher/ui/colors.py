"""Terminal palette and Rich style helpers."""

from __future__ import annotations

from keysmasher.core.session import CharState


class Palette:
    """Dark terminal palette."""

    BACKGROUND = "#000000"

    UNTYPED = "#333333"
    TYPED = "#e0e0e0"
    ERROR = "#ff6b6b"
    CURSOR = "#ffffff"

    MUTED = "#666666"
    HINT = "#868e96"
    ACCENT = "#ffd43b"
    SUCCESS = "#51cf66"
    VALUE = "#ffffff"


def char_style(state: CharState) -> str:
    """Rich style string for one character of the passage."""
    if state is CharState.CURRENT:
        return f"bold underline {Palette.CURSOR}"
    if state is CharState.ERROR:
        return Palette.ERROR
    if state is CharState.CORRECT:
        return Palette.TYPED
    return Palette.UNTYPED
