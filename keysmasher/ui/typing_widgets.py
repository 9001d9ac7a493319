"""Typing test widgets: passage, live stats line and completion panel."""

from __future__ import annotations

from itertools import groupby
from typing import Optional

from rich.text import Text
from textual.widgets import Static

from keysmasher.core.session import SessionSnapshot, TypingResult
from keysmasher.ui.colors import Palette, char_style

APP_LABEL = "keysmasher"
SEPARATOR = "  •  "


def passage_text(snapshot: SessionSnapshot) -> Text:
    """Target text coloured by typed/error/cursor state."""
    text = Text()
    states = enumerate(snapshot.char_states)
    for state, run in groupby(states, key=lambda item: item[1]):
        indices = [i for i, _ in run]
        text.append(snapshot.full_text[indices[0]:indices[-1] + 1], style=char_style(state))
    return text


def stats_text(snapshot: SessionSnapshot) -> Text:
    parts = [
        APP_LABEL,
        f"{snapshot.wpm} wpm",
        f"{snapshot.accuracy}% acc",
        f"{snapshot.elapsed_seconds:.1f}s",
    ]
    if snapshot.is_paused:
        parts.append("paused")
    return Text(SEPARATOR.join(parts), style=Palette.MUTED)


def results_text(result: TypingResult, queued: int = 0) -> Text:
    """Completion report; ``queued`` is the number of custom passages still waiting."""
    text = Text(justify="center")
    text.append("Test Complete!\n\n", style=f"bold {Palette.SUCCESS}")
    rows = [
        ("WPM", str(result.wpm)),
        ("Accuracy", f"{result.accuracy}%"),
        ("Time", f"{result.active_seconds:.1f}s"),
        ("Characters", f"{result.correct_chars}/{result.total_chars}"),
    ]
    for label, value in rows:
        text.append(f"{label}: ", style=Palette.ACCENT)
        text.append(f"{value}\n", style=f"bold {Palette.VALUE}")
    text.append("\nPress ", style=Palette.HINT)
    text.append("Enter", style=f"bold {Palette.HINT}")
    if queued:
        text.append(f" for the next passage ({queued} left)", style=Palette.HINT)
    else:
        text.append(" to try again", style=Palette.HINT)
    return text


class PassageView(Static):
    """Passage being typed."""

    def show_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.update(passage_text(snapshot))


class StatsBar(Static):
    """Live WPM / accuracy / elapsed time line."""

    def show_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.update(stats_text(snapshot))


class ResultsPanel(Static):
    """Final report shown once the passage is complete."""

    def show_result(self, result: Optional[TypingResult], queued: int = 0) -> None:
        if result is None:
            self.update("")
            return
        self.update(results_text(result, queued))
