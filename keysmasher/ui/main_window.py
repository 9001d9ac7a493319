"""Terminal host: a Textual app driving the keystroke interpreter."""

from __future__ import annotations

import logging
from typing import Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container

from keysmasher.core.keys import DELETE_KEY, KeyAction, KeyEvent, KeystrokeInterpreter
from keysmasher.ui.colors import Palette
from keysmasher.ui.typing_widgets import PassageView, ResultsPanel, StatsBar

logger = logging.getLogger(__name__)

TICK_INTERVAL_SECONDS = 0.1

# Textual names -> interpreter names
_KEY_ALIASES = {"enter": "return"}
# Keys that delete the previous word.
_WORD_DELETE_KEYS = {"ctrl+w", "ctrl+backspace", "alt+backspace", "meta+backspace"}


def key_event_from_textual(key: str, character: Optional[str]) -> KeyEvent:
    """Translate a Textual key name (``"ctrl+c"``, ``"enter"``, ``"a"``) into a KeyEvent."""
    if key in _WORD_DELETE_KEYS:
        return KeyEvent(name=DELETE_KEY, option=True)

    *modifiers, name = key.split("+")
    name = _KEY_ALIASES.get(name, name)
    sequence = character if character and len(character) == 1 and character.isprintable() else None
    return KeyEvent(
        name=name,
        sequence=sequence,
        ctrl="ctrl" in modifiers,
        meta="meta" in modifiers,
        option="alt" in modifiers,
    )


class TypingApp(App):
    CSS = f"""
    Screen {{
        background: {Palette.BACKGROUND};
        align: center middle;
    }}

    #root {{
        width: 84;
        max-width: 100%;
        height: auto;
        padding: 2 2 0 2;
    }}

    PassageView {{
        width: 100%;
    }}

    StatsBar {{
        margin-top: 1;
        content-align: center middle;
        width: 100%;
    }}

    ResultsPanel {{
        border: double {Palette.HINT};
        padding: 1 3;
        width: 50;
        height: auto;
        content-align: center middle;
    }}
    """

    TITLE = "keysmasher"
    ENABLE_COMMAND_PALETTE = False

    # Ctrl+C is claimed ahead of Textual's own handling so it reaches the interpreter.
    BINDINGS = [
        Binding("ctrl+c", "interrupt", "Quit", show=False, priority=True),
    ]

    def __init__(self, interpreter: KeystrokeInterpreter) -> None:
        super().__init__()
        self._interpreter = interpreter
        self._passage_view: Optional[PassageView] = None
        self._stats_bar: Optional[StatsBar] = None
        self._results_panel: Optional[ResultsPanel] = None

    @property
    def interpreter(self) -> KeystrokeInterpreter:
        return self._interpreter

    def compose(self) -> ComposeResult:
        with Container(id="root"):
            self._passage_view = PassageView()
            self._stats_bar = StatsBar()
            self._results_panel = ResultsPanel()
            yield self._passage_view
            yield self._stats_bar
            yield self._results_panel

    def on_mount(self) -> None:
        self.set_interval(TICK_INTERVAL_SECONDS, self._tick)
        self._refresh_view()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self._route_key(key_event_from_textual(event.key, event.character))

    def action_interrupt(self) -> None:
        self._route_key(KeyEvent(name="c", ctrl=True))

    def _route_key(self, key_event: KeyEvent) -> None:
        action = self._interpreter.handle(key_event)
        if action is KeyAction.QUIT:
            logger.debug("Quit requested")
            self.exit(return_code=0)
            return
        if action is not KeyAction.IGNORED:
            self._refresh_view()

    def _tick(self) -> None:
        session = self._interpreter.session
        if not session.is_started or session.is_finished:
            return
        self._interpreter.tick()
        self._refresh_view()

    def _refresh_view(self) -> None:
        if self._passage_view is None or self._stats_bar is None or self._results_panel is None:
            return
        session = self._interpreter.session
        finished = session.is_finished

        self._passage_view.display = not finished
        self._stats_bar.display = not finished
        self._results_panel.display = finished

        if finished:
            self._results_panel.show_result(session.final_result(), self._interpreter.passages.remaining)
            return
        snapshot = session.snapshot()
        self._passage_view.show_snapshot(snapshot)
        self._stats_bar.show_snapshot(snapshot)
