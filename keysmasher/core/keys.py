"""Keystroke interpreter: maps host key events onto session transitions."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from keysmasher.core.session import TypingSession
from keysmasher.core.words import PassageQueue

logger = logging.getLogger(__name__)

QUIT_KEY = "escape"
INTERRUPT_KEY = "c"
CONFIRM_KEY = "return"
DELETE_KEY = "backspace"


@dataclass(frozen=True)
class KeyEvent:
    """A key press as delivered by the host UI."""

    name: str
    sequence: Optional[str] = None
    ctrl: bool = False
    meta: bool = False
    option: bool = False

    @property
    def is_printable(self) -> bool:
        """Exactly one printable character with no control/meta modifier."""
        return (
            self.sequence is not None
            and len(self.sequence) == 1
            and self.sequence.isprintable()
            and not self.ctrl
            and not self.meta
        )


class KeyAction(enum.Enum):
    QUIT = "quit"
    RESET = "reset"
    TYPED = "typed"
    DELETED = "deleted"
    IGNORED = "ignored"


class KeystrokeInterpreter:
    """Owns a session and routes key events and timer ticks to it."""

    def __init__(self, session: TypingSession, passages: Optional[PassageQueue] = None) -> None:
        self._session = session
        self._passages = passages or PassageQueue()

    @property
    def session(self) -> TypingSession:
        return self._session

    @property
    def passages(self) -> PassageQueue:
        return self._passages

    def handle(self, event: KeyEvent) -> KeyAction:
        """Apply one key event; the caller exits the process on ``QUIT``."""
        if event.name == QUIT_KEY or (event.ctrl and event.name == INTERRUPT_KEY):
            return KeyAction.QUIT

        session = self._session
        if session.is_finished:
            if event.name == CONFIRM_KEY:
                session.reset_test(self._passages.next_passage())
                logger.info("New test with %d words", len(session.words))
                return KeyAction.RESET
            return KeyAction.IGNORED

        if event.name == CONFIRM_KEY:
            return KeyAction.IGNORED

        is_delete = event.name == DELETE_KEY
        if not is_delete and not event.is_printable:
            return KeyAction.IGNORED

        if not session.is_started:
            session.start_typing()

        if is_delete:
            if event.option or event.meta:
                changed = session.delete_word()
            else:
                changed = session.delete_one_char()
            return KeyAction.DELETED if changed else KeyAction.IGNORED

        if session.type_character(event.sequence):
            return KeyAction.TYPED
        return KeyAction.IGNORED

    def tick(self, now: Optional[float] = None) -> bool:
        """Timer hook: promote an idle session to paused."""
        return self._session.tick(now)
