from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, FrozenSet, Optional, Sequence, Tuple

from keysmasher.core import metrics
from keysmasher.core.words import WORDS_PER_TEST, default_passage

logger = logging.getLogger(__name__)

IDLE_THRESHOLD_MS = 2000


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


class CharState(enum.Enum):
    """Render state of a single character of the target text."""

    UNTYPED = "untyped"
    CORRECT = "correct"
    ERROR = "error"
    CURRENT = "current"


@dataclass(frozen=True)
class TypingResult:
    """Completion report for a finished test."""

    wpm: int
    accuracy: int
    duration_seconds: float
    active_seconds: float
    correct_chars: int
    total_chars: int


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything a renderer needs for one frame."""

    full_text: str
    input_text: str
    errors: FrozenSet[int]
    char_states: Tuple[CharState, ...]
    wpm: int
    accuracy: int
    elapsed_seconds: float
    is_finished: bool
    is_paused: bool


class TypingSession:
    """State machine for a single typing test.

    The session moves from not started to in progress on the first accepted
    keystroke and to finished once the buffer covers the whole passage.
    Idle periods longer than ``IDLE_THRESHOLD_MS`` are tracked as pauses:

      * the live elapsed time (and therefore the live WPM) excludes pauses;
      * the final report uses the raw ``end - start`` duration.

    Counters (``total_chars_typed``, ``correct_chars``) record every forward
    keystroke and are never decremented by deletions, so accuracy reflects
    total effort rather than the final buffer.

    All timestamps are milliseconds from ``clock``.
    """

    def __init__(self, words: Sequence[str], clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or _wall_clock_ms
        self._load(words)

    def _load(self, words: Sequence[str]) -> None:
        self._words: Tuple[str, ...] = tuple(words)
        self._full_text = " ".join(self._words)
        self._input_text = ""
        self._errors: set[int] = set()
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._total_chars_typed = 0
        self._correct_chars = 0
        self._last_key_press_time: Optional[float] = None
        self._paused_time = 0.0
        self._pause_start_time: Optional[float] = None

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def words(self) -> Tuple[str, ...]:
        """Words of the passage being typed."""
        return self._words

    @property
    def full_text(self) -> str:
        """Target text: the words joined by single spaces."""
        return self._full_text

    @property
    def input_text(self) -> str:
        """Characters typed so far."""
        return self._input_text

    @property
    def cursor(self) -> int:
        """Index of the character being filled next."""
        return len(self._input_text)

    @property
    def errors(self) -> FrozenSet[int]:
        """Input positions that did not match the target."""
        return frozenset(self._errors)

    @property
    def start_time(self) -> Optional[float]:
        """Clock reading (ms) of the first keystroke, or None before start."""
        return self._start_time

    @property
    def end_time(self) -> Optional[float]:
        """Clock reading (ms) when the last character was typed."""
        return self._end_time

    @property
    def last_key_press_time(self) -> Optional[float]:
        """Clock reading (ms) of the most recent keystroke."""
        return self._last_key_press_time

    @property
    def paused_time(self) -> float:
        """Milliseconds accumulated in closed pauses."""
        return self._paused_time

    @property
    def pause_start_time(self) -> Optional[float]:
        """When the current idle pause began, or None when not paused."""
        return self._pause_start_time

    @property
    def total_chars_typed(self) -> int:
        """Every character typed, including ones later deleted."""
        return self._total_chars_typed

    @property
    def correct_chars(self) -> int:
        """Characters typed that matched the target at the time."""
        return self._correct_chars

    @property
    def is_started(self) -> bool:
        """True once the first keystroke has started the clock."""
        return self._start_time is not None

    @property
    def is_finished(self) -> bool:
        """True once the whole passage has been typed."""
        return self._end_time is not None

    @property
    def is_paused(self) -> bool:
        """True while idle past the threshold in an unfinished test."""
        return self._pause_start_time is not None and not self.is_finished

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_typing(self) -> None:
        """Begin timing. Callers check ``is_started`` first."""
        now = self._clock()
        self._start_time = now
        self._last_key_press_time = now
        logger.debug("Typing started at %.0f", now)

    def type_character(self, ch: str) -> bool:
        """Fill the next position with ``ch``. Returns False if refused."""
        if len(ch) != 1 or not self.is_started or self.is_finished:
            return False
        if self.cursor >= len(self._full_text):
            return False
        now = self._clock()
        self._record_key_press(now)

        index = self.cursor
        if ch == self._full_text[index]:
            self._correct_chars += 1
        else:
            self._errors.add(index)
        self._total_chars_typed += 1
        self._input_text += ch

        if self.cursor >= len(self._full_text):
            self._finish_typing(now)
        return True

    def delete_one_char(self) -> bool:
        """Remove the last typed character and forget its error mark."""
        if not self._input_text or not self.is_started or self.is_finished:
            return False
        self._record_key_press(self._clock())
        self._errors.discard(len(self._input_text) - 1)
        self._input_text = self._input_text[:-1]
        return True

    def delete_word(self) -> bool:
        """Remove trailing spaces and then everything back to the previous space."""
        if not self._input_text or not self.is_started or self.is_finished:
            return False
        self._record_key_press(self._clock())
        old_length = len(self._input_text)
        trimmed = self._input_text.rstrip(" ")
        last_space = trimmed.rfind(" ")
        new_text = trimmed[:last_space + 1] if last_space >= 0 else ""
        for index in range(len(new_text), old_length):
            self._errors.discard(index)
        self._input_text = new_text
        return True

    def record_key_press(self) -> None:
        """Close any open pause and mark activity now."""
        self._record_key_press(self._clock())

    def _record_key_press(self, now: float) -> None:
        if self._pause_start_time is not None:
            self._paused_time += now - self._pause_start_time
            self._pause_start_time = None
        self._last_key_press_time = now

    def tick(self, now: Optional[float] = None) -> bool:
        """Open a pause once the user has been idle for the threshold.

        The pause is backdated to ``last_key_press_time + IDLE_THRESHOLD_MS``
        so the accounting does not depend on how often the timer fires.
        Returns True when a pause was opened.
        """
        if now is None:
            now = self._clock()
        if (
            self._start_time is None
            or self._end_time is not None
            or self._last_key_press_time is None
            or self._pause_start_time is not None
        ):
            return False
        if now - self._last_key_press_time < IDLE_THRESHOLD_MS:
            return False
        self._pause_start_time = self._last_key_press_time + IDLE_THRESHOLD_MS
        logger.debug("Idle since %.0f, pausing the clock", self._last_key_press_time)
        return True

    def _finish_typing(self, now: float) -> None:
        self._end_time = now
        logger.info(
            "Test finished: %d/%d correct characters",
            self._correct_chars,
            self._total_chars_typed,
        )

    def reset_test(self, words: Optional[Sequence[str]] = None) -> None:
        """Start over with ``words`` or a freshly drawn random passage."""
        self._load(words if words is not None else default_passage(WORDS_PER_TEST))
        logger.debug("Session reset with %d words", len(self._words))

    # ------------------------------------------------------------------
    # Derived metrics
    # ------------------------------------------------------------------

    def live_elapsed_ms(self, now: Optional[float] = None) -> float:
        """Elapsed time with idle pauses excluded, for the live display."""
        if self._start_time is None:
            return 0.0
        if now is None:
            now = self._clock()
        end = self._end_time if self._end_time is not None else now
        paused = self._paused_time
        if self._pause_start_time is not None and self._end_time is None:
            paused += now - self._pause_start_time
        return end - self._start_time - paused

    def live_wpm(self, now: Optional[float] = None) -> int:
        return metrics.wpm(self._correct_chars, self.live_elapsed_ms(now) / 1000.0)

    def accuracy(self) -> int:
        return metrics.accuracy(self._correct_chars, self._total_chars_typed)

    def final_result(self) -> Optional[TypingResult]:
        """Completion report, or None while the test is still running.

        WPM here is computed from the raw wall-clock duration, idle time
        included; ``active_seconds`` carries the idle-excluded time.
        """
        if self._start_time is None or self._end_time is None:
            return None
        duration = (self._end_time - self._start_time) / 1000.0
        return TypingResult(
            wpm=metrics.wpm(self._correct_chars, duration),
            accuracy=self.accuracy(),
            duration_seconds=duration,
            active_seconds=self.live_elapsed_ms(self._end_time) / 1000.0,
            correct_chars=self._correct_chars,
            total_chars=self._total_chars_typed,
        )

    def char_state(self, index: int) -> CharState:
        if index < self.cursor:
            return CharState.ERROR if index in self._errors else CharState.CORRECT
        if index == self.cursor:
            return CharState.CURRENT
        return CharState.UNTYPED

    def snapshot(self, now: Optional[float] = None) -> SessionSnapshot:
        if now is None:
            now = self._clock()
        return SessionSnapshot(
            full_text=self._full_text,
            input_text=self._input_text,
            errors=self.errors,
            char_states=tuple(self.char_state(i) for i in range(len(self._full_text))),
            wpm=self.live_wpm(now),
            accuracy=self.accuracy(),
            elapsed_seconds=self.live_elapsed_ms(now) / 1000.0,
            is_finished=self.is_finished,
            is_paused=self.is_paused,
        )
