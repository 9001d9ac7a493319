"""Speed and accuracy metrics.

WPM uses the standard five-characters-per-word convention and counts correct
characters only. Both metrics round to the nearest integer with ties rounding
up, so 12.5 becomes 13 (Python's ``round`` would give 12).
"""

from __future__ import annotations

import math

CHARS_PER_WORD = 5
SECONDS_PER_MINUTE = 60


def round_half_up(value: float) -> int:
    """Nearest integer, ties towards positive infinity."""
    return int(math.floor(value + 0.5))


def wpm(correct_chars: int, elapsed_seconds: float) -> int:
    """Words per minute; 0 when no time has elapsed."""
    if elapsed_seconds <= 0:
        return 0
    return round_half_up(correct_chars * SECONDS_PER_MINUTE / (CHARS_PER_WORD * elapsed_seconds))


def accuracy(correct_chars: int, total_chars: int) -> int:
    """Percentage of attempted characters that were correct; 100 with no attempts."""
    if total_chars == 0:
        return 100
    return round_half_up(100 * correct_chars / total_chars)
