"""Passage preparation: the reference word list, custom text and continuation pages."""

from __future__ import annotations

import logging
import random
import re
import unicodedata
from collections import deque
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

logger = logging.getLogger(__name__)

WORDS_PER_TEST = 25

_WHITESPACE_RUN = re.compile(r"\s+")

# Unicode categories that cannot be typed on a keyboard: other symbols (emoji,
# pictographs), enclosing marks (keycaps), combining marks left over after NFC
# composition, format characters (ZWJ, tags), private use, surrogates and
# unassigned code points.
_STRIPPED_CATEGORIES = frozenset({"So", "Me", "Mn", "Cf", "Co", "Cs", "Cn"})


class WordRepository:
    """Reference word list loaded from ``data/words.yaml``."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or Path(__file__).resolve().parent.parent / "data" / "words.yaml"
        self._title, self._words = self._load_words()

    @property
    def title(self) -> str:
        return self._title

    def all(self) -> List[str]:
        return list(self._words)

    def __len__(self) -> int:
        return len(self._words)

    def _load_words(self) -> tuple[str, List[str]]:
        if not self._path.exists():
            raise FileNotFoundError(f"Word list not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{self._path.name}: expected YAML with 'title' and 'words'")
        title = raw.get("title") or self._path.stem
        content = raw.get("words")
        if content is None:
            raise ValueError(f"{self._path.name}: missing 'words'")
        if isinstance(content, list):
            words = [str(item).strip() for item in content if str(item).strip()]
        else:
            # allow words as a whitespace separated block
            words = str(content).split()
        if not words:
            raise ValueError(f"{self._path.name}: 'words' is empty")
        return str(title).strip(), words


@lru_cache(maxsize=1)
def default_repository() -> WordRepository:
    """Shared repository for the packaged word list."""
    return WordRepository()


def default_passage(
    count: int = WORDS_PER_TEST,
    rng: Optional[random.Random] = None,
    repository: Optional[WordRepository] = None,
) -> List[str]:
    """Draw ``count`` words uniformly at random, with replacement."""
    words = (repository or default_repository()).all()
    chooser = rng or random
    return [chooser.choice(words) for _ in range(count)]


def _is_typeable(ch: str) -> bool:
    if ch.isspace():
        return True
    code = ord(ch)
    # variation selectors and emoji skin-tone modifiers
    if 0xFE00 <= code <= 0xFE0F or 0xE0100 <= code <= 0xE01EF or 0x1F3FB <= code <= 0x1F3FF:
        return False
    category = unicodedata.category(ch)
    if category == "Cc":
        return False
    return category not in _STRIPPED_CATEGORIES


def normalize_text(raw: str) -> str:
    """Compose accents, drop untypeable symbols and collapse whitespace runs to single spaces."""
    composed = unicodedata.normalize("NFC", raw)
    kept = "".join(ch for ch in composed if _is_typeable(ch))
    return _WHITESPACE_RUN.sub(" ", kept).strip()


def prepare_custom_passage(raw: str, group_size: int = WORDS_PER_TEST) -> List[List[str]]:
    """Split arbitrary text into passages of ``group_size`` words.

    The last group may be shorter. Returns an empty list when the text holds
    no typeable words; callers fall back to :func:`default_passage`.
    """
    if group_size < 1:
        raise ValueError(f"group_size must be positive, got {group_size}")
    words = [word for word in normalize_text(raw).split(" ") if word]
    groups = [words[i:i + group_size] for i in range(0, len(words), group_size)]
    return [group for group in groups if group]


class PassageQueue:
    """Custom passages waiting to be typed, falling back to random ones when drained."""

    def __init__(
        self,
        groups: Optional[Iterable[List[str]]] = None,
        word_count: int = WORDS_PER_TEST,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._groups = deque(list(group) for group in (groups or []) if group)
        self._word_count = word_count
        self._rng = rng

    @classmethod
    def from_text(cls, raw: Optional[str], group_size: int = WORDS_PER_TEST) -> "PassageQueue":
        """Build a queue from custom text, logging when it yields nothing usable."""
        if not raw or not raw.strip():
            return cls(word_count=group_size)
        groups = prepare_custom_passage(raw, group_size)
        if not groups:
            logger.warning("Custom text contains no typeable words; using a random passage")
        else:
            logger.info("Prepared %d passage(s) from custom text", len(groups))
        return cls(groups, word_count=group_size)

    @property
    def remaining(self) -> int:
        """Number of custom passages not yet handed out."""
        return len(self._groups)

    def next_passage(self) -> List[str]:
        if self._groups:
            return self._groups.popleft()
        return default_passage(self._word_count, rng=self._rng)
