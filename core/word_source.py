"""Secret word selection and guess validation."""

import logging
import random
import threading
from datetime import date, datetime
from pathlib import Path

from core.dictionary_client import DictionaryClient
from core.models import WORD_LENGTH

log = logging.getLogger("wordlesync.word_source")

DEFAULT_WORD_LIST_PATH = Path(__file__).resolve().parent / "words.txt"

# Day zero for the daily word rotation
DAILY_EPOCH = date(1970, 1, 1)

# Used when the bundled list cannot be read, so a game is always playable
FALLBACK_WORDS: tuple[str, ...] = (
    "AMBER", "BLAZE", "CIDER", "DWELL", "EMBER",
    "FABLE", "GLEAM", "HAVEN", "IVORY", "JOLLY",
    "KNACK", "LUNAR", "MIRTH", "NOTCH", "OPERA",
    "PLUME", "QUILT", "RALLY", "SPRIG", "THYME",
    "UMBRA", "VERSE", "WALTZ", "YEARN", "ZESTY",
    "BRISK", "CHARM", "DRIFT", "FROST", "GROVE",
    "HUMID", "LATCH",
)

_word_list_cache: dict[str, tuple[str, ...]] = {}
_cache_lock = threading.Lock()


def _parse_word_list(lines) -> tuple[str, ...]:
    """Keep alphabetic five-letter entries, upper-cased, first occurrence wins."""
    seen = set()
    words = []
    for line in lines:
        word = line.strip().upper()
        if len(word) == WORD_LENGTH and word.isalpha() and word not in seen:
            seen.add(word)
            words.append(word)
    return tuple(words)


def load_word_list(path: Path | None = None) -> tuple[str, ...]:
    """Load the canonical word list, once per process and path.

    Args:
        path: Word list file (defaults to the bundled list)

    Returns:
        Tuple of upper-case five-letter words in file order
    """
    path = Path(path) if path else DEFAULT_WORD_LIST_PATH
    key = str(path.resolve())

    with _cache_lock:
        cached = _word_list_cache.get(key)
        if cached is not None:
            return cached

        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                words = _parse_word_list(f)
        except (PermissionError, UnicodeDecodeError, OSError) as e:
            log.warning(f"Cannot read word list {path}: {e}; using built-in list")
            words = FALLBACK_WORDS
        else:
            if not words:
                log.warning(f"Word list {path} has no five-letter words; using built-in list")
                words = FALLBACK_WORDS
            else:
                log.info(f"Loaded {len(words)} words from {path}")

        _word_list_cache[key] = words
        return words


def clear_word_list_cache() -> None:
    """Forget all loaded word lists (next load re-reads the file)."""
    with _cache_lock:
        _word_list_cache.clear()


class WordSource:
    """Supplies secret words and validates guesses.

    The bundled list decides the secret words. Guess validation asks the
    remote dictionary first so real words missing from the list are still
    accepted, and falls back to the list when the dictionary is unreachable.
    """

    def __init__(
        self,
        dictionary_client: DictionaryClient | None = None,
        word_list_path: Path | None = None,
    ):
        """Initialize word source.

        Args:
            dictionary_client: Remote dictionary, or None for local-only validation
            word_list_path: Alternative word list file
        """
        self.dictionary_client = dictionary_client
        self.words = load_word_list(word_list_path)
        self._word_set = frozenset(self.words)

    def daily_word(self, day: date | None = None) -> str:
        """Word of the day: a pure function of the date and the word list."""
        day = day or date.today()
        if isinstance(day, datetime):
            day = day.date()
        index = (day - DAILY_EPOCH).days % len(self.words)
        return self.words[index]

    def random_word(self) -> str:
        return random.choice(self.words)

    def is_known_locally(self, word: str) -> bool:
        return word.strip().upper() in self._word_set

    def validate(self, word: str) -> bool:
        """Check whether a guess is an acceptable word.

        Never raises; remote problems degrade to the local list.

        Args:
            word: Candidate guess

        Returns:
            True if the word is accepted
        """
        candidate = word.strip()
        if len(candidate) != WORD_LENGTH or not candidate.isalpha():
            return False

        if self.dictionary_client is None:
            return self.is_known_locally(candidate)

        result = self.dictionary_client.lookup(candidate)
        if not result.success:
            log.info(f"Dictionary unavailable ({result.error}), validating '{candidate}' locally")
            return self.is_known_locally(candidate)

        if result.value.found:
            return True
        return self.is_known_locally(candidate)

    def definition(self, word: str) -> str | None:
        """Best-effort definition lookup; None on any failure."""
        if self.dictionary_client is None:
            return None

        result = self.dictionary_client.lookup(word)
        if not result.success or not result.value.found:
            return None
        return result.value.definition
