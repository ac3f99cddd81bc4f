"""HTTP client for the remote English dictionary service."""

import logging

import requests

from core.models import DictionaryEntry
from core.result import Result

log = logging.getLogger("wordlesync.dictionary_client")

DEFAULT_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en"
DEFAULT_TIMEOUT_SEC = 5.0


class DictionaryClient:
    """Looks words up in a dictionaryapi.dev compatible service."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        session: requests.Session | None = None,
    ):
        """Initialize dictionary client.

        Args:
            base_url: Entries endpoint; the word is appended as a path segment
            timeout_sec: Per-request timeout in seconds
            session: Optional requests session (a new one is created if omitted)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.session = session or requests.Session()

    def lookup(self, word: str) -> Result[DictionaryEntry]:
        """Look a word up.

        A 404 is a successful lookup of an unknown word. Anything else that
        is not a 200 with a JSON list of entries is a failure.

        Args:
            word: Word to look up (case-insensitive)

        Returns:
            Result carrying a DictionaryEntry, or the failure description
        """
        word = word.strip().lower()
        url = f"{self.base_url}/{word}"

        try:
            response = self.session.get(url, timeout=self.timeout_sec)
        except requests.RequestException as e:
            log.warning(f"Dictionary lookup for '{word}' failed: {e}")
            return Result.fail(f"Dictionary request failed: {e}")

        if response.status_code == 404:
            log.debug(f"Dictionary does not know '{word}'")
            return Result.ok(DictionaryEntry(word=word, found=False))

        if response.status_code != 200:
            log.warning(f"Dictionary returned HTTP {response.status_code} for '{word}'")
            return Result.fail(f"Dictionary returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            log.warning(f"Dictionary returned invalid JSON for '{word}': {e}")
            return Result.fail(f"Malformed dictionary response: {e}")

        if not isinstance(data, list) or not data:
            log.warning(f"Unexpected dictionary payload for '{word}': {type(data).__name__}")
            return Result.fail("Malformed dictionary response: expected a non-empty list")

        return Result.ok(
            DictionaryEntry(word=word, found=True, definition=_first_definition(data))
        )


def _first_definition(entries: list) -> str | None:
    """Extract the first definition text from a list of dictionary entries."""
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        for meaning in entry.get("meanings") or []:
            if not isinstance(meaning, dict):
                continue
            for definition in meaning.get("definitions") or []:
                if isinstance(definition, dict) and definition.get("definition"):
                    return str(definition["definition"])
    return None
