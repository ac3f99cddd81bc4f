"""State of one game in progress."""

import logging
from enum import Enum

from core.models import MAX_GUESSES, WORD_LENGTH, GameMode, GameRecord, GuessResult
from core.scoring import evaluate_guess
from core.word_source import WordSource
from utils.dates import now_ms

log = logging.getLogger("wordlesync.game_session")


class GameStatus(str, Enum):
    PLAYING = "PLAYING"
    WON = "WON"
    LOST = "LOST"


class InvalidGuessError(ValueError):
    """Raised when a submitted guess cannot be scored."""

    pass


class GameSession:
    """One game: the letters being typed, scored guesses and the outcome."""

    def __init__(self, word_source: WordSource, user_id: str, mode: GameMode, target: str):
        """Initialize game session.

        Args:
            word_source: Word source used to validate guesses
            user_id: Player
            mode: Game mode
            target: Secret word
        """
        self.word_source = word_source
        self.user_id = user_id
        self.mode = mode
        self.target = target.upper()
        self.guesses: list[GuessResult] = []
        self.current_guess = ""
        self.status = GameStatus.PLAYING
        self.finished_at: int | None = None

    @classmethod
    def start(cls, word_source: WordSource, user_id: str, mode: GameMode) -> "GameSession":
        """Start a game with today's word (DAILY) or a random word (UNLIMITED)."""
        if mode is GameMode.DAILY:
            target = word_source.daily_word()
        else:
            target = word_source.random_word()
        log.debug(f"Starting {mode.value} game for user {user_id}")
        return cls(word_source, user_id, mode, target)

    @property
    def is_finished(self) -> bool:
        return self.status is not GameStatus.PLAYING

    @property
    def remaining_guesses(self) -> int:
        return MAX_GUESSES - len(self.guesses)

    def add_letter(self, letter: str) -> None:
        if self.is_finished or len(self.current_guess) >= WORD_LENGTH:
            return
        if len(letter) != 1 or not letter.isalpha():
            raise ValueError(f"Not a letter: {letter!r}")
        self.current_guess += letter.upper()

    def delete_letter(self) -> None:
        self.current_guess = self.current_guess[:-1]

    def submit_guess(self) -> GuessResult:
        """Score the typed guess.

        Returns:
            The scored guess

        Raises:
            InvalidGuessError: If the game is over, the guess is too short
                or the word is not accepted
        """
        if self.is_finished:
            raise InvalidGuessError("Game is already over")

        guess = self.current_guess
        if len(guess) != WORD_LENGTH:
            raise InvalidGuessError("Not enough letters")
        if not self.word_source.validate(guess):
            raise InvalidGuessError("Not in word list")

        result = evaluate_guess(guess, self.target)
        self.guesses.append(result)
        self.current_guess = ""

        if result.is_win:
            self._finish(GameStatus.WON)
        elif len(self.guesses) >= MAX_GUESSES:
            self._finish(GameStatus.LOST)
        return result

    def _finish(self, status: GameStatus) -> None:
        self.status = status
        self.finished_at = now_ms()
        log.info(f"Game over for user {self.user_id}: {status.value} in {len(self.guesses)}")

    def to_record(self) -> GameRecord:
        """Build the record to save once the game is over.

        Raises:
            ValueError: If the game is still being played
        """
        if not self.is_finished:
            raise ValueError("Game is still in progress")

        return GameRecord(
            user_id=self.user_id,
            mode=self.mode,
            word=self.target,
            guesses_used=len(self.guesses),
            played_at=self.finished_at,
            won=self.status is GameStatus.WON,
            guess_sequence=[guess.word for guess in self.guesses],
        )
