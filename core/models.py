"""Pydantic models for WordleSync data structures."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

WORD_LENGTH = 5
MAX_GUESSES = 6


class GameMode(str, Enum):
    """Game variant."""

    UNLIMITED = "UNLIMITED"
    DAILY = "DAILY"


class LetterVerdict(str, Enum):
    """Classification of one guessed letter against the target."""

    CORRECT = "CORRECT"
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"


class SyncStatus(str, Enum):
    """Whether a record has reached the remote store."""

    LOCAL_ONLY = "LOCAL_ONLY"
    SYNCED = "SYNCED"


class GameRecord(BaseModel):
    """One completed or abandoned game."""

    local_id: int | None = Field(
        default=None, description="Local row id, assigned by the local store"
    )
    remote_id: str = Field(
        default="", description="Remote document id (empty = not yet synced)"
    )
    user_id: str = Field(..., description="Owning user id")
    mode: GameMode = Field(..., description="Game mode")
    word: str = Field(..., description="Secret word, upper case")
    guesses_used: int = Field(..., ge=1, le=MAX_GUESSES, description="Submitted guesses")
    played_at: int = Field(..., ge=0, description="Completion timestamp (ms since epoch)")
    won: bool = Field(..., description="True if the final guess matched the word")
    guess_sequence: list[str] = Field(
        default_factory=list, max_length=MAX_GUESSES, description="Guesses in order"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("word")
    @classmethod
    def validate_word(cls, v: str) -> str:
        word = v.strip().upper()
        if len(word) != WORD_LENGTH:
            raise ValueError(f"word must have {WORD_LENGTH} letters, got {v!r}")
        return word

    @field_validator("guess_sequence")
    @classmethod
    def normalize_guesses(cls, v: list[str]) -> list[str]:
        return [guess.strip().upper() for guess in v]

    @property
    def sync_status(self) -> SyncStatus:
        return SyncStatus.SYNCED if self.remote_id else SyncStatus.LOCAL_ONLY

    def with_remote_id(self, remote_id: str) -> "GameRecord":
        """Return a copy carrying the remote id (LOCAL_ONLY -> SYNCED)."""
        return self.model_copy(update={"remote_id": remote_id})

    def with_local_id(self, local_id: int | None) -> "GameRecord":
        return self.model_copy(update={"local_id": local_id})


class GuessResult(BaseModel):
    """A scored guess."""

    word: str = Field(..., description="Guessed word, upper case")
    verdicts: list[LetterVerdict] = Field(..., description="One verdict per letter")

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def is_win(self) -> bool:
        return all(v is LetterVerdict.CORRECT for v in self.verdicts)


class UserStats(BaseModel):
    """Aggregate play counts for a user."""

    total_games: int = Field(default=0, ge=0, description="Games played")
    total_wins: int = Field(default=0, ge=0, description="Games won")

    model_config = ConfigDict(extra="ignore")

    @property
    def win_rate(self) -> float:
        if self.total_games == 0:
            return 0.0
        return self.total_wins / self.total_games


class UserProfile(BaseModel):
    """Remote user record carrying the authoritative stats."""

    user_id: str = Field(..., description="Stable user id")
    email: str | None = Field(default=None, description="Email address")
    display_name: str | None = Field(default=None, description="Display name")
    created_at: int = Field(default=0, ge=0, description="Creation time (ms)")
    total_games: int = Field(default=0, ge=0, description="Games played")
    total_wins: int = Field(default=0, ge=0, description="Games won")

    model_config = ConfigDict(extra="ignore")

    @property
    def stats(self) -> UserStats:
        return UserStats(total_games=self.total_games, total_wins=self.total_wins)


class DictionaryEntry(BaseModel):
    """Outcome of a successful dictionary lookup."""

    word: str = Field(..., description="Looked-up word")
    found: bool = Field(..., description="Whether the dictionary knows the word")
    definition: str | None = Field(default=None, description="First definition, if any")

    model_config = ConfigDict(extra="ignore")
