from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_synonyms(value: Any) -> List[str]:
    """Turns a raw synonym field into a clean, de-duplicated list.

    Accepts a list/tuple or a string separated by ``|`` or ``;``. Items are
    stringified and trimmed, blanks are dropped and the first occurrence of
    each synonym keeps its position.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.replace(";", "|").split("|")
    elif not isinstance(value, (list, tuple)):
        return []
    cleaned = (str(item).strip() for item in value)
    return list(dict.fromkeys(item for item in cleaned if item))


# --- Core models ---
class WordEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    headword: str
    synonyms: Tuple[str, ...]

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("headword")
    @classmethod
    def _strip_headword(cls, value: str) -> str:
        return value.strip()

    @field_validator("synonyms", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Tuple[str, ...]:
        return tuple(normalize_synonyms(value))


class FailureStat(BaseModel):
    word_id: str
    headword: str = ""
    level: str = ""
    wrong: int = 0
    attempts: int = 0

    @field_validator("word_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)

    @property
    def wrong_rate(self) -> float:
        return (self.wrong / self.attempts) * 100 if self.attempts > 0 else 0.0


class QuestionItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_word: WordEntry
    correct_answer: str
    options: Tuple[str, ...]


# --- Session models ---
class GameMode(str, Enum):
    REGULAR = "regular"
    DAILY = "daily"


class GameStatus(str, Enum):
    INTERMISSION = "intermission"
    PLAYING = "playing"
    SUMMARY = "summary"


class Player(BaseModel):
    id: int
    name: str
    score: int = 0
    time: float = 0.0
    correct_answers: int = 0


class AnswerRecord(BaseModel):
    question_index: int
    player_id: int
    word_id: str
    word: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    response_ms: int
    bonus: int
    points: int


class SessionData(BaseModel):
    prepared_questions: List[QuestionItem]
    players: List[Player]
    level: str
    questions_per_player: int
    mode: GameMode = GameMode.REGULAR
    user_id: Optional[str] = None
    status: GameStatus = GameStatus.INTERMISSION
    current_player_index: int = 0
    current_question_index: int = 0
    is_answered: bool = False
    already_recorded: bool = False
    answers: List[AnswerRecord] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    turn_started_at: float = 0.0
    question_started_at: float = 0.0

    @property
    def pool_index(self) -> int:
        return (
            self.current_player_index * self.questions_per_player
            + self.current_question_index
        )

    @property
    def current_question(self) -> Optional[QuestionItem]:
        if 0 <= self.pool_index < len(self.prepared_questions):
            return self.prepared_questions[self.pool_index]
        return None

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]
