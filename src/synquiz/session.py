import logging
import time
import uuid
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from . import database
from .config import settings
from .generator import PoolGenerator
from .models import (
    AnswerRecord,
    FailureStat,
    GameMode,
    GameStatus,
    Player,
    SessionData,
)
from .scoring import compute_bonus, compute_points
from .stats import stats_for_level
from .vocabulary import VocabularyManager

logger = logging.getLogger(__name__)


# --- Errors ---
class GameError(Exception):
    status_code = 400


class NoWordsAvailable(GameError):
    status_code = 404


class LoginRequired(GameError):
    status_code = 401


class AlreadyPlayedToday(GameError):
    status_code = 409


class InvalidAction(GameError):
    status_code = 400


def display_name(user_id: Optional[str]) -> str:
    if user_id:
        name = user_id.split("@")[0].strip().upper()
        if name:
            return name
    return "NI"


# --- Session storage ---
class SessionStore:
    """In-memory sessions that expire ``timeout_minutes`` after creation."""

    def __init__(self, timeout_minutes: int = settings.SESSION_TIMEOUT_MINUTES):
        self.timeout = timedelta(minutes=timeout_minutes)
        self.sessions: Dict[str, SessionData] = {}

    def create(self, session: SessionData) -> str:
        new_id = str(uuid.uuid4())
        self.sessions[new_id] = session
        return new_id

    def get(self, session_id: Optional[str]) -> Optional[SessionData]:
        if not session_id or session_id not in self.sessions:
            return None
        session = self.sessions[session_id]
        if datetime.now() - session.created_at > self.timeout:
            del self.sessions[session_id]
            return None
        return session

    def delete(self, session_id: Optional[str]) -> None:
        self.sessions.pop(session_id, None)


# --- Game flow ---
class GameController:
    """Drives a game from pool generation to the final summary.

    Elapsed answer times come from ``clock`` (seconds). Results of solo games
    played by a known user are written through ``synquiz.database``.
    """

    def __init__(
        self,
        vocab_manager: VocabularyManager,
        failed_stats_loader: Optional[Callable[[str], List[FailureStat]]] = None,
        generator: Optional[PoolGenerator] = None,
        clock: Callable[[], float] = time.time,
        today: Callable[[], date] = date.today,
    ):
        self.vocab_manager = vocab_manager
        self.failed_stats_loader = failed_stats_loader
        self.generator = generator or PoolGenerator()
        self.clock = clock
        self.today = today

    def start_new_game(
        self,
        level: str,
        player_names: Sequence[str] = (),
        user_id: Optional[str] = None,
    ) -> SessionData:
        names = [name.strip() for name in player_names if name.strip()]
        if not names:
            names = [display_name(user_id)]
        players = [Player(id=i, name=name) for i, name in enumerate(names)]

        source = self.vocab_manager.get_words(level)
        if not source:
            raise NoWordsAvailable(f"No words available for level '{level}'.")

        weights: Dict[str, FailureStat] = {}
        if user_id and self.failed_stats_loader is not None:
            weights = stats_for_level(self.failed_stats_loader(user_id), level)

        needed = len(players) * settings.QUESTIONS_PER_PLAYER
        pool = self.generator.generate(needed, source, weights)
        logger.info(
            f"New game: level={level} players={len(players)} "
            f"questions={len(pool)} weighted={len(weights)}"
        )
        return SessionData(
            prepared_questions=pool,
            players=players,
            level=level,
            questions_per_player=settings.QUESTIONS_PER_PLAYER,
            mode=GameMode.REGULAR,
            user_id=user_id,
        )

    def start_daily_challenge(self, user_id: Optional[str]) -> SessionData:
        if not user_id:
            raise LoginRequired("The daily challenge requires a logged-in player.")
        if database.has_played_daily_challenge(user_id, self.today()):
            raise AlreadyPlayedToday("Today's challenge has already been played.")

        source = self.vocab_manager.get_all_active()
        if not source:
            raise NoWordsAvailable("No words available for the daily challenge.")

        pool = self.generator.generate(settings.DAILY_QUESTIONS, source)
        logger.info(f"Daily challenge started: user={user_id}")
        return SessionData(
            prepared_questions=pool,
            players=[Player(id=0, name=display_name(user_id))],
            level="daily",
            questions_per_player=settings.DAILY_QUESTIONS,
            mode=GameMode.DAILY,
            user_id=user_id,
        )

    def start_turn(self, session: SessionData) -> None:
        if session.status != GameStatus.INTERMISSION:
            raise InvalidAction("A turn can only start from the intermission.")
        now = self.clock()
        session.status = GameStatus.PLAYING
        session.current_question_index = 0
        session.is_answered = False
        session.turn_started_at = now
        session.question_started_at = now

    def answer(self, session: SessionData, option_index: int) -> AnswerRecord:
        if session.status != GameStatus.PLAYING:
            raise InvalidAction("No turn in progress.")
        if session.is_answered:
            raise InvalidAction("Already answered.")
        question = session.current_question
        if question is None:
            raise InvalidAction("No question to answer.")
        if not (0 <= option_index < len(question.options)):
            raise InvalidAction("Invalid option.")

        elapsed = max(0.0, self.clock() - session.question_started_at)
        chosen = question.options[option_index]
        is_correct = chosen == question.correct_answer
        bonus = compute_bonus(elapsed) if is_correct else 0
        points = compute_points(is_correct, elapsed)

        player = session.current_player
        if is_correct:
            player.score += points
            player.correct_answers += 1

        record = AnswerRecord(
            question_index=session.current_question_index,
            player_id=player.id,
            word_id=question.source_word.id,
            word=question.source_word.headword,
            user_answer=chosen,
            correct_answer=question.correct_answer,
            is_correct=is_correct,
            response_ms=max(1, round(elapsed * 1000)),
            bonus=bonus,
            points=points,
        )
        session.answers.append(record)
        session.is_answered = True

        if session.user_id and session.mode == GameMode.REGULAR:
            database.insert_game_answer(
                session.user_id, session.level, question, chosen, is_correct
            )
        return record

    def next_question(self, session: SessionData) -> None:
        if session.status != GameStatus.PLAYING:
            raise InvalidAction("No turn in progress.")
        if not session.is_answered:
            raise InvalidAction("Answer the current question first.")
        if session.current_question_index < session.questions_per_player - 1:
            session.current_question_index += 1
            session.question_started_at = self.clock()
            session.is_answered = False
        else:
            self.finish_turn(session)

    def finish_turn(self, session: SessionData) -> None:
        session.current_player.time = self.clock() - session.turn_started_at
        session.is_answered = False
        if session.current_player_index < len(session.players) - 1:
            session.current_player_index += 1
            session.current_question_index = 0
            session.status = GameStatus.INTERMISSION
            return

        session.status = GameStatus.SUMMARY
        logger.info(
            f"Game finished: mode={session.mode.value} level={session.level} "
            f"scores={[p.score for p in session.players]}"
        )
        if session.user_id and len(session.players) == 1:
            self.save_results(session)

    def save_results(self, session: SessionData) -> None:
        player = session.players[0]
        total = session.questions_per_player
        if session.mode == GameMode.DAILY:
            result = database.save_daily_challenge_run(
                user_id=session.user_id,
                player_name=player.name,
                challenge_date=self.today(),
                score=player.score,
                correct=player.correct_answers,
                total=total,
                time_seconds=player.time,
                answers=session.answers,
            )
            if result == "already_played":
                session.already_recorded = True
                logger.warning(
                    f"Daily run not saved, already recorded: user={session.user_id}"
                )
        else:
            database.insert_game_run(
                user_id=session.user_id,
                level=session.level,
                total=total,
                correct=player.correct_answers,
                wrong=total - player.correct_answers,
                time_seconds=player.time,
            )
