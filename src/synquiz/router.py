import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Cookie, Depends, Form, Query, Response
from fastapi.responses import JSONResponse

from . import database
from .config import settings
from .globals import cached_failed_stats, controller, session_store, vocab_manager
from .models import AnswerRecord, GameStatus, SessionData
from .session import GameError
from .stats import most_failed

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def error_response(error: GameError) -> JSONResponse:
    return JSONResponse({"error": str(error)}, status_code=error.status_code)


def invalid_session() -> JSONResponse:
    return JSONResponse({"error": "Session invalid"}, status_code=401)


def session_started(session: SessionData) -> JSONResponse:
    new_id = session_store.create(session)
    logger.info(f"New session: {new_id} [Level: {session.level}, Mode: {session.mode.value}]")
    response = JSONResponse(state_payload(session), status_code=201)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=new_id,
        httponly=True,
        samesite="Lax",
    )
    return response


def state_payload(session: SessionData) -> dict:
    return {
        "status": session.status.value,
        "mode": session.mode.value,
        "level": session.level,
        "players": [p.model_dump() for p in session.players],
        "current_player_index": session.current_player_index,
        "current_question_index": session.current_question_index,
        "questions_per_player": session.questions_per_player,
        "total_questions": len(session.prepared_questions),
        "already_recorded": session.already_recorded,
    }


# --- Words ---
@router.get("/api/levels")
async def get_levels():
    return vocab_manager.get_levels()


@router.get("/api/words/search")
async def search_words(q: str = Query(..., min_length=1)):
    return vocab_manager.search(q)


# --- Game flow ---
@router.post("/start")
async def start_game(
    level: str = Form(...),
    player_names: List[str] = Form([]),
    user_id: Optional[str] = Form(None),
):
    try:
        session = controller.start_new_game(level, player_names, user_id)
    except GameError as e:
        return error_response(e)
    return session_started(session)


@router.post("/daily/start")
async def start_daily(user_id: Optional[str] = Form(None)):
    try:
        session = controller.start_daily_challenge(user_id)
    except GameError as e:
        return error_response(e)
    return session_started(session)


@router.post("/api/turn")
async def start_turn(session_id: str = Depends(get_session_id)):
    session = session_store.get(session_id)
    if not session:
        return invalid_session()
    try:
        controller.start_turn(session)
    except GameError as e:
        return error_response(e)
    return state_payload(session)


@router.get("/api/question")
async def get_question(session_id: str = Depends(get_session_id)):
    session = session_store.get(session_id)
    if not session:
        return invalid_session()
    if session.status != GameStatus.PLAYING:
        return JSONResponse({"error": "No turn in progress"}, status_code=409)
    question = session.current_question
    if question is None:
        return JSONResponse({"error": "Index error"}, status_code=404)

    record = None
    if session.is_answered and session.answers:
        record = session.answers[-1]
    return {
        "word": question.source_word.headword,
        "options": list(question.options),
        "player": session.current_player.model_dump(),
        "current_index": session.current_question_index,
        "questions_per_player": session.questions_per_player,
        "answer_record": record,
    }


@router.post("/submit_answer", response_model=AnswerRecord)
async def submit_answer(
    selected_option_index: int = Form(...),
    session_id: str = Depends(get_session_id),
):
    session = session_store.get(session_id)
    if not session:
        return invalid_session()
    try:
        return controller.answer(session, selected_option_index)
    except GameError as e:
        return error_response(e)


@router.post("/api/next")
async def next_question(session_id: str = Depends(get_session_id)):
    session = session_store.get(session_id)
    if not session:
        return invalid_session()
    try:
        controller.next_question(session)
    except GameError as e:
        return error_response(e)
    return state_payload(session)


@router.get("/api/result")
async def get_result(session_id: str = Depends(get_session_id)):
    session = session_store.get(session_id)
    if not session:
        return invalid_session()
    if session.status != GameStatus.SUMMARY:
        return JSONResponse({"error": "Game not finished"}, status_code=409)

    ranking = sorted(session.players, key=lambda p: (-p.score, p.time))
    return {
        **state_payload(session),
        "ranking": [p.model_dump() for p in ranking],
        "answers": session.answers,
    }


@router.post("/api/reset")
async def reset_session(response: Response, session_id: str = Depends(get_session_id)):
    session_store.delete(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


# --- Player history ---
@router.get("/api/users/{user_id}/failed-words")
async def get_failed_words(user_id: str, limit: int = Query(20, ge=1, le=100)):
    stats = most_failed(cached_failed_stats(user_id), limit)
    return [{**s.model_dump(), "wrong_rate": s.wrong_rate} for s in stats]


@router.get("/api/users/{user_id}/history")
async def get_history(user_id: str):
    return database.fetch_history_by_user(user_id)


@router.get("/api/daily/leaderboard")
async def get_daily_leaderboard(day: Optional[date] = None):
    return database.fetch_daily_leaderboard(day or controller.today())


@router.get("/api/daily/review")
async def get_daily_review(day: Optional[date] = None):
    return database.fetch_daily_runs_with_answers(day or controller.today())


@router.get("/api/leaderboard/{period}")
async def get_period_leaderboard(period: str):
    today = controller.today()
    if period == "week":
        start, end = database.current_week_range(today)
    elif period == "month":
        start, end = database.current_month_range(today)
    else:
        return JSONResponse({"error": "Unknown period"}, status_code=404)
    return database.fetch_period_leaderboard(start, end)
