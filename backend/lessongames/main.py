"""Lesson Games FastAPI application."""
import logging

from fastapi import FastAPI, Request

from lessongames.errors import GameError
from lessongames.logic.models import GameSnapshot
from lessongames.logic.vocab import build_puzzle_pool, build_trivia_board, clean_vocab
from lessongames.middleware import ErrorHandlerMiddleware
from lessongames.protocol import (
    AddPlayerRequest,
    CreateSessionRequest,
    GameResponse,
    GuessRequest,
    SetActiveRequest,
    SnapshotView,
    SolveRequest,
    TriviaBoardRequest,
)
from lessongames.sessions import GameSession, session_store
from lessongames.validators import (
    validate_clue_available,
    validate_clue_open,
    validate_player_index,
    validate_pool,
    validate_roster,
    validate_trivia_loaded,
)


logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lesson Games",
    version="0.1.0",
    description="Wonder Wheel and Teacher's Trivia game sessions for classroom vocabulary",
)

app.add_middleware(ErrorHandlerMiddleware)


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    return exc.to_response()


def _respond(session: GameSession, snapshot: GameSnapshot | None = None) -> dict:
    """Build the protocol response, handing over any feedback queued so far."""
    snapshot = snapshot or session.controller.snapshot()
    response = GameResponse(
        sessionId=session.session_id,
        snapshot=SnapshotView.from_snapshot(snapshot),
        feedback=session.feedback.drain(),
    )
    return response.model_dump()


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/sessions")
async def create_session(body: CreateSessionRequest) -> dict:
    """
    Start a classroom session from a roster and a vocabulary list.

    The vocabulary is cleaned the same way generated vocabulary is, then
    filtered to terms long enough to make a puzzle.
    """
    names = validate_roster(body)
    vocab = clean_vocab(item.model_dump() for item in body.vocab)
    pool = build_puzzle_pool(vocab)
    validate_pool(pool)

    session = session_store.create(names, pool, seed=body.seed)
    logger.info(
        "Created session %s with %d players and %d puzzles",
        session.session_id, len(names), len(pool),
    )
    return _respond(session)


@app.get("/sessions/{session_id}")
async def get_session(session_id: str) -> dict:
    return _respond(session_store.get(session_id))


@app.post("/sessions/{session_id}/spin")
async def spin(session_id: str) -> dict:
    """Spin the wheel. Ignored while it is already spinning."""
    session = session_store.get(session_id)
    return _respond(session, session.controller.spin())


@app.post("/sessions/{session_id}/guess")
async def guess(session_id: str, body: GuessRequest) -> dict:
    session = session_store.get(session_id)
    letter = body.letter.strip()
    return _respond(session, session.controller.guess_letter(letter))


@app.post("/sessions/{session_id}/solve")
async def solve(session_id: str, body: SolveRequest) -> dict:
    session = session_store.get(session_id)
    return _respond(session, session.controller.solve(body.text))


@app.post("/sessions/{session_id}/hints/letter")
async def letter_hint(session_id: str) -> dict:
    session = session_store.get(session_id)
    return _respond(session, session.controller.use_letter_hint())


@app.post("/sessions/{session_id}/hints/context")
async def context_hint(session_id: str) -> dict:
    session = session_store.get(session_id)
    return _respond(session, session.controller.use_context_hint())


@app.post("/sessions/{session_id}/advance")
async def advance(session_id: str) -> dict:
    """Skip to the next puzzle. Scores are kept."""
    session = session_store.get(session_id)
    return _respond(session, session.controller.advance())


@app.post("/sessions/{session_id}/players")
async def add_player(session_id: str, body: AddPlayerRequest) -> dict:
    session = session_store.get(session_id)
    return _respond(session, session.controller.add_player(body.name))


@app.put("/sessions/{session_id}/active")
async def set_active(session_id: str, body: SetActiveRequest) -> dict:
    session = session_store.get(session_id)
    validate_player_index(session.controller.state, body.index)
    return _respond(session, session.controller.set_active_player(body.index))


@app.post("/sessions/{session_id}/trivia")
async def load_trivia(session_id: str, body: TriviaBoardRequest) -> dict:
    session = session_store.get(session_id)
    board = build_trivia_board(body.model_dump())
    return _respond(session, session.controller.load_trivia(board))


@app.post("/sessions/{session_id}/trivia/clues/{category}/{row}")
async def open_clue(session_id: str, category: int, row: int) -> dict:
    session = session_store.get(session_id)
    validate_clue_available(session.controller.state, category, row)
    return _respond(session, session.controller.open_trivia_clue(category, row))


@app.post("/sessions/{session_id}/trivia/correct")
async def trivia_correct(session_id: str) -> dict:
    session = session_store.get(session_id)
    validate_clue_open(session.controller.state)
    return _respond(session, session.controller.mark_trivia_correct())


@app.post("/sessions/{session_id}/trivia/incorrect")
async def trivia_incorrect(session_id: str) -> dict:
    session = session_store.get(session_id)
    validate_clue_open(session.controller.state)
    return _respond(session, session.controller.mark_trivia_incorrect())


@app.post("/sessions/{session_id}/trivia/pass")
async def trivia_pass(session_id: str) -> dict:
    """Mark the open clue used without scoring it."""
    session = session_store.get(session_id)
    validate_clue_open(session.controller.state)
    return _respond(session, session.controller.pass_trivia_clue())


@app.post("/sessions/{session_id}/trivia/close")
async def trivia_close(session_id: str) -> dict:
    session = session_store.get(session_id)
    validate_clue_open(session.controller.state)
    return _respond(session, session.controller.close_trivia_clue())


@app.put("/sessions/{session_id}/trivia/active")
async def trivia_set_active(session_id: str, body: SetActiveRequest) -> dict:
    session = session_store.get(session_id)
    validate_trivia_loaded(session.controller.state)
    validate_player_index(session.controller.state, body.index)
    return _respond(session, session.controller.set_trivia_active_player(body.index))
