"""FastAPI web UI for playing tic-tac-toe against the AI in the browser."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .board import Board, Mark, Outcome, opponent_of
from .config import Settings
from .controller import (
    EngineContractError,
    GameListener,
    ScriptedMoveSource,
    TurnController,
    engine_sources,
)

logger = logging.getLogger(__name__)


class SessionListener(GameListener):
    """Records moves and the latest rejection for the HTTP layer."""

    def __init__(self) -> None:
        self.move_log: List[Dict[str, int | str]] = []
        self.rejection: Optional[str] = None

    def board_changed(self, board: Board, mark: Mark, index: int) -> None:
        self.move_log.append({"player": mark, "cellIndex": index})

    def move_rejected(self, mark: Mark, index: int, reason: str) -> None:
        self.rejection = reason

    def game_finished(self, outcome: Outcome) -> None:
        logger.info("Session game over after %d moves", len(self.move_log))


@dataclass
class GameSession:
    """An active game, the human's move queue and the AI's mark."""

    controller: TurnController
    human: ScriptedMoveSource
    human_mark: Mark
    listener: SessionListener
    ai_pending: bool = False
    error: Optional[str] = None
    updated_at: float = field(default_factory=lambda: time.time())
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def ai_mark(self) -> Mark:
        return opponent_of(self.human_mark)

    def ai_to_move(self) -> bool:
        return self.controller.active_mark == self.ai_mark


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Play tic-tac-toe against a perfect AI")

AI_THINK_DELAY: Tuple[float, float] = (0.3, 0.8)
SESSION_TTL_SECONDS = 60 * 30  # 30 minutes


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    human_mark: Literal["X", "O"] = Field(default="X", alias="humanMark")
    first_mark: Literal["X", "O"] = Field(default="X", alias="firstMark")


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _create_session(human_mark: Mark, first_mark: Mark) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    human = ScriptedMoveSource()
    listener = SessionListener()
    controller = TurnController(
        engine_sources(human_mark, human),
        first=first_mark,
        listener=listener,
        strict=Settings.from_env().strict,
    )
    session = GameSession(
        controller=controller, human=human, human_mark=human_mark, listener=listener
    )
    session_id = uuid.uuid4().hex
    _cleanup_sessions()
    SESSIONS[session_id] = session
    logger.info("New game %s: human %s, %s first", session_id, human_mark, first_mark)
    return session_id, session


def _cleanup_sessions() -> None:
    """Forget finished or failed games idle for longer than the TTL."""

    now = time.time()
    expired = [
        game_id
        for game_id, session in list(SESSIONS.items())
        if (session.controller.finished or session.error)
        and now - session.updated_at >= SESSION_TTL_SECONDS
    ]
    for game_id in expired:
        SESSIONS.pop(game_id, None)


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        try:
            if session.controller.finished or not session.ai_to_move():
                return
            session.controller.play_turn()
        except EngineContractError as exc:
            logger.error("Game %s stopped: %s", game_id, exc)
            session.error = str(exc)
        finally:
            session.ai_pending = False
            session.updated_at = time.time()


def _schedule_ai(
    game_id: str, session: GameSession, background_tasks: BackgroundTasks
) -> None:
    # Caller holds session.lock
    if not session.controller.finished and session.ai_to_move():
        session.ai_pending = True
        background_tasks.add_task(_run_ai_turn, game_id)


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        controller = session.controller
        board = controller.board
        outcome = board.outcome()
        state: Dict[str, object] = {
            "id": game_id,
            "cells": [c if c in ("X", "O") else "" for c in board.cells],
            "currentPlayer": controller.active_mark,
            "humanMark": session.human_mark,
            "aiMark": session.ai_mark,
            "status": outcome.status,
            "winner": outcome.winner,
            "availableMoves": board.available_moves(),
            "moveLog": list(session.listener.move_log),
            "aiPending": session.ai_pending,
            "error": session.error,
        }
        if session.listener.move_log:
            state["lastMove"] = session.listener.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: BackgroundTasks,
) -> None:
    with session.lock:
        controller = session.controller
        if session.error:
            raise HTTPException(status_code=500, detail=session.error)

        if controller.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending or session.ai_to_move():
            raise HTTPException(status_code=400, detail="AI is completing its move")

        session.listener.rejection = None
        session.human.clear()
        session.human.push(cell_index)
        if controller.play_turn() is None:
            raise HTTPException(
                status_code=400,
                detail=session.listener.rejection or "Move is not allowed on this turn",
            )
        session.updated_at = time.time()

        _schedule_ai(game_id, session, background_tasks)


@app.post("/api/game")
def create_game(
    request: NewGameRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    game_id, session = _create_session(request.human_mark, request.first_mark)
    with session.lock:
        _schedule_ai(game_id, session, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic-Tac-Toe</title>
    <style>
      body {
        font-family: system-ui, sans-serif;
        background: #0f172a;
        color: #e2e8f0;
        display: flex;
        flex-direction: column;
        align-items: center;
        margin: 0;
        padding: 2rem 1rem;
      }
      .controls {
        display: flex;
        gap: 0.75rem;
        margin-bottom: 1.5rem;
        align-items: center;
      }
      select,
      button {
        font: inherit;
        padding: 0.4rem 0.8rem;
        border-radius: 0.5rem;
        border: none;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 96px);
        grid-template-rows: repeat(3, 96px);
        gap: 6px;
      }
      .cell {
        background: #1e293b;
        font-size: 3rem;
        font-weight: 700;
        color: #f8fafc;
        cursor: pointer;
      }
      .cell:disabled {
        cursor: default;
      }
      .cell.last {
        background: #334155;
      }
      #status {
        margin-top: 1.5rem;
        min-height: 1.5rem;
      }
    </style>
  </head>
  <body>
    <h1>Tic-Tac-Toe</h1>
    <div class=\"controls\">
      <label>You play
        <select id=\"human\"><option>X</option><option>O</option></select>
      </label>
      <label>First move
        <select id=\"first\"><option>X</option><option>O</option></select>
      </label>
      <button id=\"new-game\">New game</button>
    </div>
    <div class=\"board\" id=\"board\"></div>
    <div id=\"status\"></div>
    <script>
      const boardEl = document.getElementById("board");
      const statusEl = document.getElementById("status");
      let state = null;
      let pollTimer = null;

      function describe(s) {
        if (s.status === "win") {
          return s.winner === s.humanMark ? "You win!" : "The AI wins.";
        }
        if (s.status === "draw") {
          return "It's a draw!";
        }
        if (s.aiPending || s.currentPlayer === s.aiMark) {
          return "AI (" + s.aiMark + ") is thinking...";
        }
        return "Your move (" + s.humanMark + ")";
      }

      function render(s) {
        state = s;
        boardEl.innerHTML = "";
        const playable =
          s.status === "in_progress" && !s.aiPending && s.currentPlayer === s.humanMark;
        s.cells.forEach((value, index) => {
          const cell = document.createElement("button");
          cell.className = "cell";
          if (s.lastMove && s.lastMove.cellIndex === index) {
            cell.classList.add("last");
          }
          cell.textContent = value;
          cell.disabled = !playable || value !== "";
          cell.addEventListener("click", () => play(index));
          boardEl.appendChild(cell);
        });
        statusEl.textContent = describe(s);
        schedulePoll(s);
      }

      function schedulePoll(s) {
        clearTimeout(pollTimer);
        if (s.status === "in_progress" && (s.aiPending || s.currentPlayer === s.aiMark)) {
          pollTimer = setTimeout(refresh, 300);
        }
      }

      async function request(url, options) {
        const response = await fetch(url, options);
        const payload = await response.json();
        if (!response.ok) {
          throw new Error(payload.detail || "Request failed");
        }
        return payload;
      }

      async function newGame() {
        const body = {
          humanMark: document.getElementById("human").value,
          firstMark: document.getElementById("first").value,
        };
        render(
          await request("/api/game", {
            method: "POST",
            headers: { "Content-Type": "application/json" },
            body: JSON.stringify(body),
          })
        );
      }

      async function refresh() {
        if (state) {
          render(await request("/api/game/" + state.id));
        }
      }

      async function play(index) {
        try {
          render(
            await request("/api/game/" + state.id + "/move", {
              method: "POST",
              headers: { "Content-Type": "application/json" },
              body: JSON.stringify({ cellIndex: index }),
            })
          );
        } catch (err) {
          statusEl.textContent = err.message;
        }
      }

      document.getElementById("new-game").addEventListener("click", newGame);
      newGame();
    </script>
  </body>
</html>
"""
