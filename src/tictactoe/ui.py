"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, field_validator

from .ai import DIFFICULTIES, HARD
from .session import (
    HUMAN_VS_COMPUTER,
    MODES,
    GameSession,
    SessionUpdate,
    change_difficulty,
    new_session,
    reset,
    resolve_pending_computer_move,
    snapshot,
    submit_human_move,
)

logger = logging.getLogger(__name__)


@dataclass
class GameEntry:
    """Registered game: the current session plus the lock guarding it."""

    session: GameSession
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


GAMES: Dict[str, GameEntry] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe against a friend or the computer")


ALLOWED_MODES: Tuple[str, ...] = MODES
ALLOWED_DIFFICULTIES: Tuple[str, ...] = DIFFICULTIES
COMPUTER_THINK_DELAY: Tuple[float, float] = (0.4, 0.9)


def _ensure_mode(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in ALLOWED_MODES:
        raise ValueError(
            f"Unsupported mode {value!r}. Choose one of {', '.join(ALLOWED_MODES)}."
        )
    return value


def _ensure_difficulty(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in ALLOWED_DIFFICULTIES:
        raise ValueError(
            f"Unsupported difficulty {value!r}. "
            f"Choose one of {', '.join(ALLOWED_DIFFICULTIES)}."
        )
    return value


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    mode: str = Field(default=HUMAN_VS_COMPUTER, description="Who plays O")
    difficulty: str = Field(default=HARD, description="Computer strength")

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        return _ensure_mode(value)

    @field_validator("difficulty")
    @classmethod
    def ensure_supported_difficulty(cls, value: str) -> str:
        return _ensure_difficulty(value)


class ResetRequest(BaseModel):
    """Request payload for restarting a game, optionally switching settings."""

    mode: Optional[str] = None
    difficulty: Optional[str] = None

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: Optional[str]) -> Optional[str]:
        return _ensure_mode(value)

    @field_validator("difficulty")
    @classmethod
    def ensure_supported_difficulty(cls, value: Optional[str]) -> Optional[str]:
        return _ensure_difficulty(value)


class DifficultyRequest(BaseModel):
    """Request payload for changing difficulty without restarting."""

    difficulty: str

    @field_validator("difficulty")
    @classmethod
    def ensure_supported_difficulty(cls, value: str) -> str:
        return _ensure_difficulty(value)


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    index: int = Field(ge=0, le=8, description="Cell index, row-major")


def _register(session: GameSession) -> str:
    game_id = uuid.uuid4().hex
    GAMES[game_id] = GameEntry(session=session)
    return game_id


def _get_entry(game_id: str) -> GameEntry:
    try:
        return GAMES[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_computer_turn(game_id: str, generation: int) -> None:
    entry = GAMES.get(game_id)
    if not entry:
        return

    time.sleep(max(0.0, random.uniform(*COMPUTER_THINK_DELAY)))

    with entry.lock:
        update = resolve_pending_computer_move(entry.session, generation)
    if update.accepted:
        logger.debug("Game %s: computer played %s", game_id, update.move)


def _schedule_if_pending(
    game_id: str, update: SessionUpdate, background_tasks: Optional[BackgroundTasks]
) -> None:
    if update.computer_pending and background_tasks is not None:
        background_tasks.add_task(_run_computer_turn, game_id, update.generation)


def _serialize(
    game_id: str, session: GameSession, update: Optional[SessionUpdate] = None
) -> Dict[str, object]:
    if update is None:
        update = snapshot(session)
    state = update.to_dict()
    state.update(
        {
            "id": game_id,
            "mode": session.mode,
            "difficulty": session.difficulty,
            "moveLog": list(session.move_log),
        }
    )
    if session.move_log:
        state["lastMove"] = session.move_log[-1]
    return state


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    session = new_session(request.mode, request.difficulty)
    game_id = _register(session)
    logger.info("Created game %s", game_id)
    return _serialize(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    entry = _get_entry(game_id)
    with entry.lock:
        return _serialize(game_id, entry.session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    entry = _get_entry(game_id)
    with entry.lock:
        update = submit_human_move(entry.session, request.index)
        state = _serialize(game_id, entry.session, update)
    _schedule_if_pending(game_id, update, background_tasks)
    return state


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str, request: ResetRequest) -> Dict[str, object]:
    entry = _get_entry(game_id)
    with entry.lock:
        entry.session = reset(entry.session, request.mode, request.difficulty)
        return _serialize(game_id, entry.session)


@app.post("/api/game/{game_id}/difficulty")
def set_difficulty(
    game_id: str, request: DifficultyRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    entry = _get_entry(game_id)
    with entry.lock:
        update = change_difficulty(entry.session, request.difficulty)
        state = _serialize(game_id, entry.session, update)
    _schedule_if_pending(game_id, update, background_tasks)
    return state


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
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(460px, 100%);
        text-align: center;
      }
      h1 {
        margin: 0 0 1.25rem;
        letter-spacing: 0.06em;
      }
      .controls {
        display: flex;
        flex-wrap: wrap;
        gap: 0.75rem;
        justify-content: center;
        align-items: center;
        margin-bottom: 1.25rem;
      }
      button,
      select {
        font-size: 1rem;
        padding: 0.55rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
        font-family: inherit;
      }
      select:disabled {
        opacity: 0.5;
        cursor: default;
      }
      #board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.5rem;
        width: min(320px, 100%);
        margin: 0 auto 1rem;
      }
      #board.thinking {
        opacity: 0.75;
      }
      .cell {
        aspect-ratio: 1;
        border-radius: 14px;
        font-size: 2.6rem;
        font-weight: 700;
        padding: 0;
      }
      .cell.x {
        color: #3a66ff;
      }
      .cell.o {
        color: #ff5f6d;
      }
      .cell.win {
        background: #fff2b3;
      }
      #status {
        min-height: 1.5rem;
        font-weight: 600;
      }
      .modal {
        position: fixed;
        inset: 0;
        background: rgba(12, 26, 51, 0.45);
        display: flex;
        align-items: center;
        justify-content: center;
      }
      .modal.hidden {
        display: none;
      }
      .modal-card {
        background: white;
        border-radius: 18px;
        padding: 2rem 2.5rem;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.25);
      }
    </style>
  </head>
  <body>
    <main>
      <h1>Tic-Tac-Toe</h1>
      <div class=\"controls\">
        <label for=\"mode\">Mode</label>
        <select id=\"mode\">
          <option value=\"human-vs-computer\">vs Computer</option>
          <option value=\"human-vs-human\">vs Friend</option>
        </select>
        <label for=\"difficulty\">Difficulty</label>
        <select id=\"difficulty\">
          <option value=\"hard\">Hard</option>
          <option value=\"easy\">Easy</option>
        </select>
        <button id=\"restartBtn\" type=\"button\">Restart</button>
      </div>
      <div id=\"board\"></div>
      <p id=\"status\"></p>
    </main>
    <div id=\"winnerModal\" class=\"modal hidden\" role=\"dialog\" aria-modal=\"true\">
      <div class=\"modal-card\">
        <h2 id=\"winnerText\"></h2>
        <button id=\"closeModal\" type=\"button\">Close</button>
      </div>
    </div>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const modeEl = document.getElementById('mode');
      const difficultyEl = document.getElementById('difficulty');
      const restartBtn = document.getElementById('restartBtn');
      const winnerModal = document.getElementById('winnerModal');
      const winnerText = document.getElementById('winnerText');
      const closeModal = document.getElementById('closeModal');

      let gameId = null;
      let gameState = null;
      let pollHandle = null;
      let shownResult = null;

      for (let i = 0; i < 9; i += 1) {
        const cell = document.createElement('button');
        cell.type = 'button';
        cell.className = 'cell';
        cell.dataset.index = String(i);
        cell.addEventListener('click', () => sendMove(i));
        boardEl.appendChild(cell);
      }

      async function request(path, body) {
        const options = body === undefined
          ? {}
          : {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify(body),
            };
        const response = await fetch(path, options);
        if (!response.ok) {
          throw new Error('Request failed');
        }
        return response.json();
      }

      async function startGame() {
        stopPolling();
        hideModal();
        try {
          setState(
            await request('/api/game', {
              mode: modeEl.value,
              difficulty: difficultyEl.value,
            })
          );
        } catch (error) {
          statusEl.textContent = 'Network error. Please try again.';
        }
      }

      async function restart() {
        if (!gameId) {
          return startGame();
        }
        stopPolling();
        hideModal();
        setState(
          await request(`/api/game/${gameId}/reset`, {
            mode: modeEl.value,
            difficulty: difficultyEl.value,
          })
        );
      }

      async function changeDifficulty() {
        if (!gameId) return;
        setState(
          await request(`/api/game/${gameId}/difficulty`, {
            difficulty: difficultyEl.value,
          })
        );
      }

      async function sendMove(index) {
        if (!gameState || gameState.state !== 'awaiting-human') {
          return;
        }
        setState(await request(`/api/game/${gameId}/move`, { index }));
      }

      function stopPolling() {
        if (pollHandle !== null) {
          window.clearTimeout(pollHandle);
          pollHandle = null;
        }
      }

      async function poll() {
        pollHandle = null;
        if (!gameId) return;
        try {
          setState(await request(`/api/game/${gameId}`));
        } catch (error) {
          console.error('Polling failed', error);
        }
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        render();
        stopPolling();
        if (data.computerPending) {
          pollHandle = window.setTimeout(poll, 450);
        }
      }

      function render() {
        const line = gameState.winningLine || [];
        boardEl.classList.toggle('thinking', gameState.computerPending);
        boardEl.querySelectorAll('.cell').forEach((cell, index) => {
          const mark = gameState.cells[index];
          cell.textContent = mark;
          cell.classList.toggle('x', mark === 'X');
          cell.classList.toggle('o', mark === 'O');
          cell.classList.toggle('win', line.includes(index));
          cell.disabled = mark !== '' || gameState.state !== 'awaiting-human';
        });
        difficultyEl.disabled = gameState.mode !== 'human-vs-computer';
        if (gameState.status === 'win') {
          endGame(`${gameState.winner} Wins!`);
        } else if (gameState.status === 'draw') {
          endGame("It's a Draw!");
        } else if (gameState.computerPending) {
          statusEl.textContent = 'Computer is thinking…';
        } else {
          statusEl.textContent = `${gameState.currentPlayer} to move`;
        }
      }

      function endGame(text) {
        statusEl.textContent = text;
        const key = `${gameId}:${gameState.generation}`;
        if (shownResult !== key) {
          shownResult = key;
          winnerText.textContent = text;
          winnerModal.classList.remove('hidden');
          closeModal.focus();
        }
      }

      function hideModal() {
        winnerModal.classList.add('hidden');
      }

      closeModal.addEventListener('click', hideModal);
      winnerModal.addEventListener('click', (event) => {
        if (event.target === winnerModal) hideModal();
      });
      document.addEventListener('keydown', (event) => {
        if (event.key === 'Escape' && !winnerModal.classList.contains('hidden')) {
          hideModal();
        }
      });
      restartBtn.addEventListener('click', restart);
      modeEl.addEventListener('change', restart);
      difficultyEl.addEventListener('change', changeDifficulty);

      startGame();
    </script>
  </body>
</html>
"""
