"""Tic-tac-toe package exposing game rules, the computer opponent, and the web application."""

from .ai import MinimaxAI, RandomAI, best_move
from .game import Board, InvalidConfiguration, InvalidMove, Outcome
from .session import (
    GameSession,
    SessionUpdate,
    new_session,
    reset,
    resolve_pending_computer_move,
    submit_human_move,
)
from .ui import app

__all__ = [
    "Board",
    "GameSession",
    "InvalidConfiguration",
    "InvalidMove",
    "MinimaxAI",
    "Outcome",
    "RandomAI",
    "SessionUpdate",
    "app",
    "best_move",
    "new_session",
    "reset",
    "resolve_pending_computer_move",
    "submit_human_move",
]
