"""Turn controller: one game session, human moves, and the deferred computer reply.

A session is a plain value owned by its caller. Operations take the session,
mutate it in place (or, for ``reset``/``change_mode``, return a replacement)
and describe the result as a :class:`SessionUpdate` the front end renders.

The computer's reply is never applied inline. ``submit_human_move`` only marks
it pending; the caller waits however long it likes and then calls
``resolve_pending_computer_move`` with the ``generation`` it was given. Any
reset or difficulty change in between bumps the generation, so the stale
request does nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union
import logging
import random

from .ai import DIFFICULTIES, HARD, strategy_for
from .game import (
    Board,
    InvalidConfiguration,
    InvalidMove,
    Outcome,
    Player,
    other_player,
)

logger = logging.getLogger(__name__)

HUMAN_VS_HUMAN, HUMAN_VS_COMPUTER = "human-vs-human", "human-vs-computer"
MODES: Tuple[str, ...] = (HUMAN_VS_HUMAN, HUMAN_VS_COMPUTER)

AWAITING_HUMAN, AWAITING_COMPUTER, FINISHED = (
    "awaiting-human",
    "awaiting-computer",
    "finished",
)

HUMAN_PLAYER: Player = "X"
COMPUTER_PLAYER: Player = "O"


@dataclass
class GameSession:
    """Everything one game needs: board, turn, mode and difficulty."""

    mode: str = HUMAN_VS_COMPUTER
    difficulty: str = HARD
    board: Board = field(default_factory=Board)
    current_player: Player = HUMAN_PLAYER
    state: str = AWAITING_HUMAN
    outcome: Outcome = field(default_factory=Outcome.in_progress)
    generation: int = 0
    move_log: List[Dict[str, Union[int, str]]] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @property
    def game_over(self) -> bool:
        return self.state == FINISHED

    @property
    def computer_pending(self) -> bool:
        return self.state == AWAITING_COMPUTER


@dataclass(frozen=True)
class SessionUpdate:
    """What changed after a request, in the shape a renderer needs."""

    cells: List[str]
    outcome: Outcome
    next_player: Optional[Player]
    computer_pending: bool
    state: str
    generation: int
    accepted: bool = True
    move: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "cells": list(self.cells),
            "status": self.outcome.status,
            "winner": self.outcome.winner,
            "winningLine": list(self.outcome.line) if self.outcome.line else None,
            "drawn": self.outcome.drawn,
            "currentPlayer": self.next_player,
            "computerPending": self.computer_pending,
            "state": self.state,
            "generation": self.generation,
            "accepted": self.accepted,
            "move": self.move,
        }


def _check_config(mode: str, difficulty: str) -> None:
    if mode not in MODES:
        raise InvalidConfiguration(
            f"Unsupported mode {mode!r}. Choose one of {', '.join(MODES)}."
        )
    if difficulty not in DIFFICULTIES:
        raise InvalidConfiguration(
            f"Unsupported difficulty {difficulty!r}. "
            f"Choose one of {', '.join(DIFFICULTIES)}."
        )


def snapshot(
    session: GameSession, accepted: bool = True, move: Optional[int] = None
) -> SessionUpdate:
    return SessionUpdate(
        cells=session.board.to_list(),
        outcome=session.outcome,
        next_player=None if session.game_over else session.current_player,
        computer_pending=session.computer_pending,
        state=session.state,
        generation=session.generation,
        accepted=accepted,
        move=move,
    )


def new_session(
    mode: str = HUMAN_VS_COMPUTER,
    difficulty: str = HARD,
    rng: Optional[random.Random] = None,
) -> GameSession:
    """Start an empty game; unknown mode or difficulty fails immediately."""
    _check_config(mode, difficulty)
    session = GameSession(mode=mode, difficulty=difficulty)
    if rng is not None:
        session.rng = rng
    logger.info("New %s session (difficulty=%s)", mode, difficulty)
    return session


def _apply(session: GameSession, index: int) -> None:
    """Place the current player's mark and advance the state machine."""
    player = session.current_player
    session.board.place(index, player)
    session.move_log.append({"player": player, "index": index})
    session.outcome = session.board.evaluate()

    if session.outcome.finished:
        session.state = FINISHED
        logger.debug(
            "Game over after %s at %d: %s", player, index, session.outcome.status
        )
        return

    session.current_player = other_player(player)
    if session.mode == HUMAN_VS_COMPUTER and session.current_player == COMPUTER_PLAYER:
        session.state = AWAITING_COMPUTER
    else:
        session.state = AWAITING_HUMAN


def submit_human_move(session: GameSession, index: int) -> SessionUpdate:
    """Play ``index`` for the human to move; stale or illegal input is ignored."""
    if session.state != AWAITING_HUMAN:
        logger.debug("Ignoring move %r in state %s", index, session.state)
        return snapshot(session, accepted=False)
    try:
        _apply(session, index)
    except InvalidMove as exc:
        logger.debug("Ignoring move %r: %s", index, exc)
        return snapshot(session, accepted=False)
    return snapshot(session, move=index)


def resolve_pending_computer_move(
    session: GameSession, generation: Optional[int] = None
) -> SessionUpdate:
    """Let the computer reply, unless the request was overtaken by a reset."""
    if generation is not None and generation != session.generation:
        logger.debug(
            "Dropping computer move from generation %d (now %d)",
            generation,
            session.generation,
        )
        return snapshot(session, accepted=False)
    if session.state != AWAITING_COMPUTER:
        return snapshot(session, accepted=False)

    ai = strategy_for(session.difficulty, COMPUTER_PLAYER, session.rng)
    index = ai.choose(session.board)
    if index is None:
        # Full boards are always terminal
        return snapshot(session, accepted=False)
    _apply(session, index)
    logger.debug("Computer (%s) played %d", session.difficulty, index)
    return snapshot(session, move=index)


def reset(
    session: GameSession,
    mode: Optional[str] = None,
    difficulty: Optional[str] = None,
) -> GameSession:
    """Replace ``session`` with a fresh game, keeping mode/difficulty unless given."""
    mode = session.mode if mode is None else mode
    difficulty = session.difficulty if difficulty is None else difficulty
    _check_config(mode, difficulty)
    fresh = GameSession(
        mode=mode,
        difficulty=difficulty,
        generation=session.generation + 1,
        rng=session.rng,
    )
    logger.info(
        "Reset session to %s (difficulty=%s, generation=%d)",
        mode,
        difficulty,
        fresh.generation,
    )
    return fresh


def change_mode(session: GameSession, mode: str) -> GameSession:
    return reset(session, mode=mode)


def change_difficulty(session: GameSession, difficulty: str) -> SessionUpdate:
    """Switch difficulty in place; the board is kept.

    If the computer is about to move, the scheduled reply is invalidated and
    the returned update asks the caller to schedule a new one.
    """
    _check_config(session.mode, difficulty)
    session.difficulty = difficulty
    if session.computer_pending:
        session.generation += 1
        logger.debug(
            "Difficulty now %s, re-triggering computer move (generation=%d)",
            difficulty,
            session.generation,
        )
    return snapshot(session)
