"""Computer opponents: full-depth alpha-beta minimax and a random mover."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union
import math
import random

from .game import Board, InvalidConfiguration, Player, other_player

EASY, HARD = "easy", "hard"
DIFFICULTIES: Tuple[str, ...] = (EASY, HARD)

WIN_SCORE = 10


@dataclass
class MinimaxAI:
    """Optimal player using minimax with alpha-beta pruning.

    The board is small enough to search to the end, so there is no depth
    limit and no heuristic evaluation: terminal positions score
    ``10 - depth`` for a win by ``player``, ``depth - 10`` for a loss and
    ``0`` for a draw, which prefers quick wins and slow losses.

      - MinimaxAI(player="O")
      - choose(board) -> cell index, or None on a full board
    """

    player: Player

    # ---- public API ----

    def choose(self, board: Board) -> Optional[int]:
        moves = board.empty_indices()
        if not moves:
            return None

        alpha, beta = -math.inf, math.inf
        best_score = -math.inf
        best_move: Optional[int] = None

        # Ascending order; strict '>' keeps the earliest of equally good moves
        for move in moves:
            child = board.clone()
            child.place(move, self.player)
            score = self._minimax(child, 1, alpha, beta, False)
            if score > best_score:
                best_score, best_move = score, move
            alpha = max(alpha, best_score)
        return best_move

    # ---- core search ----

    def _minimax(
        self,
        board: Board,
        depth: int,
        alpha: float,
        beta: float,
        maximizing: bool,
    ) -> float:
        outcome = board.evaluate()
        if outcome.winner == self.player:
            return WIN_SCORE - depth
        if outcome.winner is not None:
            return depth - WIN_SCORE
        if outcome.drawn:
            return 0

        if maximizing:
            mover = self.player
            value = -math.inf
            for move in board.empty_indices():
                child = board.clone()
                child.place(move, mover)
                value = max(value, self._minimax(child, depth + 1, alpha, beta, False))
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
        else:
            mover = other_player(self.player)
            value = math.inf
            for move in board.empty_indices():
                child = board.clone()
                child.place(move, mover)
                value = min(value, self._minimax(child, depth + 1, alpha, beta, True))
                beta = min(beta, value)
                if beta <= alpha:
                    break
        return value


@dataclass
class RandomAI:
    """Easy opponent: any empty cell, uniformly at random."""

    player: Player
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def choose(self, board: Board) -> Optional[int]:
        return random_move(board, self.rng)


Strategy = Union[MinimaxAI, RandomAI]


def best_move(board: Board, player: Player) -> Optional[int]:
    """Optimal move for ``player`` on ``board``; None when the board is full."""
    return MinimaxAI(player=player).choose(board)


def random_move(board: Board, rng: Optional[random.Random] = None) -> Optional[int]:
    moves = board.empty_indices()
    if not moves:
        return None
    return (rng or random).choice(moves)


def strategy_for(
    difficulty: str, player: Player, rng: Optional[random.Random] = None
) -> Strategy:
    """Pick the opponent for a difficulty setting."""
    if difficulty == HARD:
        return MinimaxAI(player=player)
    if difficulty == EASY:
        return RandomAI(player=player, rng=rng or random.Random())
    raise InvalidConfiguration(
        f"Unsupported difficulty {difficulty!r}. "
        f"Choose one of {', '.join(DIFFICULTIES)}."
    )
