"""Core rules for a single 3x3 tic-tac-toe board."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

Player = str  # "X" or "O"
Line = Tuple[int, int, int]

EMPTY = " "
PLAYERS: Tuple[Player, Player] = ("X", "O")

# Checked in this order: rows, columns, diagonals
WINNING_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

IN_PROGRESS, WIN, DRAW = "in_progress", "win", "draw"

_EMPTY_ALIASES = (EMPTY, "", ".", "_", None)


class InvalidMove(ValueError):
    """Raised when a mark cannot be placed on the requested cell."""


class InvalidConfiguration(ValueError):
    """Raised for an unknown game mode or difficulty."""


def other_player(player: Player) -> Player:
    return "O" if player == "X" else "X"


@dataclass(frozen=True)
class Outcome:
    """Result of evaluating a board: in progress, a win on a line, or a draw."""

    status: str = IN_PROGRESS
    winner: Optional[Player] = None
    line: Optional[Line] = None

    @classmethod
    def in_progress(cls) -> "Outcome":
        return cls()

    @classmethod
    def win(cls, player: Player, line: Line) -> "Outcome":
        return cls(status=WIN, winner=player, line=line)

    @classmethod
    def draw(cls) -> "Outcome":
        return cls(status=DRAW)

    @property
    def finished(self) -> bool:
        return self.status != IN_PROGRESS

    @property
    def drawn(self) -> bool:
        return self.status == DRAW


@dataclass
class Board:
    # Server-internal: 'X', 'O', or ' ' (space) for empty
    cells: List[str] = field(default_factory=lambda: [EMPTY] * 9)

    @classmethod
    def from_cells(cls, cells: Iterable[Optional[str]]) -> "Board":
        """Build a board from nine marks; blanks may be '', ' ', '.', '_' or None."""
        normalized: List[str] = []
        for value in cells:
            if value in _EMPTY_ALIASES:
                normalized.append(EMPTY)
            elif value in PLAYERS:
                normalized.append(value)
            else:
                raise InvalidMove(f"Unknown cell value {value!r}")
        if len(normalized) != 9:
            raise InvalidMove(f"Board needs 9 cells, got {len(normalized)}")
        return cls(cells=normalized)

    def is_full(self) -> bool:
        return all(c != EMPTY for c in self.cells)

    def place(self, idx: int, player: Player) -> None:
        if player not in PLAYERS:
            raise InvalidMove(f"Unknown player {player!r}")
        if isinstance(idx, bool) or not isinstance(idx, int) or not 0 <= idx <= 8:
            raise InvalidMove(f"Cell index {idx!r} is out of range")
        if self.cells[idx] != EMPTY:
            raise InvalidMove("Cell already occupied")
        self.cells[idx] = player

    def evaluate(self) -> Outcome:
        for line in WINNING_LINES:
            a, b, c = line
            v = self.cells[a]
            if v != EMPTY and v == self.cells[b] == self.cells[c]:
                return Outcome.win(v, line)
        if self.is_full():
            return Outcome.draw()
        return Outcome.in_progress()

    def empty_indices(self) -> List[int]:
        return [i for i, c in enumerate(self.cells) if c == EMPTY]

    def clone(self) -> "Board":
        return Board(cells=self.cells.copy())

    def clear(self) -> None:
        self.cells = [EMPTY] * 9

    def to_list(self) -> List[str]:
        """Cells as the client sees them: 'X', 'O' or '' for empty."""
        return [c if c in PLAYERS else "" for c in self.cells]
