"""Board representation and rules for 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Mark = str  # "X", "O" or EMPTY

EMPTY: Mark = " "
PLAYERS: Tuple[Mark, Mark] = ("X", "O")
CELL_COUNT = 9

# Scan order matters: rows, then columns, then diagonals.
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

IN_PROGRESS = "in_progress"
WIN = "win"
DRAW = "draw"


def opponent_of(mark: Mark) -> Mark:
    if mark == "X":
        return "O"
    if mark == "O":
        return "X"
    raise ValueError(f"Not a player mark: {mark!r}")


@dataclass(frozen=True)
class Outcome:
    """Result of a position, derived from the board on demand."""

    status: str = IN_PROGRESS
    winner: Optional[Mark] = None

    @property
    def finished(self) -> bool:
        return self.status != IN_PROGRESS


@dataclass
class Board:
    # EMPTY (space) marks a free cell
    cells: List[Mark] = field(default_factory=lambda: [EMPTY] * CELL_COUNT)

    def __post_init__(self) -> None:
        if len(self.cells) != CELL_COUNT:
            raise ValueError(f"A board has exactly {CELL_COUNT} cells")
        for c in self.cells:
            if c != EMPTY and c not in PLAYERS:
                raise ValueError(f"Invalid cell value: {c!r}")

    @classmethod
    def from_string(cls, layout: str) -> "Board":
        """Build a board from 9 characters, e.g. ``"XO X  O  "``.

        ``.`` and ``_`` are accepted as empty cells as well as a space.
        """
        cells = [EMPTY if c in "._" else c for c in layout]
        return cls(cells=cells)

    def __str__(self) -> str:
        return "".join(self.cells)

    # ---- moves ----

    def apply_move(self, index: int, mark: Mark) -> bool:
        """Occupy ``index`` with ``mark``; returns False (no change) if illegal."""
        if mark not in PLAYERS:
            return False
        if not 0 <= index < CELL_COUNT or self.cells[index] != EMPTY:
            return False
        self.cells[index] = mark
        return True

    def undo_move(self, index: int) -> None:
        """Inverse of :meth:`apply_move`; a no-op on empty or invalid cells."""
        if 0 <= index < CELL_COUNT:
            self.cells[index] = EMPTY

    # ---- queries ----

    def at(self, index: int) -> Mark:
        return self.cells[index]

    def is_full(self) -> bool:
        return all(c != EMPTY for c in self.cells)

    def winner(self) -> Mark:
        for a, b, c in WINNING_LINES:
            v = self.cells[a]
            if v != EMPTY and v == self.cells[b] == self.cells[c]:
                return v
        return EMPTY

    def is_terminal(self) -> bool:
        return self.winner() != EMPTY or self.is_full()

    def available_moves(self) -> List[int]:
        return [i for i, c in enumerate(self.cells) if c == EMPTY]

    def count(self, mark: Mark) -> int:
        return self.cells.count(mark)

    def outcome(self) -> Outcome:
        w = self.winner()
        if w != EMPTY:
            return Outcome(WIN, w)
        if self.is_full():
            return Outcome(DRAW)
        return Outcome()

    def copy(self) -> "Board":
        return Board(cells=self.cells.copy())
