"""Full-depth minimax AI with alpha-beta pruning and move ordering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional
import logging
import math

from .board import EMPTY, Board, Mark, PLAYERS, opponent_of

logger = logging.getLogger(__name__)

# Center first, then corners, then edges.
MOVE_ORDER = (4, 0, 2, 6, 8, 1, 3, 5, 7)

WIN_SCORE = 10


@dataclass(frozen=True)
class SearchResult:
    index: Optional[int]
    score: int


def ordered_moves(moves: Iterable[int]) -> List[int]:
    available = set(moves)
    return [m for m in MOVE_ORDER if m in available]


def _score_terminal(board: Board, player: Mark, opponent: Mark, depth: int) -> Optional[int]:
    w = board.winner()
    if w == player:
        return WIN_SCORE - depth  # prefer faster wins
    if w == opponent:
        return depth - WIN_SCORE  # prefer slower losses
    if board.is_full():
        return 0
    return None


@dataclass
class MinimaxAI:
    """AI player that searches the whole remaining game tree.

    Scores are from ``player``'s point of view: ``10 - d`` for a win reached
    ``d`` plies after the candidate move, ``d - 10`` for a loss, 0 for a
    draw. The board passed to :meth:`choose` is explored in place with
    apply/undo and handed back unchanged.
    """

    player: Mark
    opponent: Optional[Mark] = None
    nodes: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.player not in PLAYERS:
            raise ValueError(f"Not a player mark: {self.player!r}")
        if self.opponent is None:
            self.opponent = opponent_of(self.player)
        if self.opponent not in PLAYERS or self.opponent == self.player:
            raise ValueError("AI needs two distinct player marks")

    # ---- public API ----

    def choose(self, board: Board) -> SearchResult:
        if board.winner() != EMPTY or board.is_full():
            raise ValueError("Cannot search a finished position")

        self.nodes = 0
        best_value = -math.inf
        best_move: Optional[int] = None

        for move in ordered_moves(board.available_moves()):
            board.apply_move(move, self.player)
            try:
                value = self._minimax(board, 0, False, -math.inf, math.inf)
            finally:
                board.undo_move(move)
            # Strictly greater: ties keep the earlier (higher priority) move
            if value > best_value:
                best_value, best_move = value, move

        if best_move is None:
            raise RuntimeError("Search produced no move")

        logger.debug(
            "AI %s chose cell %d (score %d, %d nodes)",
            self.player,
            best_move,
            best_value,
            self.nodes,
        )
        return SearchResult(best_move, int(best_value))

    # ---- core search ----

    def _minimax(
        self,
        board: Board,
        depth: int,
        maximizing: bool,
        alpha: float,
        beta: float,
    ) -> float:
        self.nodes += 1
        score = _score_terminal(board, self.player, self.opponent, depth)
        if score is not None:
            return score

        moves = ordered_moves(board.available_moves())
        if maximizing:
            value = -math.inf
            for move in moves:
                board.apply_move(move, self.player)
                value = max(value, self._minimax(board, depth + 1, False, alpha, beta))
                board.undo_move(move)
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
        else:
            value = math.inf
            for move in moves:
                board.apply_move(move, self.opponent)
                value = min(value, self._minimax(board, depth + 1, True, alpha, beta))
                board.undo_move(move)
                beta = min(beta, value)
                if beta <= alpha:
                    break
        return value


def plain_minimax(board: Board, player: Mark, opponent: Mark) -> SearchResult:
    """Reference search without pruning; only the root uses ``MOVE_ORDER``.

    Returns the same choice and score as :class:`MinimaxAI` and exists to
    check the optimized search against.
    """

    def value(depth: int, maximizing: bool) -> int:
        score = _score_terminal(board, player, opponent, depth)
        if score is not None:
            return score
        results = []
        for move in board.available_moves():
            board.apply_move(move, player if maximizing else opponent)
            results.append(value(depth + 1, not maximizing))
            board.undo_move(move)
        return max(results) if maximizing else min(results)

    best: Optional[SearchResult] = None
    for move in ordered_moves(board.available_moves()):
        board.apply_move(move, player)
        score = value(0, False)
        board.undo_move(move)
        if best is None or score > best.score:
            best = SearchResult(move, score)
    return best if best is not None else SearchResult(None, 0)
