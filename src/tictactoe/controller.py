"""Turn sequencing between two move sources over a single board."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Protocol, Union
import logging

from .ai import MinimaxAI
from .board import CELL_COUNT, EMPTY, Board, Mark, Outcome, PLAYERS, opponent_of

logger = logging.getLogger(__name__)


class GameError(Exception):
    """Base class for game sequencing errors."""


class GameOverError(GameError):
    pass


class EngineContractError(GameError):
    """The engine proposed a move that cannot be played."""


# ---------- Move sources ----------


class MoveSource(Protocol):
    is_engine: bool

    def request_move(self, board: Board) -> Optional[int]:
        ...


@dataclass
class HumanMoveSource:
    """Moves come from a callable, e.g. a console prompt.

    The callable returns a cell index or ``None`` when input has ended.
    """

    prompt: Callable[[Board], Optional[int]]
    is_engine: bool = field(default=False, init=False)

    def request_move(self, board: Board) -> Optional[int]:
        return self.prompt(board)


@dataclass
class ScriptedMoveSource:
    """Plays queued indices in order; ``None`` once the queue is empty."""

    moves: deque = field(default_factory=deque)
    is_engine: bool = False

    def __post_init__(self) -> None:
        self.moves = deque(self.moves)

    def push(self, index: int) -> None:
        self.moves.append(index)

    def clear(self) -> None:
        self.moves.clear()

    def request_move(self, board: Board) -> Optional[int]:
        return self.moves.popleft() if self.moves else None


@dataclass
class EngineMoveSource:
    ai: MinimaxAI
    is_engine: bool = field(default=True, init=False)

    def request_move(self, board: Board) -> Optional[int]:
        return self.ai.choose(board).index


# ---------- Events ----------


class GameListener:
    """Receives controller events; override the hooks you care about."""

    def board_changed(self, board: Board, mark: Mark, index: int) -> None:
        pass

    def move_rejected(self, mark: Mark, index: int, reason: str) -> None:
        pass

    def game_finished(self, outcome: Outcome) -> None:
        pass


# ---------- States ----------


@dataclass(frozen=True)
class AwaitingMove:
    mark: Mark


@dataclass(frozen=True)
class Finished:
    outcome: Outcome


State = Union[AwaitingMove, Finished]


def rejection_reason(board: Board, index: int) -> Optional[str]:
    if not 0 <= index < CELL_COUNT:
        return f"Cell {index} is outside the board"
    if board.at(index) != EMPTY:
        return f"Cell {index} is already taken"
    return None


class TurnController:
    """Alternates turns between the sources of ``X`` and ``O``.

    The controller owns ``board`` for the whole game and only lends it to an
    engine for the duration of one search. With ``strict`` set, an illegal
    engine move raises :class:`EngineContractError`; otherwise the first
    empty cell is played instead.
    """

    def __init__(
        self,
        sources: Dict[Mark, MoveSource],
        first: Mark = "X",
        board: Optional[Board] = None,
        listener: Optional[GameListener] = None,
        strict: bool = False,
    ) -> None:
        if set(sources) != set(PLAYERS):
            raise ValueError("A move source is required for both X and O")
        if first not in PLAYERS:
            raise ValueError(f"Not a player mark: {first!r}")
        self.sources = dict(sources)
        self.board = board if board is not None else Board()
        self.listener = listener or GameListener()
        self.strict = strict
        outcome = self.board.outcome()
        self.state: State = Finished(outcome) if outcome.finished else AwaitingMove(first)

    @property
    def finished(self) -> bool:
        return isinstance(self.state, Finished)

    @property
    def active_mark(self) -> Optional[Mark]:
        return self.state.mark if isinstance(self.state, AwaitingMove) else None

    @property
    def outcome(self) -> Outcome:
        return self.state.outcome if isinstance(self.state, Finished) else Outcome()

    def play_turn(self) -> Optional[int]:
        """Play one move for the active mark; returns the cell played.

        Returns ``None`` without touching the board when the source has no
        move to offer.
        """
        if not isinstance(self.state, AwaitingMove):
            raise GameOverError("Game already finished")

        mark = self.state.mark
        source = self.sources[mark]
        while True:
            index = source.request_move(self.board)
            if index is None:
                return None
            reason = rejection_reason(self.board, index)
            if reason is None:
                break
            if not source.is_engine:
                self.listener.move_rejected(mark, index, reason)
                continue
            if self.strict:
                raise EngineContractError(f"Engine {mark} proposed cell {index}: {reason}")
            logger.error("Engine %s proposed illegal cell %s (%s)", mark, index, reason)
            index = self.board.available_moves()[0]
            break

        self.board.apply_move(index, mark)
        self.listener.board_changed(self.board, mark, index)

        outcome = self.board.outcome()
        if outcome.finished:
            self.state = Finished(outcome)
            logger.info("Game finished: %s %s", outcome.status, outcome.winner or "")
            self.listener.game_finished(outcome)
        else:
            self.state = AwaitingMove(opponent_of(mark))
        return index

    def run(self) -> Outcome:
        """Play until the game ends or a source runs out of moves."""
        while not self.finished:
            if self.play_turn() is None:
                break
        return self.outcome


def engine_sources(
    human_mark: Optional[Mark], human: Optional[MoveSource] = None
) -> Dict[Mark, MoveSource]:
    """Sources for a game where every mark except ``human_mark`` is the AI."""
    sources: Dict[Mark, MoveSource] = {}
    for mark in PLAYERS:
        if mark == human_mark:
            if human is None:
                raise ValueError("A human move source is required")
            sources[mark] = human
        else:
            sources[mark] = EngineMoveSource(MinimaxAI(player=mark))
    return sources
