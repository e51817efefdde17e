"""Tests for turn sequencing between move sources."""

import logging

import pytest

from tictactoe.ai import MinimaxAI
from tictactoe.board import DRAW, IN_PROGRESS, WIN, Board
from tictactoe.controller import (
    AwaitingMove,
    EngineContractError,
    EngineMoveSource,
    Finished,
    GameListener,
    GameOverError,
    HumanMoveSource,
    ScriptedMoveSource,
    TurnController,
    engine_sources,
)


class RecordingListener(GameListener):
    def __init__(self):
        self.events = []

    def board_changed(self, board, mark, index):
        self.events.append(("changed", mark, index))

    def move_rejected(self, mark, index, reason):
        self.events.append(("rejected", mark, index, reason))

    def game_finished(self, outcome):
        self.events.append(("finished", outcome.status, outcome.winner))


class BrokenEngine:
    """Engine-flagged source that always proposes a taken cell."""

    is_engine = True

    def request_move(self, board):
        return 4


def test_initial_state_awaits_first_mark():
    controller = TurnController(
        {"X": ScriptedMoveSource(), "O": ScriptedMoveSource()}, first="O"
    )
    assert controller.state == AwaitingMove("O")
    assert controller.active_mark == "O"
    assert not controller.finished


def test_turns_alternate_and_x_wins():
    listener = RecordingListener()
    controller = TurnController(
        {"X": ScriptedMoveSource([0, 1, 2]), "O": ScriptedMoveSource([3, 4])},
        listener=listener,
    )

    outcome = controller.run()

    assert outcome.status == WIN
    assert outcome.winner == "X"
    assert controller.state == Finished(outcome)
    assert [e for e in listener.events if e[0] == "changed"] == [
        ("changed", "X", 0),
        ("changed", "O", 3),
        ("changed", "X", 1),
        ("changed", "O", 4),
        ("changed", "X", 2),
    ]
    assert listener.events[-1] == ("finished", WIN, "X")


def test_full_board_finishes_as_draw():
    board = Board.from_string("XOXXOO XO")
    controller = TurnController(
        {"X": ScriptedMoveSource(), "O": ScriptedMoveSource([6])},
        first="O",
        board=board,
    )

    assert controller.play_turn() == 6
    assert controller.outcome.status == DRAW


def test_human_illegal_move_is_rejected_then_retried():
    listener = RecordingListener()
    human = ScriptedMoveSource([0, 0, 12, 5])
    controller = TurnController(
        {"X": ScriptedMoveSource([0]), "O": human}, listener=listener
    )
    controller.play_turn()

    assert controller.play_turn() == 5

    rejected = [e for e in listener.events if e[0] == "rejected"]
    assert [(e[1], e[2]) for e in rejected] == [("O", 0), ("O", 0), ("O", 12)]
    assert "already taken" in rejected[0][3]
    assert "outside" in rejected[2][3]
    assert controller.board.at(5) == "O"


def test_no_move_leaves_state_unchanged():
    controller = TurnController(
        {"X": HumanMoveSource(lambda board: None), "O": ScriptedMoveSource()}
    )
    before = controller.board.copy()

    assert controller.play_turn() is None
    assert controller.board == before
    assert controller.state == AwaitingMove("X")
    assert controller.run().status == IN_PROGRESS


def test_play_after_finish_raises():
    controller = TurnController(
        {"X": ScriptedMoveSource([0, 1, 2]), "O": ScriptedMoveSource([3, 4])}
    )
    controller.run()
    with pytest.raises(GameOverError):
        controller.play_turn()


def test_controller_on_finished_board_starts_finished():
    controller = TurnController(
        {"X": ScriptedMoveSource(), "O": ScriptedMoveSource()},
        board=Board.from_string("XXXOO    "),
    )
    assert controller.finished
    assert controller.outcome.winner == "X"


def test_illegal_engine_move_falls_back_to_first_empty_cell(caplog):
    board = Board.from_string("X   O    ")
    controller = TurnController(
        {"X": BrokenEngine(), "O": ScriptedMoveSource()}, board=board
    )

    with caplog.at_level(logging.ERROR, logger="tictactoe.controller"):
        assert controller.play_turn() == 1

    assert board.at(1) == "X"
    assert "illegal cell" in caplog.text


def test_strict_mode_raises_on_illegal_engine_move():
    board = Board.from_string("X   O    ")
    controller = TurnController(
        {"X": BrokenEngine(), "O": ScriptedMoveSource()}, board=board, strict=True
    )
    with pytest.raises(EngineContractError):
        controller.play_turn()
    assert board == Board.from_string("X   O    ")


def test_engine_against_engine_draws():
    controller = TurnController(engine_sources(None))
    assert controller.run().status == DRAW


def test_engine_answers_human_and_never_loses():
    human = ScriptedMoveSource([0, 8, 6, 5, 7, 3, 1, 2, 4])
    controller = TurnController(engine_sources("X", human))

    outcome = controller.run()

    assert outcome.finished
    assert outcome.winner != "X"


def test_engine_sources_require_human_source():
    with pytest.raises(ValueError):
        engine_sources("O")


def test_engine_source_is_flagged():
    assert EngineMoveSource(MinimaxAI(player="O")).is_engine
    assert not HumanMoveSource(lambda board: 0).is_engine
    assert not ScriptedMoveSource().is_engine


def test_requires_both_sources():
    with pytest.raises(ValueError):
        TurnController({"X": ScriptedMoveSource()})
    with pytest.raises(ValueError):
        TurnController(
            {"X": ScriptedMoveSource(), "O": ScriptedMoveSource()}, first="Z"
        )
