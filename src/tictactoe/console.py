"""Text front end: play against the AI in a terminal."""

from __future__ import annotations

from typing import Callable, Optional

from .board import Board, Mark, Outcome, WIN
from .controller import (
    GameListener,
    HumanMoveSource,
    TurnController,
    engine_sources,
)

ReadLine = Callable[[str], Optional[str]]
Write = Callable[[str], None]


def render(board: Board) -> str:
    """Board plus the 1-9 key guide, one row per line."""
    rows = []
    for r in range(3):
        cells = " | ".join(board.at(r * 3 + c) for c in range(3))
        keys = " | ".join(str(r * 3 + c + 1) for c in range(3))
        rows.append(f" {cells}      ({keys})")
    return "\n" + "\n---+---+---\n".join(rows) + "\n"


def stdin_reader(prompt: str) -> Optional[str]:
    try:
        return input(prompt)
    except EOFError:
        return None


def parse_mark(text: Optional[str]) -> Optional[Mark]:
    if not text:
        return None
    c = text.strip()[:1].upper()
    return c if c in ("X", "O") else None


def parse_cell(text: str) -> Optional[int]:
    """``"1"``..``"9"`` to a cell index, else None."""
    try:
        number = int(text.strip())
    except ValueError:
        return None
    return number - 1 if 1 <= number <= 9 else None


class ConsoleListener(GameListener):
    def __init__(self, write: Write, human_mark: Optional[Mark]) -> None:
        self.write = write
        self.human_mark = human_mark

    def board_changed(self, board: Board, mark: Mark, index: int) -> None:
        if mark != self.human_mark:
            self.write(f"AI ({mark}) plays at cell {index + 1}.")
        self.write(render(board))

    def move_rejected(self, mark: Mark, index: int, reason: str) -> None:
        self.write("Invalid move. Try again.")

    def game_finished(self, outcome: Outcome) -> None:
        if outcome.status == WIN:
            self.write(f"Winner: Player {outcome.winner} \U0001F389")
        else:
            self.write("It's a draw!")


class ConsoleGame:
    """Interactive session: symbol and starter selection, then the game."""

    def __init__(
        self,
        read_line: ReadLine = stdin_reader,
        write: Write = print,
        strict: bool = False,
    ) -> None:
        self.read_line = read_line
        self.write = write
        self.strict = strict

    def ask_human_move(self, mark: Mark) -> Callable[[Board], Optional[int]]:
        def prompt(board: Board) -> Optional[int]:
            while True:
                text = self.read_line(f"Your move ({mark}). Enter cell [1-9]: ")
                if text is None:
                    return None
                cell = parse_cell(text)
                if cell is not None:
                    return cell
                self.write("Invalid input. Try again.")

        return prompt

    def choose_symbol(self) -> Optional[Mark]:
        text = self.read_line("Choose your symbol (X/O). X moves first: ")
        while True:
            if text is None:
                return None
            mark = parse_mark(text)
            if mark is not None:
                return mark
            text = self.read_line("Please enter X or O: ")

    def choose_starter(self) -> Mark:
        text = self.read_line("Who plays first? (X/O) [default X]: ")
        return parse_mark(text) or "X"

    def run(self) -> Optional[Outcome]:
        self.write("=== Tic-Tac-Toe (Minimax with Alpha-Beta) ===")
        human = self.choose_symbol()
        if human is None:
            return None
        starter = self.choose_starter()

        controller = TurnController(
            engine_sources(human, HumanMoveSource(self.ask_human_move(human))),
            first=starter,
            listener=ConsoleListener(self.write, human),
            strict=self.strict,
        )
        self.write(render(controller.board))
        outcome = controller.run()
        self.write("Thanks for playing!")
        return outcome
