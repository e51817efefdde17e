"""Tic-tac-toe package exposing the board, the minimax AI and the turn controller."""

from .ai import MinimaxAI, SearchResult
from .board import Board, Outcome
from .controller import TurnController

__all__ = ["Board", "MinimaxAI", "Outcome", "SearchResult", "TurnController"]
