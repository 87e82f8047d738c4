"""
Minefield module.

Provides the board model, the randomized board generator, and the
reveal engine used by each player of a duel.
"""
from .cell import Cell
from .board import (
    Board,
    BoardConfig,
    CellOutOfBoundsError,
    Position,
    build_board,
    generate_board,
)
from .reveal import reveal, reveal_mines

__all__ = [
    "Cell",
    "Board",
    "BoardConfig",
    "CellOutOfBoundsError",
    "Position",
    "build_board",
    "generate_board",
    "reveal",
    "reveal_mines",
]
