"""
Reveal engine.

Flood-fills connected zero-adjacency regions from a clicked cell.
Stateless beyond the board it is given.
"""
from typing import Dict, List

from .board import Board, Position
from .cell import Cell


def reveal(board: Board, row: int, col: int) -> Board:
    """
    Reveal a cell and cascade through its zero-adjacency region.

    The target becomes revealed and unflagged. When it has no adjacent
    mines, every neighbor is revealed in turn under the same rule, so
    the whole connected zero region and its numbered border open up.
    Mined neighbors are never uncovered by the cascade.

    Args:
        board: Board to reveal on.
        row: Row index of the target.
        col: Column index of the target.

    Returns:
        New board, or ``board`` itself if the target was already revealed.

    Raises:
        CellOutOfBoundsError: If the target is off the board.
    """
    target = board.cell(row, col)
    if target.revealed:
        return board

    updates: Dict[Position, Cell] = {(row, col): target.with_revealed()}
    stack: List[Position] = []
    if not target.has_mine and target.adjacent_mines == 0:
        stack.append((row, col))

    while stack:
        current = stack.pop()
        for pos in board.neighbors(*current):
            if pos in updates:
                continue
            neighbor = board.grid[pos[0]][pos[1]]
            if neighbor.revealed or neighbor.has_mine:
                continue
            updates[pos] = neighbor.with_revealed()
            if neighbor.adjacent_mines == 0:
                stack.append(pos)

    return board.with_cells(updates)


def reveal_mines(board: Board) -> Board:
    """Reveal every mine on the board, keeping any flags on them."""
    updates = {
        (row, col): board.grid[row][col].with_mine_shown()
        for row, col in board.positions()
        if board.grid[row][col].has_mine and not board.grid[row][col].revealed
    }
    return board.with_cells(updates)
