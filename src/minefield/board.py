"""
Board module for the minefield.

Implements the immutable board grid, its configuration, and the
randomized board generator with precomputed adjacency counts.
"""
import random
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

import numpy as np

from .cell import Cell


Position = Tuple[int, int]


# ============================================================================
# Errors
# ============================================================================

class CellOutOfBoundsError(IndexError):
    """Raised when a coordinate falls outside the board."""

    def __init__(self, row: int, col: int, rows: int, cols: int) -> None:
        super().__init__(
            f"Cell ({row}, {col}) is outside the {rows}x{cols} board"
        )
        self.row = row
        self.col = col


# ============================================================================
# Configuration
# ============================================================================

@dataclass(frozen=True)
class BoardConfig:
    """
    Configuration for a minefield board.

    Attributes:
        rows: Number of rows.
        cols: Number of columns.
        num_mines: Total mines to place.
    """

    rows: int = 9
    cols: int = 11
    num_mines: int = 12

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.rows < 1 or self.cols < 1:
            raise ValueError("Board dimensions must be positive")
        if self.num_mines < 0:
            raise ValueError("Number of mines cannot be negative")
        max_mines = self.rows * self.cols - 1
        if self.num_mines > max_mines:
            raise ValueError(f"Too many mines (max {max_mines})")

    @property
    def total_cells(self) -> int:
        """Number of cells on the board."""
        return self.rows * self.cols

    @property
    def safe_cells(self) -> int:
        """Number of cells without a mine."""
        return self.total_cells - self.num_mines


# ============================================================================
# Board Class
# ============================================================================

@dataclass(frozen=True)
class Board:
    """
    Immutable minefield grid.

    Cells are stored row-major as a tuple of tuples. Mutating helpers
    return a new board and leave the original untouched.
    """

    config: BoardConfig
    grid: Tuple[Tuple[Cell, ...], ...]

    def __post_init__(self) -> None:
        """Check the grid matches the configured dimensions."""
        if len(self.grid) != self.config.rows or any(
            len(row) != self.config.cols for row in self.grid
        ):
            raise ValueError(
                f"Grid does not match {self.config.rows}x{self.config.cols}"
            )

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= row < self.config.rows and 0 <= col < self.config.cols

    def check_position(self, row: int, col: int) -> None:
        """Raise CellOutOfBoundsError unless the position is on the board."""
        if not self.is_valid_position(row, col):
            raise CellOutOfBoundsError(
                row, col, self.config.rows, self.config.cols
            )

    def neighbors(self, row: int, col: int) -> List[Position]:
        """
        Get valid neighboring cell positions (Moore neighborhood).

        Args:
            row: Row index of center cell.
            col: Column index of center cell.

        Returns:
            List of (row, col) tuples for in-bounds neighbors.
        """
        return _neighbors(row, col, self.config.rows, self.config.cols)

    def positions(self) -> Iterator[Position]:
        """Iterate over every (row, col) on the board, row-major."""
        for row in range(self.config.rows):
            for col in range(self.config.cols):
                yield row, col

    # ========================================================================
    # Cell Access
    # ========================================================================

    def cell(self, row: int, col: int) -> Cell:
        """
        Get the cell at a position.

        Raises:
            CellOutOfBoundsError: If the position is off the board.
        """
        self.check_position(row, col)
        return self.grid[row][col]

    def cells(self) -> Iterator[Cell]:
        """Iterate over every cell, row-major."""
        for row in self.grid:
            yield from row

    def with_cells(self, updates: Dict[Position, Cell]) -> "Board":
        """
        Return a new board with some cells replaced.

        Args:
            updates: Mapping of (row, col) to replacement cell.
        """
        if not updates:
            return self
        rows = [list(row) for row in self.grid]
        for (row, col), cell in updates.items():
            self.check_position(row, col)
            rows[row][col] = cell
        return Board(self.config, tuple(tuple(row) for row in rows))

    # ========================================================================
    # Masks and Counts
    # ========================================================================

    def mine_mask(self) -> np.ndarray:
        """Boolean array marking mined cells."""
        return self._mask(lambda cell: cell.has_mine)

    def revealed_mask(self) -> np.ndarray:
        """Boolean array marking revealed cells."""
        return self._mask(lambda cell: cell.revealed)

    def flagged_mask(self) -> np.ndarray:
        """Boolean array marking flagged cells."""
        return self._mask(lambda cell: cell.flagged)

    def _mask(self, predicate) -> np.ndarray:
        return np.array(
            [[predicate(cell) for cell in row] for row in self.grid],
            dtype=bool,
        ).reshape(self.config.rows, self.config.cols)

    @property
    def mine_count(self) -> int:
        """Number of mined cells actually on the board."""
        return int(self.mine_mask().sum())

    @property
    def flagged_count(self) -> int:
        """Number of cells currently carrying a flag."""
        return int(self.flagged_mask().sum())

    @property
    def safe_cells_revealed(self) -> int:
        """Number of revealed cells that do not hold a mine."""
        return int((self.revealed_mask() & ~self.mine_mask()).sum())

    @property
    def incorrect_flags(self) -> int:
        """Number of flagged cells that do not hold a mine."""
        return int((self.flagged_mask() & ~self.mine_mask()).sum())

    @property
    def is_cleared(self) -> bool:
        """Check if every non-mine cell is revealed."""
        safe = ~self.mine_mask()
        return bool(np.all(self.revealed_mask()[safe]))

    # ========================================================================
    # Views
    # ========================================================================

    def get_observation(self) -> np.ndarray:
        """
        Get board state as numpy array.

        Returns:
            2D int8 array where:
                -1 = hidden
                -2 = flagged
                0-8 = revealed with adjacent count
                9 = revealed mine
        """
        obs = np.zeros((self.config.rows, self.config.cols), dtype=np.int8)
        for row, col in self.positions():
            obs[row, col] = self.grid[row][col].to_observation()
        return obs

    def render_ansi(self) -> str:
        """Render board as ASCII string."""
        lines = []
        obs = self.get_observation()

        for row in range(self.config.rows):
            row_str = ""
            for col in range(self.config.cols):
                val = obs[row, col]
                if val == -1:
                    row_str += "."
                elif val == -2:
                    row_str += "F"
                elif val == 9:
                    row_str += "*"
                elif val == 0:
                    row_str += " "
                else:
                    row_str += str(val)
                row_str += " "
            lines.append(row_str.rstrip())

        return "\n".join(lines)

    @classmethod
    def empty(cls, config: BoardConfig) -> "Board":
        """Create a board with no mines and every cell hidden."""
        return build_board(config, ())


# ============================================================================
# Generation
# ============================================================================

def _neighbors(row: int, col: int, rows: int, cols: int) -> List[Position]:
    neighbors = []
    for delta_row in (-1, 0, 1):
        for delta_col in (-1, 0, 1):
            if delta_row == 0 and delta_col == 0:
                continue
            new_row = row + delta_row
            new_col = col + delta_col
            if 0 <= new_row < rows and 0 <= new_col < cols:
                neighbors.append((new_row, new_col))
    return neighbors


def build_board(config: BoardConfig, mine_positions: Iterable[Position]) -> Board:
    """
    Build a hidden board with mines at the given positions.

    Adjacency counts are computed for every safe cell.

    Args:
        config: Board dimensions. ``num_mines`` is not enforced here so
            that fixed layouts can be built for any count.
        mine_positions: Positions that hold a mine.

    Raises:
        CellOutOfBoundsError: If a mine position is off the board.
    """
    mines: Set[Position] = set()
    for row, col in mine_positions:
        if not (0 <= row < config.rows and 0 <= col < config.cols):
            raise CellOutOfBoundsError(row, col, config.rows, config.cols)
        mines.add((row, col))

    grid = []
    for row in range(config.rows):
        cells = []
        for col in range(config.cols):
            if (row, col) in mines:
                cells.append(Cell(has_mine=True))
                continue
            count = sum(
                1 for pos in _neighbors(row, col, config.rows, config.cols)
                if pos in mines
            )
            cells.append(Cell(adjacent_mines=count))
        grid.append(tuple(cells))
    return Board(config, tuple(grid))


def generate_board(
    config: BoardConfig, rng: Optional[random.Random] = None
) -> Board:
    """
    Generate a randomized board.

    Mines are placed by rejection sampling: uniformly random cells are
    drawn until ``num_mines`` distinct cells have been chosen.

    Args:
        config: Board configuration (validated on construction).
        rng: Random source. A fresh OS-seeded generator is used when
            omitted, so two calls never share a seed.

    Returns:
        Hidden board with adjacency counts precomputed.
    """
    rng = rng or random.Random()
    mines: Set[Position] = set()
    while len(mines) < config.num_mines:
        mines.add((rng.randrange(config.rows), rng.randrange(config.cols)))
    return build_board(config, mines)
