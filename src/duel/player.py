"""
Player state for one side of a duel.

Owns one player's board, flag counter, and optional completion time.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from minefield import Board, reveal


class Player(Enum):
    """The two sides of a split-screen match."""

    ONE = 1
    TWO = 2

    @property
    def opponent(self) -> "Player":
        """The other player."""
        return Player.TWO if self is Player.ONE else Player.ONE


@dataclass(frozen=True)
class PlayerState:
    """
    One player's view of the match.

    Attributes:
        board: The player's own minefield.
        flags_placed: Flags placed by long-press, net of removals.
            Only ``toggle_flag`` changes it.
        time_taken: Adjusted completion time in seconds, set once
            when the board is cleared.
    """

    board: Board
    flags_placed: int = 0
    time_taken: Optional[int] = None

    @classmethod
    def fresh(cls, board: Board) -> "PlayerState":
        """Start a player on a new board."""
        return cls(board=board)

    # ========================================================================
    # Mutations
    # ========================================================================

    def toggle_flag(self, row: int, col: int) -> "PlayerState":
        """
        Flip the flag on a cell and adjust the flag counter by one.

        Revealed cells are left alone.
        """
        cell = self.board.cell(row, col)
        if cell.revealed:
            return self
        toggled = cell.with_flag_toggled()
        delta = 1 if toggled.flagged else -1
        return replace(
            self,
            board=self.board.with_cells({(row, col): toggled}),
            flags_placed=self.flags_placed + delta,
        )

    def reveal(self, row: int, col: int) -> "PlayerState":
        """Apply the reveal engine at a position."""
        board = reveal(self.board, row, col)
        if board is self.board:
            return self
        return replace(self, board=board)

    def with_board(self, board: Board) -> "PlayerState":
        return replace(self, board=board)

    def with_time(self, seconds: int) -> "PlayerState":
        """Record the completion time; later calls keep the first value."""
        if self.time_taken is not None:
            return self
        return replace(self, time_taken=seconds)

    # ========================================================================
    # Derived State
    # ========================================================================

    @property
    def is_cleared(self) -> bool:
        return self.board.is_cleared

    @property
    def has_finished(self) -> bool:
        return self.time_taken is not None

    @property
    def safe_cells_revealed(self) -> int:
        return self.board.safe_cells_revealed

    @property
    def incorrect_flags(self) -> int:
        """
        Flags placed on cells without a mine.

        Counts safe cells still flagged plus flags the reveal cascade
        swept off safe cells. The cascade never touches ``flags_placed``,
        so the swept ones are the gap between the counter and the flags
        left on the board.
        """
        swept = max(self.flags_placed - self.board.flagged_count, 0)
        return self.board.incorrect_flags + swept
