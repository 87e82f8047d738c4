"""
Cell module for the minefield.

Represents individual cells on a board with their visibility
(revealed/flagged) and content (mine/number). Cells are immutable;
every change produces a new cell.
"""
from dataclasses import dataclass, replace


# ============================================================================
# Observation Codes
# ============================================================================

HIDDEN_CODE = -1
FLAGGED_CODE = -2
MINE_CODE = 9


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass(frozen=True)
class Cell:
    """
    Represents a single cell in the minefield grid.

    Attributes:
        revealed: Whether the cell has been uncovered.
        flagged: Whether the player marked this cell as a suspected mine.
        has_mine: Whether this cell contains a mine.
        adjacent_mines: Count of mines in neighboring cells (0-8).
            Meaningless on mined cells.
    """

    revealed: bool = False
    flagged: bool = False
    has_mine: bool = False
    adjacent_mines: int = 0

    def __post_init__(self) -> None:
        """Validate the adjacency count."""
        if not 0 <= self.adjacent_mines <= 8:
            raise ValueError(
                f"adjacent_mines must be within 0..8, got {self.adjacent_mines}"
            )

    def with_revealed(self) -> "Cell":
        """Return a revealed, unflagged copy of this cell."""
        return replace(self, revealed=True, flagged=False)

    def with_mine_shown(self) -> "Cell":
        """Return a revealed copy that keeps its flag (loss display)."""
        return replace(self, revealed=True)

    def with_flag_toggled(self) -> "Cell":
        """
        Return a copy with the flag bit flipped.

        Raises:
            ValueError: If the cell is already revealed.
        """
        if self.revealed:
            raise ValueError("Cannot flag a revealed cell")
        return replace(self, flagged=not self.flagged)

    @property
    def is_hidden(self) -> bool:
        """Check if cell is neither revealed nor flagged."""
        return not self.revealed and not self.flagged

    @property
    def is_incorrect_flag(self) -> bool:
        """Check if cell is flagged without holding a mine."""
        return self.flagged and not self.has_mine

    def to_observation(self) -> int:
        """
        Convert cell to a numeric view for the presentation layer.

        Returns:
            -1: Hidden cell
            -2: Flagged cell (not revealed)
            0-8: Revealed safe cell with adjacent mine count
            9: Revealed mine
        """
        if not self.revealed:
            return FLAGGED_CODE if self.flagged else HIDDEN_CODE
        if self.has_mine:
            return MINE_CODE
        return self.adjacent_mines
