"""
Persistence codec for saved matches.

Serializes the minimal match snapshot (both boards, both flag counts,
remaining time) to a JSON blob and back.
"""
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from minefield import Board, BoardConfig, Cell

if TYPE_CHECKING:
    from duel import MatchState


class SnapshotDecodeError(ValueError):
    """Raised when a saved blob cannot be turned back into a snapshot."""


@dataclass(frozen=True)
class Snapshot:
    """
    Reduced projection of a match, enough to resume a paused game.

    Status, countdown, and winner are not part of it: a loaded match
    always comes back paused.
    """

    player1_board: Board
    player1_flags_placed: int
    player2_board: Board
    player2_flags_placed: int
    remaining_time: int

    @classmethod
    def from_match(cls, state: "MatchState") -> "Snapshot":
        """Project a match state onto a snapshot."""
        return cls(
            player1_board=state.player_one.board,
            player1_flags_placed=state.player_one.flags_placed,
            player2_board=state.player_two.board,
            player2_flags_placed=state.player_two.flags_placed,
            remaining_time=state.match_time_remaining,
        )


# ============================================================================
# Encoding
# ============================================================================

def _cell_to_dict(cell: Cell) -> Dict[str, Any]:
    return {
        "isRevealed": cell.revealed,
        "isFlagged": cell.flagged,
        "hasMine": cell.has_mine,
        "adjacentMines": cell.adjacent_mines,
    }


def _player_to_dict(board: Board, flags_placed: int) -> Dict[str, Any]:
    return {
        "board": [[_cell_to_dict(cell) for cell in row] for row in board.grid],
        "bombsFound": flags_placed,
    }


def encode_snapshot(snapshot: Snapshot) -> str:
    """Serialize a snapshot to a JSON string."""
    data = {
        "player1State": _player_to_dict(
            snapshot.player1_board, snapshot.player1_flags_placed
        ),
        "player2State": _player_to_dict(
            snapshot.player2_board, snapshot.player2_flags_placed
        ),
        "remainingTime": snapshot.remaining_time,
    }
    return json.dumps(data, indent=2)


# ============================================================================
# Decoding
# ============================================================================

def _require(data: Any, key: str, kind: type) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise SnapshotDecodeError(f"Missing field '{key}'")
    value = data[key]
    # bool is an int subclass; never accept it for counts
    if kind is int and isinstance(value, bool):
        raise SnapshotDecodeError(f"Field '{key}' must be an integer")
    if not isinstance(value, kind):
        raise SnapshotDecodeError(
            f"Field '{key}' must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _cell_from_dict(data: Any) -> Cell:
    adjacent = _require(data, "adjacentMines", int)
    if not 0 <= adjacent <= 8:
        raise SnapshotDecodeError(f"adjacentMines out of range: {adjacent}")
    return Cell(
        revealed=_require(data, "isRevealed", bool),
        flagged=_require(data, "isFlagged", bool),
        has_mine=_require(data, "hasMine", bool),
        adjacent_mines=adjacent,
    )


def _board_from_list(rows: List[Any]) -> Board:
    if not rows or not all(isinstance(row, list) and row for row in rows):
        raise SnapshotDecodeError("Board must be a non-empty grid")
    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise SnapshotDecodeError("Board rows have different lengths")

    grid = tuple(tuple(_cell_from_dict(cell) for cell in row) for row in rows)
    mines = sum(1 for row in grid for cell in row if cell.has_mine)
    try:
        config = BoardConfig(len(grid), width, mines)
    except ValueError as error:
        raise SnapshotDecodeError(str(error)) from error
    return Board(config, grid)


def _player_from_dict(data: Any) -> Tuple[Board, int]:
    board = _board_from_list(_require(data, "board", list))
    flags = _require(data, "bombsFound", int)
    if flags < 0:
        raise SnapshotDecodeError("bombsFound cannot be negative")
    return board, flags


def decode_snapshot(blob: str) -> Snapshot:
    """
    Parse a JSON string back into a snapshot.

    Raises:
        SnapshotDecodeError: If the blob is malformed or incomplete.
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError, RecursionError) as error:
        raise SnapshotDecodeError(f"Malformed snapshot: {error}") from error

    board1, flags1 = _player_from_dict(_require(data, "player1State", dict))
    board2, flags2 = _player_from_dict(_require(data, "player2State", dict))
    remaining = _require(data, "remainingTime", int)
    if remaining < 0:
        raise SnapshotDecodeError("remainingTime cannot be negative")

    return Snapshot(
        player1_board=board1,
        player1_flags_placed=flags1,
        player2_board=board2,
        player2_flags_placed=flags2,
        remaining_time=remaining,
    )
