"""
Pytest configuration and shared fixtures.
"""
import itertools
import pytest
import sys
from pathlib import Path
from typing import Callable, Optional

# Add src and the repository root (for main.py) to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from duel import ManualScheduler, MatchConfig, MatchController  # noqa: E402
from minefield import Board, BoardConfig, build_board  # noqa: E402
from storage import SaveSlot  # noqa: E402


# ============================================================================
# Layouts
# ============================================================================

# 9x11, 12 mines: bottom row plus one above its right end. A click in the
# open area clears the whole board in one cascade.
WALL_LAYOUT = (
    "...........",
    "...........",
    "...........",
    "...........",
    "...........",
    "...........",
    "...........",
    "..........*",
    "***********",
)

# 9x11, 12 mines spread so every safe cell touches a mine. Each click
# reveals exactly one cell.
GRID_LAYOUT = (
    "...........",
    ".*..*..*..*",
    "...........",
    "...........",
    ".*..*..*..*",
    "...........",
    "...........",
    ".*..*..*..*",
    "...........",
)


def board_from_layout(*lines: str) -> Board:
    """Build a board from strings where '*' marks a mine."""
    mines = [
        (row, col)
        for row, line in enumerate(lines)
        for col, char in enumerate(line)
        if char == "*"
    ]
    config = BoardConfig(len(lines), len(lines[0]), len(mines))
    return build_board(config, mines)


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def layout_board() -> Callable[..., Board]:
    """Factory building a board from layout strings."""
    return board_from_layout


@pytest.fixture
def wall_board() -> Board:
    """Reference-size board that clears in one click."""
    return board_from_layout(*WALL_LAYOUT)


@pytest.fixture
def grid_board() -> Board:
    """Reference-size board where every safe cell is numbered."""
    return board_from_layout(*GRID_LAYOUT)


@pytest.fixture
def empty_board() -> Board:
    """A 5x5 board with no mines for cascade testing."""
    return build_board(BoardConfig(5, 5, 0), [])


# ============================================================================
# Controller Fixtures
# ============================================================================

@pytest.fixture
def scheduler() -> ManualScheduler:
    """Deterministic tick source."""
    return ManualScheduler()


@pytest.fixture
def save_slot(tmp_path: Path) -> SaveSlot:
    """Save slot inside a temporary directory."""
    return SaveSlot(tmp_path / "saves" / "last_game_state.json")


@pytest.fixture
def make_controller(
    scheduler: ManualScheduler, save_slot: SaveSlot
) -> Callable[..., MatchController]:
    """
    Factory for controllers dealing fixed boards.

    Boards are handed out in turn (player one first), cycling when a
    new match is started. The config follows the first board's size.
    """
    def factory(*boards: Board, config: Optional[MatchConfig] = None):
        first = boards[0].config
        config = config or MatchConfig(
            rows=first.rows, cols=first.cols, num_mines=first.num_mines
        )
        dealer = itertools.cycle(boards)
        return MatchController(
            config=config,
            scheduler=scheduler,
            save_slot=save_slot,
            board_factory=lambda _: next(dealer),
        )

    return factory


@pytest.fixture
def start_playing(scheduler: ManualScheduler) -> Callable[[MatchController], None]:
    """Start a new match and run through the countdown."""
    def start(controller: MatchController) -> None:
        controller.start_new_game()
        scheduler.advance(controller.config.countdown_seconds)

    return start
