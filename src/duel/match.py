"""
Match configuration, status, and the observable match snapshot.
"""
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional

from minefield import Board, BoardConfig

from .player import Player, PlayerState


# ============================================================================
# Constants
# ============================================================================

class MatchStatus(Enum):
    """Phases of a match; decides which player actions are accepted."""

    IDLE = auto()
    COUNTDOWN = auto()
    PLAYING = auto()
    PAUSED = auto()
    GAME_OVER = auto()


@dataclass(frozen=True)
class MatchConfig:
    """
    Configuration for a duel.

    Attributes:
        rows: Board rows for both players.
        cols: Board columns for both players.
        num_mines: Mines per board.
        match_duration: Match clock length in seconds.
        countdown_seconds: Countdown before play starts or resumes.
        penalty_seconds: Time added per incorrect flag on clearing.
    """

    rows: int = 9
    cols: int = 11
    num_mines: int = 12
    match_duration: int = 180
    countdown_seconds: int = 5
    penalty_seconds: int = 5

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        # raises for bad dimensions or mine counts
        BoardConfig(self.rows, self.cols, self.num_mines)
        if self.match_duration < 1:
            raise ValueError("Match duration must be positive")
        if self.countdown_seconds < 1:
            raise ValueError("Countdown must be positive")
        if self.penalty_seconds < 0:
            raise ValueError("Penalty cannot be negative")

    @property
    def board_config(self) -> BoardConfig:
        return BoardConfig(self.rows, self.cols, self.num_mines)


DEFAULT_CONFIG = MatchConfig()


# ============================================================================
# Match State
# ============================================================================

@dataclass(frozen=True)
class MatchState:
    """
    Read-only snapshot of a match.

    Replaced wholesale on every transition, so two states compare
    equal exactly when nothing observable changed.
    """

    status: MatchStatus
    player_one: PlayerState
    player_two: PlayerState
    countdown_remaining: int
    match_time_remaining: int
    winner: Optional[Player] = None
    has_saved_match: bool = False

    @classmethod
    def initial(
        cls, config: MatchConfig, has_saved_match: bool = False
    ) -> "MatchState":
        """Idle state with empty boards, before any match starts."""
        board = Board.empty(config.board_config)
        return cls(
            status=MatchStatus.IDLE,
            player_one=PlayerState.fresh(board),
            player_two=PlayerState.fresh(board),
            countdown_remaining=config.countdown_seconds,
            match_time_remaining=config.match_duration,
            has_saved_match=has_saved_match,
        )

    def player(self, player: Player) -> PlayerState:
        """Get one side's state."""
        return self.player_one if player is Player.ONE else self.player_two

    def with_player(self, player: Player, state: PlayerState) -> "MatchState":
        """Return a copy with one side's state replaced."""
        if player is Player.ONE:
            return replace(self, player_one=state)
        return replace(self, player_two=state)

    def update(self, **changes) -> "MatchState":
        return replace(self, **changes)
