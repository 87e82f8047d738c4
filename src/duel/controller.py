"""
Match controller.

Orchestrates the two player states, the match status machine, the
countdown and match timers, win/loss/timeout resolution, and save/load
of a paused match.
"""
import logging
from typing import Callable, List, Optional

from minefield import Board, BoardConfig, generate_board, reveal_mines
from storage import (
    SaveSlot,
    Snapshot,
    SnapshotDecodeError,
    decode_snapshot,
    encode_snapshot,
)

from .match import DEFAULT_CONFIG, MatchConfig, MatchState, MatchStatus
from .player import Player, PlayerState
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

BoardFactory = Callable[[BoardConfig], Board]
StateListener = Callable[[MatchState], None]


class MatchController:
    """
    Single owner of a split-screen match.

    Every action and timer tick replaces the observable ``MatchState``
    wholesale and notifies subscribers. All calls must come from the
    scheduler's thread or event loop.

    Player actions return True when they changed the match and False
    when they were ignored.
    """

    def __init__(
        self,
        config: MatchConfig = DEFAULT_CONFIG,
        scheduler: Optional[Scheduler] = None,
        save_slot: Optional[SaveSlot] = None,
        board_factory: Optional[BoardFactory] = None,
    ) -> None:
        """
        Initialize the controller in the idle state.

        Args:
            config: Board size, mine count, and timing constants.
            scheduler: Tick source for both timers.
            save_slot: Where the paused match is saved.
            board_factory: Builds one player's board. Called once per
                player per match; the default draws fresh randomness
                on every call.
        """
        self.config = config
        self.scheduler = scheduler or AsyncioScheduler()
        self.save_slot = save_slot or SaveSlot()
        self.board_factory = board_factory or generate_board

        self._countdown_timer: Optional[TimerHandle] = None
        self._match_timer: Optional[TimerHandle] = None
        self._listeners: List[StateListener] = []
        self._state = MatchState.initial(
            config, has_saved_match=self._saved_match_exists()
        )

    # ========================================================================
    # Observation
    # ========================================================================

    @property
    def state(self) -> MatchState:
        """Current read-only match snapshot."""
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a callback for every new match state.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: MatchState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def start_new_game(self) -> None:
        """Deal two fresh boards and enter the countdown."""
        self._cancel_timers()
        board_config = self.config.board_config
        self._set_state(
            MatchState(
                status=MatchStatus.COUNTDOWN,
                player_one=PlayerState.fresh(self.board_factory(board_config)),
                player_two=PlayerState.fresh(self.board_factory(board_config)),
                countdown_remaining=self.config.countdown_seconds,
                match_time_remaining=self.config.match_duration,
                winner=None,
                has_saved_match=self._state.has_saved_match,
            )
        )
        logger.info("New match started")
        self._start_countdown()

    def resume_game(self) -> bool:
        """Leave the pause through a fresh countdown."""
        if self._state.status is not MatchStatus.PAUSED:
            logger.debug(f"Resume ignored while {self._state.status.name}")
            return False
        self._set_state(
            self._state.update(
                status=MatchStatus.COUNTDOWN,
                countdown_remaining=self.config.countdown_seconds,
            )
        )
        logger.info(
            f"Resuming match with {self._state.match_time_remaining}s left"
        )
        self._start_countdown()
        return True

    def pause_game(self) -> bool:
        """Stop the match clock, keeping the time remaining."""
        if self._state.status is not MatchStatus.PLAYING:
            logger.debug(f"Pause ignored while {self._state.status.name}")
            return False
        self._cancel_match_timer()
        self._set_state(self._state.update(status=MatchStatus.PAUSED))
        logger.info(
            f"Match paused with {self._state.match_time_remaining}s left"
        )
        return True

    def close(self) -> None:
        """Cancel any running timer without changing the match."""
        self._cancel_timers()

    # ========================================================================
    # Timers
    # ========================================================================

    def _start_countdown(self) -> None:
        self._cancel_countdown_timer()
        self._countdown_timer = self.scheduler.every(self._on_countdown_tick)

    def _on_countdown_tick(self) -> None:
        state = self._state
        if state.status is not MatchStatus.COUNTDOWN:
            self._cancel_countdown_timer()
            return
        remaining = state.countdown_remaining - 1
        if remaining > 0:
            self._set_state(state.update(countdown_remaining=remaining))
            return
        self._cancel_countdown_timer()
        self._set_state(
            state.update(status=MatchStatus.PLAYING, countdown_remaining=0)
        )
        self._start_match_timer()

    def _start_match_timer(self) -> None:
        self._cancel_match_timer()
        if self._state.match_time_remaining <= 0:
            self._resolve_timeout(self._state)
            return
        self._match_timer = self.scheduler.every(self._on_match_tick)

    def _on_match_tick(self) -> None:
        state = self._state
        if state.status is not MatchStatus.PLAYING:
            self._cancel_match_timer()
            return
        remaining = max(state.match_time_remaining - 1, 0)
        state = state.update(match_time_remaining=remaining)
        if remaining == 0:
            self._resolve_timeout(state)
        else:
            self._set_state(state)

    def _cancel_countdown_timer(self) -> None:
        if self._countdown_timer is not None:
            self._countdown_timer.cancel()
            self._countdown_timer = None

    def _cancel_match_timer(self) -> None:
        if self._match_timer is not None:
            self._match_timer.cancel()
            self._match_timer = None

    def _cancel_timers(self) -> None:
        self._cancel_countdown_timer()
        self._cancel_match_timer()

    # ========================================================================
    # Player Actions
    # ========================================================================

    def _accepting(self, player: Player, row: int, col: int) -> bool:
        """Check status, bounds, and whether the player is still in."""
        if self._state.status is not MatchStatus.PLAYING:
            logger.debug(
                f"Action from {player.name} ignored while "
                f"{self._state.status.name}"
            )
            return False
        player_state = self._state.player(player)
        if not player_state.board.is_valid_position(row, col):
            logger.warning(
                f"Rejected out-of-bounds cell ({row}, {col}) from {player.name}"
            )
            return False
        if player_state.has_finished:
            logger.debug(f"{player.name} already cleared their board")
            return False
        return True

    def on_cell_click(self, player: Player, row: int, col: int) -> bool:
        """
        Reveal a cell on one player's board.

        Clicking a mine loses the match for that player. Revealed and
        flagged cells are ignored.
        """
        if not self._accepting(player, row, col):
            return False
        player_state = self._state.player(player)
        cell = player_state.board.grid[row][col]
        if cell.revealed or cell.flagged:
            return False

        if cell.has_mine:
            self._resolve_loss(player)
            return True

        player_state = player_state.reveal(row, col)
        state = self._state.with_player(player, player_state)
        if player_state.is_cleared:
            self._record_clear(state, player)
        else:
            self._set_state(state)
        return True

    def on_cell_long_press(self, player: Player, row: int, col: int) -> bool:
        """Toggle a flag on one player's board."""
        if not self._accepting(player, row, col):
            return False
        player_state = self._state.player(player)
        if player_state.board.grid[row][col].revealed:
            return False
        self._set_state(
            self._state.with_player(player, player_state.toggle_flag(row, col))
        )
        return True

    # ========================================================================
    # Resolution
    # ========================================================================

    def _record_clear(self, state: MatchState, player: Player) -> None:
        player_state = state.player(player)
        elapsed = self.config.match_duration - state.match_time_remaining
        penalty = player_state.incorrect_flags * self.config.penalty_seconds
        player_state = player_state.with_time(elapsed + penalty)
        state = state.with_player(player, player_state)
        logger.info(
            f"{player.name} cleared their board in {player_state.time_taken}s "
            f"({penalty}s penalty)"
        )

        other = state.player(player.opponent)
        if not other.has_finished:
            self._set_state(state)
            return

        if player_state.time_taken < other.time_taken:
            winner = player
        elif other.time_taken < player_state.time_taken:
            winner = player.opponent
        else:
            winner = None
        self._finish(state, winner)

    def _resolve_loss(self, player: Player) -> None:
        player_state = self._state.player(player)
        state = self._state.with_player(
            player, player_state.with_board(reveal_mines(player_state.board))
        )
        logger.info(f"{player.name} hit a mine")
        self._finish(state, player.opponent)

    def _resolve_timeout(self, state: MatchState) -> None:
        revealed_one = state.player_one.safe_cells_revealed
        revealed_two = state.player_two.safe_cells_revealed
        if revealed_one > revealed_two:
            winner = Player.ONE
        elif revealed_two > revealed_one:
            winner = Player.TWO
        else:
            winner = None
        logger.info(
            f"Time is up: {revealed_one} vs {revealed_two} safe cells revealed"
        )
        self._finish(state, winner)

    def _finish(self, state: MatchState, winner: Optional[Player]) -> None:
        self._cancel_match_timer()
        self._set_state(
            state.update(status=MatchStatus.GAME_OVER, winner=winner)
        )
        logger.info(
            f"Game over, winner: {winner.name if winner else 'none (tie)'}"
        )

    # ========================================================================
    # Save / Load
    # ========================================================================

    def _saved_match_exists(self) -> bool:
        try:
            return self.save_slot.exists()
        except OSError:
            logger.exception("Could not check for a saved match")
            return False

    def save_game(self) -> bool:
        """
        Save the paused match, replacing any earlier save.

        Returns:
            False when not paused or when the write fails.
        """
        if self._state.status is not MatchStatus.PAUSED:
            logger.debug(f"Save ignored while {self._state.status.name}")
            return False
        blob = encode_snapshot(Snapshot.from_match(self._state))
        try:
            self.save_slot.write(blob)
        except OSError:
            logger.exception(f"Failed to save match to {self.save_slot.path}")
            return False
        self._set_state(self._state.update(has_saved_match=True))
        logger.info(f"Match saved to {self.save_slot.path}")
        return True

    def load_game(self) -> bool:
        """
        Replace the current match with the saved one, paused.

        Returns:
            False when timers are running or no usable save exists.
        """
        if self._state.status in (MatchStatus.COUNTDOWN, MatchStatus.PLAYING):
            logger.debug(f"Load ignored while {self._state.status.name}")
            return False

        try:
            blob = self.save_slot.read()
            if blob is None:
                logger.info("No saved match to load")
                self._set_state(self._state.update(has_saved_match=False))
                return False
            snapshot = decode_snapshot(blob)
            self._check_snapshot(snapshot)
        except (OSError, SnapshotDecodeError) as error:
            logger.warning(f"Could not load saved match: {error}")
            self._set_state(self._state.update(has_saved_match=False))
            return False

        self._cancel_timers()
        self._set_state(
            MatchState(
                status=MatchStatus.PAUSED,
                player_one=PlayerState(
                    board=snapshot.player1_board,
                    flags_placed=snapshot.player1_flags_placed,
                ),
                player_two=PlayerState(
                    board=snapshot.player2_board,
                    flags_placed=snapshot.player2_flags_placed,
                ),
                countdown_remaining=self.config.countdown_seconds,
                match_time_remaining=snapshot.remaining_time,
                winner=None,
                has_saved_match=True,
            )
        )
        logger.info(
            f"Loaded saved match with {snapshot.remaining_time}s left"
        )
        return True

    def _check_snapshot(self, snapshot: Snapshot) -> None:
        for board in (snapshot.player1_board, snapshot.player2_board):
            if (board.config.rows, board.config.cols) != (
                self.config.rows, self.config.cols
            ):
                raise SnapshotDecodeError(
                    f"Saved board is {board.config.rows}x{board.config.cols}, "
                    f"expected {self.config.rows}x{self.config.cols}"
                )
        if snapshot.remaining_time > self.config.match_duration:
            raise SnapshotDecodeError(
                f"Remaining time {snapshot.remaining_time}s exceeds the "
                f"{self.config.match_duration}s match"
            )

    def delete_saved_game(self) -> None:
        """Remove the saved match, if any."""
        try:
            if self.save_slot.delete():
                logger.info("Deleted saved match")
        except OSError:
            logger.exception(f"Failed to delete {self.save_slot.path}")
        self._set_state(
            self._state.update(has_saved_match=self._saved_match_exists())
        )
