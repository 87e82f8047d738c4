"""
Unit tests for MatchController.

Tests the status machine, both timers, player actions, and
win/loss/timeout resolution using a manually advanced scheduler.
"""
import pytest
from duel import (
    ManualScheduler,
    MatchConfig,
    MatchController,
    MatchStatus,
    Player,
)
from minefield import Board


def _safe_positions(board: Board):
    return [
        pos for pos in board.positions()
        if not board.grid[pos[0]][pos[1]].has_mine
    ]


# ============================================================================
# Lifecycle Tests
# ============================================================================

class TestLifecycle:
    """Test idle, countdown, and new-game transitions."""

    def test_starts_idle(self, make_controller, grid_board: Board) -> None:
        controller = make_controller(grid_board)
        assert controller.state.status is MatchStatus.IDLE
        assert controller.state.winner is None

    def test_new_game_enters_countdown(
        self, make_controller, grid_board: Board, wall_board: Board
    ) -> None:
        controller = make_controller(grid_board, wall_board)
        controller.start_new_game()
        state = controller.state
        assert state.status is MatchStatus.COUNTDOWN
        assert state.countdown_remaining == 5
        assert state.match_time_remaining == 180
        assert state.player_one.board == grid_board
        assert state.player_two.board == wall_board

    def test_countdown_ticks_down_then_plays(
        self, make_controller, scheduler: ManualScheduler, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        controller.start_new_game()
        seen = []
        for _ in range(4):
            scheduler.advance()
            seen.append(controller.state.countdown_remaining)
            assert controller.state.status is MatchStatus.COUNTDOWN
        assert seen == [4, 3, 2, 1]
        scheduler.advance()
        assert controller.state.status is MatchStatus.PLAYING
        assert controller.state.countdown_remaining == 0
        assert controller.state.match_time_remaining == 180

    def test_match_timer_ticks_once_per_second(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        scheduler.advance(10)
        assert controller.state.match_time_remaining == 170

    def test_actions_ignored_during_countdown(
        self, make_controller, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        controller.start_new_game()
        assert controller.on_cell_click(Player.ONE, 0, 0) is False
        assert controller.on_cell_long_press(Player.ONE, 0, 0) is False
        assert controller.state.player_one.board == grid_board

    def test_restart_replaces_running_timers(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        """A new game never leaves two timers ticking."""
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_click(Player.ONE, 0, 0)
        controller.start_new_game()
        assert scheduler.active_timers == 1
        assert controller.state.status is MatchStatus.COUNTDOWN
        assert controller.state.player_one.board.safe_cells_revealed == 0
        scheduler.advance(5)
        scheduler.advance(3)
        assert controller.state.match_time_remaining == 177

    def test_new_game_after_game_over(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_click(Player.ONE, 1, 1)
        controller.start_new_game()
        assert controller.state.status is MatchStatus.COUNTDOWN
        assert controller.state.winner is None


# ============================================================================
# Pause / Resume Tests
# ============================================================================

class TestPauseResume:
    """Test pausing and resuming the match clock."""

    def test_pause_keeps_remaining_time(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        scheduler.advance(10)
        assert controller.pause_game() is True
        assert controller.state.status is MatchStatus.PAUSED
        assert scheduler.active_timers == 0
        scheduler.advance(30)
        assert controller.state.match_time_remaining == 170

    def test_actions_ignored_while_paused(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.pause_game()
        assert controller.on_cell_click(Player.ONE, 0, 0) is False

    def test_resume_counts_down_then_continues(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        scheduler.advance(10)
        controller.pause_game()

        assert controller.resume_game() is True
        assert controller.state.status is MatchStatus.COUNTDOWN
        assert controller.state.countdown_remaining == 5
        scheduler.advance(5)
        assert controller.state.status is MatchStatus.PLAYING
        assert controller.state.match_time_remaining == 170
        scheduler.advance()
        assert controller.state.match_time_remaining == 169

    def test_resume_only_from_paused(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        assert controller.resume_game() is False
        start_playing(controller)
        assert controller.resume_game() is False
        assert controller.state.status is MatchStatus.PLAYING

    def test_pause_only_from_playing(
        self, make_controller, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        controller.start_new_game()
        assert controller.pause_game() is False
        assert controller.state.status is MatchStatus.COUNTDOWN


# ============================================================================
# Cell Action Tests
# ============================================================================

class TestCellActions:
    """Test click and long-press handling."""

    def test_click_reveals_on_own_board_only(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        assert controller.on_cell_click(Player.ONE, 0, 0) is True
        assert controller.state.player_one.board.cell(0, 0).revealed is True
        assert controller.state.player_two.board.cell(0, 0).revealed is False

    def test_click_on_revealed_cell_is_ignored(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_click(Player.ONE, 0, 0)
        assert controller.on_cell_click(Player.ONE, 0, 0) is False

    def test_click_on_flagged_cell_is_ignored(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_long_press(Player.ONE, 1, 1)
        assert controller.on_cell_click(Player.ONE, 1, 1) is False
        assert controller.state.status is MatchStatus.PLAYING

    def test_long_press_toggles_flag_and_counter(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_long_press(Player.TWO, 2, 2)
        assert controller.state.player_two.flags_placed == 1
        controller.on_cell_long_press(Player.TWO, 2, 2)
        assert controller.state.player_two.flags_placed == 0
        assert controller.state.player_two.board.cell(2, 2).flagged is False

    def test_long_press_on_revealed_cell_is_ignored(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_click(Player.ONE, 0, 0)
        assert controller.on_cell_long_press(Player.ONE, 0, 0) is False
        assert controller.state.player_one.flags_placed == 0

    @pytest.mark.parametrize("row, col", [(-1, 0), (9, 0), (0, 11), (20, 20)])
    def test_out_of_bounds_is_rejected(
        self, make_controller, start_playing, grid_board: Board, row: int, col: int
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        before = controller.state
        assert controller.on_cell_click(Player.ONE, row, col) is False
        assert controller.on_cell_long_press(Player.ONE, row, col) is False
        assert controller.state == before


# ============================================================================
# Loss Tests
# ============================================================================

class TestMineClick:
    """Test losing by clicking a mine."""

    def test_mine_click_ends_match_for_opponent(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_long_press(Player.ONE, 4, 4)
        assert controller.on_cell_click(Player.ONE, 1, 1) is True

        state = controller.state
        assert state.status is MatchStatus.GAME_OVER
        assert state.winner is Player.TWO
        board = state.player_one.board
        assert (board.revealed_mask() == board.mine_mask()).all()
        assert board.cell(4, 4).flagged is True
        assert state.player_two.board.revealed_mask().sum() == 0

    def test_timer_stops_after_mine_click(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        scheduler.advance(20)
        controller.on_cell_click(Player.TWO, 4, 7)
        assert scheduler.active_timers == 0
        frozen = controller.state
        scheduler.advance(200)
        assert controller.state == frozen
        assert frozen.match_time_remaining == 160
        assert frozen.winner is Player.ONE

    def test_no_actions_after_game_over(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_click(Player.ONE, 1, 1)
        assert controller.on_cell_click(Player.TWO, 0, 0) is False
        assert controller.on_cell_long_press(Player.TWO, 0, 0) is False


# ============================================================================
# Clear and Penalty Tests
# ============================================================================

class TestClearing:
    """Test completion times, penalties, and both-cleared resolution."""

    def test_wrong_flag_penalty_scenario(
        self, make_controller, scheduler, start_playing, wall_board: Board
    ) -> None:
        """Clearing at 120s left with one wrong flag records 65s."""
        controller = make_controller(wall_board)
        start_playing(controller)
        scheduler.advance(60)
        controller.on_cell_long_press(Player.ONE, 0, 5)
        controller.on_cell_click(Player.ONE, 0, 0)

        state = controller.state
        assert state.player_one.is_cleared is True
        assert state.player_one.time_taken == 65
        assert state.player_two.time_taken is None
        assert state.status is MatchStatus.PLAYING

    @pytest.mark.parametrize("wrong_flags", [0, 1, 3])
    def test_penalty_is_linear_in_wrong_flags(
        self, make_controller, scheduler, start_playing, wall_board: Board,
        wrong_flags: int,
    ) -> None:
        controller = make_controller(wall_board)
        start_playing(controller)
        scheduler.advance(30)
        for col in range(wrong_flags):
            controller.on_cell_long_press(Player.ONE, 2, col)
        controller.on_cell_long_press(Player.ONE, 8, 8)
        controller.on_cell_click(Player.ONE, 5, 5)
        assert controller.state.player_one.time_taken == 30 + 5 * wrong_flags

    def test_single_hidden_safe_cell_prevents_clear(
        self, make_controller, start_playing, layout_board
    ) -> None:
        board = layout_board(".*.")
        controller = make_controller(board)
        start_playing(controller)
        controller.on_cell_click(Player.ONE, 0, 0)
        assert controller.state.player_one.time_taken is None
        controller.on_cell_click(Player.ONE, 0, 2)
        assert controller.state.player_one.time_taken == 0

    def test_finished_player_board_is_frozen(
        self, make_controller, start_playing, wall_board: Board
    ) -> None:
        controller = make_controller(wall_board)
        start_playing(controller)
        controller.on_cell_click(Player.ONE, 0, 0)
        assert controller.on_cell_click(Player.ONE, 8, 0) is False
        assert controller.on_cell_long_press(Player.ONE, 8, 0) is False
        assert controller.state.status is MatchStatus.PLAYING

    def test_both_cleared_faster_player_wins(
        self, make_controller, scheduler, start_playing, wall_board: Board
    ) -> None:
        controller = make_controller(wall_board)
        start_playing(controller)
        scheduler.advance(60)
        controller.on_cell_click(Player.TWO, 0, 0)
        scheduler.advance(20)
        controller.on_cell_click(Player.ONE, 0, 0)

        state = controller.state
        assert state.player_two.time_taken == 60
        assert state.player_one.time_taken == 80
        assert state.status is MatchStatus.GAME_OVER
        assert state.winner is Player.TWO
        assert scheduler.active_timers == 0

    def test_penalty_can_flip_the_result(
        self, make_controller, scheduler, start_playing, wall_board: Board
    ) -> None:
        controller = make_controller(wall_board)
        start_playing(controller)
        scheduler.advance(60)
        for col in range(3):
            controller.on_cell_long_press(Player.ONE, 0, col + 4)
        controller.on_cell_click(Player.ONE, 5, 5)
        scheduler.advance(10)
        controller.on_cell_click(Player.TWO, 5, 5)
        assert controller.state.player_one.time_taken == 75
        assert controller.state.player_two.time_taken == 70
        assert controller.state.winner is Player.TWO

    def test_equal_times_are_a_tie(
        self, make_controller, scheduler, start_playing, wall_board: Board
    ) -> None:
        controller = make_controller(wall_board)
        start_playing(controller)
        scheduler.advance(45)
        controller.on_cell_click(Player.ONE, 0, 0)
        controller.on_cell_click(Player.TWO, 0, 0)
        assert controller.state.status is MatchStatus.GAME_OVER
        assert controller.state.winner is None


# ============================================================================
# Timeout Tests
# ============================================================================

class TestTimeout:
    """Test resolution when the match clock runs out."""

    def test_more_revealed_cells_wins(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        """40 revealed safe cells beat 35 on timeout."""
        controller = make_controller(grid_board)
        start_playing(controller)
        safe = _safe_positions(grid_board)
        for row, col in safe[:40]:
            controller.on_cell_click(Player.ONE, row, col)
        for row, col in safe[:35]:
            controller.on_cell_click(Player.TWO, row, col)
        assert controller.state.player_one.safe_cells_revealed == 40
        assert controller.state.player_two.safe_cells_revealed == 35

        scheduler.advance(179)
        assert controller.state.status is MatchStatus.PLAYING
        scheduler.advance()
        state = controller.state
        assert state.status is MatchStatus.GAME_OVER
        assert state.match_time_remaining == 0
        assert state.winner is Player.ONE
        assert scheduler.active_timers == 0

    def test_equal_reveals_is_a_tie(
        self, make_controller, scheduler, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        controller.on_cell_click(Player.ONE, 0, 0)
        controller.on_cell_click(Player.TWO, 8, 10)
        scheduler.advance(180)
        assert controller.state.status is MatchStatus.GAME_OVER
        assert controller.state.winner is None

    def test_short_match_config(
        self, make_controller, scheduler, grid_board: Board
    ) -> None:
        config = MatchConfig(match_duration=3, countdown_seconds=1)
        controller = make_controller(grid_board, config=config)
        controller.start_new_game()
        scheduler.advance()
        controller.on_cell_click(Player.TWO, 0, 0)
        scheduler.advance(3)
        assert controller.state.winner is Player.TWO


# ============================================================================
# Observation Tests
# ============================================================================

class TestSubscribe:
    """Test state change notifications."""

    def test_listener_sees_every_tick(
        self, make_controller, scheduler, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        states = []
        controller.subscribe(states.append)
        controller.start_new_game()
        scheduler.advance(7)
        assert len(states) == 8
        assert [s.match_time_remaining for s in states[-2:]] == [179, 178]

    def test_unsubscribe_stops_notifications(
        self, make_controller, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        states = []
        unsubscribe = controller.subscribe(states.append)
        unsubscribe()
        controller.start_new_game()
        assert states == []

    def test_ignored_action_does_not_notify(
        self, make_controller, start_playing, grid_board: Board
    ) -> None:
        controller = make_controller(grid_board)
        start_playing(controller)
        states = []
        controller.subscribe(states.append)
        controller.on_cell_click(Player.ONE, 0, 0)
        controller.on_cell_click(Player.ONE, 0, 0)
        assert len(states) == 1
