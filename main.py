#!/usr/bin/env python3
"""
Split-screen minesweeper duel - Main entry point.

Usage:
    python main.py watch [--seed N] [--delay S] [--accuracy P] [--verbose]
    python main.py inspect-save [--save-file PATH] [--verbose]
    python main.py clear-save [--save-file PATH] [--verbose]
"""
import argparse
import logging
import os
import random
import sys
import tempfile
import time
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent / "src"))

from duel import (  # noqa: E402
    ManualScheduler,
    MatchController,
    MatchState,
    MatchStatus,
    Player,
)
from minefield import Board, BoardConfig, generate_board  # noqa: E402
from storage import SaveSlot, SnapshotDecodeError, decode_snapshot  # noqa: E402


def clear_screen():
    os.system('cls' if os.name == 'nt' else 'clear')


def render_match(state: MatchState) -> str:
    """Render both boards side by side with the match clock."""
    left = state.player_one.board.render_ansi().splitlines()
    right = state.player_two.board.render_ansi().splitlines()
    width = max(len(line) for line in left)
    lines = [
        f"Status: {state.status.name} | "
        f"Countdown: {state.countdown_remaining} | "
        f"Time left: {state.match_time_remaining}s",
        f"{'Player ONE':<{width}}    Player TWO",
    ]
    for line_one, line_two in zip(left, right):
        lines.append(f"{line_one:<{width}}    {line_two}")
    lines.append(
        f"{'Flags: ' + str(state.player_one.flags_placed):<{width}}    "
        f"Flags: {state.player_two.flags_placed}"
    )
    return "\n".join(lines)


def bot_move(
    controller: MatchController, player: Player, rng: random.Random, accuracy: float
) -> None:
    """Play one action for a simulated player."""
    board = controller.state.player(player).board
    hidden = [
        (row, col) for row, col in board.positions()
        if board.grid[row][col].is_hidden
    ]
    if not hidden:
        return
    safe = [pos for pos in hidden if not board.grid[pos[0]][pos[1]].has_mine]
    if safe and rng.random() < accuracy:
        controller.on_cell_click(player, *rng.choice(safe))
    elif rng.random() < 0.5:
        controller.on_cell_long_press(player, *rng.choice(hidden))
    else:
        controller.on_cell_click(player, *rng.choice(hidden))


def simulate_duel(
    seed: Optional[int] = None, accuracy: float = 0.97, delay: float = 0.0
) -> MatchState:
    """
    Play a full match between two simulated players.

    The match runs in a scratch directory, so the real save file is
    never read or written.

    Args:
        seed: Seeds both boards and both bots; None draws fresh randomness.
        accuracy: Chance a bot picks a safe cell on each move.
        delay: Seconds between rendered ticks; 0 renders nothing.

    Returns:
        The final, game-over match state.
    """
    rng = random.Random(seed)

    def seeded_board(config: BoardConfig) -> Board:
        # Each board gets its own generator drawn from the master seed
        return generate_board(config, random.Random(rng.getrandbits(64)))

    scheduler = ManualScheduler()
    with tempfile.TemporaryDirectory() as scratch:
        controller = MatchController(
            scheduler=scheduler,
            save_slot=SaveSlot(Path(scratch) / "unused.json"),
            board_factory=seeded_board if seed is not None else None,
        )
        controller.start_new_game()

        while controller.state.status is not MatchStatus.GAME_OVER:
            if controller.state.status is MatchStatus.PLAYING:
                for player in Player:
                    if controller.state.status is MatchStatus.PLAYING:
                        bot_move(controller, player, rng, accuracy)
            scheduler.advance()

            if delay > 0:
                clear_screen()
                print(render_match(controller.state))
                time.sleep(delay)

        controller.close()
        return controller.state


def watch(args: argparse.Namespace) -> None:
    """Watch two simulated players duel on the match clock."""
    state = simulate_duel(args.seed, args.accuracy, args.delay)
    print()
    print(render_match(state))
    print()
    for player in Player:
        player_state = state.player(player)
        finished = (
            f"{player_state.time_taken}s" if player_state.has_finished else "-"
        )
        print(
            f"{player.name:<4} revealed {player_state.safe_cells_revealed:>3} "
            f"safe cells | cleared in: {finished}"
        )
    print(f"Winner: {state.winner.name if state.winner else 'tie'}")


def inspect_save(args: argparse.Namespace) -> None:
    """Print a summary of the saved match."""
    slot = SaveSlot(args.save_file)
    try:
        blob = slot.read()
        if blob is None:
            print(f"No saved match at {slot.path}")
            return
        snapshot = decode_snapshot(blob)
    except (OSError, SnapshotDecodeError) as error:
        print(f"Saved match at {slot.path} is unreadable: {error}")
        return

    print(f"Saved match at {slot.path}")
    print(f"  Time left: {snapshot.remaining_time}s")
    for name, board, flags in (
        ("ONE", snapshot.player1_board, snapshot.player1_flags_placed),
        ("TWO", snapshot.player2_board, snapshot.player2_flags_placed),
    ):
        print(
            f"  Player {name}: {board.safe_cells_revealed}/"
            f"{board.config.safe_cells} safe cells revealed, {flags} flags"
        )


def clear_save(args: argparse.Namespace) -> None:
    """Delete the saved match."""
    slot = SaveSlot(args.save_file)
    if slot.delete():
        print(f"Deleted {slot.path}")
    else:
        print(f"No saved match at {slot.path}")


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser; shared options go after the command."""
    logging_options = argparse.ArgumentParser(add_help=False)
    logging_options.add_argument(
        "--verbose", action="store_true", help="Show debug logging"
    )
    save_options = argparse.ArgumentParser(add_help=False)
    save_options.add_argument(
        "--save-file", type=Path, default=None,
        help="Saved match location (default: per-user data directory)",
    )

    parser = argparse.ArgumentParser(
        description="Split-screen minesweeper duel"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    watch_parser = subparsers.add_parser(
        "watch", parents=[logging_options],
        help="Watch two simulated players duel",
    )
    watch_parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for boards and bots"
    )
    watch_parser.add_argument(
        "--delay", type=float, default=0.0,
        help="Seconds between rendered ticks (0 prints only the result)",
    )
    watch_parser.add_argument(
        "--accuracy", type=float, default=0.97,
        help="Chance a bot picks a safe cell on each move",
    )

    subparsers.add_parser(
        "inspect-save", parents=[logging_options, save_options],
        help="Summarize the saved match",
    )
    subparsers.add_parser(
        "clear-save", parents=[logging_options, save_options],
        help="Delete the saved match",
    )
    return parser


def main(argv: Optional[list] = None) -> None:
    """Parse arguments and run the appropriate command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    verbose = getattr(args, "verbose", False)
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

    if args.command == "watch":
        watch(args)
    elif args.command == "inspect-save":
        inspect_save(args)
    elif args.command == "clear-save":
        clear_save(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
