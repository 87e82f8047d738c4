"""
Duel module.

Provides the two-player match: player state, match status and
configuration, tick schedulers, and the match controller.
"""
from .player import Player, PlayerState
from .match import DEFAULT_CONFIG, MatchConfig, MatchState, MatchStatus
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler, TimerHandle
from .controller import MatchController

__all__ = [
    "Player",
    "PlayerState",
    "DEFAULT_CONFIG",
    "MatchConfig",
    "MatchState",
    "MatchStatus",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "TimerHandle",
    "MatchController",
]
