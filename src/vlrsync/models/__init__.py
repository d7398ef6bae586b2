"""Pydantic v2 models for all synced entity types.

Re-exports all model classes for convenient import::

    from vlrsync.models import MatchDetail, MapResult, ...
"""

from .map import MapResult
from .match import EventInfo, MatchDetail, MatchSummary, TeamInfo
from .player_stats import AgentInfo, PlayerStat, StatLine
from .round_history import WIN_CONDITIONS, RoundResult

__all__ = [
    "MatchSummary",
    "MatchDetail",
    "TeamInfo",
    "EventInfo",
    "MapResult",
    "PlayerStat",
    "AgentInfo",
    "StatLine",
    "RoundResult",
    "WIN_CONDITIONS",
]
