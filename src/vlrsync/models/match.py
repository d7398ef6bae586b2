"""Pydantic v2 models for match summary and match detail records.

MatchSummary mirrors a listing card. MatchDetail carries the same
identity plus everything the match page adds (patch, maps, scoreboards).
"""

from typing import Literal

from pydantic import Field

from .base import DocumentModel
from .map import MapResult
from .player_stats import PlayerStat

MatchStatus = Literal["live", "upcoming", "completed"]

TBD = "TBD"


class TeamInfo(DocumentModel):
    """One side of a match."""

    team_id: str | None = None
    name: str
    short_name: str
    score: int = Field(default=0, ge=0)
    logo_url: str | None = None


class EventInfo(DocumentModel):
    """Tournament the match belongs to."""

    event_id: str | None = None
    name: str = ""
    series: str = ""


class MatchSummary(DocumentModel):
    """A match as shown on a listing page."""

    id: str = Field(min_length=1)
    url: str
    status: MatchStatus = "upcoming"
    scheduled_time: str | None = None  # ISO-8601, UTC
    team1: TeamInfo
    team2: TeamInfo
    event: EventInfo = Field(default_factory=EventInfo)


class MatchDetail(MatchSummary):
    """A fully parsed match page.

    ``maps`` is None only when the record never carried the field; such
    a record must never be persisted (see ``validation.validate_detail``).
    """

    patch: str | None = None
    maps: list[MapResult] | None = None
    overall_stats: list[PlayerStat] = Field(default_factory=list)

    @property
    def is_placeholder(self) -> bool:
        """Both sides are still the "TBD" placeholder."""
        return self.team1.name == TBD and self.team2.name == TBD
