"""Pydantic v2 models for per-player statistics rows."""

from pydantic import Field

from .base import DocumentModel


class AgentInfo(DocumentModel):
    """Agent played on a map. Both fields are null on aggregate tables."""

    name: str | None = None
    icon_url: str | None = None


class StatLine(DocumentModel):
    """Numeric scoreboard columns. Unparseable cells default to 0."""

    kills: int = 0
    deaths: int = 0
    assists: int = 0
    acs: float = 0
    adr: float = 0
    kast_percent: float = 0
    headshot_percent: float = 0
    first_kills: int = 0
    first_deaths: int = 0
    rating: float | None = None


class PlayerStat(DocumentModel):
    """One scoreboard row: a player on a map (or across all maps)."""

    player_id: str | None = None
    player_name: str = Field(min_length=1)
    team_name: str
    agent: AgentInfo = Field(default_factory=AgentInfo)
    stats: StatLine = Field(default_factory=StatLine)
