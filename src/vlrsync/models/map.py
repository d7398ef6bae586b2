"""Pydantic v2 model for a single map within a series."""

import logging
from typing import Literal

from pydantic import Field, model_validator
from typing_extensions import Self

from .base import DocumentModel
from .player_stats import PlayerStat
from .round_history import RoundResult

logger = logging.getLogger(__name__)

MapStatus = Literal["upcoming", "live", "completed", "unplayed"]


class MapResult(DocumentModel):
    """Per-map result, scoreboard and round history."""

    name: str
    status: MapStatus = "upcoming"
    picked_by: str | None = None
    team1_score: int = Field(default=0, ge=0)
    team2_score: int = Field(default=0, ge=0)
    stats: list[PlayerStat] = Field(default_factory=list)
    rounds: list[RoundResult] | None = None

    @model_validator(mode="after")
    def log_extreme_rounds(self) -> Self:
        """Log extreme overtime (>50 total rounds); the record is kept."""
        if self.team1_score + self.team2_score > 50:
            logger.warning(
                "Extreme round count: %d+%d on %s",
                self.team1_score, self.team2_score, self.name,
            )
        return self
