"""Pydantic v2 model for a single round outcome."""

from pydantic import Field, field_validator

from .base import DocumentModel

# Icon filename stems used by the round-history squares.
WIN_CONDITIONS = frozenset({"elim", "defuse", "boom", "time"})


class RoundResult(DocumentModel):
    """One round of a map's round history."""

    round_number: int = Field(ge=1)
    winning_team: str | None = None
    win_condition: str | None = None

    @field_validator("win_condition")
    @classmethod
    def validate_win_condition(cls, v: str | None) -> str | None:
        """Win condition must be a known round-end icon."""
        if v is not None and v not in WIN_CONDITIONS:
            raise ValueError(
                f"win_condition must be one of {sorted(WIN_CONDITIONS)}, got '{v}'"
            )
        return v
