"""Tests for pydantic model validation and document export."""

import logging

import pytest
from pydantic import ValidationError

from vlrsync.models import (
    MapResult,
    MatchDetail,
    MatchSummary,
    PlayerStat,
    RoundResult,
    StatLine,
    TeamInfo,
)


def _summary(**overrides) -> MatchSummary:
    data = {
        "id": "542195",
        "url": "https://www.vlr.gg/542195",
        "team1": TeamInfo(name="Team Liquid", short_name="TL", score=1),
        "team2": TeamInfo(name="Sentinels", short_name="SEN"),
    }
    data.update(overrides)
    return MatchSummary(**data)


class TestMatchSummary:

    def test_defaults(self):
        summary = _summary()
        assert summary.status == "upcoming"
        assert summary.scheduled_time is None
        assert summary.event.name == ""

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            _summary(status="postponed")

    def test_negative_score_rejected(self):
        with pytest.raises(ValidationError):
            TeamInfo(name="Team Liquid", short_name="TL", score=-1)

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            _summary(id="")

    def test_document_uses_camel_case(self):
        doc = _summary(scheduled_time="2025-09-19T11:30:00Z").to_document()
        assert doc["scheduledTime"] == "2025-09-19T11:30:00Z"
        assert doc["team1"]["shortName"] == "TL"
        assert doc["team1"]["teamId"] is None
        assert doc["event"] == {"eventId": None, "name": "", "series": ""}

    def test_populate_from_document(self):
        doc = _summary().to_document()
        assert MatchSummary.model_validate(doc) == _summary()


class TestMatchDetail:

    def test_maps_absent_by_default(self):
        detail = MatchDetail(**_summary().model_dump())
        assert detail.maps is None
        assert detail.overall_stats == []

    def test_is_placeholder(self):
        tbd = TeamInfo(name="TBD", short_name="TBD")
        assert MatchDetail(**_summary(team1=tbd, team2=tbd).model_dump()).is_placeholder
        assert not MatchDetail(**_summary(team1=tbd).model_dump()).is_placeholder


class TestMapResult:

    def test_unplayed_is_valid_status(self):
        assert MapResult(name="Haven", status="unplayed").status == "unplayed"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            MapResult(name="Haven", status="paused")

    def test_document_keys(self):
        doc = MapResult(name="Bind", picked_by="SEN", team1_score=13).to_document()
        assert doc["pickedBy"] == "SEN"
        assert doc["team1Score"] == 13
        assert doc["rounds"] is None

    def test_extreme_overtime_logged_not_warned(self, caplog, recwarn):
        with caplog.at_level(logging.WARNING, logger="vlrsync.models.map"):
            result = MapResult(name="Ascent", team1_score=27, team2_score=25)

        assert result.team1_score == 27
        assert "Extreme round count: 27+25 on Ascent" in caplog.text
        assert len(recwarn) == 0


class TestRoundResult:

    def test_round_number_starts_at_one(self):
        with pytest.raises(ValidationError):
            RoundResult(round_number=0)

    @pytest.mark.parametrize("condition", ["elim", "defuse", "boom", "time"])
    def test_known_conditions(self, condition):
        assert RoundResult(round_number=1, win_condition=condition).win_condition == condition

    def test_unknown_condition_rejected(self):
        with pytest.raises(ValidationError, match="win_condition"):
            RoundResult(round_number=1, win_condition="surrender")


class TestPlayerStat:

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            PlayerStat(player_name="", team_name="Sentinels")

    def test_stat_document_keys(self):
        stat = PlayerStat(
            player_name="TenZ",
            team_name="Sentinels",
            stats=StatLine(kast_percent=75, first_kills=3),
        )
        doc = stat.to_document()
        assert doc["stats"]["kastPercent"] == 75
        assert doc["stats"]["firstKills"] == 3
        assert doc["agent"] == {"name": None, "iconUrl": None}
