"""Tests for the listing page parser and listing timestamp builder."""

import pytest

from samples import BASE, listing_card, listing_page
from vlrsync.listing_parser import build_timestamp, parse_listing


DAY = "Fri, September 19, 2025"


class TestParseListing:
    """Card extraction from /matches and /matches/results."""

    def test_live_card_with_dash_scores(self):
        html = listing_page((DAY, [listing_card(score1="–", score2="–", status="LIVE")]))

        [summary] = parse_listing(html)

        assert summary.status == "live"
        assert summary.team1.score == 0
        assert summary.team2.score == 0

    def test_id_and_url_from_href(self):
        html = listing_page((DAY, [listing_card(match_id="542195")]))

        [summary] = parse_listing(html)

        assert summary.id == "542195"
        assert summary.url == f"{BASE}/542195/team-liquid-vs-sentinels"

    def test_team_names_and_scores(self):
        html = listing_page(
            (DAY, [listing_card(score1="2", score2="1", status="Completed")])
        )

        [summary] = parse_listing(html)

        assert summary.status == "completed"
        assert summary.team1.name == "Team Liquid"
        assert summary.team1.short_name == "Team Liquid"
        assert summary.team2.name == "Sentinels"
        assert (summary.team1.score, summary.team2.score) == (2, 1)
        assert summary.team1.team_id is None

    def test_unknown_status_label_is_upcoming(self):
        html = listing_page((DAY, [listing_card(status="3h 20m")]))

        [summary] = parse_listing(html)

        assert summary.status == "upcoming"

    def test_event_name_and_series_cleaned(self):
        html = listing_page((DAY, [listing_card()]))

        [summary] = parse_listing(html)

        assert summary.event.name == "Valorant Champions 2025"
        assert summary.event.series == "Playoffs - Upper Final"

    def test_timestamp_from_date_heading(self):
        html = listing_page((DAY, [listing_card(time="11:30 AM")]))

        [summary] = parse_listing(html)

        assert summary.scheduled_time == "2025-09-19T11:30:00Z"

    def test_tbd_time_is_null(self):
        html = listing_page((DAY, [listing_card(time="TBD")]))

        [summary] = parse_listing(html)

        assert summary.scheduled_time is None

    def test_cards_use_their_own_date_heading(self):
        html = listing_page(
            (DAY, [listing_card(match_id="1", time="9:00 PM")]),
            ("Sat, September 20, 2025", [listing_card(match_id="2", time="1:00 AM")]),
        )

        first, second = parse_listing(html)

        assert first.scheduled_time == "2025-09-19T21:00:00Z"
        assert second.scheduled_time == "2025-09-20T01:00:00Z"

    def test_card_missing_team_name_skipped(self):
        html = listing_page(
            (DAY, [listing_card(match_id="1", team2=""), listing_card(match_id="2")])
        )

        summaries = parse_listing(html)

        assert [s.id for s in summaries] == ["2"]

    def test_page_order_preserved(self):
        cards = [listing_card(match_id=str(i)) for i in (5, 3, 9)]

        summaries = parse_listing(listing_page((DAY, cards)))

        assert [s.id for s in summaries] == ["5", "3", "9"]

    def test_non_listing_html_yields_empty_list(self):
        assert parse_listing("<html><body><p>Maintenance</p></body></html>") == []

    def test_match_item_outside_listing_ignored(self):
        stray = listing_card(match_id="777")
        html = listing_page((DAY, [listing_card(match_id="1")])).replace(
            "</body>", f"<div class='sidebar'>{stray}</div></body>"
        )

        assert [s.id for s in parse_listing(html)] == ["1"]


class TestBuildTimestamp:

    @pytest.mark.parametrize(
        "date_text, time_text, expected",
        [
            ("Fri, September 19, 2025 Today", "11:30 AM", "2025-09-19T11:30:00Z"),
            ("Thursday, September 18, 2025 Yesterday", "2:00 PM", "2025-09-18T14:00:00Z"),
            ("September 20, 2025 Tomorrow", "12:05 AM", "2025-09-20T00:05:00Z"),
        ],
    )
    def test_prefix_and_suffix_stripped(self, date_text, time_text, expected):
        assert build_timestamp(date_text, time_text) == expected

    @pytest.mark.parametrize(
        "date_text, time_text",
        [
            (DAY, "TBD"),
            (DAY, ""),
            ("", "11:30 AM"),
            ("Upcoming", "11:30 AM"),
        ],
    )
    def test_unresolvable_is_none(self, date_text, time_text):
        assert build_timestamp(date_text, time_text) is None
