"""Match discovery from vlr.gg listing pages.

Provides:
- parse_listing: pure function extracting MatchSummary cards from a
  listing page (``/matches`` or ``/matches/results``)
- build_timestamp: date heading + card time -> ISO-8601 UTC string
"""

import logging
import re
from datetime import datetime

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from vlrsync.config import VLR_BASE_URL
from vlrsync.markup import clean_text, own_text, parse_score, to_iso_utc
from vlrsync.models import EventInfo, MatchSummary, TeamInfo

logger = logging.getLogger(__name__)

_DAY_PREFIX = re.compile(r"^(Sun|Mon|Tue|Wed|Thu|Fri|Sat)[a-z]*,?\s*", re.IGNORECASE)
_RELATIVE_SUFFIX = re.compile(r"\s+(Today|Yesterday|Tomorrow)$", re.IGNORECASE)

_STATUS_LABELS = {"live": "live", "completed": "completed"}


def parse_listing(html: str, base_url: str = VLR_BASE_URL) -> list[MatchSummary]:
    """Parse a listing page and return one MatchSummary per match card.

    Cards without an id or without both team names are skipped. Every
    optional element (scores, time, event) degrades to a default.

    Args:
        html: Raw HTML string of a listing page.
        base_url: Prefix for the card's relative href.

    Returns:
        Summaries in page order. Empty list for non-listing HTML.
    """
    soup = BeautifulSoup(html, "lxml")
    results: list[MatchSummary] = []

    for card in soup.select("div.col-container a.match-item"):
        href = card.get("href") or ""
        segments = href.split("/")
        match_id = segments[1] if len(segments) > 1 else ""

        names = card.select(".match-item-vs-team-name")
        team1_name = clean_text(names[0].get_text()) if len(names) > 0 else ""
        team2_name = clean_text(names[1].get_text()) if len(names) > 1 else ""

        if not match_id or not team1_name or not team2_name:
            logger.warning("Skipping card: missing id or team names (href=%r)", href)
            continue

        status_el = card.select_one(".match-item-eta .ml-status")
        status_text = status_el.get_text(strip=True).lower() if status_el else ""
        status = _STATUS_LABELS.get(status_text, "upcoming")

        scores = card.select(".match-item-vs-team-score")
        score1 = parse_score(scores[0].get_text()) if len(scores) > 0 else 0
        score2 = parse_score(scores[1].get_text()) if len(scores) > 1 else 0

        event_el = card.select_one(".match-item-event")
        series_el = card.select_one(".match-item-event-series")

        time_el = card.select_one(".match-item-time")
        time_text = time_el.get_text(strip=True) if time_el else ""

        try:
            results.append(
                MatchSummary(
                    id=match_id,
                    url=base_url + href,
                    status=status,
                    scheduled_time=build_timestamp(_date_heading(card), time_text),
                    team1=TeamInfo(name=team1_name, short_name=team1_name, score=score1),
                    team2=TeamInfo(name=team2_name, short_name=team2_name, score=score2),
                    event=EventInfo(
                        name=clean_text(own_text(event_el)),
                        series=clean_text(series_el.get_text() if series_el else ""),
                    ),
                )
            )
        except ValidationError as exc:
            logger.warning("Skipping card %s: %s", match_id, exc)

    return results


def build_timestamp(date_text: str, time_text: str) -> str | None:
    """Combine a listing date heading and a card time into ISO-8601 UTC.

    ``"Fri, September 19, 2025 Today"`` + ``"11:30 AM"`` ->
    ``"2025-09-19T11:30:00Z"``. A "TBD" time or anything unparseable
    yields None.
    """
    if not date_text or not time_text or time_text.strip().lower() == "tbd":
        return None

    date_clean = _RELATIVE_SUFFIX.sub("", _DAY_PREFIX.sub("", date_text.strip())).strip()
    try:
        dt = datetime.strptime(f"{date_clean} {time_text.strip()}", "%B %d, %Y %I:%M %p")
    except ValueError:
        logger.debug("Unparseable listing time: %r + %r", date_text, time_text)
        return None
    return to_iso_utc(dt)


def _date_heading(card: Tag) -> str:
    """Text of the nearest date heading above the card's container."""
    anchor = card.find_parent(class_="wf-card") or card
    for sibling in anchor.find_previous_siblings():
        if not isinstance(sibling, Tag):
            continue
        classes = sibling.get("class") or []
        if "wf-label" in classes and "mod-large" in classes:
            return clean_text(sibling.get_text(" "))
    return ""
