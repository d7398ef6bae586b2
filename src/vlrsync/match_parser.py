"""Match page parser for vlr.gg match detail pages.

Provides:
- parse_detail: pure function extracting a MatchDetail from match-page HTML
- parse_picks: pick/ban note -> {map name: team short name}
- normalize_map_name: canonical map name used for display and pick lookup

The only mandatory elements are the two team headers and the UTC
timestamp attribute; their absence raises ParseError. Everything else
degrades to null/default.
"""

import logging
import math
import re
from datetime import datetime

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from vlrsync.config import VLR_BASE_URL
from vlrsync.exceptions import ParseError
from vlrsync.markup import (
    absolute_url,
    clean_text,
    extract_id,
    own_text,
    parse_score,
    to_iso_utc,
)
from vlrsync.models import (
    WIN_CONDITIONS,
    AgentInfo,
    EventInfo,
    MapResult,
    MatchDetail,
    PlayerStat,
    RoundResult,
    StatLine,
    TeamInfo,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_LOGO = VLR_BASE_URL + "/img/vlr/tmp/vlr.png"

_UTC_TS_FORMAT = "%Y-%m-%d %H:%M:%S"
_WIN_ICON = re.compile(r"/([a-z]+)\.webp$")
_PICK_WORD = re.compile(r"\bpick\b", re.IGNORECASE)

# Scoreboard cell selectors, relative to a player row.
_COUNT_CELLS = {
    "kills": ".mod-vlr-kills",
    "deaths": ".mod-vlr-deaths",
    "assists": ".mod-vlr-assists",
    "first_kills": ".mod-fb",
    "first_deaths": ".mod-fd",
}
_RATE_CELLS = {
    "acs": "td:nth-of-type(4)",
    "kast_percent": "td:nth-of-type(9)",
    "adr": "td:nth-of-type(10)",
    "headshot_percent": "td:nth-of-type(11)",
}
_RATING_CELL = "td:nth-of-type(3)"


def normalize_map_name(name: str) -> str:
    """Strip digits and hyphens, collapse whitespace: ``"1 \\n Bind"`` -> ``"Bind"``."""
    return " ".join(re.sub(r"[\d-]", "", name or "").split())


def parse_picks(note: str | None) -> dict[str, str]:
    """Build ``{map name: team short name}`` from the pick/ban note.

    ``"TL ban Abyss; TL pick Corrode; SEN pick Bind; Haven remains"`` ->
    ``{"Corrode": "TL", "Bind": "SEN"}``. Keys are normalized with
    ``normalize_map_name`` so they match the parsed map names.
    """
    picks: dict[str, str] = {}
    if not note:
        return picks
    for clause in note.split(";"):
        clause = clause.strip()
        if not _PICK_WORD.search(clause):
            continue
        words = clause.split()
        if len(words) >= 3:
            picks[normalize_map_name(words[2])] = words[0]
    return picks


def parse_detail(
    html: str,
    match_id: str,
    url: str | None = None,
    base_url: str = VLR_BASE_URL,
) -> MatchDetail:
    """Parse a vlr.gg match page into a MatchDetail.

    Pure function: HTML string in, MatchDetail out. No side effects.

    Args:
        html: Raw HTML of the match page.
        match_id: vlr.gg match id (for inclusion in result).
        url: Page URL recorded on the result; defaults to ``base_url/match_id``.
        base_url: Used to absolutize root-relative logo/icon URLs.

    Returns:
        MatchDetail. ``maps`` is empty when the page has no stats section.

    Raises:
        ParseError: If the team headers or the UTC timestamp are missing
            or malformed.
    """
    soup = BeautifulSoup(html, "lxml")

    status = _extract_overall_status(soup)
    team1, team2 = _extract_teams(soup, match_id, base_url)
    scheduled_time = _extract_timestamp(soup, match_id)
    picks = parse_picks(_text(soup.select_one(".match-header-note")))

    try:
        maps = _extract_maps(soup, team1, team2, picks, base_url)
        if status == "completed":
            for m in maps:
                if m.status == "upcoming":
                    m.status = "unplayed"

        return MatchDetail(
            id=match_id,
            url=url or f"{base_url}/{match_id}",
            status=status,
            scheduled_time=scheduled_time,
            team1=team1,
            team2=team2,
            event=_extract_event(soup),
            patch=_extract_patch(soup),
            maps=maps,
            overall_stats=_extract_overall_stats(soup, team1, team2, base_url),
        )
    except ValidationError as exc:
        raise ParseError(f"Match {match_id}: {exc}") from exc


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------

def _text(el: Tag | None) -> str:
    return el.get_text(" ", strip=True) if el is not None else ""


def _extract_overall_status(soup: BeautifulSoup) -> str:
    note = _text(soup.select_one(".match-header-vs-note")).lower()
    if "live" in note:
        return "live"
    if "final" in note or "forfeited" in note:
        return "completed"
    return "upcoming"


def _extract_teams(
    soup: BeautifulSoup, match_id: str, base_url: str
) -> tuple[TeamInfo, TeamInfo]:
    """Team names, ids, logos, series score and round-history short names."""
    link1 = soup.select_one(".match-header-link.mod-1")
    link2 = soup.select_one(".match-header-link.mod-2")
    if link1 is None or link2 is None:
        raise ParseError(f"Match {match_id}: missing team header links")

    name1 = clean_text(_text(link1.select_one(".wf-title-med")))
    name2 = clean_text(_text(link2.select_one(".wf-title-med")))
    if not name1 or not name2:
        raise ParseError(f"Match {match_id}: missing team names")

    spans = soup.select(
        ".match-header-vs-score .js-spoiler span:not(.match-header-vs-score-colon)"
    )
    score1 = parse_score(spans[0].get_text()) if len(spans) > 0 else 0
    score2 = parse_score(spans[1].get_text()) if len(spans) > 1 else 0

    # Short names only appear in the round-history header.
    short_els = soup.select(".vlr-rounds-row .team")
    short1 = own_text(short_els[0]) if len(short_els) > 0 else ""
    short2 = own_text(short_els[1]) if len(short_els) > 1 else ""

    def team(link: Tag, name: str, short: str, score: int) -> TeamInfo:
        img = link.select_one("img")
        logo = absolute_url(img.get("src") if img else None, base_url)
        return TeamInfo(
            team_id=extract_id(link.get("href"), "team"),
            name=name,
            short_name=short or name,
            score=score,
            logo_url=logo or PLACEHOLDER_LOGO,
        )

    return team(link1, name1, short1, score1), team(link2, name2, short2, score2)


def _extract_timestamp(soup: BeautifulSoup, match_id: str) -> str:
    el = soup.select_one(".match-header-date [data-utc-ts]")
    raw = (el.get("data-utc-ts") or "").strip() if el else ""
    if not raw:
        raise ParseError(f"Match {match_id}: missing UTC timestamp")
    try:
        return to_iso_utc(datetime.strptime(raw, _UTC_TS_FORMAT))
    except ValueError as exc:
        raise ParseError(f"Match {match_id}: bad UTC timestamp {raw!r}") from exc


def _extract_event(soup: BeautifulSoup) -> EventInfo:
    link = soup.select_one("a.match-header-event")
    if link is None:
        return EventInfo()
    name_el = link.select_one('div[style*="font-weight: 700"]')
    return EventInfo(
        event_id=extract_id(link.get("href"), "event"),
        name=clean_text(_text(name_el)),
        series=clean_text(_text(link.select_one(".match-header-event-series"))),
    )


def _extract_patch(soup: BeautifulSoup) -> str | None:
    el = soup.select_one('.match-header-date [style*="font-style: italic"]')
    text = clean_text(_text(el))
    return text or None


# ---------------------------------------------------------------------------
# Maps
# ---------------------------------------------------------------------------

def _extract_maps(
    soup: BeautifulSoup,
    team1: TeamInfo,
    team2: TeamInfo,
    picks: dict[str, str],
    base_url: str,
) -> list[MapResult]:
    """One MapResult per navigation tab, or per the lone container without tabs.

    Pages without a stats section (most upcoming matches) have no maps yet.
    """
    root = soup.select_one(".vm-stats")
    if root is None:
        return []

    maps: list[MapResult] = []
    tabs = [
        t for t in root.select(".vm-stats-gamesnav-item")
        if "mod-all" not in (t.get("class") or []) and t.get("data-game-id") != "all"
    ]

    if tabs:
        for tab in tabs:
            label = tab.select_one('div[style*="margin-bottom"]') or tab
            game_id = tab.get("data-game-id")
            game = root.select_one(f'.vm-stats-game[data-game-id="{game_id}"]') if game_id else None
            maps.append(
                _parse_map(
                    normalize_map_name(label.get_text(" ")),
                    game,
                    "mod-live" in (tab.get("class") or []),
                    team1, team2, picks, base_url,
                )
            )
        return maps

    game = next(
        (g for g in root.select(".vm-stats-game") if g.get("data-game-id") != "all"),
        None,
    )
    if game is not None:
        name_el = game.select_one(".vm-stats-game-header .map span")
        name = normalize_map_name(own_text(name_el)) or "Unknown"
        maps.append(
            _parse_map(
                name, game, "mod-live" in (game.get("class") or []),
                team1, team2, picks, base_url,
            )
        )
    return maps


def _parse_map(
    name: str,
    game: Tag | None,
    is_live: bool,
    team1: TeamInfo,
    team2: TeamInfo,
    picks: dict[str, str],
    base_url: str,
) -> MapResult:
    status = "upcoming"
    if game is not None and game.select_one(".vm-stats-game-header .score.mod-win"):
        status = "completed"
    elif is_live:
        status = "live"

    if game is None:
        return MapResult(name=name, status=status, picked_by=picks.get(name))

    header_teams = game.select(".vm-stats-game-header .team")
    score1 = parse_score(_text(header_teams[0].select_one(".score"))) if header_teams else 0
    score2 = parse_score(_text(header_teams[-1].select_one(".score"))) if len(header_teams) > 1 else 0

    tables = game.select("table.wf-table-inset")
    stats: list[PlayerStat] = []
    if len(tables) > 0:
        stats.extend(_parse_stats_table(tables[0], team1.name, base_url))
    if len(tables) > 1:
        stats.extend(_parse_stats_table(tables[1], team2.name, base_url))

    return MapResult(
        name=name,
        status=status,
        picked_by=picks.get(name),
        team1_score=score1,
        team2_score=score2,
        stats=stats,
        rounds=_parse_rounds(game, team1.name, team2.name),
    )


def _extract_overall_stats(
    soup: BeautifulSoup, team1: TeamInfo, team2: TeamInfo, base_url: str
) -> list[PlayerStat]:
    """Scoreboards of the aggregate "all maps" container (no agents)."""
    game = soup.select_one('.vm-stats-game[data-game-id="all"]')
    if game is None:
        return []
    tables = game.select("table.wf-table-inset")
    stats: list[PlayerStat] = []
    for table, team_name in zip(tables[:2], (team1.name, team2.name)):
        stats.extend(_parse_stats_table(table, team_name, base_url, aggregate=True))
    return stats


# ---------------------------------------------------------------------------
# Scoreboards
# ---------------------------------------------------------------------------

def _parse_number(text: str) -> float:
    """Cell text -> float; percent signs stripped, junk -> 0."""
    try:
        value = float(text.replace("%", "").strip())
    except ValueError:
        return 0.0
    # float() also accepts "nan" and "inf"
    return value if math.isfinite(value) else 0.0


def _cell_text(row: Tag, selector: str) -> str | None:
    """Text of a stat cell; prefers the both-sides value when split by side."""
    cell = row.select_one(selector)
    if cell is None:
        return None
    both = cell.select_one(".side.mod-both")
    return _text(both if both is not None else cell)


def _parse_stats_table(
    table: Tag, team_name: str, base_url: str, aggregate: bool = False
) -> list[PlayerStat]:
    """Parse one team's scoreboard. Rows without a player name are skipped."""
    players: list[PlayerStat] = []

    for row in table.select("tbody tr"):
        player_name = _text(row.select_one(".mod-player .text-of"))
        if not player_name:
            continue

        player_link = row.select_one(".mod-player a[href]")

        agent = AgentInfo()
        if not aggregate:
            img = row.select_one(".mod-agent img")
            if img is not None:
                agent = AgentInfo(
                    name=img.get("title") or None,
                    icon_url=absolute_url(img.get("src"), base_url),
                )

        values: dict[str, float | int | None] = {}
        for field, selector in _COUNT_CELLS.items():
            values[field] = int(_parse_number(_cell_text(row, selector) or ""))
        for field, selector in _RATE_CELLS.items():
            values[field] = _parse_number(_cell_text(row, selector) or "")
        rating_text = _cell_text(row, _RATING_CELL)
        values["rating"] = _parse_number(rating_text) if rating_text else None

        players.append(
            PlayerStat(
                player_id=extract_id(player_link.get("href") if player_link else None, "player"),
                player_name=player_name,
                team_name=team_name,
                agent=agent,
                stats=StatLine(**values),
            )
        )
    return players


# ---------------------------------------------------------------------------
# Round history
# ---------------------------------------------------------------------------

def _parse_rounds(game: Tag, team1_name: str, team2_name: str) -> list[RoundResult] | None:
    """Round-by-round winners. None when the map has no round history block."""
    block = game.select_one(".vlr-rounds")
    if block is None:
        return None

    rounds: list[RoundResult] = []
    for col in block.select(".vlr-rounds-row-col"):
        number_text = _text(col.select_one(".rnd-num"))
        if not number_text:
            continue  # team-name column and spacers
        try:
            round_number = int(number_text)
        except ValueError:
            continue

        squares = col.select(".rnd-sq")
        winner_index = next(
            (i for i, sq in enumerate(squares) if "mod-win" in (sq.get("class") or [])),
            None,
        )

        winning_team = None
        win_condition = None
        if winner_index is not None:
            winning_team = team1_name if winner_index == 0 else team2_name
            img = squares[winner_index].select_one("img")
            m = _WIN_ICON.search(img.get("src") or "") if img is not None else None
            if m and m.group(1) in WIN_CONDITIONS:
                win_condition = m.group(1)
            elif m:
                logger.debug("Unknown win condition icon %r", m.group(1))

        if round_number >= 1:
            rounds.append(
                RoundResult(
                    round_number=round_number,
                    winning_team=winning_team,
                    win_condition=win_condition,
                )
            )
    return rounds
