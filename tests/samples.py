"""Hand-built vlr.gg markup for parser, client and scanner tests.

The fragments keep only the classes and attributes the parsers read,
arranged the way the live site nests them.
"""

BASE = "https://www.vlr.gg"


# ---------------------------------------------------------------------------
# Listing pages
# ---------------------------------------------------------------------------

def listing_card(
    match_id: str = "542195",
    team1: str = "Team Liquid",
    team2: str = "Sentinels",
    score1: str = "–",
    score2: str = "–",
    status: str = "LIVE",
    time: str = "11:30 AM",
    event: str = "Valorant Champions 2025",
    series: str = "Playoffs–Upper Final",
) -> str:
    """One ``a.match-item`` card."""
    name1 = f'<div class="match-item-vs-team-name"><div class="text-of">{team1}</div></div>' if team1 else ""
    name2 = f'<div class="match-item-vs-team-name"><div class="text-of">{team2}</div></div>' if team2 else ""
    return f"""
    <a href="/{match_id}/team-liquid-vs-sentinels" class="wf-module-item match-item mod-color">
      <div class="match-item-time">{time}</div>
      <div class="match-item-vs">
        <div class="match-item-vs-team mod-winner">
          {name1}
          <div class="match-item-vs-team-score js-spoiler">{score1}</div>
        </div>
        <div class="match-item-vs-team">
          {name2}
          <div class="match-item-vs-team-score js-spoiler">{score2}</div>
        </div>
      </div>
      <div class="match-item-eta">
        <div class="ml"><div class="ml-status">{status}</div></div>
      </div>
      <div class="match-item-event text-of">
        <div class="match-item-event-series text-of">{series}</div>
        {event}
      </div>
    </a>"""


def listing_page(*days: tuple[str, list[str]]) -> str:
    """A listing page: one date heading plus card container per day."""
    body = []
    for heading, cards in days:
        body.append(
            f'<div class="wf-label mod-large">{heading}'
            f' <span class="wf-tag mod-today">Today</span></div>'
        )
        body.append(f'<div class="wf-card">{"".join(cards)}</div>')
    return (
        "<html><body><div class='col-container'><div class='col mod-1'>"
        f"{''.join(body)}</div></div></body></html>"
    )


# ---------------------------------------------------------------------------
# Match pages
# ---------------------------------------------------------------------------

def player_row(
    name: str = "TenZ",
    player_id: str = "9",
    agent: str = "Jett",
    rating: str = "1.25",
    acs: str = "245",
    kills: str = "20",
    deaths: str = "15",
    assists: str = "4",
    kast: str = "75%",
    adr: str = "160",
    hs: str = "28%",
    fk: str = "3",
    fd: str = "2",
) -> str:
    def cell(value: str, extra: str = "") -> str:
        return (
            f'<td class="mod-stat {extra}"><span class="side mod-both">{value}</span>'
            f'<span class="side mod-t">0</span><span class="side mod-ct">0</span></td>'
        )

    agent_img = (
        f'<span class="mod-agent"><img src="/img/vlr/game/agents/{agent.lower()}.png" title="{agent}"></span>'
        if agent else ""
    )
    return f"""
    <tr>
      <td class="mod-player"><div><a href="/player/{player_id}/{name.lower()}">
        <div class="text-of">{name}</div><div class="ge-text-light">TEAM</div></a></div></td>
      <td class="mod-agents"><div>{agent_img}</div></td>
      {cell(rating)}
      {cell(acs)}
      {cell(kills, 'mod-vlr-kills')}
      {cell(deaths, 'mod-vlr-deaths')}
      {cell(assists, 'mod-vlr-assists')}
      <td class="mod-stat mod-kd-diff">+5</td>
      {cell(kast)}
      {cell(adr)}
      {cell(hs)}
      {cell(fk, 'mod-fb')}
      {cell(fd, 'mod-fd')}
    </tr>"""


def stats_table(*rows: str) -> str:
    return f'<table class="wf-table-inset mod-overview"><tbody>{"".join(rows)}</tbody></table>'


def round_col(number: int, winner: int | None = None, icon: str = "elim") -> str:
    """A round column; ``winner`` is the winning square index (0 or 1)."""
    squares = []
    for i in range(2):
        if i == winner:
            squares.append(
                f'<div class="rnd-sq mod-win mod-ct"><img src="/img/vlr/game/round/{icon}.webp"></div>'
            )
        else:
            squares.append('<div class="rnd-sq"></div>')
    return (
        f'<div class="vlr-rounds-row-col"><div class="rnd-num">{number}</div>'
        f'{"".join(squares)}</div>'
    )


def rounds_block(*cols: str, short1: str = "TL", short2: str = "SEN") -> str:
    cols_html = "".join(cols)
    return f"""
    <div class="vlr-rounds"><div class="vlr-rounds-row">
      <div class="vlr-rounds-row-col">
        <div class="team"><img src="/img/liquid.png">{short1}</div>
        <div class="team"><img src="/img/sen.png">{short2}</div>
      </div>
      {cols_html}
    </div></div>"""


def map_game(
    game_id: str,
    name: str = "Corrode",
    score1: str = "13",
    score2: str = "9",
    winner: int | None = 0,
    rounds: str = "",
    tables: tuple[str, ...] = (),
    live: bool = False,
) -> str:
    win1 = " mod-win" if winner == 0 else ""
    win2 = " mod-win" if winner == 1 else ""
    live_cls = " mod-live" if live else ""
    tables_html = "".join(tables)
    return f"""
    <div class="vm-stats-game{live_cls}" data-game-id="{game_id}">
      <div class="vm-stats-game-header">
        <div class="team"><div class="score{win1}">{score1}</div><div class="team-name">Team Liquid</div></div>
        <div class="map"><div><span>{name}<span class="picked mod-1">PICK</span></span></div></div>
        <div class="team mod-right"><div class="score{win2}">{score2}</div><div class="team-name">Sentinels</div></div>
      </div>
      {rounds}
      {tables_html}
    </div>"""


def nav_item(game_id: str, number: int, name: str, live: bool = False) -> str:
    cls = " mod-live" if live else ""
    return (
        f'<div class="vm-stats-gamesnav-item js-map-switch{cls}" data-game-id="{game_id}">'
        f'<div style="margin-bottom: 2px; text-align: center;"><span>{number}</span> {name}</div></div>'
    )


def stats_section(nav: list[str], games: list[str], aggregate: str = "") -> str:
    nav_html = ""
    if nav:
        nav_html = (
            '<div class="vm-stats-gamesnav">'
            '<div class="vm-stats-gamesnav-item js-map-switch mod-all" data-game-id="all">All Maps</div>'
            f'{"".join(nav)}</div>'
        )
    all_game = f'<div class="vm-stats-game" data-game-id="all">{aggregate}</div>' if aggregate else ""
    return f'<div class="vm-stats">{nav_html}{all_game}{"".join(games)}</div>'


def match_page(
    note: str = "final",
    team1: str = "Team Liquid",
    team2: str = "Sentinels",
    score1: str = "2",
    score2: str = "0",
    utc_ts: str | None = "2025-09-19 11:30:00",
    picks: str = "TL ban Abyss; SEN ban Sunset; TL pick Corrode; SEN pick Bind; Haven remains",
    stats: str | None = None,
    logo1: str = "//owcdn.net/img/liquid.png",
    include_headers: bool = True,
) -> str:
    """A full match page. ``stats=None`` omits the stats section entirely."""
    ts_attr = f' data-utc-ts="{utc_ts}"' if utc_ts is not None else ""
    logo1_html = f'<img src="{logo1}">' if logo1 else ""
    header_links = ""
    if include_headers:
        header_links = f"""
        <a class="match-header-link wf-link-hover mod-1" href="/team/474/team-liquid">
          {logo1_html}<div class="wf-title-med">{team1}</div></a>
        <div class="match-header-vs-score">
          <div class="match-header-vs-note">{note}</div>
          <div class="js-spoiler"><span class="match-header-vs-score-winner">{score1}</span><span class="match-header-vs-score-colon">:</span><span class="match-header-vs-score-loser">{score2}</span></div>
          <div class="match-header-vs-note">Bo3</div>
        </div>
        <a class="match-header-link wf-link-hover mod-2" href="/team/2/sentinels">
          <div class="wf-title-med">{team2}</div></a>"""
    return f"""
    <html><body>
    <div class="match-header">
      <div class="match-header-super">
        <a class="match-header-event" href="/event/2283/valorant-champions-2025/playoffs">
          <div>
            <div style="font-weight: 700;">Valorant Champions 2025</div>
            <div class="match-header-event-series">Playoffs: Upper Final</div>
          </div>
        </a>
        <div class="match-header-date">
          <div class="moment-tz-convert"{ts_attr}>Friday, September 19th</div>
          <div style="margin-top: 4px;"><div style="font-style: italic;">Patch 11.05</div></div>
        </div>
      </div>
      <div class="match-header-vs">{header_links}</div>
      <div class="match-header-note">{picks}</div>
    </div>
    {stats or ''}
    </body></html>"""


def completed_bo3_page() -> str:
    """TL 2-0 SEN: Corrode and Bind played, Haven never started."""
    game1 = map_game(
        "1001", "Corrode", "13", "9", winner=0,
        rounds=rounds_block(round_col(1, 0, "elim"), round_col(2, 1, "boom"), round_col(3, 0, "defuse")),
        tables=(stats_table(player_row()), stats_table(player_row("zekken", "11", "Raze"))),
    )
    game2 = map_game(
        "1002", "Bind", "13", "11", winner=0,
        tables=(stats_table(player_row()), stats_table(player_row("zekken", "11", "Raze"))),
    )
    game3 = map_game("1003", "Haven", "", "", winner=None)
    aggregate = stats_table(player_row()) + stats_table(player_row("zekken", "11", "Raze"))
    section = stats_section(
        [nav_item("1001", 1, "Corrode"), nav_item("1002", 2, "Bind"), nav_item("1003", 3, "Haven")],
        [game1, game2, game3],
        aggregate=aggregate,
    )
    return match_page(note="final", stats=section)


def live_bo3_page(series_score: tuple[str, str] = ("1", "0")) -> str:
    """TL 1-0 SEN, map 2 in progress."""
    game1 = map_game("1001", "Corrode", "13", "9", winner=0)
    game2 = map_game("1002", "Bind", "5", "3", winner=None, live=True)
    game3 = map_game("1003", "Haven", "", "", winner=None)
    section = stats_section(
        [nav_item("1001", 1, "Corrode"), nav_item("1002", 2, "Bind", live=True), nav_item("1003", 3, "Haven")],
        [game1, game2, game3],
    )
    return match_page(note="live", score1=series_score[0], score2=series_score[1], stats=section)


def upcoming_page() -> str:
    """No maps played yet; the stats section still lists the map slots."""
    game1 = map_game("1001", "TBD", "", "", winner=None)
    section = stats_section([], [game1])
    return match_page(note="vs.", score1="", score2="", picks="", stats=section)
