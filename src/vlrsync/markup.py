"""Small text and attribute helpers shared by the page parsers."""

import re
from datetime import datetime

from bs4 import NavigableString, Tag

_DASHES = ("–", "-", "—")


def clean_text(text: str | None) -> str:
    """Collapse whitespace and space out en dashes."""
    if not text:
        return ""
    return " ".join(text.replace("–", " - ").split())


def own_text(el: Tag | None) -> str:
    """Text of an element's direct string children, ignoring nested tags."""
    if el is None:
        return ""
    parts = [str(c) for c in el.children if isinstance(c, NavigableString)]
    return " ".join("".join(parts).split())


def parse_score(text: str | None) -> int:
    """Parse a displayed score; the dash placeholder and junk map to 0."""
    text = (text or "").strip()
    if not text or text in _DASHES:
        return 0
    try:
        return max(int(text), 0)
    except ValueError:
        return 0


def absolute_url(url: str | None, base_url: str) -> str | None:
    """Resolve protocol-relative and root-relative URLs."""
    if not url:
        return None
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("/"):
        return base_url.rstrip("/") + url
    return url


def extract_id(href: str | None, kind: str) -> str | None:
    """Pull the numeric id out of ``/<kind>/<id>/...`` links."""
    if not href:
        return None
    m = re.search(rf"/{kind}/(\d+)(?:/|$)", href)
    return m.group(1) if m else None


def to_iso_utc(dt: datetime) -> str:
    """Format a naive-UTC or aware-UTC datetime as ``YYYY-MM-DDTHH:MM:SSZ``."""
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")
