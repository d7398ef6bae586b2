"""Validation gate between the match parser and persistence.

A parsed MatchDetail can be structurally fine and still unfit for the
store. ``validate_detail`` enforces the persistence invariants and
``accept_detail`` turns a violation into a logged no-data result.

Usage::

    from vlrsync.validation import accept_detail

    detail = accept_detail(parse_detail(html, match_id))
    if detail is not None:
        await gateway.upsert_detail(detail)
"""

import logging

from vlrsync.exceptions import DetailValidationError
from vlrsync.models import MatchDetail

logger = logging.getLogger(__name__)


def validate_detail(detail: MatchDetail) -> MatchDetail:
    """Check the invariants a detail record must meet before persisting.

    Raises:
        DetailValidationError: If the timestamp is missing, the maps
            section is absent (None, not merely empty), or both teams are
            still the "TBD" placeholder.
    """
    if not detail.scheduled_time:
        raise DetailValidationError(detail.id, "no resolvable timestamp")
    if detail.maps is None:
        raise DetailValidationError(detail.id, "maps section absent")
    if detail.is_placeholder:
        raise DetailValidationError(detail.id, "both teams are TBD")
    return detail


def accept_detail(detail: MatchDetail | None) -> MatchDetail | None:
    """Return the detail if it passes ``validate_detail``, else None.

    Violations are logged at INFO; they are expected for matches whose
    pages are not fully populated yet and are never raised.
    """
    if detail is None:
        return None
    try:
        return validate_detail(detail)
    except DetailValidationError as exc:
        logger.info("Discarding match %s: %s", exc.match_id, exc.reason)
        return None
