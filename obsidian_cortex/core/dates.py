"""Date and timestamp helpers shared by the tracker and workflow code.

All timestamps are UTC. Stored values use ``YYYY-MM-DD`` for dates and
millisecond ISO-8601 with a ``Z`` suffix for timestamps.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso_timestamp(moment: datetime) -> str:
    """Format ``moment`` like ``2026-10-18T09:15:00.000Z``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_iso_date(moment: datetime | date) -> str:
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.date().isoformat()
    return moment.isoformat()


def today_iso(now: Optional[datetime] = None) -> str:
    return to_iso_date(now or utc_now())


# Accepted after ISO-8601, tried in order. Slash dates are month-first.
FALLBACK_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def _parse_date_text(text: str) -> Optional[datetime]:
    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso_text)
    except ValueError:
        pass
    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_date_input(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a stored value into an aware UTC datetime.

    Accepts ``datetime``/``date`` objects, ISO-8601 strings (date only, or
    date and time with an optional ``Z``/offset suffix) and the common
    hand-written forms in :data:`FALLBACK_DATE_FORMATS` such as ``2026/10/01``
    or ``Oct 1, 2026``. Naive values are taken to be UTC. Anything else
    yields ``None``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        parsed = _parse_date_text(value.strip())
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from ``earlier`` to ``later`` (floored)."""
    return int((later - earlier).total_seconds() // SECONDS_PER_DAY)
