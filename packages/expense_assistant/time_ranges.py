"""Resolve relative time phrases in a question to explicit date ranges.

The resolver is a pure function of ``(question, now)``: callers always inject
``now`` (an aware or naive ``datetime``) and the result carries ``now``'s
``tzinfo``. Matching is a case-insensitive substring test over a fixed,
ordered phrase list; the first phrase found wins.

Boundary conventions:

- ``last month`` / ``this month`` / ``yesterday`` end at 23:59:59 of their last
  calendar day.
- ``last week`` / ``this week`` / ``today`` end at ``now`` itself.
- ``this week`` starts on the most recent Sunday (weeks run Sunday..Saturday).
"""

from __future__ import annotations

import calendar
from collections.abc import Callable
from datetime import UTC, date, datetime, time, timedelta

from .models import DateRange

_END_OF_DAY = time(23, 59, 59)

# Order matters: it is the precedence when several phrases occur.
RANGE_PHRASES: tuple[str, ...] = (
    "last month",
    "this month",
    "last week",
    "this week",
    "yesterday",
    "today",
)

# Broader set used to decide between a recency fetch and semantic search once
# no explicit range was resolved.
TIME_KEYWORDS: tuple[str, ...] = (*RANGE_PHRASES, "recent", "lately")


def _start_of(d: date, now: datetime) -> datetime:
    return datetime.combine(d, time.min, tzinfo=now.tzinfo)


def _end_of(d: date, now: datetime) -> datetime:
    return datetime.combine(d, _END_OF_DAY, tzinfo=now.tzinfo)


def _previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def _month_range(year: int, month: int, now: datetime) -> DateRange:
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(
        start=_start_of(date(year, month, 1), now),
        end=_end_of(date(year, month, last_day), now),
    )


def _last_month(now: datetime) -> DateRange:
    return _month_range(*_previous_month(now.year, now.month), now)


def _this_month(now: datetime) -> DateRange:
    return _month_range(now.year, now.month, now)


def _last_week(now: datetime) -> DateRange:
    return DateRange(start=_start_of(now.date() - timedelta(days=7), now), end=now)


def _this_week(now: datetime) -> DateRange:
    # Python weekdays are Monday=0; shift so Sunday is day 0.
    days_since_sunday = (now.weekday() + 1) % 7
    return DateRange(start=_start_of(now.date() - timedelta(days=days_since_sunday), now), end=now)


def _yesterday(now: datetime) -> DateRange:
    d = now.date() - timedelta(days=1)
    return DateRange(start=_start_of(d, now), end=_end_of(d, now))


def _today(now: datetime) -> DateRange:
    return DateRange(start=_start_of(now.date(), now), end=now)


_RESOLVERS: dict[str, Callable[[datetime], DateRange]] = {
    "last month": _last_month,
    "this month": _this_month,
    "last week": _last_week,
    "this week": _this_week,
    "yesterday": _yesterday,
    "today": _today,
}


def matched_phrase(question: str) -> str | None:
    """Return the first phrase of :data:`RANGE_PHRASES` present in ``question``."""

    q = question.lower()
    for phrase in RANGE_PHRASES:
        if phrase in q:
            return phrase
    return None


def resolve_date_range(question: str, now: datetime) -> DateRange | None:
    """Map ``question`` to an explicit :class:`DateRange`, or ``None``."""

    phrase = matched_phrase(question)
    if phrase is None:
        return None
    return _RESOLVERS[phrase](now)


def mentions_time(question: str) -> bool:
    """True when ``question`` contains any generic time keyword (incl. recent/lately)."""

    q = question.lower()
    return any(kw in q for kw in TIME_KEYWORDS)


def to_store_timestamp(value: datetime) -> str:
    """Serialize ``value`` the way ledger dates are stored.

    Fixed-width UTC with millisecond precision, e.g.
    ``2024-03-08T00:00:00.000Z``, so string comparison matches time order.
    Naive values are taken to be UTC.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    utc = value.astimezone(UTC)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


__all__ = [
    "RANGE_PHRASES",
    "TIME_KEYWORDS",
    "matched_phrase",
    "mentions_time",
    "resolve_date_range",
    "to_store_timestamp",
]
