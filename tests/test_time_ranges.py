from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from expense_assistant.models import DateRange
from expense_assistant.time_ranges import (
    matched_phrase,
    mentions_time,
    resolve_date_range,
    to_store_timestamp,
)

# Friday
NOW = datetime(2024, 3, 15, 10, 30, 45, tzinfo=UTC)


@pytest.mark.parametrize(
    "now, expected_start, expected_end",
    [
        (NOW, datetime(2024, 2, 1, tzinfo=UTC), datetime(2024, 2, 29, 23, 59, 59, tzinfo=UTC)),
        (
            datetime(2024, 1, 1, 0, 0, tzinfo=UTC),
            datetime(2023, 12, 1, tzinfo=UTC),
            datetime(2023, 12, 31, 23, 59, 59, tzinfo=UTC),
        ),
        (
            datetime(2023, 3, 31, 23, 59, tzinfo=UTC),
            datetime(2023, 2, 1, tzinfo=UTC),
            datetime(2023, 2, 28, 23, 59, 59, tzinfo=UTC),
        ),
        (
            datetime(2024, 7, 31, 8, 0, tzinfo=UTC),
            datetime(2024, 6, 1, tzinfo=UTC),
            datetime(2024, 6, 30, 23, 59, 59, tzinfo=UTC),
        ),
    ],
)
def test_last_month_is_full_previous_calendar_month(now, expected_start, expected_end):
    rng = resolve_date_range("What did I spend LAST MONTH on food?", now)
    assert rng == DateRange(expected_start, expected_end)


def test_this_month_runs_to_end_of_last_day():
    rng = resolve_date_range("how much this month", NOW)
    assert rng == DateRange(
        datetime(2024, 3, 1, tzinfo=UTC), datetime(2024, 3, 31, 23, 59, 59, tzinfo=UTC)
    )


def test_last_week_starts_seven_days_back_and_ends_at_now():
    rng = resolve_date_range("How much did I spend last week?", NOW)
    assert rng is not None
    assert rng.start == datetime(2024, 3, 8, 0, 0, 0, tzinfo=UTC)
    assert rng.end == NOW


def test_this_week_starts_on_sunday():
    rng = resolve_date_range("spending this week", NOW)
    assert rng is not None
    assert rng.start == datetime(2024, 3, 10, tzinfo=UTC)
    assert rng.start.weekday() == 6
    assert rng.end == NOW


def test_this_week_on_a_sunday_starts_today():
    sunday = datetime(2024, 3, 17, 9, 0, tzinfo=UTC)
    rng = resolve_date_range("this week", sunday)
    assert rng is not None
    assert rng.start == datetime(2024, 3, 17, tzinfo=UTC)


def test_yesterday_is_whole_previous_day():
    rng = resolve_date_range("what about yesterday", NOW)
    assert rng == DateRange(
        datetime(2024, 3, 14, tzinfo=UTC), datetime(2024, 3, 14, 23, 59, 59, tzinfo=UTC)
    )


def test_today_ends_exactly_at_now():
    rng = resolve_date_range("Today's expenses", NOW)
    assert rng is not None
    assert rng.start == datetime(2024, 3, 15, tzinfo=UTC)
    assert rng.end == NOW


def test_first_phrase_in_precedence_order_wins():
    # "today" appears first in the text, but "last month" has precedence.
    q = "today I wondered what I spent last month"
    assert matched_phrase(q) == "last month"
    rng = resolve_date_range(q, NOW)
    assert rng is not None and rng.start.month == 2


def test_tzinfo_of_now_is_preserved():
    ist = timezone(timedelta(hours=5, minutes=30))
    now = datetime(2024, 3, 15, 1, 0, tzinfo=ist)
    rng = resolve_date_range("yesterday", now)
    assert rng is not None
    assert rng.start == datetime(2024, 3, 14, tzinfo=ist)
    assert rng.start.tzinfo is ist


def test_no_phrase_resolves_to_none():
    assert resolve_date_range("Show me my coffee expenses", NOW) is None


def test_resolution_is_deterministic():
    q = "groceries last week"
    assert resolve_date_range(q, NOW) == resolve_date_range(q, NOW)


@pytest.mark.parametrize(
    "question, expected",
    [
        ("anything recent?", True),
        ("what have I bought LATELY", True),
        ("this month", True),
        ("coffee spending", False),
    ],
)
def test_mentions_time(question, expected):
    assert mentions_time(question) is expected


def test_to_store_timestamp_is_fixed_width_utc():
    ist = timezone(timedelta(hours=5, minutes=30))
    value = datetime(2024, 3, 8, 5, 30, 0, 123456, tzinfo=ist)
    assert to_store_timestamp(value) == "2024-03-08T00:00:00.123Z"
    assert to_store_timestamp(datetime(2024, 3, 8)) == "2024-03-08T00:00:00.000Z"
