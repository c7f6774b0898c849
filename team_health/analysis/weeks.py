"""Week identifiers and week-bounded message filtering.

Week ids take the form ``YYYY-WNN``. Week 1 starts on the first Monday on or
after January 1 of ``YYYY`` (UTC midnight); every week spans seven days and
the end bound is exclusive.
"""

import re
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone

from team_health.exceptions import InvalidWeekIdentifier
from team_health.schemas.slack import Message

WEEK_ID_PATTERN = re.compile(r"^(\d{4})-W(\d{2})$")
MAX_WEEK = 53
WEEK = timedelta(days=7)


def parse_week_id(week_id: str) -> tuple[int, int]:
    """Split a week id into (year, week number).

    Raises:
        InvalidWeekIdentifier: if the id is not ``YYYY-WNN`` with NN in 01..53
    """
    if not isinstance(week_id, str):
        raise InvalidWeekIdentifier(week_id)

    match = WEEK_ID_PATTERN.match(week_id.strip())
    if not match:
        raise InvalidWeekIdentifier(week_id)

    year, week = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= week <= MAX_WEEK:
        raise InvalidWeekIdentifier(week_id)
    return year, week


def first_monday(year: int) -> date:
    """First Monday on or after January 1."""
    jan1 = date(year, 1, 1)
    return jan1 + timedelta(days=(7 - jan1.weekday()) % 7)


def week_bounds(week_id: str) -> tuple[datetime, datetime]:
    """Return the (inclusive start, exclusive end) of a week in UTC."""
    year, week = parse_week_id(week_id)
    try:
        monday = first_monday(year) + (week - 1) * WEEK
        start = datetime.combine(monday, time.min, tzinfo=timezone.utc)
        return start, start + WEEK
    except OverflowError as e:
        raise InvalidWeekIdentifier(week_id) from e


def week_id_for(timestamp: datetime) -> str:
    """Week id of the week containing ``timestamp``.

    Inverse of ``week_bounds``: days before a year's first Monday belong to
    the last week of the previous year.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    day = timestamp.date()
    monday = day - timedelta(days=day.weekday())
    week = (monday - first_monday(monday.year)).days // 7 + 1
    return f"{monday.year:04d}-W{week:02d}"


def filter_to_week(messages: Iterable[Message], week_id: str) -> list[Message]:
    """Messages whose timestamp falls inside the week.

    Messages without a resolvable timestamp are skipped.
    """
    start, end = week_bounds(week_id)
    return [
        message
        for message in messages
        if message.timestamp is not None and start <= message.timestamp < end
    ]


def available_weeks(messages: Iterable[Message]) -> list[str]:
    """Distinct week ids that contain at least one well-formed message, most recent first."""
    weeks = {
        week_id_for(message.timestamp)
        for message in messages
        if message.is_well_formed
    }
    return sorted(weeks, reverse=True)
