"""Unit tests for week identifiers and filtering."""

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import WEEK_ID, WEEK_START, at
from team_health.analysis.weeks import (
    available_weeks,
    filter_to_week,
    first_monday,
    parse_week_id,
    week_bounds,
    week_id_for,
)
from team_health.exceptions import InvalidWeekIdentifier, TeamHealthError


class TestParseWeekId:
    """Tests for week id parsing."""

    def test_valid_id(self):
        assert parse_week_id("2025-W28") == (2025, 28)

    @pytest.mark.parametrize(
        "week_id",
        ["2025-28", "2025-W", "2025-W1", "25-W28", "2025-W00", "2025-W54", "2025-w28", "", "0000-W01"],
    )
    def test_invalid_ids_raise(self, week_id):
        with pytest.raises(InvalidWeekIdentifier):
            parse_week_id(week_id)

    def test_non_string_raises(self):
        with pytest.raises(InvalidWeekIdentifier):
            parse_week_id(202528)

    def test_error_is_catchable_as_value_error(self):
        """Callers can catch the base or ValueError."""
        with pytest.raises(ValueError):
            parse_week_id("nope")
        with pytest.raises(TeamHealthError):
            parse_week_id("nope")


class TestWeekBounds:
    """Tests for week start/end computation."""

    def test_first_monday_when_jan1_is_monday(self):
        assert first_monday(2024) == date(2024, 1, 1)

    def test_first_monday_when_jan1_is_midweek(self):
        # 2025-01-01 is a Wednesday
        assert first_monday(2025) == date(2025, 1, 6)

    def test_reference_week(self):
        start, end = week_bounds(WEEK_ID)

        assert start == datetime(2025, 7, 14, tzinfo=timezone.utc)
        assert start.weekday() == 0
        assert end - start == timedelta(days=7)

    def test_week_one(self):
        start, _ = week_bounds("2025-W01")
        assert start.date() == date(2025, 1, 6)


class TestWeekIdFor:
    """Tests for mapping timestamps back to week ids."""

    def test_inverse_of_week_bounds(self):
        for week_id in ["2024-W01", "2024-W52", "2025-W01", "2025-W28", "2026-W10"]:
            start, end = week_bounds(week_id)
            assert week_id_for(start) == week_id
            assert week_id_for(end - timedelta(microseconds=1)) == week_id

    def test_days_before_first_monday_belong_to_previous_year(self):
        # 2025-01-01 falls before 2025's first Monday
        assert week_id_for(datetime(2025, 1, 1, tzinfo=timezone.utc)) == "2024-W53"

    def test_aware_timestamps_are_converted_to_utc(self):
        sunday_late_new_york = datetime(2025, 7, 13, 21, tzinfo=timezone(timedelta(hours=-4)))
        assert week_id_for(sunday_late_new_york) == WEEK_ID


class TestFilterToWeek:
    """Tests for week-bounded filtering."""

    def test_boundaries(self, make_message):
        start, end = week_bounds(WEEK_ID)
        at_start = make_message("U1", start)
        before_start = make_message("U1", start - timedelta(milliseconds=1))
        before_end = make_message("U1", end - timedelta(milliseconds=1))
        at_end = make_message("U1", end)

        kept = filter_to_week([at_start, before_start, before_end, at_end], WEEK_ID)

        assert kept == [at_start, before_end]

    def test_empty_result_is_not_an_error(self, make_message):
        message = make_message("U1", WEEK_START - timedelta(days=30))
        assert filter_to_week([message], WEEK_ID) == []

    def test_messages_without_timestamp_are_skipped(self, make_message):
        broken = make_message("U1", None)
        assert broken.timestamp is None
        assert filter_to_week([broken], WEEK_ID) == []

    def test_invalid_week_raises(self, weekday_messages):
        with pytest.raises(InvalidWeekIdentifier):
            filter_to_week(weekday_messages, "2025/28")


class TestAvailableWeeks:
    """Tests for listing weeks with activity."""

    def test_most_recent_first(self, make_message):
        messages = [
            make_message("U1", at(0, 10)),
            make_message("U2", at(-7, 10)),
            make_message("U3", at(1, 10)),
            make_message("U1", at(14, 10)),
        ]

        assert available_weeks(messages) == ["2025-W30", "2025-W28", "2025-W27"]

    def test_no_messages(self):
        assert available_weeks([]) == []
