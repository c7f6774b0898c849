"""Unit tests for weekly participation summaries."""

import pytest

from conftest import WEEK_ID, at
from team_health.analysis.participation import (
    average_first_reply_hours,
    extract_mentions,
    gini_coefficient,
    summarize_week,
)
from team_health.schemas.slack import OpsAlert


class TestGiniCoefficient:
    """Tests for the inequality measure."""

    def test_empty(self):
        assert gini_coefficient([]) == 0

    def test_all_zero(self):
        assert gini_coefficient([0, 0, 0]) == 0

    def test_equal_counts(self):
        assert gini_coefficient([4, 4, 4, 4]) == pytest.approx(0)

    def test_one_voice(self):
        assert gini_coefficient([0, 0, 0, 10]) == pytest.approx(0.75)

    def test_order_does_not_matter(self):
        assert gini_coefficient([5, 1, 3]) == pytest.approx(gini_coefficient([1, 3, 5]))


class TestMentions:
    """Tests for mention extraction."""

    def test_extracts_user_ids(self):
        assert extract_mentions("hey <@U1> and <@U22>, ping <#C1>") == ["U1", "U22"]

    def test_empty_text(self):
        assert extract_mentions("") == []


class TestFirstReply:
    """Tests for the first-reply approximation."""

    def test_buckets_by_channel_and_day(self, make_message):
        messages = [
            make_message("U1", at(0, 10)),
            make_message("U2", at(0, 11)),
            # Next day in the same channel starts a new bucket
            make_message("U3", at(1, 9)),
            make_message("U1", at(1, 9, 30)),
        ]

        assert average_first_reply_hours(messages) == pytest.approx((1.0 + 0.5) / 2)

    def test_none_without_replies(self, make_message):
        assert average_first_reply_hours([make_message("U1", at(0, 10))]) is None


class TestSummarizeWeek:
    """Tests for the weekly activity breakdown."""

    def test_breakdown(self, users, channels, make_message):
        messages = [
            make_message("U1", at(0, 10), "<@U2> can you review?"),
            make_message("U2", at(0, 10, 30), "<@U1> done <@B1> <@U2>"),
            make_message("U1", at(1, 10), channel_id="C2"),
            make_message("U3", at(2, 10), channel_id="C2"),
            make_message("U1", at(2, 11), channel_id="C2"),
            # Outside the week
            make_message("U3", at(8, 10)),
            # Bot traffic
            make_message("B1", at(0, 12)),
        ]
        alerts = [
            OpsAlert(channel="ops", ts="1", timestamp=at(0, 6), summary="AWS Budget", source="aws"),
            OpsAlert(channel="ops", ts="2", timestamp=at(9, 6), summary="AWS Budget", source="aws"),
        ]

        activity = summarize_week(messages, users, channels, WEEK_ID, ops_alerts=alerts)

        assert activity.week_id == WEEK_ID
        assert activity.total_messages == 5
        assert activity.by_channel == {"engineering": 3, "general": 2}
        assert activity.by_user == {"U1": 3, "U2": 1, "U3": 1}
        assert activity.active_users == 3
        assert [(u.user_id, u.count) for u in activity.top_users] == [("U1", 3), ("U2", 1), ("U3", 1)]
        assert [(e.from_user, e.to_user, e.count) for e in activity.mention_edges] == [
            ("U1", "U2", 1),
            ("U2", "U1", 1),
        ]
        assert [a.ts for a in activity.ops_alerts] == ["1"]
        assert activity.gini_coefficient == pytest.approx(gini_coefficient([3, 1, 1]))

    def test_top_users_limit(self, users, channels, make_message):
        messages = [make_message(u, at(0, 10, i)) for i, u in enumerate(["U1", "U2", "U3"])]

        activity = summarize_week(messages, users, channels, WEEK_ID, top_users_limit=2)

        assert len(activity.top_users) == 2

    def test_empty_week(self, users, channels):
        activity = summarize_week([], users, channels, WEEK_ID)

        assert activity.total_messages == 0
        assert activity.gini_coefficient == 0
        assert activity.avg_first_reply_hours is None
        assert activity.period_end > activity.period_start
