"""Weekly participation breakdown and inequality."""

import re
from collections import Counter, defaultdict
from collections.abc import Iterable

from team_health.analysis.metrics import prepare_records
from team_health.analysis.weeks import filter_to_week, week_bounds
from team_health.schemas.analytics import MentionEdge, UserActivity, WeeklyActivity
from team_health.schemas.slack import Channel, Message, OpsAlert, User

MENTION_PATTERN = re.compile(r"<@([A-Z0-9]+)>")
CONCENTRATED_PARTICIPATION_GINI = 0.5
SLOW_FIRST_REPLY_HOURS = 6


def gini_coefficient(counts: Iterable[float]) -> float:
    """Gini coefficient of non-negative counts (0 = equal, towards 1 = unequal)."""
    values = sorted(counts)
    n = len(values)
    total = sum(values)
    if n == 0 or total == 0:
        return 0.0

    weighted = sum((i + 1) * value for i, value in enumerate(values))
    return max(0.0, (2 * weighted) / (n * total) - (n + 1) / n)


def extract_mentions(text: str) -> list[str]:
    return MENTION_PATTERN.findall(text or "")


def average_first_reply_hours(messages: list[Message]) -> float | None:
    """Mean gap between consecutive messages by different users.

    Messages are bucketed per channel per UTC day.
    """
    buckets: dict[tuple[str, str], list[Message]] = defaultdict(list)
    for message in messages:
        buckets[(message.channel_id, message.timestamp.date().isoformat())].append(message)

    gaps = []
    for bucket in buckets.values():
        ordered = sorted(bucket, key=lambda m: (m.timestamp, m.id))
        for previous, current in zip(ordered, ordered[1:]):
            if previous.user_id != current.user_id:
                gaps.append((current.timestamp - previous.timestamp).total_seconds() / 3600)

    if not gaps:
        return None
    return sum(gaps) / len(gaps)


def summarize_week(
    messages: Iterable[Message],
    users: Iterable[User],
    channels: Iterable[Channel],
    week_id: str,
    ops_alerts: Iterable[OpsAlert] = (),
    top_users_limit: int = 5,
) -> WeeklyActivity:
    """Activity, participation balance and mention graph for one week."""
    start, end = week_bounds(week_id)
    week_messages, human_users, active_channels = prepare_records(
        filter_to_week(messages, week_id), users, channels
    )
    channel_names = {channel.id: channel.name for channel in active_channels}
    human_ids = {user.id for user in human_users}

    by_channel = Counter(channel_names[m.channel_id] for m in week_messages)
    by_user = Counter(m.user_id for m in week_messages)

    mentions: Counter[tuple[str, str]] = Counter()
    for message in week_messages:
        for target in extract_mentions(message.text):
            if target in human_ids and target != message.user_id:
                mentions[(message.user_id, target)] += 1

    top_users = sorted(by_user.items(), key=lambda item: (-item[1], item[0]))[:top_users_limit]
    week_alerts = [
        alert
        for alert in ops_alerts
        if alert.timestamp is not None and start <= alert.timestamp < end
    ]

    return WeeklyActivity(
        week_id=week_id,
        period_start=start,
        period_end=end,
        total_messages=len(week_messages),
        by_channel=dict(sorted(by_channel.items())),
        by_user=dict(sorted(by_user.items())),
        active_users=len(by_user),
        top_users=[UserActivity(user_id=user_id, count=count) for user_id, count in top_users],
        gini_coefficient=gini_coefficient(by_user.values()),
        avg_first_reply_hours=average_first_reply_hours(week_messages),
        mention_edges=[
            MentionEdge(from_user=source, to_user=target, count=count)
            for (source, target), count in sorted(mentions.items())
        ],
        ops_alerts=week_alerts,
    )
