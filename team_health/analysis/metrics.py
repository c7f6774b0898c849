"""Team health metrics computed from one week of Slack activity.

Frameworks behind each family of scores:
- Hackman & Wageman (2005): the six conditions
- Edmondson (1999): psychological safety
- DeFilippis et al. (2022): response times
- Borgatti et al. (2018): network density and centralization
- Van Dun et al. (2024): burnout indicators
- Tuckman (1965): team development stage
- Lencioni (2002): early warning signals
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timedelta

import structlog

from team_health.analysis import keywords
from team_health.schemas.analytics import RiskLevel, TeamHealthMetrics, TeamStage
from team_health.schemas.slack import Channel, Message, User

logger = structlog.get_logger()

INTERACTION_WINDOW = timedelta(hours=1)
WORK_DAY_START_HOUR = 8
WORK_DAY_END_HOUR = 18
STRUCTURED_PURPOSE_MIN_LENGTH = 10

WARNING_HIGH_BURNOUT = "High burnout risk detected"
WARNING_BOTTLENECK = "Communication bottleneck forming"
WARNING_WEEKEND_WORK = "Excessive weekend work detected"
WARNING_AFTER_HOURS = "High after-hours communication"


@dataclass(frozen=True)
class NetworkMetrics:
    """Communication network shape."""

    density: float
    centralization: float
    collaboration: float


@dataclass(frozen=True)
class BurnoutMetrics:
    """Burnout indicator ratios."""

    risk: float
    weekend_activity: float
    after_hours: float
    stress: float


@dataclass(frozen=True)
class SafetyMetrics:
    """Psychological safety indicator ratios."""

    safety: float
    help_seeking: float
    error_reporting: float
    innovation: float


@dataclass(frozen=True)
class ConditionScores:
    """Hackman's conditions for team effectiveness."""

    real_team: float
    compelling_direction: float
    enabling_structure: float
    supportive_context: float
    expert_coaching: float


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def ratio(count: float, total: float) -> float:
    """count / total, or 0 when there is nothing to divide by."""
    if total <= 0:
        return 0.0
    return count / total


def _scaled(keyword_set: keywords.KeywordSet, texts: list[str]) -> float:
    multiplier = keywords.SCORE_MULTIPLIERS.get(keyword_set.name, 1.0)
    return clamp(ratio(keyword_set.count_matching(texts), len(texts)) * multiplier)


def _sorted_by_channel(messages: list[Message]) -> dict[str, list[Message]]:
    by_channel: dict[str, list[Message]] = defaultdict(list)
    for message in messages:
        by_channel[message.channel_id].append(message)
    return {
        channel_id: sorted(channel_messages, key=lambda m: (m.timestamp, m.id))
        for channel_id, channel_messages in sorted(by_channel.items())
    }


def prepare_records(
    messages: Iterable[Message],
    users: Iterable[User],
    channels: Iterable[Channel],
) -> tuple[list[Message], list[User], list[Channel]]:
    """Drop records the human-centric metrics must not see.

    Returns human users, non-archived channels, and the well-formed messages
    written by those users in those channels.
    """
    human_users = [user for user in users if user.is_human]
    active_channels = [channel for channel in channels if not channel.is_archived]

    human_ids = {user.id for user in human_users}
    channel_ids = {channel.id for channel in active_channels}

    kept = [
        message
        for message in messages
        if message.is_well_formed
        and message.user_id in human_ids
        and message.channel_id in channel_ids
    ]
    return kept, human_users, active_channels


class MetricsCalculator:
    """Calculates team health metrics from cleaned message records."""

    @staticmethod
    def calculate_response_time(messages: list[Message]) -> float:
        """Average gap in hours between adjacent messages by different users.

        Pairs are taken per channel in timestamp order. Returns 0 when no
        qualifying pair exists.
        """
        gaps: list[float] = []
        for channel_messages in _sorted_by_channel(messages).values():
            for previous, current in zip(channel_messages, channel_messages[1:]):
                if previous.user_id != current.user_id:
                    gap = current.timestamp - previous.timestamp
                    gaps.append(gap.total_seconds() / 3600)

        if not gaps:
            return 0.0
        return sum(gaps) / len(gaps)

    @staticmethod
    def calculate_network_metrics(messages: list[Message], user_count: int) -> NetworkMetrics:
        """Density, centralization and collaboration index.

        A directed edge A -> B exists when B posts in the same channel
        strictly after A and less than an hour later.
        """
        if not messages:
            return NetworkMetrics(density=0.0, centralization=0.0, collaboration=0.0)

        edges: set[tuple[str, str]] = set()
        for channel_messages in _sorted_by_channel(messages).values():
            for i, message in enumerate(channel_messages):
                for later in channel_messages[i + 1:]:
                    delta = later.timestamp - message.timestamp
                    if delta >= INTERACTION_WINDOW:
                        break
                    if delta > timedelta(0) and later.user_id != message.user_id:
                        edges.add((message.user_id, later.user_id))

        if user_count <= 1:
            density = 0.0
        else:
            density = clamp(len(edges) / (user_count * (user_count - 1)))

        counts: dict[str, int] = defaultdict(int)
        for message in messages:
            counts[message.user_id] += 1
        centralization = clamp(ratio(max(counts.values(), default=0), len(messages)))

        return NetworkMetrics(
            density=density,
            centralization=centralization,
            collaboration=clamp(density * 0.8 + (1 - centralization) * 0.2),
        )

    @staticmethod
    def calculate_burnout_indicators(messages: list[Message]) -> BurnoutMetrics:
        """Weekend, after-hours and stress-keyword ratios plus their composite."""
        total = len(messages)
        weekend = sum(1 for m in messages if m.timestamp.weekday() >= 5)
        after_hours = sum(
            1
            for m in messages
            if m.timestamp.hour < WORK_DAY_START_HOUR or m.timestamp.hour > WORK_DAY_END_HOUR
        )
        stress = keywords.STRESS.count_matching([m.text for m in messages])

        weekend_activity = ratio(weekend, total)
        after_hours_activity = ratio(after_hours, total)
        stress_ratio = ratio(stress, total)

        return BurnoutMetrics(
            risk=clamp(weekend_activity * 0.4 + after_hours_activity * 0.3 + stress_ratio * 0.3),
            weekend_activity=weekend_activity,
            after_hours=after_hours_activity,
            stress=stress_ratio,
        )

    @staticmethod
    def calculate_psychological_safety(messages: list[Message]) -> SafetyMetrics:
        texts = [m.text for m in messages]
        help_count = keywords.HELP_SEEKING.count_matching(texts)
        error_count = keywords.ERROR_REPORTING.count_matching(texts)
        innovation_count = keywords.INNOVATION.count_matching(texts)

        return SafetyMetrics(
            safety=clamp(ratio(help_count + error_count + innovation_count, 3 * len(texts))),
            help_seeking=_scaled(keywords.HELP_SEEKING, texts),
            error_reporting=_scaled(keywords.ERROR_REPORTING, texts),
            innovation=_scaled(keywords.INNOVATION, texts),
        )

    @staticmethod
    def determine_team_stage(messages: list[Message], total_users: int) -> TeamStage:
        """Tuckman stage from participation breadth and conflict language.

        ``ADJOURNING`` has no trigger and is never returned.
        """
        unique_active = len({m.user_id for m in messages})
        if total_users <= 0 or unique_active < total_users * 0.5:
            return TeamStage.FORMING

        conflict_ratio = ratio(
            keywords.CONFLICT.count_matching([m.text for m in messages]),
            len(messages),
        )
        if conflict_ratio > 0.1:
            return TeamStage.STORMING
        if conflict_ratio < 0.05 and len(messages) > 100:
            return TeamStage.PERFORMING
        return TeamStage.NORMING

    @staticmethod
    def identify_early_warnings(network: NetworkMetrics, burnout: BurnoutMetrics) -> list[str]:
        warnings = []
        if burnout.risk > 0.7:
            warnings.append(WARNING_HIGH_BURNOUT)
        if network.centralization > 0.7:
            warnings.append(WARNING_BOTTLENECK)
        if burnout.weekend_activity > 0.15:
            warnings.append(WARNING_WEEKEND_WORK)
        if burnout.after_hours > 0.3:
            warnings.append(WARNING_AFTER_HOURS)
        return warnings

    @staticmethod
    def calculate_risk_level(warnings: list[str], burnout_risk: float) -> RiskLevel:
        if len(warnings) >= 3 or burnout_risk > 0.8:
            return RiskLevel.CRITICAL
        if len(warnings) >= 2 or burnout_risk > 0.6:
            return RiskLevel.HIGH
        if len(warnings) >= 1 or burnout_risk > 0.4:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    @staticmethod
    def calculate_six_conditions(
        messages: list[Message],
        users: list[User],
        channels: list[Channel],
    ) -> ConditionScores:
        """Keyword-ratio heuristics for Hackman's conditions."""
        texts = [m.text for m in messages]
        active = len({m.user_id for m in messages})
        structured = sum(
            1 for channel in channels if len(channel.purpose) > STRUCTURED_PURPOSE_MIN_LENGTH
        )

        return ConditionScores(
            real_team=clamp(ratio(active, len(users))),
            compelling_direction=_scaled(keywords.DIRECTION, texts),
            enabling_structure=clamp(ratio(structured, len(channels))),
            supportive_context=_scaled(keywords.SUPPORTIVE, texts),
            expert_coaching=_scaled(keywords.COACHING, texts),
        )


def compute_metrics(
    messages: Iterable[Message],
    users: Iterable[User],
    channels: Iterable[Channel],
) -> TeamHealthMetrics:
    """Compute every team health metric for one week of messages.

    Never raises on empty or sparse data: every ratio falls back to 0, the
    stage to ``forming`` and the risk level to ``low``.
    """
    kept, human_users, active_channels = prepare_records(messages, users, channels)
    calc = MetricsCalculator

    network = calc.calculate_network_metrics(kept, len(human_users))
    burnout = calc.calculate_burnout_indicators(kept)
    safety = calc.calculate_psychological_safety(kept)
    conditions = calc.calculate_six_conditions(kept, human_users, active_channels)
    warnings = calc.identify_early_warnings(network, burnout)
    risk_level = calc.calculate_risk_level(warnings, burnout.risk)
    team_stage = calc.determine_team_stage(kept, len(human_users))

    logger.debug(
        "Computed team health metrics",
        messages=len(kept),
        users=len(human_users),
        channels=len(active_channels),
        team_stage=team_stage.value,
        risk_level=risk_level.value,
    )

    return TeamHealthMetrics(
        real_team=conditions.real_team,
        compelling_direction=conditions.compelling_direction,
        enabling_structure=conditions.enabling_structure,
        supportive_context=conditions.supportive_context,
        expert_coaching=conditions.expert_coaching,
        psychological_safety=safety.safety,
        help_seeking=safety.help_seeking,
        error_reporting=safety.error_reporting,
        innovation_behavior=safety.innovation,
        response_time=calc.calculate_response_time(kept),
        message_frequency=ratio(len(kept), len(human_users)),
        collaboration_index=network.collaboration,
        network_density=network.density,
        centralization=network.centralization,
        burnout_risk=burnout.risk,
        weekend_activity=burnout.weekend_activity,
        after_hours_activity=burnout.after_hours,
        stress_indicators=burnout.stress,
        team_stage=team_stage,
        early_warnings=warnings,
        risk_level=risk_level,
    )
