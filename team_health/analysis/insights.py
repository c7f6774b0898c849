"""Rule-based insights derived from team health metrics."""

from collections import Counter
from collections.abc import Iterable

from team_health.analysis.metrics import prepare_records
from team_health.analysis.participation import (
    CONCENTRATED_PARTICIPATION_GINI,
    SLOW_FIRST_REPLY_HOURS,
    gini_coefficient,
)
from team_health.schemas.analytics import (
    AnalyticsInsight,
    InsightCategory,
    InsightSeverity,
    InsightTrend,
    TeamHealthMetrics,
    TeamStage,
    WeeklyActivity,
)
from team_health.schemas.slack import Channel, Message, User

RESPONSE_TIME_TARGET_HOURS = 4.5
BUSINESS_HOURS = range(9, 18)


def generate_insights(
    metrics: TeamHealthMetrics,
    week_messages: list[Message] | None = None,
) -> list[AnalyticsInsight]:
    """Generate insights for every threshold the metrics cross.

    Rules fire independently and are returned in declaration order; an empty
    list means nothing crossed a threshold. The rules read ``metrics`` only;
    ``week_messages`` is accepted so callers can pass the week they analysed.
    """
    insights = []

    # DeFilippis et al. (2022)
    if metrics.response_time > RESPONSE_TIME_TARGET_HOURS:
        insights.append(AnalyticsInsight(
            id="response_time_1",
            title="Response Time Plateau",
            description="SLA implementation showing some stabilization effect but still above target",
            metric=f"{metrics.response_time:.1f} hours average",
            trend=InsightTrend.STABLE,
            severity=InsightSeverity.WARNING,
            category=InsightCategory.COMMUNICATION,
            confidence=0.87,
            recommendations=[
                "Implement focus time blocks to reduce interruptions",
                "Set clear response time expectations",
                "Consider async-first communication practices",
            ],
        ))

    # Van Dun et al. (2024)
    if metrics.burnout_risk > 0.7:
        insights.append(AnalyticsInsight(
            id="burnout_1",
            title="High Burnout Risk Detected",
            description="Weekend activity and after-hours communication patterns indicate elevated stress levels",
            metric=f"{metrics.burnout_risk * 100:.0f}% risk level",
            trend=InsightTrend.NEGATIVE,
            severity=InsightSeverity.CRITICAL,
            category=InsightCategory.BURNOUT,
            confidence=0.89,
            recommendations=[
                "Implement mandatory time-off policies",
                "Reduce meeting load by 30%",
                "Establish clear work-life boundaries",
                "Provide mental health resources",
            ],
        ))

    # Edmondson (1999)
    if metrics.psychological_safety < 0.6:
        insights.append(AnalyticsInsight(
            id="psych_safety_1",
            title="Psychological Safety Concerns",
            description="Low help-seeking behavior and limited error reporting suggest trust issues",
            metric=f"{metrics.psychological_safety * 100:.0f}% safety score",
            trend=InsightTrend.NEGATIVE,
            severity=InsightSeverity.CRITICAL,
            category=InsightCategory.LEADERSHIP,
            confidence=0.85,
            recommendations=[
                "Model vulnerability as a leader",
                "Create safe spaces for honest feedback",
                "Celebrate learning from mistakes",
                "Implement regular team retrospectives",
            ],
        ))

    # Borgatti et al. (2018)
    if metrics.centralization > 0.7:
        insights.append(AnalyticsInsight(
            id="network_1",
            title="Decision Bottleneck Formation",
            description=(
                f"A single participant accounts for {metrics.centralization * 100:.0f}% "
                "of the week's messages, concentrating decisions and information flow"
            ),
            metric=f"{metrics.centralization * 100:.0f}% centralization",
            trend=InsightTrend.NEGATIVE,
            severity=InsightSeverity.CRITICAL,
            category=InsightCategory.COLLABORATION,
            confidence=0.82,
            recommendations=[
                "Distribute decision-making authority",
                "Cross-train team members",
                "Implement knowledge sharing sessions",
                "Create backup decision-makers",
            ],
        ))

    # Tuckman (1965)
    if metrics.team_stage == TeamStage.STORMING:
        insights.append(AnalyticsInsight(
            id="team_stage_1",
            title="Team in Storming Phase",
            description="Conflict patterns suggest team is in development stage requiring leadership support",
            metric="Storming stage detected",
            trend=InsightTrend.STABLE,
            severity=InsightSeverity.WARNING,
            category=InsightCategory.LEADERSHIP,
            confidence=0.78,
            recommendations=[
                "Facilitate conflict resolution sessions",
                "Establish clear team norms",
                "Provide team coaching support",
                "Focus on building trust",
            ],
        ))

    return insights


def generate_activity_insights(
    week_messages: Iterable[Message],
    users: Iterable[User],
    channels: Iterable[Channel],
) -> list[AnalyticsInsight]:
    """Descriptive insights about volume, engagement and participation balance."""
    messages, human_users, active_channels = prepare_records(week_messages, users, channels)
    insights = []

    total = len(messages)
    channel_counts = Counter(m.channel_id for m in messages)
    user_counts = Counter(m.user_id for m in messages)

    # Activity level
    if total < 10:
        insights.append(AnalyticsInsight(
            id="very-low-activity",
            title="Very Low Team Activity",
            description=(
                f"Only {total} messages this week across {len(channel_counts)} channels. "
                "This indicates minimal team communication."
            ),
            metric=f"{total} messages",
            trend=InsightTrend.NEGATIVE,
            severity=InsightSeverity.CRITICAL,
            category=InsightCategory.COMMUNICATION,
            confidence=0.95,
            recommendations=[
                "Schedule team check-ins to boost engagement",
                "Create more interactive channels for team discussions",
                "Encourage asynchronous communication",
                "Consider team building activities",
            ],
        ))
    elif total < 50:
        insights.append(AnalyticsInsight(
            id="low-activity",
            title="Low Team Activity Detected",
            description=(
                f"Only {total} messages this week across {len(channel_counts)} channels. "
                "This suggests reduced team engagement."
            ),
            metric=f"{total} messages",
            trend=InsightTrend.NEGATIVE,
            severity=InsightSeverity.WARNING,
            category=InsightCategory.COMMUNICATION,
            confidence=0.85,
            recommendations=[
                "Schedule team check-ins to boost engagement",
                "Create more interactive channels for team discussions",
                "Encourage asynchronous communication",
            ],
        ))
    elif total > 200:
        insights.append(AnalyticsInsight(
            id="high-activity",
            title="High Team Engagement",
            description=f"{total} messages this week shows strong team communication patterns.",
            metric=f"{total} messages",
            trend=InsightTrend.POSITIVE,
            severity=InsightSeverity.INFO,
            category=InsightCategory.COMMUNICATION,
            confidence=0.90,
            recommendations=[
                "Maintain current communication practices",
                "Consider implementing async-first policies",
                "Monitor for potential information overload",
            ],
        ))

    # Channel usage
    if channel_counts:
        names = {channel.id: channel.name for channel in active_channels}
        channel_id, count = min(channel_counts.items(), key=lambda item: (-item[1], names[item[0]]))
        insights.append(AnalyticsInsight(
            id="channel-focus",
            title="Primary Communication Channel",
            description=(
                f"{names[channel_id]} is the most active channel with {count} messages "
                f"({count / total * 100:.1f}% of all activity)."
            ),
            metric=f"{count} messages",
            trend=InsightTrend.STABLE,
            severity=InsightSeverity.INFO,
            category=InsightCategory.COMMUNICATION,
            confidence=0.95,
            recommendations=[
                "Ensure important announcements reach all team members",
                "Consider cross-channel communication strategies",
                "Monitor for siloed communication patterns",
            ],
        ))

    # Engagement rate
    if human_users:
        active = len(user_counts)
        engagement = active / len(human_users) * 100
        summary = (
            f"Only {active} out of {len(human_users)} team members "
            f"({engagement:.1f}%) were active this week."
        )
        if engagement < 30:
            insights.append(AnalyticsInsight(
                id="very-low-engagement",
                title="Very Low Team Engagement Rate",
                description=summary,
                metric=f"{engagement:.1f}% engagement",
                trend=InsightTrend.NEGATIVE,
                severity=InsightSeverity.CRITICAL,
                category=InsightCategory.COLLABORATION,
                confidence=0.90,
                recommendations=[
                    "Implement team-building activities",
                    "Create inclusive communication practices",
                    "Address potential barriers to participation",
                    "Consider one-on-one check-ins",
                ],
            ))
        elif engagement < 50:
            insights.append(AnalyticsInsight(
                id="low-engagement",
                title="Low Team Engagement Rate",
                description=summary,
                metric=f"{engagement:.1f}% engagement",
                trend=InsightTrend.NEGATIVE,
                severity=InsightSeverity.WARNING,
                category=InsightCategory.COLLABORATION,
                confidence=0.80,
                recommendations=[
                    "Implement team-building activities",
                    "Create inclusive communication practices",
                    "Address potential barriers to participation",
                ],
            ))

    # Outside 9 AM - 5 PM
    if total:
        outside = sum(1 for m in messages if m.timestamp.hour not in BUSINESS_HOURS)
        outside_pct = outside / total * 100
        if outside_pct > 30:
            insights.append(AnalyticsInsight(
                id="after-hours-activity",
                title="High After-Hours Activity",
                description=f"{outside_pct:.1f}% of messages sent outside business hours (9 AM - 5 PM).",
                metric=f"{outside_pct:.1f}% after-hours",
                trend=InsightTrend.NEGATIVE,
                severity=InsightSeverity.WARNING,
                category=InsightCategory.BURNOUT,
                confidence=0.75,
                recommendations=[
                    "Establish clear work-life boundaries",
                    "Implement quiet hours policies",
                    "Encourage healthy work habits",
                ],
            ))

    # Participation balance
    gini = gini_coefficient(user_counts.values())
    if gini >= CONCENTRATED_PARTICIPATION_GINI:
        insights.append(AnalyticsInsight(
            id="participation-balance",
            title="Concentrated Participation",
            description=(
                f"Message volume is unevenly spread across members (Gini coefficient {gini:.2f}). "
                "A few voices dominate the conversation."
            ),
            metric=f"{gini:.2f} Gini coefficient",
            trend=InsightTrend.NEGATIVE,
            severity=InsightSeverity.WARNING,
            category=InsightCategory.COLLABORATION,
            confidence=0.80,
            recommendations=[
                "Invite short rotating updates from more team members",
                "Distribute voice across channels",
                "Check in with quieter members one-on-one",
            ],
        ))

    # Team structure
    admins = sum(1 for user in human_users if user.is_admin)
    insights.append(AnalyticsInsight(
        id="team-structure",
        title="Team Structure Overview",
        description=(
            f"Team consists of {admins} administrators and "
            f"{len(human_users) - admins} regular members."
        ),
        metric=f"{len(human_users)} total members",
        trend=InsightTrend.STABLE,
        severity=InsightSeverity.INFO,
        category=InsightCategory.LEADERSHIP,
        confidence=0.95,
        recommendations=[
            "Ensure balanced decision-making processes",
            "Maintain clear communication hierarchies",
            "Foster inclusive leadership practices",
        ],
    ))

    if total == 0:
        insights.append(AnalyticsInsight(
            id="no-data",
            title="No Message Data Available",
            description=(
                "No messages found for this week. This could indicate a quiet period "
                "or data export limitations."
            ),
            metric="0 messages",
            trend=InsightTrend.STABLE,
            severity=InsightSeverity.INFO,
            category=InsightCategory.COMMUNICATION,
            confidence=0.80,
            recommendations=[
                "Verify Slack export data completeness",
                "Check if this was a holiday or quiet period",
                "Consider expanding data collection timeframe",
            ],
        ))

    return insights


def generate_signal_insights(activity: WeeklyActivity) -> list[AnalyticsInsight]:
    """Responsiveness and operational-alert insights from a weekly summary."""
    insights = []

    reply_hours = activity.avg_first_reply_hours
    if reply_hours is not None:
        slow = reply_hours > SLOW_FIRST_REPLY_HOURS
        insights.append(AnalyticsInsight(
            id="responsiveness",
            title="Responsiveness",
            description=f"Average first reply (approx): {reply_hours:.2f} hours.",
            metric=f"{reply_hours:.2f} hours",
            trend=InsightTrend.NEGATIVE if slow else InsightTrend.STABLE,
            severity=InsightSeverity.WARNING if slow else InsightSeverity.INFO,
            category=InsightCategory.COMMUNICATION,
            confidence=0.70,
            recommendations=[
                "Establish a responder rotation in key channels",
                "Agree on reply expectations for questions",
            ] if slow else [],
        ))

    if activity.ops_alerts:
        aws = sum(1 for alert in activity.ops_alerts if alert.source == "aws")
        other = len(activity.ops_alerts) - aws
        insights.append(AnalyticsInsight(
            id="operational-signals",
            title="Operational Signals",
            description=f"{len(activity.ops_alerts)} alerts detected ({aws} AWS, {other} other).",
            metric=f"{len(activity.ops_alerts)} alerts",
            trend=InsightTrend.STABLE,
            severity=InsightSeverity.WARNING if aws else InsightSeverity.INFO,
            category=InsightCategory.PERFORMANCE,
            confidence=0.90,
            recommendations=["Review cloud budget alerts"] if aws else [],
        ))

    return insights
