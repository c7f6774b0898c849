"""Unit tests for the recommendation engine."""

from datetime import timedelta

import pytest

from conftest import WEEK_START, at
from team_health.analysis.insights import generate_insights
from team_health.analysis.recommendations import (
    RESEARCH_FRAMEWORKS,
    TEMPLATES,
    analyze_recommendation_impact,
    generate_activity_recommendations,
    generate_recommendations,
    research_highlights,
)
from team_health.schemas.analytics import (
    AnalyticsInsight,
    InsightCategory,
    InsightSeverity,
    InsightTrend,
    Priority,
    RecommendationContext,
    TeamHealthMetrics,
    TeamStage,
    WeeklyActivity,
)
from team_health.schemas.slack import OpsAlert

PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


@pytest.fixture
def healthy_metrics() -> TeamHealthMetrics:
    """Metrics that select no template."""
    return TeamHealthMetrics(
        psychological_safety=0.8,
        centralization=0.3,
        network_density=0.6,
        burnout_risk=0.1,
        team_stage=TeamStage.PERFORMING,
        innovation_behavior=0.5,
        collaboration_index=0.6,
    )


@pytest.fixture
def context() -> RecommendationContext:
    return RecommendationContext(
        week_id="2025-W28",
        team_name="Platform",
        member_count=8,
        admin_count=2,
        active_members=6,
        channel_names=["general", "engineering", "random", "product"],
    )


def critical_insight(insight_id: str, category: InsightCategory) -> AnalyticsInsight:
    return AnalyticsInsight(
        id=insight_id,
        title="Critical",
        description="",
        metric="",
        trend=InsightTrend.NEGATIVE,
        severity=InsightSeverity.CRITICAL,
        category=category,
        confidence=0.9,
    )


class TestGenerateRecommendations:
    """Tests for selection, ordering and truncation."""

    def test_fallback_when_nothing_applies(self, healthy_metrics):
        recommendations = generate_recommendations(healthy_metrics, [])

        assert len(recommendations) == 1
        assert recommendations[0].id == "general-team-health"
        assert recommendations[0].priority == Priority.MEDIUM
        assert recommendations[0].timeframe == "2-3 months"

    def test_every_template_can_fire(self):
        metrics = TeamHealthMetrics(
            psychological_safety=0.1,
            centralization=0.9,
            network_density=0.1,
            burnout_risk=0.9,
            team_stage=TeamStage.STORMING,
            innovation_behavior=0.1,
            collaboration_index=0.1,
        )

        recommendations = generate_recommendations(metrics, [], limit=10)

        assert {r.template for r in recommendations} == set(TEMPLATES)

    def test_sorted_and_truncated_to_three(self):
        metrics = TeamHealthMetrics(
            network_density=0.1,
            innovation_behavior=0.1,
            collaboration_index=0.1,
            burnout_risk=0.6,
            team_stage=TeamStage.FORMING,
            psychological_safety=0.9,
        )

        recommendations = generate_recommendations(metrics, [])

        assert len(recommendations) == 3
        assert recommendations[0].id == "burnout-prevention"
        ranks = [PRIORITY_RANK[r.priority] for r in recommendations]
        assert ranks == sorted(ranks, reverse=True)

    def test_stable_order_within_priority(self):
        metrics = TeamHealthMetrics(
            network_density=0.1,
            team_stage=TeamStage.FORMING,
            innovation_behavior=0.1,
            psychological_safety=0.9,
            collaboration_index=0.9,
        )

        recommendations = generate_recommendations(metrics, [])

        assert [r.id for r in recommendations] == [
            "communication-optimization",
            "team-development-optimization",
            "innovation-culture-building",
        ]

    def test_critical_insight_injects_template(self, healthy_metrics):
        insights = [critical_insight("burnout_1", InsightCategory.BURNOUT)]

        recommendations = generate_recommendations(healthy_metrics, insights)

        assert [r.id for r in recommendations] == ["burnout-burnout_1"]
        assert recommendations[0].priority == Priority.HIGH
        assert recommendations[0].timeframe == "Immediate - 1 week"

    def test_critical_insight_promotes_existing_template(self, healthy_metrics):
        metrics = healthy_metrics.model_copy(update={"network_density": 0.1})
        insights = [critical_insight("response_x", InsightCategory.COMMUNICATION)]

        recommendations = generate_recommendations(metrics, insights)

        assert len(recommendations) == 1
        assert recommendations[0].id == "communication-optimization"
        assert recommendations[0].priority == Priority.HIGH

    def test_warning_insights_are_ignored(self, healthy_metrics):
        warning = critical_insight("x", InsightCategory.BURNOUT).model_copy(
            update={"severity": InsightSeverity.WARNING}
        )

        recommendations = generate_recommendations(healthy_metrics, [warning])

        assert [r.id for r in recommendations] == ["general-team-health"]

    @pytest.mark.parametrize(
        "category",
        [InsightCategory.PERFORMANCE, InsightCategory.LEADERSHIP, InsightCategory.COLLABORATION],
    )
    def test_other_critical_categories_inject_nothing(self, healthy_metrics, category):
        insights = [critical_insight("x", category)]

        recommendations = generate_recommendations(healthy_metrics, insights)

        assert [r.id for r in recommendations] == ["general-team-health"]

    def test_decision_bottleneck_adds_only_delegation(self):
        metrics = TeamHealthMetrics(
            centralization=0.8,
            network_density=0.6,
            collaboration_index=0.52,
            psychological_safety=0.7,
            team_stage=TeamStage.NORMING,
            innovation_behavior=0.5,
        )
        insights = generate_insights(metrics)
        assert [i.id for i in insights] == ["network_1"]

        recommendations = generate_recommendations(metrics, insights)

        assert [r.id for r in recommendations] == ["decision-delegation-framework"]

    @pytest.mark.parametrize("limit", [1, 2, 3, 5])
    def test_limit_bounds(self, limit):
        metrics = TeamHealthMetrics(
            psychological_safety=0.1,
            centralization=0.9,
            burnout_risk=0.9,
        )
        insights = generate_insights(metrics)

        recommendations = generate_recommendations(metrics, insights, limit=limit)

        assert 1 <= len(recommendations) <= limit

    def test_team_context_is_personalised(self, context):
        metrics = TeamHealthMetrics(psychological_safety=0.1, centralization=0.9, team_stage=TeamStage.NORMING)

        recommendations = {r.template: r for r in generate_recommendations(metrics, [], context, limit=10)}

        assert "Platform has 8 members across 4 channels" in recommendations["psychological_safety"].team_context
        assert "2 administrators and 6 regular members" in recommendations["decision_delegation"].team_context

    def test_enriched_with_impact(self):
        metrics = TeamHealthMetrics(psychological_safety=0.42, centralization=0.3, team_stage=TeamStage.NORMING)

        recommendation = generate_recommendations(metrics, [])[0]

        assert recommendation.template == "psychological_safety"
        assert recommendation.expected_improvement == "Increase psychological safety score from 42% to 70-80%"
        assert recommendation.key_metrics
        assert recommendation.success_indicators
        assert recommendation.risk_factors

    def test_deterministic(self, context):
        metrics = TeamHealthMetrics(burnout_risk=0.9, network_density=0.1)
        insights = generate_insights(metrics)

        first = [r.model_dump() for r in generate_recommendations(metrics, insights, context)]
        second = [r.model_dump() for r in generate_recommendations(metrics, insights, context)]

        assert first == second


class TestRecommendationImpact:
    """Tests for impact analysis."""

    def test_team_development_stage_progression(self):
        metrics = TeamHealthMetrics(team_stage=TeamStage.STORMING, psychological_safety=0.9, collaboration_index=0.9, network_density=0.9, innovation_behavior=0.9)
        recommendation = generate_recommendations(metrics, [])[0]

        impact = analyze_recommendation_impact(recommendation, metrics)

        assert impact.current_value == "storming"
        assert impact.target_value == "performing"
        assert "'storming' to 'performing'" in impact.expected_improvement

    def test_burnout_values(self):
        metrics = TeamHealthMetrics(burnout_risk=0.65)
        recommendation = next(
            r for r in generate_recommendations(metrics, [], limit=10) if r.template == "burnout_prevention"
        )

        impact = analyze_recommendation_impact(recommendation, metrics)

        assert impact.current_value == "65%"
        assert impact.target_value == "20-30%"
        assert impact.improvement == "-25-35%"


class TestResearchFrameworks:
    """Tests for the framework catalogue."""

    def test_catalogue(self):
        assert set(RESEARCH_FRAMEWORKS) == {"hackman", "edmondson", "tuckman", "burnout", "communication"}
        assert all("source" in framework for framework in RESEARCH_FRAMEWORKS.values())


def weekly_activity(**fields) -> WeeklyActivity:
    return WeeklyActivity(
        week_id="2025-W28",
        period_start=WEEK_START,
        period_end=WEEK_START + timedelta(days=7),
        **fields,
    )


def aws_alert() -> OpsAlert:
    return OpsAlert(channel="ops", ts="1", timestamp=at(0, 6), summary="AWS Budget Alert", source="aws")


class TestActivityRecommendations:
    """Tests for quick actions from weekly activity."""

    def test_keep_momentum_fallback(self):
        recommendations = generate_activity_recommendations(weekly_activity(avg_first_reply_hours=2.0))

        assert [r.id for r in recommendations] == ["keep-momentum"]
        assert recommendations[0].title == "Keep Momentum"

    def test_slow_replies(self):
        recommendations = generate_activity_recommendations(weekly_activity(avg_first_reply_hours=6.5))

        assert [r.title for r in recommendations] == ["Accelerate Replies"]
        assert "4-hour SLA" in recommendations[0].action

    def test_reply_threshold_is_strict(self):
        recommendations = generate_activity_recommendations(weekly_activity(avg_first_reply_hours=6.0))

        assert [r.id for r in recommendations] == ["keep-momentum"]

    def test_concentrated_participation(self):
        recommendations = generate_activity_recommendations(weekly_activity(gini_coefficient=0.5))

        assert [r.id for r in recommendations] == ["broaden-participation"]

    def test_aws_alerts(self):
        other = OpsAlert(channel="ops", ts="2", timestamp=at(0, 7), summary="deploy.log", source="bot")

        assert [r.id for r in generate_activity_recommendations(weekly_activity(ops_alerts=[other]))] == [
            "keep-momentum"
        ]
        assert [r.id for r in generate_activity_recommendations(weekly_activity(ops_alerts=[aws_alert()]))] == [
            "review-cloud-spend"
        ]

    def test_rule_order(self):
        activity = weekly_activity(avg_first_reply_hours=9.0, gini_coefficient=0.7, ops_alerts=[aws_alert()])

        assert [r.id for r in generate_activity_recommendations(activity)] == [
            "accelerate-replies",
            "broaden-participation",
            "review-cloud-spend",
        ]


class TestResearchHighlights:
    """Tests for the weekly research summary."""

    def test_empty_week(self):
        assert research_highlights(weekly_activity()) == []

    def test_busiest_channel_and_alerts(self):
        activity = weekly_activity(
            by_channel={"engineering": 4, "general": 7, "random": 7},
            ops_alerts=[aws_alert(), aws_alert()],
        )

        highlights = research_highlights(activity)

        assert [h.title for h in highlights] == ["Busiest Channel", "Ops Alerts"]
        assert highlights[0].summary == "general had the highest message volume this week."
        assert highlights[1].summary == "Detected 2 operations-related alerts across channels."
