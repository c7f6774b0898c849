"""Research-backed recommendations selected from team health metrics."""

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from team_health.analysis.participation import CONCENTRATED_PARTICIPATION_GINI, SLOW_FIRST_REPLY_HOURS
from team_health.schemas.analytics import (
    ActivityRecommendation,
    AnalyticsInsight,
    InsightCategory,
    InsightSeverity,
    Priority,
    Recommendation,
    RecommendationContext,
    RecommendationImpact,
    ResearchHighlight,
    TeamHealthMetrics,
    TeamStage,
    WeeklyActivity,
)

logger = structlog.get_logger()

RESEARCH_FRAMEWORKS = {
    "hackman": {
        "name": "Hackman's Team Effectiveness Model",
        "components": ["Real Team", "Compelling Direction", "Enabling Structure", "Supportive Context", "Expert Coaching"],
        "research": "Teams with all five conditions are 3x more likely to be high-performing",
        "source": "Hackman & Wageman (2005)",
    },
    "edmondson": {
        "name": "Amy Edmondson's Psychological Safety",
        "components": ["Help-seeking behavior", "Error reporting", "Innovation behavior"],
        "research": "Teams with high psychological safety show 50% higher performance",
        "source": "Edmondson (1999, 2018)",
    },
    "tuckman": {
        "name": "Tuckman's Team Development Stages",
        "components": ["forming", "storming", "norming", "performing", "adjourning"],
        "research": "Understanding team stage helps leaders provide appropriate support",
        "source": "Tuckman (1965)",
    },
    "burnout": {
        "name": "Burnout Prediction Model",
        "components": ["After-hours activity", "Weekend work", "Response time pressure"],
        "research": "Early burnout detection can prevent 60% of team turnover",
        "source": "Van Dun et al. (2024)",
    },
    "communication": {
        "name": "Communication Pattern Analysis",
        "components": ["Network density", "Centralization", "Response times"],
        "research": "Optimal communication patterns correlate with 40% higher productivity",
        "source": "DeFilippis et al. (2022)",
    },
}


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


@dataclass(frozen=True)
class RecommendationTemplate:
    """Static content of a recommendation plus how to measure its effect."""

    key: str
    title: str
    science: str
    implementation: list[str]
    learn_more: list[str]
    key_metrics: list[str]
    success_indicators: list[str]
    risk_factors: list[str]
    target_value: str = ""
    improvement: str = ""
    # metrics -> (label, current value) for the expected-improvement sentence
    measure: Callable[[TeamHealthMetrics], tuple[str, str]] | None = field(default=None, compare=False)


TEMPLATES: dict[str, RecommendationTemplate] = {
    t.key: t
    for t in [
        RecommendationTemplate(
            key="psychological_safety",
            title="Psychological Safety Enhancement",
            science=(
                "Amy Edmondson's research shows teams with high psychological safety are 50% more "
                "likely to be high-performing and show 3x more innovation behavior."
            ),
            implementation=[
                "Conduct psychological safety assessment",
                "Create safe spaces for questions and mistakes",
                "Model vulnerability and learning from failures",
                "Encourage help-seeking behavior",
                "Celebrate learning over perfection",
            ],
            learn_more=[
                "Psychological Safety Assessment Guide",
                "Edmondson's Team Learning Research",
                "Building Trust in Teams Framework",
            ],
            key_metrics=["Help-seeking behavior", "Error reporting frequency", "Innovation attempts"],
            success_indicators=["More questions asked", "Increased experimentation", "Better knowledge sharing"],
            risk_factors=["Resistance to change", "Time investment required", "Cultural shift needed"],
            target_value="70-80%",
            improvement="+25-35%",
            measure=lambda m: ("Increase psychological safety score", _pct(m.psychological_safety)),
        ),
        RecommendationTemplate(
            key="decision_delegation",
            title="Decision Delegation Framework",
            science=(
                "Harvard Business Review analysis shows organizations with clear decision rights are "
                "5x more likely to be high-performing and experience 2x faster decision-making speed."
            ),
            implementation=[
                "Map current decision types and identify bottlenecks",
                "Create decision authority matrix by role and impact level",
                "Define escalation paths for complex decisions",
                "Train team leads on delegation best practices",
                "Document and communicate new decision framework",
            ],
            learn_more=[
                "Decision Rights Framework Guide",
                "Delegation Best Practices Research",
                "RACI Matrix Implementation",
            ],
            key_metrics=["Decision speed", "Team autonomy", "Bottleneck reduction"],
            success_indicators=["Faster decision-making", "Increased team ownership", "Reduced escalations"],
            risk_factors=["Initial confusion", "Training requirements", "Accountability concerns"],
            target_value="30-40%",
            improvement="-35-45%",
            measure=lambda m: ("Reduce centralization", _pct(m.centralization)),
        ),
        RecommendationTemplate(
            key="communication_optimization",
            title="Communication Pattern Optimization",
            science=(
                "MIT research shows optimal communication networks can improve team performance by "
                "40% and reduce decision time by 60%."
            ),
            implementation=[
                "Analyze current communication network structure",
                "Identify information bottlenecks and gatekeepers",
                "Implement cross-functional communication channels",
                "Establish clear communication protocols",
                "Monitor and optimize information flow",
            ],
            learn_more=[
                "Network Analysis in Organizations",
                "Communication Protocol Design",
                "Cross-functional Team Building",
            ],
            key_metrics=["Cross-channel communication", "Information flow", "Response times"],
            success_indicators=["Better information sharing", "Faster responses", "Reduced silos"],
            risk_factors=["Information overload", "Tool complexity", "Adoption resistance"],
            target_value="50-60%",
            improvement="+15-25%",
            measure=lambda m: ("Increase network density", _pct(m.network_density)),
        ),
        RecommendationTemplate(
            key="burnout_prevention",
            title="Burnout Prevention Strategy",
            science=(
                "Research by Van Dun et al. (2024) shows early burnout detection can prevent 60% of "
                "team turnover and improve productivity by 35%."
            ),
            implementation=[
                "Implement regular burnout risk assessments",
                "Establish work-life boundary policies",
                "Create quiet hours and no-meeting days",
                "Provide mental health support resources",
                "Monitor after-hours and weekend activity patterns",
            ],
            learn_more=[
                "Burnout Prevention Framework",
                "Work-Life Balance Best Practices",
                "Mental Health Support Programs",
            ],
            key_metrics=["After-hours activity", "Weekend work", "Stress indicators"],
            success_indicators=["Reduced after-hours work", "Better work-life balance", "Lower stress levels"],
            risk_factors=["Deadline pressures", "Client demands", "Team expectations"],
            target_value="20-30%",
            improvement="-25-35%",
            measure=lambda m: ("Reduce burnout risk", _pct(m.burnout_risk)),
        ),
        RecommendationTemplate(
            key="team_development",
            title="Team Development Stage Optimization",
            science=(
                "Tuckman's research shows teams progress through predictable stages, and appropriate "
                "leadership support at each stage improves outcomes by 45%."
            ),
            implementation=[
                "Assess current team development stage",
                "Provide stage-appropriate leadership support",
                "Facilitate team building activities",
                "Address conflicts constructively",
                "Celebrate team milestones and achievements",
            ],
            learn_more=[
                "Team Development Assessment Tool",
                "Stage-Appropriate Leadership Guide",
                "Conflict Resolution Framework",
            ],
            key_metrics=["Team cohesion", "Conflict resolution", "Goal achievement"],
            success_indicators=["Better team dynamics", "Reduced conflicts", "Improved outcomes"],
            risk_factors=["Stage regression", "Leadership gaps", "External pressures"],
            target_value="performing",
        ),
        RecommendationTemplate(
            key="innovation_culture",
            title="Innovation Culture Building",
            science=(
                "Research shows organizations with strong innovation cultures experience 3x higher "
                "employee engagement and 2.5x faster time-to-market."
            ),
            implementation=[
                "Create innovation time allocation (20% time)",
                "Establish idea generation and testing processes",
                "Reward experimentation and learning from failure",
                "Build cross-functional innovation teams",
                "Implement rapid prototyping and feedback loops",
            ],
            learn_more=[
                "Innovation Culture Assessment",
                "Design Thinking Implementation",
                "Rapid Prototyping Methods",
            ],
            key_metrics=["Idea generation", "Experimentation rate", "Innovation adoption"],
            success_indicators=["More new ideas proposed", "Increased experimentation", "Faster innovation cycles"],
            risk_factors=["Resource constraints", "Risk aversion", "Time investment"],
            target_value="40-50%",
            improvement="+15-25%",
            measure=lambda m: ("Increase innovation behavior", _pct(m.innovation_behavior)),
        ),
        RecommendationTemplate(
            key="collaboration_enhancement",
            title="Collaboration Enhancement Framework",
            science=(
                "Stanford research shows teams with high collaboration scores are 2.5x more likely to "
                "achieve their goals and show 40% higher satisfaction."
            ),
            implementation=[
                "Assess current collaboration patterns",
                "Identify collaboration barriers and facilitators",
                "Implement collaborative tools and processes",
                "Create cross-functional project teams",
                "Establish collaboration metrics and feedback",
            ],
            learn_more=[
                "Collaboration Assessment Tool",
                "Cross-functional Team Building",
                "Collaborative Leadership Practices",
            ],
            key_metrics=["Cross-functional projects", "Team coordination", "Knowledge sharing"],
            success_indicators=["More cross-team projects", "Better coordination", "Enhanced knowledge sharing"],
            risk_factors=["Scheduling conflicts", "Communication overhead", "Role clarity"],
            target_value="50-60%",
            improvement="+15-25%",
            measure=lambda m: ("Increase collaboration index", _pct(m.collaboration_index)),
        ),
    ]
}

PRIORITY_ORDER = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}

# (template, id, priority, impact, timeframe, condition)
METRIC_RULES: list[tuple[str, str, Priority, str, str, Callable[[TeamHealthMetrics], bool]]] = [
    (
        "psychological_safety", "psychological-safety-enhancement", Priority.HIGH,
        "High - Can improve team performance by 50%", "2-3 months",
        lambda m: m.psychological_safety < 0.6,
    ),
    (
        "decision_delegation", "decision-delegation-framework", Priority.HIGH,
        "High - Can improve decision speed by 2x", "1-2 months",
        lambda m: m.centralization > 0.7,
    ),
    (
        "communication_optimization", "communication-optimization", Priority.MEDIUM,
        "Medium - Can improve performance by 40%", "3-4 months",
        lambda m: m.network_density < 0.4,
    ),
    (
        "burnout_prevention", "burnout-prevention", Priority.HIGH,
        "Critical - Can prevent 60% of turnover", "Immediate - 2 weeks",
        lambda m: m.burnout_risk > 0.5,
    ),
    (
        "team_development", "team-development-optimization", Priority.MEDIUM,
        "Medium - Can improve outcomes by 45%", "2-3 months",
        lambda m: m.team_stage in (TeamStage.STORMING, TeamStage.FORMING),
    ),
    (
        "innovation_culture", "innovation-culture-building", Priority.MEDIUM,
        "High - Can improve engagement by 3x", "4-6 months",
        lambda m: m.innovation_behavior < 0.3,
    ),
    (
        "collaboration_enhancement", "collaboration-enhancement", Priority.MEDIUM,
        "Medium - Can improve goal achievement by 2.5x", "3-4 months",
        lambda m: m.collaboration_index < 0.4,
    ),
]

# Critical insight category -> (template, id prefix, impact, timeframe)
INSIGHT_RULES: dict[InsightCategory, tuple[str, str, str, str]] = {
    InsightCategory.COMMUNICATION: (
        "communication_optimization", "communication",
        "High - Addresses critical communication issue", "1-2 months",
    ),
    InsightCategory.BURNOUT: (
        "burnout_prevention", "burnout",
        "Critical - Addresses immediate burnout risk", "Immediate - 1 week",
    ),
}


def _team_context(template: RecommendationTemplate, metrics: TeamHealthMetrics, context: RecommendationContext) -> str:
    team = context.team_name
    channels = ", ".join(context.channel_names[:3])
    channel_phrase = f" across {len(context.channel_names)} channels" if context.channel_names else ""

    if template.key == "psychological_safety":
        return (
            f"{team} has {context.member_count} members{channel_phrase}. Psychological safety is crucial "
            "for innovation and knowledge sharing, and current help-seeking behavior indicates room for improvement."
        )
    if template.key == "decision_delegation":
        return (
            f"With {context.admin_count} administrators and {context.member_count - context.admin_count} "
            "regular members, clear decision rights will prevent bottlenecks and improve team autonomy. "
            "Current centralization patterns suggest decision-making is concentrated."
        )
    if template.key == "communication_optimization":
        where = f" ({channels})" if channels else ""
        return (
            f"Optimizing communication{channel_phrase}{where} will improve information flow and reduce silos."
        )
    if template.key == "burnout_prevention":
        return (
            f"Monitoring after-hours activity across {context.member_count} members will help prevent "
            "burnout and maintain work-life balance. Current patterns show potential stress indicators."
        )
    if template.key == "innovation_culture":
        return (
            f"{context.active_members} of {context.member_count} members were active this week. "
            "Current innovation behavior suggests untapped potential."
        )
    if template.key == "collaboration_enhancement":
        return (
            f"Collaboration optimization{channel_phrase} will enhance project outcomes and team cohesion."
        )
    if template.key == "team_development":
        return (
            f"{team} is currently in the '{metrics.team_stage.value}' stage. Appropriate leadership support "
            "will accelerate progression to high-performing status."
        )
    return ""


def analyze_recommendation_impact(
    recommendation: Recommendation,
    metrics: TeamHealthMetrics,
) -> RecommendationImpact:
    """Expected effect, measures and current/target values for a recommendation."""
    template = TEMPLATES.get(recommendation.template)
    if template is None:
        return RecommendationImpact()

    if template.key == "team_development":
        current = metrics.team_stage.value
        expected = f"Progress team development from '{current}' to 'performing' stage"
    elif template.measure is not None:
        label, current = template.measure(metrics)
        expected = f"{label} from {current} to {template.target_value}"
    else:
        current, expected = "", ""

    return RecommendationImpact(
        expected_improvement=expected,
        key_metrics=list(template.key_metrics),
        success_indicators=list(template.success_indicators),
        risk_factors=list(template.risk_factors),
        current_value=current,
        target_value=template.target_value,
        improvement=template.improvement,
    )


def _build(
    template_key: str,
    rec_id: str,
    priority: Priority,
    impact: str,
    timeframe: str,
    metrics: TeamHealthMetrics,
    context: RecommendationContext,
) -> Recommendation:
    template = TEMPLATES[template_key]
    recommendation = Recommendation(
        id=rec_id,
        template=template.key,
        title=template.title,
        science=template.science,
        implementation=list(template.implementation),
        learn_more=list(template.learn_more),
        priority=priority,
        impact=impact,
        timeframe=timeframe,
        team_context=_team_context(template, metrics, context),
    )
    impact_analysis = analyze_recommendation_impact(recommendation, metrics)
    return recommendation.model_copy(update={
        "expected_improvement": impact_analysis.expected_improvement,
        "key_metrics": impact_analysis.key_metrics,
        "success_indicators": impact_analysis.success_indicators,
        "risk_factors": impact_analysis.risk_factors,
    })


def generate_recommendations(
    metrics: TeamHealthMetrics,
    insights: list[AnalyticsInsight],
    context: RecommendationContext | None = None,
    limit: int = 3,
) -> list[Recommendation]:
    """Select, prioritise and truncate recommendations for one week.

    Metric thresholds pick templates first. Each critical communication or
    burnout insight then injects a high-priority recommendation; a template
    that is already selected is promoted to high priority instead of repeated.
    Critical insights of other categories add nothing.
    Falls back to a general team health recommendation when nothing applies.
    """
    context = context or RecommendationContext()
    recommendations: list[Recommendation] = []

    for template_key, rec_id, priority, impact, timeframe, condition in METRIC_RULES:
        if condition(metrics):
            recommendations.append(_build(template_key, rec_id, priority, impact, timeframe, metrics, context))

    for insight in insights:
        if insight.severity != InsightSeverity.CRITICAL or insight.category not in INSIGHT_RULES:
            continue

        template_key, prefix, impact, timeframe = INSIGHT_RULES[insight.category]
        existing = next((i for i, r in enumerate(recommendations) if r.template == template_key), None)
        if existing is None:
            recommendations.append(_build(
                template_key, f"{prefix}-{insight.id}", Priority.HIGH, impact, timeframe, metrics, context,
            ))
        elif recommendations[existing].priority != Priority.HIGH:
            recommendations[existing] = recommendations[existing].model_copy(update={
                "priority": Priority.HIGH,
                "impact": impact,
                "timeframe": timeframe,
            })

    if not recommendations:
        recommendations.append(_build(
            "psychological_safety", "general-team-health", Priority.MEDIUM,
            "Medium - Proactive team health improvement", "2-3 months", metrics, context,
        ))

    ranked = sorted(recommendations, key=lambda r: PRIORITY_ORDER[r.priority], reverse=True)

    logger.debug(
        "Generated recommendations",
        week_id=context.week_id,
        candidates=len(recommendations),
        returned=min(limit, len(ranked)),
    )

    return ranked[:limit]


def generate_activity_recommendations(activity: WeeklyActivity) -> list[ActivityRecommendation]:
    """Quick actions driven by reply speed, participation balance and ops alerts."""
    recommendations = []

    reply_hours = activity.avg_first_reply_hours
    if reply_hours is not None and reply_hours > SLOW_FIRST_REPLY_HOURS:
        recommendations.append(ActivityRecommendation(
            id="accelerate-replies",
            title="Accelerate Replies",
            action=(
                "Establish a responder rotation and define a fast-lane thread with a "
                "4-hour SLA in key channels."
            ),
        ))

    if activity.gini_coefficient >= CONCENTRATED_PARTICIPATION_GINI:
        recommendations.append(ActivityRecommendation(
            id="broaden-participation",
            title="Broaden Participation",
            action="Invite short rotating updates from more team members to distribute voice across channels.",
        ))

    if any(alert.source == "aws" for alert in activity.ops_alerts):
        recommendations.append(ActivityRecommendation(
            id="review-cloud-spend",
            title="Review Cloud Spend",
            action=(
                "Investigate AWS budget alerts and adjust thresholds or autoscaling policies; "
                "notify finance if overspending persists."
            ),
        ))

    if not recommendations:
        recommendations.append(ActivityRecommendation(
            id="keep-momentum",
            title="Keep Momentum",
            action="Current signals look healthy. Continue regular updates and timely replies.",
        ))

    return recommendations


def research_highlights(activity: WeeklyActivity) -> list[ResearchHighlight]:
    highlights = []

    if activity.by_channel:
        busiest = min(activity.by_channel.items(), key=lambda item: (-item[1], item[0]))[0]
        highlights.append(ResearchHighlight(
            title="Busiest Channel",
            summary=f"{busiest} had the highest message volume this week.",
        ))

    if activity.ops_alerts:
        highlights.append(ResearchHighlight(
            title="Ops Alerts",
            summary=f"Detected {len(activity.ops_alerts)} operations-related alerts across channels.",
        ))

    return highlights
