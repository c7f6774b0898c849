"""Team health analytics core: week filter, metrics, insights and recommendations."""

from team_health.analysis.insights import generate_activity_insights, generate_insights, generate_signal_insights
from team_health.analysis.metrics import MetricsCalculator, compute_metrics
from team_health.analysis.participation import gini_coefficient, summarize_week
from team_health.analysis.recommendations import (
    analyze_recommendation_impact,
    generate_activity_recommendations,
    generate_recommendations,
    research_highlights,
)
from team_health.analysis.weeks import available_weeks, filter_to_week, week_bounds, week_id_for

__all__ = [
    "MetricsCalculator",
    "analyze_recommendation_impact",
    "available_weeks",
    "compute_metrics",
    "filter_to_week",
    "generate_activity_insights",
    "generate_activity_recommendations",
    "generate_insights",
    "generate_recommendations",
    "generate_signal_insights",
    "gini_coefficient",
    "research_highlights",
    "summarize_week",
    "week_bounds",
    "week_id_for",
]
