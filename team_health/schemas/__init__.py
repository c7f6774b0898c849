"""Pydantic schemas for export records and analytics results."""

from team_health.schemas.analytics import (
    ActivityRecommendation,
    AnalyticsInsight,
    AnalyzeRequest,
    InsightCategory,
    InsightSeverity,
    InsightTrend,
    MentionEdge,
    Priority,
    Recommendation,
    RecommendationContext,
    RecommendationImpact,
    ResearchHighlight,
    RiskLevel,
    TeamHealthMetrics,
    TeamStage,
    UserActivity,
    WeeklyActivity,
    WeeklyAnalysis,
)
from team_health.schemas.slack import Channel, Message, OpsAlert, User, WorkspaceData

__all__ = [
    # Slack export
    "Channel",
    "Message",
    "OpsAlert",
    "User",
    "WorkspaceData",
    # Metrics
    "RiskLevel",
    "TeamHealthMetrics",
    "TeamStage",
    # Insights
    "AnalyticsInsight",
    "InsightCategory",
    "InsightSeverity",
    "InsightTrend",
    # Recommendations
    "ActivityRecommendation",
    "Priority",
    "Recommendation",
    "RecommendationContext",
    "RecommendationImpact",
    "ResearchHighlight",
    # Weekly results
    "AnalyzeRequest",
    "MentionEdge",
    "UserActivity",
    "WeeklyActivity",
    "WeeklyAnalysis",
]
