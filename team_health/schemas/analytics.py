"""Analytics schemas."""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from team_health.schemas.slack import Channel, Message, OpsAlert, User

METRICS_SCHEMA_VERSION = 1


class TeamStage(str, Enum):
    """Tuckman team development stages."""

    FORMING = "forming"
    STORMING = "storming"
    NORMING = "norming"
    PERFORMING = "performing"
    ADJOURNING = "adjourning"


class RiskLevel(str, Enum):
    """Overall team risk level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class InsightTrend(str, Enum):
    """Direction an insight points in."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    STABLE = "stable"


class InsightSeverity(str, Enum):
    """Insight severity."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class InsightCategory(str, Enum):
    """Insight categories."""

    COMMUNICATION = "communication"
    BURNOUT = "burnout"
    COLLABORATION = "collaboration"
    LEADERSHIP = "leadership"
    PERFORMANCE = "performance"


class Priority(str, Enum):
    """Recommendation priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


Ratio = Annotated[float, Field(ge=0, le=1)]


class TeamHealthMetrics(BaseModel):
    """Schema for one week of team health metrics.

    Every ratio is normalized to [0, 1]; ``response_time`` is in hours and
    ``message_frequency`` in messages per user.
    """

    model_config = ConfigDict(frozen=True)

    schema_version: int = METRICS_SCHEMA_VERSION

    # Hackman's conditions
    real_team: Ratio = 0.0
    compelling_direction: Ratio = 0.0
    enabling_structure: Ratio = 0.0
    supportive_context: Ratio = 0.0
    expert_coaching: Ratio = 0.0

    # Psychological safety
    psychological_safety: Ratio = 0.0
    help_seeking: Ratio = 0.0
    error_reporting: Ratio = 0.0
    innovation_behavior: Ratio = 0.0

    # Communication patterns
    response_time: float = Field(default=0.0, ge=0)
    message_frequency: float = Field(default=0.0, ge=0)
    collaboration_index: Ratio = 0.0
    network_density: Ratio = 0.0
    centralization: Ratio = 0.0

    # Burnout indicators
    burnout_risk: Ratio = 0.0
    weekend_activity: Ratio = 0.0
    after_hours_activity: Ratio = 0.0
    stress_indicators: Ratio = 0.0

    team_stage: TeamStage = TeamStage.FORMING
    early_warnings: list[str] = Field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.LOW


class AnalyticsInsight(BaseModel):
    """Schema for a derived narrative insight."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    metric: str
    trend: InsightTrend
    severity: InsightSeverity
    category: InsightCategory
    tool: str = "slack"
    confidence: float = Field(ge=0, le=1)
    recommendations: list[str] = Field(default_factory=list)


class RecommendationContext(BaseModel):
    """Team facts used to personalise recommendations."""

    model_config = ConfigDict(frozen=True)

    week_id: str | None = None
    team_name: str = "The team"
    member_count: int = 0
    admin_count: int = 0
    active_members: int = 0
    channel_names: list[str] = Field(default_factory=list)


class Recommendation(BaseModel):
    """Schema for a research-backed recommendation."""

    model_config = ConfigDict(frozen=True)

    id: str
    template: str
    title: str
    science: str
    implementation: list[str]
    learn_more: list[str] = Field(default_factory=list)
    priority: Priority
    impact: str
    timeframe: str
    team_context: str = ""
    expected_improvement: str = ""
    key_metrics: list[str] = Field(default_factory=list)
    success_indicators: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)


class RecommendationImpact(BaseModel):
    """Projected effect of acting on a recommendation."""

    model_config = ConfigDict(frozen=True)

    expected_improvement: str = ""
    key_metrics: list[str] = Field(default_factory=list)
    success_indicators: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    current_value: str = ""
    target_value: str = ""
    improvement: str = ""


class UserActivity(BaseModel):
    """Message count for one participant."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    count: int


class MentionEdge(BaseModel):
    """Directed ``<@user>`` mention count between two participants."""

    model_config = ConfigDict(frozen=True)

    from_user: str
    to_user: str
    count: int


class WeeklyActivity(BaseModel):
    """Schema for per-week participation breakdown."""

    model_config = ConfigDict(frozen=True)

    week_id: str
    period_start: datetime
    period_end: datetime
    total_messages: int = 0
    by_channel: dict[str, int] = Field(default_factory=dict)
    by_user: dict[str, int] = Field(default_factory=dict)
    active_users: int = 0
    top_users: list[UserActivity] = Field(default_factory=list)
    gini_coefficient: float = Field(default=0.0, ge=0, le=1)
    avg_first_reply_hours: float | None = None
    mention_edges: list[MentionEdge] = Field(default_factory=list)
    ops_alerts: list[OpsAlert] = Field(default_factory=list)


class ActivityRecommendation(BaseModel):
    """Lightweight action suggested by weekly activity signals."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    action: str


class ResearchHighlight(BaseModel):
    """One-line highlight of a week for the research summary."""

    model_config = ConfigDict(frozen=True)

    title: str
    summary: str


class WeeklyAnalysis(BaseModel):
    """Schema for the full analysis of one week."""

    model_config = ConfigDict(frozen=True)

    week_id: str
    metrics: TeamHealthMetrics
    insights: list[AnalyticsInsight]
    recommendations: list[Recommendation]
    activity: WeeklyActivity
    activity_recommendations: list[ActivityRecommendation] = Field(default_factory=list)
    highlights: list[ResearchHighlight] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    """Schema for analysing caller-supplied records."""

    week_id: str
    messages: list[Message] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)
    channels: list[Channel] = Field(default_factory=list)
    include_activity_insights: bool = False
