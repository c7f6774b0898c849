"""Team analysis service wiring the export reader to the analytics core."""

import asyncio
from collections.abc import Callable, Iterable

import structlog

from team_health.analysis.insights import (
    generate_activity_insights,
    generate_insights,
    generate_signal_insights,
)
from team_health.analysis.metrics import compute_metrics, prepare_records
from team_health.analysis.participation import summarize_week
from team_health.analysis.recommendations import (
    generate_activity_recommendations,
    generate_recommendations,
    research_highlights,
)
from team_health.analysis.weeks import available_weeks, filter_to_week, parse_week_id
from team_health.config import Settings, settings
from team_health.exceptions import ExportNotConfiguredError
from team_health.pipelines.ingestion import (
    BaseExportReader,
    FilesystemExportReader,
    HttpExportReader,
    IngestionResult,
)
from team_health.schemas.analytics import RecommendationContext, WeeklyAnalysis
from team_health.schemas.slack import Channel, Message, OpsAlert, User, WorkspaceData

logger = structlog.get_logger()


def build_reader(config: Settings) -> BaseExportReader:
    """Create the export reader selected by configuration.

    Raises:
        ExportNotConfiguredError: if the selected source has no location set
    """
    if config.slack_export_source == "http":
        if not config.slack_export_url:
            raise ExportNotConfiguredError("SLACK_EXPORT_URL is not set")
        return HttpExportReader(
            base_url=config.slack_export_url,
            channel_dates=config.slack_export_channel_dates,
            timeout=config.slack_export_http_timeout,
        )

    if config.slack_export_path is None:
        raise ExportNotConfiguredError("SLACK_EXPORT_PATH is not set")
    return FilesystemExportReader(config.slack_export_path)


def analyze_records(
    messages: Iterable[Message],
    users: Iterable[User],
    channels: Iterable[Channel],
    week_id: str,
    ops_alerts: Iterable[OpsAlert] = (),
    include_activity_insights: bool = False,
    max_recommendations: int = 3,
    top_users_limit: int = 5,
) -> WeeklyAnalysis:
    """Run the full analysis for one week over records the caller holds.

    Recommendations are derived from the metric insights only, so they do not
    change with ``include_activity_insights``. Activity recommendations and
    highlights come from the weekly activity summary.

    Raises:
        InvalidWeekIdentifier: if ``week_id`` is malformed
    """
    messages, users, channels = list(messages), list(users), list(channels)

    week_messages = filter_to_week(messages, week_id)
    metrics = compute_metrics(week_messages, users, channels)
    insights = generate_insights(metrics, week_messages)
    activity = summarize_week(
        messages, users, channels, week_id,
        ops_alerts=ops_alerts,
        top_users_limit=top_users_limit,
    )

    _, human_users, active_channels = prepare_records(week_messages, users, channels)
    context = RecommendationContext(
        week_id=week_id,
        member_count=len(human_users),
        admin_count=sum(1 for user in human_users if user.is_admin),
        active_members=activity.active_users,
        channel_names=[channel.name for channel in active_channels],
    )
    recommendations = generate_recommendations(metrics, insights, context, limit=max_recommendations)

    if include_activity_insights:
        insights = (
            insights
            + generate_activity_insights(week_messages, users, channels)
            + generate_signal_insights(activity)
        )

    logger.info(
        "Week analyzed",
        week_id=week_id,
        messages=activity.total_messages,
        insights=len(insights),
        recommendations=len(recommendations),
        risk_level=metrics.risk_level.value,
    )

    return WeeklyAnalysis(
        week_id=week_id,
        metrics=metrics,
        insights=insights,
        recommendations=recommendations,
        activity=activity,
        activity_recommendations=generate_activity_recommendations(activity),
        highlights=research_highlights(activity),
    )


class TeamAnalysisService:
    """Loads a Slack export once and answers weekly analysis queries.

    The loaded workspace is cached until ``reload()``; concurrent first
    requests share a single load.
    """

    def __init__(
        self,
        reader_factory: Callable[[], BaseExportReader],
        max_recommendations: int = 3,
        top_users_limit: int = 5,
    ):
        self.reader_factory = reader_factory
        self.max_recommendations = max_recommendations
        self.top_users_limit = top_users_limit
        self._workspace: WorkspaceData | None = None
        self._last_ingestion: IngestionResult | None = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._workspace is not None

    @property
    def last_ingestion(self) -> IngestionResult | None:
        return self._last_ingestion

    async def load_workspace(self) -> WorkspaceData:
        """Return the cached workspace, reading the export on first use.

        Raises:
            ExportError: if the export is not configured or cannot be read
        """
        if self._workspace is not None:
            return self._workspace

        async with self._lock:
            if self._workspace is None:
                reader = self.reader_factory()
                self._workspace, self._last_ingestion = await reader.load()
        return self._workspace

    async def reload(self) -> IngestionResult | None:
        """Drop the cached workspace and read the export again."""
        async with self._lock:
            self._workspace = None
        logger.info("Workspace cache cleared")
        await self.load_workspace()
        return self._last_ingestion

    async def available_weeks(self) -> list[str]:
        workspace = await self.load_workspace()
        return available_weeks(workspace.messages)

    async def analyze_week(self, week_id: str, include_activity_insights: bool = False) -> WeeklyAnalysis:
        """Analyze one week of the loaded export.

        The week id is validated before the export is touched.
        """
        parse_week_id(week_id)
        workspace = await self.load_workspace()
        return analyze_records(
            workspace.messages,
            workspace.users,
            workspace.channels,
            week_id,
            ops_alerts=workspace.ops_alerts,
            include_activity_insights=include_activity_insights,
            max_recommendations=self.max_recommendations,
            top_users_limit=self.top_users_limit,
        )


# Singleton instance
team_analysis_service = TeamAnalysisService(
    reader_factory=lambda: build_reader(settings),
    max_recommendations=settings.max_recommendations,
    top_users_limit=settings.top_users_limit,
)
