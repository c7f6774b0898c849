"""Analytics API endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Query

from team_health.analysis.recommendations import RESEARCH_FRAMEWORKS
from team_health.analysis.service import analyze_records, team_analysis_service
from team_health.config import settings
from team_health.exceptions import ExportError, InvalidWeekIdentifier
from team_health.schemas.analytics import (
    AnalyzeRequest,
    TeamHealthMetrics,
    WeeklyActivity,
    WeeklyAnalysis,
)

logger = structlog.get_logger()

router = APIRouter()


async def _analyze(week_id: str, include_activity: bool = False) -> WeeklyAnalysis:
    try:
        return await team_analysis_service.analyze_week(week_id, include_activity_insights=include_activity)
    except InvalidWeekIdentifier as e:
        logger.warning("Invalid week identifier", week_id=week_id)
        raise HTTPException(status_code=422, detail=str(e))
    except ExportError as e:
        logger.error("Slack export unavailable", week_id=week_id, source=e.source, error=str(e))
        raise HTTPException(status_code=503, detail="Slack export is not available")


@router.get("/weeks")
async def list_weeks() -> dict[str, Any]:
    """List weeks that contain messages, most recent first."""
    try:
        weeks = await team_analysis_service.available_weeks()
    except ExportError as e:
        logger.error("Slack export unavailable", source=e.source, error=str(e))
        raise HTTPException(status_code=503, detail="Slack export is not available")

    return {"weeks": weeks}


@router.get("/weeks/{week_id}", response_model=WeeklyAnalysis)
async def get_week_analysis(
    week_id: str,
    include_activity: bool = Query(default=False),
) -> WeeklyAnalysis:
    """Get the full analysis for a week."""
    return await _analyze(week_id, include_activity)


@router.get("/weeks/{week_id}/health", response_model=TeamHealthMetrics)
async def get_week_health(week_id: str) -> TeamHealthMetrics:
    """Get team health metrics for a week."""
    analysis = await _analyze(week_id)
    return analysis.metrics


@router.get("/weeks/{week_id}/insights")
async def get_week_insights(
    week_id: str,
    include_activity: bool = Query(default=False),
) -> dict[str, Any]:
    """Get insights for a week."""
    analysis = await _analyze(week_id, include_activity)
    return {
        "week_id": week_id,
        "insights": [insight.model_dump(mode="json") for insight in analysis.insights],
    }


@router.get("/weeks/{week_id}/recommendations")
async def get_week_recommendations(week_id: str) -> dict[str, Any]:
    """Get prioritised recommendations for a week."""
    analysis = await _analyze(week_id)
    return {
        "week_id": week_id,
        "recommendations": [rec.model_dump(mode="json") for rec in analysis.recommendations],
        "activity_recommendations": [
            rec.model_dump(mode="json") for rec in analysis.activity_recommendations
        ],
    }


@router.get("/weeks/{week_id}/activity", response_model=WeeklyActivity)
async def get_week_activity(week_id: str) -> WeeklyActivity:
    """Get the participation breakdown for a week."""
    analysis = await _analyze(week_id)
    return analysis.activity


@router.get("/weeks/{week_id}/highlights")
async def get_week_highlights(week_id: str) -> dict[str, Any]:
    """Get research summary highlights for a week."""
    analysis = await _analyze(week_id)
    return {
        "week_id": week_id,
        "highlights": [item.model_dump(mode="json") for item in analysis.highlights],
    }


@router.get("/frameworks")
async def list_frameworks() -> dict[str, Any]:
    """List the research frameworks behind the metrics."""
    return {"frameworks": RESEARCH_FRAMEWORKS}


@router.post("/analyze", response_model=WeeklyAnalysis)
async def analyze(request: AnalyzeRequest) -> WeeklyAnalysis:
    """Analyze caller-supplied messages, users and channels."""
    try:
        return analyze_records(
            request.messages,
            request.users,
            request.channels,
            request.week_id,
            include_activity_insights=request.include_activity_insights,
            max_recommendations=settings.max_recommendations,
            top_users_limit=settings.top_users_limit,
        )
    except InvalidWeekIdentifier as e:
        logger.warning("Invalid week identifier", week_id=request.week_id)
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/reload")
async def reload_export() -> dict[str, Any]:
    """Drop the cached export and read it again."""
    try:
        result = await team_analysis_service.reload()
    except ExportError as e:
        logger.error("Slack export reload failed", source=e.source, error=str(e))
        raise HTTPException(status_code=503, detail="Slack export is not available")

    return {
        "status": "reloaded",
        "ingestion": result.to_dict() if result else None,
    }
