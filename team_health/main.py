"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from team_health.analysis.service import team_analysis_service
from team_health.api.v1 import analytics
from team_health.config import settings
from team_health.exceptions import ExportError

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info(
        "Starting Team Health Analytics",
        version=settings.app_version,
        export_source=settings.slack_export_source,
    )

    yield

    logger.info("Shutting down Team Health Analytics")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Weekly team health analytics, insights and recommendations from Slack workspace exports",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(analytics.router, prefix=f"{settings.api_prefix}/analytics", tags=["Analytics"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/ready")
async def readiness_check():
    """Readiness check endpoint for Kubernetes."""
    checks = {}

    # Check the Slack export
    try:
        workspace = await team_analysis_service.load_workspace()
        checks["slack_export"] = "ok"
        checks["messages"] = len(workspace.messages)
    except ExportError as e:
        checks["slack_export"] = f"error: {str(e)}"

    return {
        "status": "ready" if checks["slack_export"] == "ok" else "degraded",
        "checks": checks,
    }
