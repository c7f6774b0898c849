"""Ingestion of Slack workspace exports."""

from team_health.pipelines.ingestion.base import BaseExportReader, IngestionResult
from team_health.pipelines.ingestion.slack_export import FilesystemExportReader, HttpExportReader

__all__ = ["BaseExportReader", "FilesystemExportReader", "HttpExportReader", "IngestionResult"]
