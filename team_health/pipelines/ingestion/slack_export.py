"""Slack export readers for a local directory and a static HTTP host."""

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import structlog

from team_health.exceptions import ExportNotFoundError, ExportReadError
from team_health.pipelines.ingestion.base import BaseExportReader

logger = structlog.get_logger()


class FilesystemExportReader(BaseExportReader):
    """Reads an unzipped Slack export directory.

    Layout: ``users.json``, ``channels.json`` and one directory per channel
    holding ``YYYY-MM-DD.json`` day files.
    """

    def __init__(self, export_path: str | Path):
        super().__init__("slack_export_filesystem")
        self.export_path = Path(export_path)

    async def fetch_json(self, relative_path: str) -> Any:
        # Disk reads run off the event loop
        return await asyncio.get_event_loop().run_in_executor(
            None, self._read_json, self.export_path / relative_path
        )

    @staticmethod
    def _read_json(path: Path) -> Any:
        if not path.is_file():
            raise ExportNotFoundError(f"Export file not found: {path}", source=str(path))

        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ExportReadError(f"Could not read {path}: {e}", source=str(path)) from e

    async def list_day_files(self) -> dict[str, list[str]]:
        if not self.export_path.is_dir():
            raise ExportNotFoundError(
                f"Export directory not found: {self.export_path}",
                source=str(self.export_path),
            )

        return {
            entry.name: sorted(day.stem for day in entry.glob("*.json"))
            for entry in sorted(self.export_path.iterdir())
            if entry.is_dir() and not entry.name.startswith(".")
        }


class HttpExportReader(BaseExportReader):
    """Reads a Slack export served over HTTP.

    HTTP offers no directory listing, so the day files to fetch for each
    channel are passed in explicitly.
    """

    def __init__(
        self,
        base_url: str,
        channel_dates: dict[str, list[str]] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__("slack_export_http")
        self.base_url = base_url.rstrip("/")
        self.channel_dates = channel_dates or {}
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def load(self):
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            self._client = client
            try:
                return await super().load()
            finally:
                self._client = None

    async def fetch_json(self, relative_path: str) -> Any:
        if self._client is None:
            raise RuntimeError("HttpExportReader.fetch_json called outside load()")

        url = f"{self.base_url}/{relative_path}"
        try:
            response = await self._client.get(f"/{relative_path}")
        except httpx.HTTPError as e:
            raise ExportReadError(f"Request for {url} failed: {e}", source=url) from e

        if response.status_code == 404:
            raise ExportNotFoundError(f"Export file not found: {url}", source=url)
        if response.status_code >= 300:
            logger.warning("Export request failed", url=url, status_code=response.status_code)
            raise ExportReadError(f"Export request for {url} returned {response.status_code}", source=url)

        try:
            return response.json()
        except ValueError as e:
            raise ExportReadError(f"Invalid JSON at {url}: {e}", source=url) from e

    async def list_day_files(self) -> dict[str, list[str]]:
        return {channel: sorted(days) for channel, days in sorted(self.channel_dates.items())}
