"""Base class for Slack export readers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

import structlog

from team_health.exceptions import ExportError, ExportReadError
from team_health.schemas.slack import Channel, Message, OpsAlert, User, WorkspaceData

logger = structlog.get_logger()

# System events that are not human communication
HUMAN_EXCLUDED_SUBTYPES = frozenset({
    "channel_join",
    "channel_leave",
    "channel_purpose",
    "channel_topic",
    "channel_name",
    "message_deleted",
    "bot_message",
})


@dataclass
class IngestionResult:
    """Result of an export load."""

    source: str
    started_at: datetime
    completed_at: datetime | None = None
    items_processed: int = 0
    items_created: int = 0
    items_skipped: int = 0
    files_processed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        """Calculate duration in seconds."""
        if not self.completed_at:
            return 0
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def success_rate(self) -> float:
        """Share of day files read without error."""
        if self.files_processed == 0:
            return 1.0
        return 1 - (len(self.errors) / self.files_processed)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source": self.source,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "items_processed": self.items_processed,
            "items_created": self.items_created,
            "items_skipped": self.items_skipped,
            "files_processed": self.files_processed,
            "error_count": len(self.errors),
            "success_rate": self.success_rate,
        }


def detect_ops_alert(file: dict[str, Any]) -> str:
    """Classify a file attachment as an operational signal source."""
    haystack = " ".join(
        str(file.get(key) or "") for key in ("name", "pretty_type", "mimetype", "subject")
    ).lower()
    if "aws" in haystack or "cost alert" in haystack:
        return "aws"
    if file.get("bot_id"):
        return "bot"
    if "integration" in haystack:
        return "integration"
    return "unknown"


def normalize_user(raw: dict[str, Any]) -> User | None:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None

    profile = raw.get("profile") or {}
    return User(
        id=raw["id"],
        display_name=(
            profile.get("display_name")
            or profile.get("real_name")
            or raw.get("real_name")
            or raw.get("name")
            or ""
        ),
        is_admin=bool(raw.get("is_admin") or raw.get("is_owner")),
        is_bot=bool(raw.get("is_bot")),
        is_deleted=bool(raw.get("deleted")),
        title=profile.get("title") or None,
        email=profile.get("email") or None,
    )


def normalize_channel(raw: dict[str, Any]) -> Channel | None:
    if not isinstance(raw, dict) or not raw.get("id") or not raw.get("name"):
        return None

    return Channel(
        id=raw["id"],
        name=raw["name"],
        purpose=raw.get("purpose"),
        member_count=len(raw.get("members") or []),
        is_archived=bool(raw.get("is_archived")),
    )


def normalize_message(raw: dict[str, Any], channel_id: str) -> Message | None:
    """Convert a raw export event into a ``Message``.

    Returns None for system events, bot posts and events without an author
    or timestamp.
    """
    if not isinstance(raw, dict):
        return None
    if raw.get("type", "message") != "message":
        return None
    if raw.get("subtype") in HUMAN_EXCLUDED_SUBTYPES or raw.get("bot_id"):
        return None
    if not raw.get("user") or not raw.get("ts"):
        return None

    message = Message(
        id=raw.get("client_msg_id") or f"{channel_id}-{raw['ts']}",
        user_id=raw["user"],
        channel_id=channel_id,
        text=raw.get("text") or "",
        timestamp=raw["ts"],
        reactions=raw.get("reactions") or [],
        thread_ts=raw.get("thread_ts"),
    )
    return message if message.is_well_formed else None


class BaseExportReader(ABC):
    """Base class for Slack export readers.

    Each reader:
    1. Fetches users.json and channels.json
    2. Fetches every channel day file it knows about
    3. Normalizes raw events to our schema, dropping non-human traffic
    4. Records file attachments as operational alerts
    """

    def __init__(self, source_name: str):
        self.source_name = source_name

    @abstractmethod
    async def fetch_json(self, relative_path: str) -> Any:
        """Fetch and decode one JSON document from the export.

        Raises:
            ExportNotFoundError: if the document does not exist
            ExportReadError: if it exists but cannot be read or decoded
        """
        pass

    @abstractmethod
    async def list_day_files(self) -> dict[str, list[str]]:
        """Map channel name to the ``YYYY-MM-DD`` day files available for it."""
        pass

    async def _fetch_list(self, relative_path: str) -> list[Any]:
        data = await self.fetch_json(relative_path)
        if not isinstance(data, list):
            raise ExportReadError(f"Expected a JSON array in {relative_path}", source=relative_path)
        return data

    async def load(self) -> tuple[WorkspaceData, IngestionResult]:
        """Read the whole export.

        Missing ``users.json`` or ``channels.json`` propagate as
        ``ExportNotFoundError``; unreadable day files are logged and skipped.
        """
        result = IngestionResult(
            source=self.source_name,
            started_at=datetime.now(timezone.utc),
        )

        logger.info("Starting export load", source=self.source_name)

        users = [u for u in map(normalize_user, await self._fetch_list("users.json")) if u]
        channels = [c for c in map(normalize_channel, await self._fetch_list("channels.json")) if c]

        human_ids = {user.id for user in users if user.is_human}
        channels_by_name = {channel.name: channel for channel in channels}

        messages: list[Message] = []
        ops_alerts: list[OpsAlert] = []

        for channel_name, days in (await self.list_day_files()).items():
            channel = channels_by_name.get(channel_name)

            for day in days:
                try:
                    date.fromisoformat(day)
                except ValueError:
                    logger.debug("Skipping non-day file", channel=channel_name, file=day)
                    continue

                path = f"{channel_name}/{day}.json"
                result.files_processed += 1
                try:
                    raw_events = await self._fetch_list(path)
                except ExportError as e:
                    error_msg = f"Failed to read {path}: {e}"
                    result.errors.append(error_msg)
                    logger.warning(error_msg, source=self.source_name)
                    continue

                for raw in raw_events:
                    if not isinstance(raw, dict):
                        result.items_skipped += 1
                        continue
                    result.items_processed += 1

                    for file in raw.get("files") or []:
                        if isinstance(file, dict):
                            ops_alerts.append(OpsAlert(
                                channel=channel_name,
                                ts=str(raw.get("ts", "")),
                                timestamp=raw.get("ts"),
                                summary=file.get("subject") or file.get("name") or "file",
                                source=detect_ops_alert(file),
                            ))

                    message = None
                    if channel is not None and not channel.is_archived:
                        message = normalize_message(raw, channel.id)
                    if message is None or message.user_id not in human_ids:
                        result.items_skipped += 1
                        continue

                    messages.append(message)
                    result.items_created += 1

        result.completed_at = datetime.now(timezone.utc)

        logger.info(
            "Export load completed",
            source=self.source_name,
            users=len(users),
            channels=len(channels),
            processed=result.items_processed,
            created=result.items_created,
            skipped=result.items_skipped,
            errors=len(result.errors),
            duration=result.duration_seconds,
        )

        workspace = WorkspaceData(
            users=users,
            channels=channels,
            messages=messages,
            ops_alerts=ops_alerts,
        )
        return workspace, result
