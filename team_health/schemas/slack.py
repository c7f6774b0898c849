"""Normalized Slack export records consumed by the analytics core."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SLACKBOT_USER_ID = "USLACKBOT"


def parse_timestamp(value: Any) -> datetime | None:
    """Resolve a timestamp to an aware UTC datetime.

    Accepts datetimes, epoch seconds, Slack ``ts`` strings
    ("1751937341.580579") and ISO-8601 strings. Returns None for anything
    that cannot be resolved; naive datetimes are taken as UTC.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return parse_timestamp(float(text))
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parse_timestamp(parsed)

    return None


class User(BaseModel):
    """Workspace participant."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = ""
    is_admin: bool = False
    is_bot: bool = False
    is_deleted: bool = False
    title: str | None = None
    email: str | None = None

    @property
    def is_human(self) -> bool:
        """Bots, Slackbot and deleted accounts are excluded from human metrics."""
        return not (self.is_bot or self.is_deleted or self.id == SLACKBOT_USER_ID)


class Channel(BaseModel):
    """A communication space."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    purpose: str = ""
    member_count: int = 0
    is_archived: bool = False

    @field_validator("purpose", mode="before")
    @classmethod
    def _purpose_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, dict):
            # Raw export shape: {"value": "...", "creator": "...", "last_set": 0}
            return value.get("value") or ""
        return value


class Message(BaseModel):
    """One communication event.

    Malformed input (unparseable timestamp, missing author) is kept on the
    record rather than rejected; the analytics core drops such messages.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str = ""
    channel_id: str = ""
    text: str = ""
    timestamp: datetime | None = None
    reactions: list[str] = Field(default_factory=list)
    thread_ts: str | None = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @field_validator("user_id", "channel_id", "text", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("reactions", mode="before")
    @classmethod
    def _reaction_names(cls, value: Any) -> list[str]:
        if not value:
            return []
        names = []
        for reaction in value:
            name = reaction.get("name") if isinstance(reaction, dict) else reaction
            if name and name not in names:
                names.append(name)
        return names

    @property
    def is_well_formed(self) -> bool:
        return self.timestamp is not None and bool(self.user_id)


class OpsAlert(BaseModel):
    """Operational signal detected from a file attachment in the export."""

    model_config = ConfigDict(frozen=True)

    channel: str
    ts: str
    timestamp: datetime | None = None
    summary: str
    source: Literal["aws", "integration", "bot", "unknown"] = "unknown"

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)


class WorkspaceData(BaseModel):
    """Everything an export reader produces for one workspace."""

    model_config = ConfigDict(frozen=True)

    users: list[User] = Field(default_factory=list)
    channels: list[Channel] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)
    ops_alerts: list[OpsAlert] = Field(default_factory=list)
