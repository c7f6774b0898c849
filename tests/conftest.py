"""Pytest fixtures and configuration."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from team_health import main
from team_health.analysis.service import TeamAnalysisService
from team_health.api.v1 import analytics
from team_health.pipelines.ingestion import FilesystemExportReader
from team_health.schemas.slack import Channel, Message, User

WEEK_ID = "2025-W28"
# Monday 2025-07-14 00:00 UTC
WEEK_START = datetime(2025, 7, 14, tzinfo=timezone.utc)


def at(day: int, hour: int, minute: int = 0) -> datetime:
    """Timestamp ``day`` days after the start of 2025-W28."""
    return WEEK_START + timedelta(days=day, hours=hour, minutes=minute)


def slack_ts(moment: datetime) -> str:
    return f"{moment.timestamp():.6f}"


@pytest.fixture
def users() -> list[User]:
    """Three human members plus accounts the core must ignore."""
    return [
        User(id="U1", display_name="Ada", is_admin=True),
        User(id="U2", display_name="Grace"),
        User(id="U3", display_name="Linus"),
        User(id="B1", display_name="deploybot", is_bot=True),
        User(id="U9", display_name="Former", is_deleted=True),
        User(id="USLACKBOT", display_name="Slackbot"),
    ]


@pytest.fixture
def channels() -> list[Channel]:
    return [
        Channel(id="C1", name="general", purpose="Company-wide announcements", member_count=3),
        Channel(id="C2", name="engineering", purpose="Eng", member_count=2),
        Channel(id="C3", name="old-project", purpose="Archived work", is_archived=True),
    ]


@pytest.fixture
def make_message():
    """Factory for messages in channel C1 of 2025-W28."""
    counter = iter(range(1, 10_000))

    def _make(user_id: str, when: datetime, text: str = "status update", channel_id: str = "C1") -> Message:
        return Message(
            id=f"m{next(counter)}",
            user_id=user_id,
            channel_id=channel_id,
            text=text,
            timestamp=when,
        )

    return _make


@pytest.fixture
def weekday_messages(make_message) -> list[Message]:
    """Ten messages by three users, Monday to Friday between 10:00 and 11:00."""
    authors = ["U1", "U2", "U3", "U1", "U2", "U3", "U1", "U2", "U3", "U1"]
    return [
        make_message(author, at(i % 5, 10, 5 * i))
        for i, author in enumerate(authors)
    ]


def _write(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def export_dir(tmp_path) -> Path:
    """A small Slack export on disk covering 2025-W28."""
    root = tmp_path / "export"
    _write(root / "users.json", [
        {"id": "U1", "name": "ada", "is_admin": True, "profile": {"real_name": "Ada Lovelace", "display_name": "Ada", "title": "Lead"}},
        {"id": "U2", "name": "grace", "profile": {"real_name": "Grace Hopper"}},
        {"id": "U3", "name": "linus", "profile": {"real_name": "Linus T", "email": "linus@example.com"}},
        {"id": "B1", "name": "deploybot", "is_bot": True, "profile": {}},
        {"id": "U9", "name": "former", "deleted": True, "profile": {}},
    ])
    _write(root / "channels.json", [
        {"id": "C1", "name": "general", "members": ["U1", "U2", "U3"], "purpose": {"value": "Company-wide announcements"}},
        {"id": "C2", "name": "engineering", "members": ["U1", "U3"], "purpose": {"value": ""}},
        {"id": "C3", "name": "old-project", "members": ["U2"], "is_archived": True, "purpose": {"value": "Old"}},
    ])
    _write(root / "general" / "2025-07-14.json", [
        {"type": "message", "user": "U1", "text": "Can someone help with the deploy?", "ts": slack_ts(at(0, 10)),
         "reactions": [{"name": "eyes", "count": 1}, {"name": "eyes", "count": 1}, {"name": "thumbsup"}]},
        {"type": "message", "user": "U2", "text": "<@U1> on it, thanks!", "ts": slack_ts(at(0, 10, 30))},
        {"type": "message", "subtype": "channel_join", "user": "U3", "text": "<@U3> has joined the channel", "ts": slack_ts(at(0, 11))},
        {"type": "message", "user": "U9", "text": "last message", "ts": slack_ts(at(0, 12))},
    ])
    _write(root / "general" / "2025-07-15.json", [
        {"type": "message", "user": "U3", "text": "I have an idea to improve the build", "ts": slack_ts(at(1, 9))},
        {"type": "message", "subtype": "bot_message", "bot_id": "B1", "text": "", "ts": slack_ts(at(1, 6)),
         "files": [{"name": "AWS Budget Alert", "subject": "AWS Budget: 80% used", "bot_id": "B1"}]},
    ])
    _write(root / "engineering" / "2025-07-16.json", [
        {"type": "message", "user": "U1", "text": "Found an error in the migration", "ts": slack_ts(at(2, 14))},
        {"type": "message", "user": "U3", "text": "<@U1> I will look", "ts": slack_ts(at(2, 14, 20))},
    ])
    _write(root / "old-project" / "2025-07-16.json", [
        {"type": "message", "user": "U2", "text": "archived chatter", "ts": slack_ts(at(2, 15))},
    ])
    (root / "engineering" / "2025-07-17.json").write_text("{not json", encoding="utf-8")
    _write(root / "general" / "2025-06-30.json", [
        {"type": "message", "user": "U2", "text": "earlier week", "ts": slack_ts(datetime(2025, 6, 30, 10, tzinfo=timezone.utc))},
    ])
    return root


@pytest.fixture
def service(export_dir, monkeypatch) -> TeamAnalysisService:
    """Service reading the on-disk export, swapped in for the app singleton."""
    test_service = TeamAnalysisService(reader_factory=lambda: FilesystemExportReader(export_dir))
    monkeypatch.setattr(analytics, "team_analysis_service", test_service)
    monkeypatch.setattr(main, "team_analysis_service", test_service)
    return test_service


# Test client
@pytest.fixture
def client(service) -> Generator:
    """Create test client."""
    with TestClient(main.app) as c:
        yield c


# Async test client
@pytest.fixture
async def async_client(service) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=main.app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
