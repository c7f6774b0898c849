#!/usr/bin/env python3
"""
Sample Slack export generator for Team Health Analytics.
Writes a realistic export directory (users.json, channels.json and
per-channel day files) that the filesystem reader can load.

Usage:
    python seed_sample_data.py ./sample_export --days 30 --seed 7

Then point the service at it:
    SLACK_EXPORT_PATH=./sample_export uvicorn team_health.main:app
"""

import argparse
import asyncio
import json
import random
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import structlog

from team_health.analysis.weeks import available_weeks
from team_health.pipelines.ingestion import FilesystemExportReader

logger = structlog.get_logger()

# Sample Data Definitions
SAMPLE_USERS = [
    {"id": "U1", "name": "sarah", "real_name": "Sarah Chen", "title": "CEO", "is_admin": True},
    {"id": "U2", "name": "mike", "real_name": "Mike Rodriguez", "title": "CTO", "is_admin": True},
    {"id": "U3", "name": "emily", "real_name": "Emily Watson", "title": "Product Manager"},
    {"id": "U4", "name": "david", "real_name": "David Kim", "title": "Senior Engineer"},
    {"id": "U5", "name": "lisa", "real_name": "Lisa Park", "title": "Design Lead"},
    {"id": "U6", "name": "alex", "real_name": "Alex Thompson", "title": "Marketing Manager"},
    {"id": "U7", "name": "rachel", "real_name": "Rachel Green", "title": "Junior Engineer"},
    {"id": "U8", "name": "tom", "real_name": "Tom Wilson", "title": "Sales Director"},
]

SAMPLE_BOTS = [
    {"id": "B1", "name": "deploybot", "real_name": "Deploy Bot", "is_bot": True},
]

SAMPLE_CHANNELS = [
    {"id": "C1", "name": "general", "purpose": "Company-wide announcements", "members": ["U1", "U2", "U3", "U4", "U5", "U6", "U7", "U8"]},
    {"id": "C2", "name": "engineering", "purpose": "Engineering team discussions", "members": ["U2", "U4", "U7", "U3"]},
    {"id": "C3", "name": "product", "purpose": "Product development", "members": ["U3", "U5", "U1"]},
    {"id": "C4", "name": "random", "purpose": "Non-work conversations", "members": ["U1", "U2", "U3", "U4", "U5", "U6", "U7", "U8"]},
    {"id": "C5", "name": "ops-alerts", "purpose": "Cost and uptime alerts", "members": ["U2", "U4"]},
]

SAMPLE_MESSAGES = [
    "Hey team, quick update on the sprint progress...",
    "Can someone help me with the API integration?",
    "Great work on the latest release!",
    "I think we should reconsider the approach here...",
    "Thanks for the feedback, I'll make those changes",
    "Anyone available for a quick sync?",
    "The new feature is live! :tada:",
    "I'm feeling a bit stuck on this issue...",
    "Let's schedule a team retrospective",
    "The client feedback has been positive so far",
    "I made a mistake in the migration, fixing it now",
    "What if we try a different idea for onboarding?",
    "Our goal for this quarter is clear, let's focus on the roadmap",
    "Happy to mentor anyone on the new deploy flow",
    "This deadline is really tight, feeling overwhelmed",
]

START_DATE = date(2025, 6, 18)


def _ts(moment: datetime, seq: int) -> str:
    return f"{int(moment.timestamp())}.{seq:06d}"


def build_user(raw: dict[str, Any]) -> dict[str, Any]:
    """Shape a sample user like an entry of users.json."""
    return {
        "id": raw["id"],
        "name": raw["name"],
        "real_name": raw["real_name"],
        "deleted": False,
        "is_bot": raw.get("is_bot", False),
        "is_admin": raw.get("is_admin", False),
        "profile": {
            "real_name": raw["real_name"],
            "display_name": raw["real_name"].split()[0],
            "title": raw.get("title", ""),
            "email": f"{raw['name']}@example.com",
        },
    }


def build_channel(raw: dict[str, Any]) -> dict[str, Any]:
    """Shape a sample channel like an entry of channels.json."""
    return {
        "id": raw["id"],
        "name": raw["name"],
        "is_archived": False,
        "members": raw["members"],
        "purpose": {"value": raw["purpose"], "creator": "U1", "last_set": 0},
    }


def generate_day(rng: random.Random, day: date, day_index: int) -> dict[str, list[dict[str, Any]]]:
    """Generate one day of messages keyed by channel name.

    Weekdays are busy and weekends quiet; most messages land in working
    hours with a tail of late-evening activity.
    """
    is_weekend = day.weekday() >= 5
    count = 5 if is_weekend else 25
    by_channel: dict[str, list[dict[str, Any]]] = {}

    for seq in range(count):
        user = rng.choice(SAMPLE_USERS)
        channel = rng.choice([c for c in SAMPLE_CHANNELS if user["id"] in c["members"]])
        hour = rng.randint(9, 16) if rng.random() > 0.15 else rng.randint(19, 22)
        moment = datetime(day.year, day.month, day.day, hour, rng.randint(0, 59), tzinfo=timezone.utc)

        text = rng.choice(SAMPLE_MESSAGES)
        if rng.random() > 0.8:
            mentioned = rng.choice([u for u in SAMPLE_USERS if u["id"] != user["id"]])
            text = f"<@{mentioned['id']}> {text}"

        message: dict[str, Any] = {
            "type": "message",
            "client_msg_id": f"msg_{day_index}_{seq}",
            "user": user["id"],
            "text": text,
            "ts": _ts(moment, seq),
        }
        if rng.random() > 0.7:
            message["reactions"] = [
                {"name": "thumbsup", "users": ["U1"], "count": 1},
                {"name": "heart", "users": ["U2"], "count": 1},
            ]
        by_channel.setdefault(channel["name"], []).append(message)

    # A weekly cost alert posted by a bot
    if day.weekday() == 0:
        moment = datetime(day.year, day.month, day.day, 6, 0, tzinfo=timezone.utc)
        by_channel.setdefault("ops-alerts", []).append({
            "type": "message",
            "subtype": "bot_message",
            "bot_id": "B1",
            "text": "",
            "ts": _ts(moment, 999),
            "files": [{"name": "AWS Budget Alert", "subject": "AWS Budget: 80% of monthly budget used", "bot_id": "B1"}],
        })

    for messages in by_channel.values():
        messages.sort(key=lambda m: float(m["ts"]))
    return by_channel


def write_export(output: Path, days: int, seed: int) -> None:
    """Write a complete sample export under ``output``."""
    rng = random.Random(seed)
    output.mkdir(parents=True, exist_ok=True)

    users = [build_user(u) for u in SAMPLE_USERS + SAMPLE_BOTS]
    (output / "users.json").write_text(json.dumps(users, indent=2), encoding="utf-8")

    channels = [build_channel(c) for c in SAMPLE_CHANNELS]
    (output / "channels.json").write_text(json.dumps(channels, indent=2), encoding="utf-8")
    logger.info("Wrote users and channels", users=len(users), channels=len(channels))

    files_written = 0
    for day_index in range(days):
        day = START_DATE + timedelta(days=day_index)
        for channel_name, messages in generate_day(rng, day, day_index).items():
            channel_dir = output / channel_name
            channel_dir.mkdir(exist_ok=True)
            (channel_dir / f"{day.isoformat()}.json").write_text(
                json.dumps(messages, indent=2), encoding="utf-8"
            )
            files_written += 1

    logger.info("Wrote day files", files=files_written, days=days)


async def main():
    """Generate the export and verify it loads."""
    parser = argparse.ArgumentParser(description="Generate a sample Slack export")
    parser.add_argument("output", type=Path, help="Directory to write the export to")
    parser.add_argument("--days", type=int, default=30, help="Number of days to generate")
    parser.add_argument("--seed", type=int, default=7, help="Random seed for reproducible output")
    args = parser.parse_args()

    logger.info("Starting sample export generation...", output=str(args.output))
    write_export(args.output, args.days, args.seed)

    workspace, result = await FilesystemExportReader(args.output).load()
    logger.info(
        "Sample export complete",
        messages=len(workspace.messages),
        ops_alerts=len(workspace.ops_alerts),
        weeks=available_weeks(workspace.messages),
        errors=len(result.errors),
    )


if __name__ == "__main__":
    asyncio.run(main())
