"""Identifier and timestamp helpers."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional


def generate_id() -> str:
    return str(uuid.uuid4())


def format_iso(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a literal ``Z``."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def now_iso(now: Optional[datetime] = None) -> str:
    return format_iso(now or datetime.now(timezone.utc))


def days_ago_iso(days: int, now: Optional[datetime] = None) -> str:
    return format_iso((now or datetime.now(timezone.utc)) - timedelta(days=days))
