"""Datetime helpers."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

import pendulum


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string, returning ``None`` for anything unusable."""
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    if not value[0].isdigit():
        # pendulum also understands keywords such as "now"
        return None
    try:
        parsed = pendulum.parse(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if not isinstance(parsed, datetime):
        # durations, bare times
        return None
    return parsed


def format_timestamp(value: datetime) -> str:
    """Canonical form: UTC, millisecond precision, ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def now_iso() -> str:
    return format_timestamp(now_utc())


def recency_key(value: Any) -> float:
    parsed = parse_timestamp(value)
    if parsed is None:
        return -math.inf
    return parsed.timestamp()


def format_long_date(value: Any) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    return pendulum.instance(parsed).format("MMMM D, YYYY")
