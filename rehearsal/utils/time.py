from __future__ import annotations

from datetime import datetime, timezone


def utc_now_aware() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_naive() -> datetime:
    return utc_now_aware().astimezone(timezone.utc).replace(tzinfo=None)


def utc_now_iso() -> str:
    return utc_now_aware().isoformat().replace("+00:00", "Z")


def elapsed_ms(started: datetime, ended: datetime) -> int:
    return int((ended - started).total_seconds() * 1000)


def to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
