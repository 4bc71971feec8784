"""Common types and helpers shared across models."""

from datetime import UTC, datetime
from typing import TypeAlias

RunId: TypeAlias = str
EpochSeconds: TypeAlias = int

HOUR = 3600


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def epoch_now() -> EpochSeconds:
    return int(utc_now().timestamp())


def epoch_to_iso(ts: EpochSeconds | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, UTC).isoformat()
