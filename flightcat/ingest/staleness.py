"""Staleness checks for observations and forecasts."""

from datetime import UTC, datetime


def is_metar_stale(
    report_time_iso: str, max_age_minutes: int, now: datetime | None = None
) -> bool:
    """Check if an observation is older than max_age_minutes."""
    age = metar_age_minutes(report_time_iso, now)
    return age is None or age > max_age_minutes


def metar_age_minutes(report_time_iso: str, now: datetime | None = None) -> float | None:
    if now is None:
        now = datetime.now(UTC)
    reported = _parse_timestamp(report_time_iso)
    if reported is None:
        return None
    return (now - reported).total_seconds() / 60


def is_taf_expired(valid_time_to: int, now: datetime | None = None) -> bool:
    """Check if a TAF's validity window has ended."""
    if now is None:
        now = datetime.now(UTC)
    return now.timestamp() >= valid_time_to


def _parse_timestamp(iso_str: str) -> datetime | None:
    """Parse an ISO timestamp, handling a trailing Z and naive values."""
    try:
        if iso_str.endswith("Z"):
            iso_str = iso_str[:-1] + "+00:00"
        dt = datetime.fromisoformat(iso_str.replace(" ", "T"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt
    except (ValueError, TypeError, AttributeError):
        return None
