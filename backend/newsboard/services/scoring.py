from __future__ import annotations
from datetime import datetime, timezone

# Keeps the denominator finite for brand-new items.
AGE_OFFSET_HOURS = 2.0

def as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def age_hours(created_at: datetime, now: datetime | None = None) -> float:
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    hours = (now - as_utc(created_at)).total_seconds() / 3600.0
    return max(0.0, hours)

def score(votes: int, age_hours: float, gravity: float) -> float:
    """points = votes / (age_hours + 2) ** gravity

    Larger gravity makes points fall off faster with age; gravity 0 ranks by
    raw vote count.
    """
    if votes < 0:
        raise ValueError("votes must be non-negative")
    if gravity < 0:
        raise ValueError("gravity must be non-negative")
    if votes == 0:
        return 0.0
    return votes / (max(0.0, age_hours) + AGE_OFFSET_HOURS) ** gravity

def entry_score(votes: int, created_at: datetime, gravity: float, now: datetime | None = None) -> float:
    return score(votes, age_hours(created_at, now), gravity)
