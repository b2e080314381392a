"""Event Schedule — start-time parsing, relative timing labels and the public visibility rule.

Invariants:
    - PURE: no clock reads; callers pass `now`
    - time is 24h "HH:MM" (00:00-23:59)
    - Labels: Today and Tomorrow win over Past/Upcoming, so an event earlier today is "Today"
"""

import re
from datetime import date, datetime, time, timedelta

from tbi_portal.core.domain_types import EventStatus

TIME_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"
_TIME_RE = re.compile(TIME_PATTERN)


def parse_time(value: str) -> time:
    match = _TIME_RE.match(value or "")
    if match is None:
        raise ValueError(f"time must be HH:MM (24h), got {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def timing_label(event_date: date, event_time: str, now: datetime) -> str:
    """Today | Tomorrow | Past | Upcoming relative to now (naive or same-tz)."""
    if event_date == now.date():
        return "Today"
    if event_date == now.date() + timedelta(days=1):
        return "Tomorrow"
    starts = datetime.combine(event_date, parse_time(event_time), tzinfo=now.tzinfo)
    return "Past" if starts < now else "Upcoming"


def publicly_visible(status: str) -> bool:
    return status == EventStatus.APPROVED.value
