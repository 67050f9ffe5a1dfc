from datetime import datetime, timezone
from typing import Optional

_UNITS = (
    ('year', 365 * 24 * 3600),
    ('month', 30 * 24 * 3600),
    ('week', 7 * 24 * 3600),
    ('day', 24 * 3600),
    ('hour', 3600),
    ('minute', 60),
    ('second', 1),
)


def diff_for_humans(moment: Optional[datetime], now: Optional[datetime] = None) -> str:
    """'3 minutes ago' style relative time; naive datetimes are treated as UTC."""
    if moment is None:
        return ''
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - moment).total_seconds())
    suffix = 'ago' if seconds >= 0 else 'from now'
    seconds = abs(seconds)
    if seconds < 1:
        return 'just now'
    for unit, size in _UNITS:
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} {suffix}"
    return 'just now'
