from datetime import datetime
from typing import Optional


def current_period_key(now: Optional[datetime] = None) -> str:
    """
    Return the ``MM.YYYY`` key of the calendar month containing ``now``.

    ``now`` defaults to the local wall-clock time.
    """
    if now is None:
        now = datetime.now()
    return f"{now.month:02d}.{now.year:04d}"


def statistics_file_name(period_key: str) -> str:
    return f"{period_key}.json"
