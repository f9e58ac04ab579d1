from datetime import datetime, timezone
from zoneinfo import ZoneInfo

VISIT_DATE_FORMAT = "%A, %d %B %Y"


def format_visit_date(value: datetime, tz_name: str) -> str:
    """Render a stored visit instant as a local calendar date.

    Stored datetimes are UTC; naive values are treated as UTC rather than
    server-local time so the ticket never shows the previous day.
    e.g. 2024-03-10T00:00:00Z -> "Sunday, 10 March 2024" in Asia/Kolkata.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name)).strftime(VISIT_DATE_FORMAT)
