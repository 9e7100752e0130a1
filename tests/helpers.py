from datetime import datetime, timedelta, timezone

SCHOOL_ID = "SCH001"
OTHER_SCHOOL_ID = "SCH002"


def in_days(days: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)
