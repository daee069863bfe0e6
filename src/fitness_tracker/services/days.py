"""Day-bucket helpers; every bucket is computed in UTC."""

from collections.abc import Callable
from datetime import UTC, date, datetime

Clock = Callable[[], datetime]

WEEK_DAYS = 7


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def epoch_day(moment: datetime) -> int:
    """Return days since 1970-01-01 for the UTC date of ``moment``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).date().toordinal() - date(1970, 1, 1).toordinal()


def epoch_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)


def week_start(today: int) -> int:
    """First day of the trailing week window ending at ``today``."""
    return today - (WEEK_DAYS - 1)
