"""Clock helpers: the user's timezone decides what "today" means."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nutrition_alerts.config import get_settings

_FIXED_OFFSET: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone named by ``APP_TIMEZONE``.

    IANA names (``Europe/Madrid``) and fixed offsets (``UTC-05:00``,
    ``GMT+2``) are accepted. Anything else falls back to UTC.
    """

    name = (get_settings().app_timezone or "").strip()
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        pass

    match = _FIXED_OFFSET.match(name)
    if match is None:
        return timezone.utc
    offset = timedelta(
        hours=int(match.group("hours")), minutes=int(match.group("minutes") or 0)
    )
    return timezone(-offset if match.group("sign") == "-" else offset)


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Wall-clock time in the app timezone, for ``DateTime`` columns without tz."""

    return now_in_app_timezone().replace(tzinfo=None)


def calendar_day(value: datetime, reference: datetime) -> date:
    """Return the calendar day of ``value`` as seen from ``reference``'s timezone.

    Naive values are assumed to already be expressed in the reference timezone.
    """

    if value.tzinfo is None or reference.tzinfo is None:
        return value.date()
    return value.astimezone(reference.tzinfo).date()
