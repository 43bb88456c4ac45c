"""
Shop-local calendar helpers.

Timestamps are stored as naive UTC. Reports and "today" figures are bucketed
by the shop's local calendar date.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from duka.core.config import settings


def shop_zone() -> ZoneInfo:
    return ZoneInfo(settings.shop_timezone)


def utcnow() -> datetime:
    return datetime.utcnow()


def local_today(now: Optional[datetime] = None) -> date:
    """Current calendar date in the shop's timezone."""
    return to_local_date(now or utcnow())


def to_local_date(value: datetime) -> date:
    """Convert a naive UTC timestamp to the shop-local calendar date."""
    return value.replace(tzinfo=timezone.utc).astimezone(shop_zone()).date()


def local_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Naive UTC [start, end) covering one shop-local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=shop_zone())
    end = start + timedelta(days=1)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )


def local_month_bounds(day: date) -> Tuple[datetime, datetime]:
    """Naive UTC [start, end) covering the shop-local month containing `day`."""
    first = day.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return local_day_bounds(first)[0], local_day_bounds(next_first)[0]
