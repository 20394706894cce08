# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
from datetime import date, datetime, time

from pytz import timezone, utc

# Calendar used for day bucketing, streaks and scheduler triggers
APP_TIMEZONE = timezone(os.getenv("APP_TIMEZONE", "UTC"))


def to_local(dt: datetime, tz=None) -> datetime:
    """Stored timestamps are naive UTC; returns an aware datetime in `tz`."""
    tz = tz or APP_TIMEZONE
    if dt.tzinfo is None:
        dt = utc.localize(dt)
    return dt.astimezone(tz)


def local_date(dt: datetime, tz=None) -> date:
    return to_local(dt, tz).date()


def local_midnight_utc(day: date, tz=None) -> datetime:
    """Naive UTC instant of local midnight starting `day`, for filtering stored timestamps."""
    tz = tz or APP_TIMEZONE
    return tz.localize(datetime.combine(day, time.min)).astimezone(utc).replace(tzinfo=None)
