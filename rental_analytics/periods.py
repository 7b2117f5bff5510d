"""Utilities for working with reporting periods."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Tuple


def month_range(today: date | None = None) -> Tuple[date, date]:
    """Return the first and last day of the calendar month containing ``today``."""

    today = today or date.today()
    first = today.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return first, next_first - timedelta(days=1)


def last_month_range(today: date | None = None) -> Tuple[date, date]:
    """Return the first and last day of the calendar month before ``today``."""

    today = today or date.today()
    first_of_this_month = today.replace(day=1)
    last_day_previous_month = first_of_this_month - timedelta(days=1)
    first_day_previous_month = last_day_previous_month.replace(day=1)
    return first_day_previous_month, last_day_previous_month


def quarter_start(today: date | None = None) -> date:
    today = today or date.today()
    return date(today.year, (today.month - 1) // 3 * 3 + 1, 1)


def year_range(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def months_in_period(start: date, end: date) -> int:
    """Number of 30-day months spanned by ``start``..``end``, never less than one."""

    return max(1, math.ceil((end - start).days / 30))


def next_rent_due(today: date | None = None, due_day: int = 5) -> date:
    """Return the next rent due date, ``due_day`` of this month or the next one.

    ``due_day`` is clamped to 1..28 so it exists in every month.
    """

    today = today or date.today()
    due_day = min(max(due_day, 1), 28)
    due = today.replace(day=due_day)
    if today.day > due_day:
        due = (today.replace(day=1) + timedelta(days=32)).replace(day=due_day)
    return due
