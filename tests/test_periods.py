from datetime import date

from rental_analytics.periods import (
    last_month_range,
    month_range,
    months_in_period,
    next_rent_due,
    quarter_start,
    year_range,
)


def test_last_month_range_handles_year_transition():
    start, end = last_month_range(date(2025, 1, 5))
    assert start == date(2024, 12, 1)
    assert end == date(2024, 12, 31)


def test_month_range_covers_leap_february():
    start, end = month_range(date(2024, 2, 10))
    assert start == date(2024, 2, 1)
    assert end == date(2024, 2, 29)


def test_month_range_handles_december():
    assert month_range(date(2024, 12, 31)) == (date(2024, 12, 1), date(2024, 12, 31))


def test_quarter_start():
    assert quarter_start(date(2024, 3, 31)) == date(2024, 1, 1)
    assert quarter_start(date(2024, 8, 15)) == date(2024, 7, 1)
    assert quarter_start(date(2024, 12, 1)) == date(2024, 10, 1)


def test_year_range():
    assert year_range(2024) == (date(2024, 1, 1), date(2024, 12, 31))


def test_months_in_period_is_at_least_one():
    assert months_in_period(date(2024, 3, 1), date(2024, 3, 1)) == 1
    assert months_in_period(date(2024, 3, 1), date(2024, 3, 31)) == 1
    assert months_in_period(date(2024, 1, 1), date(2024, 3, 31)) == 3
    assert months_in_period(date(2024, 1, 1), date(2024, 4, 1)) == 4


def test_next_rent_due_rolls_to_next_month_after_due_day():
    assert next_rent_due(date(2024, 3, 5), 5) == date(2024, 3, 5)
    assert next_rent_due(date(2024, 3, 2), 5) == date(2024, 3, 5)
    assert next_rent_due(date(2024, 3, 6), 5) == date(2024, 4, 5)
    assert next_rent_due(date(2024, 12, 20), 10) == date(2025, 1, 10)


def test_next_rent_due_clamps_day():
    assert next_rent_due(date(2024, 1, 31), 31) == date(2024, 2, 28)
    assert next_rent_due(date(2024, 1, 1), 0) == date(2024, 1, 1)
