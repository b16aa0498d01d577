from datetime import date

import pytest

from services.calendar_service import CalendarService


@pytest.fixture
def calendar_svc(tx_service):
    tx_service.add_expense("Rent", 1200, "housing", "monthly", "2024-01-31")
    tx_service.add_expense("Gym", 25, "other", "weekly", "2024-02-05")
    tx_service.add_expense("Sofa", 800, "furniture", "one-time", "2024-02-14")
    tx_service.add_income("Paycheck", 2000, "bi-weekly", "2024-02-02")
    return CalendarService(tx_service)


def _cell(grid, d):
    return next(c for week in grid for c in week if c.date == d)


def test_month_grid_totals(calendar_svc):
    grid = calendar_svc.get_month_grid(2024, 2, ref_date=date(2024, 2, 14))
    assert len(grid) == 5
    assert grid[0][0].date == date(2024, 1, 28)

    leap_day = _cell(grid, date(2024, 2, 29))
    assert leap_day.expense_total == 1200
    assert leap_day.in_month

    valentine = _cell(grid, date(2024, 2, 14))
    assert valentine.is_today
    assert valentine.expense_total == 800

    payday = _cell(grid, date(2024, 2, 16))
    assert payday.income_total == 2000
    assert payday.net == 2000
    assert payday.has_transactions

    assert _cell(grid, date(2024, 2, 9)).income_total == 0
    assert not _cell(grid, date(2024, 2, 1)).has_transactions


def test_month_grid_includes_padding_days(calendar_svc):
    grid = calendar_svc.get_month_grid(2024, 2, ref_date=date(2024, 2, 14))
    jan_31 = _cell(grid, date(2024, 1, 31))
    assert not jan_31.in_month
    assert jan_31.expense_total == 1200
    mar_1 = _cell(grid, date(2024, 3, 1))
    assert mar_1.income_total == 2000


def test_day_detail(calendar_svc):
    detail = calendar_svc.get_day_detail(date(2024, 2, 19))
    assert [t.name for t in detail.expenses] == ["Gym"]
    assert detail.income == []
    assert detail.net == -25

    detail = calendar_svc.get_day_detail(date(2024, 2, 16))
    assert [t.name for t in detail.income] == ["Paycheck"]
    assert detail.net == 2000

    assert calendar_svc.get_day_detail(date(2024, 2, 17)).is_empty


def test_month_totals_count_every_recurrence(calendar_svc):
    totals = calendar_svc.get_month_totals(2024, 2)
    # Rent once, gym on 5/12/19/26, sofa once; paychecks on 2/16
    assert totals["expense"] == 1200 + 4 * 25 + 800
    assert totals["income"] == 2 * 2000
    assert totals["net"] == totals["income"] - totals["expense"]


def test_search_filters_grid_and_totals(calendar_svc):
    totals = calendar_svc.get_month_totals(2024, 2, search="gym")
    assert totals == {"income": 0.0, "expense": 100, "net": -100}
    grid = calendar_svc.get_month_grid(2024, 2, search="HOUSING", ref_date=date(2024, 2, 1))
    assert _cell(grid, date(2024, 2, 29)).expense_total == 1200
    assert _cell(grid, date(2024, 2, 14)).expense_total == 0


def test_navigation_months(calendar_svc):
    months = calendar_svc.navigation_months(date(2024, 6, 15), span=2)
    assert months == ["2024-04", "2024-05", "2024-06", "2024-07", "2024-08"]
    assert len(calendar_svc.navigation_months(date(2024, 6, 15))) == 25
