from datetime import date

from services.transaction_service import TransactionService
from utils.date_helpers import add_months, format_month, month_bounds, today
from utils.recurrence import aggregate_by_bucket, bucket_month, bucket_year


class ForecastService:
    def __init__(self, tx_service: TransactionService):
        self._tx = tx_service

    def _monthly_periods(self, start: date, months: int) -> list[date]:
        """First day of each month from start's month, `months` long."""
        first = start.replace(day=1)
        return [add_months(first, i) for i in range(months)]

    def get_monthly_forecast(self, start: date | None = None, months: int = 12) -> list[dict]:
        """
        [{month:'YYYY-MM', income:float, expense:float, net:float}]
        for `months` consecutive months beginning with start's month.
        Months without any occurrence are reported as zero.
        """
        if months <= 0:
            return []
        periods = self._monthly_periods(start or today(), months)
        range_start = periods[0]
        range_end = month_bounds(periods[-1].year, periods[-1].month)[1]

        income = aggregate_by_bucket(self._tx.get_income(), bucket_month, range_start, range_end)
        expense = aggregate_by_bucket(self._tx.get_expenses(), bucket_month, range_start, range_end)

        result = []
        for first in periods:
            key = format_month(first)
            inc = income.get(key, 0.0)
            exp = expense.get(key, 0.0)
            result.append({"month": key, "income": inc, "expense": exp, "net": inc - exp})
        return result

    def get_annual_forecast(self, start_year: int | None = None, years: int = 3) -> list[dict]:
        """
        [{year:int, income:float, expense:float, net:float}]
        for `years` calendar years beginning with start_year.
        """
        if years <= 0:
            return []
        first_year = start_year or today().year
        range_start = date(first_year, 1, 1)
        range_end = date(first_year + years - 1, 12, 31)

        income = aggregate_by_bucket(self._tx.get_income(), bucket_year, range_start, range_end)
        expense = aggregate_by_bucket(self._tx.get_expenses(), bucket_year, range_start, range_end)

        result = []
        for yr in range(first_year, first_year + years):
            key = f"{yr:04d}"
            inc = income.get(key, 0.0)
            exp = expense.get(key, 0.0)
            result.append({"year": yr, "income": inc, "expense": exp, "net": inc - exp})
        return result
