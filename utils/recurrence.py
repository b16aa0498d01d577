"""Recurrence evaluation for budget transactions.

Every view that needs to know when a transaction is due (calendar cells,
dashboard cards, forecasts) goes through these functions. A rule is any
object exposing `anchor_date`, `frequency` and `amount`; other attributes
are carried along untouched.

All functions are pure. Unknown frequencies never occur and reversed
ranges are empty; neither raises.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Hashable, Iterable, Iterator, Optional

from utils.constants import (
    DAILY, FREQUENCIES, FREQUENCY_ALIASES, MONTH_INTERVALS, ONE_TIME, WEEK_INTERVALS,
)
from utils.date_helpers import (
    add_months, as_date, clamp_day_to_month, format_date, format_month, months_between,
)


def normalize_frequency(value: Any) -> str:
    """Canonical spelling of a frequency, e.g. 'BI_WEEKLY' -> 'bi-weekly'.

    Values outside the known vocabulary are returned normalised but will
    never match an occurrence. Non-strings normalise to ''.
    """
    if not isinstance(value, str):
        return ""
    key = "-".join(value.strip().lower().replace("_", " ").split())
    return FREQUENCY_ALIASES.get(key, key)


def occurs_on(rule, target_date: date | datetime) -> bool:
    """True if the rule has an occurrence on target_date's calendar day."""
    anchor = as_date(rule.anchor_date)
    target = as_date(target_date)
    if target < anchor:
        return False

    freq = normalize_frequency(rule.frequency)
    if freq == ONE_TIME:
        return target == anchor
    if freq == DAILY:
        return True
    if freq in WEEK_INTERVALS:
        return (target - anchor).days % WEEK_INTERVALS[freq] == 0
    if freq in MONTH_INTERVALS:
        if months_between(anchor, target) % MONTH_INTERVALS[freq] != 0:
            return False
        return target.day == clamp_day_to_month(target.year, target.month, anchor.day)
    return False


def _project(anchor: date, months: int) -> Optional[date]:
    """add_months, or None when the result would fall after date.max."""
    if anchor.year + (anchor.month - 1 + months) // 12 > date.max.year:
        return None
    return add_months(anchor, months)


def _first_on_or_after(anchor: date, freq: str, start: date) -> Optional[date]:
    """First occurrence >= start for a known frequency, else None."""
    start = max(start, anchor)
    if freq == ONE_TIME:
        return anchor if anchor >= start else None
    if freq == DAILY:
        return start
    if freq in WEEK_INTERVALS:
        step = WEEK_INTERVALS[freq]
        k = -(-(start - anchor).days // step)
        if k * step > (date.max - anchor).days:
            return None
        return anchor + timedelta(days=k * step)
    if freq in MONTH_INTERVALS:
        step = MONTH_INTERVALS[freq]
        k = -(-months_between(anchor, start) // step) * step
        candidate = _project(anchor, k)
        if candidate is not None and candidate < start:
            candidate = _project(anchor, k + step)
        return candidate
    return None


@dataclass(frozen=True)
class OccurrenceRange:
    """Occurrences of one rule inside an inclusive date range.

    Iterating walks the rule's cadence from the first occurrence in range,
    so cost grows with the number of occurrences rather than with the
    number of days. Each iteration starts over.
    """
    rule: Any
    start: date
    end: date

    def __iter__(self) -> Iterator[date]:
        anchor = as_date(self.rule.anchor_date)
        freq = normalize_frequency(self.rule.frequency)
        if freq not in FREQUENCIES or self.end < self.start:
            return
        current = _first_on_or_after(anchor, freq, self.start)
        if current is None:
            return

        if freq == ONE_TIME:
            if current <= self.end:
                yield current
        elif freq == DAILY or freq in WEEK_INTERVALS:
            step = timedelta(days=WEEK_INTERVALS.get(freq, 1))
            while current <= self.end:
                yield current
                if self.end - current < step:
                    break
                current += step
        else:
            # Always project from the anchor so a clamped month (Feb 28)
            # does not drag later occurrences off the anchor's day.
            step = MONTH_INTERVALS[freq]
            k = months_between(anchor, current)
            while current is not None and current <= self.end:
                yield current
                k += step
                current = _project(anchor, k)


def occurrences_in_range(rule, start_date: date | datetime, end_date: date | datetime) -> OccurrenceRange:
    return OccurrenceRange(rule, as_date(start_date), as_date(end_date))


def next_occurrence(rule, on_or_after: date | datetime) -> Optional[date]:
    """First occurrence on or after the given date, or None if there is none."""
    freq = normalize_frequency(rule.frequency)
    if freq not in FREQUENCIES:
        return None
    return _first_on_or_after(as_date(rule.anchor_date), freq, as_date(on_or_after))


def filter_occurring_on(rules: Iterable, target_date: date | datetime) -> list:
    """Rules that occur on target_date, in their original order."""
    return [rule for rule in rules if occurs_on(rule, target_date)]


def aggregate_by_bucket(
    rules: Iterable,
    bucketer: Callable[[date], Hashable],
    range_start: date | datetime,
    range_end: date | datetime,
) -> dict:
    """Sum rule amounts per bucketer(date) over every occurrence in range.

    Only buckets that received at least one occurrence appear in the result.
    """
    totals: dict = {}
    for rule in rules:
        for d in occurrences_in_range(rule, range_start, range_end):
            key = bucketer(d)
            totals[key] = totals.get(key, 0) + rule.amount
    return totals


def bucket_day(d: date) -> str:
    return format_date(d)


def bucket_month(d: date) -> str:
    return format_month(d)


def bucket_year(d: date) -> str:
    return f"{d.year:04d}"
