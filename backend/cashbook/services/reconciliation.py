from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Sequence

from cashbook.schemas.balance import BalanceSummary, DailyBalance, SummaryMetrics

logger = logging.getLogger(__name__)


def _empty_summary(today: date) -> BalanceSummary:
    return BalanceSummary(
        total_days=0,
        opening_balance=0.0,
        total_revenue=0.0,
        total_expense=0.0,
        closing_balance=0.0,
        projected_closing_balance=0.0,
        net_change=0.0,
        current_balance=0.0,
        current_projected_balance=0.0,
        current_date=today.isoformat(),
        is_current_date_in_period=False,
    )


def find_day(series: Sequence[DailyBalance], day: date) -> DailyBalance | None:
    for row in series:
        if row.date == day:
            return row
    return None


def compute_summary(
    series: Sequence[DailyBalance],
    current_day_balance: DailyBalance | None,
    today: date,
) -> BalanceSummary:
    """Summarize a date-ordered balance series as seen from ``today``.

    The current balance is taken, in order of preference, from today's row in
    the series, from the separately fetched ``current_day_balance``, or
    estimated from the period itself: the period's closing figures when today
    is after the last row, zero otherwise.
    """
    if not series:
        return _empty_summary(today)

    first = series[0]
    last = series[-1]

    total_revenue = sum((row.balance.total_revenue for row in series), 0.0)
    total_expense = sum((row.balance.total_expense for row in series), 0.0)
    opening_balance = first.balance.opening
    closing_balance = last.balance.closing
    projected_closing_balance = last.projected.closing

    today_row = find_day(series, today)
    in_period = today_row is not None

    if today_row is not None:
        current_balance = today_row.balance.closing
        current_projected = today_row.projected.closing
        logger.debug("today %s in period, current_balance=%s", today, current_balance)
    elif current_day_balance is not None:
        current_balance = current_day_balance.balance.closing
        current_projected = current_day_balance.projected.closing
        logger.debug("today %s outside period, using separate fetch", today)
    elif today > last.date:
        # No activity assumed since the end of the period.
        current_balance = closing_balance
        current_projected = projected_closing_balance
        logger.debug("today %s after period end %s, using period closing", today, last.date)
    else:
        current_balance = 0.0
        current_projected = 0.0
        logger.debug("today %s not after period end %s, no balance known", today, last.date)

    return BalanceSummary(
        total_days=len(series),
        opening_balance=opening_balance,
        total_revenue=total_revenue,
        total_expense=total_expense,
        closing_balance=closing_balance,
        projected_closing_balance=projected_closing_balance,
        net_change=closing_balance - opening_balance,
        current_balance=current_balance,
        current_projected_balance=current_projected,
        current_date=today.isoformat(),
        is_current_date_in_period=in_period,
    )


def find_gaps(series: Sequence[DailyBalance]) -> list[date]:
    """Calendar days missing between consecutive rows of an ascending series."""
    missing: list[date] = []
    for prev, cur in zip(series, series[1:]):
        day = prev.date + timedelta(days=1)
        while day < cur.date:
            missing.append(day)
            day = day + timedelta(days=1)
    return missing


def _percent(change: float, base: float) -> float | None:
    if base == 0:
        return None if change != 0 else 0.0
    return change / base * 100.0


def summary_metrics(summary: BalanceSummary) -> SummaryMetrics:
    current_change = summary.current_balance - summary.opening_balance
    days = summary.total_days

    projected_negative = summary.projected_closing_balance < 0
    deficit = abs(summary.projected_closing_balance) if projected_negative else 0.0
    to_recover = deficit + abs(summary.closing_balance) if projected_negative else 0.0

    return SummaryMetrics(
        percentage_change=_percent(summary.net_change, summary.opening_balance),
        current_change=current_change,
        current_percentage_change=_percent(current_change, abs(summary.opening_balance)),
        average_daily_revenue=summary.total_revenue / days if days else 0.0,
        average_daily_expense=summary.total_expense / days if days else 0.0,
        is_projected_negative=projected_negative,
        projected_deficit=deficit,
        amount_to_recover=to_recover,
    )
