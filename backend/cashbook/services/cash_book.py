from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol, Sequence

from cashbook.schemas.balance import BalanceSummary, CashBookOut, DailyBalance, SummaryMetrics
from cashbook.services.reconciliation import compute_summary, find_day, find_gaps, summary_metrics

logger = logging.getLogger(__name__)


class BalanceSource(Protocol):
    def get_daily_balance(self, start: date, end: date) -> list[DailyBalance]: ...

    def get_daily_balance_for_date(self, day: date) -> DailyBalance | None: ...


@dataclass(frozen=True)
class CashBook:
    initial_date: date
    end_date: date
    days: list[DailyBalance]
    summary: BalanceSummary
    metrics: SummaryMetrics
    current_day_balance: DailyBalance | None = None
    missing_dates: list[date] = field(default_factory=list)

    def to_out(self) -> CashBookOut:
        return CashBookOut(
            initial_date=self.initial_date,
            end_date=self.end_date,
            days=self.days,
            current_day_balance=self.current_day_balance,
            summary=self.summary,
            metrics=self.metrics,
            missing_dates=self.missing_dates,
        )


def should_fetch_current_day(series: Sequence[DailyBalance], today: date) -> bool:
    return bool(series) and find_day(series, today) is None


def load_cash_book(source: BalanceSource, start: date, end: date, today: date) -> CashBook:
    # Stage 1: the range. A failure here propagates; nothing is computed.
    series = source.get_daily_balance(start, end)

    # Stage 2: today's balance, only when the range can't answer it.
    current_day = None
    if should_fetch_current_day(series, today):
        current_day = source.get_daily_balance_for_date(today)

    summary = compute_summary(series, current_day, today)

    gaps = find_gaps(series)
    if gaps:
        logger.warning("balance series %s..%s is missing %d day(s): %s", start, end, len(gaps), gaps[:5])

    return CashBook(
        initial_date=start,
        end_date=end,
        days=list(series),
        summary=summary,
        metrics=summary_metrics(summary),
        current_day_balance=current_day,
        missing_dates=gaps,
    )
