from datetime import date

from pydantic import BaseModel, Field


class _Wire(BaseModel):
    """Frozen model that reads and writes the backend's camelCase field names."""

    class Config:
        frozen = True
        populate_by_name = True


class Balance(_Wire):
    opening: float = 0.0
    total_revenue: float = Field(0.0, alias="totalRevenue")
    total_expense: float = Field(0.0, alias="totalExpense")
    closing: float = 0.0


class Projected(_Wire):
    opening: float = 0.0
    pending_total_revenue: float = Field(0.0, alias="pendingTotalRevenue")
    pending_total_expense: float = Field(0.0, alias="pendingTotalExpense")
    closing: float = 0.0


class DailyBalance(_Wire):
    # Plain calendar day: "2025-01-01" is parsed as date(2025, 1, 1), no tz shift.
    date: date
    balance: Balance = Field(default_factory=Balance)
    projected: Projected = Field(default_factory=Projected)


class BalanceSummary(_Wire):
    total_days: int = Field(0, alias="totalDays")
    opening_balance: float = Field(0.0, alias="openingBalance")
    total_revenue: float = Field(0.0, alias="totalRevenue")
    total_expense: float = Field(0.0, alias="totalExpense")
    closing_balance: float = Field(0.0, alias="closingBalance")
    projected_closing_balance: float = Field(0.0, alias="projectedClosingBalance")
    net_change: float = Field(0.0, alias="netChange")
    current_balance: float = Field(0.0, alias="currentBalance")
    current_projected_balance: float = Field(0.0, alias="currentProjectedBalance")
    current_date: str = Field(..., alias="currentDate")
    is_current_date_in_period: bool = Field(False, alias="isCurrentDateInPeriod")


class SummaryMetrics(_Wire):
    # None means "undefined": a non-zero change over a zero opening balance.
    percentage_change: float | None = Field(0.0, alias="percentageChange")
    current_change: float = Field(0.0, alias="currentChange")
    current_percentage_change: float | None = Field(0.0, alias="currentPercentageChange")
    average_daily_revenue: float = Field(0.0, alias="averageDailyRevenue")
    average_daily_expense: float = Field(0.0, alias="averageDailyExpense")
    is_projected_negative: bool = Field(False, alias="isProjectedNegative")
    projected_deficit: float = Field(0.0, alias="projectedDeficit")
    amount_to_recover: float = Field(0.0, alias="amountToRecover")


class CashBookOut(_Wire):
    initial_date: date = Field(..., alias="initialDate")
    end_date: date = Field(..., alias="endDate")
    days: list[DailyBalance]
    current_day_balance: DailyBalance | None = Field(None, alias="currentDayBalance")
    summary: BalanceSummary
    metrics: SummaryMetrics
    missing_dates: list[date] = Field(default_factory=list, alias="missingDates")
