from datetime import date

import pytest

from cashbook.schemas.balance import DailyBalance
from cashbook.services.reconciliation import compute_summary, find_gaps, summary_metrics


def _day(d: date, opening: float, revenue: float, expense: float, pending_rev: float = 0.0, pending_exp: float = 0.0):
    closing = opening + revenue - expense
    return DailyBalance.model_validate(
        {
            "date": d.isoformat(),
            "balance": {
                "opening": opening,
                "totalRevenue": revenue,
                "totalExpense": expense,
                "closing": closing,
            },
            "projected": {
                "opening": opening,
                "pendingTotalRevenue": pending_rev,
                "pendingTotalExpense": pending_exp,
                "closing": closing + pending_rev - pending_exp,
            },
        }
    )


@pytest.fixture()
def one_day():
    return [_day(date(2025, 1, 1), 100.0, 50.0, 20.0)]


def test_today_in_period_uses_that_day(one_day):
    s = compute_summary(one_day, None, date(2025, 1, 1))

    assert s.current_balance == 130.0
    assert s.opening_balance == 100.0
    assert s.closing_balance == 130.0
    assert s.net_change == 30.0
    assert s.is_current_date_in_period is True
    assert s.current_date == "2025-01-01"


def test_today_after_period_falls_back_to_closing(one_day):
    s = compute_summary(one_day, None, date(2025, 1, 5))

    assert s.current_balance == 130.0
    assert s.current_projected_balance == 130.0
    assert s.is_current_date_in_period is False


def test_today_before_period_reports_zero(one_day):
    s = compute_summary(one_day, None, date(2024, 12, 25))

    assert s.current_balance == 0.0
    assert s.current_projected_balance == 0.0


def test_separate_fetch_wins_over_fallback(one_day):
    current = DailyBalance.model_validate(
        {"date": "2025-01-05", "balance": {"closing": 200}, "projected": {"closing": 260}}
    )

    s = compute_summary(one_day, current, date(2025, 1, 5))

    assert s.current_balance == 200.0
    assert s.current_projected_balance == 260.0
    assert s.closing_balance == 130.0


def test_separate_fetch_ignored_when_today_in_period(one_day):
    current = DailyBalance.model_validate({"date": "2025-01-01", "balance": {"closing": 999}})

    s = compute_summary(one_day, current, date(2025, 1, 1))

    assert s.current_balance == 130.0


def test_empty_series_is_zeroed():
    s = compute_summary([], None, date(2025, 1, 1))

    assert s.total_days == 0
    assert s.opening_balance == 0.0
    assert s.closing_balance == 0.0
    assert s.projected_closing_balance == 0.0
    assert s.total_revenue == 0.0
    assert s.total_expense == 0.0
    assert s.net_change == 0.0
    assert s.current_balance == 0.0
    assert s.current_projected_balance == 0.0
    assert s.is_current_date_in_period is False
    assert s.current_date == "2025-01-01"


def test_empty_series_ignores_current_day_balance():
    current = DailyBalance.model_validate({"date": "2025-01-01", "balance": {"closing": 50}})

    s = compute_summary([], current, date(2025, 1, 1))

    assert s.current_balance == 0.0


def test_projected_closing_comes_from_last_day():
    series = [
        _day(date(2025, 3, 1), 10.0, 5.0, 0.0, pending_rev=1.0),
        _day(date(2025, 3, 2), 15.0, 0.0, 5.0, pending_exp=40.0),
    ]

    s = compute_summary(series, None, date(2025, 3, 2))

    assert s.projected_closing_balance == -30.0
    assert s.current_projected_balance == -30.0


def test_inputs_are_not_mutated(one_day):
    before = [d.model_dump() for d in one_day]
    compute_summary(one_day, None, date(2025, 1, 1))
    assert [d.model_dump() for d in one_day] == before


def test_find_gaps_lists_missing_days():
    series = [
        _day(date(2025, 1, 1), 0.0, 0.0, 0.0),
        _day(date(2025, 1, 2), 0.0, 0.0, 0.0),
        _day(date(2025, 1, 5), 0.0, 0.0, 0.0),
    ]

    assert find_gaps(series) == [date(2025, 1, 3), date(2025, 1, 4)]
    assert find_gaps(series[:2]) == []
    assert find_gaps([]) == []


def test_metrics_percentages():
    series = [_day(date(2025, 1, 1), 200.0, 100.0, 50.0)]
    m = summary_metrics(compute_summary(series, None, date(2025, 1, 1)))

    assert m.percentage_change == pytest.approx(25.0)
    assert m.current_change == pytest.approx(50.0)
    assert m.current_percentage_change == pytest.approx(25.0)
    assert m.average_daily_revenue == 100.0
    assert m.average_daily_expense == 50.0


def test_metrics_zero_opening_is_undefined_not_an_error():
    series = [_day(date(2025, 1, 1), 0.0, 80.0, 0.0)]
    m = summary_metrics(compute_summary(series, None, date(2025, 1, 1)))

    assert m.percentage_change is None
    assert m.current_percentage_change is None


def test_metrics_zero_opening_and_no_change_is_zero():
    series = [_day(date(2025, 1, 1), 0.0, 0.0, 0.0)]
    m = summary_metrics(compute_summary(series, None, date(2025, 1, 1)))

    assert m.percentage_change == 0.0
    assert m.current_percentage_change == 0.0


def test_metrics_negative_projection():
    series = [_day(date(2025, 1, 1), 100.0, 0.0, 20.0, pending_exp=130.0)]
    m = summary_metrics(compute_summary(series, None, date(2025, 1, 1)))

    assert m.is_projected_negative is True
    assert m.projected_deficit == 50.0
    assert m.amount_to_recover == 130.0


def test_metrics_for_empty_summary():
    m = summary_metrics(compute_summary([], None, date(2025, 1, 1)))

    assert m.average_daily_revenue == 0.0
    assert m.average_daily_expense == 0.0
    assert m.is_projected_negative is False
    assert m.amount_to_recover == 0.0


def test_today_inside_a_gap_reports_zero():
    series = [_day(date(2025, 1, 1), 10.0, 0.0, 0.0), _day(date(2025, 1, 5), 50.0, 0.0, 0.0)]

    s = compute_summary(series, None, date(2025, 1, 3))

    assert s.is_current_date_in_period is False
    assert s.current_balance == 0.0
    assert s.current_projected_balance == 0.0


def test_today_inside_a_gap_prefers_separate_fetch():
    series = [_day(date(2025, 1, 1), 10.0, 0.0, 0.0), _day(date(2025, 1, 5), 50.0, 0.0, 0.0)]
    current = DailyBalance.model_validate(
        {"date": "2025-01-03", "balance": {"closing": 30}, "projected": {"closing": 35}}
    )

    s = compute_summary(series, current, date(2025, 1, 3))

    assert s.is_current_date_in_period is False
    assert s.current_balance == 30.0
    assert s.current_projected_balance == 35.0
