from datetime import date, datetime, timezone
from io import BytesIO
from zipfile import ZipFile

import cashbook.services.export as export
from cashbook.schemas.balance import DailyBalance
from cashbook.services.cash_book import load_cash_book
from cashbook.services.export import build_cash_book_workbook, csv_filename, export_csv
from cashbook.services.reconciliation import compute_summary


def _series():
    return [
        DailyBalance.model_validate(
            {
                "date": "2025-01-01",
                "balance": {"opening": 100, "totalRevenue": 50, "totalExpense": 20, "closing": 130},
                "projected": {"opening": 100, "pendingTotalRevenue": 5, "pendingTotalExpense": 1.5, "closing": 133.5},
            }
        ),
        DailyBalance.model_validate(
            {
                "date": "2025-01-02",
                "balance": {"opening": 130, "totalRevenue": 0, "totalExpense": 30, "closing": 100},
                "projected": {"opening": 133.5, "pendingTotalRevenue": 0, "pendingTotalExpense": 0, "closing": 103.5},
            }
        ),
    ]


class _Source:
    def __init__(self, series):
        self.series = series

    def get_daily_balance(self, start, end):
        return list(self.series)

    def get_daily_balance_for_date(self, day):
        return None


def test_csv_layout():
    series = _series()
    summary = compute_summary(series, None, date(2025, 1, 2))

    lines = export_csv(series, summary).split("\n")

    assert lines[0] == "Date;Opening Balance;Revenue;Expense;Closing Balance;Pending (+);Pending (-);Projected Balance"
    assert lines[1] == "01/01/2025;100.00;50.00;20.00;130.00;5.00;1.50;133.50"
    assert lines[2] == "02/01/2025;130.00;0.00;30.00;100.00;0.00;0.00;103.50"
    assert lines[3] == "TOTAL (2 days);100.00;50.00;50.00;100.00;;;103.50"
    assert len(lines) == 4


def test_csv_for_empty_series_has_header_and_totals():
    summary = compute_summary([], None, date(2025, 1, 2))

    lines = export_csv([], summary).split("\n")

    assert len(lines) == 2
    assert lines[1] == "TOTAL (0 days);0.00;0.00;0.00;0.00;;;0.00"


def test_csv_filename():
    assert csv_filename(date(2025, 1, 1), date(2025, 1, 31)) == "cash-book-2025-01-01-2025-01-31.csv"


def test_workbook_is_written():
    book = load_cash_book(_Source(_series()), date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 2))
    buf = BytesIO()

    build_cash_book_workbook(book, buf)

    data = buf.getvalue()
    assert data[:2] == b"PK"
    assert len(data) > 1000


def test_workbook_for_empty_period():
    book = load_cash_book(_Source([]), date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 2))
    buf = BytesIO()

    build_cash_book_workbook(book, buf)

    assert buf.getvalue()[:2] == b"PK"


def test_workbook_timestamp_uses_local_clock(monkeypatch):
    generated = datetime(2025, 1, 2, 21, 45, tzinfo=timezone.utc)
    monkeypatch.setattr(export, "now_local", lambda: generated)
    book = load_cash_book(_Source(_series()), date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 2))
    buf = BytesIO()

    build_cash_book_workbook(book, buf)

    with ZipFile(BytesIO(buf.getvalue())) as zf:
        strings = zf.read("xl/sharedStrings.xml").decode("utf-8")
    assert "2025-01-02 21:45" in strings
