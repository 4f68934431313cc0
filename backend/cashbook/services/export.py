from __future__ import annotations

from datetime import date, datetime, time
from typing import Sequence

import xlsxwriter

from cashbook.schemas.balance import BalanceSummary, DailyBalance
from cashbook.services.cash_book import CashBook
from cashbook.utils.format import format_amount, format_date, format_percentage
from cashbook.utils.timezone import now_local

CSV_HEADERS = [
    "Date",
    "Opening Balance",
    "Revenue",
    "Expense",
    "Closing Balance",
    "Pending (+)",
    "Pending (-)",
    "Projected Balance",
]


def csv_filename(start: date, end: date) -> str:
    return f"cash-book-{start.isoformat()}-{end.isoformat()}.csv"


def xlsx_filename(start: date, end: date) -> str:
    return f"cash-book-{start.isoformat()}-{end.isoformat()}.xlsx"


def csv_rows(series: Sequence[DailyBalance], summary: BalanceSummary) -> list[list[str]]:
    rows = [list(CSV_HEADERS)]
    for day in series:
        rows.append(
            [
                format_date(day.date),
                format_amount(day.balance.opening),
                format_amount(day.balance.total_revenue),
                format_amount(day.balance.total_expense),
                format_amount(day.balance.closing),
                format_amount(day.projected.pending_total_revenue),
                format_amount(day.projected.pending_total_expense),
                format_amount(day.projected.closing),
            ]
        )

    rows.append(
        [
            f"TOTAL ({summary.total_days} days)",
            format_amount(summary.opening_balance),
            format_amount(summary.total_revenue),
            format_amount(summary.total_expense),
            format_amount(summary.closing_balance),
            "",
            "",
            format_amount(summary.projected_closing_balance),
        ]
    )
    return rows


def export_csv(series: Sequence[DailyBalance], summary: BalanceSummary) -> str:
    return "\n".join(";".join(row) for row in csv_rows(series, summary))


def build_cash_book_workbook(book: CashBook, out_file) -> None:
    wb = xlsxwriter.Workbook(out_file, {"in_memory": True})

    def fmt(**props):
        # Calibri 11 unless overridden.
        return wb.add_format({"font_name": "Calibri", "font_size": 11, **props})

    meta_label = fmt(bold=True, font_color="#334155")
    meta_value = fmt(font_color="#0f172a")
    subtle = fmt(font_size=10, font_color="#64748b")
    title = fmt(bold=True, font_size=14, font_color="#0f172a")

    header = fmt(bold=True, bg_color="#F1F5F9", border=1, align="center", valign="vcenter")
    date_fmt = fmt(num_format="dd/mm/yyyy", border=1)
    money2 = fmt(num_format="#,##0.00", border=1, align="right")
    total_label = fmt(bold=True, bg_color="#F8FAFC", border=1, align="left")
    total_money2 = fmt(bold=True, bg_color="#F8FAFC", border=1, num_format="#,##0.00", align="right")

    stripe_date = fmt(bg_color="#FBFDFF", num_format="dd/mm/yyyy", border=1)
    stripe_money2 = fmt(bg_color="#FBFDFF", num_format="#,##0.00", align="right", border=1)

    period = f"{format_date(book.initial_date)} to {format_date(book.end_date)}"

    # ----------------------------
    # Sheet 1: Cash Book (one row per day)
    # ----------------------------
    ws = wb.add_worksheet("Cash Book")
    ws.set_column(0, 0, 12)  # Date
    ws.set_column(1, 7, 18)  # Amounts

    ws.write(0, 0, "Period", meta_label)
    ws.write(0, 1, period, subtle)
    ws.write(1, 0, "Generated", meta_label)
    ws.write(1, 1, now_local().strftime("%Y-%m-%d %H:%M"), subtle)

    ws.set_row(3, 18)
    for c, h in enumerate(CSV_HEADERS):
        ws.write(3, c, h, header)
    ws.freeze_panes(4, 1)

    r = 4
    for day in book.days:
        ws.write_datetime(r, 0, datetime.combine(day.date, time.min), date_fmt)
        ws.write_number(r, 1, day.balance.opening, money2)
        ws.write_number(r, 2, day.balance.total_revenue, money2)
        ws.write_number(r, 3, day.balance.total_expense, money2)
        ws.write_number(r, 4, day.balance.closing, money2)
        ws.write_number(r, 5, day.projected.pending_total_revenue, money2)
        ws.write_number(r, 6, day.projected.pending_total_expense, money2)
        ws.write_number(r, 7, day.projected.closing, money2)
        r += 1

    last_data_row = r - 1
    if last_data_row >= 4:
        ws.autofilter(3, 0, last_data_row, 7)
        ws.conditional_format(
            4, 0, last_data_row, 0, {"type": "formula", "criteria": "=MOD(ROW(),2)=0", "format": stripe_date}
        )
        ws.conditional_format(
            4, 1, last_data_row, 7, {"type": "formula", "criteria": "=MOD(ROW(),2)=0", "format": stripe_money2}
        )

        total_row = last_data_row + 1
        last_excel = last_data_row + 1
        ws.write(total_row, 0, f"TOTAL ({book.summary.total_days} days)", total_label)
        ws.write_formula(total_row, 1, "=B5", total_money2, book.summary.opening_balance)
        ws.write_formula(total_row, 2, f"=SUM(C5:C{last_excel})", total_money2, book.summary.total_revenue)
        ws.write_formula(total_row, 3, f"=SUM(D5:D{last_excel})", total_money2, book.summary.total_expense)
        ws.write_formula(total_row, 4, f"=E{last_excel}", total_money2, book.summary.closing_balance)
        ws.write_blank(total_row, 5, None, total_label)
        ws.write_blank(total_row, 6, None, total_label)
        ws.write_formula(
            total_row, 7, f"=H{last_excel}", total_money2, book.summary.projected_closing_balance
        )

        ws.set_landscape()
        ws.fit_to_pages(1, 0)

    # ----------------------------
    # Sheet 2: Summary
    # ----------------------------
    sm = wb.add_worksheet("Summary")
    sm.set_column(0, 0, 28)
    sm.set_column(1, 1, 24)

    sm.write(0, 0, "Cash Book Summary", title)
    sm.write(2, 0, "Period", meta_label)
    sm.write(2, 1, period, subtle)

    if not book.days:
        sm.write(4, 0, "Note", meta_label)
        sm.write(4, 1, "No balance data exists for the selected period.", subtle)
        wb.close()
        return

    summary = book.summary
    metrics = book.metrics
    figures = [
        ("Opening Balance", summary.opening_balance),
        ("Total Revenue", summary.total_revenue),
        ("Total Expense", summary.total_expense),
        ("Closing Balance", summary.closing_balance),
        ("Projected Closing Balance", summary.projected_closing_balance),
        ("Net Change", summary.net_change),
        ("Current Balance", summary.current_balance),
        ("Current Projected Balance", summary.current_projected_balance),
        ("Average Daily Revenue", metrics.average_daily_revenue),
        ("Average Daily Expense", metrics.average_daily_expense),
    ]
    row = 4
    for label, value in figures:
        sm.write(row, 0, label, meta_label)
        sm.write_number(row, 1, value, money2)
        row += 1

    sm.write(row, 0, "Change %", meta_label)
    sm.write(row, 1, format_percentage(metrics.percentage_change), meta_value)
    row += 1
    sm.write(row, 0, "Current Date", meta_label)
    sm.write(row, 1, format_date(date.fromisoformat(summary.current_date)), meta_value)
    row += 1
    sm.write(row, 0, "Today In Period", meta_label)
    sm.write(row, 1, "yes" if summary.is_current_date_in_period else "no", meta_value)

    if book.missing_dates:
        row += 2
        sm.write(row, 0, "Missing Dates", meta_label)
        sm.write(row, 1, ", ".join(format_date(d) for d in book.missing_dates), subtle)

    wb.close()
