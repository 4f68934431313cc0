from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response, StreamingResponse

from cashbook.api.deps import balance_source, today
from cashbook.core.config import settings
from cashbook.schemas.balance import BalanceSummary, CashBookOut
from cashbook.services.balance_source import BalanceSourceError
from cashbook.services.cash_book import BalanceSource, CashBook, load_cash_book
from cashbook.services.export import build_cash_book_workbook, csv_filename, export_csv, xlsx_filename
from cashbook.services.periods import Preset, default_period, preset_period

router = APIRouter(prefix="/cashbook", tags=["cashbook"])


def _resolve_period(start: date | None, end: date | None, preset: str | None, day: date) -> tuple[date, date]:
    if start is not None and end is not None:
        lo, hi = start, end
    elif preset is not None:
        lo, hi = preset_period(preset, day)
    else:
        lo, hi = default_period(day, settings.default_period_days)
    if lo > hi:
        raise HTTPException(status_code=422, detail="invalid_range")
    return lo, hi


def _load(source: BalanceSource, start, end, preset, day: date) -> CashBook:
    lo, hi = _resolve_period(start, end, preset, day)
    try:
        return load_cash_book(source, lo, hi, day)
    except BalanceSourceError as e:
        raise HTTPException(status_code=502, detail=e.message)


@router.get("", response_model=CashBookOut)
def cash_book(
    start: date | None = Query(None),
    end: date | None = Query(None),
    preset: Preset | None = Query(None),
    source: BalanceSource = Depends(balance_source),
    day: date = Depends(today),
):
    return _load(source, start, end, preset, day).to_out()


@router.get("/summary", response_model=BalanceSummary)
def cash_book_summary(
    start: date | None = Query(None),
    end: date | None = Query(None),
    preset: Preset | None = Query(None),
    source: BalanceSource = Depends(balance_source),
    day: date = Depends(today),
):
    return _load(source, start, end, preset, day).summary


@router.get("/export")
def cash_book_export(
    start: date | None = Query(None),
    end: date | None = Query(None),
    preset: Preset | None = Query(None),
    format: Literal["csv", "xlsx"] = Query("csv"),
    source: BalanceSource = Depends(balance_source),
    day: date = Depends(today),
):
    book = _load(source, start, end, preset, day)

    if format == "xlsx":
        buf = BytesIO()
        build_cash_book_workbook(book, buf)
        buf.seek(0)
        filename = xlsx_filename(book.initial_date, book.end_date)
        return StreamingResponse(
            buf,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    filename = csv_filename(book.initial_date, book.end_date)
    return Response(
        content=export_csv(book.days, book.summary),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
