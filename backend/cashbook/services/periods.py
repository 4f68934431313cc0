from __future__ import annotations

from datetime import date, timedelta
from typing import Literal

Preset = Literal["today", "week", "month", "last-month", "year"]


def _month_start(d: date) -> date:
    return date(d.year, d.month, 1)


def _prev_month_end(d: date) -> date:
    return _month_start(d) - timedelta(days=1)


def default_period(today: date, days: int = 30) -> tuple[date, date]:
    return (today - timedelta(days=days), today)


def preset_period(preset: str, today: date) -> tuple[date, date]:
    if preset == "today":
        return (today, today)
    if preset == "week":
        return (today - timedelta(days=7), today)
    if preset == "month":
        return (_month_start(today), today)
    if preset == "last-month":
        end = _prev_month_end(today)
        return (_month_start(end), end)
    if preset == "year":
        return (date(today.year, 1, 1), today)
    raise ValueError(f"unknown_preset_{preset}")
