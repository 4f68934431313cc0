from __future__ import annotations

import logging
import threading
import time
from datetime import date
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from cashbook.core.config import Settings
from cashbook.schemas.balance import DailyBalance

logger = logging.getLogger(__name__)

BASE_PATH = "/balance"


class BalanceSourceError(RuntimeError):
    def __init__(self, message: str, status: int | None = None, validations: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.validations = validations


def _response_payload(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def error_message(exc: BaseException) -> str:
    """Display message for a failed balance request."""
    if isinstance(exc, BalanceSourceError):
        return exc.message

    if isinstance(exc, httpx.HTTPStatusError):
        payload = _response_payload(exc.response)
        if payload.get("message"):
            return str(payload["message"])
        if exc.response.status_code == 404:
            return "Resource not found"
        if exc.response.status_code == 500:
            return "Internal server error"
        return str(exc)

    if isinstance(exc, httpx.RequestError):
        return "Could not connect to the balance service. Check that the backend is running."

    return "Unknown error"


def _log_request(request: httpx.Request) -> None:
    logger.info("%s %s", request.method, request.url)


def _log_response(response: httpx.Response) -> None:
    request = response.request
    if response.is_error:
        logger.error("%s %s - %s", request.method, request.url, response.status_code)
    else:
        logger.info("%s %s - %s", request.method, request.url, response.status_code)


def _is_retryable(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


class BalanceApiClient:
    """Client for the budgeting backend's daily balance endpoint.

    Range and single-day lookups are cached separately, each with its own
    TTL and retry budget.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 10.0,
        range_retries: int = 2,
        date_retries: int = 1,
        range_ttl_s: float = 120.0,
        date_ttl_s: float = 300.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.range_retries = range_retries
        self.date_retries = date_retries
        self.range_ttl_s = range_ttl_s
        self.date_ttl_s = date_ttl_s

        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_s,
            headers={"Content-Type": "application/json"},
            transport=transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )
        self._lock = threading.Lock()
        self._cache: dict[tuple, tuple[float, Any]] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "BalanceApiClient":
        return cls(
            settings.personalbudget_api_url,
            timeout_s=settings.api_timeout_seconds,
            range_retries=settings.range_retries,
            date_retries=settings.date_retries,
            range_ttl_s=settings.range_cache_ttl_seconds,
            date_ttl_s=settings.date_cache_ttl_seconds,
        )

    def close(self) -> None:
        self._client.close()

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _cached(self, key: tuple) -> tuple[bool, Any]:
        with self._lock:
            hit = self._cache.get(key)
            if hit is None:
                return False, None
            expires_at, value = hit
            if time.monotonic() >= expires_at:
                del self._cache[key]
                return False, None
            return True, value

    def _store(self, key: tuple, value: Any, ttl_s: float) -> None:
        if ttl_s <= 0:
            return
        with self._lock:
            self._cache[key] = (time.monotonic() + ttl_s, value)

    def _fetch_daily(self, start: date, end: date, retries: int) -> list[DailyBalance]:
        params = {"initialDate": start.isoformat(), "endDate": end.isoformat()}
        attempt = 0
        while True:
            try:
                r = self._client.get(f"{BASE_PATH}/daily", params=params)
                r.raise_for_status()
                break
            except httpx.HTTPError as e:
                if attempt >= retries or not _is_retryable(e):
                    raise
                attempt += 1
                logger.warning("retrying %s..%s (attempt %d/%d): %s", start, end, attempt, retries, e)

        data = r.json()
        if not isinstance(data, list):
            data = []
        rows = [DailyBalance.model_validate(item) for item in data]
        # The backend serializes a set, so order is not guaranteed.
        rows.sort(key=lambda row: row.date)
        return rows

    def get_daily_balance(self, start: date, end: date) -> list[DailyBalance]:
        key = ("range", start, end)
        hit, value = self._cached(key)
        if hit:
            return list(value)

        try:
            rows = self._fetch_daily(start, end, self.range_retries)
        except httpx.HTTPError as e:
            status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            validations = None
            if isinstance(e, httpx.HTTPStatusError):
                validations = _response_payload(e.response).get("validations")
            raise BalanceSourceError(error_message(e), status=status, validations=validations) from e
        except (ValueError, ValidationError) as e:
            raise BalanceSourceError("Invalid balance payload") from e

        self._store(key, tuple(rows), self.range_ttl_s)
        return rows

    def get_daily_balance_for_date(self, day: date) -> Optional[DailyBalance]:
        key = ("date", day)
        hit, value = self._cached(key)
        if hit:
            return value

        try:
            rows = self._fetch_daily(day, day, self.date_retries)
        except (httpx.HTTPError, ValueError, ValidationError):
            logger.exception("balance lookup failed for %s", day)
            return None

        row = rows[0] if rows else None
        self._store(key, row, self.date_ttl_s)
        return row
