import threading
from datetime import date

from cashbook.core.config import settings
from cashbook.services.balance_source import BalanceApiClient
from cashbook.utils.timezone import today_local

_lock = threading.Lock()
_source: BalanceApiClient | None = None

def balance_source() -> BalanceApiClient:
    global _source
    with _lock:
        if _source is None:
            _source = BalanceApiClient.from_settings(settings)
        return _source

def close_balance_source() -> None:
    global _source
    with _lock:
        if _source is not None:
            _source.close()
            _source = None

def today() -> date:
    return today_local()
