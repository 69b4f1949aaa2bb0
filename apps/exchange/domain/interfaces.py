from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from apps.exchange.domain.models import ExchangeRate, RateMap


class BaseExchangeRateProvider(ABC):
    """
    Upstream source of exchange rates.
    Implementations raise ProviderError on transport or parsing failures
    and know nothing about caching.
    """

    name: str = ""

    @abstractmethod
    def get_latest_rates(self, base_currency: str) -> RateMap:
        pass

    @abstractmethod
    def get_historical_rates(self, base_currency: str, start_date: date, end_date: date) -> list[ExchangeRate]:
        pass

    @abstractmethod
    def get_supported_currencies(self) -> dict[str, str]:
        pass


class BaseRateCache(ABC):
    """
    Best-effort key/value store with per-entry TTL (seconds).
    Never raises: get() returns None on miss or failure, set() and remove()
    return whether the operation succeeded.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int) -> bool:
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        pass
