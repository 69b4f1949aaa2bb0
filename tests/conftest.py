import pytest
from decimal import Decimal
from datetime import date
from unittest.mock import MagicMock

from django.core.cache import cache

from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.domain.models import ExchangeRate
from apps.exchange.domain.policy import CurrencyPolicy
from apps.exchange.domain.services import ConversionService, ExchangeRateService
from apps.exchange.infrastructure.cache import DjangoRateCache


@pytest.fixture(autouse=True)
def clear_cache():
    """Every test starts and ends with an empty cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def latest_rates():
    """Unfiltered provider answer for EUR, including excluded currencies."""
    return {
        "USD": Decimal("1.1234"),
        "GBP": Decimal("0.8571"),
        "JPY": Decimal("163.42"),
        "TRY": Decimal("35.12"),
        "PLN": Decimal("4.31"),
    }


@pytest.fixture
def provider(latest_rates):
    """Provider double returning latest_rates for any base currency."""
    provider = MagicMock(spec=BaseExchangeRateProvider)
    provider.get_latest_rates.return_value = latest_rates
    provider.get_historical_rates.return_value = []
    return provider


@pytest.fixture
def rate_cache():
    return DjangoRateCache()


@pytest.fixture
def policy():
    return CurrencyPolicy()


@pytest.fixture
def exchange_rate_service(provider, rate_cache, policy):
    return ExchangeRateService(provider=provider, cache=rate_cache, policy=policy)


@pytest.fixture
def conversion_service(exchange_rate_service):
    return ConversionService(exchange_rate_service)


@pytest.fixture
def make_rate():
    """Factory for EUR-based ExchangeRate values in May 2024."""
    def _make_rate(target: str, day: int, rate: str = "1.5", base: str = "EUR") -> ExchangeRate:
        return ExchangeRate(
            base_currency=base,
            target_currency=target,
            rate=Decimal(rate),
            date=date(2024, 5, day),
        )
    return _make_rate
