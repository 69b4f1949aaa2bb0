"""
Builds the domain services from Django settings.
Views, tasks and commands get their services here instead of wiring them by hand.
"""

from django.conf import settings

from apps.exchange.domain.policy import CurrencyPolicy
from apps.exchange.domain.services import ConversionService, ExchangeRateService
from apps.exchange.infrastructure.cache import DjangoRateCache
from apps.exchange.infrastructure.providers.registry import get_configured_provider


def get_currency_policy() -> CurrencyPolicy:
    return CurrencyPolicy(settings.EXCHANGE_EXCLUDED_CURRENCIES)


def get_exchange_rate_service() -> ExchangeRateService:
    return ExchangeRateService(
        provider=get_configured_provider(),
        cache=DjangoRateCache(alias=settings.EXCHANGE_CACHE_ALIAS),
        policy=get_currency_policy(),
        latest_ttl=settings.EXCHANGE_LATEST_RATES_TTL,
        historical_ttl=settings.EXCHANGE_HISTORICAL_RATES_TTL,
    )


def get_conversion_service() -> ConversionService:
    return ConversionService(get_exchange_rate_service())
