"""
Domain services - Core business logic.
Implements the cache-aside pipeline for exchange rates and currency conversion.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from apps.exchange.domain.exceptions import (
    ExternalProviderError,
    InvalidAmountError,
    InvalidPaginationError,
    InvalidRangeError,
    RateNotFoundError,
    UnsupportedCurrencyError,
)
from apps.exchange.domain.interfaces import BaseExchangeRateProvider, BaseRateCache
from apps.exchange.domain.models import ExchangeRate, RateMap, normalize_code, round_amount, utc_now
from apps.exchange.domain.policy import CurrencyPolicy

logger = logging.getLogger(__name__)

LATEST_RATES_TTL = 15 * 60
HISTORICAL_RATES_TTL = 60 * 60


def latest_rates_key(base_currency: str) -> str:
    return f"latest_rates_{base_currency}"


def historical_rates_key(base_currency: str, start_date: date, end_date: date) -> str:
    return f"historical_rates_{base_currency}_{start_date.isoformat()}_{end_date.isoformat()}"


def paginate(items: list, page: int, page_size: int) -> list:
    offset = (page - 1) * page_size
    return items[offset:offset + page_size]


def usable_rates(rates: RateMap, source: str) -> RateMap:
    """Drop rates that cannot price a conversion (zero, negative, NaN or infinite)."""
    usable = {}
    for code, rate in rates.items():
        if not rate.is_finite() or rate <= 0:
            logger.warning("Ignoring unusable rate %s=%s from %s", code, rate, source)
            continue
        usable[code] = rate
    return usable


class ExchangeRateService:
    """
    Domain service that handles exchange rate retrieval with a cache-aside strategy.

    Read strategy:
    1. Validate every currency against the policy (no I/O for rejected codes)
    2. Check the cache
    3. On miss, query the provider and cache its unfiltered answer
    4. Filter excluded currencies on every read, hit or miss

    Filtering after the cache means a cached payload written under an older
    exclusion list is still filtered by the current one.
    """

    def __init__(
        self,
        provider: BaseExchangeRateProvider,
        cache: BaseRateCache,
        policy: CurrencyPolicy | None = None,
        latest_ttl: int = LATEST_RATES_TTL,
        historical_ttl: int = HISTORICAL_RATES_TTL,
    ):
        self.provider = provider
        self.cache = cache
        self.policy = policy or CurrencyPolicy()
        self.latest_ttl = latest_ttl
        self.historical_ttl = historical_ttl

    def get_latest_rates(self, base_currency: str) -> RateMap:
        """
        Get today's rates for a base currency.

        Args:
            base_currency: Base currency code (e.g. "EUR"), any case

        Returns:
            Mapping of target currency code to rate, without excluded currencies

        Raises:
            InvalidCurrencyError, UnsupportedCurrencyError: before any I/O
            ExternalProviderError: the provider call failed

        Example:
            >>> rates = service.get_latest_rates("eur")
            >>> rates["USD"]
            Decimal('1.0842')
        """
        base_currency = self.policy.validate(base_currency)

        cached = self._read_rate_map(latest_rates_key(base_currency))
        if cached is not None:
            logger.info("Retrieved latest exchange rates for %s from cache", base_currency)
            return self.policy.filter_rates(cached)

        return self._fetch_latest_rates(base_currency)

    def refresh_latest_rates(self, base_currency: str) -> RateMap:
        """Fetch latest rates from the provider and overwrite the cache entry."""
        base_currency = self.policy.validate(base_currency)
        return self._fetch_latest_rates(base_currency)

    def get_rate(self, base_currency: str, target_currency: str) -> ExchangeRate:
        base_currency = self.policy.validate(base_currency)
        target_currency = self.policy.validate(target_currency)

        rates = self.get_latest_rates(base_currency)

        rate = rates.get(target_currency)
        if rate is None:
            raise RateNotFoundError(base_currency, target_currency)

        now = utc_now()
        return ExchangeRate(
            base_currency=base_currency,
            target_currency=target_currency,
            rate=rate,
            date=now.date(),
            last_updated=now,
        )

    def get_historical_rates(
        self,
        base_currency: str,
        start_date: date,
        end_date: date,
        page: int = 1,
        page_size: int = 10,
    ) -> list[ExchangeRate]:
        """
        Get one page of historical rates for a base currency.

        Args:
            base_currency: Base currency code
            start_date: First day of the range (inclusive)
            end_date: Last day of the range (inclusive)
            page: 1-based page number
            page_size: Number of rates per page

        Returns:
            The requested page of the filtered series, in provider order

        Raises:
            InvalidRangeError: start_date is after end_date
            InvalidPaginationError: page or page_size is below 1
            ExternalProviderError: the provider call failed
        """
        base_currency = self.policy.validate(base_currency)

        if start_date > end_date:
            raise InvalidRangeError()

        if page < 1 or page_size < 1:
            raise InvalidPaginationError()

        cache_key = historical_rates_key(base_currency, start_date, end_date)

        cached = self._read_rate_list(cache_key)
        if cached is not None:
            logger.info("Retrieved historical exchange rates for %s from cache", base_currency)
            return paginate(self.policy.filter_exchange_rates(cached), page, page_size)

        try:
            rates = list(self.provider.get_historical_rates(base_currency, start_date, end_date))
        except Exception as e:
            logger.error(
                "Failed to retrieve historical exchange rates for %s: %s", base_currency, e
            )
            raise ExternalProviderError("Failed to retrieve historical exchange rates") from e

        self.cache.set(cache_key, [rate.to_dict() for rate in rates], self.historical_ttl)
        logger.info(
            "Retrieved historical exchange rates for %s from %s to %s from provider",
            base_currency, start_date, end_date,
        )

        return paginate(self.policy.filter_exchange_rates(rates), page, page_size)

    def _fetch_latest_rates(self, base_currency: str) -> RateMap:
        try:
            rates = {
                normalize_code(code): Decimal(str(rate))
                for code, rate in self.provider.get_latest_rates(base_currency).items()
            }
            rates = usable_rates(rates, base_currency)
        except Exception as e:
            logger.error("Failed to retrieve latest exchange rates for %s: %s", base_currency, e)
            raise ExternalProviderError("Failed to retrieve exchange rates") from e

        self.cache.set(
            latest_rates_key(base_currency),
            {code: str(rate) for code, rate in rates.items()},
            self.latest_ttl,
        )
        logger.info("Retrieved latest exchange rates for %s from provider", base_currency)

        return self.policy.filter_rates(rates)

    def _read_rate_map(self, key: str) -> RateMap | None:
        payload = self.cache.get(key)
        if payload is None:
            return None

        try:
            rates = {normalize_code(code): Decimal(str(rate)) for code, rate in payload.items()}
        except (AttributeError, TypeError, InvalidOperation) as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return None

        return usable_rates(rates, key)

    def _read_rate_list(self, key: str) -> list[ExchangeRate] | None:
        payload = self.cache.get(key)
        if payload is None:
            return None

        try:
            return [ExchangeRate.from_dict(item) for item in payload]
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return None


class ConversionService:
    """
    Converts amounts between currencies using the latest rates.
    Results are rounded to 4 decimal places, midpoints away from zero.
    """

    def __init__(self, exchange_rate_service: ExchangeRateService):
        self.exchange_rate_service = exchange_rate_service

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        """
        Convert an amount from one currency to another.

        Both codes go through the currency policy first. Same-currency
        conversions then return the amount unchanged without touching the
        cache or the provider.

        Example:
            >>> conversion_service.convert(Decimal("100"), "EUR", "USD")
            Decimal('112.3400')
        """
        converted_amount, _ = self._convert(amount, from_currency, to_currency)
        return converted_amount

    def convert_with_details(self, amount: Decimal, from_currency: str, to_currency: str) -> dict:
        """
        Same rules as convert(), returning the rate used alongside the result.

        Returns:
            Dict with from_currency, to_currency, amount, rate,
            converted_amount and timestamp
        """
        converted_amount, rate = self._convert(amount, from_currency, to_currency)

        return {
            "from_currency": normalize_code(from_currency),
            "to_currency": normalize_code(to_currency),
            "amount": amount,
            "rate": rate,
            "converted_amount": converted_amount,
            "timestamp": utc_now(),
        }

    def is_currency_supported(self, currency_code: str | None) -> bool:
        if currency_code is None or not currency_code.strip():
            return False

        try:
            self.exchange_rate_service.get_latest_rates(currency_code)
            return True
        except UnsupportedCurrencyError:
            return False
        except Exception as e:
            logger.warning("Error checking if currency %s is supported: %s", currency_code, e)
            return False

    def _convert(self, amount: Decimal, from_currency: str, to_currency: str) -> tuple[Decimal, Decimal]:
        if amount < 0:
            raise InvalidAmountError()

        policy = self.exchange_rate_service.policy
        from_currency = policy.validate(from_currency)
        to_currency = policy.validate(to_currency)

        if from_currency == to_currency:
            return amount, Decimal("1")

        try:
            exchange_rate = self.exchange_rate_service.get_rate(from_currency, to_currency)
        except Exception as e:
            logger.error("Failed to convert %s from %s to %s: %s", amount, from_currency, to_currency, e)
            raise

        converted_amount = exchange_rate.convert(amount)
        logger.info(
            "Converted %s %s to %s %s using rate %s",
            amount, exchange_rate.base_currency, converted_amount,
            exchange_rate.target_currency, exchange_rate.rate,
        )

        return converted_amount, exchange_rate.rate
