"""
Currency validation rules shared by every exchange operation.
"""

from typing import Iterable

from apps.exchange.domain.exceptions import InvalidCurrencyError, UnsupportedCurrencyError
from apps.exchange.domain.models import ExchangeRate, RateMap, normalize_code


DEFAULT_EXCLUDED_CURRENCIES = frozenset({"TRY", "PLN", "THB", "MXN"})


class CurrencyPolicy:
    """
    Rejects blank currency codes and codes the business refuses to quote.

    The exclusion set is fixed for the lifetime of the policy instance;
    build a new policy to change it.
    """

    def __init__(self, excluded_currencies: Iterable[str] = DEFAULT_EXCLUDED_CURRENCIES):
        self.excluded_currencies = frozenset(normalize_code(code) for code in excluded_currencies)

    def validate(self, code: str | None) -> str:
        """
        Validate a currency code and return it normalized to uppercase.

        Raises:
            InvalidCurrencyError: code is None, empty or whitespace
            UnsupportedCurrencyError: code is in the exclusion set
        """
        if code is None or not code.strip():
            raise InvalidCurrencyError()

        normalized = normalize_code(code)
        if normalized in self.excluded_currencies:
            raise UnsupportedCurrencyError(normalized)

        return normalized

    def is_excluded(self, code: str) -> bool:
        return normalize_code(code) in self.excluded_currencies

    def filter_rates(self, rates: RateMap) -> RateMap:
        return {code: rate for code, rate in rates.items() if not self.is_excluded(code)}

    def filter_exchange_rates(self, rates: Iterable[ExchangeRate]) -> list[ExchangeRate]:
        return [
            rate for rate in rates
            if not self.is_excluded(rate.base_currency) and not self.is_excluded(rate.target_currency)
        ]
