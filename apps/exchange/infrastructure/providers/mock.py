"""
Mock provider for development and tests.
Generates deterministic, realistic-looking exchange rates.
"""

import random
from datetime import date, timedelta
from decimal import Decimal

from apps.exchange.domain.exceptions import ProviderError
from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.domain.models import ExchangeRate, RateMap, utc_now


class MockProvider(BaseExchangeRateProvider):
    """
    Mock provider that derives cross rates from a USD table.
    Useful for:
    - Testing without external API calls
    - Development without network access

    The table deliberately includes currencies the exchange policy excludes,
    like a real upstream would.
    """

    name = "mock"

    # Base rates relative to USD (approximate real-world values)
    BASE_RATES = {
        "USD": Decimal("1.0"),
        "EUR": Decimal("0.92"),
        "GBP": Decimal("0.79"),
        "CHF": Decimal("0.88"),
        "JPY": Decimal("151.6"),
        "CAD": Decimal("1.36"),
        "TRY": Decimal("32.2"),
        "PLN": Decimal("3.98"),
        "THB": Decimal("36.5"),
        "MXN": Decimal("16.9"),
    }

    CURRENCY_NAMES = {
        "USD": "United States Dollar",
        "EUR": "Euro",
        "GBP": "British Pound",
        "CHF": "Swiss Franc",
        "JPY": "Japanese Yen",
        "CAD": "Canadian Dollar",
        "TRY": "Turkish Lira",
        "PLN": "Polish Zloty",
        "THB": "Thai Baht",
        "MXN": "Mexican Peso",
    }

    def get_latest_rates(self, base_currency: str) -> RateMap:
        return self._rates_for_date(base_currency, date.today())

    def get_historical_rates(self, base_currency: str, start_date: date, end_date: date) -> list[ExchangeRate]:
        """
        One rate per target currency for every weekday in the range,
        mirroring the publication calendar of central-bank feeds.
        """
        fetched_at = utc_now()
        exchange_rates = []

        current_date = start_date
        while current_date <= end_date:
            if current_date.weekday() < 5:
                for code, rate in self._rates_for_date(base_currency, current_date).items():
                    exchange_rates.append(
                        ExchangeRate(
                            base_currency=base_currency,
                            target_currency=code,
                            rate=rate,
                            date=current_date,
                            last_updated=fetched_at,
                        )
                    )
            current_date += timedelta(days=1)

        return exchange_rates

    def get_supported_currencies(self) -> dict[str, str]:
        return dict(self.CURRENCY_NAMES)

    def _rates_for_date(self, base_currency: str, valuation_date: date) -> RateMap:
        source_rate = self.BASE_RATES.get(base_currency)
        if source_rate is None:
            raise ProviderError(f"MockProvider: Unsupported base currency {base_currency}")

        rates = {}
        for code, target_rate in self.BASE_RATES.items():
            if code == base_currency:
                continue

            # Small variation (±2%), seeded for reproducibility
            rng = random.Random(f"{base_currency}{code}{valuation_date}")
            variation = Decimal(str(rng.uniform(0.98, 1.02)))
            rates[code] = (target_rate / source_rate * variation).quantize(Decimal("0.000001"))

        return rates
