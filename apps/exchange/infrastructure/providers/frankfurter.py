import logging
from datetime import date
from decimal import Decimal

import pybreaker
import requests
from django.conf import settings
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from apps.exchange.domain.exceptions import ProviderError
from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.domain.models import ExchangeRate, RateMap, utc_now

logger = logging.getLogger(__name__)


def is_client_error(exc: BaseException) -> bool:
    """4xx answers mean the request was wrong, not that the upstream is unhealthy."""
    response = getattr(exc, "response", None)
    return isinstance(exc, requests.exceptions.HTTPError) and response is not None and response.status_code < 500


class BreakerStateLogger(pybreaker.CircuitBreakerListener):
    """Logs circuit transitions: open, half-open and closed again."""

    def state_change(self, cb, old_state, new_state):
        old_name = getattr(old_state, "name", old_state)
        new_name = getattr(new_state, "name", new_state)
        if new_name == pybreaker.STATE_OPEN:
            logger.warning(
                "Circuit %s opened after %s failures, breaking for %ss", cb.name, cb.fail_counter, cb.reset_timeout
            )
        elif new_name == pybreaker.STATE_HALF_OPEN:
            logger.info("Circuit %s half-open, trying the next call", cb.name)
        elif old_name is not None:
            logger.info("Circuit %s closed", cb.name)


class FrankfurterProvider(BaseExchangeRateProvider):
    """
    Frankfurter API provider (https://www.frankfurter.app).
    Uses /latest for today's rates and /{start}..{end} for time series.

    Transient failures (connection errors, 429 and 5xx responses) are retried
    by the session with exponential backoff before a ProviderError is raised.

    Calls go through a circuit breaker. After failure_threshold consecutive
    transport failures it opens and calls fail fast for reset_timeout seconds,
    then a single trial call decides whether it closes again. Client errors
    (4xx) and unparseable bodies do not count as failures.
    """

    name = "frankfurter"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        failure_threshold: int | None = None,
        reset_timeout: float | None = None,
    ):
        self.base_url = (base_url or settings.FRANKFURTER_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.EXCHANGE_PROVIDER_TIMEOUT
        retries = retries if retries is not None else settings.EXCHANGE_PROVIDER_RETRIES
        if failure_threshold is None:
            failure_threshold = settings.EXCHANGE_BREAKER_FAILURE_THRESHOLD
        if reset_timeout is None:
            reset_timeout = settings.EXCHANGE_BREAKER_RESET_TIMEOUT

        self.session = requests.Session()
        retry = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        self.session.mount("https://", HTTPAdapter(max_retries=retry))
        self.session.mount("http://", HTTPAdapter(max_retries=retry))

        self.breaker = pybreaker.CircuitBreaker(
            fail_max=failure_threshold,
            reset_timeout=reset_timeout,
            exclude=[is_client_error],
            listeners=[BreakerStateLogger()],
            name="frankfurter",
        )

    def get_latest_rates(self, base_currency: str) -> RateMap:
        """
        Fetch today's rates for a base currency.

        Response format: {"amount": 1.0, "base": "EUR", "date": "2024-05-21", "rates": {"USD": 1.0842}}
        """
        data = self._get("/latest", {"from": base_currency})

        try:
            rates = {code.upper(): Decimal(str(rate)) for code, rate in data["rates"].items()}
        except (KeyError, AttributeError, TypeError, ArithmeticError) as e:
            raise ProviderError(f"Invalid response from Frankfurter API: {e}") from e

        logger.info("Successfully retrieved latest rates for %s from Frankfurter API", base_currency)
        return rates

    def get_historical_rates(self, base_currency: str, start_date: date, end_date: date) -> list[ExchangeRate]:
        """
        Fetch rates for every published day of a date range.

        Response format: {"base": "EUR", "start_date": "...", "end_date": "...",
                          "rates": {"2024-05-21": {"USD": 1.0842}, ...}}

        Returns:
            Rates ordered by date, then by target currency as published
        """
        data = self._get(f"/{start_date.isoformat()}..{end_date.isoformat()}", {"from": base_currency})

        fetched_at = utc_now()
        exchange_rates = []

        try:
            series = data["rates"]
            for date_str in sorted(series):
                try:
                    valuation_date = date.fromisoformat(date_str)
                except ValueError:
                    logger.warning("Skipping unparseable date %r in Frankfurter response", date_str)
                    continue

                for code, rate in series[date_str].items():
                    exchange_rates.append(
                        ExchangeRate(
                            base_currency=base_currency,
                            target_currency=code.upper(),
                            rate=Decimal(str(rate)),
                            date=valuation_date,
                            last_updated=fetched_at,
                        )
                    )
        except (KeyError, AttributeError, TypeError, ArithmeticError, ValueError) as e:
            raise ProviderError(f"Invalid response from Frankfurter API: {e}") from e

        logger.info(
            "Successfully retrieved historical rates for %s from %s to %s from Frankfurter API",
            base_currency, start_date, end_date,
        )
        return exchange_rates

    def get_supported_currencies(self) -> dict[str, str]:
        data = self._get("/currencies")

        if not isinstance(data, dict):
            raise ProviderError("Invalid response from Frankfurter API")

        return {code.upper(): name for code, name in data.items()}

    def _get(self, path: str, params: dict | None = None):
        url = f"{self.base_url}{path}"

        try:
            response = self.breaker.call(self._request, url, params)
            return response.json(parse_float=Decimal)

        except pybreaker.CircuitBreakerError as e:
            logger.error("Circuit breaker rejected call to Frankfurter API at %s", url)
            raise ProviderError("External API is temporarily unavailable") from e
        except requests.exceptions.Timeout as e:
            logger.error("Timeout calling Frankfurter API at %s", url)
            raise ProviderError("Timeout when calling external API") from e
        except requests.exceptions.HTTPError as e:
            logger.error("HTTP error from Frankfurter API: %s", e)
            raise ProviderError(f"Frankfurter API returned an error: {e}") from e
        except ValueError as e:
            # requests' JSONDecodeError is both a ValueError and a RequestException
            logger.error("Failed to parse response from Frankfurter API: %s", e)
            raise ProviderError("Failed to parse external API response") from e
        except requests.exceptions.RequestException as e:
            logger.error("Network error when calling Frankfurter API: %s", e)
            raise ProviderError("Network error when calling external API") from e

    def _request(self, url: str, params: dict | None):
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response
