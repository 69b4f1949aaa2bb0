"""
Celery tasks for background processing.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from celery import shared_task
from django.conf import settings

from apps.exchange.domain.exceptions import ExchangeError
from apps.exchange.domain.services import ExchangeRateService
from apps.exchange.application.services import get_exchange_rate_service

logger = logging.getLogger(__name__)


async def refresh_rates_async(
    service: ExchangeRateService,
    base_currency: str
) -> Tuple[str, Optional[int], Optional[str]]:
    """
    Refresh the cached latest rates for one base currency by running the
    synchronous service in a thread pool via asyncio.to_thread.

    Returns tuple: (base_currency, rates_cached, error). Exactly one of
    rates_cached and error is None. Errors never escape, so one failing
    currency does not cancel the others.
    """
    try:
        rates = await asyncio.to_thread(service.refresh_latest_rates, base_currency)
    except ExchangeError as e:
        logger.warning("Could not refresh rates for %s: %s", base_currency, e)
        return (base_currency, None, str(e))
    except Exception as e:
        logger.exception("Unexpected error refreshing rates for %s", base_currency)
        return (base_currency, None, str(e))

    return (base_currency, len(rates), None)


async def refresh_rates_for_currencies(
    service: ExchangeRateService,
    base_currencies: List[str]
) -> List[Tuple[str, Optional[int], Optional[str]]]:
    """
    Refresh all base currencies using concurrent requests.
    """
    tasks = [refresh_rates_async(service, code) for code in base_currencies]
    return list(await asyncio.gather(*tasks))


@shared_task(name="warm_latest_rates")
def warm_latest_rates(base_currencies: Optional[List[str]] = None) -> Dict:
    """
    Pre-populate the latest rates cache so requests hit a warm entry.

    Args:
        base_currencies: Currency codes to refresh, defaults to
            settings.EXCHANGE_WARM_BASE_CURRENCIES

    Returns:
        Dict with operation results
    """
    if base_currencies is None:
        base_currencies = list(settings.EXCHANGE_WARM_BASE_CURRENCIES)

    if not base_currencies:
        return {
            "success": False,
            "message": "No base currencies configured for warm-up",
            "currencies_refreshed": [],
            "rates_cached": 0,
            "errors": [],
        }

    service = get_exchange_rate_service()
    logger.info("Warming latest rates cache for %s", ", ".join(base_currencies))

    results = asyncio.run(refresh_rates_for_currencies(service, base_currencies))

    refreshed = []
    rates_cached = 0
    errors = []
    for base_currency, count, error in results:
        if error is not None:
            errors.append(f"{base_currency}: {error}")
            continue
        refreshed.append(base_currency)
        rates_cached += count

    return {
        "success": bool(refreshed),
        "currencies_refreshed": refreshed,
        "rates_cached": rates_cached,
        "errors": errors,
    }
