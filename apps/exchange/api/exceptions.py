"""
DRF exception handler that maps exchange domain errors onto HTTP responses.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.exchange.domain.exceptions import (
    ExchangeError,
    ExternalProviderError,
    InvalidAmountError,
    InvalidCurrencyError,
    InvalidPaginationError,
    InvalidRangeError,
    RateNotFoundError,
    UnsupportedCurrencyError,
)
from apps.exchange.domain.models import utc_now

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    UnsupportedCurrencyError: (status.HTTP_400_BAD_REQUEST, "UnsupportedCurrency"),
    InvalidCurrencyError: (status.HTTP_400_BAD_REQUEST, "InvalidCurrency"),
    InvalidAmountError: (status.HTTP_400_BAD_REQUEST, "InvalidAmount"),
    InvalidRangeError: (status.HTTP_400_BAD_REQUEST, "InvalidRange"),
    InvalidPaginationError: (status.HTTP_400_BAD_REQUEST, "InvalidPagination"),
    RateNotFoundError: (status.HTTP_404_NOT_FOUND, "ExchangeRateNotFound"),
    ExternalProviderError: (status.HTTP_503_SERVICE_UNAVAILABLE, "ServiceUnavailable"),
}


def exchange_exception_handler(exc, context):
    if not isinstance(exc, ExchangeError):
        return exception_handler(exc, context)

    status_code, error = ERROR_RESPONSES.get(
        type(exc),
        (status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalServerError"),
    )

    if isinstance(exc, ExternalProviderError):
        logger.error("External provider error: %s", exc, exc_info=exc)
        message = "Exchange rate service is temporarily unavailable"
    else:
        logger.warning("%s: %s", error, exc)
        message = str(exc)

    return Response(
        {
            "error": error,
            "message": message,
            "timestamp": utc_now().isoformat(),
        },
        status=status_code,
    )
