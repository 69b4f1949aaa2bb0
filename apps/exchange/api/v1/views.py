"""
ViewSet for the exchange API v1.
Views validate query parameters and delegate to the domain services;
domain errors are turned into responses by exchange_exception_handler.
"""

from collections import defaultdict

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.exchange.api.v1.serializers import (
    ConversionQuerySerializer,
    HistoricalRatesQuerySerializer,
    LatestRatesQuerySerializer,
    SupportedCurrencyQuerySerializer,
)
from apps.exchange.application.services import get_conversion_service, get_exchange_rate_service
from apps.exchange.domain.models import utc_now


def validated_query(serializer_class, request) -> dict:
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


@extend_schema(tags=['Rates'])
class ExchangeRateViewSet(viewsets.ViewSet):

    @extend_schema(
        parameters=[LatestRatesQuerySerializer],
        description="Get the latest exchange rates for a base currency"
    )
    @action(detail=False, methods=['get'], url_path='latest')
    def latest(self, request):
        params = validated_query(LatestRatesQuerySerializer, request)
        base_currency = params['base_currency']

        rates = get_exchange_rate_service().get_latest_rates(base_currency)

        return Response({
            "base_currency": base_currency,
            "date": utc_now().date().isoformat(),
            "rates": {code: str(rate) for code, rate in sorted(rates.items())}
        })

    @extend_schema(
        parameters=[HistoricalRatesQuerySerializer],
        description="Get one page of historical exchange rates for a base currency, grouped by date"
    )
    @action(detail=False, methods=['get'], url_path='historical')
    def historical(self, request):
        params = validated_query(HistoricalRatesQuerySerializer, request)

        page_rates = get_exchange_rate_service().get_historical_rates(
            params['base_currency'],
            params['start_date'],
            params['end_date'],
            params['page'],
            params['page_size'],
        )

        rates_by_date = defaultdict(dict)
        for exchange_rate in page_rates:
            rates_by_date[exchange_rate.date.isoformat()][exchange_rate.target_currency] = str(exchange_rate.rate)

        return Response({
            "base_currency": params['base_currency'],
            "start_date": params['start_date'].isoformat(),
            "end_date": params['end_date'].isoformat(),
            "page": params['page'],
            "page_size": params['page_size'],
            "count": len(page_rates),
            "rates": dict(rates_by_date)
        })

    @extend_schema(
        parameters=[ConversionQuerySerializer],
        description="Convert an amount from one currency to another using the latest rates"
    )
    @action(detail=False, methods=['get'], url_path='convert')
    def convert(self, request):
        params = validated_query(ConversionQuerySerializer, request)

        result = get_conversion_service().convert_with_details(
            params['amount'],
            params['from_currency'],
            params['to_currency'],
        )

        return Response({
            "from_currency": result["from_currency"],
            "to_currency": result["to_currency"],
            "amount": str(result["amount"]),
            "rate": str(result["rate"]),
            "converted_amount": str(result["converted_amount"]),
            "timestamp": result["timestamp"].isoformat()
        })

    @extend_schema(
        parameters=[SupportedCurrencyQuerySerializer],
        description="Check whether a currency can be quoted"
    )
    @action(detail=False, methods=['get'], url_path='supported')
    def supported(self, request):
        params = validated_query(SupportedCurrencyQuerySerializer, request)
        currency = params['currency']

        return Response({
            "currency": currency,
            "supported": get_conversion_service().is_currency_supported(currency)
        })
