"""
Serializers for the exchange bounded context.
Validate and normalize query parameters before they reach the domain services.
"""

from django.core.validators import RegexValidator
from rest_framework import serializers


class CurrencyCodeField(serializers.CharField):
    """Three-letter currency code, normalized to uppercase."""

    default_validators = [
        RegexValidator(r"^[A-Za-z]{3}$", message="Currency code must be exactly 3 letters."),
    ]

    def __init__(self, **kwargs):
        kwargs.setdefault("trim_whitespace", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        return super().to_internal_value(data).upper()


class LatestRatesQuerySerializer(serializers.Serializer):
    base_currency = CurrencyCodeField(help_text="Base currency code (e.g. EUR)")


class HistoricalRatesQuerySerializer(serializers.Serializer):
    base_currency = CurrencyCodeField(help_text="Base currency code (e.g. EUR)")
    start_date = serializers.DateField(help_text="Start date (YYYY-MM-DD)")
    end_date = serializers.DateField(help_text="End date (YYYY-MM-DD)")
    page = serializers.IntegerField(required=False, default=1, help_text="Page number, starting at 1")
    page_size = serializers.IntegerField(
        required=False,
        default=10,
        max_value=100,
        help_text="Rates per page (max 100)",
    )


class ConversionQuerySerializer(serializers.Serializer):
    from_currency = CurrencyCodeField(help_text="Source currency code (e.g. EUR)")
    to_currency = CurrencyCodeField(help_text="Target currency code (e.g. USD)")
    amount = serializers.DecimalField(max_digits=24, decimal_places=6, help_text="Amount to convert")


class SupportedCurrencyQuerySerializer(serializers.Serializer):
    currency = CurrencyCodeField(help_text="Currency code to check")
