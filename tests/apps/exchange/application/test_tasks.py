import pytest
from decimal import Decimal
from unittest.mock import patch, MagicMock

from apps.exchange.application.tasks import warm_latest_rates
from apps.exchange.domain.exceptions import ExternalProviderError
from apps.exchange.domain.services import ExchangeRateService, latest_rates_key
from apps.exchange.infrastructure.cache import DjangoRateCache


class TestWarmLatestRates:
    """Tests for the cache warm-up Celery task."""

    @pytest.fixture(autouse=True)
    def use_mock_provider(self, settings):
        settings.EXCHANGE_RATE_PROVIDER = "mock"
        settings.EXCHANGE_WARM_BASE_CURRENCIES = ["EUR", "USD"]

    def test_warms_configured_currencies(self):
        result = warm_latest_rates()

        assert result["success"] is True
        assert sorted(result["currencies_refreshed"]) == ["EUR", "USD"]
        assert result["errors"] == []
        # 9 other currencies each, 4 of them excluded
        assert result["rates_cached"] == 10

        cached = DjangoRateCache().get(latest_rates_key("EUR"))
        assert "USD" in cached
        assert "TRY" in cached

    def test_explicit_currencies_override_settings(self):
        result = warm_latest_rates(["GBP"])

        assert result["currencies_refreshed"] == ["GBP"]

    def test_no_currencies(self, settings):
        settings.EXCHANGE_WARM_BASE_CURRENCIES = []

        result = warm_latest_rates()

        assert result["success"] is False
        assert "No base currencies" in result["message"]
        assert result["rates_cached"] == 0

    def test_excluded_and_unknown_currencies_are_reported(self):
        result = warm_latest_rates(["EUR", "TRY", "XXX"])

        assert result["success"] is True
        assert result["currencies_refreshed"] == ["EUR"]
        assert len(result["errors"]) == 2
        assert result["errors"][0].startswith("TRY:")
        assert result["errors"][1].startswith("XXX:")

    @patch('apps.exchange.application.tasks.get_exchange_rate_service')
    def test_all_failures(self, mock_get_service):
        service = MagicMock(spec=ExchangeRateService)
        service.refresh_latest_rates.side_effect = ExternalProviderError("down")
        mock_get_service.return_value = service

        result = warm_latest_rates(["EUR"])

        assert result["success"] is False
        assert result["errors"] == ["EUR: down"]

    @patch('apps.exchange.application.tasks.get_exchange_rate_service')
    def test_refreshes_bypass_cache(self, mock_get_service):
        service = MagicMock(spec=ExchangeRateService)
        service.refresh_latest_rates.return_value = {"USD": Decimal("1.08")}
        mock_get_service.return_value = service

        warm_latest_rates(["EUR"])

        service.refresh_latest_rates.assert_called_once_with("EUR")
        service.get_latest_rates.assert_not_called()

    @patch('apps.exchange.application.tasks.get_exchange_rate_service')
    def test_unexpected_error_does_not_abort_other_currencies(self, mock_get_service):
        def refresh(base_currency):
            if base_currency == "USD":
                raise RuntimeError("boom")
            return {"USD": Decimal("1.08")}

        service = MagicMock(spec=ExchangeRateService)
        service.refresh_latest_rates.side_effect = refresh
        mock_get_service.return_value = service

        result = warm_latest_rates(["EUR", "USD", "GBP"])

        assert result["success"] is True
        assert result["currencies_refreshed"] == ["EUR", "GBP"]
        assert result["rates_cached"] == 2
        assert result["errors"] == ["USD: boom"]
