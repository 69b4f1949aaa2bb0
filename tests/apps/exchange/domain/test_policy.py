import pytest
from decimal import Decimal

from apps.exchange.domain.exceptions import InvalidCurrencyError, UnsupportedCurrencyError
from apps.exchange.domain.policy import CurrencyPolicy, DEFAULT_EXCLUDED_CURRENCIES


class TestCurrencyPolicy:
    """Tests for CurrencyPolicy validation and filtering."""

    def test_default_exclusion_set(self):
        assert DEFAULT_EXCLUDED_CURRENCIES == {"TRY", "PLN", "THB", "MXN"}
        assert CurrencyPolicy().excluded_currencies == DEFAULT_EXCLUDED_CURRENCIES

    def test_validate_normalizes_to_uppercase(self, policy):
        assert policy.validate(" eur ") == "EUR"

    @pytest.mark.parametrize("code", [None, "", "   ", "\t"])
    def test_validate_rejects_blank(self, policy, code):
        with pytest.raises(InvalidCurrencyError):
            policy.validate(code)

    @pytest.mark.parametrize("code", ["TRY", "PLN", "THB", "MXN", "try", " mxn "])
    def test_validate_rejects_excluded(self, policy, code):
        with pytest.raises(UnsupportedCurrencyError) as exc_info:
            policy.validate(code)

        assert exc_info.value.currency == code.strip().upper()

    def test_validate_does_not_check_format(self, policy):
        """
        Format (three letters) is enforced by the API serializers, not here.
        """
        assert policy.validate("euro") == "EURO"

    def test_custom_exclusion_set(self):
        policy = CurrencyPolicy(["usd"])

        with pytest.raises(UnsupportedCurrencyError):
            policy.validate("USD")
        assert policy.validate("TRY") == "TRY"

    def test_filter_rates_drops_excluded_keys(self, policy, latest_rates):
        filtered = policy.filter_rates(latest_rates)

        assert set(filtered) == {"USD", "GBP", "JPY"}
        assert filtered["USD"] == Decimal("1.1234")
        # input untouched
        assert "TRY" in latest_rates

    def test_filter_rates_is_case_insensitive(self, policy):
        assert policy.filter_rates({"pln": Decimal("4.3"), "usd": Decimal("1.1")}) == {"usd": Decimal("1.1")}

    def test_filter_exchange_rates_checks_base_and_target(self, policy, make_rate):
        rates = [
            make_rate("USD", 21),
            make_rate("THB", 21),
            make_rate("USD", 21, base="MXN"),
            make_rate("GBP", 22),
        ]

        filtered = policy.filter_exchange_rates(rates)

        assert [(r.base_currency, r.target_currency) for r in filtered] == [("EUR", "USD"), ("EUR", "GBP")]
