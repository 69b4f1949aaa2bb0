"""
Domain exceptions for the exchange bounded context.
The API layer maps these onto HTTP responses.
"""


class ExchangeError(Exception):
    """Base class for every error raised by the exchange domain."""


class InvalidCurrencyError(ExchangeError, ValueError):
    def __init__(self, message: str = "Currency code cannot be null or empty"):
        super().__init__(message)


class UnsupportedCurrencyError(ExchangeError):
    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Currency '{currency}' is not supported.")


class RateNotFoundError(ExchangeError):
    def __init__(self, base_currency: str, target_currency: str):
        self.base_currency = base_currency
        self.target_currency = target_currency
        super().__init__(
            f"Exchange rate from '{base_currency}' to '{target_currency}' not found."
        )


class InvalidAmountError(ExchangeError, ValueError):
    def __init__(self, message: str = "Amount cannot be negative"):
        super().__init__(message)


class InvalidRangeError(ExchangeError, ValueError):
    def __init__(self, message: str = "Start date cannot be after end date"):
        super().__init__(message)


class InvalidPaginationError(ExchangeError, ValueError):
    def __init__(self, message: str = "Page and page size must be greater than 0"):
        super().__init__(message)


class ExternalProviderError(ExchangeError):
    """Raised when the upstream rate provider could not answer."""


class ProviderError(Exception):
    """Raised by provider adapters on transport or parsing failures."""
