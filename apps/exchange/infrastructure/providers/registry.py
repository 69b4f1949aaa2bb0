"""
Provider Registry - Maps ProviderName enum to adapter classes.
The mapping is fixed at import time; settings.EXCHANGE_RATE_PROVIDER picks the active one.
The configured provider is built once per process so its HTTP session and
circuit breaker are shared by every request.
"""

import logging
from functools import lru_cache

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.db import models
from django.dispatch import receiver

from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.infrastructure.providers.frankfurter import FrankfurterProvider
from apps.exchange.infrastructure.providers.mock import MockProvider

logger = logging.getLogger(__name__)


class ProviderName(models.TextChoices):
    """
    Enum with available providers.
    To add a new provider:
    1. Add an entry here
    2. Implement the BaseExchangeRateProvider interface
    3. Register in PROVIDER_REGISTRY below
    """

    FRANKFURTER = "frankfurter", "Frankfurter"
    MOCK = "mock", "Mock"


# Registry: Maps ProviderName enum to the corresponding adapter class
PROVIDER_REGISTRY: dict[str, type[BaseExchangeRateProvider]] = {
    ProviderName.FRANKFURTER: FrankfurterProvider,
    ProviderName.MOCK: MockProvider,
}


def get_provider_instance(provider_name: str) -> BaseExchangeRateProvider | None:
    """
    Get an instance of a provider by its name.

    Args:
        provider_name: The provider name from ProviderName enum

    Returns:
        Instance of the provider adapter, or None if not found
    """
    provider_class = PROVIDER_REGISTRY.get(provider_name)

    if provider_class is None:
        logger.warning("Provider '%s' not found in registry", provider_name)
        return None

    return provider_class()


def get_configured_provider() -> BaseExchangeRateProvider:
    """
    Return the shared instance of the provider named by settings.EXCHANGE_RATE_PROVIDER.

    Raises:
        ImproperlyConfigured: the setting names no registered provider
    """
    provider_name = settings.EXCHANGE_RATE_PROVIDER
    provider = get_shared_provider(provider_name)

    if provider is None:
        raise ImproperlyConfigured(
            f"EXCHANGE_RATE_PROVIDER '{provider_name}' is not one of: {', '.join(get_available_providers())}"
        )

    return provider


@lru_cache(maxsize=None)
def get_shared_provider(provider_name: str) -> BaseExchangeRateProvider | None:
    return get_provider_instance(provider_name)


@receiver(setting_changed)
def reset_shared_providers(sender, setting, **kwargs):
    # Provider constructors read these settings
    if setting.startswith(("EXCHANGE_", "FRANKFURTER_")):
        get_shared_provider.cache_clear()


def get_available_providers() -> list[str]:
    return [str(name) for name in PROVIDER_REGISTRY]
