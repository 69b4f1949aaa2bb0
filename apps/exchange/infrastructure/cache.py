"""
Django cache framework adapter for the rate cache.
Infrastructure failures are logged and reported, never raised.
"""

import logging
from typing import Any, Callable

from django.core.cache import caches

from apps.exchange.domain.interfaces import BaseRateCache

logger = logging.getLogger(__name__)

CacheErrorCallback = Callable[[str, str, Exception], None]


class DjangoRateCache(BaseRateCache):
    """
    Wraps a configured Django cache alias (locmem, Redis, ...).

    Args:
        alias: Name of the entry in settings.CACHES
        key_prefix: Prepended to every key to keep rate entries apart
        on_error: Optional callback(operation, key, exception) invoked when
            the backend fails, e.g. to feed a metrics counter
    """

    def __init__(self, alias: str = "default", key_prefix: str = "exchange:", on_error: CacheErrorCallback | None = None):
        self.alias = alias
        self.key_prefix = key_prefix
        self.on_error = on_error

    @property
    def backend(self):
        return caches[self.alias]

    def get(self, key: str) -> Any | None:
        try:
            value = self.backend.get(self._key(key))
        except Exception as e:
            self._report("get", key, e)
            return None

        if value is not None:
            logger.debug("Cache hit for key: %s", key)
        return value

    def set(self, key: str, value: Any, ttl: int) -> bool:
        try:
            self.backend.set(self._key(key), value, timeout=ttl)
        except Exception as e:
            self._report("set", key, e)
            return False

        logger.debug("Item cached with key: %s, expiration: %ss", key, ttl)
        return True

    def remove(self, key: str) -> bool:
        try:
            self.backend.delete(self._key(key))
        except Exception as e:
            self._report("remove", key, e)
            return False

        logger.debug("Item removed from cache with key: %s", key)
        return True

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _report(self, operation: str, key: str, error: Exception):
        logger.error("Cache %s failed for key %s: %s", operation, key, error)
        if self.on_error is not None:
            self.on_error(operation, key, error)
