import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi_cache.backends import Backend
from fastapi_cache.backends.inmemory import InMemoryBackend
from pydantic import TypeAdapter

from cashcast.config import get_settings
from cashcast.economic.providers import EconomicDataProvider
from cashcast.exceptions import EconomicDataError
from cashcast.models import EconomicIndicator, ForexRate, MarketData
from cashcast.utilities.retries import retry

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "economic-data"

FOREX_KEY = "forex_rates"
INDICATORS_KEY = "economic_indicators"
MARKET_KEY = "market_data"

# Entries are stored as JSON so that any fastapi-cache backend can hold them
ADAPTERS: dict[str, TypeAdapter] = {
    FOREX_KEY: TypeAdapter(list[ForexRate]),
    INDICATORS_KEY: TypeAdapter(list[EconomicIndicator]),
    MARKET_KEY: TypeAdapter(list[MarketData]),
}


class CachedEconomicDataProvider:
    """
    Wraps a provider with per-dataset expiry on a fastapi-cache backend.

    Forex quotes live for an hour, indicators for a day and market quotes for
    fifteen minutes unless overridden. Failed fetches are retried and then
    surface as EconomicDataError.
    """

    def __init__(
        self,
        provider: EconomicDataProvider,
        forex_ttl: int | None = None,
        indicator_ttl: int | None = None,
        market_ttl: int | None = None,
        backend: Backend | None = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        """
        Initialize the cache.

        Args:
            provider: The wrapped economic data source
            forex_ttl: Seconds forex quotes stay cached
            indicator_ttl: Seconds indicators stay cached
            market_ttl: Seconds market quotes stay cached
            backend: Cache storage; defaults to fastapi-cache's in-memory backend
            namespace: Key prefix, shared by providers that should share entries
        """
        settings = get_settings()
        self.provider = provider
        self.ttls = {
            FOREX_KEY: forex_ttl if forex_ttl is not None else settings.FOREX_CACHE_TTL_SECONDS,
            INDICATORS_KEY: indicator_ttl if indicator_ttl is not None else settings.INDICATOR_CACHE_TTL_SECONDS,
            MARKET_KEY: market_ttl if market_ttl is not None else settings.MARKET_CACHE_TTL_SECONDS,
        }
        self.backend = backend or InMemoryBackend()
        self.namespace = namespace

    def _cache_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def _cached(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        payload = await self.backend.get(self._cache_key(key))
        if payload is not None:
            return ADAPTERS[key].validate_json(payload)

        data = await self._fetch(key, fetch)
        await self.backend.set(self._cache_key(key), ADAPTERS[key].dump_json(data), expire=int(self.ttls[key]))
        logger.debug("Cached %d %s records for %ss", len(data), key, self.ttls[key])
        return data

    @retry(retries=3, delay=0.5)
    async def _fetch(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await fetch()
        except EconomicDataError:
            raise
        except Exception as e:
            raise EconomicDataError(f"Failed to fetch {key}", source=type(self.provider).__name__) from e

    async def get_forex_rates(self) -> list[ForexRate]:
        return await self._cached(FOREX_KEY, self.provider.get_forex_rates)

    async def get_economic_indicators(self, country: str | None = None) -> list[EconomicIndicator]:
        indicators = await self._cached(INDICATORS_KEY, self.provider.get_economic_indicators)
        if country is None:
            return indicators
        return [indicator for indicator in indicators if indicator.country == country]

    async def get_market_data(self) -> list[MarketData]:
        return await self._cached(MARKET_KEY, self.provider.get_market_data)

    async def cache_status(self) -> dict[str, dict[str, Any]]:
        """Per dataset: whether it is cached, seconds until expiry and record count."""
        status = {}
        for key in self.ttls:
            ttl, payload = await self.backend.get_with_ttl(self._cache_key(key))
            cached = payload is not None
            status[key] = {
                "cached": cached,
                "expires_in": max(0, ttl) if cached else 0,
                "records": len(ADAPTERS[key].validate_json(payload)) if cached else 0,
            }
        return status

    async def clear_cache(self) -> int:
        """Drop every cached dataset; returns the number of entries removed."""
        removed = await self.backend.clear(namespace=self.namespace)
        logger.info("Economic data cache cleared (%d entries)", removed)
        return removed
