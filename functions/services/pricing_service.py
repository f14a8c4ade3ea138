"""
Regional construction pricing for RoofReport.

Provides material, labor and permit prices for a location. When a pricing
feed URL is configured the live feed is queried first; otherwise, or when the
feed fails, prices come from a static regional table.

Architecture:
- Static base prices scaled by a regional multiplier
- City-specific permit costs for the most expensive markets
- Optional live feed over HTTP with retry
- In-memory cache per lowercased location (24 hour TTL by default)
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import time

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
import structlog

from config.errors import ErrorCode, RoofReportError
from config.settings import settings

logger = structlog.get_logger(__name__)


# =============================================================================
# Static Tables
# =============================================================================

BASE_MATERIAL_PRICES: Dict[str, float] = {
    "concrete": 165,      # per cubic yard
    "steel": 2800,        # per ton
    "lumber": 2.85,       # per board foot
    "drywall": 1.75,      # per sq ft
    "roofing": 8.50,      # per sq ft
    "flooring": 12.00,    # per sq ft
    "electrical": 4.25,   # per sq ft
    "plumbing": 485,      # per fixture
    "hvac": 8.75,         # per sq ft
}

BASE_LABOR_RATES: Dict[str, float] = {
    "carpenter": 48,
    "electrician": 52,
    "plumber": 49,
    "general": 35,
}

BASE_PERMIT_COSTS: Dict[str, float] = {"residential": 850, "commercial": 2100}

PERMIT_COSTS_BY_CITY: Tuple[Tuple[str, Dict[str, float]], ...] = (
    ("san francisco", {"residential": 1800, "commercial": 4500}),
    ("new york", {"residential": 1500, "commercial": 3800}),
    ("los angeles", {"residential": 1350, "commercial": 3200}),
    ("seattle", {"residential": 1200, "commercial": 2800}),
    ("chicago", {"residential": 1100, "commercial": 2600}),
)

# Construction cost index multipliers; first match wins
PRICE_REGION_MULTIPLIERS: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (("san francisco", "bay area"), 1.85),
    (("new york", "manhattan"), 1.75),
    (("los angeles",), 1.45),
    (("seattle",), 1.40),
    (("boston",), 1.55),
    (("chicago",), 1.25),
    (("miami",), 1.30),
    (("denver",), 1.15),
    (("austin",), 1.20),
    (("phoenix",), 1.05),
    (("atlanta",), 1.10),
    (("dallas",), 1.15),
)

STATIC_SOURCES = ["Regional Market Analysis", "Construction Cost Index"]
FALLBACK_SOURCES = ["Regional Market Analysis (Fallback)"]

PRICE_CATEGORIES = ("materials", "labor", "permits")


@dataclass
class PriceData:
    """Prices for one location.

    Attributes:
        location: Location the prices were resolved for
        materials: Material unit prices
        labor: Hourly labor rates by trade
        permits: Permit costs by project class
        sources: Where the figures came from
        last_updated: ISO timestamp of when the figures were produced
        used_cache: Served from the in-memory cache
        fallback_used: Live feed failed and static figures were returned
    """

    location: str
    materials: Dict[str, float]
    labor: Dict[str, float]
    permits: Dict[str, float]
    sources: List[str] = field(default_factory=list)
    last_updated: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    used_cache: bool = False
    fallback_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "materials": dict(self.materials),
            "labor": dict(self.labor),
            "permits": dict(self.permits),
            "sources": list(self.sources),
            "lastUpdated": self.last_updated,
            "usedCache": self.used_cache,
            "fallbackUsed": self.fallback_used,
        }


def regional_price_multiplier(location: str) -> float:
    """Cost index multiplier for a location; 1.0 is the national average."""
    key = (location or "").lower()
    for names, multiplier in PRICE_REGION_MULTIPLIERS:
        if any(name in key for name in names):
            return multiplier
    return 1.0


def static_prices(location: str, sources: Optional[List[str]] = None) -> PriceData:
    """Static regional price table scaled for ``location``."""
    multiplier = regional_price_multiplier(location)
    key = (location or "").lower()

    permits = dict(BASE_PERMIT_COSTS)
    for city, costs in PERMIT_COSTS_BY_CITY:
        if city in key:
            permits = dict(costs)
            break

    return PriceData(
        location=location,
        materials={name: round(price * multiplier, 2) for name, price in BASE_MATERIAL_PRICES.items()},
        labor={trade: round(rate * multiplier) for trade, rate in BASE_LABOR_RATES.items()},
        permits=permits,
        sources=list(sources or STATIC_SOURCES),
    )


# =============================================================================
# Cache
# =============================================================================


class PriceCache:
    """In-memory LRU cache for price data with TTL support."""

    def __init__(self, maxsize: int = 128, ttl_seconds: Optional[float] = None):
        self._cache: Dict[str, tuple] = {}  # {location_key: (data, timestamp)}
        self._maxsize = maxsize
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.pricing_cache_hours * 3600
        self._access_order: List[str] = []

    def get(self, key: str) -> Optional[PriceData]:
        """Get cached prices if present and not expired."""
        if key not in self._cache:
            return None

        data, timestamp = self._cache[key]
        if time.time() - timestamp > self._ttl:
            self._remove(key)
            logger.info("price_cache_expired", location=key, age_seconds=time.time() - timestamp)
            return None

        self._access_order.remove(key)
        self._access_order.append(key)

        logger.info("price_cache_hit", location=key)
        return data

    def set(self, key: str, data: PriceData) -> None:
        if len(self._cache) >= self._maxsize and key not in self._cache:
            oldest = self._access_order.pop(0)
            del self._cache[oldest]
            logger.info("price_cache_evicted", evicted_location=oldest)

        self._cache[key] = (data, time.time())
        if key in self._access_order:
            self._access_order.remove(key)
        self._access_order.append(key)
        logger.info("price_cache_set", location=key)

    def _remove(self, key: str) -> None:
        if key in self._cache:
            del self._cache[key]
        if key in self._access_order:
            self._access_order.remove(key)

    def clear(self) -> None:
        """Clear all cache entries."""
        self._cache.clear()
        self._access_order.clear()

    def __len__(self) -> int:
        return len(self._cache)


# =============================================================================
# Live Feed
# =============================================================================


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((httpx.HTTPError, httpx.TimeoutException)),
)
async def _fetch_feed(
    url: str,
    location: str,
    timeout: float,
    token: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Fetch prices from the live feed with retry logic.

    Raises:
        httpx.HTTPError: On HTTP errors after retries
        httpx.TimeoutException: On timeout after retries
    """
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.get(url, params={"location": location}, headers=headers)
        response.raise_for_status()
        return response.json()


def _parse_feed(payload: Any, location: str) -> PriceData:
    """Overlay a feed response on the static table.

    Every category present in the response must map names to numbers; any
    name the feed leaves out keeps its static value.

    Raises:
        RoofReportError: If the payload has no usable price categories.
    """
    if not isinstance(payload, dict):
        raise RoofReportError(
            code=ErrorCode.PRICING_DATA_ERROR,
            message="Pricing feed returned a non-object payload",
        )

    base = static_prices(location)
    found = False
    for category in PRICE_CATEGORIES:
        values = payload.get(category)
        if values is None:
            continue
        if not isinstance(values, dict):
            raise RoofReportError(
                code=ErrorCode.PRICING_DATA_ERROR,
                message=f"Pricing feed category '{category}' is not an object",
            )
        target = getattr(base, category)
        for name, value in values.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise RoofReportError(
                    code=ErrorCode.PRICING_DATA_ERROR,
                    message=f"Pricing feed value for '{category}.{name}' is not numeric",
                )
            target[name] = float(value)
        found = True

    if not found:
        raise RoofReportError(
            code=ErrorCode.PRICING_DATA_ERROR,
            message="Pricing feed returned no price categories",
        )

    sources = payload.get("sources")
    base.sources = [str(s) for s in sources] if isinstance(sources, list) and sources else ["Live Pricing Feed"]
    return base


class PricingService:
    """Resolves prices for a location.

    Usage:
        service = PricingService()
        prices = await service.get_prices("Austin, USA")
    """

    def __init__(
        self,
        feed_url: Optional[str] = None,
        cache: Optional[PriceCache] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
    ):
        self.feed_url = feed_url if feed_url is not None else settings.pricing_feed_url
        self.cache = cache if cache is not None else PriceCache()
        self.timeout = timeout or settings.pricing_timeout_seconds
        self._token = token

    def _feed_token(self) -> Optional[str]:
        if self._token is None:
            from config.secrets import get_pricing_feed_token
            self._token = get_pricing_feed_token() or ""
        return self._token or None

    async def get_prices(self, location: str) -> PriceData:
        """Prices for ``location``. Never raises; failures fall back to the static table."""
        cache_key = (location or "").strip().lower()
        cached = self.cache.get(cache_key)
        if cached is not None:
            return replace(cached, used_cache=True)

        if not self.feed_url:
            return static_prices(location)

        start_time = time.perf_counter()
        try:
            payload = await _fetch_feed(self.feed_url, location, self.timeout, self._feed_token())
            data = _parse_feed(payload, location)
        except Exception as e:
            logger.warning(
                "pricing_feed_failed",
                location=location,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            fallback = static_prices(location, sources=FALLBACK_SOURCES)
            fallback.fallback_used = True
            return fallback

        self.cache.set(cache_key, data)
        logger.info(
            "pricing_feed_fetched",
            location=location,
            sources=data.sources,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return data
