"""Token bucket rate limiter for per-domain rate limiting."""

import asyncio
import time
from typing import Dict
from urllib.parse import urlparse


class TokenBucket:
    """Token bucket algorithm implementation for rate limiting.

    The bucket starts full and refills at a constant rate.
    Each request consumes one token. If no tokens are available,
    the request waits until tokens are refilled.
    """

    def __init__(self, rate: float, capacity: float):
        """Initialize token bucket.

        Args:
            rate: Tokens per second (e.g., 1.0 = 60 RPM)
            capacity: Maximum tokens in bucket (burst capacity)
        """
        self.rate = rate
        self.capacity = capacity
        self.tokens = capacity
        self.last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        self.last_refill = now

    async def acquire(self, tokens: float = 1.0) -> None:
        """Acquire tokens from the bucket, waiting if necessary."""
        async with self._lock:
            while True:
                self._refill()
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return
                wait_time = (tokens - self.tokens) / self.rate
                await asyncio.sleep(wait_time)


class DomainRateLimiter:
    """Per-domain rate limiter using token bucket algorithm.

    Each domain gets its own bucket, so a price sweep never hammers a
    single storefront while other domains proceed unthrottled.
    """

    # Requests per minute for known storefronts
    DOMAIN_LIMITS_RPM = {
        "www.zara.com": 10,
        "www2.hm.com": 10,
        "www.farfetch.com": 10,
        "www.mytheresa.com": 15,
        "www.yoox.com": 15,
        "www.amazon.com": 20,
        "www.amazon.co.uk": 20,
        "www.amazon.de": 20,
        "aym-studio.com": 30,
        "www.aym-studio.com": 30,
        "gianaworld.com": 30,
    }

    DEFAULT_RPM = 20

    def __init__(self):
        self._buckets: Dict[str, TokenBucket] = {}

    def _get_bucket(self, domain: str) -> TokenBucket:
        if domain not in self._buckets:
            rpm = self.DOMAIN_LIMITS_RPM.get(domain, self.DEFAULT_RPM)
            rate = rpm / 60.0
            # Capacity allows small bursts (10% of RPM, min 2)
            capacity = max(2.0, rpm / 10.0)
            self._buckets[domain] = TokenBucket(rate=rate, capacity=capacity)
        return self._buckets[domain]

    async def acquire(self, domain: str, tokens: float = 1.0) -> None:
        """Block until the rate limit for ``domain`` allows a request.

        Args:
            domain: Domain name to rate limit
            tokens: Number of tokens to acquire (default 1.0)
        """
        bucket = self._get_bucket(domain.lower())
        await bucket.acquire(tokens)

    async def acquire_for_url(self, url: str) -> None:
        """Rate limit by the hostname of ``url``; URLs without one are not limited."""
        domain = urlparse(url).netloc
        if domain:
            await self.acquire(domain)

    def set_custom_limit(self, domain: str, rpm: int) -> None:
        """Set a custom rate limit for a domain, replacing any existing bucket."""
        rate = rpm / 60.0
        capacity = max(2.0, rpm / 10.0)
        self._buckets[domain.lower()] = TokenBucket(rate=rate, capacity=capacity)

    def get_current_rate(self, domain: str) -> float:
        """Current rate limit for a domain in requests per minute."""
        bucket = self._get_bucket(domain.lower())
        return bucket.rate * 60.0
