"""Scraper utilities for fetching, rate limiting, retries and normalization."""

from .rate_limiter import DomainRateLimiter, TokenBucket
from .user_agents import USER_AGENTS, get_chrome_user_agent
from .normalizer import (
    clean_text,
    detect_currency,
    get_currency_symbol,
    make_absolute_url,
    parse_price,
    parse_srcset,
)
from .retry import build_scrape_retrying, is_retryable


__all__ = [
    # Rate limiting
    "DomainRateLimiter",
    "TokenBucket",
    # User agents
    "USER_AGENTS",
    "get_chrome_user_agent",
    # Normalization
    "clean_text",
    "detect_currency",
    "get_currency_symbol",
    "make_absolute_url",
    "parse_price",
    "parse_srcset",
    # Retry
    "build_scrape_retrying",
    "is_retryable",
]
