"""Wishlist price tracker: product page scraping, price history and alerts."""

__version__ = "0.1.0"
