"""Tests for the shared extraction pipeline."""

from decimal import Decimal

import pytest

from wishlist_tracker.core.exceptions import TitleMissingError
from wishlist_tracker.schemas.product import ProductVariant
from wishlist_tracker.scrapers.base import PriceInfo, Site, SiteExtractor
from wishlist_tracker.scrapers.pipeline import extract_product

import sample_pages as pages

URL = "https://www.mytheresa.com/us/en/item-p0001"

PAGE = """
<html><head>
  <title>Cashmere Scarf | Shop</title>
  <meta property="og:image" content="https://cdn.example.com/scarf.jpg">
  <meta property="og:price:amount" content="120.00">
  <meta property="og:price:currency" content="USD">
</head><body><span class="product-brand">Acne Studios</span></body></html>
"""


def site_extractor(**capabilities) -> SiteExtractor:
    return SiteExtractor(site=Site.MYTHERESA, hostnames=("mytheresa.com",), **capabilities)


def boom(soup, url):
    raise RuntimeError("selector exploded")


class TestFieldFallback:
    """Tests that each field falls back independently."""

    def test_unknown_site_uses_fallback(self):
        product = extract_product(pages.GENERIC_HTML, pages.GENERIC_URL, None)

        assert product.title == "Canvas Tote Bag"
        assert product.price == Decimal("38.00")
        assert product.brand == "Baggu"
        assert product.in_stock is True
        assert product.colors is None
        assert product.sizes is None
        assert product.url == pages.GENERIC_URL

    def test_missing_capabilities_fall_back(self):
        """Test a site that only knows its title still gets price, brand and images."""
        extractor = site_extractor(extract_title=lambda soup, url: "Site Title")

        product = extract_product(PAGE, URL, extractor)

        assert product.title == "Site Title"
        assert product.price == Decimal("120.00")
        assert product.currency == "$"
        assert product.brand == "Acne Studios"
        assert product.images == ["https://cdn.example.com/scarf.jpg"]

    def test_empty_site_values_fall_back(self):
        extractor = site_extractor(
            extract_title=lambda soup, url: "",
            extract_images=lambda soup, url: [],
            extract_brand=lambda soup, url: None,
        )

        product = extract_product(PAGE, URL, extractor)

        assert product.title == "Cashmere Scarf"
        assert product.images == ["https://cdn.example.com/scarf.jpg"]
        assert product.brand == "Acne Studios"

    def test_zero_site_price_falls_back(self):
        extractor = site_extractor(
            extract_price=lambda soup, url: PriceInfo(price=Decimal("0"), currency="€")
        )

        product = extract_product(PAGE, URL, extractor)

        assert product.price == Decimal("120.00")
        assert product.currency == "$"

    def test_crashing_capability_falls_back(self):
        """Test a capability that raises is treated as "not found"."""
        extractor = site_extractor(extract_title=boom, extract_price=boom, extract_stock=boom)

        product = extract_product(PAGE, URL, extractor)

        assert product.title == "Cashmere Scarf"
        assert product.price == Decimal("120.00")
        assert product.in_stock is True


class TestDegradedResults:
    """Tests for pages missing data."""

    def test_missing_title_raises(self):
        with pytest.raises(TitleMissingError) as exc_info:
            extract_product("<html><body><p>blocked</p></body></html>", URL, site_extractor())

        assert exc_info.value.code == "title_missing"
        assert exc_info.value.url == URL

    def test_missing_price_is_zero(self):
        """Test a page without a price yields price 0 rather than an error."""
        html = "<html><body><h1>Wool Overcoat</h1></body></html>"

        product = extract_product(html, "https://shop.example.de/coat", None)

        assert product.title == "Wool Overcoat"
        assert product.price == Decimal("0")
        assert product.currency == "€"

    @pytest.mark.parametrize("amount", ["NaN", "Infinity"])
    def test_non_finite_meta_price_is_zero(self, amount):
        """Test a malformed price literal degrades to 0 instead of failing extraction."""
        html = (
            f'<html><head><meta property="og:price:amount" content="{amount}"></head>'
            "<body><h1>Wool Overcoat</h1></body></html>"
        )

        product = extract_product(html, "https://shop.example.de/coat", None)

        assert product.title == "Wool Overcoat"
        assert product.price == Decimal("0")
        assert product.currency == "€"

    def test_non_finite_site_price_falls_back(self):
        extractor = site_extractor(
            extract_price=lambda soup, url: PriceInfo(price=Decimal("NaN"), currency="€")
        )

        product = extract_product(PAGE, URL, extractor)

        assert product.price == Decimal("120.00")
        assert product.currency == "$"

    def test_images_are_capped(self):
        extractor = site_extractor(
            extract_images=lambda soup, url: [f"https://cdn.example.com/{i}.jpg" for i in range(9)]
        )

        product = extract_product(PAGE, URL, extractor)

        assert len(product.images) == 5


class TestStockResolution:
    """Tests for in-stock resolution order."""

    def test_sizes_take_precedence(self):
        extractor = site_extractor(
            extract_sizes=lambda soup, url: [
                ProductVariant(name="S", available=False),
                ProductVariant(name="M", available=False),
            ],
            extract_stock=lambda soup, url: True,
        )

        product = extract_product(PAGE, URL, extractor)

        assert product.in_stock is False
        assert product.size_names == ["S", "M"]

    def test_unknown_size_availability_counts_as_available(self):
        extractor = site_extractor(
            extract_sizes=lambda soup, url: [ProductVariant(name="One Size")]
        )

        assert extract_product(PAGE, URL, extractor).in_stock is True

    def test_colors_used_without_sizes(self):
        extractor = site_extractor(
            extract_colors=lambda soup, url: [ProductVariant(name="Red", available=False)]
        )

        assert extract_product(PAGE, URL, extractor).in_stock is False

    def test_site_stock_before_fallback(self):
        extractor = site_extractor(extract_stock=lambda soup, url: False)

        assert extract_product(PAGE, URL, extractor).in_stock is False

    def test_fallback_stock_markers(self):
        html = PAGE.replace("</body>", '<button name="add">Sold Out</button></body>')

        assert extract_product(html, URL, site_extractor()).in_stock is False
