"""Tests for the site extractors run through the shared extraction pipeline."""

from decimal import Decimal

import pytest

from wishlist_tracker.scrapers.base import Site
from wishlist_tracker.scrapers.pipeline import extract_product
from wishlist_tracker.scrapers.register_extractors import register_all_extractors
from wishlist_tracker.scrapers.registry import ExtractorRegistry

import sample_pages as pages


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def registry() -> ExtractorRegistry:
    """A registry populated with the built-in extractors."""
    return register_all_extractors(ExtractorRegistry())


def scrape_page(registry: ExtractorRegistry, html: str, url: str):
    return extract_product(html, url, registry.resolve(url))


def availability(variants):
    return {variant.name: variant.available for variant in variants}


# ============================================================================
# TESTS: DYNAMIC SITES
# ============================================================================

class TestZara:
    """Tests for the Zara extractor."""

    def test_product_fields(self, registry):
        """Test title, price, brand and images."""
        product = scrape_page(registry, pages.ZARA_HTML, pages.ZARA_URL)

        assert product.title == "Linen Blend Shirt"
        assert product.price == Decimal("49.95")
        assert product.currency == "€"
        assert product.brand == "ZARA"
        assert product.images == [
            "https://static.zara.net/photos/shirt-1.jpg?w=750",
            "https://static.zara.net/photos/shirt-2.jpg",
        ]

    def test_variants(self, registry):
        """Test colors and sizes, skipping the size guide button."""
        product = scrape_page(registry, pages.ZARA_HTML, pages.ZARA_URL)

        assert product.color_names == ["White", "Navy"]
        assert availability(product.sizes) == {"S": True, "M": False}
        assert product.in_stock is True

    def test_requires_rendering(self, registry):
        """Test Zara is routed to the browser with its readiness selector."""
        extractor = registry.resolve(pages.ZARA_URL)

        assert extractor.requires_dynamic_rendering is True
        assert extractor.render.wait_selector == "span[data-qa-qualifier='price-amount-current']"
        assert extractor.render.settle_ms == 2000


class TestHM:
    """Tests for the H&M extractor."""

    def test_product_schema_fields(self, registry):
        """Test fields come from the embedded product schema."""
        product = scrape_page(registry, pages.HM_HTML, pages.HM_URL)

        assert product.title == "Ribbed Tank Top"
        assert product.brand == "H&M"
        assert product.price == Decimal("12.99")
        assert product.currency == "$"
        assert product.images == [
            "https://image.hm.com/assets/tank-1.jpg",
            "https://image.hm.com/assets/tank-2.jpg",
        ]

    def test_variants(self, registry):
        """Test swatches resolve and out-of-stock sizes are flagged."""
        product = scrape_page(registry, pages.HM_HTML, pages.HM_URL)

        assert [c.swatch_url for c in product.colors] == [
            "https://image.hm.com/swatch/black.jpg",
            "https://www2.hm.com/swatch/white.jpg",
        ]
        assert availability(product.sizes) == {"XS": True, "S": False}


class TestFarfetch:
    """Tests for the Farfetch extractor."""

    def test_product_fields(self, registry):
        """Test designer, description and price; data URIs are skipped."""
        product = scrape_page(registry, pages.FARFETCH_HTML, pages.FARFETCH_URL)

        assert product.title == "Single-breasted wool blazer"
        assert product.brand == "Saint Laurent"
        assert product.price == Decimal("2890")
        assert product.images == ["https://cdn-images.farfetch-contents.com/12345_1.jpg"]
        assert availability(product.sizes) == {"IT 38": True, "IT 40": False}
        assert product.colors is None

    def test_expands_size_dropdown(self, registry):
        """Test the render config opens the size selector before capture."""
        extractor = registry.resolve(pages.FARFETCH_URL)

        assert extractor.render.expand_selector is not None
        assert "SizeSelector" in extractor.render.expand_selector


# ============================================================================
# TESTS: STATIC SITES
# ============================================================================

class TestAmazon:
    """Tests for the Amazon extractor."""

    def test_product_fields(self, registry):
        """Test byline cleanup and full-size image URLs."""
        product = scrape_page(registry, pages.AMAZON_HTML, pages.AMAZON_URL)

        assert product.title == "Echo Dot (5th Gen) Smart Speaker"
        assert product.brand == "Amazon"
        assert product.price == Decimal("49.99")
        assert product.images == [
            "https://m.media-amazon.com/images/I/71abc.jpg",
            "https://m.media-amazon.com/images/I/81def.jpg",
        ]

    def test_unavailable(self, registry):
        """Test the availability block marks the item out of stock."""
        product = scrape_page(registry, pages.AMAZON_HTML, pages.AMAZON_URL)

        assert product.in_stock is False

    def test_regional_storefronts(self, registry):
        """Test every Amazon TLD resolves to the same extractor."""
        for url in ("https://www.amazon.co.uk/dp/B1", "https://www.amazon.de/dp/B1"):
            assert registry.resolve(url).site == Site.AMAZON


class TestMytheresa:
    """Tests for the Mytheresa extractor."""

    def test_product_fields(self, registry):
        """Test carousel duplicates and size placeholders are skipped."""
        product = scrape_page(registry, pages.MYTHERESA_HTML, pages.MYTHERESA_URL)

        assert product.brand == "Gucci"
        assert product.title == "Horsebit leather loafers"
        assert product.price == Decimal("890")
        assert product.currency == "€"
        assert len(product.images) == 2
        assert all("_dup" not in image for image in product.images)
        assert availability(product.sizes) == {"IT 36": True, "IT 37": False}


class TestYoox:
    """Tests for the Yoox extractor."""

    def test_product_fields(self, registry):
        """Test fields and disabled color/size pickers."""
        product = scrape_page(registry, pages.YOOX_HTML, pages.YOOX_URL)

        assert product.brand == "PRADA"
        assert product.title == "Midi skirt"
        assert product.price == Decimal("420.00")
        assert product.currency == "£"
        assert availability(product.colors) == {"Black": True, "Ivory": False}
        assert availability(product.sizes) == {"40": True, "42": False}


class TestShopifyStorefronts:
    """Tests for the Shopify-based AYM Studio and GianaWorld extractors."""

    def test_aym_studio(self, registry):
        """Test meta price, carousel images and theme swatches."""
        product = scrape_page(registry, pages.AYM_HTML, pages.AYM_URL)

        assert product.title == "Seamless Set"
        assert product.brand == "AYM Studio"
        assert product.price == Decimal("58.00")
        assert product.currency == "£"
        assert product.images == [
            "https://aym-studio.com/cdn/shop/files/set-1.jpg",
            "https://aym-studio.com/cdn/shop/files/set-2_800.jpg",
        ]
        assert availability(product.colors) == {"Sage": True, "Black": False}
        assert product.colors[0].swatch_url == "https://aym-studio.com/cdn/shop/files/sage.png"
        assert product.size_names == ["S", "M"]

    def test_non_finite_product_json_price_is_ignored(self, registry):
        html = pages.GIANA_HTML.replace('"price": 12900', '"price": Infinity')

        product = scrape_page(registry, html, pages.GIANA_URL)

        assert product.title == "Satin Slip Dress"
        assert product.price == Decimal("0")
        assert product.currency == "$"

    def test_giana_world_product_json(self, registry):
        """Test cents prices, placeholder vendor and merged variant availability."""
        product = scrape_page(registry, pages.GIANA_HTML, pages.GIANA_URL)

        assert product.title == "Satin Slip Dress"
        assert product.brand == "GIANA"
        assert product.price == Decimal("129.00")
        assert product.currency == "$"
        assert product.images == [
            "https://gianaworld.com/cdn/shop/files/slip-1.jpg",
            "https://gianaworld.com/cdn/shop/files/slip-2.jpg",
        ]
        assert availability(product.colors) == {"Champagne": True, "Black": False}
        assert availability(product.sizes) == {"S": False, "M": True}
        assert product.in_stock is True


class TestDeterminism:
    """Tests that extraction is a pure function of the page."""

    @pytest.mark.parametrize(
        "html,url",
        [
            (pages.ZARA_HTML, pages.ZARA_URL),
            (pages.GIANA_HTML, pages.GIANA_URL),
            (pages.GENERIC_HTML, pages.GENERIC_URL),
        ],
    )
    def test_same_page_same_product(self, registry, html, url):
        """Test extracting the same page twice gives equal products."""
        assert scrape_page(registry, html, url) == scrape_page(registry, html, url)
