"""Tests for the single-item price check."""

from decimal import Decimal
from uuid import uuid4

import pytest

from wishlist_tracker.core.exceptions import (
    AccessDeniedError,
    PageNotFoundError,
    ScrapeTimeoutError,
    ServerUnavailableError,
    TitleMissingError,
)
from wishlist_tracker.schemas.product import ProductVariant
from wishlist_tracker.services.price_checker import PriceChecker, price_change_percent
from wishlist_tracker.services.wishlist_service import WishlistService

from conftest import make_scraped


@pytest.fixture
def checker(fake_scraper, session_factory):
    return PriceChecker(fake_scraper, session_factory)


async def reload(session_factory, item_id):
    async with session_factory() as db:
        return await WishlistService(db).get_item(item_id)


class DeletingScraper:
    """Deletes the item while its page is being fetched."""

    def __init__(self, scraper, session_factory, item_id):
        self.scraper = scraper
        self.session_factory = session_factory
        self.item_id = item_id

    async def scrape(self, url):
        async with self.session_factory() as db:
            await WishlistService(db).delete_item(self.item_id)
        return await self.scraper.scrape(url)


# ============================================================================
# TESTS: CHANGE DETECTION
# ============================================================================

class TestChangeDetection:
    """Tests for price change detection and history."""

    async def test_sub_cent_difference_is_not_a_change(
        self, checker, fake_scraper, make_item, session_factory
    ):
        item = await make_item()
        fake_scraper.default = make_scraped(price="100.004")

        result = await checker.check_price(item.id)

        assert result.success is True
        assert result.price_changed is False
        assert result.price_dropped is False
        assert result.price_change_percent is None

        stored = await reload(session_factory, item.id)
        assert stored.price == Decimal("100.00")
        assert len(stored.price_history) == 1

    async def test_one_cent_drop(self, checker, fake_scraper, make_item, session_factory):
        item = await make_item()
        fake_scraper.default = make_scraped(price="99.99")

        result = await checker.check_price(item.id)

        assert result.price_changed is True
        assert result.price_dropped is True
        assert result.old_price == Decimal("100.00")
        assert result.new_price == Decimal("99.99")
        assert result.price_change_percent == Decimal("-0.01")

        stored = await reload(session_factory, item.id)
        assert stored.price == Decimal("99.99")
        assert [entry.price for entry in stored.history_entries] == [
            Decimal("100.00"),
            Decimal("99.99"),
        ]

    async def test_price_increase(self, checker, fake_scraper, make_item):
        item = await make_item()
        fake_scraper.default = make_scraped(price="120.00")

        result = await checker.check_price(item.id)

        assert result.price_changed is True
        assert result.price_dropped is False
        assert result.price_change_percent == Decimal("20.00")

    async def test_history_grows_by_one_per_change(
        self, checker, fake_scraper, make_item, session_factory
    ):
        item = await make_item()

        for price in ("90.00", "90.00", "85.00"):
            fake_scraper.default = make_scraped(price=price)
            await checker.check_price(item.id)

        stored = await reload(session_factory, item.id)
        assert len(stored.price_history) == 3
        assert stored.price == stored.history_entries[-1].price

    async def test_missing_price_records_nothing(
        self, checker, fake_scraper, make_item, session_factory
    ):
        """Test a page without a price is not treated as a drop to zero."""
        item = await make_item()
        fake_scraper.default = make_scraped(price="0", in_stock=False)

        result = await checker.check_price(item.id)

        assert result.success is True
        assert result.price_changed is False
        assert result.price_dropped is False

        stored = await reload(session_factory, item.id)
        assert stored.price == Decimal("100.00")
        assert len(stored.price_history) == 1
        assert stored.in_stock is False


# ============================================================================
# TESTS: STOCK AND VARIANTS
# ============================================================================

class TestStockRefresh:
    """Tests that stock state is refreshed on every check."""

    async def test_stock_refreshed_without_price_change(
        self, checker, fake_scraper, make_item, session_factory
    ):
        item = await make_item(in_stock=True)
        fake_scraper.default = make_scraped(in_stock=False)

        result = await checker.check_price(item.id)

        assert result.price_changed is False
        assert result.in_stock is False
        assert (await reload(session_factory, item.id)).in_stock is False

    async def test_variants_refreshed(self, checker, fake_scraper, make_item, session_factory):
        item = await make_item(colors=["White"], sizes=["S"])
        fake_scraper.default = make_scraped(
            colors=[ProductVariant(name="White"), ProductVariant(name="Navy")],
            sizes=[ProductVariant(name="S"), ProductVariant(name="M", available=False)],
        )

        await checker.check_price(item.id)

        stored = await reload(session_factory, item.id)
        assert stored.colors == ["White", "Navy"]
        assert stored.sizes == ["S", "M"]

    async def test_variants_kept_when_page_has_none(
        self, checker, fake_scraper, make_item, session_factory
    ):
        item = await make_item(sizes=["S", "M"])
        fake_scraper.default = make_scraped()

        await checker.check_price(item.id)

        assert (await reload(session_factory, item.id)).sizes == ["S", "M"]


# ============================================================================
# TESTS: FAILURES
# ============================================================================

class TestFailures:
    """Tests that failures become unsuccessful results."""

    async def test_missing_item(self, checker, fake_scraper):
        result = await checker.check_price(uuid4())

        assert result.success is False
        assert result.error_code == "item_not_found"
        assert fake_scraper.calls == []

    @pytest.mark.parametrize(
        "error,code",
        [
            (ScrapeTimeoutError("https://www.zara.com/x"), "timeout"),
            (PageNotFoundError("https://www.zara.com/x"), "not_found"),
            (AccessDeniedError("https://www.zara.com/x"), "access_denied"),
            (ServerUnavailableError(503, "https://www.zara.com/x"), "server_unavailable"),
            (TitleMissingError("https://www.zara.com/x"), "title_missing"),
        ],
    )
    async def test_scrape_errors(
        self, checker, fake_scraper, make_item, session_factory, error, code
    ):
        item = await make_item()
        fake_scraper.default = error

        result = await checker.check_price(item.id)

        assert result.success is False
        assert result.error_code == code
        assert result.error == error.message

        stored = await reload(session_factory, item.id)
        assert len(stored.price_history) == 1

    async def test_unexpected_error(self, checker, fake_scraper, make_item):
        item = await make_item()
        fake_scraper.default = RuntimeError("parser blew up")

        result = await checker.check_price(item.id)

        assert result.success is False
        assert result.error_code == "unexpected_error"
        assert result.error == "parser blew up"

    @pytest.mark.parametrize("price", ["80.00", "100.00"])
    async def test_item_deleted_during_scrape(
        self, fake_scraper, make_item, session_factory, price
    ):
        """Test an item removed while its page is fetched is reported, not raised.

        Covers both the history append (price changed) and the stock update.
        """
        item = await make_item()
        scraper = DeletingScraper(fake_scraper, session_factory, item.id)
        fake_scraper.default = make_scraped(price=price)

        result = await PriceChecker(scraper, session_factory).check_price(item.id)

        assert result.success is False
        assert result.error_code == "item_not_found"
        assert fake_scraper.calls == [item.url]
        assert await reload(session_factory, item.id) is None


class TestPriceChangePercent:
    """Tests for price_change_percent."""

    @pytest.mark.parametrize(
        "old,new,expected",
        [
            ("100.00", "80.00", Decimal("-20.00")),
            ("100.00", "99.99", Decimal("-0.01")),
            ("30.00", "40.00", Decimal(100) / 3),
            ("3.00", "2.99", Decimal(-1) / 3),
        ],
    )
    def test_percent(self, old, new, expected):
        assert price_change_percent(Decimal(old), Decimal(new)) == expected

    def test_percent_is_not_rounded(self):
        percent = price_change_percent(Decimal("3.00"), Decimal("2.99"))

        assert percent != Decimal("-0.33")
        assert percent.quantize(Decimal("0.001")) == Decimal("-0.333")

    def test_zero_old_price(self):
        assert price_change_percent(Decimal("0"), Decimal("10.00")) is None
