"""Manual scraper runner for testing and debugging site extractors.

Scrapes a single product URL and prints what was extracted, or runs one
full price check sweep over the wishlist.

Usage:
    python scripts/run_scraper.py --url https://www.zara.com/us/en/some-product.html
    python scripts/run_scraper.py --check-all
"""

import argparse
import asyncio
from decimal import Decimal

from wishlist_tracker.core.exceptions import WishlistTrackerError
from wishlist_tracker.db.session import init_db
from wishlist_tracker.main import build_scheduler, configure_logging
from wishlist_tracker.scrapers.register_extractors import register_all_extractors
from wishlist_tracker.scrapers.registry import get_extractor_registry
from wishlist_tracker.scrapers.scraper_service import get_scraper_service


async def run_scraper(url: str) -> int:
    """Scrape one URL and display the result.

    Args:
        url: Product page URL

    Returns:
        Process exit code
    """
    extractor = get_extractor_registry().resolve(url)

    print(f"\n{'='*70}")
    print(f"  Scraping {url[:60]}")
    print(f"{'='*70}")
    print(f"  🏷️  Site: {extractor.name if extractor else 'generic (fallback only)'}")
    if extractor:
        print(f"  🖥️  Pipeline: {'dynamic' if extractor.requires_dynamic_rendering else 'static'}")
    print(f"{'='*70}\n")

    try:
        product = await get_scraper_service().scrape(url)
    except WishlistTrackerError as e:
        print(f"\n❌ Scrape failed [{e.code}]: {e.message}\n")
        return 1

    print(f"✅ {product.title}")
    print(f"    💰 Price: {_format_price(product.price, product.currency)}")
    if product.brand:
        print(f"    🏢 Brand: {product.brand}")
    print(f"    📦 In stock: {'yes' if product.in_stock else 'no'}")
    if product.colors:
        print(f"    🎨 Colors: {', '.join(_variant_label(v) for v in product.colors)}")
    if product.sizes:
        print(f"    📏 Sizes: {', '.join(_variant_label(v) for v in product.sizes)}")
    print(f"    🖼️  Images ({len(product.images)}):")
    for image in product.images:
        print(f"       - {image[:100]}")
    print()
    return 0


async def run_check_all() -> int:
    """Run one price check sweep and print a summary."""
    await init_db()
    scheduler = build_scheduler()

    print(f"\n🔍 Checking all wishlist prices...\n")
    results = await scheduler.check_all_prices()

    for result in results:
        if not result.success:
            print(f"❌ {result.item_id}: [{result.error_code}] {result.error}")
        elif result.price_changed:
            arrow = "📉" if result.price_dropped else "📈"
            print(
                f"{arrow} {result.item_id}: {result.old_price} -> {result.new_price} "
                f"({result.price_change_percent}%)"
            )
        else:
            print(f"✅ {result.item_id}: unchanged at {result.new_price}")

    failed = sum(1 for r in results if not r.success)
    print(f"\n{'='*70}")
    print(f"  Checked: {len(results)}  Failed: {failed}")
    print(f"{'='*70}\n")
    return 1 if failed else 0


def _variant_label(variant) -> str:
    return variant.name if variant.available is not False else f"{variant.name} (sold out)"


def _format_price(price: Decimal, currency: str) -> str:
    if price <= 0:
        return "not found"
    return f"{currency}{price:,.2f}"


def main() -> int:
    """Parse arguments and run the requested action."""
    parser = argparse.ArgumentParser(
        description="Scrape a product URL or run a price check sweep",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py --url https://www2.hm.com/en_us/productpage.1234567001.html
  python scripts/run_scraper.py --check-all
        """,
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--url", help="Product page URL to scrape")
    group.add_argument(
        "--check-all",
        action="store_true",
        help="Check every wishlist item once and send notifications",
    )
    args = parser.parse_args()

    configure_logging()
    register_all_extractors()

    if args.check_all:
        return asyncio.run(run_check_all())
    return asyncio.run(run_scraper(args.url))


if __name__ == "__main__":
    raise SystemExit(main())
