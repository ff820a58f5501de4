"""Wishlist tracker service entry point.

Creates the database tables, registers the site extractors and runs the
price check scheduler until SIGINT/SIGTERM.
"""

import asyncio
import logging
import signal

import structlog

from wishlist_tracker.config import settings
from wishlist_tracker.db.session import async_session_factory, init_db
from wishlist_tracker.scrapers.register_extractors import register_all_extractors
from wishlist_tracker.scrapers.scheduler import PriceCheckScheduler
from wishlist_tracker.scrapers.scraper_service import get_scraper_service
from wishlist_tracker.services.notification_service import EmailNotificationService
from wishlist_tracker.services.price_checker import PriceChecker

logger = structlog.get_logger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    """Configure stdlib logging for libraries and structlog for our own events."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def build_scheduler() -> PriceCheckScheduler:
    """Wire the scheduler with the production scraper, storage and email channel."""
    price_checker = PriceChecker(get_scraper_service(), async_session_factory)
    return PriceCheckScheduler(
        session_factory=async_session_factory,
        price_checker=price_checker,
        notifier=EmailNotificationService(),
    )


async def run() -> None:
    """Run the tracker until a shutdown signal arrives."""
    logger.info(
        "wishlist_tracker_starting",
        environment=settings.ENVIRONMENT,
        interval_hours=settings.PRICE_CHECK_INTERVAL_HOURS,
    )

    await init_db()
    logger.info("database_ready")

    register_all_extractors()

    scheduler = build_scheduler()
    if not scheduler.notifier.enabled:
        logger.warning("email_notifications_disabled", reason="missing_smtp_configuration")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))

    scheduler.start()
    try:
        await stop_event.wait()
    finally:
        scheduler.stop()
        logger.info("wishlist_tracker_stopped")


def main() -> None:
    configure_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
