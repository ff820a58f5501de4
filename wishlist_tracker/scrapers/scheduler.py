"""APScheduler-based price check scheduler.

Runs a sweep over every wishlist item on a fixed interval. Items are
checked one at a time with a pause in between so storefronts never see
bursts of requests.
"""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional
from uuid import UUID

import structlog
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wishlist_tracker.config import settings
from wishlist_tracker.schemas.price_check import PriceCheckResult
from wishlist_tracker.services.notification_service import NotificationService
from wishlist_tracker.services.price_checker import PriceChecker
from wishlist_tracker.services.wishlist_service import WishlistService

logger = structlog.get_logger(__name__)

PRICE_CHECK_JOB_ID = "price_check_all"


class PriceCheckScheduler:
    """Manages the periodic price sweep using APScheduler.

    This scheduler:
    - Checks all items sequentially with a fixed inter-item delay
    - Sends price drop and restock notifications
    - Never runs two sweeps at once
    - Keeps going when an item or a notification fails
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        price_checker: PriceChecker,
        notifier: Optional[NotificationService] = None,
        item_delay: float = settings.PRICE_CHECK_ITEM_DELAY_SECONDS,
    ):
        """Initialize price check scheduler.

        Args:
            session_factory: Async session factory for database access
            price_checker: Single-item checker
            notifier: Notification channel; None disables notifications
            item_delay: Seconds to wait after each item
        """
        self.session_factory = session_factory
        self.price_checker = price_checker
        self.notifier = notifier
        self.item_delay = item_delay
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="price_check_scheduler")
        self._sweep_lock = asyncio.Lock()

    def start(self, interval_hours: int = settings.PRICE_CHECK_INTERVAL_HOURS) -> None:
        """Start the scheduler and register the sweep job."""
        if self.scheduler.running:
            self.logger.warning("scheduler_already_running")
            return
        self.add_price_check_job(interval_hours)
        self.scheduler.start()
        self.logger.info("scheduler_started", interval_hours=interval_hours)

    def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    def add_price_check_job(self, interval_hours: int) -> Job:
        """Register (or replace) the periodic sweep job.

        The first sweep runs one full interval after registration.
        """
        trigger = IntervalTrigger(
            hours=interval_hours,
            start_date=datetime.now(timezone.utc),
            timezone="UTC",
        )
        job = self.scheduler.add_job(
            func=self._run_price_check_wrapper,
            trigger=trigger,
            id=PRICE_CHECK_JOB_ID,
            name="Check all wishlist prices",
            replace_existing=True,
            max_instances=1,
        )
        self.logger.info("price_check_job_added", interval_hours=interval_hours)
        return job

    async def _run_price_check_wrapper(self) -> None:
        """Entry point called by APScheduler; never raises."""
        if self._sweep_lock.locked():
            self.logger.warning("price_check_skipped", reason="sweep_in_progress")
            return
        try:
            await self.check_all_prices()
        except Exception as e:
            self.logger.error("price_check_sweep_failed", error=str(e), exc_info=True)

    async def check_all_prices(self) -> List[PriceCheckResult]:
        """Check every tracked item once.

        Returns:
            One result per item, in item order
        """
        async with self._sweep_lock:
            async with self.session_factory() as db:
                items = await WishlistService(db).list_items()
                # Snapshot before checking; the check rewrites in_stock
                was_out_of_stock: Dict[UUID, bool] = {item.id: not item.in_stock for item in items}

            self.logger.info("price_check_sweep_started", items=len(was_out_of_stock))
            started = datetime.now(timezone.utc)
            results: List[PriceCheckResult] = []

            for item_id, out_of_stock in was_out_of_stock.items():
                result = await self.price_checker.check_price(item_id)
                results.append(result)

                if result.success:
                    await self._send_notifications(result, out_of_stock)

                await asyncio.sleep(self.item_delay)

            succeeded = sum(1 for r in results if r.success)
            self.logger.info(
                "price_check_sweep_completed",
                items=len(results),
                succeeded=succeeded,
                failed=len(results) - succeeded,
                price_changes=sum(1 for r in results if r.price_changed),
                duration_seconds=round((datetime.now(timezone.utc) - started).total_seconds(), 2),
            )
            return results

    async def _send_notifications(self, result: PriceCheckResult, was_out_of_stock: bool) -> None:
        if self.notifier is None:
            return

        price_dropped = (
            result.price_dropped
            and result.old_price is not None
            and result.new_price is not None
            and result.price_change_percent is not None
        )
        restocked = was_out_of_stock and result.in_stock is True
        if not (price_dropped or restocked):
            return

        # Re-read so notifications see the state the check just wrote
        async with self.session_factory() as db:
            item = await WishlistService(db).get_item(result.item_id)
        if item is None:
            self.logger.warning("notification_item_vanished", item_id=str(result.item_id))
            return

        if price_dropped:
            await self._notify(
                "price_drop",
                self.notifier.notify_price_drop,
                item,
                result.old_price,
                result.new_price,
                result.price_change_percent,
            )
        if restocked:
            await self._notify("restock", self.notifier.notify_restock, item)

    async def _notify(self, kind: str, send: Callable[..., Awaitable[bool]], item, *args) -> None:
        item_id = item.id
        try:
            sent = await send(item, *args)
        except Exception as e:
            self.logger.error(
                "notification_failed",
                kind=kind,
                item_id=str(item_id),
                error=str(e),
                exc_info=True,
            )
            return
        if not sent:
            self.logger.warning("notification_not_sent", kind=kind, item_id=str(item_id))

    def get_jobs_status(self) -> dict:
        """Status of scheduled jobs keyed by job id."""
        jobs = {}
        for job in self.scheduler.get_jobs():
            jobs[job.id] = {
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger),
            }
        return jobs

    def is_running(self) -> bool:
        return self.scheduler.running

    @property
    def sweep_in_progress(self) -> bool:
        return self._sweep_lock.locked()
