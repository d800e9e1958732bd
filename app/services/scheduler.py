"""Background scheduler that completes bookings once they have finished."""
import logging
from datetime import datetime
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.services.booking_service import booking_service

logger = logging.getLogger(__name__)


class CompletionScheduler:
    """Background scheduler moving finished confirmed bookings to completed."""

    def __init__(self, session_factory=AsyncSessionLocal):
        """Initialize the scheduler."""
        self.scheduler = AsyncIOScheduler()
        self.session_factory = session_factory
        self.running = False
        self.last_run_at: Optional[datetime] = None

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        logger.info("Starting booking completion scheduler")

        self.scheduler.add_job(
            self.run_once,
            IntervalTrigger(minutes=settings.COMPLETION_CHECK_INTERVAL_MINUTES),
            id="booking_completion_job",
            name="Complete finished bookings",
            replace_existing=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info("Booking completion scheduler started")

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping booking completion scheduler")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Booking completion scheduler stopped")

    async def run_once(self) -> int:
        """
        Complete every confirmed booking whose end time has passed.

        Failures are logged and rolled back so the next run retries them.

        Returns:
            Number of bookings completed
        """
        logger.debug("Running booking completion check")

        async with self.session_factory() as db:
            try:
                completed = await booking_service.complete_finished_bookings(db)
                self.last_run_at = datetime.utcnow()
                return completed
            except Exception as e:
                logger.error(f"Error in booking completion check: {e}", exc_info=True)
                await db.rollback()
                return 0


# Singleton instance
completion_scheduler = CompletionScheduler()
