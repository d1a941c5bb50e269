"""Service for periodic background tasks."""
import asyncio
import logging
from typing import Dict, Optional

from lexicalgem.config import settings
from lexicalgem.services.stats_service import StatsService

logger = logging.getLogger(__name__)


class SchedulerService:
    """Service for periodic background tasks."""

    def __init__(self, stats_service: StatsService, interval: Optional[int] = None):
        """Initialize the service with the stats to report."""
        self.stats_service = stats_service
        self.interval = interval if interval is not None else settings.monitoring.stats_log_interval
        self.tasks: Dict[str, asyncio.Task] = {}
        self.running = False

    async def start(self) -> None:
        """Start the scheduler service."""
        if self.running:
            return

        self.running = True
        logger.info("Starting scheduler service...")

        # Start periodic stats task
        self.tasks["stats_log"] = asyncio.create_task(self._run_stats_log())

    async def stop(self) -> None:
        """Stop the scheduler service."""
        if not self.running:
            return

        self.running = False
        logger.info("Stopping scheduler service...")

        # Cancel all tasks
        for task in self.tasks.values():
            task.cancel()

        # Wait for tasks to complete
        await asyncio.gather(*self.tasks.values(), return_exceptions=True)
        self.tasks.clear()

    def log_stats(self) -> None:
        """Log the current combined statistics."""
        stats = self.stats_service.combined_stats()
        logger.info(
            f"📊 Periodic stats: uptime {stats['uptime']}, "
            f"requests {stats['total_requests']}, users {stats['unique_users']}, "
            f"cycle {stats['used_words']}/{stats['total_words']} ({stats['cycle_progress']}%)"
        )

    async def _run_stats_log(self) -> None:
        """Run periodic stats task."""
        while self.running:
            try:
                await asyncio.sleep(self.interval)
                self.log_stats()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in stats log task: {e}")
