"""Service for bot-level request statistics."""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from lexicalgem.models.models import RequestStats
from lexicalgem.services.cycle_service import CycleService
from lexicalgem.services.user_service import is_valid_user_id
from lexicalgem.services.word_service import WordService

logger = logging.getLogger(__name__)


def format_uptime(since: datetime, now: datetime) -> str:
    """Format elapsed time as "1d 2h 3m", dropping leading zero units."""
    total_minutes = max(int((now - since).total_seconds() // 60), 0)
    days, rest = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rest, 60)

    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class StatsService:
    """Aggregates request counters with cycle progress."""

    def __init__(
        self,
        word_service: WordService,
        cycle_service: CycleService,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.word_service = word_service
        self.cycle_service = cycle_service
        self.clock = clock
        self.requests = RequestStats()
        self.start_time = clock()

    def record_request(self, user_id: int) -> bool:
        """Count a request from a user; invalid IDs are ignored."""
        if not is_valid_user_id(user_id):
            logger.warning(f"Invalid user ID provided: {user_id!r}")
            return False

        self.requests.total_requests += 1
        self.requests.unique_user_ids.add(int(user_id))
        logger.debug(
            f"Request recorded for user {user_id} "
            f"(total: {self.requests.total_requests}, "
            f"unique users: {len(self.requests.unique_user_ids)})"
        )
        return True

    def uptime(self, now: Optional[datetime] = None) -> str:
        return format_uptime(self.start_time, now or self.clock())

    def combined_stats(self) -> Dict[str, Any]:
        """Get catalog progress and bot activity in one dict."""
        progress = self.cycle_service.progress()
        return {
            "total_words": progress.total,
            "used_words": progress.used,
            "remaining_words": progress.remaining,
            "cycle_progress": progress.percent_used,
            "total_requests": self.requests.total_requests,
            "unique_users": len(self.requests.unique_user_ids),
            "uptime": self.uptime(),
            "load_attempts": self.word_service.load_attempts,
            "using_fallback": self.word_service.using_fallback,
        }
