"""Service for no-repeat word selection cycles."""
import logging
import math
import random
from typing import Optional, Set

from lexicalgem import monitoring
from lexicalgem.models.models import CycleProgress, Word
from lexicalgem.services.word_service import WordService


logger = logging.getLogger(__name__)


def percent(part: int, total: int) -> int:
    """Whole percentage rounded half up, 0 for an empty total."""
    if total <= 0:
        return 0
    return int(math.floor(100 * part / total + 0.5))


class CycleService:
    """Selects words without repetition until every word has been shown.

    The word list is owned by the WordService; this service only keeps the
    set of word texts used in the current cycle. When that set covers the
    whole list, the next selection starts a new cycle.
    """

    def __init__(self, word_service: WordService, rng: Optional[random.Random] = None):
        """Initialize the cycle service."""
        self.word_service = word_service
        self.rng = rng or random.Random()
        self.used_keys: Set[str] = set()
        self.cycle_count = 0
        # Keys of removed words must not survive a reload
        self.word_service.add_reload_listener(self.reset_cycle)

    def _used_in_current_words(self) -> int:
        keys = {word.text for word in self.word_service.words}
        return len(self.used_keys & keys)

    def select_next(self) -> Optional[Word]:
        """Get a random word that has not been used in the current cycle."""
        words = self.word_service.words
        if not words:
            logger.warning("Attempted to get word with no words available")
            return None

        available = [word for word in words if word.text not in self.used_keys]
        # Duplicate texts share a key, so exhaustion is judged on what is left
        if not available:
            self.used_keys.clear()
            self.cycle_count += 1
            monitoring.cycle_resets.inc()
            logger.info("All words have been used, starting new cycle")
            available = list(words)

        selected = available[self.rng.randrange(len(available))]
        self.used_keys.add(selected.text)

        logger.debug(
            f"Word selected: {selected.text}, "
            f"remaining: {len(words) - self._used_in_current_words()}"
        )
        return selected

    def select_independent_random(self) -> Optional[Word]:
        """Get a random word from the whole list; repeats allowed, cycle untouched."""
        words = self.word_service.words
        if not words:
            return None
        return words[self.rng.randrange(len(words))]

    def reset_cycle(self) -> None:
        """Forget every word used in the current cycle."""
        self.used_keys.clear()
        logger.info("Word cycle manually reset")

    def progress(self) -> CycleProgress:
        """Get progress through the current cycle."""
        total = len(self.word_service.words)
        used = self._used_in_current_words()
        return CycleProgress(
            total=total,
            used=used,
            remaining=total - used,
            percent_used=percent(used, total),
        )
