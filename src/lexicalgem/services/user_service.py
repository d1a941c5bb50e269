"""User service for managing in-memory user profiles."""
import logging
import random
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from lexicalgem import monitoring
from lexicalgem.config import settings
from lexicalgem.errors import EmptyCatalogError, ValidationError
from lexicalgem.models.models import Difficulty, HistoryEntry, UserProfile, Word, WordOfDay

# Configure logging
logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def is_valid_user_id(user_id: Any) -> bool:
    """Check that the value is a positive integer ID."""
    if isinstance(user_id, bool):
        return False
    try:
        return int(user_id) > 0
    except (TypeError, ValueError):
        return False


def calculate_word_difficulty(word: Word) -> Difficulty:
    """Classify a word by the length of its text and definition."""
    length = len(word.text)
    definition_length = len(word.definition)

    if length <= 6 and definition_length <= 100:
        return Difficulty.EASY
    if length <= 10 and definition_length <= 150:
        return Difficulty.MEDIUM
    return Difficulty.HARD


class UserService:
    """Service for managing user history, streaks and preferences."""

    def __init__(
        self,
        history_limit: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the service with an empty profile map."""
        self.history_limit = history_limit or settings.words.history_limit
        self.clock = clock
        self.rng = rng or random.Random()
        self._users: Dict[int, UserProfile] = {}
        self.word_of_day = WordOfDay()

    def get_or_create(self, user_id: int) -> UserProfile:
        """Get existing profile or create a new one."""
        if not is_valid_user_id(user_id):
            raise ValidationError(f"Invalid user ID: {user_id!r}")

        user_id = int(user_id)
        profile = self._users.get(user_id)
        if profile is None:
            profile = UserProfile(user_id=user_id)
            self._users[user_id] = profile
            monitoring.known_users.set(len(self._users))
            logger.debug(f"Profile created for user {user_id}")
        return profile

    def record_word_seen(self, user_id: int, word: Word) -> HistoryEntry:
        """Add a word to the user's history and update counters and streak."""
        profile = self.get_or_create(user_id)
        now = self.clock()

        entry = HistoryEntry(
            word=word.text,
            definition=word.definition,
            emoji=word.emoji,
            timestamp=now,
            difficulty=calculate_word_difficulty(word),
        )
        profile.history.insert(0, entry)
        del profile.history[self.history_limit:]

        profile.total_words_seen += 1
        self.update_streak(profile, now)
        profile.last_interaction = now

        logger.debug(
            f"Word added to history of user {profile.user_id}: {word.text} "
            f"(history length: {len(profile.history)})"
        )
        return entry

    def update_streak(self, profile: UserProfile, now: datetime) -> None:
        """Update the streak from the time elapsed since the last interaction.

        Counts whole elapsed days, not calendar days: two interactions 23 hours
        apart across midnight leave the streak unchanged.
        """
        last = profile.last_interaction
        if last is None:
            profile.streak_days = 1
            return

        days_diff = (now - last) // ONE_DAY
        if days_diff == 0:
            return
        if days_diff == 1:
            profile.streak_days += 1
        else:
            profile.streak_days = 1

    def set_difficulty(self, user_id: int, difficulty: str) -> bool:
        """Set the user's difficulty preference."""
        if not is_valid_user_id(user_id):
            return False
        if difficulty not in Difficulty.values():
            return False

        profile = self.get_or_create(user_id)
        profile.difficulty = Difficulty(difficulty)
        logger.debug(f"User {profile.user_id} difficulty updated to {difficulty}")
        return True

    def get_history(self, user_id: int, limit: int = 10) -> List[HistoryEntry]:
        """Get the user's most recent words, newest first."""
        if not is_valid_user_id(user_id):
            return []
        return self.get_or_create(user_id).history[:limit]

    def get_user_stats(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Get user statistics."""
        if not is_valid_user_id(user_id):
            return None

        profile = self.get_or_create(user_id)
        return {
            "total_words": profile.total_words_seen,
            "streak": profile.streak_days,
            "last_used": profile.last_interaction,
            "difficulty": profile.difficulty.value,
            "history_length": len(profile.history),
        }

    def word_of_the_day(self, words: Sequence[Word]) -> Word:
        """Get the word shared by all users today, picking a new one on a new date."""
        if not words:
            raise EmptyCatalogError()

        today = self.clock().date().isoformat()
        if self.word_of_day.date_key != today or self.word_of_day.word is None:
            self.word_of_day.word = words[self.rng.randrange(len(words))]
            self.word_of_day.date_key = today
            logger.info(f"New word of the day generated: {self.word_of_day.word.text} ({today})")

        return self.word_of_day.word

    def independent_random(self, words: Sequence[Word]) -> Word:
        """Get a completely random word (can repeat)."""
        if not words:
            raise EmptyCatalogError()
        return words[self.rng.randrange(len(words))]

    def all_users(self) -> Mapping[int, UserProfile]:
        """Read-only view of all profiles (for admin purposes)."""
        return MappingProxyType(self._users)

    def clear_user(self, user_id: int) -> bool:
        """Remove a user's profile."""
        if not is_valid_user_id(user_id):
            return False
        removed = self._users.pop(int(user_id), None) is not None
        monitoring.known_users.set(len(self._users))
        logger.debug(f"User data cleared for {user_id}")
        return removed
