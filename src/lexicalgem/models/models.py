"""Data models for words and user profiles."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Set


class Difficulty(str, Enum):
    """Difficulty levels, used both as user preference and word tier."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def values(cls) -> List[str]:
        return [d.value for d in cls]


@dataclass(frozen=True)
class Word:
    """A word from the catalog."""
    text: str
    definition: str
    emoji: str

    @classmethod
    def from_dict(cls, data: dict) -> "Word":
        """Build a word from a JSON entry ({word, definition, emoji})."""
        return cls(
            text=data["word"].strip(),
            definition=data["definition"].strip(),
            emoji=data["emoji"].strip(),
        )

    def to_dict(self) -> dict:
        return {"word": self.text, "definition": self.definition, "emoji": self.emoji}


@dataclass(frozen=True)
class HistoryEntry:
    """A word a user has seen, copied by value at the time it was shown."""
    word: str
    definition: str
    emoji: str
    timestamp: datetime
    difficulty: Difficulty


@dataclass
class UserProfile:
    """In-memory state for one user."""
    user_id: int
    history: List[HistoryEntry] = field(default_factory=list)
    difficulty: Difficulty = Difficulty.MEDIUM
    total_words_seen: int = 0
    streak_days: int = 0
    last_interaction: Optional[datetime] = None


@dataclass
class WordOfDay:
    """The word shared by everyone for one calendar date."""
    word: Optional[Word] = None
    date_key: Optional[str] = None


@dataclass(frozen=True)
class CycleProgress:
    """Read-only view of the current no-repeat cycle."""
    total: int
    used: int
    remaining: int
    percent_used: int


@dataclass
class RequestStats:
    """Bot-level request counters."""
    total_requests: int = 0
    unique_user_ids: Set[int] = field(default_factory=set)
