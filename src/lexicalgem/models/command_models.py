"""Models for command dispatch."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Command(Enum):
    """Supported chat commands."""
    START = "/start"
    WORD = "/word"
    STATS = "/stats"
    HELP = "/help"
    WORD_OF_THE_DAY = "/wordoftheday"
    HISTORY = "/history"
    RANDOM = "/random"
    DIFFICULTY = "/difficulty"
    SHARE = "/share"
    UNKNOWN = "unknown"  # Catch-all, never matched from text

    @classmethod
    def resolve(cls, token: str) -> "Command":
        """Exact, case-sensitive lookup of a command token."""
        for command in cls:
            if command is not cls.UNKNOWN and command.value == token:
                return command
        return cls.UNKNOWN


class CommandError(Enum):
    """Expected failure outcomes of a command handler."""
    EMPTY_CATALOG = "empty_catalog"  # No words loaded
    NO_HISTORY = "no_history"  # User has not seen any words yet
    INVALID_DIFFICULTY = "invalid_difficulty"  # Unknown difficulty argument


@dataclass
class InboundMessage:
    """A chat message as delivered by the transport."""
    user_id: int
    chat_id: int
    text: str
    username: Optional[str] = None

    @property
    def argument(self) -> str:
        """Everything after the leading token."""
        parts = self.text.split(maxsplit=1)
        return parts[1].strip() if len(parts) > 1 else ""


@dataclass
class CommandResult:
    """Outcome of a command handler: reply text or a tagged error."""
    text: Optional[str] = None
    error: Optional[CommandError] = None

    @classmethod
    def ok(cls, text: str) -> "CommandResult":
        return cls(text=text)

    @classmethod
    def fail(cls, error: CommandError) -> "CommandResult":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None
