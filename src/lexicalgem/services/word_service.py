"""Service for loading and validating the word list."""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

from lexicalgem import monitoring
from lexicalgem.config import settings
from lexicalgem.errors import LoadError
from lexicalgem.models.models import Word

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("word", "definition", "emoji")

FALLBACK_WORDS: Tuple[Word, ...] = (
    Word(
        text="Serendipity",
        definition="The occurrence of fortunate and unexpected discoveries by chance.",
        emoji="🧠",
    ),
    Word(
        text="Peregrine",
        definition="Uncommon, strange, or wandering.",
        emoji="📘",
    ),
    Word(
        text="Ineffable",
        definition="Too great or beautiful to be expressed in words.",
        emoji="🎭",
    ),
)


@dataclass
class ValidationReport:
    """Result of validating a raw word list."""
    valid_words: List[Word] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return len(self.valid_words) > 0


def is_valid_word(entry: Any) -> bool:
    """Check that an entry has non-empty word, definition and emoji strings."""
    if not isinstance(entry, dict):
        return False
    for name in REQUIRED_FIELDS:
        value = entry.get(name)
        if not isinstance(value, str) or not value.strip():
            return False
    return True


def validate_words(data: Any) -> ValidationReport:
    """Split raw JSON data into valid words and per-index errors."""
    if not isinstance(data, list):
        return ValidationReport(errors=["Words must be an array"])

    report = ValidationReport()
    for index, entry in enumerate(data):
        if is_valid_word(entry):
            report.valid_words.append(Word.from_dict(entry))
        else:
            report.errors.append(f"Invalid word structure at index {index}")
    return report


class WordService:
    """Service for loading and validating the word list."""

    def __init__(self, words_path: Optional[Union[str, Path]] = None):
        """Initialize the service with the path to the words JSON file."""
        self.words_path = Path(words_path) if words_path else settings.paths.words_path
        self._words: Tuple[Word, ...] = ()
        self._reload_listeners: List[Callable[[], None]] = []
        self.is_initialized = False
        self.using_fallback = False
        self.load_attempts = 0
        self.last_load_time: Optional[datetime] = None

    @property
    def words(self) -> Tuple[Word, ...]:
        """Active word list."""
        return self._words

    def add_reload_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback invoked after the word list is replaced."""
        self._reload_listeners.append(listener)

    def load(self, source: Union[str, Path]) -> ValidationReport:
        """Read a JSON word list and return its valid entries with per-index errors.

        Invalid entries are dropped and logged. Raises LoadError when the file
        cannot be read or parsed, or when no valid entries remain.
        """
        path = Path(source)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise LoadError(f"Failed to read words from {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise LoadError(f"Failed to parse words from {path}: {e}") from e

        report = validate_words(data)
        if report.errors:
            logger.warning(
                f"Invalid words found in {path.name}: {len(report.errors)} errors, "
                f"{len(report.valid_words)} valid: {report.errors}"
            )
        if not report.valid:
            raise LoadError(f"No valid words found in {path}", report.errors)

        return report

    def _load_with_fallback(self, source: Union[str, Path]) -> bool:
        """Load words from source, falling back to the built-in list on error."""
        self.load_attempts += 1
        self.last_load_time = datetime.now()

        try:
            report = self.load(source)
        except LoadError as e:
            logger.error(f"Failed to load words (attempt {self.load_attempts}): {e}")
            logger.warning(f"Using {len(FALLBACK_WORDS)} fallback words")
            monitoring.word_loads.labels(result="fallback").inc()
            self._words = FALLBACK_WORDS
            self.using_fallback = True
            return False

        self._words = tuple(report.valid_words)
        self.using_fallback = False
        monitoring.word_loads.labels(result="ok").inc()
        logger.info(f"Loaded {len(self._words)} valid words from {Path(source).name}")
        return True

    def initialize(self) -> bool:
        """Load the configured word list.

        Always leaves the service ready; returns False when the fallback list
        had to be used.
        """
        logger.info("Initializing WordService...")
        success = self._load_with_fallback(self.words_path)
        self.is_initialized = True
        logger.info(f"WordService initialized with {len(self._words)} words")
        return success

    def reload(self, source: Optional[Union[str, Path]] = None) -> bool:
        """Reload words and notify listeners so stale cycle state is dropped."""
        logger.info("Reloading words from file...")
        if source is not None:
            self.words_path = Path(source)
        success = self._load_with_fallback(self.words_path)
        self.is_initialized = True
        for listener in self._reload_listeners:
            listener()
        return success

    def get_word_by_index(self, index: int) -> Optional[Word]:
        """Get a word by its position in the list."""
        if 0 <= index < len(self._words):
            return self._words[index]
        return None

    def get_word_count(self) -> int:
        return len(self._words)

    def is_ready(self) -> bool:
        """Check that the service is initialized and has words."""
        return self.is_initialized and len(self._words) > 0
