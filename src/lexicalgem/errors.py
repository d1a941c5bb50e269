"""Error types raised by the word and user services."""
from typing import List, Optional


class LexicalGemError(Exception):
    """Base class for bot errors."""


class ValidationError(LexicalGemError):
    """A word entry or a user ID failed validation."""


class EmptyCatalogError(LexicalGemError):
    """No words are available to choose from."""

    def __init__(self, message: str = "No words available"):
        super().__init__(message)


class LoadError(LexicalGemError):
    """The word source could not be read, parsed, or had no valid entries."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []
