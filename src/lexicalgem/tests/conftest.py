"""Test configuration."""
import json
import os
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import List
from unittest.mock import AsyncMock

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from lexicalgem.bot import BotContext, CommandRouter
from lexicalgem.services.cycle_service import CycleService
from lexicalgem.services.stats_service import StatsService
from lexicalgem.services.user_service import UserService
from lexicalgem.services.word_service import WordService

SAMPLE_WORDS = [
    {"word": "Serendipity", "definition": "The occurrence of fortunate and unexpected discoveries by chance.", "emoji": "🧠"},
    {"word": "Peregrine", "definition": "Uncommon, strange, or wandering.", "emoji": "📘"},
    {"word": "Ineffable", "definition": "Too great or beautiful to be expressed in words.", "emoji": "🎭"},
    {"word": "Petrichor", "definition": "The pleasant earthy smell after rain falls on dry ground.", "emoji": "🌧️"},
    {"word": "Sonder", "definition": "The realization that each passerby has a life as vivid as your own.", "emoji": "🚶"},
]


class FakeClock:
    """Settable clock for services that take a `clock` callable."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def write_words(path: Path, words: List[dict]) -> Path:
    path.write_text(json.dumps(words), encoding="utf-8")
    return path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 10, 12, 0, 0))


@pytest.fixture
def words_file(tmp_path: Path) -> Path:
    return write_words(tmp_path / "words.json", SAMPLE_WORDS)


@pytest.fixture
def word_service(words_file: Path) -> WordService:
    service = WordService(words_file)
    service.initialize()
    return service


@pytest.fixture
def cycle_service(word_service: WordService) -> CycleService:
    return CycleService(word_service, rng=random.Random(42))


@pytest.fixture
def user_service(clock: FakeClock) -> UserService:
    return UserService(history_limit=50, clock=clock, rng=random.Random(7))


@pytest.fixture
def stats_service(word_service: WordService, cycle_service: CycleService, clock: FakeClock) -> StatsService:
    return StatsService(word_service, cycle_service, clock=clock)


@pytest.fixture
def bot_context(
    word_service: WordService,
    cycle_service: CycleService,
    user_service: UserService,
    stats_service: StatsService,
) -> BotContext:
    return BotContext(
        word_service=word_service,
        cycle_service=cycle_service,
        user_service=user_service,
        stats_service=stats_service,
    )


@pytest.fixture
def router(bot_context: BotContext) -> CommandRouter:
    return CommandRouter(bot_context, bot_username="LexicalGemBot")


@pytest.fixture
def send() -> AsyncMock:
    return AsyncMock()
