"""Tests for command dispatch and Telegram handlers."""
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from faker import Faker
from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import CallbackContext

from conftest import FakeClock, SAMPLE_WORDS
from lexicalgem.bot import (
    MSG_DIFFICULTY_CHANGED,
    MSG_GENERIC_ERROR,
    MSG_HELP,
    MSG_INVALID_DIFFICULTY,
    MSG_NO_HISTORY,
    MSG_NO_WORDS_AVAILABLE,
    MSG_UNKNOWN_COMMAND,
    MSG_WELCOME,
    BotContext,
    CommandRouter,
    handle_message,
    inbound_from_update,
    parse_difficulty,
)
from lexicalgem.models.command_models import Command, InboundMessage
from lexicalgem.models.models import Difficulty
from lexicalgem.services.cycle_service import CycleService
from lexicalgem.services.stats_service import StatsService
from lexicalgem.services.user_service import UserService
from lexicalgem.services.word_service import WordService

fake = Faker()


@pytest.fixture
def user_id() -> int:
    return fake.random_int(min=1, max=10**9)


def make_message(text: str, user_id: int, chat_id: int = 555) -> InboundMessage:
    return InboundMessage(user_id=user_id, chat_id=chat_id, text=text, username=fake.user_name())


@pytest.fixture
def empty_context(words_file: Path, clock: FakeClock) -> BotContext:
    """Context whose word service was never loaded."""
    word_service = WordService(words_file)
    cycle_service = CycleService(word_service)
    return BotContext(
        word_service=word_service,
        cycle_service=cycle_service,
        user_service=UserService(clock=clock),
        stats_service=StatsService(word_service, cycle_service, clock=clock),
    )


def test_resolve_exact_match(router: CommandRouter) -> None:
    """Test exact, case-sensitive command matching."""
    assert router.resolve("/word") == Command.WORD
    assert router.resolve("/word please") == Command.WORD
    assert router.resolve("/wordoftheday") == Command.WORD_OF_THE_DAY
    assert router.resolve("/Word") == Command.UNKNOWN
    assert router.resolve("/words") == Command.UNKNOWN
    assert router.resolve("/wor") == Command.UNKNOWN
    assert router.resolve("hello") == Command.UNKNOWN
    assert router.resolve("") == Command.UNKNOWN
    assert router.resolve("unknown") == Command.UNKNOWN


def test_resolve_bot_mention(router: CommandRouter) -> None:
    """Test that only this bot's @username suffix is stripped."""
    assert router.resolve("/word@LexicalGemBot") == Command.WORD
    assert router.resolve("/word@OtherBot") == Command.UNKNOWN


@pytest.mark.asyncio
async def test_start_and_help(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test static replies."""
    assert await router.dispatch(make_message("/start", user_id), send) == MSG_WELCOME
    assert await router.dispatch(make_message("/help", user_id), send) == MSG_HELP

    send.assert_any_await(555, MSG_WELCOME)
    send.assert_any_await(555, MSG_HELP)
    assert send.await_count == 2


@pytest.mark.asyncio
async def test_unknown_command(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test the catch-all reply and that it only records stats."""
    reply = await router.dispatch(make_message("/Word", user_id), send)

    assert reply == MSG_UNKNOWN_COMMAND
    assert router.context.stats_service.requests.total_requests == 1
    assert router.context.cycle_service.used_keys == set()
    assert router.context.user_service.get_history(user_id) == []


@pytest.mark.asyncio
async def test_word(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test that /word returns a word with progress and streak."""
    reply = await router.dispatch(make_message("/word", user_id), send)

    word = router.context.user_service.get_history(user_id)[0]
    assert f"{word.emoji} *{word.word}*" in reply
    assert f"1/{len(SAMPLE_WORDS)} words discovered (20% complete)" in reply
    assert "*Streak:* 1 days" in reply
    send.assert_awaited_once_with(555, reply)


@pytest.mark.asyncio
async def test_word_cycles_without_repeats(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test that consecutive /word commands do not repeat within a cycle."""
    for _ in range(len(SAMPLE_WORDS)):
        await router.dispatch(make_message("/word", user_id), send)

    seen = [entry.word for entry in router.context.user_service.get_history(user_id, 100)]
    assert sorted(seen) == sorted(w["word"] for w in SAMPLE_WORDS)


@pytest.mark.asyncio
async def test_word_with_empty_catalog(empty_context: BotContext, send: AsyncMock, user_id: int) -> None:
    """Test the friendly reply when no words are loaded."""
    router = CommandRouter(empty_context)

    for command in ("/word", "/wordoftheday", "/random", "/share"):
        assert await router.dispatch(make_message(command, user_id), send) == MSG_NO_WORDS_AVAILABLE


@pytest.mark.asyncio
async def test_stats(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test the statistics reply."""
    await router.dispatch(make_message("/word", user_id), send)
    reply = await router.dispatch(make_message("/stats", user_id + 1), send)

    assert f"Total words: *{len(SAMPLE_WORDS)}*" in reply
    assert "Words discovered: *1*" in reply
    assert "Total requests: *2*" in reply
    assert "Unique users: *2*" in reply
    assert "Uptime: *0m*" in reply
    assert "Keep exploring" in reply


@pytest.mark.asyncio
async def test_stats_after_full_cycle(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    for _ in range(len(SAMPLE_WORDS)):
        await router.dispatch(make_message("/word", user_id), send)

    reply = await router.dispatch(make_message("/stats", user_id), send)

    assert "Cycle progress: *100%*" in reply
    assert "Next /word will start a new cycle" in reply


@pytest.mark.asyncio
async def test_stats_with_empty_catalog(empty_context: BotContext, send: AsyncMock, user_id: int) -> None:
    """Test that an empty catalog does not announce a new cycle."""
    router = CommandRouter(empty_context)

    reply = await router.dispatch(make_message("/stats", user_id), send)

    assert "Total words: *0*" in reply
    assert "Next /word will start a new cycle" not in reply
    assert "Keep exploring" in reply


@pytest.mark.asyncio
async def test_word_of_the_day(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test that every user gets the same word of the day and it is recorded."""
    first = await router.dispatch(make_message("/wordoftheday", user_id), send)
    second = await router.dispatch(make_message("/wordoftheday", user_id + 1), send)

    assert first == second
    assert "Word of the Day" in first
    assert len(router.context.user_service.get_history(user_id)) == 1


@pytest.mark.asyncio
async def test_history(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test the empty and populated history replies."""
    assert await router.dispatch(make_message("/history", user_id), send) == MSG_NO_HISTORY

    for _ in range(12):
        await router.dispatch(make_message("/random", user_id), send)
    reply = await router.dispatch(make_message("/history", user_id), send)

    assert "Your Word History" in reply
    assert "10. " in reply
    assert "11. " not in reply
    assert "(2024-03-10)" in reply
    assert "Total words discovered:* 12" in reply


@pytest.mark.asyncio
async def test_random_records_history(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test that /random is recorded but does not advance the cycle."""
    reply = await router.dispatch(make_message("/random", user_id), send)

    assert "Random Word" in reply
    assert len(router.context.user_service.get_history(user_id)) == 1
    assert router.context.cycle_service.used_keys == set()


@pytest.mark.asyncio
async def test_share_is_not_recorded(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test that /share does not touch history or the cycle."""
    reply = await router.dispatch(make_message("/share", user_id), send)

    assert "Shared via LexicalGem Bot" in reply
    assert router.context.user_service.get_history(user_id) == []
    assert router.context.cycle_service.used_keys == set()


@pytest.mark.asyncio
async def test_difficulty(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test showing, setting and rejecting difficulty."""
    reply = await router.dispatch(make_message("/difficulty", user_id), send)
    assert "Current difficulty: *medium*" in reply

    reply = await router.dispatch(make_message("/difficulty HARD", user_id), send)
    assert reply.startswith(MSG_DIFFICULTY_CHANGED)
    assert router.context.user_service.get_or_create(user_id).difficulty == Difficulty.HARD

    reply = await router.dispatch(make_message("/difficulty extreme", user_id), send)
    assert reply == MSG_INVALID_DIFFICULTY
    assert router.context.user_service.get_or_create(user_id).difficulty == Difficulty.HARD


def test_parse_difficulty() -> None:
    assert parse_difficulty("Easy") == "easy"
    assert parse_difficulty("very hard please") == "hard"
    assert parse_difficulty("MEDIUM") == "medium"
    assert parse_difficulty("extreme") is None


@pytest.mark.asyncio
async def test_handler_error_is_contained(router: CommandRouter, send: AsyncMock, user_id: int) -> None:
    """Test that a failing handler produces the generic reply instead of raising."""
    router.handlers[Command.WORD] = Mock(side_effect=RuntimeError("boom"))

    reply = await router.dispatch(make_message("/word", user_id), send)

    assert reply == MSG_GENERIC_ERROR
    send.assert_awaited_once_with(555, MSG_GENERIC_ERROR)


@pytest.mark.asyncio
async def test_send_failure_is_not_raised(router: CommandRouter, user_id: int) -> None:
    """Test that a transport failure is logged and not retried."""
    send = AsyncMock(side_effect=ConnectionError("network down"))

    reply = await router.dispatch(make_message("/start", user_id), send)

    assert reply == MSG_WELCOME
    send.assert_awaited_once()


@pytest.mark.asyncio
async def test_invalid_user_is_dropped(router: CommandRouter, send: AsyncMock) -> None:
    """Test that an invalid user ID gets no reply and no stats."""
    assert await router.dispatch(make_message("/word", 0), send) is None

    send.assert_not_awaited()
    assert router.context.stats_service.requests.total_requests == 0


def test_inbound_from_update() -> None:
    """Test conversion of a Telegram update."""
    update = Mock(spec=Update)
    update.effective_user.id = 42
    update.effective_user.username = "gem_fan"
    update.effective_chat.id = 99
    update.effective_message.text = "/word"

    message = inbound_from_update(update)

    assert message == InboundMessage(user_id=42, chat_id=99, text="/word", username="gem_fan")

    update.effective_message.text = None
    assert inbound_from_update(update) is None


@pytest.mark.asyncio
async def test_handle_message(router: CommandRouter) -> None:
    """Test the Telegram handler sends the routed reply as Markdown."""
    update = Mock(spec=Update)
    update.effective_user.id = 42
    update.effective_user.username = "gem_fan"
    update.effective_chat.id = 99
    update.effective_message.text = "/start"

    context = Mock(spec=CallbackContext)
    context.bot_data = {"router": router}
    context.bot = Mock()
    context.bot.send_message = AsyncMock()

    await handle_message(update, context)

    context.bot.send_message.assert_awaited_once_with(
        chat_id=99, text=MSG_WELCOME, parse_mode=ParseMode.MARKDOWN
    )
