"""Command handlers and dispatch for the Telegram bot."""
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional, Union

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import CallbackContext

from lexicalgem import monitoring
from lexicalgem.config import settings
from lexicalgem.errors import EmptyCatalogError
from lexicalgem.models.command_models import Command, CommandError, CommandResult, InboundMessage
from lexicalgem.models.models import Difficulty, Word
from lexicalgem.services.cycle_service import CycleService
from lexicalgem.services.stats_service import StatsService
from lexicalgem.services.user_service import UserService, is_valid_user_id
from lexicalgem.services.word_service import WordService

# Get logger for this module
logger = logging.getLogger(__name__)

BOT_NAME = "LexicalGem"
BOT_VERSION = "2.0.0"

MSG_WELCOME = """🤖 *Welcome to LexicalGem!*

"Learn a word you didn't know you needed."

✨ *How to use:*
Type /word to receive a rare, elegant, or fun word with its definition.

📚 *About:*
LexicalGem is your daily dose of linguistic treasures. Discover words that will make your vocabulary sparkle!

💡 *Commands:*
/word - Get a random rare word
/stats - View bot statistics
/help - Show help message"""

MSG_HELP = """🤖 *LexicalGem Commands*

📚 *Basic Commands:*
/start - Welcome message and introduction
/word - Get a random rare word (no repetition until all shown)
/stats - Show detailed bot statistics
/help - Show this help message

🚀 *Advanced Commands:*
/wordoftheday - Get today's special word
/history - View your word discovery history
/random - Get a completely random word (can repeat)
/difficulty - Change word difficulty (easy/medium/hard)
/share - Share a word with friends

💡 *Tip:* Use /word whenever you want to expand your vocabulary with something special!"""

MSG_UNKNOWN_COMMAND = """💎 *LexicalGem*

I'm here to share rare words with you!

Try typing /word to discover a linguistic gem, or /help to see all available commands."""

MSG_NO_WORDS_AVAILABLE = "❌ No words available at the moment. Please try again later."
MSG_NO_HISTORY = "You haven't discovered any words yet."
MSG_INVALID_DIFFICULTY = "Invalid difficulty level. Use: easy, medium, or hard"
MSG_DIFFICULTY_CHANGED = "Difficulty level updated successfully!"
MSG_GENERIC_ERROR = "❌ An error occurred while processing your request. Please try again later."

TITLE_WORD_OF_THE_DAY = "🌟 *Word of the Day*"
TITLE_HISTORY = "📚 *Your Word History*"
TITLE_RANDOM_WORD = "🎲 *Random Word*"
TITLE_SHARE = "Share this word with your friends!"

ERROR_MESSAGES: Dict[CommandError, str] = {
    CommandError.EMPTY_CATALOG: MSG_NO_WORDS_AVAILABLE,
    CommandError.NO_HISTORY: MSG_NO_HISTORY,
    CommandError.INVALID_DIFFICULTY: MSG_INVALID_DIFFICULTY,
}

HISTORY_PAGE_SIZE = 10

SendText = Callable[[int, str], Awaitable[None]]


@dataclass
class BotContext:
    """Services shared by all command handlers."""
    word_service: WordService
    cycle_service: CycleService
    user_service: UserService
    stats_service: StatsService
    history_page_size: int = HISTORY_PAGE_SIZE

    @classmethod
    def create(cls, words_path: Optional[Union[str, Path]] = None) -> "BotContext":
        """Build and initialize all services."""
        word_service = WordService(words_path)
        word_service.initialize()
        cycle_service = CycleService(word_service)
        return cls(
            word_service=word_service,
            cycle_service=cycle_service,
            user_service=UserService(history_limit=settings.words.history_limit),
            stats_service=StatsService(word_service, cycle_service),
            history_page_size=settings.words.history_page_size,
        )


def format_word(word: Word) -> str:
    return f"{word.emoji} *{word.text}* — {word.definition}"


def handle_start(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Send the welcome text."""
    return CommandResult.ok(MSG_WELCOME)


def handle_help(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Send the help text."""
    return CommandResult.ok(MSG_HELP)


def handle_word(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Send the next word of the no-repeat cycle with progress and streak."""
    if not ctx.word_service.is_ready():
        logger.warning(f"Word service not ready for user {message.user_id}")
        return CommandResult.fail(CommandError.EMPTY_CATALOG)

    word = ctx.cycle_service.select_next()
    if word is None:
        logger.error(f"Failed to get word for user {message.user_id}")
        return CommandResult.fail(CommandError.EMPTY_CATALOG)

    ctx.user_service.record_word_seen(message.user_id, word)
    monitoring.words_served.labels(source="cycle").inc()

    progress = ctx.cycle_service.progress()
    profile = ctx.user_service.get_or_create(message.user_id)

    logger.info(
        f"Word {word.text} sent to user {message.user_id} "
        f"(progress: {progress.used}/{progress.total})"
    )
    return CommandResult.ok(
        f"{format_word(word)}\n\n"
        f"📊 *Progress:* {progress.used}/{progress.total} words discovered "
        f"({progress.percent_used}% complete)\n"
        f"🔥 *Streak:* {profile.streak_days} days\n\n"
        "💡 *Tip:* Use /history to see your discovered words!"
    )


def handle_stats(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Send catalog and bot activity statistics."""
    stats = ctx.stats_service.combined_stats()

    if stats["total_words"] > 0 and stats["remaining_words"] == 0:
        footer = "🔄 All words have been shown! Next /word will start a new cycle."
    else:
        footer = "💡 Keep exploring to see all our linguistic gems!"

    return CommandResult.ok(
        "📊 *LexicalGem Statistics*\n\n"
        "📚 *Word Collection:*\n"
        f"• Total words: *{stats['total_words']}*\n"
        f"• Words discovered: *{stats['used_words']}*\n"
        f"• Remaining in cycle: *{stats['remaining_words']}*\n"
        f"• Cycle progress: *{stats['cycle_progress']}%*\n\n"
        "🤖 *Bot Activity:*\n"
        f"• Total requests: *{stats['total_requests']}*\n"
        f"• Unique users: *{stats['unique_users']}*\n"
        f"• Uptime: *{stats['uptime']}*\n\n"
        f"{footer}"
    )


def handle_word_of_the_day(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Send today's word, shared by all users."""
    try:
        word = ctx.user_service.word_of_the_day(ctx.word_service.words)
    except EmptyCatalogError:
        return CommandResult.fail(CommandError.EMPTY_CATALOG)

    ctx.user_service.record_word_seen(message.user_id, word)
    monitoring.words_served.labels(source="word_of_the_day").inc()

    return CommandResult.ok(
        f"{TITLE_WORD_OF_THE_DAY}\n\n"
        f"{format_word(word)}\n\n"
        "📅 *Today's special word for everyone!*"
    )


def handle_history(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Send the user's most recent words."""
    history = ctx.user_service.get_history(message.user_id, ctx.history_page_size)
    if not history:
        return CommandResult.fail(CommandError.NO_HISTORY)

    lines = [f"{TITLE_HISTORY}\n"]
    for index, entry in enumerate(history, start=1):
        lines.append(f"{index}. {entry.emoji} *{entry.word}* ({entry.timestamp:%Y-%m-%d})")

    profile = ctx.user_service.get_or_create(message.user_id)
    lines.append(f"\n📊 *Total words discovered:* {profile.total_words_seen}")
    return CommandResult.ok("\n".join(lines))


def handle_random(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Send a completely random word; repeats are allowed."""
    try:
        word = ctx.user_service.independent_random(ctx.word_service.words)
    except EmptyCatalogError:
        return CommandResult.fail(CommandError.EMPTY_CATALOG)

    ctx.user_service.record_word_seen(message.user_id, word)
    monitoring.words_served.labels(source="random").inc()

    return CommandResult.ok(
        f"{TITLE_RANDOM_WORD}\n\n"
        f"{format_word(word)}\n\n"
        "🎲 *Completely random selection (may repeat)*"
    )


def parse_difficulty(argument: str) -> Optional[str]:
    """Find a difficulty name inside the argument (case-insensitive)."""
    text = argument.lower()
    for difficulty in (Difficulty.EASY, Difficulty.HARD, Difficulty.MEDIUM):
        if difficulty.value in text:
            return difficulty.value
    return None


def handle_difficulty(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Show or change the user's difficulty preference."""
    if not message.argument:
        profile = ctx.user_service.get_or_create(message.user_id)
        return CommandResult.ok(
            "🎯 *Difficulty Settings*\n\n"
            f"Current difficulty: *{profile.difficulty.value}*\n\n"
            "To change difficulty, use:\n"
            "/difficulty easy\n"
            "/difficulty medium\n"
            "/difficulty hard\n\n"
            "💡 *Note:* Difficulty affects word selection preferences."
        )

    difficulty = parse_difficulty(message.argument)
    if difficulty is None or not ctx.user_service.set_difficulty(message.user_id, difficulty):
        return CommandResult.fail(CommandError.INVALID_DIFFICULTY)

    logger.info(f"User {message.user_id} difficulty set to {difficulty}")
    return CommandResult.ok(f"{MSG_DIFFICULTY_CHANGED} Current difficulty: *{difficulty}*")


def handle_share(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Send a random word formatted for sharing; not added to history."""
    word = ctx.cycle_service.select_independent_random()
    if word is None:
        return CommandResult.fail(CommandError.EMPTY_CATALOG)

    monitoring.words_served.labels(source="share").inc()
    return CommandResult.ok(
        f"{TITLE_SHARE}\n\n"
        f"{format_word(word)}\n\n"
        f"🤖 *Shared via {BOT_NAME} Bot*\n"
        "💎 *Learn a word you didn't know you needed!*"
    )


def handle_unknown(ctx: BotContext, message: InboundMessage) -> CommandResult:
    """Reply to anything that is not a known command."""
    logger.debug(f"Unknown command from user {message.user_id}: {message.text}")
    return CommandResult.ok(MSG_UNKNOWN_COMMAND)


Handler = Callable[[BotContext, InboundMessage], CommandResult]

HANDLERS: Dict[Command, Handler] = {
    Command.START: handle_start,
    Command.WORD: handle_word,
    Command.STATS: handle_stats,
    Command.HELP: handle_help,
    Command.WORD_OF_THE_DAY: handle_word_of_the_day,
    Command.HISTORY: handle_history,
    Command.RANDOM: handle_random,
    Command.DIFFICULTY: handle_difficulty,
    Command.SHARE: handle_share,
    Command.UNKNOWN: handle_unknown,
}


class CommandRouter:
    """Resolves inbound messages to handlers and sends their replies."""

    def __init__(
        self,
        context: BotContext,
        bot_username: Optional[str] = None,
        handlers: Optional[Dict[Command, Handler]] = None,
    ):
        self.context = context
        self.bot_username = bot_username.lstrip("@") if bot_username else None
        self.handlers = dict(handlers or HANDLERS)

    def resolve(self, text: str) -> Command:
        """Map the leading token of a message to a command."""
        parts = text.split(maxsplit=1)
        token = parts[0] if parts else ""
        # Commands in group chats may be addressed as /word@BotName
        if self.bot_username and token.endswith(f"@{self.bot_username}"):
            token = token[: -len(self.bot_username) - 1]
        return Command.resolve(token)

    def render(self, result: CommandResult) -> str:
        """Convert a handler result into reply text."""
        if result.is_ok:
            return result.text
        return ERROR_MESSAGES.get(result.error, MSG_GENERIC_ERROR)

    def run_handler(self, command: Command, message: InboundMessage) -> str:
        """Run a handler; any exception becomes the generic error reply."""
        handler = self.handlers[command]
        start_time = time.monotonic()
        try:
            result = handler(self.context, message)
        except Exception as e:
            logger.exception(
                f"Error executing command {command.value} "
                f"(user {message.user_id}, chat {message.chat_id}): {e}"
            )
            monitoring.error_count.labels(error_type=type(e).__name__).inc()
            return MSG_GENERIC_ERROR
        finally:
            monitoring.request_duration.labels(handler=command.name.lower()).observe(
                time.monotonic() - start_time
            )
        return self.render(result)

    async def dispatch(self, message: InboundMessage, send: SendText) -> Optional[str]:
        """Handle one inbound message and send the reply.

        Returns the reply text, or None when the message was dropped.
        """
        if not is_valid_user_id(message.user_id):
            logger.warning(f"Invalid user ID in message: {message.user_id!r}")
            return None

        command = self.resolve(message.text)
        self.context.stats_service.record_request(message.user_id)
        monitoring.requests_total.labels(command=command.name.lower()).inc()

        logger.debug(
            f"Executing command {command.value} for user {message.username} ({message.user_id})"
        )
        reply = self.run_handler(command, message)

        try:
            await send(message.chat_id, reply)
        except Exception as e:
            logger.error(f"Failed to send reply to chat {message.chat_id}: {e}")
            monitoring.error_count.labels(error_type="send_failed").inc()
        return reply


def inbound_from_update(update: Update) -> Optional[InboundMessage]:
    """Build an inbound message from a Telegram update, if it carries text."""
    message = update.effective_message
    user = update.effective_user
    chat = update.effective_chat
    if message is None or user is None or chat is None or not message.text:
        return None
    return InboundMessage(
        user_id=user.id,
        chat_id=chat.id,
        text=message.text,
        username=user.username,
    )


async def log_received(message: InboundMessage) -> None:
    """Log message."""
    logger.info(f"Received message from user {message.username} ({message.user_id}) {message.text}")


async def handle_message(update: Update, context: CallbackContext) -> None:
    """Route a Telegram text message through the command router."""
    router: CommandRouter = context.bot_data["router"]
    message = inbound_from_update(update)
    if message is None:
        return

    await log_received(message)

    async def send(chat_id: int, text: str) -> None:
        await context.bot.send_message(chat_id=chat_id, text=text, parse_mode=ParseMode.MARKDOWN)

    await router.dispatch(message, send)
