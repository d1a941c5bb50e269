"""Main entry point for the bot."""
import asyncio
import logging
import signal
import sys

from lexicalgem.app import LexicalGemBot
from lexicalgem.bot import BOT_NAME, BOT_VERSION
from lexicalgem.config import ensure_directories, settings
from lexicalgem.logging_config import setup_logging


logger = logging.getLogger("lexicalgem")


async def shutdown(sig, loop):
    """Cleanup tasks tied to the service's shutdown."""
    print()  # Print newline before logging
    logger.info(f"Received exit signal {sig.name}...")

    tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    [task.cancel() for task in tasks]

    logger.info(f"Cancelling {len(tasks)} outstanding tasks")
    await asyncio.gather(*tasks, return_exceptions=True)


def handle_exception(loop, context):
    """Handle exceptions in the event loop."""
    msg = context.get("exception", context["message"])
    logger.error(f"Caught exception: {msg}")


async def main() -> None:
    """Run the bot."""
    loop = asyncio.get_running_loop()
    bot = LexicalGemBot()

    # Add signal handlers
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda s=sig: asyncio.create_task(shutdown(s, loop))
        )
    # SIGHUP reloads the word list without restarting
    if hasattr(signal, "SIGHUP"):
        loop.add_signal_handler(signal.SIGHUP, bot.reload_words)

    # Set exception handler
    loop.set_exception_handler(handle_exception)

    try:
        await bot.start()

        # Keep the application running
        while True:
            try:
                await asyncio.sleep(1)
            except asyncio.CancelledError:
                break
    finally:
        logger.info("Cleaning up...")
        await bot.stop()


def run() -> None:
    """Configure logging, validate settings and run the bot."""
    ensure_directories()

    setup_logging(f"Starting {BOT_NAME} v{BOT_VERSION} ...")

    try:
        settings.validate()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


if __name__ == "__main__":
    run()
