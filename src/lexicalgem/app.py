"""Main application entry point."""
import logging
from typing import Optional

from telegram.ext import Application, CallbackContext, MessageHandler, filters

from lexicalgem import monitoring
from lexicalgem.bot import BOT_NAME, BotContext, CommandRouter, handle_message
from lexicalgem.config import Settings, settings as default_settings
from lexicalgem.services.scheduler_service import SchedulerService


class LexicalGemBot:
    """Main application class."""

    def __init__(self, app_settings: Optional[Settings] = None, context: Optional[BotContext] = None):
        """Initialize the application."""
        self.settings = app_settings or default_settings
        self.context = context
        self.router: Optional[CommandRouter] = None
        self.application: Optional[Application] = None
        self.scheduler: Optional[SchedulerService] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    async def on_error(self, update: object, context: CallbackContext) -> None:
        """Log errors raised outside the command router (polling, network)."""
        self.logger.error(f"Telegram error: {context.error}")
        monitoring.error_count.labels(error_type=type(context.error).__name__).inc()

    def build_application(self) -> Application:
        """Create the Telegram application and register handlers."""
        application = Application.builder().token(self.settings.bot.token).build()
        application.bot_data["router"] = self.router
        application.add_handler(MessageHandler(filters.TEXT & filters.UpdateType.MESSAGE, handle_message))
        application.add_error_handler(self.on_error)
        return application

    async def start(self) -> None:
        """Start the application."""
        if self.running:
            return

        try:
            self.logger.info(f"🤖 {BOT_NAME} bot is starting...")

            # Initialize services
            if self.context is None:
                self.context = BotContext.create(self.settings.paths.words_path)
            self.router = CommandRouter(self.context, bot_username=self.settings.bot.username)
            self.logger.info(f"Services initialized with {self.context.word_service.get_word_count()} words")

            # Create application
            self.application = self.build_application()
            self.logger.info("Application created")

            # Create scheduler service
            self.scheduler = SchedulerService(
                self.context.stats_service,
                self.settings.monitoring.stats_log_interval,
            )
            await self.scheduler.start()
            self.logger.info("Scheduler service started")

            if self.settings.monitoring.enabled:
                monitoring.start_monitoring(self.settings.monitoring.port)
                self.logger.info(f"Metrics server listening on port {self.settings.monitoring.port}")

            # Start application
            await self.application.initialize()
            await self.application.start()
            if self.settings.bot.mode == "webhook":
                await self.application.updater.start_webhook(
                    listen="0.0.0.0",
                    port=self.settings.bot.webhook_port,
                    url_path=self.settings.bot.token,
                    webhook_url=f"{self.settings.bot.webhook_url.rstrip('/')}/{self.settings.bot.token}",
                )
            else:
                await self.application.updater.start_polling()
            self.logger.info(f"🤖 {BOT_NAME} bot is ready! ({self.settings.bot.mode})")

            self.running = True

        except Exception as e:
            self.logger.error("Failed to start application: %s", str(e))
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop the application."""
        if not self.running and self.application is None and self.scheduler is None:
            return

        try:
            self.logger.info(f"🛑 Shutting down {BOT_NAME} bot gracefully...")

            # Stop scheduler service
            if self.scheduler:
                await self.scheduler.stop()
                self.scheduler = None
                self.logger.info("Scheduler service stopped")

            # Stop application
            if self.application:
                if self.application.updater and self.application.updater.running:
                    await self.application.updater.stop()
                if self.application.running:
                    await self.application.stop()
                await self.application.shutdown()
                self.application = None
                self.logger.info("Application stopped")

            self.running = False

        except Exception as e:
            self.logger.error("Error while stopping application: %s", str(e))
            self.running = False
            self.application = None
            self.scheduler = None
            raise

    def reload_words(self) -> bool:
        """Reload the word list from disk and reset the cycle."""
        if self.context is None:
            self.logger.error("Word service not available")
            return False
        return self.context.word_service.reload()
