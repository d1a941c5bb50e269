"""Configuration settings for the bot."""
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
WORDS_PATH = Path(os.getenv("WORDS_PATH", str(DATA_DIR / "words.json")))

# Telegram bot token format: <bot_id>:<35 chars>
BOT_TOKEN_PATTERN = re.compile(r"^\d+:[A-Za-z0-9_-]{35}$")
BOT_MODES = ("polling", "webhook")


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def is_valid_bot_token(token: Optional[str]) -> bool:
    """Check the token against the Telegram token format."""
    if not token or not isinstance(token, str):
        return False
    return BOT_TOKEN_PATTERN.match(token) is not None


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    words_path: Path = WORDS_PATH


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class BotSettings:
    """Bot configuration settings."""
    token: str = os.getenv("BOT_TOKEN_CODE", "")
    mode: str = os.getenv("BOT_MODE", "polling").lower()
    username: Optional[str] = os.getenv("BOT_USERNAME")
    webhook_url: Optional[str] = os.getenv("TELEGRAM_WEBHOOK_URL")
    webhook_port: int = int(os.getenv("TELEGRAM_WEBHOOK_PORT", "8443"))


@dataclass
class WordSettings:
    """Word and history settings."""
    history_limit: int = int(os.getenv("HISTORY_LIMIT", "50"))
    history_page_size: int = int(os.getenv("HISTORY_PAGE_SIZE", "10"))


@dataclass
class MonitoringSettings:
    """Metrics and periodic stats settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))
    stats_log_interval: int = int(os.getenv("STATS_LOG_INTERVAL", "1800"))  # 30 minutes


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_bot_settings() -> BotSettings:
    """Get bot settings."""
    return BotSettings()


def get_word_settings() -> WordSettings:
    """Get word settings."""
    return WordSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    bot: BotSettings = field(default_factory=get_bot_settings)
    words: WordSettings = field(default_factory=get_word_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.bot.token:
            raise ValueError("BOT_TOKEN_CODE is required")

        if not is_valid_bot_token(self.bot.token):
            raise ValueError(
                "BOT_TOKEN_CODE has invalid format "
                "(example: BOT_TOKEN_CODE=1234567890:ABCdefGHIjklMNOpqrsTUVwxyz...)"
            )

        if self.bot.mode not in BOT_MODES:
            raise ValueError(f"BOT_MODE must be one of {', '.join(BOT_MODES)}")

        if self.bot.mode == "webhook" and not self.bot.webhook_url:
            raise ValueError("TELEGRAM_WEBHOOK_URL is required in webhook mode")

        if self.words.history_limit < 1:
            raise ValueError("HISTORY_LIMIT must be positive")

        if self.words.history_page_size < 1:
            raise ValueError("HISTORY_PAGE_SIZE must be positive")

        if self.monitoring.stats_log_interval < 1:
            raise ValueError("STATS_LOG_INTERVAL must be positive")


# Create global settings instance
settings = Settings()
