import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load the .env file
load_dotenv()

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """A required setting is missing or invalid."""


class Settings:
    """
    Application settings and environment variables.
    """
    # Storage
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fitness_agent.db")

    # Athlete / calendar
    USER_TIMEZONE = os.getenv("USER_TIMEZONE", "America/Chicago")
    ATHLETE_NAME = os.getenv("ATHLETE_NAME", "Tyler")

    # Coaching model (Gemini)
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    LLM_MAX_TOKENS = os.getenv("LLM_MAX_TOKENS", "600")
    PERSONA_DIR = os.getenv("PERSONA_DIR", str(Path(__file__).parent / "fitness_agent" / "prompts"))

    # Template menus
    MAX_TEMPLATES = os.getenv("MAX_TEMPLATES", "20")
    WEIGHT_TEMPLATE_LIMIT = os.getenv("WEIGHT_TEMPLATE_LIMIT", "50")

    # Scheduled jobs
    BRIEFING_TIMEOUT_SECONDS = os.getenv("BRIEFING_TIMEOUT_SECONDS", "4.0")
    HYDRATION_DAILY_GOAL_OZ = os.getenv("HYDRATION_DAILY_GOAL_OZ", "120")

    # Telegram delivery (optional)
    TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
    TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PORT = os.getenv("PORT", "8000")

    @classmethod
    def int_value(cls, name: str) -> int:
        try:
            return int(getattr(cls, name))
        except (TypeError, ValueError):
            raise ConfigurationError(f"{name} must be an integer, got {getattr(cls, name)!r}")

    @classmethod
    def float_value(cls, name: str) -> float:
        try:
            return float(getattr(cls, name))
        except (TypeError, ValueError):
            raise ConfigurationError(f"{name} must be a number, got {getattr(cls, name)!r}")

    @classmethod
    def require(cls, name: str) -> str:
        """
        Returns a configured value or raises ConfigurationError.
        Used at the point where a missing value becomes fatal.
        """
        value = getattr(cls, name, None)
        if not value:
            raise ConfigurationError(f"Missing required environment variable: {name}")
        return value

    @classmethod
    def validate(cls):
        """
        Checks that critical values parse.
        """
        try:
            ZoneInfo(cls.USER_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigurationError(f"USER_TIMEZONE is not a valid IANA zone: {cls.USER_TIMEZONE!r}")

        for name in ("LLM_MAX_TOKENS", "MAX_TEMPLATES", "WEIGHT_TEMPLATE_LIMIT", "PORT"):
            cls.int_value(name)
        for name in ("BRIEFING_TIMEOUT_SECONDS", "HYDRATION_DAILY_GOAL_OZ"):
            cls.float_value(name)


# Validate settings (runs on import)
try:
    Settings.validate()
except ConfigurationError as e:
    logger.warning(f"Configuration problem: {e}")
