# ghost/config.py
"""
Configuration management for Ghost invite tracker.
Loads from .env, validates critical keys.
"""
import os
import logging
from typing import Any, Dict
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Configuration error exception."""
    pass


def _env_flag(name: str, default: str = "1") -> bool:
    """Flags are enabled unless explicitly set to "0"."""
    return os.getenv(name, default).strip() != "0"


class Config:
    """
    Configuration manager loaded once from the environment.

    Usage:
        # Load from .env
        Config.initialize_from_env()

        # Get value
        token = Config.get(Config.TOKEN)
    """

    # ═══════════════════════════════════════════════════════════════════════
    # CONFIGURATION KEYS
    # ═══════════════════════════════════════════════════════════════════════

    # Discord
    TOKEN = "TOKEN"
    GUILD_ID = "GUILD_ID"
    VERIFY_CHANNEL_ID = "VERIFY_CHANNEL_ID"
    INVITE_CHANNEL_ID = "INVITE_CHANNEL_ID"
    VERIFIED_ROLE_ID = "VERIFIED_ROLE_ID"

    # Tier roles
    ROLE_BRONZE_ID = "ROLE_BRONZE_ID"
    ROLE_PRATA_ID = "ROLE_PRATA_ID"
    ROLE_OURO_ID = "ROLE_OURO_ID"
    ROLE_PLATINA_ID = "ROLE_PLATINA_ID"
    ROLE_DIAMANTE_ID = "ROLE_DIAMANTE_ID"

    # Anti-fraud
    MIN_ACCOUNT_AGE_DAYS = "MIN_ACCOUNT_AGE_DAYS"
    MIN_STAY_HOURS = "MIN_STAY_HOURS"

    # Database
    DATABASE_URL = "DATABASE_URL"

    # Dashboard
    DASHBOARD_ENABLED = "DASHBOARD_ENABLED"
    DASHBOARD_PORT = "DASHBOARD_PORT"

    # Weekly report
    WEEKLY_REPORT_ENABLED = "WEEKLY_REPORT_ENABLED"
    WEEKLY_REPORT_CRON = "WEEKLY_REPORT_CRON"

    TIER_ROLE_KEYS = [
        ROLE_BRONZE_ID,
        ROLE_PRATA_ID,
        ROLE_OURO_ID,
        ROLE_PLATINA_ID,
        ROLE_DIAMANTE_ID,
    ]

    # ═══════════════════════════════════════════════════════════════════════
    # CRITICAL KEYS (must be present)
    # ═══════════════════════════════════════════════════════════════════════

    CRITICAL_KEYS = [
        TOKEN,
        GUILD_ID,
        VERIFY_CHANNEL_ID,
        INVITE_CHANNEL_ID,
        VERIFIED_ROLE_ID,
        *TIER_ROLE_KEYS,
    ]

    # ═══════════════════════════════════════════════════════════════════════
    # STORAGE
    # ═══════════════════════════════════════════════════════════════════════

    _config: Dict[str, Any] = {}
    _initialized: bool = False

    # ═══════════════════════════════════════════════════════════════════════
    # METHODS
    # ═══════════════════════════════════════════════════════════════════════

    @classmethod
    def initialize_from_env(cls) -> None:
        """
        Load configuration from .env file and process environment.

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        load_dotenv()

        logger.info("Loading configuration from environment...")

        try:
            # Discord
            cls._config[cls.TOKEN] = os.getenv("TOKEN")
            cls._config[cls.GUILD_ID] = os.getenv("GUILD_ID")
            cls._config[cls.VERIFY_CHANNEL_ID] = os.getenv("VERIFY_CHANNEL_ID")
            cls._config[cls.INVITE_CHANNEL_ID] = os.getenv("INVITE_CHANNEL_ID")
            cls._config[cls.VERIFIED_ROLE_ID] = os.getenv("VERIFIED_ROLE_ID")

            # Tier roles
            for key in cls.TIER_ROLE_KEYS:
                cls._config[key] = os.getenv(key)

            # Anti-fraud
            cls._config[cls.MIN_ACCOUNT_AGE_DAYS] = float(os.getenv("MIN_ACCOUNT_AGE_DAYS") or 0)
            cls._config[cls.MIN_STAY_HOURS] = float(os.getenv("MIN_STAY_HOURS") or 0)

            # Database
            cls._config[cls.DATABASE_URL] = os.getenv(
                "DATABASE_URL",
                "sqlite:///ghost.db"
            )

            # Dashboard
            cls._config[cls.DASHBOARD_ENABLED] = _env_flag("DASHBOARD_ENABLED")
            cls._config[cls.DASHBOARD_PORT] = int(os.getenv("DASHBOARD_PORT") or 3000)

            # Weekly report (Monday 10:00, server time)
            cls._config[cls.WEEKLY_REPORT_ENABLED] = _env_flag("WEEKLY_REPORT_ENABLED")
            cls._config[cls.WEEKLY_REPORT_CRON] = os.getenv("WEEKLY_REPORT_CRON") or "0 10 * * 1"

            cls._initialized = True
            logger.info("Configuration loaded from environment successfully")

        except ValueError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}")

    @classmethod
    def validate_critical_keys(cls) -> None:
        """
        Validate that all critical configuration keys are present.

        Raises:
            ConfigurationError: If any critical key is missing
        """
        missing = []
        for key in cls.CRITICAL_KEYS:
            if not cls.get(key):
                missing.append(key)

        if missing:
            error_msg = f"Missing critical configuration keys: {', '.join(missing)}"
            logger.critical(error_msg)
            raise ConfigurationError(error_msg)

        logger.info("All critical configuration keys validated ✓")

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return cls._config.get(key, default)

    @classmethod
    def reset(cls) -> None:
        """Drop all loaded values. Used by tests."""
        cls._config = {}
        cls._initialized = False
