# tests/test_config.py
"""
Tests for environment configuration loading.
"""
import pytest

import config as config_module
from config import Config, ConfigurationError
from invite_system.config.ranks import Tier
from invite_system.settings import TrackerSettings

REQUIRED_ENV = {
    "TOKEN": "token",
    "GUILD_ID": "1",
    "VERIFY_CHANNEL_ID": "2",
    "INVITE_CHANNEL_ID": "3",
    "VERIFIED_ROLE_ID": "4",
    "ROLE_BRONZE_ID": "10",
    "ROLE_PRATA_ID": "11",
    "ROLE_OURO_ID": "12",
    "ROLE_PLATINA_ID": "13",
    "ROLE_DIAMANTE_ID": "14",
}

OPTIONAL_ENV = [
    "MIN_ACCOUNT_AGE_DAYS",
    "MIN_STAY_HOURS",
    "DATABASE_URL",
    "DASHBOARD_ENABLED",
    "DASHBOARD_PORT",
    "WEEKLY_REPORT_ENABLED",
    "WEEKLY_REPORT_CRON",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)
    for key in list(REQUIRED_ENV) + OPTIONAL_ENV:
        monkeypatch.delenv(key, raising=False)
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def full_env(monkeypatch):
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)


class TestInitialize:

    def test_defaults(self, full_env):
        Config.initialize_from_env()

        assert Config.get(Config.MIN_ACCOUNT_AGE_DAYS) == 0
        assert Config.get(Config.MIN_STAY_HOURS) == 0
        assert Config.get(Config.DATABASE_URL) == "sqlite:///ghost.db"
        assert Config.get(Config.DASHBOARD_ENABLED) is True
        assert Config.get(Config.DASHBOARD_PORT) == 3000
        assert Config.get(Config.WEEKLY_REPORT_ENABLED) is True
        assert Config.get(Config.WEEKLY_REPORT_CRON) == "0 10 * * 1"

    def test_only_zero_disables_flags(self, full_env, monkeypatch):
        monkeypatch.setenv("DASHBOARD_ENABLED", "0")
        monkeypatch.setenv("WEEKLY_REPORT_ENABLED", "false")

        Config.initialize_from_env()

        assert Config.get(Config.DASHBOARD_ENABLED) is False
        assert Config.get(Config.WEEKLY_REPORT_ENABLED) is True

    def test_unparseable_number(self, full_env, monkeypatch):
        monkeypatch.setenv("MIN_STAY_HOURS", "one")

        with pytest.raises(ConfigurationError):
            Config.initialize_from_env()


class TestValidate:

    def test_all_present(self, full_env):
        Config.initialize_from_env()
        Config.validate_critical_keys()

    def test_missing_keys_reported(self, full_env, monkeypatch):
        monkeypatch.delenv("TOKEN")
        monkeypatch.delenv("ROLE_OURO_ID")
        Config.initialize_from_env()

        with pytest.raises(ConfigurationError) as exc_info:
            Config.validate_critical_keys()

        assert "TOKEN" in str(exc_info.value)
        assert "ROLE_OURO_ID" in str(exc_info.value)


class TestTrackerSettings:

    def test_from_config(self, full_env, monkeypatch):
        monkeypatch.setenv("MIN_ACCOUNT_AGE_DAYS", "7")
        monkeypatch.setenv("MIN_STAY_HOURS", "1.5")
        Config.initialize_from_env()

        settings = TrackerSettings.from_config()

        assert settings.invite_channel_id == "3"
        assert settings.tier_role_ids[Tier.BRONZE] == "10"
        assert settings.role_for(Tier.DIAMANTE) == "14"
        assert settings.min_account_age_days == 7
        assert settings.min_stay_hours == 1.5
        assert len(settings.all_tier_role_ids) == 5
