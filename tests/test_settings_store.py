# tests/test_settings_store.py
"""
Tests for persistent bot settings.
"""
from core.settings_store import VERIFY_MESSAGE_ID, get_setting, set_setting


class TestSettingsStore:

    def test_missing_key(self, engine):
        assert get_setting(VERIFY_MESSAGE_ID) is None

    def test_set_then_overwrite(self, engine):
        set_setting(VERIFY_MESSAGE_ID, "111")
        set_setting(VERIFY_MESSAGE_ID, "222")

        assert get_setting(VERIFY_MESSAGE_ID) == "222"
