# tests/test_fraud_heuristic.py
"""
Tests for the arrival anti-fraud heuristic.
"""
from datetime import timedelta

import pytest

from invite_system.ports import MemberProfile
from invite_system.services.fraud_heuristic import is_real, is_suspicious_username
from tests.conftest import T0


def make_member(username="maria", is_bot=False, avatar=True, age_days=365):
    return MemberProfile(
        user_id="m1",
        is_bot=is_bot,
        account_created_at=T0 - timedelta(days=age_days),
        username=username,
        has_custom_avatar=avatar,
    )


class TestSuspiciousUsername:

    @pytest.mark.parametrize("name", ["user1234", "USER99999", "discord1234", "guest123", "Novo456"])
    def test_suspicious(self, name):
        assert is_suspicious_username(name) is True

    @pytest.mark.parametrize("name", ["user123", "guest12", "xuser1234", "user1234x", "maria", "", None])
    def test_not_suspicious(self, name):
        assert is_suspicious_username(name) is False


class TestIsReal:

    def test_bot_is_never_real(self):
        assert is_real(make_member(is_bot=True), 0, now=T0) is False

    def test_young_account_rejected(self):
        assert is_real(make_member(age_days=2), 7, now=T0) is False

    def test_old_enough_account_accepted(self):
        assert is_real(make_member(age_days=8), 7, now=T0) is True

    def test_age_check_disabled_when_zero(self):
        assert is_real(make_member(age_days=0), 0, now=T0) is True

    def test_suspicious_name_without_avatar_rejected(self):
        assert is_real(make_member(username="user12345", avatar=False), 0, now=T0) is False

    def test_suspicious_name_with_avatar_accepted(self):
        assert is_real(make_member(username="user12345", avatar=True), 0, now=T0) is True

    def test_normal_name_without_avatar_accepted(self):
        assert is_real(make_member(username="maria", avatar=False), 0, now=T0) is True
