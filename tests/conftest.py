# tests/conftest.py
"""
Pytest configuration and shared fixtures for the invite tracker tests.

Run:
    pytest tests -v
"""
import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Set

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from core import db as core_db
from invite_system.config.ranks import Tier
from invite_system.exceptions import TrackingUnavailable
from invite_system.ports import CreatedInvite, MemberProfile
from invite_system.settings import TrackerSettings
from invite_system.tracker import InviteTracker

# =============================================================================
# CONSTANTS
# =============================================================================

GUILD_ID = "900000000000000001"
INVITE_CHANNEL_ID = "900000000000000002"

TIER_ROLE_IDS = {
    Tier.BRONZE: "role-bronze",
    Tier.PRATA: "role-prata",
    Tier.OURO: "role-ouro",
    Tier.PLATINA: "role-platina",
    Tier.DIAMANTE: "role-diamante",
}

T0 = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared by every session."""
    engine = core_db.configure_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    core_db.setup_database()
    yield engine
    core_db.drop_all_tables()


@pytest.fixture
def session(engine):
    """Create database session for each test."""
    session = core_db.get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed database, each session gets its own connection."""
    engine = core_db.configure_engine(
        f"sqlite:///{tmp_path / 'ghost.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    core_db.setup_database()
    core_db.get_session_factory()
    yield engine
    core_db.drop_all_tables()
    engine.dispose()


def run_concurrently(workers: int, work: Callable) -> list:
    """
    Run work(index, session) in parallel threads.

    Each thread has its own session, starts after a shared barrier and
    commits when work returns.
    """
    barrier = threading.Barrier(workers)

    def _run(index):
        session = core_db.get_session()
        try:
            barrier.wait()
            result = work(index, session)
            session.commit()
            return result
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(_run, range(workers)))


# =============================================================================
# FAKE PLATFORM
# =============================================================================

class FakePlatform:
    """
    In-memory stand-in for every tracker collaborator.

    Records each role mutation call so tests can count external calls.
    """

    def __init__(self):
        self.usage: Dict[str, int] = {}
        self.members: Dict[str, MemberProfile] = {}
        self.roles: Dict[str, Set[str]] = {}
        self.invites: Dict[str, str] = {}
        self.dms: List[tuple] = []

        self.role_calls: List[tuple] = []
        self.tracking_denied = False
        self.fail_role_mutations = False
        self.fail_member_lookup = False
        self.fail_invite_creation = False
        self.fetch_delay = 0.0
        self._invite_seq = 0

    # SnapshotSource

    async def fetch_invite_usage(self, community_id: str) -> Dict[str, int]:
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        if self.tracking_denied:
            raise TrackingUnavailable(community_id)
        return dict(self.usage)

    # MemberDirectory

    async def get_member(self, user_id: str) -> Optional[MemberProfile]:
        if self.fail_member_lookup:
            raise RuntimeError("member lookup failed")
        profile = self.members.get(user_id)
        if profile is None:
            return None
        return MemberProfile(
            user_id=profile.user_id,
            is_bot=profile.is_bot,
            account_created_at=profile.account_created_at,
            username=profile.username,
            has_custom_avatar=profile.has_custom_avatar,
            role_ids=frozenset(self.roles.get(user_id, set())),
        )

    # RoleMutator

    async def add_roles(self, user_id: str, role_ids: Iterable[str]) -> None:
        role_ids = set(role_ids)
        self.role_calls.append(("add", user_id, frozenset(role_ids)))
        if self.fail_role_mutations:
            raise RuntimeError("Missing Permissions")
        self.roles.setdefault(user_id, set()).update(role_ids)

    async def remove_roles(self, user_id: str, role_ids: Iterable[str]) -> None:
        role_ids = set(role_ids)
        self.role_calls.append(("remove", user_id, frozenset(role_ids)))
        if self.fail_role_mutations:
            raise RuntimeError("Missing Permissions")
        self.roles.setdefault(user_id, set()).difference_update(role_ids)

    # InviteGateway

    async def resolve_invite(self, code: str) -> Optional[str]:
        return self.invites.get(code)

    async def create_invite(self, channel_id: str, reason: str) -> CreatedInvite:
        if self.fail_invite_creation:
            raise RuntimeError("Missing Permissions")
        self._invite_seq += 1
        code = f"code{self._invite_seq}"
        url = f"https://discord.gg/{code}"
        self.invites[code] = url
        self.usage.setdefault(code, 0)
        return CreatedInvite(code=code, url=url)

    # Notifier

    async def notify(self, user_id: str, text: str) -> bool:
        self.dms.append((user_id, text))
        return True

    # Helpers

    def add_member(
        self,
        user_id: str,
        username: str = "maria",
        is_bot: bool = False,
        has_custom_avatar: bool = True,
        age_days: float = 365,
        now: datetime = T0,
    ) -> MemberProfile:
        profile = MemberProfile(
            user_id=user_id,
            is_bot=is_bot,
            account_created_at=now - timedelta(days=age_days),
            username=username,
            has_custom_avatar=has_custom_avatar,
        )
        self.members[user_id] = profile
        return profile

    def use_invite(self, code: str, times: int = 1) -> None:
        self.usage[code] = self.usage.get(code, 0) + times


@pytest.fixture
def platform():
    return FakePlatform()


# =============================================================================
# TRACKER FIXTURES
# =============================================================================

@pytest.fixture
def tracker_settings():
    return TrackerSettings(
        invite_channel_id=INVITE_CHANNEL_ID,
        tier_role_ids=dict(TIER_ROLE_IDS),
        min_account_age_days=7,
        min_stay_hours=1,
    )


@pytest.fixture
def make_tracker(engine, platform):
    """Factory: tracker over the fake platform with optional settings."""

    def _make(settings: TrackerSettings) -> InviteTracker:
        return InviteTracker(
            settings,
            snapshotSource=platform,
            memberDirectory=platform,
            roleMutator=platform,
            inviteGateway=platform,
        )

    return _make


@pytest.fixture
def tracker(make_tracker, tracker_settings):
    return make_tracker(tracker_settings)


@pytest_asyncio.fixture
async def primed_tracker(tracker, platform):
    """Tracker with an inviter owning a personal invite and a primed snapshot."""
    platform.add_member("inviter-1", username="joana")
    await tracker.getOrCreatePersonalInvite("inviter-1")
    await tracker.connectionEstablished(GUILD_ID)
    return tracker
