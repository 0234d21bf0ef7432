"""
Collaborator interfaces consumed by the invite tracker.

The tracker never talks to the platform directly; the Discord adapter
(discord_gateway.adapters) implements these protocols, tests use fakes.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, Optional, Protocol


@dataclass(frozen=True)
class MemberProfile:
    """Read-only view of a community member."""
    user_id: str
    is_bot: bool
    account_created_at: datetime
    username: Optional[str]
    has_custom_avatar: bool
    role_ids: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class CreatedInvite:
    code: str
    url: str


class SnapshotSource(Protocol):
    async def fetch_invite_usage(self, community_id: str) -> Dict[str, int]:
        """Return code -> uses. Raises TrackingUnavailable when not permitted."""
        ...


class MemberDirectory(Protocol):
    async def get_member(self, user_id: str) -> Optional[MemberProfile]:
        ...


class RoleMutator(Protocol):
    async def add_roles(self, user_id: str, role_ids: Iterable[str]) -> None:
        ...

    async def remove_roles(self, user_id: str, role_ids: Iterable[str]) -> None:
        ...


class InviteGateway(Protocol):
    async def resolve_invite(self, code: str) -> Optional[str]:
        """Return the invite url if the code still exists, else None."""
        ...

    async def create_invite(self, channel_id: str, reason: str) -> CreatedInvite:
        """Create a non-expiring, unlimited-use invite in channel_id."""
        ...


class Notifier(Protocol):
    async def notify(self, user_id: str, text: str) -> bool:
        ...
