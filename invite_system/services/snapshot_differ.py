"""
Invite usage snapshots and the diff that infers which invite was used.

The platform gives no atomic "invite used" signal, so attribution compares
the usage counts observed before and after an arrival. Concurrent arrivals can
make several codes increase between two observations; only one is reported and
which one depends on iteration order of the new snapshot.
"""
import logging
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

InviteSnapshot = Dict[str, int]


def resolve_used_code(old: Optional[Mapping[str, int]], new: Mapping[str, int]) -> Optional[str]:
    """
    Find the invite code whose use count increased.

    Args:
        old: Previous snapshot, None on cold start
        new: Current snapshot

    Returns:
        First increased code in iteration order of new, or None
    """
    if old is None:
        return None

    for code, uses in new.items():
        if (uses or 0) > (old.get(code) or 0):
            return code

    return None


class SnapshotSession:
    """Latest invite usage snapshot for one community."""

    def __init__(self, community_id: str):
        self.community_id = community_id
        self._snapshot: Optional[InviteSnapshot] = None

    @property
    def snapshot(self) -> Optional[InviteSnapshot]:
        return self._snapshot

    def replace(self, new: Mapping[str, int]) -> Optional[InviteSnapshot]:
        """Store new wholesale and return the previous snapshot."""
        old = self._snapshot
        self._snapshot = dict(new)
        return old

    def restore(self, code: str, uses: int) -> None:
        """Put one code back to an earlier use count so the next diff sees it again."""
        if self._snapshot is not None:
            self._snapshot[code] = uses

    def clear(self) -> None:
        self._snapshot = None


class SnapshotSessions:
    """
    Per-community snapshot sessions.

    Opened when the platform connection is established, closed when it is
    lost. A closed community starts cold again: the first arrival after a
    reconnect only primes the snapshot.
    """

    def __init__(self):
        self._sessions: Dict[str, SnapshotSession] = {}

    def open(self, community_id: str) -> SnapshotSession:
        session = self._sessions.get(community_id)
        if session is None:
            session = SnapshotSession(community_id)
            self._sessions[community_id] = session
            logger.debug(f"Snapshot session opened for community {community_id}")
        return session

    def get(self, community_id: str) -> SnapshotSession:
        return self.open(community_id)

    def close(self, community_id: str) -> None:
        if self._sessions.pop(community_id, None) is not None:
            logger.debug(f"Snapshot session closed for community {community_id}")

    def close_all(self) -> None:
        self._sessions.clear()

    def __contains__(self, community_id: str) -> bool:
        return community_id in self._sessions
