"""
Tier role synchronization.

compute_role_delta() decides what should change, RoleSynchronizer applies it
through a swappable RoleMutator. Mutations are best-effort: failures are
logged and reported, never retried; the next join/leave/inspection re-derives
the delta.
"""
import logging
from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Iterable, Optional

from invite_system.ports import RoleMutator
from invite_system.results import OperationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleDelta:
    to_add: FrozenSet[str] = field(default_factory=frozenset)
    to_remove: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def compute_role_delta(
    current_roles: AbstractSet[str],
    target_role_id: Optional[str],
    tier_role_ids: Iterable[str],
) -> RoleDelta:
    """
    Args:
        current_roles: Roles the member holds now
        target_role_id: Tier role the member should hold, None for no tier
        tier_role_ids: Every tier-marker role

    Returns:
        RoleDelta with roles to add and to remove
    """
    tier_roles = frozenset(r for r in tier_role_ids if r)
    to_remove = frozenset(r for r in current_roles if r in tier_roles and r != target_role_id)
    to_add = frozenset()
    if target_role_id and target_role_id not in current_roles:
        to_add = frozenset([target_role_id])
    return RoleDelta(to_add=to_add, to_remove=to_remove)


class RoleSynchronizer:
    """Applies tier role deltas to members."""

    def __init__(self, mutator: RoleMutator, tier_role_ids: Iterable[str]):
        self.mutator = mutator
        self.tier_role_ids = frozenset(r for r in tier_role_ids if r)

    async def syncRoles(
        self,
        userId: str,
        currentRoles: AbstractSet[str],
        targetRoleId: Optional[str],
    ) -> OperationResult:
        delta = compute_role_delta(currentRoles, targetRoleId, self.tier_role_ids)

        if delta.is_empty:
            return OperationResult.skipped("already_in_sync", user_id=userId)

        errors = []

        if delta.to_remove:
            try:
                await self.mutator.remove_roles(userId, delta.to_remove)
            except Exception as e:
                logger.error(f"Failed to remove roles {sorted(delta.to_remove)} from {userId}: {e}", exc_info=True)
                errors.append(f"remove: {e}")

        if delta.to_add:
            try:
                await self.mutator.add_roles(userId, delta.to_add)
            except Exception as e:
                logger.error(f"Failed to add roles {sorted(delta.to_add)} to {userId}: {e}", exc_info=True)
                errors.append(f"add: {e}")

        details = {
            "user_id": userId,
            "added": sorted(delta.to_add),
            "removed": sorted(delta.to_remove),
        }
        if errors:
            return OperationResult.failed("role_mutation_failed", errors=errors, **details)

        logger.info(f"Roles synced for {userId}: +{details['added']} -{details['removed']}")
        return OperationResult.applied("roles_synced", **details)
