"""
Invite tracker - attribution and ledger pipeline.

Arrival:
    snapshot diff -> personal invite owner -> fraud heuristic
    -> join ledger (idempotent) -> inviter counter (+1) -> tier role sync
Departure:
    join ledger reversal check -> inviter counter (-1) -> tier role sync

The local database is the source of truth. Role changes happen after commit
and may lag behind the ledger until the next sync trigger. A departure that
lands while the same member's arrival is still being attributed is held and
applied right after the join is recorded. Every call into an
external collaborator is isolated: its failure is logged and returned as an
OperationResult, never raised into the event loop.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from core.db import get_db_session_ctx
from invite_system.events.event_types import (
    InspectionRequested,
    MemberArrived,
    MemberDeparted,
    TrackerEvent,
)
from invite_system.exceptions import TrackingUnavailable
from invite_system.ports import (
    InviteGateway,
    MemberDirectory,
    MemberProfile,
    RoleMutator,
    SnapshotSource,
)
from invite_system.results import OperationResult
from invite_system.services.fraud_heuristic import is_real
from invite_system.services.invite_registry import PersonalInviteRegistry
from invite_system.services.inviter_counter import InviterCounter, LeaderboardEntry
from invite_system.services.join_ledger import JoinLedger
from invite_system.services.rank_engine import RankSummary, role_for_tier, summarize, tier_for
from invite_system.services.role_sync import RoleSynchronizer
from invite_system.services.snapshot_differ import SnapshotSessions, resolve_used_code
from invite_system.settings import TrackerSettings

logger = logging.getLogger(__name__)


class InviteTracker:
    """Facade over the invite attribution core."""

    def __init__(
        self,
        settings: TrackerSettings,
        snapshotSource: SnapshotSource,
        memberDirectory: MemberDirectory,
        roleMutator: RoleMutator,
        inviteGateway: InviteGateway,
        snapshotSessions: Optional[SnapshotSessions] = None,
    ):
        self.settings = settings
        self.snapshotSource = snapshotSource
        self.memberDirectory = memberDirectory
        self.inviteGateway = inviteGateway
        self.snapshotSessions = snapshotSessions or SnapshotSessions()
        self.roleSynchronizer = RoleSynchronizer(roleMutator, settings.all_tier_role_ids)

        # Departures seen while the same member's arrival is still being attributed
        self._arrivalsInFlight: Dict[str, int] = {}
        self._earlyDepartures: Dict[str, datetime] = {}

        self._handlers: Dict[type, Callable] = {
            MemberArrived: self._handle_arrived,
            MemberDeparted: self._handle_departed,
            InspectionRequested: self._handle_inspection,
        }

    # ═══════════════════════════════════════════════════════════════════════
    # EVENT ROUTING
    # ═══════════════════════════════════════════════════════════════════════

    async def handle(self, event: TrackerEvent):
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported tracker event: {event!r}")
        return await handler(event)

    async def _handle_arrived(self, event: MemberArrived) -> OperationResult:
        return await self.onMemberArrived(event.member_id, event.community_id, event.arrived_at)

    async def _handle_departed(self, event: MemberDeparted) -> OperationResult:
        return await self.onMemberDeparted(event.member_id, event.departed_at)

    async def _handle_inspection(self, event: InspectionRequested) -> RankSummary:
        return await self.onInspectionRequested(event.user_id)

    # ═══════════════════════════════════════════════════════════════════════
    # CONNECTION LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════

    async def connectionEstablished(self, communityId: str) -> OperationResult:
        """Open the community's snapshot session and prime it."""
        session = self.snapshotSessions.open(communityId)
        try:
            snapshot = await self.snapshotSource.fetch_invite_usage(communityId)
        except TrackingUnavailable as e:
            logger.warning(f"⚠️ Invite tracking unavailable for {communityId}: {e}. Grant MANAGE_GUILD to the bot.")
            return OperationResult.skipped("tracking_unavailable", community_id=communityId)
        except Exception as e:
            logger.error(f"Failed to prime invite snapshot for {communityId}: {e}", exc_info=True)
            return OperationResult.failed("snapshot_fetch_failed", community_id=communityId)

        session.replace(snapshot)
        logger.info(f"Invite snapshot primed for {communityId}: {len(snapshot)} invites")
        return OperationResult.applied("snapshot_primed", community_id=communityId, invites=len(snapshot))

    def connectionLost(self, communityId: Optional[str] = None) -> None:
        """Drop snapshots; the next arrival after reconnecting starts cold."""
        if communityId is None:
            self.snapshotSessions.close_all()
        else:
            self.snapshotSessions.close(communityId)

    # ═══════════════════════════════════════════════════════════════════════
    # ARRIVAL
    # ═══════════════════════════════════════════════════════════════════════

    async def onMemberArrived(self, memberId: str, communityId: str, arrivedAt: datetime) -> OperationResult:
        self._arrivalsInFlight[memberId] = self._arrivalsInFlight.get(memberId, 0) + 1
        try:
            return await self._attributeArrival(memberId, communityId, arrivedAt)
        finally:
            remaining = self._arrivalsInFlight.pop(memberId) - 1
            if remaining > 0:
                self._arrivalsInFlight[memberId] = remaining
            else:
                self._earlyDepartures.pop(memberId, None)

    async def _attributeArrival(self, memberId: str, communityId: str, arrivedAt: datetime) -> OperationResult:
        snapshotSession = self.snapshotSessions.get(communityId)

        try:
            snapshot = await self.snapshotSource.fetch_invite_usage(communityId)
        except TrackingUnavailable as e:
            logger.warning(f"⚠️ Join of {memberId} not tracked: {e}")
            return OperationResult.skipped("tracking_unavailable", member_id=memberId)
        except Exception as e:
            logger.error(f"Failed to fetch invites for join of {memberId}: {e}", exc_info=True)
            return OperationResult.failed("snapshot_fetch_failed", member_id=memberId)

        previous = snapshotSession.replace(snapshot)
        if previous is None:
            logger.info(f"Join of {memberId} not attributed: no previous invite snapshot")
            return OperationResult.skipped("cold_start", member_id=memberId)

        code = resolve_used_code(previous, snapshot)
        if code is None:
            logger.info(f"Join of {memberId} not attributed: no invite use detected")
            return OperationResult.skipped("no_invite_used", member_id=memberId)

        with get_db_session_ctx() as session:
            inviterId = self._registry(session).ownerOf(code)
            alreadyRecorded = JoinLedger(session).get(memberId) is not None

        if inviterId is None:
            logger.debug(f"Join of {memberId} via {code}: not a personal invite")
            return OperationResult.skipped("not_personal_invite", member_id=memberId, code=code)

        if alreadyRecorded:
            return OperationResult.skipped("duplicate_join", member_id=memberId)

        member = await self._lookupMember(memberId)
        if member is None:
            # Leave the increment in place for a re-delivered arrival
            snapshotSession.restore(code, previous.get(code) or 0)
            return OperationResult.skipped("member_unavailable", member_id=memberId, code=code)

        countedReal = is_real(member, self.settings.min_account_age_days)

        with get_db_session_ctx() as session:
            ledger = JoinLedger(session)
            if not ledger.recordJoin(memberId, inviterId, code, arrivedAt, countedReal):
                return OperationResult.skipped("duplicate_join", member_id=memberId)

            departedAt = self._earlyDepartures.pop(memberId, None)
            reversedEarly = False
            count = None
            if countedReal:
                counter = InviterCounter(session)
                counter.increment(inviterId)
                if departedAt is not None and ledger.tryReverse(memberId, departedAt, self.settings.min_stay_hours):
                    counter.decrement(inviterId)
                    reversedEarly = True
                count = counter.get(inviterId)

        details = {"member_id": memberId, "inviter_id": inviterId, "code": code, "counted_real": countedReal}

        if not countedReal:
            logger.warning(f"⚠️ Join NOT counted (suspicious) member={memberId} via {code} inviter={inviterId}")
            return OperationResult.applied("not_counted", **details)

        if reversedEarly:
            logger.info(f"Join of {memberId} via {code} reversed on arrival: member already left")
            return OperationResult.applied("reversed", count=count, **details)

        roleResult = await self._syncTier(inviterId, count)
        logger.info(f"+1 REAL for {inviterId} (now {count}) via invite {code}")
        return OperationResult.applied("counted", count=count, role_sync=roleResult, **details)

    # ═══════════════════════════════════════════════════════════════════════
    # DEPARTURE
    # ═══════════════════════════════════════════════════════════════════════

    async def onMemberDeparted(self, memberId: str, departedAt: datetime) -> OperationResult:
        with get_db_session_ctx() as session:
            ledger = JoinLedger(session)
            record = ledger.get(memberId)
            if record is None:
                if memberId in self._arrivalsInFlight:
                    self._earlyDepartures[memberId] = departedAt
                    logger.info(f"Departure of {memberId} deferred until its arrival is recorded")
                    return OperationResult.skipped("arrival_pending", member_id=memberId)
                return OperationResult.skipped("no_join_record", member_id=memberId)

            inviterId = record.inviterID
            if not ledger.tryReverse(memberId, departedAt, self.settings.min_stay_hours):
                return OperationResult.skipped("reversal_ineligible", member_id=memberId)

            counter = InviterCounter(session)
            counter.decrement(inviterId)
            count = counter.get(inviterId)

        roleResult = await self._syncTier(inviterId, count)
        logger.info(f"-1 (left too fast) for {inviterId} (now {count})")
        return OperationResult.applied(
            "reversed", member_id=memberId, inviter_id=inviterId, count=count, role_sync=roleResult
        )

    # ═══════════════════════════════════════════════════════════════════════
    # QUERIES
    # ═══════════════════════════════════════════════════════════════════════

    def getRankSummary(self, userId: str) -> RankSummary:
        with get_db_session_ctx() as session:
            count = InviterCounter(session).get(userId)
        return summarize(count)

    async def onInspectionRequested(self, userId: str) -> RankSummary:
        """Re-sync the user's tier role and return their summary."""
        summary = self.getRankSummary(userId)
        await self._syncTier(userId, summary.count)
        return summary

    async def getOrCreatePersonalInvite(self, userId: str) -> str:
        """
        Raises:
            InviteUnavailable: If the invite could not be created
        """
        with get_db_session_ctx() as session:
            return await self._registry(session).getOrCreate(userId)

    def getLeaderboard(self, limit: int) -> List[LeaderboardEntry]:
        with get_db_session_ctx() as session:
            return InviterCounter(session).top(limit)

    # ═══════════════════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════════════════

    def _registry(self, session) -> PersonalInviteRegistry:
        return PersonalInviteRegistry(session, self.inviteGateway, self.settings.invite_channel_id)

    async def _lookupMember(self, userId: str) -> Optional[MemberProfile]:
        try:
            return await self.memberDirectory.get_member(userId)
        except Exception as e:
            logger.error(f"Member lookup failed for {userId}: {e}", exc_info=True)
            return None

    async def _syncTier(self, userId: str, count: int) -> OperationResult:
        member = await self._lookupMember(userId)
        if member is None:
            return OperationResult.skipped("member_unavailable", user_id=userId)

        targetRoleId = role_for_tier(tier_for(count), self.settings.tier_role_ids)
        return await self.roleSynchronizer.syncRoles(userId, member.role_ids, targetRoleId)
