"""
Join ledger - durable record of join attempts and their reversal state.

At-most-once semantics for both recording and reversal come from the
database: the member id is the primary key (INSERT ... ON CONFLICT DO NOTHING)
and reversal is a conditional UPDATE on reversed = false.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from core.db import dialect_insert
from models.base import as_utc
from models.join_record import JoinRecord

logger = logging.getLogger(__name__)


class JoinLedger:
    """Service owning the joins table."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, memberId: str) -> Optional[JoinRecord]:
        return self.session.get(JoinRecord, memberId)

    def recordJoin(
        self,
        memberId: str,
        inviterId: Optional[str],
        code: Optional[str],
        joinedAt: datetime,
        countedReal: bool,
    ) -> bool:
        """
        Record a join attempt once per member.

        Returns:
            True if a new record was stored, False if the member already had one
        """
        stmt = dialect_insert(self.session, JoinRecord).values(
            memberID=memberId,
            inviterID=inviterId,
            inviteCode=code,
            joinedAt=as_utc(joinedAt),
            countedReal=bool(countedReal),
            reversed=False,
        ).on_conflict_do_nothing(index_elements=[JoinRecord.memberID])

        result = self.session.execute(stmt)
        applied = result.rowcount == 1

        if not applied:
            logger.debug(f"Join for member {memberId} already recorded, skipping")

        return applied

    def tryReverse(self, memberId: str, now: datetime, minStayHours: float) -> bool:
        """
        Retract credit for a member who left before minStayHours.

        Applies only when the record exists, was counted as real, was not
        reversed yet, minStayHours > 0 and the stay was shorter than the window.

        Returns:
            True if the record was flipped to reversed by this call
        """
        if not minStayHours or minStayHours <= 0:
            return False

        record = self.get(memberId)
        if record is None or not record.countedReal or record.reversed:
            return False

        stayed = as_utc(now) - as_utc(record.joinedAt)
        if stayed >= timedelta(hours=minStayHours):
            return False

        result = self.session.execute(
            update(JoinRecord)
            .where(
                JoinRecord.memberID == memberId,
                JoinRecord.countedReal.is_(True),
                JoinRecord.reversed.is_(False),
            )
            .values(reversed=True)
            .execution_options(synchronize_session=False)
        )
        self.session.expire(record)

        return result.rowcount == 1

    def countActiveFor(self, inviterId: str) -> int:
        """Counted, non-reversed joins credited to inviterId."""
        return self.session.query(func.count(JoinRecord.memberID)).filter(
            JoinRecord.inviterID == inviterId,
            JoinRecord.countedReal.is_(True),
            JoinRecord.reversed.is_(False),
        ).scalar() or 0
