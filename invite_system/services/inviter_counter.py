"""
Inviter counter - running total of real joins per inviter.

Every change is a single SQL statement so concurrent increments and
decrements for the same inviter never lose updates. The total is floored at 0.
"""
import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from core.db import dialect_insert
from models.inviter_stats import InviterStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    count: int


class InviterCounter:
    """Service owning the inviter_stats table."""

    def __init__(self, session: Session):
        self.session = session

    def increment(self, inviterId: str) -> None:
        stmt = dialect_insert(self.session, InviterStats).values(
            userID=inviterId,
            realJoins=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[InviterStats.userID],
            set_={"realJoins": InviterStats.realJoins + 1},
        )
        self.session.execute(stmt)

    def decrement(self, inviterId: str) -> None:
        self.session.execute(
            update(InviterStats)
            .where(InviterStats.userID == inviterId)
            .values(
                realJoins=case(
                    (InviterStats.realJoins > 0, InviterStats.realJoins - 1),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )

    def get(self, inviterId: str) -> int:
        value = self.session.query(InviterStats.realJoins).filter(
            InviterStats.userID == inviterId
        ).scalar()
        return value or 0

    def top(self, limit: int) -> List[LeaderboardEntry]:
        """Leaderboard ordered by count desc, user id asc."""
        rows = self._ranked_query().limit(limit).all()
        return [LeaderboardEntry(user_id=row.userID, count=row.realJoins) for row in rows]

    def all_ranked(self, min_count: int = 0) -> List[LeaderboardEntry]:
        rows = self._ranked_query().filter(InviterStats.realJoins >= min_count).all()
        return [LeaderboardEntry(user_id=row.userID, count=row.realJoins) for row in rows]

    def _ranked_query(self):
        return self.session.query(InviterStats.userID, InviterStats.realJoins).order_by(
            InviterStats.realJoins.desc(),
            InviterStats.userID.asc(),
        )
