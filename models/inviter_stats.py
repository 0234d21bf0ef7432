# models/inviter_stats.py
"""
InviterStats model - running total of real joins per inviter.
Maintained with atomic +1/-1 statements, never recomputed from the ledger.
"""
from sqlalchemy import Column, String, Integer, CheckConstraint
from models.base import Base


class InviterStats(Base):
    __tablename__ = 'inviter_stats'
    __table_args__ = (
        CheckConstraint('"realJoins" >= 0', name='ck_inviter_stats_non_negative'),
    )

    userID = Column(String, primary_key=True)
    realJoins = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<InviterStats(userID={self.userID}, realJoins={self.realJoins})>"
