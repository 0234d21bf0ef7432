# models/join_record.py
"""
JoinRecord model - ledger of join attempts.
Rows are created at most once per member and never deleted.
"""
from sqlalchemy import Column, String, DateTime, Boolean
from models.base import Base


class JoinRecord(Base):
    __tablename__ = 'joins'

    memberID = Column(String, primary_key=True)

    # Attribution (nullable, kept for audit)
    inviterID = Column(String, nullable=True, index=True)
    inviteCode = Column(String, nullable=True)

    joinedAt = Column(DateTime(timezone=True), nullable=False)

    # Decided once at creation
    countedReal = Column(Boolean, nullable=False, default=False)

    # false -> true exactly once
    reversed = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return (
            f"<JoinRecord(memberID={self.memberID}, inviterID={self.inviterID}, "
            f"countedReal={self.countedReal}, reversed={self.reversed})>"
        )
