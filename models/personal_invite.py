# models/personal_invite.py
"""
PersonalInvite model - one tracked invite per user.
"""
from sqlalchemy import Column, String, DateTime
from models.base import Base, utc_now


class PersonalInvite(Base):
    __tablename__ = 'personal_invites'

    # Owner of the invite (one row per user, overwritten on regeneration)
    ownerID = Column(String, primary_key=True)

    inviteCode = Column(String, nullable=False, unique=True, index=True)
    inviteUrl = Column(String, nullable=False)

    createdAt = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def __repr__(self):
        return f"<PersonalInvite(ownerID={self.ownerID}, inviteCode={self.inviteCode})>"
