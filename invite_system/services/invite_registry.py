"""
Personal invite registry - one tracked invite per user, created lazily.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from core.db import dialect_insert
from invite_system.exceptions import InviteUnavailable
from invite_system.ports import InviteGateway
from models.base import utc_now
from models.personal_invite import PersonalInvite

logger = logging.getLogger(__name__)


class PersonalInviteRegistry:
    """Service owning the personal_invites table."""

    def __init__(self, session: Session, gateway: InviteGateway, channelId: str):
        self.session = session
        self.gateway = gateway
        self.channelId = channelId

    def find(self, userId: str) -> Optional[PersonalInvite]:
        return self.session.get(PersonalInvite, userId)

    def ownerOf(self, code: str) -> Optional[str]:
        """Owner of a personal invite code, None for codes this system did not create."""
        return self.session.query(PersonalInvite.ownerID).filter(
            PersonalInvite.inviteCode == code
        ).scalar()

    async def getOrCreate(self, userId: str) -> str:
        """
        Return the user's invite url, replacing it if it no longer resolves.

        Raises:
            InviteUnavailable: If a new invite could not be created
        """
        existing = self.find(userId)
        if existing is not None:
            url = await self._resolve(existing.inviteCode)
            if url:
                return url
            logger.info(f"Personal invite {existing.inviteCode} of {userId} is gone, regenerating")

        try:
            created = await self.gateway.create_invite(
                self.channelId,
                reason=f"Personal invite for user {userId}",
            )
        except Exception as e:
            logger.error(f"Failed to create personal invite for {userId}: {e}", exc_info=True)
            raise InviteUnavailable(userId, e)

        self._upsert(userId, created.code, created.url)
        logger.info(f"Personal invite {created.code} stored for {userId}")
        return created.url

    async def _resolve(self, code: str) -> Optional[str]:
        try:
            return await self.gateway.resolve_invite(code)
        except Exception as e:
            logger.warning(f"Could not resolve invite {code}: {e}")
            return None

    def _upsert(self, userId: str, code: str, url: str) -> None:
        stmt = dialect_insert(self.session, PersonalInvite).values(
            ownerID=userId,
            inviteCode=code,
            inviteUrl=url,
            createdAt=utc_now(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[PersonalInvite.ownerID],
            set_={
                "inviteCode": stmt.excluded.inviteCode,
                "inviteUrl": stmt.excluded.inviteUrl,
                "createdAt": stmt.excluded.createdAt,
            },
        )
        self.session.execute(stmt)
        self.session.expire_all()
