"""
discord.py implementations of the invite tracker collaborators.
"""
import logging
from typing import Dict, Iterable, Optional

import discord

from invite_system.exceptions import TrackingUnavailable
from invite_system.ports import CreatedInvite, MemberProfile

logger = logging.getLogger(__name__)


def member_profile(member: discord.Member) -> MemberProfile:
    return MemberProfile(
        user_id=str(member.id),
        is_bot=member.bot,
        account_created_at=member.created_at,
        username=member.name,
        has_custom_avatar=member.avatar is not None,
        role_ids=frozenset(str(role.id) for role in member.roles),
    )


class DiscordGuildAdapter:
    """
    Snapshot source, member directory, role mutator, invite gateway and
    notifier for a single guild.
    """

    def __init__(self, client: discord.Client, guild_id: str):
        self.client = client
        self.guild_id = guild_id

    async def _guild(self) -> discord.Guild:
        guild = self.client.get_guild(int(self.guild_id))
        if guild is None:
            guild = await self.client.fetch_guild(int(self.guild_id))
        return guild

    # SnapshotSource

    async def fetch_invite_usage(self, community_id: str) -> Dict[str, int]:
        guild = await self._guild()
        try:
            invites = await guild.invites()
        except discord.Forbidden as e:
            raise TrackingUnavailable(community_id, f"missing MANAGE_GUILD: {e}")
        return {invite.code: invite.uses or 0 for invite in invites}

    # MemberDirectory

    async def _member(self, user_id: str) -> Optional[discord.Member]:
        guild = await self._guild()
        member = guild.get_member(int(user_id))
        if member is not None:
            return member
        try:
            return await guild.fetch_member(int(user_id))
        except discord.NotFound:
            return None

    async def get_member(self, user_id: str) -> Optional[MemberProfile]:
        member = await self._member(user_id)
        return member_profile(member) if member else None

    # RoleMutator

    async def add_roles(self, user_id: str, role_ids: Iterable[str]) -> None:
        member = await self._member(user_id)
        if member is None:
            return
        roles = [discord.Object(id=int(role_id)) for role_id in role_ids]
        await member.add_roles(*roles, reason="Invite tier sync")

    async def remove_roles(self, user_id: str, role_ids: Iterable[str]) -> None:
        member = await self._member(user_id)
        if member is None:
            return
        roles = [discord.Object(id=int(role_id)) for role_id in role_ids]
        await member.remove_roles(*roles, reason="Invite tier sync")

    # InviteGateway

    async def resolve_invite(self, code: str) -> Optional[str]:
        try:
            invite = await self.client.fetch_invite(code)
        except discord.NotFound:
            return None
        return invite.url

    async def create_invite(self, channel_id: str, reason: str) -> CreatedInvite:
        guild = await self._guild()
        channel = guild.get_channel(int(channel_id))
        if channel is None:
            channel = await guild.fetch_channel(int(channel_id))

        invite = await channel.create_invite(
            max_age=0,   # never expires
            max_uses=0,  # unlimited
            unique=True,
            reason=reason,
        )
        return CreatedInvite(code=invite.code, url=invite.url)

    # Notifier

    async def notify(self, user_id: str, text: str) -> bool:
        try:
            user = self.client.get_user(int(user_id)) or await self.client.fetch_user(int(user_id))
            await user.send(text)
            return True
        except discord.HTTPException as e:
            logger.debug(f"Could not DM {user_id}: {e}")
            return False
