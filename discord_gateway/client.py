"""
Discord client wiring gateway events into the invite tracker.
"""
import logging
from typing import Awaitable, Callable, List, Optional

import discord

from discord_gateway.adapters import DiscordGuildAdapter
from discord_gateway.commands import GhostCommandTree, build_commands
from discord_gateway.verify import VerifyView, ensure_verify_message
from invite_system.events.event_types import MemberArrived, MemberDeparted
from invite_system.settings import TrackerSettings
from invite_system.tracker import InviteTracker
from models.base import utc_now

logger = logging.getLogger(__name__)

REQUIRED_PERMISSIONS = ("manage_guild", "create_instant_invite", "manage_roles")


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.guilds = True
    intents.members = True  # "Server Members Intent" must be enabled in the developer portal
    intents.invites = True
    return intents


class GhostClient(discord.Client):
    """Single-guild invite tracking bot."""

    def __init__(self, guild_id: str, verify_channel_id: str, settings: TrackerSettings):
        super().__init__(intents=build_intents())
        self.guild_id = str(guild_id)
        self.verify_channel_id = verify_channel_id

        self.adapter = DiscordGuildAdapter(self, self.guild_id)
        self.tracker = InviteTracker(
            settings,
            snapshotSource=self.adapter,
            memberDirectory=self.adapter,
            roleMutator=self.adapter,
            inviteGateway=self.adapter,
        )
        self.tree = GhostCommandTree(self)
        self.verify_view = VerifyView(self.tracker)

        self._ready_callbacks: List[Callable[[], Awaitable[None]]] = []
        self._ready_once = False

    def add_ready_callback(self, callback: Callable[[], Awaitable[None]]) -> None:
        """Run callback after the first on_ready (background services)."""
        self._ready_callbacks.append(callback)

    async def setup_hook(self) -> None:
        self.add_view(self.verify_view)

        guild = discord.Object(id=int(self.guild_id))
        for command in build_commands(self.tracker):
            self.tree.add_command(command, guild=guild)
        synced = await self.tree.sync(guild=guild)
        logger.info(f"✓ Slash commands synced: {[c.name for c in synced]}")

    def _is_tracked_guild(self, guild: Optional[discord.Guild]) -> bool:
        return guild is not None and str(guild.id) == self.guild_id

    # ═══════════════════════════════════════════════════════════════════════
    # CONNECTION LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════

    async def on_ready(self):
        guild = self.get_guild(int(self.guild_id))
        if guild is None:
            logger.error(f"Guild {self.guild_id} not available to the bot")
            return

        me = guild.me
        if me is not None:
            missing = [p for p in REQUIRED_PERMISSIONS if not getattr(me.guild_permissions, p)]
            if missing:
                logger.warning(f"⚠️ Bot is missing permissions: {', '.join(missing).upper()}")

        await self.tracker.connectionEstablished(self.guild_id)

        try:
            await ensure_verify_message(guild, self.verify_channel_id, self.verify_view)
        except discord.HTTPException as e:
            logger.error(f"Failed to ensure verification message: {e}", exc_info=True)

        if not self._ready_once:
            self._ready_once = True
            for callback in self._ready_callbacks:
                await callback()

        logger.info(f"✅ Bot online: {self.user}")

    async def on_disconnect(self):
        logger.warning("Gateway connection lost, invite snapshots dropped")
        self.tracker.connectionLost(self.guild_id)

    async def on_resumed(self):
        logger.info("Gateway session resumed")
        await self.tracker.connectionEstablished(self.guild_id)

    # ═══════════════════════════════════════════════════════════════════════
    # MEMBER EVENTS
    # ═══════════════════════════════════════════════════════════════════════

    async def on_member_join(self, member: discord.Member):
        if not self._is_tracked_guild(member.guild):
            return

        result = await self.tracker.handle(
            MemberArrived(member_id=str(member.id), community_id=self.guild_id, arrived_at=utc_now())
        )
        logger.debug(f"Arrival of {member.id}: {result.status.value} ({result.reason})")

    async def on_member_remove(self, member: discord.Member):
        if not self._is_tracked_guild(member.guild):
            return

        result = await self.tracker.handle(
            MemberDeparted(member_id=str(member.id), departed_at=utc_now())
        )
        logger.debug(f"Departure of {member.id}: {result.status.value} ({result.reason})")
