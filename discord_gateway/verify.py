"""
Verification message with a persistent button.

Clicking grants the verified role, hands out the personal invite link and
syncs the tier role in case the member already has a count.
"""
import logging
from typing import Optional

import discord

from config import Config
from core import texts
from core.settings_store import VERIFY_MESSAGE_ID, get_setting, set_setting
from invite_system.exceptions import InviteUnavailable
from invite_system.tracker import InviteTracker

logger = logging.getLogger(__name__)

VERIFY_CUSTOM_ID = "ghost_verify"


class VerifyView(discord.ui.View):
    """Persistent view, re-registered on every start so old messages keep working."""

    def __init__(self, tracker: InviteTracker):
        super().__init__(timeout=None)
        self.tracker = tracker

    @discord.ui.button(
        label=texts.VERIFY_BUTTON_LABEL,
        style=discord.ButtonStyle.success,
        custom_id=VERIFY_CUSTOM_ID,
    )
    async def verify(self, interaction: discord.Interaction, button: discord.ui.Button):
        await handle_verify(self.tracker, interaction)


async def handle_verify(tracker: InviteTracker, interaction: discord.Interaction) -> None:
    guild = interaction.guild
    if guild is None:
        return

    member = guild.get_member(interaction.user.id)
    if member is None:
        try:
            member = await guild.fetch_member(interaction.user.id)
        except discord.HTTPException as e:
            logger.warning(f"Verification by {interaction.user.id} ignored, member not found: {e}")
            return

    try:
        await member.add_roles(discord.Object(id=int(Config.get(Config.VERIFIED_ROLE_ID))), reason="Verified")
    except discord.HTTPException as e:
        logger.error(f"Failed to grant verified role to {member.id}: {e}")

    user_id = str(member.id)
    try:
        url = await tracker.getOrCreatePersonalInvite(user_id)
    except InviteUnavailable:
        await _reply(interaction, texts.ERROR_INVITE_UNAVAILABLE)
        return

    message = texts.progress_text(url)
    await _reply(interaction, message)

    try:
        await interaction.user.send(message)
    except discord.HTTPException:
        logger.debug(f"DMs closed for {user_id}")

    await tracker.onInspectionRequested(user_id)


async def _reply(interaction: discord.Interaction, content: str) -> None:
    try:
        await interaction.response.send_message(content, ephemeral=True)
    except discord.HTTPException as e:
        logger.warning(f"Failed to reply to verification of {interaction.user.id}: {e}")


async def ensure_verify_message(guild: discord.Guild, channel_id: str, view: VerifyView) -> Optional[int]:
    """
    Post the verification message once; reuse it while it still exists.

    Returns:
        Message id, or None if the channel is unusable
    """
    try:
        channel = guild.get_channel(int(channel_id)) or await guild.fetch_channel(int(channel_id))
    except discord.HTTPException as e:
        logger.warning(f"⚠️ Verification channel {channel_id} unavailable: {e}")
        return None

    if not isinstance(channel, discord.abc.Messageable):
        logger.warning(f"⚠️ Verification channel {channel_id} is not a text channel")
        return None

    saved = get_setting(VERIFY_MESSAGE_ID)
    if saved:
        try:
            existing = await channel.fetch_message(int(saved))
            return existing.id
        except discord.HTTPException:
            logger.info("Saved verification message is gone, posting a new one")

    embed = discord.Embed(title=texts.VERIFY_TITLE, description=texts.verify_description())
    message = await channel.send(embed=embed, view=view)
    set_setting(VERIFY_MESSAGE_ID, str(message.id))
    logger.info(f"Verification message posted: {message.id}")
    return message.id
