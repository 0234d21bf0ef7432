"""
Slash commands: /rank and /meulink.
"""
import logging

import discord
from discord import app_commands

from core import texts
from invite_system.exceptions import InviteUnavailable
from invite_system.tracker import InviteTracker

logger = logging.getLogger(__name__)


def build_commands(tracker: InviteTracker):
    """Create the command objects bound to a tracker."""

    @app_commands.command(name="rank", description="Mostra seu rank e quantos convites reais você tem.")
    async def rank(interaction: discord.Interaction):
        if interaction.guild is None:
            await interaction.response.send_message(texts.ERROR_INVALID_GUILD, ephemeral=True)
            return

        summary = await tracker.onInspectionRequested(str(interaction.user.id))
        await interaction.response.send_message(texts.rank_text(summary), ephemeral=True)

    @app_commands.command(name="meulink", description="Mostra (ou cria) seu link pessoal de convite.")
    async def meulink(interaction: discord.Interaction):
        if interaction.guild is None:
            await interaction.response.send_message(texts.ERROR_INVALID_GUILD, ephemeral=True)
            return

        try:
            url = await tracker.getOrCreatePersonalInvite(str(interaction.user.id))
        except InviteUnavailable:
            await interaction.response.send_message(texts.ERROR_INVITE_UNAVAILABLE, ephemeral=True)
            return

        await interaction.response.send_message(texts.personal_link_text(url), ephemeral=True)

    return [rank, meulink]


class GhostCommandTree(app_commands.CommandTree):
    """Command tree replying with a generic error instead of failing silently."""

    async def on_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        name = interaction.command.name if interaction.command else "?"
        logger.error(f"⚠️ Command error in /{name}: {error}", exc_info=error)
        try:
            if interaction.response.is_done():
                await interaction.followup.send(texts.ERROR_GENERIC, ephemeral=True)
            else:
                await interaction.response.send_message(texts.ERROR_GENERIC, ephemeral=True)
        except discord.HTTPException as e:
            logger.debug(f"Could not report command error: {e}")
