from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .. import ADMIN_EXTRAS, guild_config_for, is_admin, link_store_for, register_cog
from ...users.store import LinkFilter, UserLink, UserLinkStoreError

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "VATSIM listings are not configured for this server."
NOT_PERMITTED = "You do not have permission to use this command."
INVALID_CID = "Please provide a valid VATSIM CID."
STORE_UNAVAILABLE = "VATSIM links are unavailable right now. Please contact a server admin."


# ----------------------------- Command Definitions ----------------------------- #


@register_cog
class VatsimLinks(commands.Cog):
    """
    Slash commands managing the guild's VATSIM links.

    Members link or unlink their own account; holders of the guild's admin
    role can add and remove links for people who are not on the server.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def _reply(self, interaction: discord.Interaction, content: str) -> None:
        await interaction.response.send_message(content, ephemeral=True)

    async def _store_failed(self, interaction: discord.Interaction, guild_name: str, exc: Exception) -> None:
        logger.error("[%s] VATSIM link store unavailable: %s", guild_name, exc)
        await self._reply(interaction, STORE_UNAVAILABLE)

    @app_commands.command(name="linkvatsim", description="Link your VATSIM account")
    @app_commands.describe(cid="VATSIM CID")
    async def linkvatsim(self, interaction: discord.Interaction, cid: int) -> None:
        """Link the caller's Discord account to ``cid``."""

        guild_cfg = guild_config_for(self.bot, interaction)
        if guild_cfg is None:
            await self._reply(interaction, NOT_CONFIGURED)
            return
        if cid <= 0:
            await self._reply(interaction, INVALID_CID)
            return

        link = UserLink(
            vatsim_id=cid,
            discord_id=str(interaction.user.id),
            username=interaction.user.name,
        )
        try:
            await link_store_for(self.bot, guild_cfg).save(link)
        except UserLinkStoreError as exc:
            await self._store_failed(interaction, guild_cfg.name, exc)
            return
        await self._reply(
            interaction,
            "Thanks for linking your account! Your VATSIM activity will be displayed within a few minutes.",
        )

    @app_commands.command(name="unlinkvatsim", description="Unlink your VATSIM account")
    async def unlinkvatsim(self, interaction: discord.Interaction) -> None:
        """Remove the caller's own link, if any."""

        guild_cfg = guild_config_for(self.bot, interaction)
        if guild_cfg is None:
            await self._reply(interaction, NOT_CONFIGURED)
            return

        try:
            await link_store_for(self.bot, guild_cfg).delete(
                LinkFilter(discord_id=str(interaction.user.id))
            )
        except UserLinkStoreError as exc:
            await self._store_failed(interaction, guild_cfg.name, exc)
            return
        await self._reply(interaction, "Your VATSIM activity will be removed within a few minutes.")

    @app_commands.command(name="addvatsim", description="Add a VATSIM user", extras=ADMIN_EXTRAS)
    @app_commands.describe(cid="VATSIM CID", username="Username")
    async def addvatsim(self, interaction: discord.Interaction, cid: int, username: str) -> None:
        """Admin: track ``cid`` under ``username`` without a Discord account."""

        guild_cfg = guild_config_for(self.bot, interaction)
        if guild_cfg is None:
            await self._reply(interaction, NOT_CONFIGURED)
            return
        if not is_admin(interaction, guild_cfg):
            await self._reply(interaction, NOT_PERMITTED)
            return
        if cid <= 0:
            await self._reply(interaction, INVALID_CID)
            return
        if not username.strip():
            await self._reply(interaction, "Please provide a username.")
            return

        try:
            await link_store_for(self.bot, guild_cfg).save(
                UserLink(vatsim_id=cid, username=username.strip())
            )
        except UserLinkStoreError as exc:
            await self._store_failed(interaction, guild_cfg.name, exc)
            return
        await self._reply(interaction, "VATSIM activity for this user will be displayed within a few minutes.")

    @app_commands.command(name="removevatsim", description="Remove a VATSIM user", extras=ADMIN_EXTRAS)
    @app_commands.describe(cid="VATSIM CID")
    async def removevatsim(self, interaction: discord.Interaction, cid: int) -> None:
        """Admin: stop tracking ``cid``."""

        guild_cfg = guild_config_for(self.bot, interaction)
        if guild_cfg is None:
            await self._reply(interaction, NOT_CONFIGURED)
            return
        if not is_admin(interaction, guild_cfg):
            await self._reply(interaction, NOT_PERMITTED)
            return

        store = link_store_for(self.bot, guild_cfg)
        link_filter = LinkFilter(vatsim_id=cid)
        try:
            if await store.find(link_filter) is None:
                await self._reply(interaction, "User not found")
                return
            await store.delete(link_filter)
        except UserLinkStoreError as exc:
            await self._store_failed(interaction, guild_cfg.name, exc)
            return
        await self._reply(interaction, "VATSIM activity for this user will be removed within a few minutes.")
