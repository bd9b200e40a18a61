from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from .. import is_admin_command, register_cog


def _describe(command: app_commands.Command) -> str:
    return f"`/{command.name}`: {command.description}"


@register_cog
class Help(commands.Cog):
    """List the VATSIM listing slash commands, member and admin ones apart."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    def help_text(self) -> str:
        registered = sorted(self.bot.tree.get_commands(), key=lambda cmd: cmd.name)
        member = [_describe(cmd) for cmd in registered if not is_admin_command(cmd)]
        admin = [_describe(cmd) for cmd in registered if is_admin_command(cmd)]

        lines = ["**Member commands**", *(member or ["None registered"])]
        if admin:
            lines += ["**Admin commands** (requires the server's VATSIM admin role)", *admin]
        return "\n".join(lines)

    @app_commands.command(name="help", description="List available slash commands.")
    async def help(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(self.help_text(), ephemeral=True)
