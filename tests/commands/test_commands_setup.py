import asyncio

import discord
from discord.ext import commands as discord_commands

from vatsim_listing import commands as vl_commands


async def _collect():
    bot = discord_commands.Bot(command_prefix="!", intents=discord.Intents.none())
    try:
        await vl_commands.setup(bot)
        return set(bot.cogs.keys()), {cmd.name for cmd in bot.tree.get_commands()}
    finally:
        await bot.close()


def test_setup_registers_known_cogs():
    cogs, command_names = asyncio.run(_collect())

    assert {"Help", "VatsimLinks"}.issubset(cogs)
    assert {"help", "linkvatsim", "unlinkvatsim", "addvatsim", "removevatsim"}.issubset(command_names)


async def _help_text():
    bot = discord_commands.Bot(command_prefix="!", intents=discord.Intents.none())
    try:
        await vl_commands.setup(bot)
        return bot.get_cog("Help").help_text()
    finally:
        await bot.close()


def test_help_lists_member_and_admin_commands_apart():
    text = asyncio.run(_help_text())

    member_part, admin_part = text.split("**Admin commands**")
    assert "`/linkvatsim`: Link your VATSIM account" in member_part
    assert "`/unlinkvatsim`" in member_part
    assert "`/help`" in member_part
    assert "`/addvatsim`: Add a VATSIM user" in admin_part
    assert "`/removevatsim`" in admin_part
    assert "/addvatsim" not in member_part
