"""
Auto-discovery & registry for slash command cogs.

Any module inside ``commands/handlers`` that defines::

    from vatsim_listing.commands import register_cog

    @register_cog
    class MyCog(commands.Cog): ...

is picked up automatically at import-time. Invoking :func:`setup` attaches
every registered cog to the bot.

Cogs are constructed with the bot, which exposes ``guild_configs`` (guild id
to :class:`~vatsim_listing.config.guilds.GuildConfig`) and ``link_stores``
(a :class:`~vatsim_listing.users.store.UserLinkStoreFactory`). The helpers
below resolve those for an interaction.
"""

from __future__ import annotations

import logging
from importlib import import_module
from pathlib import Path
from pkgutil import iter_modules
from typing import List, Optional, Type

import discord
from discord.ext import commands as commands_ext

from vatsim_listing.config.guilds import GuildConfig
from vatsim_listing.users.store import UserLinkStore

logger = logging.getLogger(__name__)

_COG_CLASSES: List[Type[commands_ext.Cog]] = []

# Marks slash commands restricted to the guild's admin role
ADMIN_EXTRAS = {"admin": True}


def register_cog(cls: Optional[Type[commands_ext.Cog]] = None):
    """Decorator registering a Cog class for later attachment to the bot."""

    def _register(cog_cls: Type[commands_ext.Cog]):
        if not issubclass(cog_cls, commands_ext.Cog):
            raise TypeError("register_cog expects a discord.ext.commands.Cog subclass")

        _COG_CLASSES.append(cog_cls)
        return cog_cls

    if cls is None:
        return _register
    return _register(cls)


async def setup(bot: commands_ext.Bot) -> None:
    """
    Attach registered cogs to ``bot``.

    This must be invoked during the bot setup phase (typically inside
    ``commands.Bot.setup_hook``).
    """

    for cog_cls in _COG_CLASSES:
        if bot.get_cog(cog_cls.__name__):
            continue
        await bot.add_cog(cog_cls(bot))

    if _COG_CLASSES:
        logger.info("Registered %d command cog(s)", len(_COG_CLASSES))
    else:
        logger.warning("No command cogs discovered; command tree is empty")


def guild_config_for(bot, interaction: discord.Interaction) -> Optional[GuildConfig]:
    """Return the listing settings for the interaction's guild, if configured."""
    if interaction.guild_id is None:
        return None
    return getattr(bot, "guild_configs", {}).get(interaction.guild_id)


def link_store_for(bot, guild_cfg: GuildConfig) -> UserLinkStore:
    return bot.link_stores.get(guild_cfg.name)


def is_admin_command(command) -> bool:
    return bool(getattr(command, "extras", {}).get("admin"))


def is_admin(interaction: discord.Interaction, guild_cfg: GuildConfig) -> bool:
    """True when the caller holds the guild's configured admin role."""
    if guild_cfg.admin_role_id is None:
        return False
    roles = getattr(interaction.user, "roles", None) or []
    return any(role.id == guild_cfg.admin_role_id for role in roles)


_pkg_path = Path(__file__).resolve().parent / "handlers"
for _, modname, _ in iter_modules([str(_pkg_path)]):
    if modname.startswith("_"):
        continue
    import_module(f"{__name__}.handlers.{modname}")


__all__ = [
    "ADMIN_EXTRAS",
    "guild_config_for",
    "is_admin",
    "is_admin_command",
    "link_store_for",
    "register_cog",
    "setup",
]
