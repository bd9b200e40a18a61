import logging
from pathlib import Path

import discord

from vatsim_listing.config.guilds import GuildConfig
from vatsim_listing.listing.discord_channel import DiscordListingChannel
from vatsim_listing.listing.publisher import ListingPublisher
from vatsim_listing.listing.state import ListingStateStore

logger = logging.getLogger(__name__)


def _is_text_channel(channel) -> bool:
    return isinstance(channel, discord.TextChannel)


def _resolve_channel(client, guild_cfg: GuildConfig):
    guild = client.get_guild(guild_cfg.guild_id)
    if guild is None:
        raise LookupError(f"Guild {guild_cfg.guild_id} not found")

    channel = client.get_channel(guild_cfg.channel_id)
    if channel is None:
        raise LookupError(f"Channel {guild_cfg.channel_id} not found")
    if not _is_text_channel(channel):
        raise TypeError(f"Channel {guild_cfg.channel_id} is not a text channel")
    if channel.guild.id != guild_cfg.guild_id:
        raise LookupError(f"Channel {guild_cfg.channel_id} does not belong to guild {guild_cfg.guild_id}")
    return channel


def build_publisher(client, guild_cfg: GuildConfig, channel) -> ListingPublisher:
    state_path = Path(client.listing_state_dir) / f"{guild_cfg.name}.listing.json"
    return ListingPublisher(
        guild_cfg.name,
        DiscordListingChannel(channel),
        client.link_stores.get(guild_cfg.name),
        client.snapshot_cache,
        client.airports.lookup,
        show_flights=guild_cfg.display_flights,
        show_controllers=guild_cfg.display_controllers,
        state_store=ListingStateStore(state_path),
    )


async def handle(client: discord.Client):
    """Start feed refresh, link flushing and one listing publisher per guild."""
    logger.info(f"Logged in as {client.user.name} (ID: {client.user.id})")

    # Warm the snapshot before the first publish cycle
    await client.snapshot_cache.start_scheduled_refresh(client.refresh_interval)
    await client.link_stores.start_scheduled_flush(client.save_interval)

    for guild_cfg in client.guild_configs.values():
        # on_ready fires again after reconnects; keep running publishers
        if guild_cfg.name in client.publishers:
            continue

        try:
            channel = _resolve_channel(client, guild_cfg)
        except (LookupError, TypeError) as e:
            logger.error("[%s] Cannot start VATSIM listing: %s", guild_cfg.name, e)
            continue

        publisher = build_publisher(client, guild_cfg, channel)
        client.publishers[guild_cfg.name] = publisher
        await publisher.start(client.listing_interval)
        logger.info("[%s] Monitoring #%s", guild_cfg.name, getattr(channel, "name", channel.id))
