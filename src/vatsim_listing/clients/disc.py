"""Discord bot bootstrap utilities."""

from __future__ import annotations

import logging
from typing import Dict, Iterable

import aiohttp
import discord
from discord.ext import commands as discord_commands

from vatsim_listing import commands as vl_commands
from vatsim_listing.aviation.airports import AirportDirectory, load_airports
from vatsim_listing.config import GuildConfig, aviation, core, guilds, users, vatsim
from vatsim_listing.event_hooks import ready_hook
from vatsim_listing.listing.publisher import ListingPublisher
from vatsim_listing.network.cache import NetworkSnapshotCache
from vatsim_listing.users.store import UserLinkStoreFactory

from .vatsim import VatsimClient

logger = logging.getLogger(__name__)

# --- Intents --------------------------------------------------------------- #
intents = discord.Intents.default()
intents.members = True


class VatsimListingBot(discord_commands.Bot):
    """Discord bot publishing VATSIM activity listings for configured guilds."""

    def __init__(
        self,
        *,
        guild_configs: Iterable[GuildConfig],
        link_stores: UserLinkStoreFactory,
        airports: AirportDirectory,
        data_url: str,
        request_timeout: float,
        refresh_interval: float,
        save_interval: float,
        listing_interval: float,
        listing_state_dir: str,
    ) -> None:
        super().__init__(command_prefix=discord_commands.when_mentioned, intents=intents)
        self.guild_configs: Dict[int, GuildConfig] = {g.guild_id: g for g in guild_configs}
        self.link_stores = link_stores
        self.airports = airports
        self.data_url = data_url
        self.request_timeout = request_timeout
        self.refresh_interval = refresh_interval
        self.save_interval = save_interval
        self.listing_interval = listing_interval
        self.listing_state_dir = listing_state_dir
        self.publishers: Dict[str, ListingPublisher] = {}
        self.http_session: aiohttp.ClientSession | None = None
        self.snapshot_cache: NetworkSnapshotCache | None = None

    async def setup_hook(self) -> None:
        """Open the feed session, register slash commands and sync them."""

        self.http_session = aiohttp.ClientSession()
        client = VatsimClient(self.http_session, self.data_url, self.request_timeout)
        self.snapshot_cache = NetworkSnapshotCache(client.fetch_data)

        await vl_commands.setup(self)

        try:
            synced = await self.tree.sync()
            logger.info("Synced %d application command(s)", len(synced))
        except Exception:
            logger.exception("Failed to sync application commands")

    async def close(self) -> None:
        for publisher in self.publishers.values():
            await publisher.stop()
        self.publishers.clear()

        if self.snapshot_cache is not None:
            await self.snapshot_cache.stop_scheduled_refresh()
        await self.link_stores.stop_scheduled_flush()
        await self.link_stores.flush_all()

        if self.http_session is not None:
            await self.http_session.close()
        await super().close()

    async def on_ready(self) -> None:
        await ready_hook.handle(self)


def build_bot() -> VatsimListingBot:
    """Create the bot from the loaded configuration."""

    return VatsimListingBot(
        guild_configs=guilds,
        link_stores=UserLinkStoreFactory(users.JSON_DIR),
        airports=load_airports(aviation.AIRPORTS_JSON_PATH),
        data_url=vatsim.DATA_URL,
        request_timeout=vatsim.REQUEST_TIMEOUT,
        refresh_interval=vatsim.REFRESH_INTERVAL,
        save_interval=users.SAVE_INTERVAL,
        listing_interval=core.UPDATE_LISTING_INTERVAL,
        listing_state_dir=core.LISTING_STATE_DIR,
    )


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    if not core.DISCORD_API_TOKEN:
        logger.error("No DISCORD_API_TOKEN configured. Cannot run client.")
        return

    logger.info("Application starting with %d guild(s)", len(guilds))
    bot = build_bot()
    try:
        bot.run(core.DISCORD_API_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)
    except Exception as exc:  # pragma: no cover - defensive guard
        logger.exception("Unexpected error while running client: %s", exc)
