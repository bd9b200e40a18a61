"""
Per-guild listing settings.

Guilds are declared in ``config.toml``::

    [[vatsim_listing.guilds]]
    name = "main"
    guild_id = 123
    channel_id = 456
    admin_role_id = 789          # optional
    display_flights = true       # optional, default true
    display_controllers = true   # optional, default true

When no table is present a single guild is read from the ``DISCORD_GUILD_*``
environment variables.
"""

import os
from dataclasses import dataclass
from typing import List

from .validation import optional_string, require_bool, require_id, require_string


@dataclass(frozen=True)
class GuildConfig:
    name: str
    guild_id: int
    channel_id: int
    admin_role_id: int | None = None
    display_flights: bool = True
    display_controllers: bool = True

    @classmethod
    def from_raw(cls, raw: dict, errors: List[str], label: str = "guild") -> "GuildConfig":
        problems: List[str] = []
        name = require_string(problems, f"{label}.name", raw.get("name"))
        guild_id = require_id(problems, f"{label}.guild_id", raw.get("guild_id"))
        channel_id = require_id(problems, f"{label}.channel_id", raw.get("channel_id"))
        admin_role = optional_string(raw.get("admin_role_id"))
        admin_role_id = None
        if admin_role is not None:
            admin_role_id = require_id(problems, f"{label}.admin_role_id", admin_role)
        display_flights = require_bool(problems, f"{label}.display_flights", raw.get("display_flights"), True)
        display_controllers = require_bool(
            problems, f"{label}.display_controllers", raw.get("display_controllers"), True
        )
        if not problems and not (display_flights or display_controllers):
            problems.append(f"{label} must display flights or controllers")

        errors.extend(problems)
        return cls(
            name=name,
            guild_id=guild_id,
            channel_id=channel_id,
            admin_role_id=admin_role_id,
            display_flights=display_flights,
            display_controllers=display_controllers,
        )


def _env_guild() -> dict:
    return {
        "name": os.getenv("DISCORD_GUILD_NAME", "default"),
        "guild_id": os.getenv("DISCORD_GUILD_ID"),
        "channel_id": os.getenv("DISCORD_CHANNEL_ID"),
        "admin_role_id": os.getenv("DISCORD_ADMIN_ROLE_ID"),
        "display_flights": os.getenv("DISCORD_DISPLAY_FLIGHTS"),
        "display_controllers": os.getenv("DISCORD_DISPLAY_CONTROLLERS"),
    }


def load_guilds(config: dict | None, errors: List[str]) -> List[GuildConfig]:
    raw_guilds = (config or {}).get("vatsim_listing", {}).get("guilds") or [_env_guild()]

    guilds = [
        GuildConfig.from_raw(raw, errors, label=f"guilds[{idx}]")
        for idx, raw in enumerate(raw_guilds)
    ]

    seen: set[str] = set()
    for guild in guilds:
        if guild.name and guild.name in seen:
            errors.append(f"duplicate guild name {guild.name!r}")
        seen.add(guild.name)
    return guilds
