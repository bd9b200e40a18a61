import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .loader import section
from .validation import require_number, require_string

_DEFAULT_STATE_DIR = Path(__file__).resolve().parent.parent.parent.parent / "data" / "listings"


@dataclass(frozen=True)
class Core:
    DISCORD_API_TOKEN: str
    UPDATE_LISTING_INTERVAL: float
    LISTING_STATE_DIR: str

    @classmethod
    def from_raw(cls, config: dict | None, errors: List[str]) -> "Core":
        discord_cfg = section(config, "discord")
        token_env = str(discord_cfg.get("token_env", "DISCORD_API_TOKEN"))

        return cls(
            DISCORD_API_TOKEN=require_string(errors, token_env, os.getenv(token_env)),
            UPDATE_LISTING_INTERVAL=require_number(
                errors,
                "UPDATE_LISTING_INTERVAL",
                discord_cfg.get("update_listing_interval", os.getenv("UPDATE_LISTING_INTERVAL")),
                60,
                minimum=1,
            ),
            LISTING_STATE_DIR=require_string(
                errors,
                "LISTING_STATE_DIR",
                discord_cfg.get("listing_state_dir", os.getenv("LISTING_STATE_DIR")),
                str(_DEFAULT_STATE_DIR),
            ),
        )
