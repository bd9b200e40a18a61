import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .loader import section
from .validation import require_number, require_string

_DEFAULT_USERS_DIR = Path(__file__).resolve().parent.parent.parent.parent / "data" / "users"


@dataclass(frozen=True)
class Users:
    JSON_DIR: str
    SAVE_INTERVAL: float

    @classmethod
    def from_raw(cls, config: dict | None, errors: List[str]) -> "Users":
        users_cfg = section(config, "users")
        return cls(
            JSON_DIR=require_string(
                errors,
                "USERS_JSON_DIR",
                users_cfg.get("json_dir", os.getenv("USERS_JSON_DIR")),
                str(_DEFAULT_USERS_DIR),
            ),
            SAVE_INTERVAL=require_number(
                errors,
                "USERS_SAVE_INTERVAL",
                users_cfg.get("save_interval", os.getenv("USERS_SAVE_INTERVAL")),
                15,
                minimum=1,
            ),
        )
