import os
from dataclasses import dataclass
from typing import List

from .loader import section
from .validation import require_number, require_string

DEFAULT_DATA_URL = "https://data.vatsim.net/v3/vatsim-data.json"


@dataclass(frozen=True)
class Vatsim:
    DATA_URL: str
    REFRESH_INTERVAL: float
    REQUEST_TIMEOUT: float

    @classmethod
    def from_raw(cls, config: dict | None, errors: List[str]) -> "Vatsim":
        vatsim_cfg = section(config, "vatsim")
        return cls(
            DATA_URL=require_string(
                errors,
                "VATSIM_DATA_URL",
                vatsim_cfg.get("data_url", os.getenv("VATSIM_DATA_URL")),
                DEFAULT_DATA_URL,
            ),
            REFRESH_INTERVAL=require_number(
                errors,
                "VATSIM_DATA_REFRESH_INTERVAL",
                vatsim_cfg.get("refresh_interval", os.getenv("VATSIM_DATA_REFRESH_INTERVAL")),
                120,
                minimum=1,
            ),
            REQUEST_TIMEOUT=require_number(
                errors,
                "VATSIM_REQUEST_TIMEOUT",
                vatsim_cfg.get("request_timeout", os.getenv("VATSIM_REQUEST_TIMEOUT")),
                30,
                minimum=1,
            ),
        )
