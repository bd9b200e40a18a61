import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .loader import section
from .validation import require_string

_DEFAULT_AIRPORTS_PATH = Path(__file__).resolve().parent.parent.parent.parent / "data" / "airports.json"


@dataclass(frozen=True)
class Aviation:
    AIRPORTS_JSON_PATH: str

    @classmethod
    def from_raw(cls, config: dict | None, errors: List[str]) -> "Aviation":
        aviation_cfg = section(config, "aviation")
        return cls(
            AIRPORTS_JSON_PATH=require_string(
                errors,
                "AVIATION_AIRPORTS_JSON_PATH",
                aviation_cfg.get("airports_json_path", os.getenv("AVIATION_AIRPORTS_JSON_PATH")),
                str(_DEFAULT_AIRPORTS_PATH),
            )
        )
