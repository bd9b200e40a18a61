"""Application configuration"""

import logging
from typing import List

from dotenv import load_dotenv

from .loader import load_raw_config
from .core import Core
from .vatsim import Vatsim
from .users import Users
from .aviation import Aviation
from .guilds import GuildConfig, load_guilds

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
logging.getLogger("discord.http").setLevel(logging.WARNING)
logging.getLogger("aiohttp").setLevel(logging.WARNING)

_RAW_CONFIG = load_raw_config()
_ERRORS: List[str] = []

core = Core.from_raw(_RAW_CONFIG, _ERRORS)
vatsim = Vatsim.from_raw(_RAW_CONFIG, _ERRORS)
users = Users.from_raw(_RAW_CONFIG, _ERRORS)
aviation = Aviation.from_raw(_RAW_CONFIG, _ERRORS)
guilds = load_guilds(_RAW_CONFIG, _ERRORS)

if _ERRORS:
    raise ValueError(f"Invalid configuration: {'; '.join(_ERRORS)}")


class Config:
    core = core
    vatsim = vatsim
    users = users
    aviation = aviation
    guilds = guilds


__all__ = ["core", "vatsim", "users", "aviation", "guilds", "GuildConfig", "Config"]
