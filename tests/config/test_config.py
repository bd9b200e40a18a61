import pytest

from vatsim_listing.config.core import Core
from vatsim_listing.config.guilds import GuildConfig, load_guilds
from vatsim_listing.config.loader import load_raw_config, section
from vatsim_listing.config.validation import (
    optional_string,
    require_bool,
    require_id,
    require_number,
    require_string,
)
from vatsim_listing.config.vatsim import DEFAULT_DATA_URL, Vatsim


def test_require_string_uses_default_and_reports_missing():
    errors = []

    assert require_string(errors, "A", "  value ") == "value"
    assert require_string(errors, "B", "", "fallback") == "fallback"
    assert require_string(errors, "C", None) == ""
    assert errors == ["C is required"]


def test_optional_string():
    assert optional_string(None) is None
    assert optional_string(" ", "x") == "x"
    assert optional_string("y") == "y"


def test_require_number_validates_range_and_type():
    errors = []

    assert require_number(errors, "A", "15", 60) == 15
    assert require_number(errors, "B", None, 60) == 60
    require_number(errors, "C", "soon", 60)
    require_number(errors, "D", "nan", 60)
    require_number(errors, "E", 0, 60, minimum=1)

    assert errors == [
        "C must be a number, got 'soon'",
        "D must be a number, got 'nan'",
        "E must be >= 1, got 0",
    ]


def test_require_id_keeps_snowflake_precision():
    errors = []

    assert require_id(errors, "A", "123456789012345678") == 123456789012345678
    assert require_id(errors, "B", 987654321098765432) == 987654321098765432
    require_id(errors, "C", "12.5")
    require_id(errors, "D", None)
    require_id(errors, "E", True)

    assert len(errors) == 3


@pytest.mark.parametrize(
    "raw, expected",
    [("true", True), ("0", False), ("YES", True), ("off", False), (None, True), (False, False)],
)
def test_require_bool_parses_common_spellings(raw, expected):
    errors = []

    assert require_bool(errors, "FLAG", raw, True) is expected
    assert errors == []


def test_require_bool_reports_garbage():
    errors = []

    assert require_bool(errors, "FLAG", "maybe", False) is False
    assert errors == ["FLAG must be a boolean, got 'maybe'"]


def test_load_raw_config_reads_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[vatsim_listing.vatsim]\nrefresh_interval = 30\n', encoding="utf-8")

    config = load_raw_config(path)

    assert section(config, "vatsim") == {"refresh_interval": 30}
    assert section(config, "users") == {}
    assert load_raw_config(tmp_path / "missing.toml") == {}


def test_vatsim_section_defaults(monkeypatch):
    for name in ("VATSIM_DATA_URL", "VATSIM_DATA_REFRESH_INTERVAL", "VATSIM_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    errors = []

    cfg = Vatsim.from_raw({}, errors)

    assert errors == []
    assert cfg.DATA_URL == DEFAULT_DATA_URL
    assert cfg.REFRESH_INTERVAL == 120
    assert cfg.REQUEST_TIMEOUT == 30


def test_core_reads_token_from_configured_env(monkeypatch):
    monkeypatch.setenv("MY_TOKEN", "secret")
    monkeypatch.delenv("UPDATE_LISTING_INTERVAL", raising=False)
    errors = []

    cfg = Core.from_raw({"vatsim_listing": {"discord": {"token_env": "MY_TOKEN"}}}, errors)

    assert errors == []
    assert cfg.DISCORD_API_TOKEN == "secret"
    assert cfg.UPDATE_LISTING_INTERVAL == 60


def test_core_reports_missing_token(monkeypatch):
    monkeypatch.delenv("MISSING_TOKEN", raising=False)
    errors = []

    Core.from_raw({"vatsim_listing": {"discord": {"token_env": "MISSING_TOKEN"}}}, errors)

    assert errors == ["MISSING_TOKEN is required"]


def test_guild_config_from_toml_table():
    errors = []
    config = {
        "vatsim_listing": {
            "guilds": [
                {"name": "main", "guild_id": 123456789012345678, "channel_id": 2, "admin_role_id": 3},
                {"name": "atc", "guild_id": 4, "channel_id": 5, "display_flights": False},
            ]
        }
    }

    main, atc = load_guilds(config, errors)

    assert errors == []
    assert main == GuildConfig("main", 123456789012345678, 2, 3, True, True)
    assert atc.admin_role_id is None
    assert atc.display_flights is False
    assert atc.display_controllers is True


def test_guild_config_rejects_hidden_listing_and_duplicates():
    errors = []
    config = {
        "vatsim_listing": {
            "guilds": [
                {"name": "main", "guild_id": 1, "channel_id": 2,
                 "display_flights": False, "display_controllers": False},
                {"name": "main", "guild_id": 3, "channel_id": 4},
            ]
        }
    }

    load_guilds(config, errors)

    assert errors == [
        "guilds[0] must display flights or controllers",
        "duplicate guild name 'main'",
    ]


def test_guild_config_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("DISCORD_GUILD_NAME", "envguild")
    monkeypatch.setenv("DISCORD_GUILD_ID", "11")
    monkeypatch.setenv("DISCORD_CHANNEL_ID", "12")
    monkeypatch.setenv("DISCORD_ADMIN_ROLE_ID", "13")
    monkeypatch.setenv("DISCORD_DISPLAY_CONTROLLERS", "false")
    monkeypatch.delenv("DISCORD_DISPLAY_FLIGHTS", raising=False)
    errors = []

    (guild,) = load_guilds({}, errors)

    assert errors == []
    assert guild == GuildConfig("envguild", 11, 12, 13, True, False)


def test_guild_config_reports_missing_ids(monkeypatch):
    monkeypatch.delenv("DISCORD_GUILD_ID", raising=False)
    monkeypatch.delenv("DISCORD_CHANNEL_ID", raising=False)
    monkeypatch.delenv("DISCORD_ADMIN_ROLE_ID", raising=False)
    errors = []

    load_guilds({}, errors)

    assert "guilds[0].guild_id is required" in errors
    assert "guilds[0].channel_id is required" in errors
