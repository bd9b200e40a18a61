import asyncio
import json

import pytest

from vatsim_listing.users import store as store_module
from vatsim_listing.users.store import (
    LinkFilter,
    UserLink,
    UserLinkStore,
    UserLinkStoreError,
    UserLinkStoreFactory,
)


def _run(coro):
    return asyncio.run(coro)


def test_missing_file_loads_empty_and_stays_clean(tmp_path):
    path = tmp_path / "main.json"
    store = UserLinkStore(path)

    async def scenario():
        links = await store.get_all()
        flushed = await store.flush_if_dirty()
        return links, flushed

    links, flushed = _run(scenario())

    assert links == []
    assert flushed is False
    assert not store.dirty
    assert not path.exists()


def test_flush_writes_wire_format(tmp_path):
    path = tmp_path / "main.json"
    store = UserLinkStore(path)

    async def scenario():
        await store.save(UserLink(1000001, discord_id="42", username="alice"))
        await store.save(UserLink(1000002, username="bob"))
        return await store.flush_if_dirty()

    assert _run(scenario()) is True
    assert not store.dirty
    assert json.loads(path.read_text(encoding="utf-8")) == [
        {"discordId": "42", "username": "alice", "vatsimId": 1000001},
        {"username": "bob", "vatsimId": 1000002},
    ]


def test_existing_file_is_loaded(tmp_path):
    path = tmp_path / "main.json"
    path.write_text(
        json.dumps([{"discordId": "7", "username": "carol", "vatsimId": 55}, {"vatsimId": 56}]),
        encoding="utf-8",
    )
    store = UserLinkStore(path)

    links = _run(store.get_all())

    assert links == [UserLink(55, discord_id="7", username="carol"), UserLink(56)]
    assert not store.dirty


def test_malformed_file_raises(tmp_path):
    path = tmp_path / "main.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(UserLinkStoreError):
        _run(UserLinkStore(path).get_all())


def test_save_replaces_link_with_same_discord_id(tmp_path):
    store = UserLinkStore(tmp_path / "main.json")

    async def scenario():
        await store.save(UserLink(1, discord_id="42", username="alice"))
        await store.save(UserLink(2, discord_id="42", username="alice"))
        return await store.get_all()

    assert _run(scenario()) == [UserLink(2, discord_id="42", username="alice")]


def test_save_replaces_link_with_same_vatsim_id(tmp_path):
    store = UserLinkStore(tmp_path / "main.json")

    async def scenario():
        await store.save(UserLink(1, discord_id="42", username="alice"))
        await store.save(UserLink(3, discord_id="43", username="dave"))
        await store.save(UserLink(1, username="admin-added"))
        return await store.get_all()

    assert _run(scenario()) == [
        UserLink(3, discord_id="43", username="dave"),
        UserLink(1, username="admin-added"),
    ]


def test_find_combines_filter_keys(tmp_path):
    store = UserLinkStore(tmp_path / "main.json")

    async def scenario():
        await store.save(UserLink(1, discord_id="42"))
        return (
            await store.find(LinkFilter(discord_id="42")),
            await store.find(LinkFilter(vatsim_id=1, discord_id="42")),
            await store.find(LinkFilter(vatsim_id=1, discord_id="99")),
        )

    by_discord, by_both, mismatch = _run(scenario())

    assert by_discord == UserLink(1, discord_id="42")
    assert by_both == by_discord
    assert mismatch is None


def test_empty_filter_matches_nothing(tmp_path):
    store = UserLinkStore(tmp_path / "main.json")

    async def scenario():
        await store.save(UserLink(1, discord_id="42"))
        await store.flush_if_dirty()
        found = await store.find(LinkFilter())
        deleted = await store.delete(LinkFilter())
        return found, deleted, await store.get_all()

    found, deleted, links = _run(scenario())

    assert found is None
    assert deleted is False
    assert links == [UserLink(1, discord_id="42")]
    assert not store.dirty


def test_delete_removes_match_and_marks_dirty(tmp_path):
    store = UserLinkStore(tmp_path / "main.json")

    async def scenario():
        await store.save(UserLink(1, discord_id="42"))
        await store.save(UserLink(2, username="bob"))
        await store.flush_if_dirty()
        removed = await store.delete(LinkFilter(vatsim_id=2))
        missing = await store.delete(LinkFilter(vatsim_id=2))
        return removed, missing, await store.get_all()

    removed, missing, links = _run(scenario())

    assert removed is True
    assert missing is False
    assert links == [UserLink(1, discord_id="42")]
    assert store.dirty


def test_get_all_returns_a_copy(tmp_path):
    store = UserLinkStore(tmp_path / "main.json")

    async def scenario():
        await store.save(UserLink(1))
        snapshot = await store.get_all()
        snapshot.clear()
        return await store.get_all()

    assert _run(scenario()) == [UserLink(1)]


def test_failed_flush_keeps_store_dirty(tmp_path, monkeypatch):
    path = tmp_path / "main.json"
    store = UserLinkStore(path)
    real_write = store_module._write_links

    def broken_write(target, links):
        raise OSError("disk full")

    async def scenario():
        await store.save(UserLink(1))
        monkeypatch.setattr(store_module, "_write_links", broken_write)
        failed = await store.flush_if_dirty()
        still_dirty = store.dirty
        monkeypatch.setattr(store_module, "_write_links", real_write)
        retried = await store.flush_if_dirty()
        return failed, still_dirty, retried

    failed, still_dirty, retried = _run(scenario())

    assert failed is False
    assert still_dirty is True
    assert retried is True
    assert not store.dirty
    assert json.loads(path.read_text(encoding="utf-8")) == [{"vatsimId": 1}]


def test_factory_shares_store_per_scope_and_flushes_all(tmp_path):
    factory = UserLinkStoreFactory(tmp_path)

    async def scenario():
        await factory.get("main").save(UserLink(1))
        await factory.get("other").save(UserLink(2))
        await factory.flush_all()

    assert factory.get("main") is factory.get("main")
    assert factory.get("main").path == tmp_path / "main.json"

    _run(scenario())

    assert json.loads((tmp_path / "main.json").read_text(encoding="utf-8")) == [{"vatsimId": 1}]
    assert json.loads((tmp_path / "other.json").read_text(encoding="utf-8")) == [{"vatsimId": 2}]


def test_scheduled_flush_starts_once(tmp_path):
    factory = UserLinkStoreFactory(tmp_path)

    async def scenario():
        first = await factory.start_scheduled_flush(3600)
        second = await factory.start_scheduled_flush(3600)
        await factory.stop_scheduled_flush()
        return first, second

    first, second = _run(scenario())

    assert first is second
    assert first.done()
