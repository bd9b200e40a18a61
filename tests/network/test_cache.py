import asyncio

from vatsim_listing.network.cache import NetworkSnapshotCache

PAYLOAD = {
    "general": {"update_timestamp": "2024-05-01T12:00:00Z"},
    "pilots": [{"cid": 1, "callsign": "DAL1", "latitude": 0, "longitude": 0}],
    "controllers": [],
}


def _counting_fetch(*results):
    calls = []
    queue = list(results)

    async def fetch():
        calls.append(1)
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result

    return fetch, calls


def test_cold_start_fetches_once():
    fetch, calls = _counting_fetch(PAYLOAD)

    async def scenario():
        cache = NetworkSnapshotCache(fetch)
        first = await cache.get_snapshot()
        second = await cache.get_snapshot()
        return first, second

    first, second = asyncio.run(scenario())

    assert first is second
    assert first.pilots[0].callsign == "DAL1"
    assert len(calls) == 1


def test_failed_refresh_keeps_previous_snapshot():
    fetch, calls = _counting_fetch(PAYLOAD, RuntimeError("boom"))

    async def scenario():
        cache = NetworkSnapshotCache(fetch)
        assert await cache.refresh_once()
        before = cache.snapshot
        refreshed = await cache.refresh_once()
        return before, refreshed, cache.snapshot

    before, refreshed, after = asyncio.run(scenario())

    assert refreshed is False
    assert after is before
    assert len(calls) == 2


def test_get_snapshot_returns_none_until_a_fetch_succeeds():
    fetch, _ = _counting_fetch(ValueError("bad payload"))

    async def scenario():
        cache = NetworkSnapshotCache(fetch)
        return await cache.get_snapshot()

    assert asyncio.run(scenario()) is None


def test_overlapping_refresh_is_skipped_and_readers_share_fetch():
    calls = []

    async def scenario():
        gate = asyncio.Event()

        async def fetch():
            calls.append(1)
            await gate.wait()
            return PAYLOAD

        cache = NetworkSnapshotCache(fetch)
        first = asyncio.create_task(cache.refresh_once())
        await asyncio.sleep(0)

        second = await cache.refresh_once()
        reader = asyncio.create_task(cache.get_snapshot())
        await asyncio.sleep(0)

        gate.set()
        return await first, second, await reader

    first, second, snapshot = asyncio.run(scenario())

    assert first is True
    assert second is False
    assert snapshot is not None
    assert len(calls) == 1


def test_start_scheduled_refresh_is_idempotent():
    fetch, calls = _counting_fetch(PAYLOAD)

    async def scenario():
        cache = NetworkSnapshotCache(fetch)
        task = await cache.start_scheduled_refresh(3600)
        again = await cache.start_scheduled_refresh(3600)
        scheduled = cache.is_scheduled
        await cache.stop_scheduled_refresh()
        return task, again, scheduled, cache.is_scheduled

    task, again, scheduled, after_stop = asyncio.run(scenario())

    assert task is again
    assert scheduled is True
    assert after_stop is False
    assert len(calls) == 1
