from __future__ import annotations

import pytest
from aiohttp import ClientSession, test_utils, web

from weekyear.autosave.connectivity import ConnectivityMonitor


def test_subscribers_notified_only_on_change() -> None:
    monitor = ConnectivityMonitor()
    seen: list[bool] = []
    unsubscribe = monitor.subscribe(seen.append)

    monitor.set_online(True)
    monitor.set_online(False)
    monitor.set_online(False)
    monitor.set_online(True)
    unsubscribe()
    monitor.set_online(False)

    assert seen == [False, True]
    assert monitor.online is False


def test_failing_subscriber_does_not_block_others() -> None:
    monitor = ConnectivityMonitor()
    seen: list[bool] = []

    def _explode(_online: bool) -> None:
        raise RuntimeError("boom")

    monitor.subscribe(_explode)
    monitor.subscribe(seen.append)
    monitor.set_online(False)

    assert seen == [False]


@pytest.mark.asyncio
async def test_probe_marks_reachable_and_unreachable_servers() -> None:
    async def _handler(_request: web.Request) -> web.Response:
        return web.Response(status=401)

    app = web.Application()
    app.router.add_route("HEAD", "/", _handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    url = f"http://{server.host}:{server.port}/"

    monitor = ConnectivityMonitor(online=False)
    async with ClientSession() as session:
        assert await monitor.probe(session, url) is True
        assert monitor.online is True

        await server.close()
        assert await monitor.probe(session, url, timeout=1.0) is False
        assert monitor.online is False
