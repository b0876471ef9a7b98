import asyncio

import pytest
from fakes import FakePage, FakeResponse

from vibecrawl.interceptor import ResponseWaiter, album_chart_predicate, album_tracks_predicate, url_contains

CHART = "https://apis.naver.com/vibeWeb/musicapiweb/vibe/v1/chart/albumChart?start=1&display=50"


def test_predicates():
    assert album_chart_predicate()(CHART, 200)
    assert not album_chart_predicate()(CHART, 304)
    assert album_tracks_predicate(42)("https://apis.naver.com/x/album/42/tracks?start=1", 200)
    assert not album_tracks_predicate(42)("https://apis.naver.com/x/album/421/info", 200)
    assert url_contains("foo", status=204)("http://x/foo", 204)


def test_first_matching_response_wins():
    async def scenario():
        page = FakePage()
        waiter = ResponseWaiter(album_chart_predicate(), timeout=1).arm(page)
        page.emit(FakeResponse("https://vibe.naver.com/app.js", {"ignored": True}))
        page.emit(FakeResponse(CHART, {"n": 1}, status=500))
        page.emit(FakeResponse(CHART, {"n": 2}))
        page.emit(FakeResponse(CHART, {"n": 3}))
        captured = await waiter.wait()
        return page, captured

    page, captured = asyncio.run(scenario())
    assert captured.ok
    assert captured.data == {"n": 2}
    assert captured.url == CHART
    assert page.listeners["response"] == []


def test_timeout_is_an_explicit_failure():
    async def scenario():
        page = FakePage()
        waiter = ResponseWaiter(album_chart_predicate(), timeout=0.05).arm(page)
        return page, await waiter.wait()

    page, captured = asyncio.run(scenario())
    assert not captured.ok
    assert captured.error == "timeout"
    assert page.listeners["response"] == []


def test_invalid_json_fails_the_handle():
    async def scenario():
        page = FakePage()
        waiter = ResponseWaiter(album_chart_predicate(), timeout=1).arm(page)
        page.emit(FakeResponse(CHART, broken=True))
        return await waiter.wait()

    captured = asyncio.run(scenario())
    assert not captured.ok
    assert captured.error.startswith("invalid json")


def test_arming_rules():
    async def scenario():
        page = FakePage()
        waiter = ResponseWaiter(album_chart_predicate(), timeout=0.01)
        with pytest.raises(RuntimeError):
            await waiter.wait()
        waiter.arm(page)
        with pytest.raises(RuntimeError):
            waiter.arm(page)
        await waiter.wait()

    asyncio.run(scenario())


def test_independent_waiters_on_one_navigation():
    async def scenario():
        page = FakePage(
            {
                "https://vibe.naver.com/album/42": [
                    FakeResponse("https://apis.naver.com/x/album/42/tracks", {"tracks": 1}),
                    FakeResponse(CHART, {"chart": 1}),
                ]
            }
        )
        chart = ResponseWaiter(album_chart_predicate(), timeout=1).arm(page)
        tracks = ResponseWaiter(album_tracks_predicate(42), timeout=1).arm(page)
        await page.goto("https://vibe.naver.com/album/42")
        return await chart.wait(), await tracks.wait()

    chart, tracks = asyncio.run(scenario())
    assert chart.data == {"chart": 1}
    assert tracks.data == {"tracks": 1}


def test_window_counts_from_arming():
    async def scenario():
        page = FakePage()
        waiter = ResponseWaiter(album_chart_predicate(), timeout=0.1).arm(page)
        await asyncio.sleep(0.3)
        page.emit(FakeResponse(CHART, {"late": True}))
        return page, await waiter.wait()

    page, captured = asyncio.run(scenario())
    assert not captured.ok
    assert captured.error == "timeout"
    assert page.listeners["response"] == []


def test_response_inside_window_survives_slow_wait():
    async def scenario():
        page = FakePage()
        waiter = ResponseWaiter(album_chart_predicate(), timeout=0.2).arm(page)
        page.emit(FakeResponse(CHART, {"n": 1}))
        await asyncio.sleep(0.4)
        return await waiter.wait()

    captured = asyncio.run(scenario())
    assert captured.ok
    assert captured.data == {"n": 1}
