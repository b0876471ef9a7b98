import asyncio
import json

from fakes import FakePage, FakeResponse, api_album, chart_payload, tracks_payload

from vibecrawl.config import ALBUM_URL_TEMPLATE, CHART_URL, Settings
from vibecrawl.tracks import crawl_tracks, format_tracklist

CHART_API = "https://apis.naver.com/vibeWeb/musicapiweb/vibe/v1/chart/albumChart?start=1&display=50"


def _settings(tmp_path):
    return Settings(
        output_dir=tmp_path / "album_crawl",
        tracks_dir=tmp_path / "track_crawl",
        log_dir=tmp_path / "logs",
        response_timeout=0.2,
        nav_timeout=1,
    )


def _chart(*albums):
    return FakeResponse(CHART_API, chart_payload(list(albums)))


def test_first_album_tracks_are_saved(tmp_path):
    album_url = ALBUM_URL_TEMPLATE.format(album_id=777)
    page = FakePage(
        {
            CHART_URL: [_chart(api_album(777, "꽃갈피", "아이유"), api_album(778, "Other", "X"))],
            album_url: [
                FakeResponse("https://apis.naver.com/vibeWeb/musicapiweb/album/777/info", {"info": 1}),
                FakeResponse(
                    "https://apis.naver.com/vibeWeb/musicapiweb/album/777/tracks?start=1",
                    tracks_payload(
                        [
                            {"trackTitle": "나의 옛날이야기", "artists": [{"artistName": "아이유"}]},
                            {
                                "trackTitle": "Duet",
                                "artists": [{"artistName": "아이유"}, {"artistName": "악동뮤지션"}],
                            },
                        ]
                    ),
                ),
            ],
        }
    )
    settings = _settings(tmp_path)
    result = asyncio.run(crawl_tracks(page, settings))

    assert page.visited == [CHART_URL, album_url]
    assert result is not None
    assert result.album_id == 777
    data = json.loads((settings.tracks_dir / "first_album_tracks.json").read_text(encoding="utf-8"))
    assert data["albumTitle"] == "꽃갈피"
    assert data["trackCount"] == 2
    assert data["tracks"][1]["trackArtists"] == "아이유, 악동뮤지션"

    text = format_tracklist(result)
    assert "   1. 나의 옛날이야기" in text
    assert "      (아이유, 악동뮤지션)" in text
    assert "      (아이유)" not in text


def test_empty_chart_stops_before_album_page(tmp_path):
    page = FakePage({CHART_URL: [_chart()]})
    settings = _settings(tmp_path)
    assert asyncio.run(crawl_tracks(page, settings)) is None
    assert page.visited == [CHART_URL]
    assert not (settings.tracks_dir / "first_album_tracks.json").exists()


def test_malformed_tracks_response(tmp_path):
    album_url = ALBUM_URL_TEMPLATE.format(album_id=5)
    page = FakePage(
        {
            CHART_URL: [_chart(api_album(5, "T", "A"))],
            album_url: [FakeResponse("https://apis.naver.com/x/album/5/tracks", {"response": {"result": {}}})],
        }
    )
    assert asyncio.run(crawl_tracks(page, _settings(tmp_path))) is None


def test_missing_tracks_response_times_out(tmp_path):
    page = FakePage({CHART_URL: [_chart(api_album(5, "T", "A"))]})
    assert asyncio.run(crawl_tracks(page, _settings(tmp_path))) is None
