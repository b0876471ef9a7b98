import asyncio

import pytest
from fakes import FakeHTTPResponse, FakeSession

from vibecrawl.downloader import DownloadError, download_image, fetch_to_file

ASSET = "https://music-phinf.pstatic.net/album/1.jpg"
BODY = b"\xff\xd8\xff\xe0 jpeg body \xff\xd9"


def test_follows_redirect_chain(tmp_path):
    session = FakeSession(
        {
            "http://img.example/a": FakeHTTPResponse(301, headers={"Location": "https://img.example/b"}),
            "https://img.example/b": FakeHTTPResponse(302, headers={"Location": ASSET}),
            ASSET: FakeHTTPResponse(200, BODY),
        }
    )
    redirected = download_image("http://img.example/a", tmp_path / "redirected.jpg", session=session)
    assert session.requested == ["http://img.example/a", "https://img.example/b", ASSET]

    direct_session = FakeSession({ASSET: FakeHTTPResponse(200, BODY)})
    direct = download_image(ASSET, tmp_path / "direct.jpg", session=direct_session)
    assert redirected.read_bytes() == direct.read_bytes() == BODY


def test_relative_location_is_resolved(tmp_path):
    session = FakeSession(
        {
            "https://img.example/old/1.jpg": FakeHTTPResponse(302, headers={"location": "/new/1.jpg"}),
            "https://img.example/new/1.jpg": FakeHTTPResponse(200, BODY),
        }
    )
    download_image("https://img.example/old/1.jpg", tmp_path / "x.jpg", session=session)
    assert session.requested[-1] == "https://img.example/new/1.jpg"


def test_stream_error_removes_partial_file(tmp_path):
    dest = tmp_path / "album.jpg"
    session = FakeSession({ASSET: FakeHTTPResponse(200, BODY, fail_after=8)})
    with pytest.raises(DownloadError):
        download_image(ASSET, dest, session=session)
    assert not dest.exists()


def test_http_errors(tmp_path):
    session = FakeSession({ASSET: FakeHTTPResponse(404)})
    with pytest.raises(DownloadError, match="404"):
        download_image(ASSET, tmp_path / "a.jpg", session=session)
    with pytest.raises(DownloadError):
        download_image("https://unknown.example/x.jpg", tmp_path / "b.jpg", session=session)
    with pytest.raises(DownloadError):
        download_image("", tmp_path / "c.jpg", session=session)
    assert not (tmp_path / "a.jpg").exists()


def test_redirect_loop_and_missing_location(tmp_path):
    loop = FakeSession({ASSET: FakeHTTPResponse(302, headers={"Location": ASSET})})
    with pytest.raises(DownloadError, match="too many redirects"):
        download_image(ASSET, tmp_path / "a.jpg", session=loop, max_redirects=3)
    assert len(loop.requested) == 4

    bare = FakeSession({ASSET: FakeHTTPResponse(301)})
    with pytest.raises(DownloadError, match="without Location"):
        download_image(ASSET, tmp_path / "b.jpg", session=bare)


def test_fetch_to_file_runs_in_thread(tmp_path):
    session = FakeSession({ASSET: FakeHTTPResponse(200, BODY)})
    path = asyncio.run(fetch_to_file(ASSET, tmp_path / "album.jpg", session=session))
    assert path.read_bytes() == BODY
