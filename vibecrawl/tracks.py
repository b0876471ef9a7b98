#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Crawls the track list of the first album on the VIBE new-release chart.

from __future__ import annotations

import asyncio
import logging
import sys
from typing import List, Optional

from . import storage
from .config import ALBUM_URL_TEMPLATE, CHART_URL, Settings, load_settings
from .extractor import extract_albums, extract_tracks
from .interceptor import ResponseWaiter, album_chart_predicate, album_tracks_predicate
from .logs import setup_logging
from .models import AlbumRecord, AlbumTracks, TrackRecord
from .navigator import browser_session, navigate

LOG = logging.getLogger("vibecrawl.tracks")


async def first_chart_album(page, settings: Settings) -> Optional[AlbumRecord]:
    waiter = ResponseWaiter(album_chart_predicate(), timeout=settings.response_timeout, label="albumChart")
    waiter.arm(page)
    await navigate(page, CHART_URL, timeout=settings.nav_timeout)
    captured = await waiter.wait()
    if not captured.ok:
        LOG.error("Album chart response not captured (%s).", captured.error)
        return None
    extraction = extract_albums(captured.data)
    if not extraction.ok:
        LOG.error("Unexpected album chart shape (%s); keys=%s", extraction.reason, extraction.keys)
        return None
    if not extraction.records:
        LOG.error("The album chart is empty.")
        return None
    album = extraction.records[0]
    LOG.info("First album: %s - %s (id %s)", album.title, album.artist, album.album_id)
    return album


async def album_tracks(page, album: AlbumRecord, settings: Settings) -> Optional[List[TrackRecord]]:
    # Must run on the page that loaded the chart.
    waiter = ResponseWaiter(
        album_tracks_predicate(album.album_id), timeout=settings.response_timeout, label="album tracks"
    )
    waiter.arm(page)
    await navigate(page, ALBUM_URL_TEMPLATE.format(album_id=album.album_id), timeout=settings.nav_timeout)
    captured = await waiter.wait()
    if not captured.ok:
        LOG.error("Track list response not captured (%s).", captured.error)
        return None
    extraction = extract_tracks(captured.data)
    if not extraction.ok:
        LOG.error("Unexpected track list shape (%s); keys=%s", extraction.reason, extraction.keys)
        return None
    if not extraction.records:
        LOG.error("Album %s has no tracks.", album.album_id)
        return None
    return extraction.records


def format_tracklist(result: AlbumTracks) -> str:
    line = "=" * 60
    out = [
        line,
        f"Title: {result.album_title}",
        f"Artist: {result.artist}",
        f"{len(result.tracks)} tracks",
        line,
    ]
    for track in result.tracks:
        out.append(f"   {track.track_number}. {track.title}")
        # Featured artists only when they differ from the album artist.
        if track.artists and track.artists != result.artist:
            out.append(f"      ({track.artists})")
    out.append(line)
    return "\n".join(out)


async def crawl_tracks(page, settings: Settings) -> Optional[AlbumTracks]:
    album = await first_chart_album(page, settings)
    if album is None:
        return None
    tracks = await album_tracks(page, album, settings)
    if tracks is None:
        return None
    result = AlbumTracks(
        album_id=album.album_id,
        album_title=album.title,
        artist=album.artist,
        tracks=tuple(tracks),
    )
    path = storage.save_album_tracks(settings.tracks_dir, result)
    LOG.info("Saved %d tracks to %s", len(tracks), path)
    return result


async def _run(settings: Settings) -> Optional[AlbumTracks]:
    async with browser_session(headless=settings.headless, monitor=True) as page:
        return await crawl_tracks(page, settings)


def main() -> int:
    settings = load_settings()
    setup_logging(settings.log_dir, settings.log_level)
    try:
        result = asyncio.run(_run(settings))
    except Exception:
        LOG.exception("Track crawl aborted.")
        return 1
    if result is not None:
        print(format_tracklist(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
