#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Crawls the VIBE new-release album chart: titles, artists and cover images.

from __future__ import annotations

import asyncio
import logging
import pathlib
import sys
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

import requests

from . import storage
from .batch import run_in_batches
from .config import CHART_URL_TEMPLATE, Settings, load_settings
from .downloader import DownloadError, fetch_to_file
from .extractor import extract_albums
from .interceptor import ResponseWaiter, album_chart_predicate
from .logs import setup_logging
from .models import AlbumRecord, globalize
from .navigator import browser_session, navigate

LOG = logging.getLogger("vibecrawl.albums")

Fetch = Callable[[str, pathlib.Path], Awaitable[object]]


@dataclass
class CrawlSummary:
    albums: List[AlbumRecord] = field(default_factory=list)
    pages_done: List[int] = field(default_factory=list)
    pages_failed: List[int] = field(default_factory=list)
    images_failed: int = 0
    aggregate_path: Optional[pathlib.Path] = None


async def fetch_chart(page, page_num: int, settings: Settings) -> Optional[List[AlbumRecord]]:
    """Arm the chart waiter, load the chart page and extract its albums."""
    waiter = ResponseWaiter(
        album_chart_predicate(), timeout=settings.response_timeout, label=f"albumChart page {page_num}"
    )
    waiter.arm(page)
    url = CHART_URL_TEMPLATE.format(page=page_num)
    LOG.info("Loading %s", url)
    if not await navigate(page, url, timeout=settings.nav_timeout):
        # The chart may already have been captured before the page went idle.
        LOG.debug("Navigation did not settle; checking for a captured response anyway.")
    captured = await waiter.wait()
    if not captured.ok:
        LOG.warning("Page %d: no chart response (%s).", page_num, captured.error)
        return None

    extraction = extract_albums(captured.data)
    if not extraction.ok:
        LOG.warning("Page %d: unexpected API shape (%s); keys=%s", page_num, extraction.reason, extraction.keys)
        return None
    LOG.info("Page %d: API returned %d albums.", page_num, len(extraction.records))
    return extraction.records


async def save_album(
    album: AlbumRecord,
    directory: pathlib.Path,
    fetch: Fetch,
) -> bool:
    """Download the cover (best effort) and always write info.json."""
    image_ok = False
    if album.image_url:
        try:
            await fetch(album.image_url, directory / storage.IMAGE_NAME)
            image_ok = True
        except DownloadError as exc:
            LOG.debug("Album %s: image skipped (%s).", album.album_id, exc)
    storage.save_album_info(directory, album)
    return image_ok


async def save_chart_page(
    albums: List[AlbumRecord],
    page_num: int,
    settings: Settings,
    fetch: Fetch,
) -> int:
    """Persist one page; returns the number of covers that could not be saved."""
    root = settings.output_dir
    storage.reset_page_dir(root, page_num)
    jobs = []
    for position, album in enumerate(albums, start=1):
        directory = storage.album_dir(root, page_num, position)
        jobs.append(lambda album=album, directory=directory: save_album(album, directory, fetch))

    report = await run_in_batches(jobs, batch_size=settings.batch_size, desc=f"Page {page_num}")
    storage.save_page_albums(root, page_num, albums)
    missing = sum(1 for r in report.results if r is not True)
    if missing:
        LOG.warning("Page %d: %d/%d covers missing.", page_num, missing, len(albums))
    return missing


async def crawl_albums(page, settings: Settings, fetch: Optional[Fetch] = None) -> CrawlSummary:
    summary = CrawlSummary()
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    session = None
    if fetch is None:
        session = requests.Session()

        async def fetch(url: str, dest: pathlib.Path):
            return await fetch_to_file(url, dest, session=session, timeout=settings.download_timeout)

    try:
        for page_num in range(1, settings.page_count + 1):
            LOG.info("=== Page %d ===", page_num)
            try:
                albums = await fetch_chart(page, page_num, settings)
                if albums is None:
                    summary.pages_failed.append(page_num)
                    continue
                summary.images_failed += await save_chart_page(albums, page_num, settings, fetch)
                summary.albums.extend(globalize(albums, page_num, settings.page_size))
                summary.pages_done.append(page_num)
                LOG.info("Page %d done.", page_num)
            except Exception:
                LOG.exception("Page %d failed.", page_num)
                summary.pages_failed.append(page_num)
    finally:
        if session is not None:
            session.close()

    summary.aggregate_path = storage.save_aggregate(settings.output_dir, summary.albums)
    return summary


async def _run(settings: Settings) -> CrawlSummary:
    async with browser_session(headless=settings.headless) as page:
        return await crawl_albums(page, settings)


def main() -> int:
    settings = load_settings()
    setup_logging(settings.log_dir, settings.log_level)
    started = time.monotonic()
    try:
        summary = asyncio.run(_run(settings))
    except Exception:
        LOG.exception("Album crawl aborted.")
        return 1
    LOG.info(
        "Saved %d albums from pages %s in %.1fs -> %s",
        len(summary.albums),
        summary.pages_done or "none",
        time.monotonic() - started,
        settings.output_dir,
    )
    if summary.pages_failed:
        LOG.warning("Skipped pages: %s", summary.pages_failed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
