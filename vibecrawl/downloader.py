#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import asyncio
import logging
import pathlib
from typing import Optional
from urllib.parse import urljoin

import requests

from .config import USER_AGENT

LOG = logging.getLogger("vibecrawl.downloader")

DOWNLOAD_TIMEOUT_S = 30.0
MAX_REDIRECTS = 5
REDIRECT_CODES = {301, 302, 303, 307, 308}
CHUNK_SIZE = 64 * 1024

HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}


class DownloadError(Exception):
    pass


def _remove_partial(dest: pathlib.Path) -> None:
    try:
        dest.unlink(missing_ok=True)
    except OSError as exc:
        LOG.debug("Could not remove partial file %s: %s", dest, exc)


def download_image(
    url: str,
    dest: pathlib.Path,
    session: Optional[requests.Session] = None,
    timeout: float = DOWNLOAD_TIMEOUT_S,
    max_redirects: int = MAX_REDIRECTS,
) -> pathlib.Path:
    """Fetch ``url`` into ``dest``, following redirects by hand.

    A partially written file is removed before :class:`DownloadError` is raised.
    """
    if not url:
        raise DownloadError("empty url")
    dest = pathlib.Path(dest)
    http = session or requests.Session()
    current = url
    try:
        for _ in range(max_redirects + 1):
            try:
                resp = http.get(current, headers=HEADERS, timeout=timeout, stream=True, allow_redirects=False)
            except requests.RequestException as exc:
                raise DownloadError(f"request to {current} failed: {exc}") from exc

            with resp:
                if resp.status_code in REDIRECT_CODES:
                    location = resp.headers.get("Location") or resp.headers.get("location")
                    if not location:
                        raise DownloadError(f"{resp.status_code} from {current} without Location")
                    LOG.debug("Redirect %s: %s -> %s", resp.status_code, current, location)
                    current = urljoin(current, location)
                    continue
                if resp.status_code != 200:
                    raise DownloadError(f"HTTP {resp.status_code} for {current}")
                try:
                    with dest.open("wb") as fh:
                        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                            if chunk:
                                fh.write(chunk)
                except (OSError, requests.RequestException) as exc:
                    _remove_partial(dest)
                    raise DownloadError(f"writing {dest.name} from {current} failed: {exc}") from exc
                return dest
        raise DownloadError(f"too many redirects starting at {url}")
    finally:
        if session is None:
            http.close()


async def fetch_to_file(
    url: str,
    dest: pathlib.Path,
    session: Optional[requests.Session] = None,
    timeout: float = DOWNLOAD_TIMEOUT_S,
) -> pathlib.Path:
    return await asyncio.to_thread(download_image, url, dest, session, timeout)


__all__ = ["DownloadError", "download_image", "fetch_to_file"]
