#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""On-disk layout of a crawl run.

    {root}/albums.json                    every page, global indices
    {root}/page_{n}/albums.json           one page, in-page indices
    {root}/page_{n}/{position}/info.json
    {root}/page_{n}/{position}/album.jpg

Every write overwrites; nothing is merged with a previous run.
"""

from __future__ import annotations

import json
import logging
import pathlib
import shutil
from typing import Any, List

from .models import AlbumRecord, AlbumTracks

LOG = logging.getLogger("vibecrawl.storage")

AGGREGATE_NAME = "albums.json"
INFO_NAME = "info.json"
IMAGE_NAME = "album.jpg"
TRACKS_NAME = "first_album_tracks.json"


def page_dir(root: pathlib.Path, page: int) -> pathlib.Path:
    path = pathlib.Path(root) / f"page_{page}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def reset_page_dir(root: pathlib.Path, page: int) -> pathlib.Path:
    """Drop whatever a previous run left under page_{n}."""
    path = pathlib.Path(root) / f"page_{page}"
    if path.exists():
        LOG.debug("Clearing %s", path)
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def album_dir(root: pathlib.Path, page: int, position: int) -> pathlib.Path:
    path = page_dir(root, page) / str(position)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json(path: pathlib.Path, obj: Any) -> pathlib.Path:
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def save_album_info(directory: pathlib.Path, album: AlbumRecord) -> pathlib.Path:
    return write_json(pathlib.Path(directory) / INFO_NAME, album.info_dict())


def save_page_albums(root: pathlib.Path, page: int, albums: List[AlbumRecord]) -> pathlib.Path:
    return write_json(page_dir(root, page) / AGGREGATE_NAME, [a.to_dict() for a in albums])


def save_aggregate(root: pathlib.Path, albums: List[AlbumRecord]) -> pathlib.Path:
    path = write_json(pathlib.Path(root) / AGGREGATE_NAME, [a.to_dict() for a in albums])
    LOG.info("Wrote %d albums to %s", len(albums), path)
    return path


def save_album_tracks(root: pathlib.Path, result: AlbumTracks) -> pathlib.Path:
    return write_json(pathlib.Path(root) / TRACKS_NAME, result.to_dict())


def load_albums(path: pathlib.Path) -> List[AlbumRecord]:
    data = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of albums")
    return [AlbumRecord.from_dict(item) for item in data if isinstance(item, dict)]


__all__ = [
    "IMAGE_NAME",
    "album_dir",
    "load_albums",
    "page_dir",
    "reset_page_dir",
    "save_aggregate",
    "save_album_info",
    "save_album_tracks",
    "save_page_albums",
    "write_json",
]
