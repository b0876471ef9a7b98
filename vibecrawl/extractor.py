#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .config import IMAGE_FALLBACK_TEMPLATE
from .models import AlbumRecord, Extraction, TrackRecord


def _observed_keys(payload: Any) -> Dict[str, List[str]]:
    keys: Dict[str, List[str]] = {}
    if isinstance(payload, dict):
        keys["top"] = sorted(str(k) for k in payload.keys())
        inner = payload.get("response")
        if isinstance(inner, dict):
            keys["response"] = sorted(str(k) for k in inner.keys())
    else:
        keys["top"] = []
    return keys


def _dig(payload: Any, path: Sequence[str]) -> Optional[Any]:
    node = payload
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


def join_artists(artists: Any) -> str:
    if not artists or not isinstance(artists, list):
        return ""
    names = []
    for artist in artists:
        if isinstance(artist, dict):
            name = artist.get("artistName")
            if name:
                names.append(str(name))
    return ", ".join(names)


def resolve_image_url(album: Dict[str, Any]) -> str:
    if album.get("albumImageUrl"):
        return str(album["albumImageUrl"])
    if album.get("imageUrl"):
        return str(album["imageUrl"])
    album_id = album.get("albumId")
    if album_id not in (None, ""):
        return IMAGE_FALLBACK_TEMPLATE.format(album_id=album_id)
    return ""


def to_album(album: Dict[str, Any], index: int) -> AlbumRecord:
    return AlbumRecord(
        index=index,
        album_id=album.get("albumId", ""),
        title=str(album.get("albumTitle") or ""),
        artist=join_artists(album.get("artists")),
        image_url=resolve_image_url(album),
    )


def extract_albums(payload: Any) -> Extraction:
    """response.result.chart.albums -> AlbumRecord list (1-based in-page index)."""
    albums = _dig(payload, ("response", "result", "chart", "albums"))
    if not isinstance(albums, list):
        return Extraction.failed("missing response.result.chart.albums", _observed_keys(payload))
    records = [to_album(a, i) for i, a in enumerate((a for a in albums if isinstance(a, dict)), start=1)]
    return Extraction(ok=True, records=records)


def extract_tracks(payload: Any) -> Extraction:
    """response.result.tracks -> TrackRecord list."""
    tracks = _dig(payload, ("response", "result", "tracks"))
    if not isinstance(tracks, list):
        return Extraction.failed("missing response.result.tracks", _observed_keys(payload))
    records = [
        TrackRecord(
            track_number=i,
            title=str(t.get("trackTitle") or ""),
            artists=join_artists(t.get("artists")),
        )
        for i, t in enumerate((t for t in tracks if isinstance(t, dict)), start=1)
    ]
    return Extraction(ok=True, records=records)


__all__ = [
    "extract_albums",
    "extract_tracks",
    "join_artists",
    "resolve_image_url",
]
