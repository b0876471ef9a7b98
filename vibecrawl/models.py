#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

PAGE_SIZE = 50

AlbumId = Union[str, int]


@dataclass(frozen=True)
class AlbumRecord:
    index: int
    album_id: AlbumId
    title: str
    artist: str
    image_url: str

    def source_page(self, page_size: int = PAGE_SIZE) -> int:
        return math.ceil(self.index / page_size)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "albumId": self.album_id,
            "title": self.title,
            "artist": self.artist,
            "img": self.image_url,
        }

    def info_dict(self) -> Dict[str, Any]:
        return {
            "albumId": self.album_id,
            "title": self.title,
            "artist": self.artist,
            "imageUrl": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AlbumRecord":
        return cls(
            index=int(data.get("index") or 0),
            album_id=data.get("albumId", ""),
            title=str(data.get("title") or ""),
            artist=str(data.get("artist") or ""),
            image_url=str(data.get("img") or data.get("imageUrl") or ""),
        )


@dataclass(frozen=True)
class TrackRecord:
    track_number: int
    title: str
    artists: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trackNumber": self.track_number,
            "trackTitle": self.title,
            "trackArtists": self.artists,
        }


@dataclass(frozen=True)
class AlbumTracks:
    album_id: AlbumId
    album_title: str
    artist: str
    tracks: Tuple[TrackRecord, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "albumId": self.album_id,
            "albumTitle": self.album_title,
            "artist": self.artist,
            "trackCount": len(self.tracks),
            "tracks": [t.to_dict() for t in self.tracks],
        }


@dataclass
class Extraction:
    """Outcome of mapping an API payload onto records."""

    ok: bool
    records: List[Any] = field(default_factory=list)
    reason: str = ""
    keys: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def failed(cls, reason: str, keys: Dict[str, List[str]]) -> "Extraction":
        return cls(ok=False, reason=reason, keys=keys)


def globalize(records: List[AlbumRecord], page: int, page_size: int = PAGE_SIZE) -> List[AlbumRecord]:
    """Renumber in-page indices so ``source_page`` recovers ``page``."""
    offset = (page - 1) * page_size
    return [
        AlbumRecord(
            index=offset + r.index,
            album_id=r.album_id,
            title=r.title,
            artist=r.artist,
            image_url=r.image_url,
        )
        for r in records
    ]
