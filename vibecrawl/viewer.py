#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Search and render the harvested album list.

The viewer state is an immutable :class:`AppState`; every transition returns
a new state and :func:`render` depends only on ``filtered`` and ``view_mode``.
Run ``vibe-viewer --query ㅇㅇㅇ --view list`` to write an HTML fragment of the
matching albums.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import html
import logging
import pathlib
import random
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .models import PAGE_SIZE, AlbumRecord
from .search import match_search
from .storage import load_albums

LOG = logging.getLogger("vibecrawl.viewer")

DEFAULT_DATA = pathlib.Path("data") / "albums.json"
DEBOUNCE_S = 0.2
ALL_PAGES = "all"
PLACEHOLDER_IMG = "https://via.placeholder.com/300x300/667eea/ffffff?text={text}"

DEMO_ARTISTS = ("아이유", "방탄소년단", "블랙핑크", "뉴진스", "세븐틴", "트와이스", "강승윤", "악동뮤지션")
DEMO_TITLES = ("Love Dive", "Antifragile", "OMG", "Ditto", "Hype Boy", "Attention", "PAGE 2", "MY Lover")


class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"


@dataclass(frozen=True)
class AppState:
    all_records: Tuple[AlbumRecord, ...] = ()
    filtered: Tuple[AlbumRecord, ...] = ()
    view_mode: ViewMode = ViewMode.GRID
    query: str = ""
    page_filter: str = ALL_PAGES
    demo: bool = False


def generate_demo_data(pages: int = 2, page_size: int = PAGE_SIZE, seed: int = 0) -> List[AlbumRecord]:
    rng = random.Random(seed)
    out: List[AlbumRecord] = []
    for index in range(1, pages * page_size + 1):
        out.append(
            AlbumRecord(
                index=index,
                album_id=35000000 + index,
                title=f"{rng.choice(DEMO_TITLES)} {index}",
                artist=rng.choice(DEMO_ARTISTS),
                image_url=PLACEHOLDER_IMG.format(text=f"Album+{index}"),
            )
        )
    return out


def load_state(path: pathlib.Path = DEFAULT_DATA) -> AppState:
    """Load the aggregate file, falling back to demo records."""
    try:
        records = load_albums(path)
    except (OSError, ValueError) as exc:
        LOG.warning("Could not load %s (%s); using demo data.", path, exc)
        records = generate_demo_data()
        demo = True
    else:
        LOG.info("Loaded %d albums from %s", len(records), path)
        demo = False
    data = tuple(records)
    return AppState(all_records=data, filtered=data, demo=demo)


def record_matches(record: AlbumRecord, query: str) -> bool:
    return match_search(record.title, query) or match_search(record.artist, query)


def normalize_page_filter(page_filter: Optional[str]) -> str:
    """Anything that is not a page number falls back to every page."""
    value = str(page_filter or ALL_PAGES).strip()
    if value == ALL_PAGES or value.isdigit():
        return value
    LOG.warning("Ignoring page filter %r; showing all pages.", page_filter)
    return ALL_PAGES


def filter_records(
    records: Sequence[AlbumRecord],
    query: str = "",
    page_filter: str = ALL_PAGES,
    page_size: int = PAGE_SIZE,
) -> Tuple[AlbumRecord, ...]:
    query = (query or "").strip()
    out = [r for r in records if record_matches(r, query)] if query else list(records)
    page_filter = normalize_page_filter(page_filter)
    if page_filter != ALL_PAGES:
        wanted = int(page_filter)
        out = [r for r in out if r.source_page(page_size) == wanted]
    return tuple(out)


def apply_filters(state: AppState, query: Optional[str] = None, page_filter: Optional[str] = None) -> AppState:
    query = state.query if query is None else query.strip()
    page_filter = state.page_filter if page_filter is None else normalize_page_filter(page_filter)
    return dataclasses.replace(
        state,
        query=query,
        page_filter=page_filter,
        filtered=filter_records(state.all_records, query, page_filter),
    )


def set_view(state: AppState, mode: Any) -> AppState:
    return dataclasses.replace(state, view_mode=ViewMode(mode))


def collect_stats(records: Sequence[AlbumRecord]) -> Dict[str, int]:
    return {
        "totalAlbums": len(records),
        "totalArtists": len({r.artist for r in records}),
    }


def album_card(record: AlbumRecord) -> str:
    e = html.escape
    return (
        f'<div class="album-card" data-album-id="{e(str(record.album_id))}">'
        f'<img src="{e(record.image_url)}" alt="{e(record.title)}" class="album-image" loading="lazy">'
        f'<div class="album-info">'
        f'<div class="album-title" title="{e(record.title)}">{e(record.title)}</div>'
        f'<div class="album-artist">{e(record.artist)}</div>'
        f'<span class="album-page">Page {record.source_page()}</span>'
        f"</div></div>"
    )


def render(state: AppState) -> str:
    if not state.filtered:
        return '<div id="noResults" class="no-results">No albums found.</div>'
    css = "album-grid list-view" if state.view_mode is ViewMode.LIST else "album-grid"
    cards = "\n".join(album_card(r) for r in state.filtered)
    return f'<div id="albumGrid" class="{css}">\n{cards}\n</div>'


def album_detail(record: AlbumRecord) -> str:
    return "\n".join(
        [
            "Album",
            "",
            f"Title: {record.title}",
            f"Artist: {record.artist}",
            f"Album ID: {record.album_id}",
            f"Page: {record.source_page()}",
        ]
    )


class Debouncer:
    """Trailing-edge debounce on the running event loop."""

    def __init__(self, callback: Callable[..., Any], delay: float = DEBOUNCE_S):
        self.callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def _fire(self, args: Tuple[Any, ...]) -> None:
        self._handle = None
        self.callback(*args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search the crawled album list and render it as HTML.")
    parser.add_argument("--data", type=pathlib.Path, default=DEFAULT_DATA, help="aggregate albums.json")
    parser.add_argument("--query", default="", help="search text (title or artist, 초성 supported)")
    parser.add_argument("--page", default=ALL_PAGES, help="source page number or 'all'")
    parser.add_argument("--view", choices=[m.value for m in ViewMode], default=ViewMode.GRID.value)
    parser.add_argument("--out", type=pathlib.Path, help="write HTML here instead of stdout")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = _parse_args(argv)
    if args.page != ALL_PAGES and not str(args.page).isdigit():
        LOG.error("--page must be a number or '%s'", ALL_PAGES)
        return 2

    state = load_state(args.data)
    state = set_view(apply_filters(state, query=args.query, page_filter=args.page), args.view)
    stats = collect_stats(state.all_records)
    LOG.info(
        "%d/%d albums match (%d artists overall).",
        len(state.filtered),
        stats["totalAlbums"],
        stats["totalArtists"],
    )

    output = render(state)
    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(output, encoding="utf-8")
        LOG.info("Wrote %s", args.out)
    else:
        sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
