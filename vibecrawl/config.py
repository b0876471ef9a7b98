#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Runtime settings for the crawlers.

Values come from the process environment, optionally seeded from a ``.env``
file in the working directory. Relative directories are resolved against the
working directory so the crawlers behave like the scripts they replace.
"""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

BASE_URL = "https://vibe.naver.com"
CHART_URL_TEMPLATE = BASE_URL + "/new-release-album/manual?page={page}"
CHART_URL = BASE_URL + "/new-release-album/manual"
ALBUM_URL_TEMPLATE = BASE_URL + "/album/{album_id}"
IMAGE_FALLBACK_TEMPLATE = "https://music-phinf.pstatic.net/album/{album_id}.jpg"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124 Safari/537.36"
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    output_dir: pathlib.Path
    tracks_dir: pathlib.Path
    log_dir: pathlib.Path
    log_level: str = "INFO"
    page_count: int = 2
    page_size: int = 50
    batch_size: int = 10
    headless: bool = True
    response_timeout: float = 30.0
    nav_timeout: float = 60.0
    download_timeout: float = 30.0


def _resolve_dir(env_key: str, default_name: str, base: pathlib.Path) -> pathlib.Path:
    candidate = os.getenv(env_key, "").strip()
    if candidate:
        path = pathlib.Path(candidate).expanduser()
        if not path.is_absolute():
            path = base / path
        return path
    return base / default_name


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUE_VALUES


def load_settings(base_dir: Optional[pathlib.Path] = None, env_file: bool = True) -> Settings:
    base = pathlib.Path(base_dir) if base_dir is not None else pathlib.Path.cwd()
    if env_file:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
        else:
            load_dotenv()

    return Settings(
        output_dir=_resolve_dir("VIBE_OUTPUT_DIR", "album_crawl", base),
        tracks_dir=_resolve_dir("VIBE_TRACKS_DIR", "track_crawl", base),
        log_dir=_resolve_dir("LOG_DIR", "logs", base),
        log_level=(os.getenv("VIBE_LOG_LEVEL", "").strip() or "INFO").upper(),
        page_count=_env_int("VIBE_PAGE_COUNT", 2),
        page_size=_env_int("VIBE_PAGE_SIZE", 50),
        batch_size=_env_int("VIBE_BATCH_SIZE", 10),
        headless=_env_bool("VIBE_HEADLESS", True),
        response_timeout=_env_float("VIBE_RESPONSE_TIMEOUT", 30.0),
        nav_timeout=_env_float("VIBE_NAV_TIMEOUT", 60.0),
        download_timeout=_env_float("VIBE_DOWNLOAD_TIMEOUT", 30.0),
    )


__all__ = [
    "ALBUM_URL_TEMPLATE",
    "CHART_URL",
    "CHART_URL_TEMPLATE",
    "IMAGE_FALLBACK_TEMPLATE",
    "Settings",
    "USER_AGENT",
    "load_settings",
]
