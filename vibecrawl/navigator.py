#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import USER_AGENT

LOG = logging.getLogger("vibecrawl.navigator")

NAV_TIMEOUT_S = 60.0
API_HOST_HINT = "apis.naver.com"


class NavigationError(RuntimeError):
    pass


async def navigate_or_raise(page: Page, url: str, timeout: float = NAV_TIMEOUT_S) -> None:
    """Load ``url`` and wait until the network has been idle."""
    try:
        await page.goto(url, wait_until="networkidle", timeout=timeout * 1000)
    except PlaywrightTimeoutError as exc:
        raise NavigationError(f"Timed out after {timeout:.0f}s loading {url}") from exc
    except PlaywrightError as exc:
        raise NavigationError(f"Navigation to {url} failed: {exc}") from exc


async def navigate(page: Page, url: str, timeout: float = NAV_TIMEOUT_S) -> bool:
    try:
        await navigate_or_raise(page, url, timeout=timeout)
    except NavigationError as exc:
        LOG.warning("%s", exc)
        return False
    return True


def attach_api_monitor(page: Page) -> None:
    """Log every album API response the page receives (DEBUG level)."""

    def _on_response(resp) -> None:
        url = resp.url
        if API_HOST_HINT in url and "album" in url:
            LOG.debug("API response %s %s", resp.status, url)

    page.on("response", _on_response)


@contextlib.asynccontextmanager
async def browser_session(headless: bool = True, monitor: bool = False) -> AsyncIterator[Page]:
    """Single Chromium page reused for every navigation of a run."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        ctx = await browser.new_context(user_agent=USER_AGENT, locale="ko-KR")
        try:
            page = await ctx.new_page()
            if monitor:
                attach_api_monitor(page)
            yield page
        finally:
            await ctx.close()
            await browser.close()


__all__ = [
    "NavigationError",
    "attach_api_monitor",
    "browser_session",
    "navigate",
    "navigate_or_raise",
]
