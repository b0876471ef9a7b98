#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""One-shot capture of a background API response.

A :class:`ResponseWaiter` listens on a Playwright page for the first response
accepted by its predicate and hands back the decoded JSON body. It has to be
armed before the navigation that triggers the request: the API call usually
completes before ``goto`` reports the page as idle.

    waiter = ResponseWaiter(album_chart_predicate(), timeout=30)
    waiter.arm(page)
    await navigate(page, url)
    captured = await waiter.wait()
    if captured.ok:
        ...

Timeouts and undecodable bodies are reported through :class:`Captured`
instead of being raised.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

LOG = logging.getLogger("vibecrawl.interceptor")

RESPONSE_TIMEOUT_S = 30.0

Predicate = Callable[[str, int], bool]


@dataclass
class Captured:
    ok: bool
    data: Any = None
    url: str = ""
    error: str = ""


def url_contains(fragment: str, status: int = 200) -> Predicate:
    def _match(url: str, code: int) -> bool:
        return fragment in url and code == status

    return _match


def album_chart_predicate() -> Predicate:
    return url_contains("albumChart")


def album_tracks_predicate(album_id: Any) -> Predicate:
    return url_contains(f"/album/{album_id}/tracks")


class ResponseWaiter:
    def __init__(self, predicate: Predicate, timeout: float = RESPONSE_TIMEOUT_S, label: str = "response"):
        self.predicate = predicate
        self.timeout = timeout
        self.label = label
        self._page = None
        self._future: Optional[asyncio.Future] = None
        self._matched = False
        self._task: Optional[asyncio.Task] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def armed(self) -> bool:
        return self._future is not None

    def arm(self, page) -> "ResponseWaiter":
        if self._future is not None:
            raise RuntimeError(f"ResponseWaiter for {self.label} is already armed")
        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        # the window starts here, not when wait() is reached
        self._timer = loop.call_later(self.timeout, self._expire)
        self._page = page
        page.on("response", self.handler)
        LOG.debug("Armed waiter for %s.", self.label)
        return self

    def handler(self, resp) -> None:
        if self._matched or self._future is None or self._future.done():
            return
        try:
            matched = self.predicate(resp.url, resp.status)
        except Exception as exc:
            LOG.debug("Predicate for %s raised on %s: %s", self.label, getattr(resp, "url", "?"), exc)
            return
        if not matched:
            return
        self._matched = True
        self._task = asyncio.ensure_future(self._consume(resp))

    async def _consume(self, resp) -> None:
        url = resp.url
        try:
            data = await resp.json()
        except Exception as exc:
            result = Captured(ok=False, url=url, error=f"invalid json: {exc}")
        else:
            result = Captured(ok=True, data=data, url=url)
        if self._future is not None and not self._future.done():
            self._future.set_result(result)

    def _expire(self) -> None:
        self._timer = None
        if self._future is not None and not self._future.done():
            LOG.warning("No %s response within %.0fs.", self.label, self.timeout)
            self._future.set_result(Captured(ok=False, error="timeout"))

    def _detach(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._page is None:
            return
        try:
            self._page.remove_listener("response", self.handler)
        except Exception as exc:
            LOG.debug("Could not detach waiter for %s: %s", self.label, exc)
        self._page = None

    async def wait(self) -> Captured:
        if self._future is None:
            raise RuntimeError(f"ResponseWaiter for {self.label} was never armed")
        try:
            result = await self._future
        finally:
            self._detach()
        if result.ok:
            LOG.debug("Captured %s from %s", self.label, result.url)
        return result


__all__ = [
    "Captured",
    "ResponseWaiter",
    "album_chart_predicate",
    "album_tracks_predicate",
    "url_contains",
]
