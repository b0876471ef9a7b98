#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from tqdm import tqdm

LOG = logging.getLogger("vibecrawl.batch")

BATCH_SIZE = 10

Job = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class BatchProgress:
    completed: int
    total: int

    @property
    def percent(self) -> int:
        if not self.total:
            return 100
        return round(self.completed / self.total * 100)


@dataclass
class BatchReport:
    results: List[Any] = field(default_factory=list)
    failures: List[Tuple[int, BaseException]] = field(default_factory=list)
    progress: List[BatchProgress] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.results) - len(self.failures)


async def run_in_batches(
    jobs: Sequence[Job],
    batch_size: int = BATCH_SIZE,
    desc: str = "Saving",
    on_progress: Optional[Callable[[BatchProgress], None]] = None,
    show_bar: bool = True,
) -> BatchReport:
    """Run ``jobs`` ``batch_size`` at a time; a group starts once the previous one settled.

    Failed jobs leave their exception in ``results`` and are listed in ``failures``.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    total = len(jobs)
    report = BatchReport()
    bar = tqdm(total=total, ncols=80, desc=desc, disable=not show_bar)
    try:
        for start in range(0, total, batch_size):
            group = jobs[start : start + batch_size]
            outcomes = await asyncio.gather(*(job() for job in group), return_exceptions=True)
            for offset, outcome in enumerate(outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    LOG.warning("Job %d failed: %s", start + offset + 1, outcome)
                    report.failures.append((start + offset, outcome))
                report.results.append(outcome)

            progress = BatchProgress(completed=len(report.results), total=total)
            report.progress.append(progress)
            bar.update(len(group))
            LOG.info("%s: %d%% (%d/%d)", desc, progress.percent, progress.completed, progress.total)
            if on_progress is not None:
                on_progress(progress)
    finally:
        bar.close()
    return report


__all__ = ["BATCH_SIZE", "BatchProgress", "BatchReport", "run_in_batches"]
