#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import logging
import os
import pathlib
from logging.handlers import RotatingFileHandler
from typing import Optional

ROOT_LOGGER = "vibecrawl"
LOG_FILE = "vibecrawl.log"


def setup_logging(log_dir: pathlib.Path, level: str = "INFO") -> pathlib.Path:
    """Route crawler logs to the terminal and to ``{log_dir}/vibecrawl.log``.

    The terminal shows records at ``level`` and above from every logger. The
    file keeps everything down to DEBUG, but only from the ``vibecrawl`` tree,
    and rolls over at 2 MiB keeping five old files. Calling this again reuses
    the handlers already on the root logger, so repeated CLI runs in one
    process never double up lines. Returns the log file path.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for noisy in ("urllib3", "asyncio", "requests"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(ROOT_LOGGER).setLevel(logging.DEBUG)

    # terminal: reuse a plain StreamHandler, not a subclass such as a file handler
    console: Optional[logging.StreamHandler] = None
    for handler in root.handlers:
        if type(handler) is logging.StreamHandler:
            console = handler
            break
    if console is None:
        console = logging.StreamHandler()
        root.addHandler(console)
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    console.setFormatter(fmt)

    # crawl log: matched by absolute path so a second call finds it
    file_handler: Optional[RotatingFileHandler] = None
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and getattr(handler, "baseFilename", None) == os.path.abspath(log_path):
            file_handler = handler
            break
    if file_handler is None:
        file_handler = RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8")
        root.addHandler(file_handler)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(fmt)
    file_handler.filters.clear()
    file_handler.addFilter(logging.Filter(ROOT_LOGGER))
    return log_path
