from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional, Protocol


class LogSink(Protocol):
    """What the core needs from a logger. ``logging.Logger`` satisfies it."""

    def info(self, msg: str, *args: Any) -> None:
        ...

    def debug(self, msg: str, *args: Any) -> None:
        ...

    def warning(self, msg: str, *args: Any) -> None:
        ...


def log_callback(log: LogSink) -> Callable[[str, bool], None]:
    """Adapt a sink to the retriever's ``(message, is_debug)`` callback."""

    def _cb(message: str, debug: bool) -> None:
        if debug:
            log.debug("%s", message)
        else:
            log.info("%s", message)

    return _cb


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Configure root logging once.

    Returns the log file in use, or None when logging to the console only.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_teamcity_sdk_configured", False):
        return getattr(logger, "_teamcity_sdk_log_path", log_path)

    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    if log_path:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(fmt)
        handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_teamcity_sdk_configured", True)
    setattr(logger, "_teamcity_sdk_log_path", log_path)

    logging.getLogger(__name__).debug("Logging initialized (file=%s)", log_path)
    return log_path
