"""Logging setup for the fixer: console, rotating files, and warning rate limiting."""

import logging
import threading
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAIN_LOG_FILE = "fixer.log"
MATCH_LOG_FILE = "matches.log"
MATCH_LOGGER = "editor.locator"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str | Path] = None,
    console_enabled: bool = True,
) -> None:
    """Configure the root logger and the locator's match log.

    Safe to call more than once; earlier handlers are replaced.

    Args:
        level: Level for the console and ``fixer.log``.
        log_dir: Directory for log files. Defaults to ./data/logs.
        console_enabled: Also log to stderr.
    """
    log_dir = Path(log_dir or "./data/logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_dir / MAIN_LOG_FILE, level, formatter))

    # Tier and confidence of every located snippet, whatever the root level
    match_logger = logging.getLogger(MATCH_LOGGER)
    match_logger.setLevel(logging.DEBUG)
    match_logger.handlers.clear()
    match_logger.addHandler(_rotating_handler(log_dir / MATCH_LOG_FILE, logging.DEBUG, formatter))

    logging.getLogger(__name__).debug("Logging initialized: level=%s, dir=%s", level, log_dir)


class RateLimitedLogger:
    """Suppresses repeats of the same warning key inside a time window.

    Suppressed repeats are counted and reported with the next emission
    of that key.
    """

    def __init__(
        self,
        logger: logging.Logger,
        window_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._logger = logger
        self._window = window_seconds
        self._clock = clock
        self._last_emitted: dict[str, float] = {}
        self._suppressed: dict[str, int] = {}
        self._lock = threading.Lock()

    def warning(self, key: str, msg: str, *args) -> bool:
        """Log ``msg`` at WARNING unless ``key`` was logged within the window.

        Returns:
            True if the message was emitted, False if it was suppressed.
        """
        with self._lock:
            now = self._clock()
            last = self._last_emitted.get(key)
            if last is not None and now - last < self._window:
                self._suppressed[key] = self._suppressed.get(key, 0) + 1
                return False
            suppressed = self._suppressed.pop(key, 0)
            self._prune(now)
            self._last_emitted[key] = now

        if suppressed:
            msg = f"{msg} (suppressed {suppressed} similar)"
        self._logger.warning(msg, *args)
        return True

    def suppressed_count(self, key: str) -> int:
        return self._suppressed.get(key, 0)

    def tracked_keys(self) -> int:
        return len(self._last_emitted)

    def _prune(self, now: float) -> None:
        """Forget keys whose window has closed. Caller holds the lock."""
        stale = [k for k, last in self._last_emitted.items() if now - last >= self._window]
        for k in stale:
            del self._last_emitted[k]
            self._suppressed.pop(k, None)
