"""Telemetry sinks for match and apply events."""

import logging
import time
from typing import Callable, Optional, Protocol, runtime_checkable

from config.logging_config import RateLimitedLogger
from models.chapter import Chapter
from models.fix import Fix
from models.results import MatchResult

logger = logging.getLogger(__name__)
match_logger = logging.getLogger("editor.locator")


def _preview(text: str, limit: int = 80) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit] + "..."


@runtime_checkable
class FixTelemetry(Protocol):
    """Protocol for observing the engine.

    Implement this protocol to collect match tiers, confidences and
    per-fix outcomes.
    """

    def on_match(self, snippet: str, match: MatchResult) -> None:
        """Called when the locator finds a span for ``snippet``."""
        ...

    def on_not_found(self, snippet: str) -> None:
        """Called when every locator tier failed."""
        ...

    def on_applied(self, chapter: Chapter, fix: Fix) -> None:
        """Called after a fix changed chapter content."""
        ...

    def on_failed(self, chapter: Optional[Chapter], fix: Fix) -> None:
        """Called with the failed fix record (``failure_reason`` set)."""
        ...

    def warn(self, key: str, message: str, *args) -> None:
        """Non-fatal warning; repeated keys may be suppressed."""
        ...


class NullTelemetry:
    """Discards every event."""

    def on_match(self, snippet: str, match: MatchResult) -> None:
        pass

    def on_not_found(self, snippet: str) -> None:
        pass

    def on_applied(self, chapter: Chapter, fix: Fix) -> None:
        pass

    def on_failed(self, chapter: Optional[Chapter], fix: Fix) -> None:
        pass

    def warn(self, key: str, message: str, *args) -> None:
        pass


class LoggingTelemetry:
    """Logs events to the standard logger, rate-limiting repeated warnings."""

    def __init__(
        self,
        window_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._warnings = RateLimitedLogger(logger, window_seconds=window_seconds, clock=clock)

    def on_match(self, snippet: str, match: MatchResult) -> None:
        match_logger.debug(
            "Located [%d:%d) via %s (confidence=%.2f): %r",
            match.start, match.end, match.tier.value, match.confidence, _preview(snippet),
        )

    def on_not_found(self, snippet: str) -> None:
        match_logger.debug("No tier located snippet (%d chars): %r", len(snippet), _preview(snippet))

    def on_applied(self, chapter: Chapter, fix: Fix) -> None:
        logger.info("Applied fix %s to chapter %d", fix.id, chapter.number)

    def on_failed(self, chapter: Optional[Chapter], fix: Fix) -> None:
        reason = fix.failure_reason.value if fix.failure_reason else "unknown"
        target = f"chapter {chapter.number}" if chapter else "batch"
        self._warnings.warning(
            f"failed:{fix.id}:{reason}",
            "Fix %s not applied to %s: %s (%s)",
            fix.id, target, reason, fix.failure_detail or "",
        )

    def warn(self, key: str, message: str, *args) -> None:
        self._warnings.warning(key, message, *args)
