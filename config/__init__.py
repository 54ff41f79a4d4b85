"""Settings, logging setup and the exception hierarchy."""

from config.exceptions import (
    FixerError,
    InvalidConfigError,
    RecordParseError,
    FixApplicationError,
    ChapterMismatchError,
    MissingReplacementTextError,
    NoMeaningfulChangeError,
    TextNotFoundError,
    LowConfidenceMatchError,
    NoChangeProducedError,
    ConflictUnresolvedError,
)
from config.logging_config import RateLimitedLogger, setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "RateLimitedLogger",
    "FixerError",
    "InvalidConfigError",
    "RecordParseError",
    "FixApplicationError",
    "ChapterMismatchError",
    "MissingReplacementTextError",
    "NoMeaningfulChangeError",
    "TextNotFoundError",
    "LowConfidenceMatchError",
    "NoChangeProducedError",
    "ConflictUnresolvedError",
]
