"""Custom exception hierarchy for the fix application engine."""

from typing import Optional

from models.enums import FailureReason


class FixerError(Exception):
    """Base exception for all fixer errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Configuration / input errors ----

class InvalidConfigError(FixerError):
    """Configuration value is invalid."""


class RecordParseError(FixerError):
    """A chapter, fix or issue record could not be parsed."""

    def __init__(self, record_type: str, message: str, raw: Optional[dict] = None):
        details = {"record": record_type}
        if raw is not None:
            details["raw"] = str(raw)[:200]
        super().__init__(message, details)
        self.record_type = record_type


# ---- Fix application errors ----

class FixApplicationError(FixerError):
    """A single fix could not be applied.

    Subclasses pin ``reason``; the batch applicator turns these into
    failure records instead of letting them escape.
    """

    reason: FailureReason = FailureReason.APPLY_ERROR

    def __init__(self, message: str, fix_id: Optional[str] = None, details: Optional[dict] = None):
        details = dict(details or {})
        if fix_id is not None:
            details.setdefault("fix_id", fix_id)
        super().__init__(message, details)
        self.fix_id = fix_id


class ChapterMismatchError(FixApplicationError):
    """Fix declares a different chapter than the one it is applied to."""

    reason = FailureReason.CHAPTER_MISMATCH


class MissingReplacementTextError(FixApplicationError):
    """Fix has no replacement text."""

    reason = FailureReason.MISSING_REPLACEMENT_TEXT


class NoMeaningfulChangeError(FixApplicationError):
    """Original and replacement text are the same once trimmed."""

    reason = FailureReason.NO_MEANINGFUL_CHANGE


class TextNotFoundError(FixApplicationError):
    """No location tier found the original text."""

    reason = FailureReason.NOT_FOUND


class LowConfidenceMatchError(FixApplicationError):
    """A candidate span was found but failed apply-time verification."""

    reason = FailureReason.LOW_CONFIDENCE_MATCH


class NoChangeProducedError(FixApplicationError):
    """The splice ran but the content is identical to the input."""

    reason = FailureReason.NO_CHANGE_PRODUCED


class ConflictUnresolvedError(FixApplicationError):
    """The fix overlaps another fix and could not be placed."""

    reason = FailureReason.CONFLICT_UNRESOLVED
