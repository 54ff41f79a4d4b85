"""Result records produced by the locator and the applicators."""

from dataclasses import dataclass, field

from models.chapter import Chapter
from models.enums import MatchTier
from models.fix import Fix


@dataclass(frozen=True)
class MatchResult:
    """A located ``[start, end)`` span in chapter content."""
    start: int
    end: int
    tier: MatchTier
    confidence: float


@dataclass(frozen=True)
class LocatedFix:
    """A replacement fix paired with its span in the original content."""
    fix: Fix
    start: int
    end: int


@dataclass(frozen=True)
class FixOutcome:
    """Result of applying a single fix to a chapter."""
    chapter: Chapter
    fix: Fix

    @property
    def applied(self) -> bool:
        return self.fix.failure_reason is None


@dataclass
class ChapterFixResult:
    chapter: Chapter
    applied_fixes: list[Fix] = field(default_factory=list)
    failed_fixes: list[Fix] = field(default_factory=list)
    original_content: str = ""

    @property
    def changed(self) -> bool:
        return self.chapter.content != self.original_content


@dataclass(frozen=True)
class TransitionReport:
    """Verdict of the external transition validator for two chapters."""
    is_valid: bool
    score: float  # 0-100
    issues: list[str] = field(default_factory=list)
    from_chapter: int = 0
    to_chapter: int = 0


@dataclass
class BatchFixResult:
    chapters: list[Chapter] = field(default_factory=list)
    applied_fixes: list[Fix] = field(default_factory=list)
    failed_fixes: list[Fix] = field(default_factory=list)
    skipped_fixes: list[Fix] = field(default_factory=list)  # Chapters never started (cancelled)
    transition_reports: list[TransitionReport] = field(default_factory=list)
    modified_chapter_ids: list[str] = field(default_factory=list)
