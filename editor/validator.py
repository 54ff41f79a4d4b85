"""Pre-flight checks run before any location or apply attempt."""

from config.exceptions import (
    ChapterMismatchError,
    MissingReplacementTextError,
    NoMeaningfulChangeError,
)
from models.chapter import Chapter
from models.fix import Fix


def belongs_to(chapter: Chapter, fix: Fix) -> bool:
    """Check that every chapter identity the fix declares agrees with ``chapter``.

    At least one identity (id or number) must be declared.
    """
    if fix.chapter_id is None and fix.chapter_number is None:
        return False
    if fix.chapter_id is not None and fix.chapter_id != chapter.id:
        return False
    if fix.chapter_number is not None and fix.chapter_number != chapter.number:
        return False
    return True


def is_insertion(fix: Fix) -> bool:
    """Insertions add text instead of replacing a located span."""
    return (
        fix.is_insertion
        or fix.insertion_anchor is not None
        or not fix.original_text.strip()
    )


def validate_fix(chapter: Chapter, fix: Fix) -> None:
    """Raise the matching FixApplicationError if ``fix`` must not be attempted.

    Order: ownership, no-op detection, missing replacement text.
    """
    if not belongs_to(chapter, fix):
        raise ChapterMismatchError(
            f"Fix belongs to chapter {fix.chapter_number} (ID: {fix.chapter_id}), "
            f"not chapter {chapter.number} (ID: {chapter.id})",
            fix_id=fix.id,
        )
    validate_fix_text(fix)


def validate_fix_text(fix: Fix) -> None:
    """Chapter-independent checks on the fix's own text."""
    if fix.original_text.strip() == fix.fixed_text.strip():
        raise NoMeaningfulChangeError("Fix does not change content", fix_id=fix.id)
    if not fix.fixed_text.strip():
        raise MissingReplacementTextError("Fix missing fixed text", fix_id=fix.id)
