"""Human-readable summary of a fix run."""

from dataclasses import dataclass
from typing import Iterable, Optional

from models.fix import Fix
from models.results import BatchFixResult


@dataclass(frozen=True)
class FixSummary:
    summary: str
    details: Optional[str] = None


def _failure_line(fix: Fix, default: str) -> str:
    reason = fix.failure_detail or (fix.failure_reason.value if fix.failure_reason else default)
    chapter = fix.chapter_number if fix.chapter_number is not None else fix.chapter_id
    return f"  - Chapter {chapter}, {fix.kind.value}: {reason}"


def format_fix_summary(
    total_issues: int,
    result: BatchFixResult,
    auto_fixed_count: int = 0,
    previously_failed: Iterable[Fix] = (),
) -> FixSummary:
    """Summarize a batch run for display.

    Args:
        total_issues: Issues reported by the review.
        result: Outcome of the batch run.
        auto_fixed_count: Fixes already applied during review.
        previously_failed: Fixes that failed during review. A fix failing
            in both places is counted once.
    """
    previously_failed = list(previously_failed)
    parts = [f"{total_issues} issue(s) found."]
    details: list[str] = []

    applied = len(result.applied_fixes)
    total_fixed = auto_fixed_count + applied
    if total_fixed:
        parts.append(
            f"{total_fixed} fix(es) applied ({auto_fixed_count} during review, {applied} in batch)."
        )

    earlier_ids = {fix.id for fix in previously_failed}
    new_failures = [fix for fix in result.failed_fixes if fix.id not in earlier_ids]
    repeated = len(result.failed_fixes) - len(new_failures)
    total_failed = len(previously_failed) + len(new_failures)
    if total_failed:
        parts.append(f"{total_failed} fix(es) failed to apply.")
        if previously_failed:
            details.append(f"Failed during review ({len(previously_failed)}):")
            details.extend(_failure_line(fix, "Unknown reason") for fix in previously_failed)
        if new_failures:
            details.append(f"Failed in batch ({len(new_failures)}):")
            details.extend(_failure_line(fix, "Could not find text to replace") for fix in new_failures)
        if repeated:
            details.append(
                f"Note: {repeated} fix(es) failed both during review and in batch (counted once above)."
            )

    if result.skipped_fixes:
        parts.append(f"{len(result.skipped_fixes)} fix(es) skipped after cancellation.")
    if result.modified_chapter_ids:
        parts.append(f"{len(result.modified_chapter_ids)} chapter(s) updated.")

    return FixSummary(summary=" ".join(parts), details="\n".join(details) if details else None)
