"""Multi-chapter fix application, sequential and concurrent."""

import asyncio
import logging
from dataclasses import replace
from typing import Iterable, Optional

from editor.applicator import FixApplicator
from editor.validator import belongs_to
from models.chapter import Chapter
from models.enums import FailureReason, FixStatus
from models.fix import Fix
from models.results import BatchFixResult, ChapterFixResult
from workflow.transitions import TransitionValidator, check_transitions

logger = logging.getLogger(__name__)

_SELECTABLE = (FixStatus.PENDING, FixStatus.APPROVED)


def select_pending_fixes(fixes: Iterable[Fix], previously_failed_ids: Iterable[str] = ()) -> list[Fix]:
    """Fixes still waiting to be applied, minus those that already failed once."""
    failed = set(previously_failed_ids)
    selected = [f for f in fixes if f.status in _SELECTABLE and f.id not in failed]
    if failed:
        logger.debug("Selected %d pending fixes (%d excluded as previously failed)", len(selected), len(failed))
    return selected


def _group_by_chapter(
    chapters: list[Chapter],
    fixes: list[Fix],
    applicator: FixApplicator,
) -> tuple[dict[str, list[Fix]], list[Fix]]:
    """Assign every fix to the chapter that owns it.

    Returns:
        ``(fixes_by_chapter_id, orphans)``; orphans are already marked failed.
    """
    grouped: dict[str, list[Fix]] = {chapter.id: [] for chapter in chapters}
    orphans: list[Fix] = []
    for fix in fixes:
        owner = next((c for c in chapters if belongs_to(c, fix)), None)
        if owner is not None:
            grouped[owner.id].append(fix)
            continue
        orphan = replace(
            fix,
            failure_reason=FailureReason.CHAPTER_MISMATCH,
            failure_detail=(
                f"No chapter matches fix target (chapter {fix.chapter_number}, "
                f"ID: {fix.chapter_id})"
            ),
        )
        applicator.telemetry.on_failed(None, orphan)
        orphans.append(orphan)
    return grouped, orphans


def _merge(result: BatchFixResult, outcome: ChapterFixResult) -> None:
    result.chapters.append(outcome.chapter)
    result.applied_fixes.extend(outcome.applied_fixes)
    result.failed_fixes.extend(outcome.failed_fixes)
    if outcome.changed:
        result.modified_chapter_ids.append(outcome.chapter.id)


def _finish(
    result: BatchFixResult,
    applicator: FixApplicator,
    transition_validator: Optional[TransitionValidator],
    callback,
) -> BatchFixResult:
    result.transition_reports = check_transitions(
        result.chapters,
        result.modified_chapter_ids,
        transition_validator,
        warning_score=applicator.settings.transition_warning_score,
        callback=callback,
    )
    logger.info(
        "Applied %d fixes across %d chapters (%d failed, %d skipped)",
        len(result.applied_fixes), len(result.modified_chapter_ids),
        len(result.failed_fixes), len(result.skipped_fixes),
    )
    if callback is not None:
        callback.on_batch_complete(result)
    return result


def apply_fixes_to_chapters(
    chapters: list[Chapter],
    fixes: list[Fix],
    applicator: Optional[FixApplicator] = None,
    transition_validator: Optional[TransitionValidator] = None,
    callback=None,
) -> BatchFixResult:
    """Apply fixes to every chapter they belong to, one chapter at a time.

    Args:
        chapters: Chapters to patch; returned in the same order.
        fixes: Fixes for any of the chapters.
        applicator: FixApplicator to use. Creates one if not provided.
        transition_validator: Optional checker run on modified boundaries.
        callback: Optional FixProgressCallback.

    Returns:
        BatchFixResult with every input fix either applied or failed.
    """
    applicator = applicator or FixApplicator()
    grouped, orphans = _group_by_chapter(chapters, fixes, applicator)
    result = BatchFixResult(failed_fixes=orphans)

    total = len(chapters)
    for done, chapter in enumerate(chapters, start=1):
        chapter_fixes = grouped[chapter.id]
        if not chapter_fixes:
            result.chapters.append(chapter)
            continue
        if callback is not None:
            callback.on_chapter_start(chapter, len(chapter_fixes))
        outcome = applicator.apply_fixes_to_chapter(chapter, chapter_fixes)
        _merge(result, outcome)
        if callback is not None:
            callback.on_chapter_complete(outcome, done, total)

    return _finish(result, applicator, transition_validator, callback)


async def apply_fixes_concurrently(
    chapters: list[Chapter],
    fixes: list[Fix],
    applicator: Optional[FixApplicator] = None,
    transition_validator: Optional[TransitionValidator] = None,
    callback=None,
    cancel_event: Optional[asyncio.Event] = None,
    max_workers: Optional[int] = None,
) -> BatchFixResult:
    """Apply fixes with one worker thread per chapter.

    At most ``max_workers`` chapters run at once. Setting ``cancel_event``
    stops chapters that have not started yet; their fixes come back in
    ``skipped_fixes`` and finished chapters keep their results.
    """
    applicator = applicator or FixApplicator()
    semaphore = asyncio.Semaphore(max_workers or applicator.settings.max_workers)
    grouped, orphans = _group_by_chapter(chapters, fixes, applicator)
    total = len(chapters)
    done = 0

    async def run(chapter: Chapter) -> tuple[Chapter, Optional[ChapterFixResult], list[Fix]]:
        nonlocal done
        chapter_fixes = grouped[chapter.id]
        if not chapter_fixes:
            return chapter, None, []

        async with semaphore:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Chapter %d skipped: batch cancelled", chapter.number)
                return chapter, None, chapter_fixes
            if callback is not None:
                callback.on_chapter_start(chapter, len(chapter_fixes))
            outcome = await asyncio.to_thread(applicator.apply_fixes_to_chapter, chapter, chapter_fixes)

        done += 1
        if callback is not None:
            callback.on_chapter_complete(outcome, done, total)
        return chapter, outcome, []

    outcomes = await asyncio.gather(*(run(chapter) for chapter in chapters))

    result = BatchFixResult(failed_fixes=orphans)
    for chapter, outcome, skipped in outcomes:
        if outcome is None:
            result.chapters.append(chapter)
            result.skipped_fixes.extend(skipped)
        else:
            _merge(result, outcome)

    return _finish(result, applicator, transition_validator, callback)
