"""Apply replacement and insertion fixes to chapter content.

Content flows through the applicator as an accumulator: every step takes
the current text and returns the next one, so a batch is a left fold of
``_apply`` over its fixes.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from difflib import SequenceMatcher
from typing import Callable, Optional

from config.exceptions import (
    ConflictUnresolvedError,
    FixApplicationError,
    LowConfidenceMatchError,
    NoChangeProducedError,
    TextNotFoundError,
)
from config.settings import Settings, get_settings
from editor.locator import TextLocator
from editor.overlap import resolve_overlaps, spans_overlap
from editor.similarity import calculate_similarity
from editor.telemetry import FixTelemetry, NullTelemetry
from editor.validator import is_insertion, validate_fix, validate_fix_text
from models.chapter import Chapter
from models.enums import FailureReason, FixStatus, InsertionAnchor
from models.fix import Fix
from models.results import ChapterFixResult, FixOutcome, LocatedFix
from tools.text_utils import (
    comparable_word,
    end_of_nth_word,
    find_next_boundary,
    normalize_for_match,
    split_words,
)

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = "\n\n"

_APPEND_ANCHORS = (InsertionAnchor.END, InsertionAnchor.BEFORE, InsertionAnchor.SPLIT)
_PREPEND_ANCHORS = (InsertionAnchor.START, InsertionAnchor.AFTER)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FixApplicator:
    """Applies fixes to chapters without ever guessing a position."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        locator: Optional[TextLocator] = None,
        telemetry: Optional[FixTelemetry] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings or get_settings()
        self.telemetry = telemetry or NullTelemetry()
        self.locator = locator or TextLocator(self.settings, self.telemetry)
        self._now = clock

    # --- Public API -------------------------------------------------------------

    def apply_fix(self, content: str, fix: Fix) -> str:
        """Apply one fix to ``content`` and return the new content.

        Ownership is not checked here (no chapter is involved); use
        ``apply_fix_to_chapter`` for that.

        Raises:
            FixApplicationError: a subclass naming the failure reason.
        """
        updated, _ = self._apply(content, fix)
        return updated

    def apply_fix_to_chapter(self, chapter: Chapter, fix: Fix) -> FixOutcome:
        """Validate and apply a single fix.

        Returns:
            FixOutcome with the (possibly unchanged) chapter and the fix
            record marked applied or carrying its failure reason.
        """
        try:
            validate_fix(chapter, fix)
            content, note = self._apply(chapter.content, fix)
        except FixApplicationError as e:
            return FixOutcome(chapter, self._failed(chapter, fix, e.reason, e.message))
        except Exception as e:
            logger.exception("Unexpected error applying fix %s to chapter %d", fix.id, chapter.number)
            return FixOutcome(
                chapter, self._failed(chapter, fix, FailureReason.APPLY_ERROR, f"Error: {e}")
            )

        updated = self._with_content(chapter, content)
        return FixOutcome(updated, self._applied(updated, fix, note))

    def apply_fixes_to_chapter(self, chapter: Chapter, fixes: list[Fix]) -> ChapterFixResult:
        """Apply a batch of fixes to one chapter.

        Replacements are located against the original content, de-conflicted,
        then applied end-to-start with a live re-check against the current
        content. Insertions follow, in input order.
        """
        result = ChapterFixResult(chapter=chapter, original_content=chapter.content)
        content = chapter.content

        replacements: list[Fix] = []
        insertions: list[Fix] = []
        for fix in fixes:
            try:
                validate_fix(chapter, fix)
            except FixApplicationError as e:
                result.failed_fixes.append(self._failed(chapter, fix, e.reason, e.message))
                continue
            (insertions if is_insertion(fix) else replacements).append(fix)

        located: list[LocatedFix] = []
        for fix in replacements:
            try:
                match = self.locator.locate(content, fix.original_text, fix.kind)
            except Exception as e:
                logger.exception("Unexpected error locating fix %s", fix.id)
                result.failed_fixes.append(self._failed(
                    chapter, fix, FailureReason.APPLY_ERROR, f"Error: {e}",
                ))
                continue
            if match is None:
                result.failed_fixes.append(self._failed(
                    chapter, fix, FailureReason.NOT_FOUND,
                    "Could not find original text in chapter content",
                ))
                continue
            located.append(LocatedFix(fix, match.start, match.end))

        resolved, conflicts = resolve_overlaps(located, len(content))
        for item in conflicts:
            result.failed_fixes.append(self._failed(
                chapter, item.fix, FailureReason.CONFLICT_UNRESOLVED,
                "Fix overlaps another fix and could not be placed within the chapter",
            ))

        applied_regions: list[tuple[int, int]] = []
        for item in sorted(resolved, key=lambda lf: (lf.start, lf.end), reverse=True):
            try:
                content, region = self._apply_located(content, item, applied_regions)
            except FixApplicationError as e:
                result.failed_fixes.append(self._failed(chapter, item.fix, e.reason, e.message))
                continue
            except Exception as e:
                logger.exception("Unexpected error applying fix %s", item.fix.id)
                result.failed_fixes.append(self._failed(
                    chapter, item.fix, FailureReason.APPLY_ERROR, f"Error: {e}",
                ))
                continue
            applied_regions = self._track_region(applied_regions, region, len(item.fix.fixed_text))
            result.applied_fixes.append(self._applied(chapter, item.fix))

        for fix in insertions:
            try:
                content, note = self._apply_insertion(content, fix)
            except FixApplicationError as e:
                result.failed_fixes.append(self._failed(chapter, fix, e.reason, e.message))
                continue
            except Exception as e:
                logger.exception("Unexpected error inserting fix %s", fix.id)
                result.failed_fixes.append(self._failed(
                    chapter, fix, FailureReason.APPLY_ERROR, f"Error: {e}",
                ))
                continue
            result.applied_fixes.append(self._applied(chapter, fix, note))

        result.chapter = self._with_content(chapter, content)
        logger.info(
            "Chapter %d: %d applied, %d failed (%d -> %d chars)",
            chapter.number, len(result.applied_fixes), len(result.failed_fixes),
            len(chapter.content), len(content),
        )
        return result

    # --- Replacement ------------------------------------------------------------

    def _apply(self, content: str, fix: Fix) -> tuple[str, Optional[str]]:
        validate_fix_text(fix)
        if is_insertion(fix):
            return self._apply_insertion(content, fix)
        return self._apply_replacement(content, fix), None

    def _apply_replacement(self, content: str, fix: Fix) -> str:
        match = self.locator.locate(content, fix.original_text, fix.kind)
        if match is None:
            raise TextNotFoundError("Could not find original text in chapter content", fix_id=fix.id)

        end = self._verified_end(content, match.start, fix.original_text, match.end, fix.id)
        return self._splice(content, match.start, end, fix)

    def _apply_located(
        self,
        content: str,
        item: LocatedFix,
        applied_regions: list[tuple[int, int]],
    ) -> tuple[str, tuple[int, int]]:
        """Apply a resolved fix to the current, partially patched content."""
        fix = item.fix
        start, end_hint = item.start, item.end
        if any(spans_overlap(start, end_hint, a, b) for a, b in applied_regions):
            raise ConflictUnresolvedError(
                "Fix targets text already changed by another fix", fix_id=fix.id
            )

        current = content[start:end_hint]
        if self._score(current, fix.original_text) < self.settings.reverify_threshold:
            # An overlap shift moved the span off the target text
            start, end_hint = self._relocate_near(content, fix, start, end_hint)

        end = self._verified_end(content, start, fix.original_text, end_hint, fix.id)
        if any(spans_overlap(start, end, a, b) for a, b in applied_regions):
            raise ConflictUnresolvedError(
                "Fix overlaps text already changed by another fix", fix_id=fix.id
            )
        return self._splice(content, start, end, fix), (start, end)

    def _relocate_near(self, content: str, fix: Fix, start: int, end: int) -> tuple[int, int]:
        """Find ``fix.original_text`` again, searching only around ``[start, end)``.

        The window reaches one snippet length to either side; a match
        elsewhere in the chapter is never used.

        Raises:
            TextNotFoundError: the text is not inside the window.
        """
        padding = len(fix.original_text)
        window_start = max(0, start - padding)
        window_end = min(len(content), end + padding)
        match = self.locator.locate(content[window_start:window_end], fix.original_text, fix.kind)
        if match is None:
            raise TextNotFoundError(
                "Original text no longer present near its located position",
                fix_id=fix.id,
                details={"window": f"{window_start}-{window_end}"},
            )
        logger.debug(
            "Re-located fix %s at %d (was %d)", fix.id, window_start + match.start, start,
        )
        return window_start + match.start, window_start + match.end

    def _verified_end(
        self,
        content: str,
        start: int,
        original: str,
        match_end: Optional[int],
        fix_id: str,
    ) -> int:
        """Check the text at ``start`` really is ``original`` and return the end to replace.

        Raises:
            LowConfidenceMatchError: no verification level agreed.
        """
        s = self.settings
        literal_end = start + len(original)
        at_position = content[start:literal_end]
        if at_position == original or at_position.lower() == original.lower():
            return literal_end

        normalized_original = normalize_for_match(original)
        buffer_end = max(literal_end + s.normalized_verify_buffer, match_end or 0)
        if normalize_for_match(content[start:buffer_end]).startswith(normalized_original):
            for candidate in (match_end, end_of_nth_word(content, start, len(split_words(original)))):
                if candidate and normalize_for_match(content[start:candidate]) == normalized_original:
                    return candidate
            return self._word_count_end(content, start, original)

        if len(original.strip()) > s.large_block_chars:
            end = match_end if match_end and match_end > start else self._word_count_end(content, start, original)
            found = [comparable_word(w) for w in split_words(content[start:end])]
            target = [comparable_word(w) for w in split_words(original)]
            agreement = SequenceMatcher(None, found, target, autojunk=False).ratio()
            if agreement >= s.word_sequence_threshold:
                logger.debug("Word-sequence verification passed (%.2f) for fix %s", agreement, fix_id)
                return end

        raise LowConfidenceMatchError(
            "Match quality insufficient; refusing to replace to avoid corrupting text",
            fix_id=fix_id,
            details={"start": start},
        )

    def _word_count_end(self, content: str, start: int, original: str) -> int:
        """End offset covering as many words as ``original`` has.

        Falls back to the snippet length, extended to the next paragraph
        or sentence boundary.
        """
        end = end_of_nth_word(content, start, len(split_words(original)))
        if end is not None:
            return end
        end = min(len(content), start + len(original))
        return find_next_boundary(content, end, self.settings.boundary_search_chars)

    def _splice(self, content: str, start: int, end: int, fix: Fix) -> str:
        updated = content[:start] + fix.fixed_text + content[end:]
        if updated == content:
            raise NoChangeProducedError("Text replacement did not change content", fix_id=fix.id)
        return updated

    @staticmethod
    def _track_region(
        regions: list[tuple[int, int]],
        replaced: tuple[int, int],
        new_length: int,
    ) -> list[tuple[int, int]]:
        """Shift recorded regions after a splice and add the new one."""
        start, end = replaced
        delta = new_length - (end - start)
        shifted = [(a + delta, b + delta) if a >= end else (a, b) for a, b in regions]
        shifted.append((start, start + new_length))
        return shifted

    # --- Insertion --------------------------------------------------------------

    def _apply_insertion(self, content: str, fix: Fix) -> tuple[str, Optional[str]]:
        text = fix.fixed_text
        anchor = fix.insertion_anchor

        if anchor in _APPEND_ANCHORS:
            note = "Split insertion applied at chapter end" if anchor == InsertionAnchor.SPLIT else None
            return self._append(content, text), note
        if anchor in _PREPEND_ANCHORS:
            return self._prepend(content, text), None

        if fix.original_text.strip():
            match = self.locator.locate(content, fix.original_text, fix.kind)
            if match is not None:
                head, rest = content[:match.end], content[match.end:].lstrip()
                if rest:
                    return f"{head}{PARAGRAPH_BREAK}{text}{PARAGRAPH_BREAK}{rest}", None
                return f"{head}{PARAGRAPH_BREAK}{text}", None

            self.telemetry.warn(
                f"insertion-fallback:{fix.id}",
                "Insertion point for fix %s not found; appending at chapter end",
                fix.id,
            )
            return self._append(content, text), "Insertion point not found; appended at chapter end"

        return self._append(content, text), None

    @staticmethod
    def _append(content: str, text: str) -> str:
        body = content.rstrip()
        return f"{body}{PARAGRAPH_BREAK}{text}" if body else text

    @staticmethod
    def _prepend(content: str, text: str) -> str:
        body = content.lstrip()
        return f"{text}{PARAGRAPH_BREAK}{body}" if body else text

    # --- Records ----------------------------------------------------------------

    def _with_content(self, chapter: Chapter, content: str) -> Chapter:
        if content == chapter.content:
            return chapter
        return replace(chapter, content=content, updated_at=self._now())

    def _applied(self, chapter: Chapter, fix: Fix, note: Optional[str] = None) -> Fix:
        applied = replace(
            fix,
            status=FixStatus.APPLIED,
            applied_at=self._now(),
            failure_reason=None,
            failure_detail=None,
            note=note,
        )
        self.telemetry.on_applied(chapter, applied)
        return applied

    def _failed(
        self,
        chapter: Optional[Chapter],
        fix: Fix,
        reason: FailureReason,
        detail: str,
    ) -> Fix:
        failed = replace(fix, failure_reason=reason, failure_detail=detail)
        self.telemetry.on_failed(chapter, failed)
        return failed

    def _score(self, a: str, b: str) -> float:
        return calculate_similarity(
            a,
            b,
            word_weight=self.settings.word_similarity_weight,
            char_weight=self.settings.char_similarity_weight,
        )
