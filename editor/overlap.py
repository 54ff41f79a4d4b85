"""Overlap resolution for replacement fixes targeting the same chapter."""

import logging

from models.results import LocatedFix

logger = logging.getLogger(__name__)


def spans_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """True if half-open spans ``[a_start, a_end)`` and ``[b_start, b_end)`` intersect."""
    return a_start < b_end and b_start < a_end


def resolve_overlaps(
    located: list[LocatedFix],
    content_length: int,
) -> tuple[list[LocatedFix], list[LocatedFix]]:
    """Make a batch of located fixes internally consistent.

    Spans are walked in ascending start order. A span that overlaps an
    already-resolved span is moved to start at that span's end, with the
    fix's replacement length standing in for its new length. A span
    pushed past the end of the content cannot be placed.

    Args:
        located: Replacement fixes with their spans in the original content.
        content_length: Length of the chapter content the spans refer to.

    Returns:
        ``(resolved, conflicts)``; no two resolved spans overlap.
    """
    resolved: list[LocatedFix] = []
    conflicts: list[LocatedFix] = []

    for item in sorted(located, key=lambda lf: (lf.start, lf.end)):
        start, end = item.start, item.end
        shifted = False
        # Shifting can create a new overlap with a later resolved span, so
        # keep pushing until the span is clear.
        while True:
            blocker = next(
                (r for r in resolved if spans_overlap(start, end, r.start, r.end)),
                None,
            )
            if blocker is None:
                break
            start = blocker.end
            end = start + len(item.fix.fixed_text)
            shifted = True
            if start > content_length:
                break

        if start > content_length:
            logger.warning(
                "Fix %s conflicts with another fix and cannot be placed (shifted start %d > %d)",
                item.fix.id, start, content_length,
            )
            conflicts.append(item)
            continue

        if shifted:
            logger.info(
                "Fix %s overlapped another fix; shifted [%d:%d) -> [%d:%d)",
                item.fix.id, item.start, item.end, start, end,
            )
            item = LocatedFix(item.fix, start, end)
        resolved.append(item)

    return resolved, conflicts
