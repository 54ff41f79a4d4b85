"""Post-apply consistency check across chapter boundaries."""

import logging
from dataclasses import replace
from typing import Iterable, Mapping, Optional, Protocol, runtime_checkable

from models.chapter import Chapter
from models.results import TransitionReport

logger = logging.getLogger(__name__)


def _as_report(raw, previous: Chapter, current: Chapter) -> TransitionReport:
    """Normalise a validator verdict to a TransitionReport for this chapter pair.

    Accepts a TransitionReport or a mapping with ``isValid``/``is_valid``,
    ``score`` and ``issues`` keys.
    """
    if isinstance(raw, TransitionReport):
        return replace(raw, from_chapter=previous.number, to_chapter=current.number)
    if isinstance(raw, Mapping):
        is_valid = raw["isValid"] if "isValid" in raw else raw["is_valid"]
        return TransitionReport(
            is_valid=bool(is_valid),
            score=float(raw["score"]),
            issues=[str(issue) for issue in raw.get("issues", [])],
            from_chapter=previous.number,
            to_chapter=current.number,
        )
    raise TypeError(f"Unsupported transition verdict: {type(raw).__name__}")


@runtime_checkable
class TransitionValidator(Protocol):
    """Scores how well one chapter flows into the next."""

    def validate_transition(self, previous: Chapter, current: Chapter) -> TransitionReport | Mapping:
        ...


def check_transitions(
    chapters: Iterable[Chapter],
    modified_ids: Iterable[str],
    validator: Optional[TransitionValidator],
    warning_score: float = 60,
    callback=None,
) -> list[TransitionReport]:
    """Validate each consecutive chapter pair touched by a fix.

    Low scores are reported, never acted on; validator errors are logged
    and the pair is skipped.

    Args:
        chapters: Chapters after fixes were applied.
        modified_ids: Ids of chapters whose content changed.
        validator: External transition validator, or None to skip.
        warning_score: Reports scoring below this are logged as warnings.
        callback: Optional FixProgressCallback notified on warnings.

    Returns:
        One report per validated pair, in chapter order.
    """
    if validator is None:
        return []
    modified = set(modified_ids)
    if not modified:
        return []

    ordered = sorted(chapters, key=lambda c: c.number)
    reports: list[TransitionReport] = []
    for previous, current in zip(ordered, ordered[1:]):
        if previous.id not in modified and current.id not in modified:
            continue
        try:
            report = _as_report(validator.validate_transition(previous, current), previous, current)
        except Exception as e:
            logger.error(
                "Transition check %d -> %d failed: %s",
                previous.number, current.number, e, exc_info=True,
            )
            continue

        reports.append(report)
        if report.score < warning_score:
            logger.warning(
                "Transition issue between chapters %d and %d after fixes (score %.0f): %s",
                previous.number, current.number, report.score, "; ".join(report.issues),
            )
            if callback is not None:
                callback.on_transition_warning(report)
    return reports
