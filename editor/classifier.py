"""Partition fixes into auto-applicable ones and proposals needing approval."""

import logging
from typing import Iterable, Optional

from editor.telemetry import FixTelemetry, NullTelemetry
from models.enums import FixKind, IssueSeverity
from models.fix import (
    Fix,
    FixCategorization,
    FixPreview,
    FixProposal,
    Inferred,
    Issue,
    IssueBinding,
    Matched,
    Synthesized,
)

logger = logging.getLogger(__name__)

AUTO_FIXABLE_KINDS = frozenset({
    FixKind.GRAMMAR,
    FixKind.FORMATTING,
    FixKind.STYLE,
    FixKind.PARAGRAPH_STRUCTURE,
    FixKind.SENTENCE_STRUCTURE,
})


def synthesize_issue(fix: Fix) -> Issue:
    """Build a major, non-auto-fixable placeholder issue for an orphaned fix."""
    return Issue(
        id=fix.issue_id or f"synthetic-{fix.id}",
        kind=fix.kind,
        severity=IssueSeverity.MAJOR,
        chapter_number=fix.chapter_number,
        chapter_id=fix.chapter_id,
        auto_fixable=False,
        description=fix.rationale or "Issue detected by editor",
        suggestion=fix.fixed_text,
    )


def _infer_issue(fix: Fix, issues: Iterable[Issue]) -> Optional[Issue]:
    for issue in issues:
        same_chapter = (
            (fix.chapter_number is not None and issue.chapter_number == fix.chapter_number)
            or (fix.chapter_id is not None and issue.chapter_id == fix.chapter_id)
        )
        if same_chapter and issue.kind == fix.kind:
            return issue
    return None


def bind_issue(
    fix: Fix,
    issues: list[Issue],
    issues_by_id: Optional[dict[str, Issue]] = None,
    telemetry: Optional[FixTelemetry] = None,
) -> IssueBinding:
    """Resolve the issue a fix belongs to.

    Looks up the fix's issue id first, then an issue in the same chapter
    with the same kind, and finally synthesizes a placeholder.
    """
    telemetry = telemetry or NullTelemetry()
    if issues_by_id is None:
        issues_by_id = {issue.id: issue for issue in issues}

    issue = issues_by_id.get(fix.issue_id)
    if issue is not None:
        return Matched(issue)

    telemetry.warn(
        f"dangling-issue:{fix.issue_id}",
        "Fix %s references unknown issue %r",
        fix.id, fix.issue_id,
    )
    inferred = _infer_issue(fix, issues)
    if inferred is not None:
        return Inferred(inferred)
    return Synthesized(synthesize_issue(fix))


def is_auto_fixable(fix: Fix, issue: Issue) -> bool:
    return (
        issue.severity == IssueSeverity.MINOR
        and issue.auto_fixable
        and fix.kind in AUTO_FIXABLE_KINDS
    )


def build_proposal(issue: Issue, fix: Fix) -> FixProposal:
    return FixProposal(
        issue=issue,
        fix=fix,
        preview=FixPreview(
            before=fix.original_text,
            after=fix.fixed_text,
            context=issue.context or fix.rationale or "",
        ),
    )


def categorize_fixes(
    issues: list[Issue],
    fixes: list[Fix],
    telemetry: Optional[FixTelemetry] = None,
) -> FixCategorization:
    """Separate fixes into auto-fixable ones and proposals requiring approval.

    Every fix ends up in exactly one of the two lists.
    """
    issues_by_id = {issue.id: issue for issue in issues}
    result = FixCategorization()

    for fix in fixes:
        binding = bind_issue(fix, issues, issues_by_id, telemetry)
        match binding:
            case Matched(issue) | Inferred(issue) if is_auto_fixable(fix, issue):
                result.auto_fixable.append(fix)
            case Matched(issue) | Inferred(issue):
                result.requires_approval.append(build_proposal(issue, fix))
            case Synthesized(issue):
                logger.info("Fix %s has no matching issue; synthesized %s", fix.id, issue.id)
                result.requires_approval.append(build_proposal(issue, fix))

    logger.info(
        "Categorized %d fixes: %d auto-fixable, %d require approval",
        len(fixes), len(result.auto_fixable), len(result.requires_approval),
    )
    return result
