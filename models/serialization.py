"""Conversion between producer/store JSON records and the engine dataclasses.

Producers send camelCase keys (``originalText``, ``chapterNumber``...);
snake_case keys are accepted as well. Output is always snake_case.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from config.exceptions import RecordParseError
from models.chapter import Chapter
from models.enums import FailureReason, FixKind, FixStatus, InsertionAnchor, IssueSeverity
from models.fix import Fix, FixProposal, Issue
from models.results import BatchFixResult, TransitionReport


def _get(raw: dict, *keys: str, default: Any = None) -> Any:
    """Return the first key present in ``raw``."""
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        # Store timestamps are epoch milliseconds
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return datetime.fromisoformat(str(value))


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def chapter_from_dict(raw: dict) -> Chapter:
    try:
        return Chapter(
            id=str(_get(raw, "id")),
            number=int(_get(raw, "number", "chapter_number", "chapterNumber")),
            content=_get(raw, "content", default=""),
            title=_get(raw, "title", default=""),
            updated_at=_parse_datetime(_get(raw, "updated_at", "updatedAt")),
        )
    except (TypeError, ValueError) as e:
        raise RecordParseError("chapter", f"Invalid chapter record: {e}", raw) from e


def chapter_to_dict(chapter: Chapter) -> dict:
    return {
        "id": chapter.id,
        "number": chapter.number,
        "title": chapter.title,
        "content": chapter.content,
        "updated_at": _format_datetime(chapter.updated_at),
    }


def fix_from_dict(raw: dict) -> Fix:
    try:
        fix_id = _get(raw, "id")
        if fix_id is None:
            raise ValueError("missing id")
        anchor = _get(raw, "insertion_anchor", "insertionAnchor", "insertionLocation")
        reason = _get(raw, "failure_reason", "failureReason")
        return Fix(
            id=str(fix_id),
            issue_id=str(_get(raw, "issue_id", "issueId", default="")),
            chapter_id=_optional_str(_get(raw, "chapter_id", "chapterId")),
            chapter_number=_optional_int(_get(raw, "chapter_number", "chapterNumber")),
            kind=FixKind(_get(raw, "kind", "fixType", "fix_type", default="style")),
            original_text=_get(raw, "original_text", "originalText", default=""),
            fixed_text=_get(raw, "fixed_text", "fixedText", default=""),
            rationale=_get(raw, "rationale", "reason", default=""),
            insertion_anchor=InsertionAnchor(anchor) if anchor else None,
            is_insertion=bool(_get(raw, "is_insertion", "isInsertion", default=False)),
            status=FixStatus(_get(raw, "status", default="pending")),
            failure_reason=FailureReason(reason) if reason else None,
            failure_detail=_get(raw, "failure_detail", "failureDetail"),
            applied_at=_parse_datetime(_get(raw, "applied_at", "appliedAt")),
            note=_get(raw, "note"),
        )
    except (TypeError, ValueError) as e:
        raise RecordParseError("fix", f"Invalid fix record: {e}", raw) from e


def fix_to_dict(fix: Fix) -> dict:
    return {
        "id": fix.id,
        "issue_id": fix.issue_id,
        "chapter_id": fix.chapter_id,
        "chapter_number": fix.chapter_number,
        "kind": fix.kind.value,
        "original_text": fix.original_text,
        "fixed_text": fix.fixed_text,
        "rationale": fix.rationale,
        "insertion_anchor": fix.insertion_anchor.value if fix.insertion_anchor else None,
        "is_insertion": fix.is_insertion,
        "status": fix.status.value,
        "failure_reason": fix.failure_reason.value if fix.failure_reason else None,
        "failure_detail": fix.failure_detail,
        "applied_at": _format_datetime(fix.applied_at),
        "note": fix.note,
    }


def issue_from_dict(raw: dict) -> Issue:
    try:
        return Issue(
            id=str(_get(raw, "id")),
            kind=FixKind(_get(raw, "kind", "type")),
            severity=IssueSeverity(_get(raw, "severity", default="major")),
            chapter_number=_optional_int(_get(raw, "chapter_number", "chapterNumber")),
            chapter_id=_optional_str(_get(raw, "chapter_id", "chapterId")),
            auto_fixable=bool(_get(raw, "auto_fixable", "autoFixable", default=False)),
            description=_get(raw, "description", default=""),
            suggestion=_get(raw, "suggestion", default=""),
            context=_get(raw, "context"),
        )
    except (TypeError, ValueError) as e:
        raise RecordParseError("issue", f"Invalid issue record: {e}", raw) from e


def issue_to_dict(issue: Issue) -> dict:
    return {
        "id": issue.id,
        "kind": issue.kind.value,
        "severity": issue.severity.value,
        "chapter_number": issue.chapter_number,
        "chapter_id": issue.chapter_id,
        "auto_fixable": issue.auto_fixable,
        "description": issue.description,
        "suggestion": issue.suggestion,
        "context": issue.context,
    }


def proposal_to_dict(proposal: FixProposal) -> dict:
    return {
        "issue": issue_to_dict(proposal.issue),
        "fix": fix_to_dict(proposal.fix),
        "preview": {
            "before": proposal.preview.before,
            "after": proposal.preview.after,
            "context": proposal.preview.context,
        },
    }


def transition_report_to_dict(report: TransitionReport) -> dict:
    return {
        "from_chapter": report.from_chapter,
        "to_chapter": report.to_chapter,
        "is_valid": report.is_valid,
        "score": report.score,
        "issues": list(report.issues),
    }


def batch_result_to_dict(result: BatchFixResult) -> dict:
    return {
        "chapters": [chapter_to_dict(c) for c in result.chapters],
        "applied_fixes": [fix_to_dict(f) for f in result.applied_fixes],
        "failed_fixes": [fix_to_dict(f) for f in result.failed_fixes],
        "skipped_fixes": [fix_to_dict(f) for f in result.skipped_fixes],
        "transition_reports": [transition_report_to_dict(r) for r in result.transition_reports],
        "modified_chapter_ids": list(result.modified_chapter_ids),
    }
