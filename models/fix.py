"""Fix and issue data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from models.enums import FailureReason, FixKind, FixStatus, InsertionAnchor, IssueSeverity


@dataclass(frozen=True)
class Fix:
    """A proposed edit (replacement or insertion) targeting one chapter."""
    id: str
    issue_id: str = ""
    chapter_id: Optional[str] = None
    chapter_number: Optional[int] = None
    kind: FixKind = FixKind.STYLE
    original_text: str = ""  # Empty for pure insertions
    fixed_text: str = ""
    rationale: str = ""
    insertion_anchor: Optional[InsertionAnchor] = None
    is_insertion: bool = False
    status: FixStatus = FixStatus.PENDING
    failure_reason: Optional[FailureReason] = None
    failure_detail: Optional[str] = None
    applied_at: Optional[datetime] = None
    note: Optional[str] = None  # Non-fatal degradation, e.g. insertion fell back to chapter end


@dataclass(frozen=True)
class Issue:
    """A detected narrative/prose problem."""
    id: str
    kind: FixKind
    severity: IssueSeverity
    chapter_number: Optional[int] = None
    chapter_id: Optional[str] = None
    auto_fixable: bool = False
    description: str = ""
    suggestion: str = ""
    context: Optional[str] = None


@dataclass(frozen=True)
class FixPreview:
    before: str
    after: str
    context: str = ""


@dataclass(frozen=True)
class FixProposal:
    """A fix that needs human approval, with its bound issue."""
    issue: Issue
    fix: Fix
    preview: FixPreview


@dataclass
class FixCategorization:
    auto_fixable: list[Fix] = field(default_factory=list)
    requires_approval: list[FixProposal] = field(default_factory=list)


# ---- Issue binding outcomes ----

@dataclass(frozen=True)
class Matched:
    """Issue found by the fix's issue id."""
    issue: Issue


@dataclass(frozen=True)
class Inferred:
    """Issue found by chapter + kind after the id lookup failed."""
    issue: Issue


@dataclass(frozen=True)
class Synthesized:
    """Placeholder issue built from the fix itself."""
    issue: Issue


IssueBinding = Union[Matched, Inferred, Synthesized]
