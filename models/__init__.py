"""Chapter, fix and result dataclasses plus their enums.

``models.serialization`` is not re-exported here: it depends on
``config.exceptions``, which itself imports ``models.enums``.
"""

from models.chapter import Chapter
from models.fix import (
    Fix,
    Issue,
    FixPreview,
    FixProposal,
    FixCategorization,
    Matched,
    Inferred,
    Synthesized,
    IssueBinding,
)
from models.results import (
    MatchResult,
    LocatedFix,
    FixOutcome,
    ChapterFixResult,
    TransitionReport,
    BatchFixResult,
)
from models.enums import (
    FixKind,
    IssueSeverity,
    FixStatus,
    InsertionAnchor,
    MatchTier,
    FailureReason,
)

__all__ = [
    "Chapter",
    "Fix",
    "Issue",
    "FixPreview",
    "FixProposal",
    "FixCategorization",
    "Matched",
    "Inferred",
    "Synthesized",
    "IssueBinding",
    "MatchResult",
    "LocatedFix",
    "FixOutcome",
    "ChapterFixResult",
    "TransitionReport",
    "BatchFixResult",
    "FixKind",
    "IssueSeverity",
    "FixStatus",
    "InsertionAnchor",
    "MatchTier",
    "FailureReason",
]
