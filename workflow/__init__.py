"""Multi-chapter batches with transition checks and summaries."""

from workflow.batch import apply_fixes_to_chapters, apply_fixes_concurrently, select_pending_fixes
from workflow.callbacks import FixProgressCallback, LoggingCallback, RichProgressCallback
from workflow.transitions import TransitionValidator, check_transitions
from workflow.summary import FixSummary, format_fix_summary

__all__ = [
    "apply_fixes_to_chapters",
    "apply_fixes_concurrently",
    "select_pending_fixes",
    "FixProgressCallback",
    "LoggingCallback",
    "RichProgressCallback",
    "TransitionValidator",
    "check_transitions",
    "FixSummary",
    "format_fix_summary",
]
