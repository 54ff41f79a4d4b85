"""Enumerations for fixes, issues and match telemetry."""

from enum import Enum


class FixKind(str, Enum):
    GRAMMAR = "grammar"
    FORMATTING = "formatting"
    STYLE = "style"
    CONTINUITY = "continuity"
    GAP = "gap"
    TRANSITION = "transition"
    PARAGRAPH_STRUCTURE = "paragraph_structure"
    SENTENCE_STRUCTURE = "sentence_structure"
    # Issue-only categories reported by the editorial review
    TIME_SKIP = "time_skip"
    CHARACTER_CONSISTENCY = "character_consistency"
    PLOT_HOLE = "plot_hole"

    @classmethod
    def _missing_(cls, value):
        # Producers send both "paragraph-structure" and "paragraph_structure"
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class IssueSeverity(str, Enum):
    MINOR = "minor"
    MAJOR = "major"


class FixStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    APPLIED = "applied"


class InsertionAnchor(str, Enum):
    """Where inserted text goes.

    BEFORE means "before the following chapter" (end of this one);
    AFTER means "after the previous chapter" (start of this one).
    """
    START = "start"
    END = "end"
    BEFORE = "before"
    AFTER = "after"
    SPLIT = "split"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            aliases = {
                "before-anchor-text": cls.BEFORE,
                "before_anchor_text": cls.BEFORE,
                "after-anchor-text": cls.AFTER,
                "after_anchor_text": cls.AFTER,
            }
            return aliases.get(value.strip().lower())
        return None


class MatchTier(str, Enum):
    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    WHITESPACE_NORMALIZED = "whitespace_normalized"
    ANCHOR_PHRASE = "anchor_phrase"
    FUZZY_WINDOW = "fuzzy_window"


class FailureReason(str, Enum):
    CHAPTER_MISMATCH = "chapter_mismatch"
    MISSING_REPLACEMENT_TEXT = "missing_replacement_text"
    NO_MEANINGFUL_CHANGE = "no_meaningful_change"
    NOT_FOUND = "not_found"
    LOW_CONFIDENCE_MATCH = "low_confidence_match"
    NO_CHANGE_PRODUCED = "no_change_produced"
    CONFLICT_UNRESOLVED = "conflict_unresolved"
    APPLY_ERROR = "apply_error"
