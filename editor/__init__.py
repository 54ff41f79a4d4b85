"""Locating, classifying and applying fixes to chapter text."""

from editor.similarity import calculate_similarity, word_similarity, char_similarity
from editor.telemetry import FixTelemetry, NullTelemetry, LoggingTelemetry
from editor.locator import TextLocator
from editor.overlap import resolve_overlaps, spans_overlap
from editor.validator import belongs_to, is_insertion, validate_fix, validate_fix_text
from editor.classifier import (
    AUTO_FIXABLE_KINDS,
    bind_issue,
    build_proposal,
    categorize_fixes,
    is_auto_fixable,
    synthesize_issue,
)
from editor.applicator import FixApplicator

__all__ = [
    "calculate_similarity",
    "word_similarity",
    "char_similarity",
    "FixTelemetry",
    "NullTelemetry",
    "LoggingTelemetry",
    "TextLocator",
    "resolve_overlaps",
    "spans_overlap",
    "belongs_to",
    "is_insertion",
    "validate_fix",
    "validate_fix_text",
    "AUTO_FIXABLE_KINDS",
    "bind_issue",
    "build_proposal",
    "categorize_fixes",
    "is_auto_fixable",
    "synthesize_issue",
    "FixApplicator",
]
