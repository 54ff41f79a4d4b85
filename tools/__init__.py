"""Text utilities shared by the locator and the applicator."""

from tools.text_utils import (
    normalize_whitespace,
    normalize_for_match,
    strip_all_whitespace,
    split_words,
    word_spans,
    significant_words,
    comparable_word,
    split_into_paragraphs,
    end_of_nth_word,
    find_next_boundary,
)

__all__ = [
    "normalize_whitespace",
    "normalize_for_match",
    "strip_all_whitespace",
    "split_words",
    "word_spans",
    "significant_words",
    "comparable_word",
    "split_into_paragraphs",
    "end_of_nth_word",
    "find_next_boundary",
]
