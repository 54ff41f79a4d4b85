"""Text utilities: whitespace normalisation, word spans, paragraph and sentence splitting."""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"\S+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_SENTENCE_END_RE = re.compile(r"[.!?。！？…][\"'”’)\]]*(?=\s|$)")
_EDGE_PUNCTUATION = "\"'“”‘’()[]{}.,;:!?—–-…。，！？"


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_for_match(text: str) -> str:
    """Whitespace-normalised, lowercased text used for fuzzy comparisons."""
    return normalize_whitespace(text).lower()


def strip_all_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub("", text)


def split_words(text: str) -> list[str]:
    """Split text into whitespace-delimited words."""
    return text.split()


def word_spans(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets of every whitespace-delimited word."""
    return [(m.start(), m.end()) for m in _WORD_RE.finditer(text)]


def significant_words(text: str, min_length: int = 3) -> list[str]:
    """Words of at least ``min_length`` characters (skips articles, short particles)."""
    return [w for w in split_words(text) if len(w) >= min_length]


def comparable_word(word: str) -> str:
    """Lowercase a word and drop surrounding punctuation for sequence comparison."""
    return word.lower().strip(_EDGE_PUNCTUATION)


def split_into_paragraphs(text: str) -> list[str]:
    """Split text into paragraphs on blank lines."""
    paragraphs = _PARAGRAPH_SPLIT_RE.split(text)
    return [p.strip() for p in paragraphs if p.strip()]


def end_of_nth_word(text: str, start: int, n: int) -> int | None:
    """Offset just past the ``n``-th word counted from ``start``.

    Returns None if fewer than ``n`` words follow ``start``.
    """
    if n <= 0:
        return start
    count = 0
    for match in _WORD_RE.finditer(text, start):
        count += 1
        if count == n:
            return match.end()
    return None


def find_next_boundary(text: str, position: int, max_distance: int = 80) -> int:
    """Find the nearest paragraph or sentence boundary at or after ``position``.

    Looks at most ``max_distance`` characters ahead; returns ``position``
    unchanged when no boundary is close enough.
    """
    if position >= len(text):
        return len(text)
    if position > 0 and text[position - 1] in ".!?\n。！？":
        return position
    window_end = min(len(text), position + max_distance)
    window = text[position:window_end]

    paragraph = window.find("\n\n")
    sentence = _SENTENCE_END_RE.search(window)
    candidates = []
    if paragraph != -1:
        candidates.append(paragraph)
    if sentence:
        candidates.append(sentence.end())
    if not candidates:
        return position
    return position + min(candidates)
