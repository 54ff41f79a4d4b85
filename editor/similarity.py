"""Similarity scoring between two text fragments.

The score blends word overlap (order-insensitive, one-to-one) with
character agreement (position-wise, whitespace ignored). Word overlap
dominates so that re-flowed or lightly edited prose still scores high.
"""

from tools.text_utils import normalize_for_match, strip_all_whitespace


def word_similarity(a: str, b: str) -> float:
    """Greedy one-to-one word matching ratio.

    Each word of ``a`` consumes the first unmatched identical word of
    ``b``; the ratio is matched pairs over the longer word count.
    """
    words_a = normalize_for_match(a).split()
    words_b = normalize_for_match(b).split()
    if not words_a or not words_b:
        return 0.0

    remaining = list(words_b)
    matched = 0
    for word in words_a:
        try:
            remaining.remove(word)
        except ValueError:
            continue
        matched += 1
    return matched / max(len(words_a), len(words_b))


def char_similarity(a: str, b: str) -> float:
    """Position-wise character agreement ratio, whitespace removed."""
    chars_a = strip_all_whitespace(a.lower())
    chars_b = strip_all_whitespace(b.lower())
    if not chars_a or not chars_b:
        return 0.0

    matches = sum(1 for x, y in zip(chars_a, chars_b) if x == y)
    return matches / max(len(chars_a), len(chars_b))


def calculate_similarity(
    a: str,
    b: str,
    word_weight: float = 0.8,
    char_weight: float = 0.2,
) -> float:
    """Confidence in [0, 1] that ``a`` and ``b`` are the same passage."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    score = word_weight * word_similarity(a, b) + char_weight * char_similarity(a, b)
    return max(0.0, min(1.0, score))
