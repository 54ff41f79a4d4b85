"""Multi-tier text location for fix snippets.

Tiers are tried strictly in order and the first hit wins:

1. exact substring
2. case-insensitive substring
3. whitespace-normalised substring, mapped back by word position
4. anchor phrase (leading words) verified against the rest of the snippet
5. fuzzy window scored with the similarity scorer

A miss on every tier returns None; callers must not guess a position.
"""

import logging
import re
from collections import Counter
from difflib import SequenceMatcher
from typing import Optional

from config.settings import Settings, get_settings
from editor.similarity import calculate_similarity, word_similarity
from editor.telemetry import FixTelemetry, NullTelemetry
from models.enums import FixKind, MatchTier
from models.results import MatchResult
from tools.text_utils import (
    comparable_word,
    end_of_nth_word,
    normalize_whitespace,
    significant_words,
    split_into_paragraphs,
    split_words,
    word_spans,
)

logger = logging.getLogger(__name__)


def _flexible_pattern(words: list[str]) -> re.Pattern:
    """Case-insensitive pattern matching ``words`` separated by any whitespace."""
    return re.compile(r"\s+".join(re.escape(w) for w in words), re.IGNORECASE)


class TextLocator:
    """Finds the span of a snippet inside chapter content.

    ``attempts`` counts how often each tier was consulted by ``locate``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        telemetry: Optional[FixTelemetry] = None,
    ):
        self.settings = settings or get_settings()
        self.telemetry = telemetry or NullTelemetry()
        self.attempts: Counter = Counter()

    def locate(
        self,
        content: str,
        snippet: str,
        kind: Optional[FixKind] = None,
    ) -> Optional[MatchResult]:
        """Locate ``snippet`` in ``content``.

        Args:
            content: Chapter text to search.
            snippet: The fix's original text.
            kind: Fix kind; paragraph-structure fixes get a stricter
                per-paragraph check in the anchor tier.

        Returns:
            The first tier's MatchResult, or None if nothing matched.
        """
        if not content or not snippet or not snippet.strip():
            return None

        strategies = (
            (MatchTier.EXACT, self._match_exact),
            (MatchTier.CASE_INSENSITIVE, self._match_case_insensitive),
            (MatchTier.WHITESPACE_NORMALIZED, self._match_normalized),
            (MatchTier.ANCHOR_PHRASE, lambda c, s: self._match_anchor_phrase(c, s, kind)),
            (MatchTier.FUZZY_WINDOW, self._match_fuzzy_window),
        )
        for tier, strategy in strategies:
            self.attempts[tier] += 1
            result = strategy(content, snippet)
            if result is not None:
                self.telemetry.on_match(snippet, result)
                return result

        self.telemetry.on_not_found(snippet)
        return None

    # --- Literal tiers ----------------------------------------------------------

    def _match_exact(self, content: str, snippet: str) -> Optional[MatchResult]:
        index = content.find(snippet)
        if index == -1:
            return None
        return MatchResult(index, index + len(snippet), MatchTier.EXACT, 1.0)

    def _match_case_insensitive(self, content: str, snippet: str) -> Optional[MatchResult]:
        # Regex search keeps offsets in the original string even where
        # lower() would change the string length.
        match = re.search(re.escape(snippet), content, re.IGNORECASE)
        if not match:
            return None
        return MatchResult(match.start(), match.end(), MatchTier.CASE_INSENSITIVE, 1.0)

    def _match_normalized(self, content: str, snippet: str) -> Optional[MatchResult]:
        normalized_snippet = normalize_whitespace(snippet)
        if not normalized_snippet:
            return None

        spans = word_spans(content)
        normalized_content = " ".join(content[start:end] for start, end in spans)
        match = re.search(re.escape(normalized_snippet), normalized_content, re.IGNORECASE)
        if not match:
            return None

        start = self._map_normalized_offset(spans, normalized_content, match.start())
        end = self._map_normalized_offset(spans, normalized_content, match.end() - 1) + 1
        confidence = self._score(content[start:end], snippet)
        return MatchResult(start, end, MatchTier.WHITESPACE_NORMALIZED, confidence)

    @staticmethod
    def _map_normalized_offset(spans: list[tuple[int, int]], normalized: str, offset: int) -> int:
        """Map an offset in the space-joined word string back to the original text.

        The word index is the number of separators before ``offset``; the
        position inside the word carries over unchanged.
        """
        word_index = normalized.count(" ", 0, offset)
        word_start = normalized.rfind(" ", 0, offset) + 1
        return spans[word_index][0] + (offset - word_start)

    def _locate_literal(self, content: str, snippet: str) -> Optional[MatchResult]:
        """Tiers 1-3 only, without touching the attempt counters."""
        for strategy in (self._match_exact, self._match_case_insensitive, self._match_normalized):
            result = strategy(content, snippet)
            if result is not None:
                return result
        return None

    # --- Anchor phrase tier -----------------------------------------------------

    def _match_anchor_phrase(
        self,
        content: str,
        snippet: str,
        kind: Optional[FixKind] = None,
    ) -> Optional[MatchResult]:
        s = self.settings
        stripped = snippet.strip()
        if len(stripped) <= s.anchor_min_snippet_chars:
            return None
        if len(significant_words(stripped)) < s.anchor_min_significant_words:
            return None

        words = split_words(stripped)
        large = len(stripped) > s.large_block_chars
        for anchor_len in self._anchor_lengths(len(words), large):
            anchor = self._locate_literal(content, " ".join(words[:anchor_len]))
            if anchor is None:
                continue

            candidate = self._verify_remainder(content, stripped, words[anchor_len:], anchor, large)
            if candidate is None and large:
                candidate = self._verify_word_sequence(content, stripped, anchor.start)
            if candidate is None:
                continue
            if kind == FixKind.PARAGRAPH_STRUCTURE and not self._paragraphs_agree(
                content[candidate.start:candidate.end], stripped
            ):
                logger.debug("Anchor candidate rejected: paragraph agreement below threshold")
                continue
            return candidate
        return None

    def _anchor_lengths(self, word_count: int, large: bool) -> range:
        s = self.settings
        longest = s.anchor_max_words_large if large else s.anchor_max_words
        return range(min(longest, word_count), s.anchor_min_words - 1, -1)

    def _verify_remainder(
        self,
        content: str,
        snippet: str,
        remainder_words: list[str],
        anchor: MatchResult,
        large: bool,
    ) -> Optional[MatchResult]:
        """Re-run the literal tiers for the rest of the snippet near the anchor."""
        if not remainder_words:
            return None
        s = self.settings
        padding = max(s.anchor_window_padding, len(snippet)) if large else s.anchor_window_padding
        window_start = anchor.end
        window_end = min(len(content), anchor.start + len(snippet) + padding)
        remainder = self._locate_literal(content[window_start:window_end], " ".join(remainder_words))
        if remainder is None:
            return None

        start, end = anchor.start, window_start + remainder.end
        confidence = self._score(content[start:end], snippet)
        if confidence < s.fuzzy_accept_threshold:
            return None
        return MatchResult(start, end, MatchTier.ANCHOR_PHRASE, confidence)

    def _verify_word_sequence(self, content: str, snippet: str, start: int) -> Optional[MatchResult]:
        """Compare the snippet word by word against the text following ``start``."""
        target = [comparable_word(w) for w in split_words(snippet)]
        best = self._best_word_window(content, start, snippet, len(target))
        if best is None:
            return None

        end, confidence = best
        found = [comparable_word(w) for w in split_words(content[start:end])]
        agreement = SequenceMatcher(None, found, target, autojunk=False).ratio()
        if agreement < self.settings.word_sequence_threshold:
            return None
        return MatchResult(start, end, MatchTier.ANCHOR_PHRASE, confidence)

    def _paragraphs_agree(self, candidate: str, snippet: str) -> bool:
        found = split_into_paragraphs(candidate)
        expected = split_into_paragraphs(snippet)
        if len(found) != len(expected):
            return False
        threshold = self.settings.paragraph_agreement_threshold
        return all(word_similarity(a, b) >= threshold for a, b in zip(found, expected))

    # --- Fuzzy window tier ------------------------------------------------------

    def _match_fuzzy_window(self, content: str, snippet: str) -> Optional[MatchResult]:
        s = self.settings
        stripped = snippet.strip()
        if len(stripped) <= s.fuzzy_min_snippet_chars:
            return None
        words = split_words(stripped)
        if len(words) < s.anchor_min_words:
            return None

        large = len(stripped) > s.large_block_chars
        best: Optional[MatchResult] = None
        for anchor_len in self._anchor_lengths(len(words), large):
            pattern = _flexible_pattern(words[:anchor_len])
            for hit_index, hit in enumerate(pattern.finditer(content)):
                if hit_index >= s.fuzzy_max_candidates:
                    break
                window_start = max(0, hit.start() - s.fuzzy_window_before)
                window_end = min(len(content), hit.start() + len(stripped) + s.fuzzy_window_after)
                window = content[window_start:window_end]
                scored = self._best_word_window(
                    window, hit.start() - window_start, stripped, len(words)
                )
                if scored is None:
                    continue
                end, confidence = scored
                if best is None or confidence > best.confidence:
                    best = MatchResult(
                        hit.start(), window_start + end, MatchTier.FUZZY_WINDOW, confidence
                    )
            if best is not None and best.confidence >= s.fuzzy_accept_threshold:
                return best

        if best is not None and best.confidence >= s.fuzzy_last_resort_threshold:
            logger.debug("Fuzzy window accepted at last-resort threshold (%.2f)", best.confidence)
            return best
        return None

    def _best_word_window(
        self,
        text: str,
        start: int,
        snippet: str,
        word_count: int,
    ) -> Optional[tuple[int, float]]:
        """Best-scoring end offset for a span of roughly ``word_count`` words from ``start``.

        Tries two words fewer to two words more than the snippet has, to
        absorb a dropped or added word. The span length is chosen by
        word-sequence agreement, which penalises a truncated tail; the
        returned score is the similarity of that span.
        """
        target = [comparable_word(w) for w in split_words(snippet)]
        best: Optional[tuple[float, float, int]] = None
        for count in range(max(1, word_count - 2), word_count + 3):
            end = end_of_nth_word(text, start, count)
            if end is None:
                break
            candidate = text[start:end]
            found = [comparable_word(w) for w in split_words(candidate)]
            agreement = SequenceMatcher(None, found, target, autojunk=False).ratio()
            score = self._score(candidate, snippet)
            if best is None or (agreement, score) > best[:2]:
                best = (agreement, score, end)
        if best is None:
            return None
        return best[2], best[1]

    def _score(self, a: str, b: str) -> float:
        return calculate_similarity(
            a,
            b,
            word_weight=self.settings.word_similarity_weight,
            char_weight=self.settings.char_similarity_weight,
        )
