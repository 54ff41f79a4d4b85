"""Engine settings (thresholds, weights, window sizes) loaded from the environment or .env."""

from pathlib import Path

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from config.exceptions import InvalidConfigError


class Settings(BaseSettings):
    """Engine settings, loaded from .env file. Matching thresholds are empirical."""

    # Similarity scoring
    word_similarity_weight: float = 0.8
    char_similarity_weight: float = 0.2

    # Confidence thresholds
    reverify_threshold: float = 0.7           # batch re-check against current content
    fuzzy_accept_threshold: float = 0.8       # fuzzy window, normal acceptance
    fuzzy_last_resort_threshold: float = 0.75 # fuzzy window, after all anchors tried
    word_sequence_threshold: float = 0.8      # word-by-word agreement for large blocks
    paragraph_agreement_threshold: float = 0.8

    # Anchor phrase search
    anchor_min_snippet_chars: int = 30
    anchor_min_significant_words: int = 3
    anchor_min_words: int = 3
    anchor_max_words: int = 8
    anchor_max_words_large: int = 10
    anchor_window_padding: int = 300
    large_block_chars: int = 100

    # Fuzzy window search
    fuzzy_min_snippet_chars: int = 50
    fuzzy_window_before: int = 50
    fuzzy_window_after: int = 200
    fuzzy_max_candidates: int = 50

    # Apply-time verification
    normalized_verify_buffer: int = 50
    boundary_search_chars: int = 80

    # Batch
    max_workers: int = 4
    transition_warning_score: int = 60

    # Logging
    log_dir: Path = Path("./data/logs")
    warning_dedupe_window_seconds: float = 30.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator(
        "word_similarity_weight",
        "char_similarity_weight",
        "reverify_threshold",
        "fuzzy_accept_threshold",
        "fuzzy_last_resort_threshold",
        "word_sequence_threshold",
        "paragraph_agreement_threshold",
    )
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("Threshold and weight values must be within [0, 1]")
        return v

    @field_validator(
        "anchor_min_snippet_chars",
        "anchor_min_significant_words",
        "anchor_min_words",
        "anchor_max_words",
        "anchor_max_words_large",
        "large_block_chars",
        "fuzzy_min_snippet_chars",
        "fuzzy_max_candidates",
        "max_workers",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Size and count values must be >= 1")
        return v

    @field_validator(
        "anchor_window_padding",
        "fuzzy_window_before",
        "fuzzy_window_after",
        "normalized_verify_buffer",
        "boundary_search_chars",
    )
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Window sizes must be non-negative")
        return v

    @field_validator("transition_warning_score")
    @classmethod
    def validate_transition_score(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError("transition_warning_score must be within [0, 100]")
        return v

    @field_validator("log_dir")
    @classmethod
    def ensure_parent_dirs(cls, v: Path) -> Path:
        v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @model_validator(mode="after")
    def validate_consistency(self) -> "Settings":
        weight_sum = self.word_similarity_weight + self.char_similarity_weight
        if abs(weight_sum - 1.0) > 1e-6:
            raise ValueError(
                f"Similarity weights must sum to 1 (got {weight_sum:.3f})"
            )
        if self.fuzzy_last_resort_threshold > self.fuzzy_accept_threshold:
            raise ValueError(
                f"fuzzy_last_resort_threshold ({self.fuzzy_last_resort_threshold}) must not "
                f"exceed fuzzy_accept_threshold ({self.fuzzy_accept_threshold})"
            )
        if not self.anchor_min_words <= self.anchor_max_words <= self.anchor_max_words_large:
            raise ValueError(
                "Anchor word counts must satisfy "
                "anchor_min_words <= anchor_max_words <= anchor_max_words_large"
            )
        return self


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        InvalidConfigError: the environment or .env holds an invalid value.
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = Settings()
        except ValidationError as e:
            fields = [".".join(str(part) for part in err["loc"]) or "settings" for err in e.errors()]
            raise InvalidConfigError(
                f"Invalid configuration: {e.error_count()} error(s)",
                {"fields": ", ".join(fields)},
            ) from e
    return _settings_instance
