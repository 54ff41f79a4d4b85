"""Tests for logging setup, warning rate limiting, and telemetry sinks."""

import logging

import pytest


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def restore_root_logger():
    """Close and detach the handlers setup_logging installs."""
    from logging.handlers import RotatingFileHandler
    root = logging.getLogger()
    match_logger = logging.getLogger("editor.locator")
    levels = (root.level, match_logger.level)
    yield
    for logger in (root, match_logger):
        for handler in list(logger.handlers):
            if isinstance(handler, RotatingFileHandler) or type(handler) is logging.StreamHandler:
                logger.removeHandler(handler)
                handler.close()
    root.setLevel(levels[0])
    match_logger.setLevel(levels[1])


class TestSetupLogging:
    def test_creates_log_files(self, tmp_path, restore_root_logger):
        from config.logging_config import setup_logging
        setup_logging(level=logging.DEBUG, log_dir=tmp_path / "logs", console_enabled=False)
        logging.getLogger("editor.applicator").info("hello")
        logging.getLogger("editor.locator").debug("located")
        for handler in logging.getLogger().handlers + logging.getLogger("editor.locator").handlers:
            handler.flush()
        assert "hello" in (tmp_path / "logs" / "fixer.log").read_text(encoding="utf-8")
        assert "located" in (tmp_path / "logs" / "matches.log").read_text(encoding="utf-8")

    def test_reinit_does_not_duplicate_handlers(self, tmp_path, restore_root_logger):
        from config.logging_config import setup_logging
        setup_logging(log_dir=tmp_path, console_enabled=True)
        setup_logging(log_dir=tmp_path, console_enabled=True)
        assert len(logging.getLogger().handlers) == 2


class TestRateLimitedLogger:
    def test_repeats_suppressed_within_window(self, caplog):
        from config.logging_config import RateLimitedLogger
        clock = FakeClock()
        limited = RateLimitedLogger(logging.getLogger("test.ratelimit"), window_seconds=30, clock=clock)
        with caplog.at_level(logging.WARNING, logger="test.ratelimit"):
            assert limited.warning("k", "Fix %s failed", "a") is True
            clock.now = 10
            assert limited.warning("k", "Fix %s failed", "a") is False
            assert limited.warning("k", "Fix %s failed", "a") is False
        assert len(caplog.records) == 1
        assert limited.suppressed_count("k") == 2

    def test_emits_again_after_window_with_count(self, caplog):
        from config.logging_config import RateLimitedLogger
        clock = FakeClock()
        limited = RateLimitedLogger(logging.getLogger("test.ratelimit"), window_seconds=30, clock=clock)
        with caplog.at_level(logging.WARNING, logger="test.ratelimit"):
            limited.warning("k", "Fix failed")
            limited.warning("k", "Fix failed")
            clock.now = 31
            assert limited.warning("k", "Fix failed") is True
        assert caplog.records[-1].getMessage() == "Fix failed (suppressed 1 similar)"
        assert limited.suppressed_count("k") == 0

    def test_keys_are_independent(self, caplog):
        from config.logging_config import RateLimitedLogger
        limited = RateLimitedLogger(logging.getLogger("test.ratelimit"), clock=FakeClock())
        with caplog.at_level(logging.WARNING, logger="test.ratelimit"):
            assert limited.warning("a", "first")
            assert limited.warning("b", "second")
        assert len(caplog.records) == 2

    def test_expired_keys_forgotten(self):
        from config.logging_config import RateLimitedLogger
        clock = FakeClock()
        limited = RateLimitedLogger(logging.getLogger("test.ratelimit"), window_seconds=30, clock=clock)
        for fix_id in ("fix-1", "fix-2", "fix-3"):
            limited.warning(f"failed:{fix_id}", "Fix failed")
        limited.warning("failed:fix-1", "Fix failed")
        assert limited.tracked_keys() == 3

        clock.now = 31
        limited.warning("failed:fix-4", "Fix failed")
        assert limited.tracked_keys() == 1
        assert limited.suppressed_count("failed:fix-1") == 0


class TestLoggingTelemetry:
    def test_failed_fix_warnings_deduplicated(self, caplog):
        from editor.telemetry import LoggingTelemetry
        from models.enums import FailureReason
        from models.fix import Fix
        telemetry = LoggingTelemetry(window_seconds=30, clock=FakeClock())
        fix = Fix(id="f1", failure_reason=FailureReason.NOT_FOUND, failure_detail="gone")
        with caplog.at_level(logging.WARNING, logger="editor.telemetry"):
            telemetry.on_failed(None, fix)
            telemetry.on_failed(None, fix)
        assert len(caplog.records) == 1
        assert "not_found" in caplog.text

    def test_match_logged_to_locator_logger(self, caplog):
        from editor.telemetry import LoggingTelemetry
        from models.enums import MatchTier
        from models.results import MatchResult
        with caplog.at_level(logging.DEBUG, logger="editor.locator"):
            LoggingTelemetry().on_match("The cat sat.", MatchResult(0, 12, MatchTier.EXACT, 1.0))
        record = caplog.records[0]
        assert record.name == "editor.locator"
        assert "exact" in record.getMessage()

    def test_protocol_conformance(self):
        from editor.telemetry import FixTelemetry, LoggingTelemetry, NullTelemetry
        assert isinstance(LoggingTelemetry(), FixTelemetry)
        assert isinstance(NullTelemetry(), FixTelemetry)
