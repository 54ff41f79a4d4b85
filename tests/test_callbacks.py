"""Tests for batch progress callbacks."""

import io
import logging

from rich.console import Console


class TestProtocolConformance:
    def test_logging_callback(self):
        from workflow.callbacks import FixProgressCallback, LoggingCallback
        assert isinstance(LoggingCallback(), FixProgressCallback)

    def test_rich_callback(self):
        from workflow.callbacks import FixProgressCallback, RichProgressCallback
        assert isinstance(RichProgressCallback(), FixProgressCallback)


class TestLoggingCallback:
    def test_chapter_complete_logged(self, chapter, caplog):
        from models.results import ChapterFixResult
        from workflow.callbacks import LoggingCallback
        with caplog.at_level(logging.INFO, logger="workflow.callbacks"):
            LoggingCallback().on_chapter_complete(ChapterFixResult(chapter=chapter), 1, 3)
        assert "Chapter 1 done (1/3)" in caplog.text

    def test_transition_warning_logged(self, caplog):
        from models.results import TransitionReport
        from workflow.callbacks import LoggingCallback
        report = TransitionReport(False, 42.0, ["Abrupt time jump"], 2, 3)
        with caplog.at_level(logging.WARNING, logger="workflow.callbacks"):
            LoggingCallback().on_transition_warning(report)
        assert "2 -> 3 scored 42" in caplog.text
        assert "Abrupt time jump" in caplog.text


class TestRichProgressCallback:
    def test_hooks_are_noops_before_start(self, chapter):
        from models.results import BatchFixResult, ChapterFixResult
        from workflow.callbacks import RichProgressCallback
        cb = RichProgressCallback()
        cb.on_chapter_start(chapter, 2)
        cb.on_chapter_complete(ChapterFixResult(chapter=chapter), 1, 1)
        cb.on_batch_complete(BatchFixResult())
        cb.stop()

    def test_renders_transition_warning(self, chapter):
        from models.results import BatchFixResult, ChapterFixResult, TransitionReport
        from workflow.callbacks import RichProgressCallback
        buffer = io.StringIO()
        cb = RichProgressCallback(console=Console(file=buffer, width=100), total_chapters=1)
        cb.start()
        try:
            cb.on_chapter_start(chapter, 2)
            cb.on_chapter_complete(ChapterFixResult(chapter=chapter), 1, 1)
            cb.on_transition_warning(TransitionReport(False, 30.0, [], 1, 2))
            cb.on_batch_complete(BatchFixResult())
        finally:
            cb.stop()
        assert "Transition 1 -> 2 scored 30" in buffer.getvalue()
