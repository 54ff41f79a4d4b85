"""Batch progress callbacks for monitoring and real-time reporting."""

import logging
from typing import Protocol, runtime_checkable

from models.chapter import Chapter
from models.results import BatchFixResult, ChapterFixResult, TransitionReport

logger = logging.getLogger(__name__)


@runtime_checkable
class FixProgressCallback(Protocol):
    """Protocol for batch progress callbacks.

    Implement this protocol to hook into the multi-chapter apply lifecycle.
    """

    def on_chapter_start(self, chapter: Chapter, fix_count: int) -> None:
        """Called before a chapter's fixes are applied."""
        ...

    def on_chapter_complete(self, result: ChapterFixResult, done: int, total: int) -> None:
        """Called when a chapter has been processed."""
        ...

    def on_transition_warning(self, report: TransitionReport) -> None:
        """Called when a modified chapter boundary scores below the warning level."""
        ...

    def on_batch_complete(self, result: BatchFixResult) -> None:
        """Called when the whole batch finishes."""
        ...


class LoggingCallback:
    """Lightweight callback that logs progress to the standard logger."""

    def on_chapter_start(self, chapter: Chapter, fix_count: int) -> None:
        logger.debug("→ chapter %d: %d fixes", chapter.number, fix_count)

    def on_chapter_complete(self, result: ChapterFixResult, done: int, total: int) -> None:
        logger.info(
            "Chapter %d done (%d/%d): %d applied, %d failed",
            result.chapter.number, done, total,
            len(result.applied_fixes), len(result.failed_fixes),
        )

    def on_transition_warning(self, report: TransitionReport) -> None:
        logger.warning(
            "Transition %d -> %d scored %.0f: %s",
            report.from_chapter, report.to_chapter, report.score, "; ".join(report.issues),
        )

    def on_batch_complete(self, result: BatchFixResult) -> None:
        logger.info(
            "Batch complete: applied=%d failed=%d skipped=%d",
            len(result.applied_fixes), len(result.failed_fixes), len(result.skipped_fixes),
        )


class RichProgressCallback:
    """Progress callback that renders a Rich live progress display in the terminal."""

    def __init__(self, console=None, total_chapters: int = 0):
        """
        Args:
            console: Rich Console instance. Creates one if not provided.
            total_chapters: Chapters in the batch (for progress bar max).
        """
        self._console = console
        self._total = total_chapters
        self._progress = None
        self._chapter_task_id = None

    def start(self):
        """Start the progress display. Call before running the batch."""
        from rich.console import Console
        from rich.progress import (
            Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn,
        )

        console = self._console or Console()
        self._progress = Progress(
            SpinnerColumn("dots"),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        )
        self._progress.start()
        self._chapter_task_id = self._progress.add_task(
            "Waiting...",
            total=self._total if self._total > 0 else None,
        )

    def stop(self):
        """Stop the progress display."""
        if self._progress:
            self._progress.stop()
            self._progress = None

    def on_chapter_start(self, chapter: Chapter, fix_count: int) -> None:
        if not self._progress:
            return
        self._progress.update(
            self._chapter_task_id,
            description=f"Chapter {chapter.number} [dim]({fix_count} fixes)[/]",
        )

    def on_chapter_complete(self, result: ChapterFixResult, done: int, total: int) -> None:
        if not self._progress:
            return
        failed = len(result.failed_fixes)
        failed_label = f" [red]{failed} failed[/]" if failed else ""
        self._progress.update(
            self._chapter_task_id,
            completed=done,
            total=total or None,
            description=f"[green]Chapter {result.chapter.number}: "
                        f"{len(result.applied_fixes)} applied[/]{failed_label}",
        )

    def on_transition_warning(self, report: TransitionReport) -> None:
        if not self._progress:
            return
        self._progress.console.print(
            f"  [yellow]Transition {report.from_chapter} -> {report.to_chapter} "
            f"scored {report.score:.0f}[/]"
        )

    def on_batch_complete(self, result: BatchFixResult) -> None:
        if not self._progress:
            return
        self._progress.update(
            self._chapter_task_id,
            description=f"[bold green]Done! {len(result.applied_fixes)} applied, "
                        f"{len(result.failed_fixes)} failed[/]",
        )
