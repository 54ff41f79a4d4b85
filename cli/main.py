"""CLI entry point: a developer harness over the fix application engine.

Usage:
  fixer apply chapters.json fixes.json -o result.json
  fixer classify issues.json fixes.json
  fixer locate chapter.txt "text to find"
  fixer --help
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from rich.markup import escape

from cli.theme import (
    get_console,
    app_header,
    command_panel,
    success_panel,
    failures_table,
    categorization_table,
    match_panel,
)
from config.exceptions import FixerError, InvalidConfigError
from config.logging_config import setup_logging
from config.settings import get_settings
from editor.applicator import FixApplicator
from editor.classifier import categorize_fixes
from editor.locator import TextLocator
from editor.telemetry import LoggingTelemetry
from models.enums import FixKind
from models.serialization import (
    batch_result_to_dict,
    chapter_from_dict,
    fix_from_dict,
    issue_from_dict,
    fix_to_dict,
    proposal_to_dict,
)
from workflow.batch import apply_fixes_concurrently, apply_fixes_to_chapters, select_pending_fixes
from workflow.callbacks import RichProgressCallback
from workflow.summary import format_fix_summary

console = get_console()
logger = logging.getLogger(__name__)

_EXISTING_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


def _init_logging(verbose: bool):
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    settings = get_settings()
    setup_logging(level=level, log_dir=settings.log_dir, console_enabled=verbose)


def _load_records(path: Path, key: str) -> list[dict]:
    """Read a JSON file holding either a list or an object with ``key``."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise click.BadParameter(f"expected a list of {key}", param_hint=str(path))
    return data


def _write_json(data: dict, output: Path | None) -> None:
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if output is None:
        click.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    console.print(f"[muted]Wrote {escape(str(output))}[/]")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Apply editor fixes to chapter text.

    \b
    Inputs are JSON files as produced by the review step:
      chapters: [{"id", "number", "content"}, ...]
      fixes:    [{"id", "chapterNumber", "originalText", "fixedText", ...}, ...]
    """
    try:
        _init_logging(verbose)
    except InvalidConfigError as e:
        console.print(f"[error]{escape(str(e))}[/]")
        sys.exit(1)


# ---------------------------------------------------------------------------
# apply command
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("chapters_file", type=_EXISTING_FILE)
@click.argument("fixes_file", type=_EXISTING_FILE)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the batch result as JSON to this file")
@click.option("--concurrent", "-c", is_flag=True, help="Process chapters in worker threads")
@click.option("--skip-failed", "-s", multiple=True,
              help="Fix id that already failed during review (repeatable)")
def apply(chapters_file, fixes_file, output, concurrent, skip_failed):
    """Apply pending fixes to chapters.

    Examples:
      fixer apply chapters.json fixes.json
      fixer apply chapters.json fixes.json -o result.json --concurrent
    """
    try:
        chapters = [chapter_from_dict(raw) for raw in _load_records(chapters_file, "chapters")]
        fixes = [fix_from_dict(raw) for raw in _load_records(fixes_file, "fixes")]
    except FixerError as e:
        console.print(f"[error]Invalid input: {escape(str(e))}[/]")
        sys.exit(1)

    pending = select_pending_fixes(fixes, skip_failed)
    if output is not None:
        console.print(app_header())
        console.print(command_panel("Apply fixes", {
            "Chapters": str(len(chapters)),
            "Fixes": f"{len(pending)} pending of {len(fixes)}",
            "Mode": "concurrent" if concurrent else "sequential",
        }))

    settings = get_settings()
    applicator = FixApplicator(
        settings=settings,
        telemetry=LoggingTelemetry(window_seconds=settings.warning_dedupe_window_seconds),
    )
    try:
        if concurrent:
            # Progress goes to stdout, so only show it when JSON goes to a file
            cb = RichProgressCallback(console=console, total_chapters=len(chapters)) if output else None
            if cb:
                cb.start()
            try:
                result = asyncio.run(apply_fixes_concurrently(chapters, pending, applicator, callback=cb))
            finally:
                if cb:
                    cb.stop()
        else:
            result = apply_fixes_to_chapters(chapters, pending, applicator)
    except KeyboardInterrupt:
        console.print("\n[warning]Interrupted[/]")
        sys.exit(130)

    if output is None:
        _write_json(batch_result_to_dict(result), None)
        return

    summary = format_fix_summary(len(fixes), result)
    console.print(success_panel("Done", f"  {escape(summary.summary)}"))
    if result.failed_fixes or result.skipped_fixes:
        console.print(failures_table(result.failed_fixes + result.skipped_fixes))
    _write_json(batch_result_to_dict(result), output)


# ---------------------------------------------------------------------------
# classify command
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("issues_file", type=_EXISTING_FILE)
@click.argument("fixes_file", type=_EXISTING_FILE)
@click.option("--json", "as_json", is_flag=True, help="Print the categorization as JSON")
def classify(issues_file, fixes_file, as_json):
    """Split fixes into auto-fixable ones and proposals needing approval.

    Example:
      fixer classify issues.json fixes.json
    """
    try:
        issues = [issue_from_dict(raw) for raw in _load_records(issues_file, "issues")]
        fixes = [fix_from_dict(raw) for raw in _load_records(fixes_file, "fixes")]
    except FixerError as e:
        console.print(f"[error]Invalid input: {escape(str(e))}[/]")
        sys.exit(1)

    settings = get_settings()
    categorization = categorize_fixes(
        issues, fixes, LoggingTelemetry(window_seconds=settings.warning_dedupe_window_seconds)
    )

    if as_json:
        _write_json({
            "auto_fixable": [fix_to_dict(fix) for fix in categorization.auto_fixable],
            "requires_approval": [proposal_to_dict(p) for p in categorization.requires_approval],
        }, None)
        return

    console.print(categorization_table(categorization))
    console.print(
        f"[success]{len(categorization.auto_fixable)} auto-fixable[/], "
        f"[warning]{len(categorization.requires_approval)} require approval[/]"
    )


# ---------------------------------------------------------------------------
# locate command
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("chapter_file", type=_EXISTING_FILE)
@click.argument("snippet")
@click.option("--kind", "-k", default=None, type=click.Choice([k.value for k in FixKind]),
              help="Fix kind (paragraph_structure enables paragraph checks)")
def locate(chapter_file, snippet, kind):
    """Show where SNIPPET would match in a plain-text chapter.

    Example:
      fixer locate chapter-3.txt "the old lighthouse keeper"
    """
    content = chapter_file.read_text(encoding="utf-8")
    locator = TextLocator(get_settings())
    match = locator.locate(content, snippet, FixKind(kind) if kind else None)
    if match is None:
        console.print("[error]Not found by any tier[/]")
        sys.exit(1)
    console.print(match_panel(content, match))


def main():
    cli()


if __name__ == "__main__":
    main()
