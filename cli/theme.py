"""Rich theme and renderables shared by the fixer CLI commands."""

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

from models.fix import Fix, FixCategorization
from models.results import MatchResult

FIXER_THEME = Theme({
    "app.title": "bold",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "accent": "cyan",
    "stat.label": "dim",
    "stat.value": "bold",
    "chapter.num": "blue",
    "tier": "bold cyan",
})


def get_console() -> Console:
    """Return a Console instance with the fixer theme applied."""
    return Console(theme=FIXER_THEME)


def app_header(title: str = "fixer") -> Rule:
    """Return a Rule element for the application header banner."""
    return Rule(title=f"[bold]{title}[/]", style="dim")


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Return a Panel displaying command parameters.

    Args:
        title: Panel title (e.g. "Apply fixes").
        fields: Ordered dict of label -> value pairs.
    """
    lines = []
    for label, value in fields.items():
        lines.append(f"  [stat.label]{label}:[/] [stat.value]{value}[/]")
    body = "\n".join(lines)
    return Panel(body, title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def success_panel(title: str, body: str) -> Panel:
    """Return a green-bordered Panel for success results."""
    return Panel(body, title=f"[success]{title}[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))


def _short(text: str, limit: int) -> str:
    text = " ".join(text.split())
    return escape((text[:limit] + "...") if len(text) > limit else text)


def failures_table(fixes: list[Fix]) -> Table:
    """Build a table of fixes that were not applied, with their reasons."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("Fix", style="accent")
    table.add_column("Ch.", style="chapter.num")
    table.add_column("Reason", style="error")
    table.add_column("Detail")

    for fix in fixes:
        chapter = fix.chapter_number if fix.chapter_number is not None else (fix.chapter_id or "?")
        reason = fix.failure_reason.value if fix.failure_reason else "skipped"
        table.add_row(escape(fix.id), escape(str(chapter)), reason, _short(fix.failure_detail or "", 50))
    return table


def categorization_table(categorization: FixCategorization) -> Table:
    """Build a table listing every fix and whether it needs approval."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("Fix", style="accent")
    table.add_column("Kind")
    table.add_column("Route")
    table.add_column("Issue", style="muted")

    for fix in categorization.auto_fixable:
        table.add_row(escape(fix.id), fix.kind.value, "[success]auto[/]", escape(fix.issue_id))
    for proposal in categorization.requires_approval:
        table.add_row(
            escape(proposal.fix.id),
            proposal.fix.kind.value,
            "[warning]approval[/]",
            _short(proposal.issue.description, 40),
        )
    return table


def match_panel(content: str, match: MatchResult, context_chars: int = 40) -> Panel:
    """Return a Panel showing a located span with some surrounding text."""
    before = content[max(0, match.start - context_chars):match.start]
    found = content[match.start:match.end]
    after = content[match.end:match.end + context_chars]
    body = (
        f"  [stat.label]Tier:[/] [tier]{match.tier.value}[/]  "
        f"[muted]|[/]  [stat.label]Confidence:[/] [stat.value]{match.confidence:.2f}[/]  "
        f"[muted]|[/]  [stat.label]Span:[/] [stat.value]{match.start}-{match.end}[/]\n"
        f"  [muted]{_short(before, context_chars)}[/][bold]{_short(found, 200)}[/][muted]{_short(after, context_chars)}[/]"
    )
    return Panel(body, title="[success]Located[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))
