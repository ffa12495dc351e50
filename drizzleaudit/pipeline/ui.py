"""Console presentation shared by the daud commands.

Every command prints through the one ``console`` defined here so findings,
rule listings and summaries share the same severity colours.

Usage:
    from drizzleaudit.pipeline.ui import console, findings_table, print_scan_summary

    console.print(findings_table(detector.sorted_findings(), max_rows=50))
    print_scan_summary(detector.get_summary_stats(), exit_code)
"""

import sys

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from drizzleaudit.utils.exit_codes import ExitCodes

DRIZZLEAUDIT_THEME = Theme({
    "warning": "bold yellow",
    "success": "bold green",
    "critical": "bold red",
    "high": "bold yellow",
    "medium": "bold blue",
    "low": "cyan",
    "info": "dim cyan",
    "off": "dim white",
    "rule": "bold magenta",
    "path": "bold cyan",
})

# Border colour of the summary panel per exit code
EXIT_STYLES = {
    ExitCodes.SUCCESS: ("CLEAN", "green"),
    ExitCodes.HIGH_SEVERITY: ("FAILED", "yellow"),
    ExitCodes.CRITICAL_SEVERITY: ("FAILED", "red"),
}

console = Console(
    theme=DRIZZLEAUDIT_THEME,
    force_terminal=sys.stdout.isatty()
)


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}", highlight=False)


def severity_label(severity: str) -> str:
    """Upper-cased severity wrapped in its theme style."""
    style = severity if severity in DRIZZLEAUDIT_THEME.styles else "off"
    return f"[{style}]{severity.upper()}[/{style}]"


def _plain_table() -> Table:
    return Table(show_header=True, header_style="bold", box=None, padding=(0, 2, 0, 0))


def findings_table(findings: list[dict], max_rows: int) -> Table:
    """Table of finding dicts (``StandardFinding.to_dict`` shape), capped at ``max_rows``."""
    table = _plain_table()
    table.add_column("SEVERITY", width=9)
    table.add_column("LOCATION", style="path")
    table.add_column("RULE", style="rule")
    table.add_column("MESSAGE", overflow="fold")

    for finding in findings[:max_rows]:
        table.add_row(
            severity_label(finding["severity"]),
            escape(f"{finding['file']}:{finding['line']}:{finding['column'] + 1}"),
            escape(finding["rule"]),
            escape(finding["message"]),
        )
    return table


def rules_table(rows: list[tuple[str, str, str | None, str]]) -> Table:
    """Table of (rule, default severity, active severity or None, description)."""
    table = _plain_table()
    table.add_column("RULE", style="rule", no_wrap=True)
    table.add_column("DEFAULT")
    table.add_column("ACTIVE")
    table.add_column("DESCRIPTION", overflow="fold")

    for name, default, active, description in rows:
        table.add_row(
            escape(name),
            severity_label(default),
            severity_label(active or "off"),
            escape(description),
        )
    return table


def print_scan_summary(stats: dict, exit_code: int) -> None:
    """Summary panel: verdict, totals and the per-severity breakdown."""
    status, border = EXIT_STYLES.get(exit_code, ("INCOMPLETE", "white"))
    by_severity = stats["by_severity"]
    detail = ", ".join(f"{count} {severity}" for severity, count in sorted(by_severity.items())) or "clean"

    panel = Panel(
        Text.assemble(
            (f"STATUS: [{status}]\n", f"bold {border}"),
            (f"{stats['total_findings']} findings in {stats['files_analyzed']} files\n", border),
            (detail, border),
        ),
        border_style=border,
        expand=False,
    )
    console.print(panel)
