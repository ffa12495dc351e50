"""Scan Drizzle schema and query code for structural risks."""

import sys
from pathlib import Path

import click
from rich.markup import escape

from drizzleaudit.pipeline.ui import console, findings_table, print_header, print_scan_summary, print_warning
from drizzleaudit.utils.error_handler import handle_exceptions
from drizzleaudit.utils.exit_codes import ExitCodes
from drizzleaudit.utils.logging import configure_log_level, logger


@click.command("scan")
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "--preset",
    type=click.Choice(["recommended", "strict", "all"]),
    default=None,
    help="Rule preset to start from (default: every rule at its default severity)",
)
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file path")
@click.option("--rule", "rules", multiple=True, help="Only run this rule (repeatable)")
@click.option("--output-json", type=click.Path(path_type=Path), help="Write sorted findings as JSON")
@click.option("--max-rows", default=50, type=int, help="Maximum rows to display in table")
@click.option(
    "--fail-on",
    type=click.Choice(["critical", "high", "medium", "low"]),
    default="high",
    help="Lowest severity that makes the scan fail",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@handle_exceptions
def scan(paths, preset, config_path, rules, output_json, max_rows, fail_on, verbose, quiet):
    """Analyze TypeScript/JavaScript files for Drizzle schema and query risks.

    Each file is parsed with tree-sitter and analyzed as one unit by every
    enabled rule: unfiltered deletes and updates, unindexed UUID columns,
    naming conventions, missing timestamps, SELECT *, join fan-out and
    row-level security on sensitive tables.

    Examples:
      daud scan                             # Scan the current directory
      daud scan src/db --preset strict      # Strict preset on one folder
      daud scan --rule no-select-star       # Single rule
      daud scan --output-json findings.json

    Configuration:
      .drizzleaudit/config.json in the first scanned directory, or --config.
      Environment overrides: DRIZZLEAUDIT_<RULE>_<OPTION>, e.g.
      DRIZZLEAUDIT_LIMIT_JOIN_COMPLEXITY_MAX_JOINS=5

    Exit Codes:
      0 - No findings at or above --fail-on
      1 - High severity findings
      2 - Critical findings
      3 - Nothing to analyze"""
    from drizzleaudit.config_runtime import load_runtime_config
    from drizzleaudit.detector import SchemaDetector, discover_files

    if verbose:
        configure_log_level("DEBUG")
    elif quiet:
        configure_log_level("ERROR")

    paths = list(paths) or [Path(".")]
    root = next((p for p in paths if p.is_dir()), Path("."))

    config = load_runtime_config(
        root=str(root),
        preset=preset,
        config_path=str(config_path) if config_path else None,
    )

    files = discover_files(paths)
    if not files:
        print_warning("No TypeScript/JavaScript files found")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    detector = SchemaDetector(config=config, only_rules=list(rules) or None)
    if not detector.orchestrator.active_rules():
        print_warning("No rules enabled; check --rule, --preset and the config file")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    detector.detect(files)
    findings = detector.sorted_findings()
    stats = detector.get_summary_stats()

    print_header("DRIZZLE AUDIT")
    if findings:
        console.print(findings_table(findings, max_rows))
        if len(findings) > max_rows:
            console.print(
                f"\n... and {len(findings) - max_rows} more findings (use --output-json for all)",
                highlight=False,
            )
    else:
        console.print("[success]No issues found.[/success]")

    if output_json:
        detector.to_json(output_json)
        console.print(f"[success]Findings saved to {escape(str(output_json))}[/success]", highlight=False)

    exit_code = ExitCodes.for_severities(list(stats["by_severity"]), fail_on=fail_on)
    print_scan_summary(stats, exit_code)

    if stats["files_failed"]:
        print_warning(f"{stats['files_failed']} files could not be analyzed")

    logger.debug("Exit code {code}: {desc}", code=exit_code, desc=ExitCodes.get_description(exit_code))
    sys.exit(exit_code)
