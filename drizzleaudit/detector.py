"""Schema detector - runs the rule engine over files and collects findings.

The host side of the engine: discovers source files, parses each one as a
single unit, hands it to the orchestrator and aggregates the findings for
rendering and export.
"""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from drizzleaudit.ast_parser import ASTParser
from drizzleaudit.config_runtime import RuntimeConfig
from drizzleaudit.rules.base import Diagnostic, StandardFinding
from drizzleaudit.rules.orchestrator import RulesOrchestrator
from drizzleaudit.utils.constants import MAX_FILE_SIZE, SKIP_DIRS, SOURCE_EXTENSIONS
from drizzleaudit.utils.finding_priority import sort_findings
from drizzleaudit.utils.logging import logger


def discover_files(paths: Iterable[Path | str]) -> list[Path]:
    """Source files under ``paths``, sorted, skipping vendored and build directories."""
    found = set()
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            if path.suffix.lower() in SOURCE_EXTENSIONS:
                found.add(path)
            continue
        if not path.is_dir():
            logger.warning("Path does not exist: {path}", path=path)
            continue
        for candidate in path.rglob("*"):
            if any(part in SKIP_DIRS for part in candidate.relative_to(path).parts[:-1]):
                continue
            if candidate.is_file() and candidate.suffix.lower() in SOURCE_EXTENSIONS:
                found.add(candidate)
    return sorted(found)


class SchemaDetector:
    """Analyze files with every active rule and keep the findings."""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        only_rules: list[str] | None = None,
    ):
        self.orchestrator = RulesOrchestrator(config=config, only_rules=only_rules)
        self.parser = ASTParser()
        self.findings: list[StandardFinding] = []
        self.files_analyzed = 0
        self.files_failed: list[str] = []

    def analyze_file(self, file_path: Path) -> list[StandardFinding]:
        """Findings for one file; unreadable or oversized files yield none."""
        try:
            size = file_path.stat().st_size
        except OSError as e:
            logger.warning("Cannot stat {path}: {err}", path=file_path, err=e)
            self.files_failed.append(str(file_path))
            return []
        if size > MAX_FILE_SIZE:
            logger.info("Skipping {path}: {size} bytes exceeds limit", path=file_path, size=size)
            return []

        try:
            unit = self.parser.parse_file(file_path)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning("Cannot parse {path}: {err}", path=file_path, err=e)
            self.files_failed.append(str(file_path))
            return []

        self.files_analyzed += 1
        return self.orchestrator.run_rules_for_file(unit)

    def detect(self, paths: Iterable[Path | str]) -> list[StandardFinding]:
        files = discover_files(paths)
        logger.info("Analyzing {count} files", count=len(files))
        for file_path in files:
            self.findings.extend(self.analyze_file(file_path))
        return self.findings

    def sorted_findings(self) -> list[dict[str, Any]]:
        return sort_findings([f.to_dict() for f in self.findings])

    def to_json(self, output_file: Path | None = None) -> str:
        """Export findings to JSON."""
        data = {
            "findings": self.sorted_findings(),
            "summary": self.get_summary_stats(),
        }

        json_str = json.dumps(data, indent=2, sort_keys=True)

        if output_file:
            output_file = Path(output_file)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(json_str, encoding="utf-8")
            logger.info("Findings written to {path}", path=output_file)

        return json_str

    def get_summary_stats(self) -> dict[str, Any]:
        """Get summary statistics of findings."""
        stats = {
            "total_findings": len(self.findings),
            "files_analyzed": self.files_analyzed,
            "files_failed": len(self.files_failed),
            "files_affected": len({f.file_path for f in self.findings}),
            "by_severity": {},
            "by_rule": {},
        }

        for finding in self.findings:
            severity = finding.to_dict()["severity"]
            stats["by_severity"][severity] = stats["by_severity"].get(severity, 0) + 1
            stats["by_rule"][finding.rule_name] = stats["by_rule"].get(finding.rule_name, 0) + 1

        return stats


def analyze_source(
    code: str,
    language: str = "typescript",
    rules: list[str] | None = None,
    options: dict[str, dict[str, Any]] | None = None,
    preset: str | None = None,
    file_path: str = "<memory>",
) -> tuple[Diagnostic, ...]:
    """Run the engine over an in-memory source string.

    Args:
        code: Source text of one unit
        language: Grammar name (typescript, tsx, javascript)
        rules: Restrict to these rule names
        options: Per-rule settings, e.g. ``{"limit-join-complexity": {"max_joins": 2}}``
        preset: Preset to start from
        file_path: Name reported for the unit

    Returns:
        Diagnostics in emission order
    """
    config = RuntimeConfig.defaults(preset)
    for rule, settings in (options or {}).items():
        config.apply_rule_settings(rule, settings, "options")
    unit = ASTParser().parse_source(code, language=language, file_path=file_path)
    return RulesOrchestrator(config=config, only_rules=rules).analyze_unit(unit)
