"""Unified orchestrator for dynamic rule discovery and execution.

This module provides a central orchestrator that:
1. Dynamically discovers every rule module under /rules/<category>/
2. Filters rules by configuration and by file metadata
3. Walks each unit once, fanning visited nodes out to every active analyzer
4. Runs finalize hooks after the walk and returns the unit's diagnostics
"""

import importlib
import inspect
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from drizzleaudit.ast_extractors.classifier import CallCategory, classify_call
from drizzleaudit.ast_extractors.declarative import extract_table
from drizzleaudit.ast_extractors.walker import TreeWalker
from drizzleaudit.ast_parser import ParsedUnit
from drizzleaudit.config_runtime import RuntimeConfig
from drizzleaudit.rules.base import (
    Diagnostic,
    RuleMetadata,
    StandardFinding,
    StandardRuleContext,
    UnitAnalyzer,
    UnitState,
)
from drizzleaudit.utils.logging import logger


@dataclass
class RuleInfo:
    """Metadata about a discovered rule."""

    name: str
    module: str
    category: str
    metadata: RuleMetadata
    analyzer_class: type[UnitAnalyzer]


class RulesOrchestrator:
    """Unified orchestrator for ALL rule execution."""

    def __init__(self, config: RuntimeConfig | None = None, only_rules: list[str] | None = None):
        """Initialize the orchestrator.

        Args:
            config: Resolved runtime configuration (defaults when omitted)
            only_rules: Restrict execution to these rule names
        """
        self.config = config or RuntimeConfig.defaults()
        self.rules = self._discover_all_rules()
        self.only_rules = set(only_rules) if only_rules else None

        if self.only_rules:
            unknown = self.only_rules - set(self.rules_by_name())
            for name in sorted(unknown):
                logger.warning("Unknown rule requested: {rule}", rule=name)

        total_rules = sum(len(r) for r in self.rules.values())
        logger.debug(
            "Discovered {total} rules across {count} categories",
            total=total_rules,
            count=len(self.rules),
        )

    def _discover_all_rules(self) -> dict[str, list[RuleInfo]]:
        """Dynamically discover ALL rules in /rules directory.

        Returns:
            Dictionary mapping category name to list of RuleInfo objects
        """
        rules_by_category = {}

        import drizzleaudit.rules as rules_package

        rules_dir = Path(rules_package.__file__).parent

        for subdir in sorted(rules_dir.iterdir()):
            if not subdir.is_dir() or subdir.name.startswith("__"):
                continue

            category = subdir.name
            rules_by_category[category] = []

            for py_file in sorted(subdir.glob("*_analyze.py")):
                module_name = f"drizzleaudit.rules.{category}.{py_file.stem}"

                try:
                    module = importlib.import_module(module_name)
                except ImportError as e:
                    logger.warning("Failed to import {module}: {err}", module=module_name, err=e)
                    continue

                metadata = getattr(module, "METADATA", None)
                if metadata is None:
                    logger.debug("Skipping {module}: no METADATA", module=module_name)
                    continue

                for _name, obj in inspect.getmembers(module, inspect.isclass):
                    if (
                        issubclass(obj, UnitAnalyzer)
                        and obj is not UnitAnalyzer
                        and obj.__module__ == module_name
                    ):
                        rules_by_category[category].append(
                            RuleInfo(
                                name=metadata.name,
                                module=module_name,
                                category=category,
                                metadata=metadata,
                                analyzer_class=obj,
                            )
                        )
                        logger.debug("Found rule: {category}/{rule}", category=category, rule=metadata.name)

        return rules_by_category

    def rules_by_name(self) -> dict[str, RuleInfo]:
        return {rule.name: rule for rules in self.rules.values() for rule in rules}

    def _should_run_rule_on_file(self, metadata: RuleMetadata, file_path: Path) -> bool:
        """Check if a rule should run on a specific file based on its METADATA."""
        file_path_str = str(file_path).replace("\\", "/")

        if metadata.exclude_patterns:
            for pattern in metadata.exclude_patterns:
                if pattern in file_path_str:
                    return False

        if metadata.target_extensions and file_path.suffix:
            if file_path.suffix.lower() not in metadata.target_extensions:
                return False

        return True

    def active_rules(self, file_path: Path | str | None = None) -> list[RuleInfo]:
        """Rules enabled by configuration (and applicable to ``file_path`` when given)."""
        active = []
        for rules in self.rules.values():
            for rule in rules:
                if self.only_rules is not None and rule.name not in self.only_rules:
                    continue
                if not self.config.is_enabled(rule.name):
                    continue
                if file_path is not None and not self._should_run_rule_on_file(
                    rule.metadata, Path(file_path)
                ):
                    continue
                active.append(rule)
        return active

    def _build_analyzers(self, file_path: str) -> list[UnitAnalyzer]:
        analyzers = []
        for rule in self.active_rules(file_path):
            analyzers.append(
                rule.analyzer_class(
                    options=self.config.options(rule.name),
                    severity=self.config.severity(rule.name),
                )
            )
        return analyzers

    @staticmethod
    def _guarded(analyzer: UnitAnalyzer, hook: str, state: UnitState, *args: Any) -> None:
        """Run one analyzer hook; a failing rule never aborts the unit."""
        try:
            getattr(analyzer, hook)(*args, state)
        except Exception as e:
            logger.opt(exception=True).warning(
                "Rule {rule} failed in {hook} on {path}: {err}",
                rule=analyzer.metadata.name,
                hook=hook,
                path=state.file_path,
                err=e,
            )

    def analyze_unit(self, unit: ParsedUnit) -> tuple[Diagnostic, ...]:
        """Walk one unit and return its diagnostics in emission order."""
        state = UnitState(unit.file_path)
        analyzers = self._build_analyzers(unit.file_path)
        if not analyzers:
            return ()

        call_analyzers = [a for a in analyzers if type(a).overrides("visit_call")]
        member_analyzers = [a for a in analyzers if type(a).overrides("visit_member_expression")]
        finalize_analyzers = [a for a in analyzers if type(a).overrides("finalize")]

        def on_call(node: Any) -> None:
            site = classify_call(node)
            if site.category is CallCategory.TABLE_DECLARATION:
                site.table = extract_table(node)
                state.record_table(site.table)
            elif site.category is CallCategory.RAW_STATEMENT:
                state.record_raw_statement(site.raw_text)
            for analyzer in call_analyzers:
                self._guarded(analyzer, "visit_call", state, site)

        def on_member(node: Any) -> None:
            for analyzer in member_analyzers:
                self._guarded(analyzer, "visit_member_expression", state, node)

        walker = TreeWalker()
        walker.on("call_expression", on_call)
        walker.on("member_expression", on_member)
        walker.on_finish(state.seal)
        for analyzer in finalize_analyzers:
            walker.on_finish(lambda analyzer=analyzer: self._guarded(analyzer, "finalize", state))

        walker.walk(unit.root)

        logger.debug(
            "{path}: {nodes} nodes, {tables} tables, {count} diagnostics",
            path=unit.file_path,
            nodes=walker.nodes_visited,
            tables=len(state.declarations),
            count=len(state.reporter),
        )
        return state.diagnostics

    def run_rules_for_file(self, unit: ParsedUnit) -> list[StandardFinding]:
        """Analyze a unit and convert its diagnostics to host-facing findings."""
        context = StandardRuleContext(
            file_path=Path(unit.file_path),
            content=unit.content,
            language=unit.language,
            tree=unit.tree,
        )
        return [
            diagnostic.to_finding(unit.file_path, context.get_snippet(diagnostic.line))
            for diagnostic in self.analyze_unit(unit)
        ]
