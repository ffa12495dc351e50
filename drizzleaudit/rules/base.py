"""Base contracts for rule standardization."""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from drizzleaudit.ast_extractors.base import node_column, node_line
from drizzleaudit.ast_extractors.declarative import TableDeclaration
from drizzleaudit.utils.logging import logger


class Severity(Enum):
    """Standardized severity levels."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class Confidence(Enum):
    """Confidence in finding accuracy."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class RuleMetadata:
    """Metadata describing a rule, its messages and its options."""

    name: str
    category: str
    description: str
    messages: dict[str, str]

    default_severity: Severity = Severity.MEDIUM
    default_options: dict[str, Any] = field(default_factory=dict)
    confidence: Confidence = Confidence.MEDIUM

    target_extensions: list[str] | None = None
    exclude_patterns: list[str] | None = None


@dataclass
class StandardRuleContext:
    """Per-unit input shared by every rule run on that unit."""

    file_path: Path
    content: str
    language: str
    tree: Any = None

    def get_lines(self) -> list[str]:
        """Get file content as list of lines."""
        return self.content.splitlines() if self.content else []

    def get_snippet(self, line_num: int, context_lines: int = 2) -> str:
        """Extract code snippet around a line number."""
        lines = self.get_lines()
        if not lines or line_num < 1 or line_num > len(lines):
            return ""

        start = max(1, line_num - context_lines)
        end = min(len(lines), line_num + context_lines)

        snippet_lines = []
        for i in range(start, end + 1):
            prefix = ">> " if i == line_num else "   "
            snippet_lines.append(f"{i:4d}{prefix}{lines[i - 1]}")

        return "\n".join(snippet_lines)


@dataclass
class StandardFinding:
    """Standardized output handed to the host for rendering."""

    rule_name: str
    message: str
    file_path: str
    line: int

    column: int = 0
    severity: Severity | str = Severity.MEDIUM
    category: str = "drizzle"
    confidence: Confidence | str = Confidence.HIGH
    snippet: str = ""
    message_id: str = ""
    suggestion: str | None = None

    additional_info: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "rule": self.rule_name,
            "message_id": self.message_id,
            "message": self.message,
            "file": self.file_path,
            "line": self.line,
            "column": self.column,
            "severity": self.severity.value
            if isinstance(self.severity, Severity)
            else self.severity,
            "category": self.category,
            "confidence": self.confidence.value
            if isinstance(self.confidence, Confidence)
            else self.confidence,
            "code_snippet": self.snippet,
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.additional_info:
            result["data"] = self.additional_info

        return result


@dataclass
class Diagnostic:
    """One finding as the engine produces it: a node, a message id and its data."""

    rule_name: str
    message_id: str
    message: str
    node: Any
    data: dict[str, str] = field(default_factory=dict)
    severity: Severity = Severity.MEDIUM
    category: str = "drizzle"
    confidence: Confidence = Confidence.MEDIUM
    suggestion: str | None = None

    @property
    def line(self) -> int:
        return node_line(self.node)

    @property
    def column(self) -> int:
        return node_column(self.node)

    def to_finding(self, file_path: str, snippet: str = "") -> StandardFinding:
        return StandardFinding(
            rule_name=self.rule_name,
            message=self.message,
            file_path=file_path,
            line=self.line,
            column=self.column,
            severity=self.severity,
            category=self.category,
            confidence=self.confidence,
            snippet=snippet,
            message_id=self.message_id,
            suggestion=self.suggestion,
            additional_info=dict(self.data) or None,
        )


class DiagnosticReporter:
    """Append-only list of diagnostics for one unit."""

    def __init__(self):
        self._diagnostics: list[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    def __len__(self) -> int:
        return len(self._diagnostics)


# ============================================================================
# ROW-LEVEL SECURITY STATEMENTS
# ============================================================================

ENABLE_RLS_PATTERN = re.compile(
    r"ALTER\s+TABLE\s+[\"']?(\w+)[\"']?\s+ENABLE\s+ROW\s+LEVEL\s+SECURITY", re.IGNORECASE
)

CREATE_POLICY_PATTERN = re.compile(r"CREATE\s+POLICY\s+.*?\s+ON\s+[\"']?(\w+)[\"']?", re.IGNORECASE)


class UnitState:
    """Facts gathered while one syntax tree is walked.

    Append-only during the walk. ``seal()`` runs before the first finalize
    hook and freezes the fact sets; the reporter stays open so finalize
    hooks can still emit diagnostics.
    """

    def __init__(self, file_path: str = "<memory>"):
        self.file_path = file_path
        self.tables: dict[str, TableDeclaration] = {}
        self.declarations: list[TableDeclaration] = []
        self.rls_enabled: set[str] | frozenset[str] = set()
        self.policies: set[str] | frozenset[str] = set()
        self.reporter = DiagnosticReporter()
        self.sealed = False

    def _check_open(self) -> None:
        if self.sealed:
            raise RuntimeError("UnitState is sealed; facts cannot change after finalize begins")

    def record_table(self, table: TableDeclaration) -> None:
        self._check_open()
        self.declarations.append(table)
        if table.name is None:
            return
        # Redeclaring a name keeps its first position but points at the latest node
        self.tables[table.name] = table
        if table.rls_enabled:
            self.rls_enabled.add(table.name)
        if table.has_policies:
            self.policies.add(table.name)

    def record_raw_statement(self, text: str) -> None:
        self._check_open()
        for match in ENABLE_RLS_PATTERN.finditer(text):
            self.rls_enabled.add(match.group(1))
        for match in CREATE_POLICY_PATTERN.finditer(text):
            self.policies.add(match.group(1))

    def seal(self) -> None:
        self.rls_enabled = frozenset(self.rls_enabled)
        self.policies = frozenset(self.policies)
        self.sealed = True

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return self.reporter.diagnostics


class UnitAnalyzer:
    """Base class for per-unit rule analyzers.

    Subclasses override any of ``visit_call``, ``visit_member_expression``
    and ``finalize``; the orchestrator only dispatches to overridden hooks.
    One instance analyzes exactly one unit.
    """

    metadata: RuleMetadata = None

    def __init__(self, options: dict[str, Any] | None = None, severity: Severity | None = None):
        meta = self.metadata
        merged = dict(meta.default_options) if meta else {}
        if options:
            merged.update(options)
        self.options = merged
        self.severity = severity or (meta.default_severity if meta else Severity.MEDIUM)

    def visit_call(self, site, state: UnitState) -> None:
        """Called for every classified call_expression."""

    def visit_member_expression(self, node: Any, state: UnitState) -> None:
        """Called for every member_expression."""

    def finalize(self, state: UnitState) -> None:
        """Called once after the whole unit has been walked."""

    def report(
        self,
        state: UnitState,
        node: Any,
        message_id: str,
        data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ) -> None:
        meta = self.metadata
        data = {key: str(value) for key, value in (data or {}).items()}
        template = meta.messages.get(message_id, message_id)
        try:
            message = template.format(**data)
        except (KeyError, IndexError):
            logger.debug("Message {id} missing data keys: {data}", id=message_id, data=data)
            message = template

        state.reporter.add(
            Diagnostic(
                rule_name=meta.name,
                message_id=message_id,
                message=message,
                node=node,
                data=data,
                severity=self.severity,
                category=meta.category,
                confidence=meta.confidence,
                suggestion=suggestion,
            )
        )

    @classmethod
    def overrides(cls, hook: str) -> bool:
        return getattr(cls, hook) is not getattr(UnitAnalyzer, hook)
