"""Timestamp Columns Analyzer - tables should carry created_at and updated_at."""

from drizzleaudit.ast_extractors.base import object_pairs
from drizzleaudit.config_runtime import rule_defaults
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="require-timestamp-columns",
    category="drizzle",
    description="Require tables to have created_at and updated_at timestamp columns.",
    messages={
        "missingTimestamps": "Table '{tableName}' should have created_at and updated_at columns",
    },
    default_severity=Severity.MEDIUM,
    default_options=rule_defaults("require-timestamp-columns"),
    confidence=Confidence.MEDIUM,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)

CREATED_AT_NAMES = frozenset(["created_at", "createdAt"])
UPDATED_AT_NAMES = frozenset(["updated_at", "updatedAt"])


class TimestampColumnsAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def should_check(self, table_name: str) -> bool:
        if table_name in (self.options.get("ignore_tables") or []):
            return False
        check_tables = self.options.get("check_tables")
        return check_tables is None or table_name in check_tables

    def visit_call(self, site, state: UnitState) -> None:
        table = site.table if site.is_table else None
        if table is None or table.name is None or table.columns_node is None:
            return
        if not self.should_check(table.name):
            return

        names = {name for name, _key, _value in object_pairs(table.columns_node)}
        names |= {column.declared_name for column in table.columns.values() if column.declared_name}

        if names & CREATED_AT_NAMES and names & UPDATED_AT_NAMES:
            return
        self.report(state, table.source_node, "missingTimestamps", {"tableName": table.name})
