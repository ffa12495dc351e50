"""Snake Case Naming Analyzer - table and column schema names must be snake_case."""

import re

from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="enforce-snake-case-naming",
    category="drizzle",
    description="Enforce snake_case naming convention for PostgreSQL tables and columns.",
    messages={
        "useSnakeCase": "PostgreSQL tables/columns should use snake_case: '{name}'",
    },
    default_severity=Severity.HIGH,
    confidence=Confidence.HIGH,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)

SNAKE_CASE = re.compile(r"^[a-z][a-z0-9_]*$")

# Column names only; tables get no exceptions
ALLOWED_CAMEL_CASE_COLUMNS = frozenset(["createdAt", "updatedAt"])


def is_valid_snake_case(name: str) -> bool:
    return SNAKE_CASE.match(name) is not None


class SnakeCaseAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def visit_call(self, site, state: UnitState) -> None:
        table = site.table if site.is_table else None
        if table is None:
            return

        if table.name is not None and not is_valid_snake_case(table.name):
            self.report(state, table.name_node, "useSnakeCase", {"name": table.name})

        for column in table.columns.values():
            name = column.schema_name
            if is_valid_snake_case(name) or name in ALLOWED_CAMEL_CASE_COLUMNS:
                continue
            node = column.name_node if column.name_node is not None else column.key_node
            self.report(state, node, "useSnakeCase", {"name": name})
