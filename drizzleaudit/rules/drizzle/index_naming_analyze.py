"""Index Naming Analyzer - ``idx_<table>_<columns>`` / ``uq_<table>_<purpose>``.

Two gates, both reported as invalidIndexName:
1. the name must have the generic ``{idx|uq|uk}_segment(_segment)*`` shape
2. inside a known table, it must also start with ``idx_<table>_`` for
   ``index(...)`` or ``uq_<table>_`` for the unique builders
"""

import re

from drizzleaudit.ast_extractors.classifier import CallCategory
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="enforce-index-naming",
    category="drizzle",
    description="Enforce naming convention for indexes: idx_tablename_column(s) or idx_tablename_purpose.",
    messages={
        "invalidIndexName": (
            "Index should follow pattern: idx_tablename_column(s) or idx_tablename_purpose. Got: '{name}'"
        ),
    },
    default_severity=Severity.HIGH,
    confidence=Confidence.HIGH,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)

INDEX_NAME_SHAPE = re.compile(r"^(idx|uq|uk)_[a-z][a-z0-9_]*(_[a-z][a-z0-9_]*)*$")


def expected_prefix(builder: str, table_name: str) -> str:
    prefix = "idx" if builder == "index" else "uq"
    return f"{prefix}_{table_name}_"


class IndexNamingAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def __init__(self, options=None, severity=None):
        super().__init__(options, severity)
        # Most recently declared table; index builders are visited inside its arguments
        self.current_table: str | None = None

    def visit_call(self, site, state: UnitState) -> None:
        if site.category is CallCategory.TABLE_DECLARATION:
            self.current_table = site.literal_name
            return

        if site.category is not CallCategory.INDEX_BUILDER or site.literal_name is None:
            return

        name = site.literal_name
        if not INDEX_NAME_SHAPE.match(name):
            self.report(state, site.literal_node, "invalidIndexName", {"name": name})
        elif self.current_table and not name.startswith(expected_prefix(site.name, self.current_table)):
            self.report(state, site.literal_node, "invalidIndexName", {"name": name})
