"""UUID Index Analyzer - UUID-like columns must be covered by an index.

A column counts as UUID-like when it is built with a UUID constructor, or
with a string constructor whose declared name looks like an identifier
(contains ``uuid``, ends with ``_id`` or is exactly ``id``).

Coverage sources:
- inline ``.unique()``
- inline ``.primaryKey()`` (unless ``exempt_primary_keys`` is disabled)
- any extra-builder index whose ``.on(...)`` references the column

Index references go through the builder parameter (``table.userId``) and
name the column by its property key, so coverage is checked against
``property_name`` while the message names the declared column.
"""

from drizzleaudit.ast_extractors.classifier import STRING_CONSTRUCTORS, UUID_CONSTRUCTORS
from drizzleaudit.ast_extractors.declarative import ColumnSpec, TableDeclaration
from drizzleaudit.config_runtime import rule_defaults
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="enforce-uuid-indexes",
    category="drizzle",
    description="Enforce indexes on UUID columns for better query performance.",
    messages={
        "enforceUUIDIndexes": (
            "UUID column '{columnName}' should have an index for better query performance. "
            "Add .primaryKey(), .unique(), or create an index in the table definition."
        ),
    },
    default_severity=Severity.HIGH,
    default_options=rule_defaults("enforce-uuid-indexes"),
    confidence=Confidence.MEDIUM,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)


def is_uuid_like(column: ColumnSpec) -> bool:
    if column.type_tag in UUID_CONSTRUCTORS:
        return True
    if column.type_tag in STRING_CONSTRUCTORS and column.declared_name is not None:
        name = column.declared_name.lower()
        return "uuid" in name or name.endswith("_id") or name == "id"
    return False


class UUIDIndexAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def is_covered(self, column: ColumnSpec, indexed: set[str]) -> bool:
        if column.has_inline_unique:
            return True
        if column.has_inline_primary_key and self.options.get("exempt_primary_keys", True):
            return True
        return column.property_name in indexed

    def check_table(self, table: TableDeclaration, state: UnitState) -> None:
        indexed = table.indexed_properties()
        for column in table.columns.values():
            if column.declared_name is None or not is_uuid_like(column):
                continue
            if self.is_covered(column, indexed):
                continue
            self.report(state, column.value_node, "enforceUUIDIndexes", {"columnName": column.declared_name})

    def visit_call(self, site, state: UnitState) -> None:
        if site.is_table and site.table is not None:
            self.check_table(site.table, state)
