"""Call-site classification by syntactic shape.

Classification never resolves names: ``pgTable`` is a table constructor
because it is spelled ``pgTable``. A renamed import is simply not
recognized (a silent false negative).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .base import (
    argument,
    call_arguments,
    callee,
    callee_identifier,
    callee_property,
    member_object,
    member_property_name,
    node_text,
    string_value,
    template_static_text,
)

# ============================================================================
# RECOGNIZED VOCABULARY
# ============================================================================

TABLE_CONSTRUCTORS = frozenset(["pgTable", "mysqlTable", "sqliteTable"])

# pgTable.withRLS('users', {...}) declares a table with RLS already enabled
RLS_TABLE_VARIANTS = frozenset(["withRLS"])

UUID_CONSTRUCTORS = frozenset(["uuid"])

STRING_CONSTRUCTORS = frozenset(["varchar", "text", "char"])

COLUMN_CONSTRUCTORS = UUID_CONSTRUCTORS | STRING_CONSTRUCTORS | frozenset(
    [
        "serial",
        "bigserial",
        "smallserial",
        "integer",
        "int",
        "bigint",
        "smallint",
        "tinyint",
        "mediumint",
        "boolean",
        "timestamp",
        "datetime",
        "date",
        "time",
        "interval",
        "numeric",
        "decimal",
        "real",
        "doublePrecision",
        "double",
        "float",
        "json",
        "jsonb",
        "blob",
    ]
)

INDEX_BUILDERS = frozenset(["index", "uniqueIndex", "unique"])

UNIQUE_INDEX_BUILDERS = frozenset(["uniqueIndex", "unique"])

POLICY_BUILDERS = frozenset(["pgPolicy"])

MUTATING_VERBS = frozenset(["delete", "update"])

FILTER_VERBS = frozenset(["where"])

JOIN_VERBS = frozenset(["leftJoin", "innerJoin", "rightJoin", "fullJoin"])

QUERY_CONTEXT_VERBS = frozenset(["from", "where", "orderBy", "limit", "offset"]) | JOIN_VERBS

CHAIN_VERBS = frozenset(["where", "set", "from", "orderBy", "limit", "offset", "select"]) | JOIN_VERBS

RAW_STATEMENT_TAGS = frozenset(["sql"])


class CallCategory(Enum):
    """Closed set of call shapes the rules reason about."""

    TABLE_DECLARATION = "table-declaration"
    COLUMN_DECLARATION = "column-declaration"
    INDEX_BUILDER = "index-builder"
    MUTATION_ROOT = "mutation-root"
    CHAIN_SEGMENT = "chain-segment"
    RAW_STATEMENT = "raw-statement"
    OTHER = "other"


@dataclass
class CallSite:
    """A classified call_expression."""

    category: CallCategory
    node: Any
    name: str | None = None  # callee identifier or member property
    literal_name: str | None = None  # first string argument, when there is one
    literal_node: Any = None
    raw_text: str | None = None  # reconstructed raw statement text
    table: Any = None  # TableDeclaration, attached for table declarations

    @property
    def is_table(self) -> bool:
        return self.category is CallCategory.TABLE_DECLARATION


def table_constructor_name(node: Any) -> str | None:
    """``pgTable`` for ``pgTable(...)`` and ``pgTable.withRLS(...)``, else None."""
    name = callee_identifier(node)
    if name in TABLE_CONSTRUCTORS:
        return name
    function = callee(node)
    if member_property_name(function) in RLS_TABLE_VARIANTS:
        obj = member_object(function)
        if obj is not None and obj.type == "identifier" and node_text(obj) in TABLE_CONSTRUCTORS:
            return node_text(obj)
    return None


def raw_statement_text(node: Any) -> str | None:
    """Static text of ``sql`...``` or ``sql(`...`)``, or None."""
    if callee_identifier(node) not in RAW_STATEMENT_TAGS:
        return None
    args = call_arguments(node)
    if len(args) != 1 or args[0].type != "template_string":
        return None
    return template_static_text(args[0])


def _first_literal(node: Any) -> tuple[str | None, Any]:
    first = argument(node, 0)
    value = string_value(first)
    return value, (first if value is not None else None)


def classify_call(node: Any) -> CallSite:
    """Tag a call_expression with its category."""
    if table_constructor_name(node) is not None:
        literal, literal_node = _first_literal(node)
        return CallSite(
            CallCategory.TABLE_DECLARATION,
            node,
            name=table_constructor_name(node),
            literal_name=literal,
            literal_node=literal_node,
        )

    identifier = callee_identifier(node)
    if identifier is not None:
        if identifier in RAW_STATEMENT_TAGS:
            text = raw_statement_text(node)
            if text is not None:
                return CallSite(CallCategory.RAW_STATEMENT, node, name=identifier, raw_text=text)
        if identifier in COLUMN_CONSTRUCTORS:
            literal, literal_node = _first_literal(node)
            return CallSite(
                CallCategory.COLUMN_DECLARATION,
                node,
                name=identifier,
                literal_name=literal,
                literal_node=literal_node,
            )
        if identifier in INDEX_BUILDERS:
            literal, literal_node = _first_literal(node)
            return CallSite(
                CallCategory.INDEX_BUILDER,
                node,
                name=identifier,
                literal_name=literal,
                literal_node=literal_node,
            )
        return CallSite(CallCategory.OTHER, node, name=identifier)

    method = callee_property(node)
    if method in MUTATING_VERBS:
        return CallSite(CallCategory.MUTATION_ROOT, node, name=method)
    if method in CHAIN_VERBS:
        return CallSite(CallCategory.CHAIN_SEGMENT, node, name=method)
    return CallSite(CallCategory.OTHER, node, name=method)
