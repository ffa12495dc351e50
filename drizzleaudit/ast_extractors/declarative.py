"""Schema facts reconstructed from table declarations.

A Drizzle table is declared as::

    pgTable('posts', {
      id: uuid('id').primaryKey(),
      userId: uuid('user_id'),
    }, (table) => ({
      userIdx: index('idx_posts_user_id').on(table.userId),
    }))

Columns are keyed by their *property* name (``userId``) and carry the
*declared* schema name (``user_id``). Index declarations reference columns
through the builder parameter (``table.userId``) and therefore by property
name. The two must never be mixed up when cross-referencing.
"""

from dataclasses import dataclass, field
from typing import Any

from .base import (
    FUNCTION_TYPES,
    argument,
    call_arguments,
    function_parameter_names,
    function_result_expression,
    is_member,
    member_object,
    member_property_name,
    named_children,
    node_text,
    object_pairs,
    string_value,
    unwrap_expression,
)
from .chain import chain_for, linearize_from_tip
from .classifier import (
    POLICY_BUILDERS,
    UNIQUE_INDEX_BUILDERS,
    table_constructor_name,
)

INLINE_INDEX_MODIFIERS = frozenset(["primaryKey", "unique"])


@dataclass
class ColumnSpec:
    """One column of a table declaration."""

    property_name: str
    declared_name: str | None
    type_tag: str
    has_inline_unique_or_primary_key: bool
    modifiers: tuple[str, ...] = ()
    key_node: Any = None
    value_node: Any = None
    name_node: Any = None

    @property
    def has_inline_primary_key(self) -> bool:
        return "primaryKey" in self.modifiers

    @property
    def has_inline_unique(self) -> bool:
        return "unique" in self.modifiers

    @property
    def schema_name(self) -> str:
        """Name the column has in the database (property name when undeclared)."""
        return self.declared_name if self.declared_name is not None else self.property_name


@dataclass
class IndexDeclaration:
    """An entry of the table's extra-builder that covers columns via ``.on(...)``."""

    index_name: str | None
    kind: str  # "index" | "unique"
    referenced_properties: set[str] = field(default_factory=set)
    property_key: str | None = None
    node: Any = None


@dataclass
class TableDeclaration:
    name: str | None
    source_node: Any
    constructor: str
    columns: dict[str, ColumnSpec] = field(default_factory=dict)
    indexes: list[IndexDeclaration] = field(default_factory=list)
    policy_names: list[str] = field(default_factory=list)
    rls_enabled: bool = False
    name_node: Any = None
    columns_node: Any = None
    extra_builder: Any = None

    def indexed_properties(self) -> set[str]:
        covered = set()
        for index in self.indexes:
            covered |= index.referenced_properties
        return covered

    @property
    def has_policies(self) -> bool:
        return bool(self.policy_names)


def extract_column(property_name: str, key_node: Any, value: Any) -> ColumnSpec | None:
    """Build a ColumnSpec from ``key: type('name').modifier()...``."""
    value = unwrap_expression(value)
    if value is None:
        return None
    chain = linearize_from_tip(value)
    type_tag = chain.root_call_name()
    if type_tag is None:
        return None

    name_arg = argument(chain.root, 0)
    declared_name = string_value(name_arg)
    modifiers = tuple(chain.names())

    return ColumnSpec(
        property_name=property_name,
        declared_name=declared_name,
        type_tag=type_tag,
        has_inline_unique_or_primary_key=any(m in INLINE_INDEX_MODIFIERS for m in modifiers),
        modifiers=modifiers,
        key_node=key_node,
        value_node=value,
        name_node=name_arg if declared_name is not None else None,
    )


def extract_columns(columns_node: Any) -> dict[str, ColumnSpec]:
    """Columns of the declaration object, in declaration order."""
    columns = {}
    for property_name, key_node, value in object_pairs(columns_node):
        column = extract_column(property_name, key_node, value)
        if column is not None:
            columns[property_name] = column
    return columns


def _builder_entries(result: Any) -> list[tuple[str | None, Any]]:
    if result is None:
        return []
    if result.type == "object":
        return [(name, value) for name, _key, value in object_pairs(result)]
    if result.type == "array":
        return [(None, element) for element in named_children(result)]
    return []


def _referenced_property(arg: Any, table_param: str | None) -> str | None:
    arg = unwrap_expression(arg)
    if table_param is None or not is_member(arg):
        return None
    obj = unwrap_expression(member_object(arg))
    if obj is None or obj.type != "identifier" or node_text(obj) != table_param:
        return None
    return member_property_name(arg)


def extract_index(key: str | None, value: Any, table_param: str | None) -> IndexDeclaration | None:
    """IndexDeclaration for a builder entry whose chain contains ``.on(...)``."""
    value = unwrap_expression(value)
    if value is None:
        return None
    chain = linearize_from_tip(value)
    on_segment = None
    for segment in reversed(chain.segments):
        if segment.method_name == "on" and segment.called:
            on_segment = segment
            break
    if on_segment is None:
        return None

    referenced = set()
    for arg in call_arguments(on_segment.node):
        prop = _referenced_property(arg, table_param)
        if prop is not None:
            referenced.add(prop)

    builder = chain.root_call_name()
    return IndexDeclaration(
        index_name=string_value(argument(chain.root, 0)),
        kind="unique" if builder in UNIQUE_INDEX_BUILDERS else "index",
        referenced_properties=referenced,
        property_key=key,
        node=value,
    )


def extract_extra_builder(builder: Any) -> tuple[list[IndexDeclaration], list[str]]:
    """Indexes and policy names declared by a table's extra-builder function."""
    builder = unwrap_expression(builder)
    if builder is None or builder.type not in FUNCTION_TYPES:
        return [], []

    params = function_parameter_names(builder)
    table_param = params[0] if params and params[0] else None

    indexes = []
    policies = []
    for key, value in _builder_entries(function_result_expression(builder)):
        chain = linearize_from_tip(unwrap_expression(value))
        if chain.root_call_name() in POLICY_BUILDERS:
            policy_name = string_value(argument(chain.root, 0))
            policies.append(policy_name or key or "<anonymous>")
            continue
        index = extract_index(key, value, table_param)
        if index is not None:
            indexes.append(index)
    return indexes, policies


def extract_table(node: Any) -> TableDeclaration | None:
    """TableDeclaration for a table constructor call, or None for other calls."""
    constructor = table_constructor_name(node)
    if constructor is None:
        return None

    name_arg = argument(node, 0)
    name = string_value(name_arg)
    columns_node = unwrap_expression(argument(node, 1))
    if columns_node is not None and columns_node.type != "object":
        columns_node = None
    extra = argument(node, 2)
    indexes, policies = extract_extra_builder(extra)

    chain = chain_for(node)
    rls_enabled = "withRLS" in chain.names() or "enableRLS" in chain.names()

    return TableDeclaration(
        name=name,
        source_node=node,
        constructor=constructor,
        columns=extract_columns(columns_node) if columns_node is not None else {},
        indexes=indexes,
        policy_names=policies,
        rls_enabled=rls_enabled,
        name_node=name_arg if name is not None else None,
        columns_node=columns_node,
        extra_builder=unwrap_expression(extra),
    )
