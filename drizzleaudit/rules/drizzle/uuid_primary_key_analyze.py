"""UUID Primary Key Analyzer - suggests ``uuid(...)`` over ``serial``/``integer`` primary keys."""

from drizzleaudit.ast_extractors.base import (
    argument,
    callee,
    callee_identifier,
    is_call,
    member_object,
    string_value,
    unwrap_expression,
)
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="prefer-uuid-primary-key",
    category="drizzle",
    description="Suggest using UUID for primary keys instead of serial/integer.",
    messages={
        "useUUID": "Consider using UUID for primary keys instead of serial/integer for better scalability",
    },
    default_severity=Severity.MEDIUM,
    confidence=Confidence.MEDIUM,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)

SEQUENTIAL_KEY_CONSTRUCTORS = frozenset(["serial", "integer"])


class UUIDPrimaryKeyAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def visit_call(self, site, state: UnitState) -> None:
        if site.name != "primaryKey" or callee_identifier(site.node) is not None:
            return

        # serial('id').primaryKey(): the receiver itself is the column constructor
        receiver = unwrap_expression(member_object(callee(site.node)))
        if not is_call(receiver) or callee_identifier(receiver) not in SEQUENTIAL_KEY_CONSTRUCTORS:
            return

        column_name = string_value(argument(receiver, 0)) or "id"
        self.report(
            state,
            site.node,
            "useUUID",
            suggestion=f"uuid('{column_name}').defaultRandom().primaryKey()",
        )
