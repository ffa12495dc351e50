"""Delete Without Filter Analyzer - flags ``db.delete(table)`` chains with no ``.where(...)``."""

from drizzleaudit.ast_extractors.base import callee, member_object, node_text
from drizzleaudit.ast_extractors.chain import chain_for
from drizzleaudit.ast_extractors.classifier import FILTER_VERBS, CallCategory
from drizzleaudit.config_runtime import rule_defaults
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="enforce-delete-with-where",
    category="drizzle",
    description="Enforce using `delete` with the `where` clause in the same query chain.",
    messages={
        "enforceDeleteWithWhere": (
            "Without `.where(...)` this delete removes every row of the table. "
            "Use `{drizzleObjName}.delete(...).where(...)` or narrow the statement."
        ),
    },
    default_severity=Severity.HIGH,
    default_options=rule_defaults("enforce-delete-with-where"),
    confidence=Confidence.HIGH,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)


def receiver_matches(receiver: str, allowed: list[str]) -> bool:
    """True when no receiver list is configured or ``receiver`` is listed."""
    return not allowed or receiver in allowed


class DeleteWithoutWhereAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def visit_call(self, site, state: UnitState) -> None:
        if site.category is not CallCategory.MUTATION_ROOT or site.name != "delete":
            return

        receiver = node_text(member_object(callee(site.node)))
        if not receiver_matches(receiver, self.options.get("drizzle_object_name") or []):
            return

        chain = chain_for(site.node)
        index = chain.index_of(site.node)
        if index is None or chain.has_any(FILTER_VERBS, after=index):
            return

        self.report(state, site.node, "enforceDeleteWithWhere", {"drizzleObjName": receiver})
