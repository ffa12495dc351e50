"""Join Complexity Analyzer - too many joins in one query chain.

The chain is linearized once, so the count is the same whichever join
segment is visited. The report is attached to the first join of the
chain, which makes it exactly one diagnostic per chain.
"""

from drizzleaudit.ast_extractors.chain import chain_for
from drizzleaudit.ast_extractors.classifier import JOIN_VERBS, CallCategory
from drizzleaudit.config_runtime import rule_defaults
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="limit-join-complexity",
    category="drizzle",
    description="Limit the number of joins in a single query for better performance.",
    messages={
        "tooManyJoins": (
            "Query has {count} joins. Consider breaking into smaller queries or creating a view (max: {max})"
        ),
    },
    default_severity=Severity.MEDIUM,
    default_options=rule_defaults("limit-join-complexity"),
    confidence=Confidence.HIGH,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)


class JoinComplexityAnalyzer(UnitAnalyzer):
    metadata = METADATA

    @property
    def max_joins(self) -> int:
        value = self.options.get("max_joins") or 3
        return max(1, int(value))

    def visit_call(self, site, state: UnitState) -> None:
        if site.category is not CallCategory.CHAIN_SEGMENT or site.name not in JOIN_VERBS:
            return

        chain = chain_for(site.node)
        joins = [s for s in chain.segments if s.called and s.method_name in JOIN_VERBS]
        if not joins or joins[0].node.id != site.node.id:
            return

        if len(joins) > self.max_joins:
            self.report(state, site.node, "tooManyJoins", {"count": len(joins), "max": self.max_joins})
