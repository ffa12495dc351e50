"""Select Star Analyzer - a bare ``.select()`` inside a query chain selects every column."""

from drizzleaudit.ast_extractors.base import call_arguments
from drizzleaudit.ast_extractors.chain import chain_for
from drizzleaudit.ast_extractors.classifier import QUERY_CONTEXT_VERBS, CallCategory
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="no-select-star",
    category="drizzle",
    description="Avoid SELECT * queries. Explicitly list columns for better performance.",
    messages={
        "noSelectStar": "Avoid SELECT *. Explicitly list columns for better performance and clarity",
    },
    default_severity=Severity.MEDIUM,
    confidence=Confidence.MEDIUM,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)


class SelectStarAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def visit_call(self, site, state: UnitState) -> None:
        if site.category is not CallCategory.CHAIN_SEGMENT or site.name != "select":
            return
        if call_arguments(site.node):
            return

        # Only a select followed by query verbs is a database query
        chain = chain_for(site.node)
        index = chain.index_of(site.node)
        if index is not None and chain.has_any(QUERY_CONTEXT_VERBS, after=index):
            self.report(state, site.node, "noSelectStar")
