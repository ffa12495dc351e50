"""Update Without Filter Analyzer - flags ``db.update(t).set(...)`` chains with no ``.where(...)``.

A bare ``db.update(t)`` is still being built and is not reported; the
statement becomes executable once ``.set`` is attached, so the report is
anchored on that segment. ``.where`` must follow ``.set`` in the same chain.
"""

from drizzleaudit.ast_extractors.base import callee, member_object, node_text
from drizzleaudit.ast_extractors.chain import chain_for
from drizzleaudit.ast_extractors.classifier import FILTER_VERBS, CallCategory
from drizzleaudit.config_runtime import rule_defaults
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.rules.drizzle.delete_where_analyze import receiver_matches
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="enforce-update-with-where",
    category="drizzle",
    description="Enforce using `update` with the `where` clause in the same query chain.",
    messages={
        "enforceUpdateWithWhere": (
            "Without `.where(...)` this update rewrites every row of the table. "
            "Use `{drizzleObjName}.update(...).set(...).where(...)` or narrow the statement."
        ),
    },
    default_severity=Severity.HIGH,
    default_options=rule_defaults("enforce-update-with-where"),
    confidence=Confidence.HIGH,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)


class UpdateWithoutWhereAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def visit_call(self, site, state: UnitState) -> None:
        if site.category is not CallCategory.MUTATION_ROOT or site.name != "update":
            return

        receiver = node_text(member_object(callee(site.node)))
        if not receiver_matches(receiver, self.options.get("drizzle_object_name") or []):
            return

        chain = chain_for(site.node)
        index = chain.index_of(site.node)
        if index is None:
            return

        set_index = None
        for offset, segment in enumerate(chain.segments_after(index), start=index + 1):
            if segment.method_name == "set":
                set_index = offset
                break
        if set_index is None or chain.has_any(FILTER_VERBS, after=set_index):
            return

        self.report(
            state,
            chain.segments[set_index].node,
            "enforceUpdateWithWhere",
            {"drizzleObjName": receiver},
        )
