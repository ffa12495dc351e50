"""RLS Required Analyzer - sensitive tables need row-level security and a policy.

Runs at finalize: the statement that enables RLS for a table (or creates
its policy) may appear anywhere in the unit, before or after the table
declaration. By the time this runs the unit state is sealed, so the sets
of enabled and policy-covered tables are complete.

Sensitivity heuristic:
1. listed in ``sensitive_tables`` -> sensitive
2. listed in ``ignore_tables`` -> skipped
3. name contains any ``sensitive_patterns`` entry (case-insensitive) -> sensitive
"""

from drizzleaudit.config_runtime import rule_defaults
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="require-rls-enabled",
    category="drizzle",
    description="Require Row Level Security (RLS) to be enabled on tables containing sensitive data.",
    messages={
        "missingRLS": (
            "Table '{table}' contains sensitive data and should have RLS enabled. "
            "Add RLS with: sql`ALTER TABLE {table} ENABLE ROW LEVEL SECURITY`"
        ),
        "missingPolicy": "Table '{table}' has RLS enabled but no policies defined. This will block all access.",
    },
    default_severity=Severity.MEDIUM,
    default_options=rule_defaults("require-rls-enabled"),
    confidence=Confidence.MEDIUM,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)


def is_sensitive(
    table_name: str,
    sensitive_tables: list[str],
    ignore_tables: list[str],
    sensitive_patterns: list[str],
) -> bool:
    if table_name in sensitive_tables:
        return True
    if table_name in ignore_tables:
        return False
    lowered = table_name.lower()
    return any(pattern.lower() in lowered for pattern in sensitive_patterns)


class RLSRequiredAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def finalize(self, state: UnitState) -> None:
        sensitive_tables = self.options.get("sensitive_tables") or []
        ignore_tables = self.options.get("ignore_tables") or []
        patterns = self.options.get("sensitive_patterns")
        if patterns is None:
            patterns = []

        for name, table in state.tables.items():
            if not is_sensitive(name, sensitive_tables, ignore_tables, patterns):
                continue
            if name not in state.rls_enabled:
                self.report(state, table.source_node, "missingRLS", {"table": name})
            elif name not in state.policies:
                self.report(state, table.source_node, "missingPolicy", {"table": name})
