"""RLS Bypass Analyzer - detects code paths that skip row-level security.

Detected shapes, each silenced by a justification comment right before it
(or before its enclosing statement):
- ``<expr>.rls().bypass()``                      -> missingRLSComment
- ``x.serviceRole`` / ``adminClient`` / ``serviceClient`` / ``bypassRLS``
- ``createClient(url, { auth: { autoRefreshToken: false } })`` (options as the second argument)
- raw SQL containing ``SECURITY DEFINER``
"""

import re

from drizzleaudit.ast_extractors.base import (
    argument,
    callee_identifier,
    callee_property,
    is_call,
    member_object,
    member_property_name,
    object_property,
    unwrap_expression,
)
from drizzleaudit.ast_extractors.classifier import CallCategory
from drizzleaudit.ast_extractors.comments import has_justification
from drizzleaudit.rules.base import Confidence, RuleMetadata, Severity, UnitAnalyzer, UnitState
from drizzleaudit.utils.constants import SOURCE_EXTENSIONS

METADATA = RuleMetadata(
    name="prevent-rls-bypass",
    category="drizzle",
    description="Prevent accidental RLS bypass and require documentation when bypass is necessary.",
    messages={
        "bypassDetected": (
            "This query bypasses RLS using {method}. "
            "Use a service role client only when necessary and document why."
        ),
        "missingRLSComment": (
            "Document why RLS bypass is necessary with a comment explaining the security implications."
        ),
    },
    default_severity=Severity.MEDIUM,
    confidence=Confidence.MEDIUM,
    target_extensions=sorted(SOURCE_EXTENSIONS),
    exclude_patterns=["node_modules/", "dist/", "build/"],
)

BYPASS_PROPERTIES = frozenset(["serviceRole", "adminClient", "serviceClient", "bypassRLS"])

CLIENT_FACTORIES = frozenset(["createClient"])

SECURITY_DEFINER = re.compile(r"SECURITY\s+DEFINER", re.IGNORECASE)


def is_rls_bypass_call(node) -> bool:
    """``X.bypass`` whose object is a call of ``.rls``."""
    if member_property_name(node) != "bypass":
        return False
    obj = unwrap_expression(member_object(node))
    return is_call(obj) and callee_property(obj) == "rls"


def is_service_role_client(node) -> bool:
    """Client factory called with ``{ auth: { autoRefreshToken: false } }`` as second argument."""
    name = callee_identifier(node) or callee_property(node)
    if name not in CLIENT_FACTORIES:
        return False
    options = unwrap_expression(argument(node, 1))
    if options is None or options.type != "object":
        return False
    auth = object_property(options, "auth")
    if auth is None or auth.type != "object":
        return False
    refresh = object_property(auth, "autoRefreshToken")
    return refresh is not None and refresh.type == "false"


class RLSBypassAnalyzer(UnitAnalyzer):
    metadata = METADATA

    def visit_member_expression(self, node, state: UnitState) -> None:
        if is_rls_bypass_call(node):
            if not has_justification(node):
                self.report(state, node, "missingRLSComment")
            return

        name = member_property_name(node)
        if name in BYPASS_PROPERTIES and not has_justification(node):
            self.report(state, node, "bypassDetected", {"method": name})

    def visit_call(self, site, state: UnitState) -> None:
        if site.category is CallCategory.RAW_STATEMENT:
            if SECURITY_DEFINER.search(site.raw_text or "") and not has_justification(site.node):
                self.report(state, site.node, "bypassDetected", {"method": "SECURITY DEFINER"})
            return

        if is_service_role_client(site.node) and not has_justification(site.node):
            self.report(state, site.node, "bypassDetected", {"method": "service role client"})
