"""Pytest configuration and fixtures."""

import pytest

from drizzleaudit.ast_parser import ASTParser
from drizzleaudit.detector import analyze_source


@pytest.fixture(scope="session")
def ts_parser():
    """Shared tree-sitter TypeScript parser front end."""
    return ASTParser()


@pytest.fixture
def parse(ts_parser):
    """Parse TypeScript source and return the root node."""

    def _parse(code: str):
        return ts_parser.parse_source(code).root

    return _parse


@pytest.fixture
def analyze():
    """Run the engine over a snippet, optionally limited to one rule.

    Usage:
        diagnostics = analyze(code, rule="no-select-star", max_joins=2)
    """

    def _analyze(code: str, rule: str | None = None, preset: str | None = None, **options):
        rules = [rule] if rule else None
        settings = {rule: options} if rule and options else None
        return analyze_source(code, rules=rules, options=settings, preset=preset)

    return _analyze


def find_nodes(root, node_type: str) -> list:
    """All nodes of ``node_type`` in pre-order."""
    found = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == node_type:
            found.append(node)
        stack.extend(reversed(node.children))
    return found


def message_ids(diagnostics) -> list[str]:
    return [d.message_id for d in diagnostics]


def data_values(diagnostics, key: str) -> list[str]:
    return [d.data.get(key) for d in diagnostics]
