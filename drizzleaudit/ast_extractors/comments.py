"""Comment justification matching.

A comment "immediately precedes" a node when nothing but whitespace and
other comments separates it from the node's first token. The leading
comments of the statement that encloses the node count as well, so a
justification written above ``const admin = db.serviceRole`` covers the
property access in the middle of the line.
"""

import re
from typing import Any

from .base import node_text

JUSTIFICATION_PATTERNS = (
    re.compile(r"RLS\s+bypass", re.IGNORECASE),
    re.compile(r"security", re.IGNORECASE),
    re.compile(r"admin", re.IGNORECASE),
    re.compile(r"service\s+role", re.IGNORECASE),
    re.compile(r"system\s+operation", re.IGNORECASE),
    re.compile(r"migration", re.IGNORECASE),
    re.compile(r"background\s+job", re.IGNORECASE),
    re.compile(r"cron", re.IGNORECASE),
)

STATEMENT_CONTAINERS = frozenset(["program", "statement_block", "class_body", "switch_case"])


def _leading_comments(node: Any) -> list[Any]:
    """Comments between the previous token and ``node``'s first token."""
    comments = []
    current = node
    while current is not None:
        sibling = current.prev_sibling
        while sibling is not None and sibling.type == "comment":
            comments.append(sibling)
            sibling = sibling.prev_sibling
        if comments or sibling is not None:
            break
        # First child: the preceding token lies before the parent
        current = current.parent
    comments.reverse()
    return comments


def _enclosing_statement(node: Any) -> Any:
    current = node
    while current.parent is not None and current.parent.type not in STATEMENT_CONTAINERS:
        current = current.parent
    return current if current.parent is not None else None


def comments_before(node: Any) -> list[Any]:
    """Comment nodes lexically preceding ``node`` or its enclosing statement."""
    comments = _leading_comments(node)
    statement = _enclosing_statement(node)
    if statement is not None and statement.id != node.id:
        seen = {comment.id for comment in comments}
        for comment in _leading_comments(statement):
            if comment.id not in seen:
                comments.append(comment)
    return comments


def comment_body(comment: Any) -> str:
    """Comment text without the ``//`` or ``/* */`` markers."""
    text = node_text(comment)
    if text.startswith("//"):
        return text[2:]
    if text.startswith("/*"):
        return text[2:-2] if text.endswith("*/") else text[2:]
    return text


def has_justification(node: Any, patterns=JUSTIFICATION_PATTERNS) -> bool:
    """True iff any comment preceding ``node`` matches any justification pattern."""
    return any(
        pattern.search(comment_body(comment))
        for comment in comments_before(node)
        for pattern in patterns
    )
