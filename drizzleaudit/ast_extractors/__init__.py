"""Syntax-tree primitives for Drizzle schema and query analysis.

- base: total helpers over tree-sitter nodes
- walker: pre-order traversal with typed dispatch
- classifier: call-site categories
- chain: fluent chain linearization
- declarative: table, column and index facts
- comments: justification comments
"""

from .chain import Chain, ChainSegment, chain_for, count_segments, find_chain_root
from .classifier import CallCategory, CallSite, classify_call
from .comments import comments_before, has_justification
from .declarative import ColumnSpec, IndexDeclaration, TableDeclaration, extract_table
from .walker import TreeWalker

__all__ = [
    "Chain",
    "ChainSegment",
    "chain_for",
    "count_segments",
    "find_chain_root",
    "CallCategory",
    "CallSite",
    "classify_call",
    "comments_before",
    "has_justification",
    "ColumnSpec",
    "IndexDeclaration",
    "TableDeclaration",
    "extract_table",
    "TreeWalker",
]
