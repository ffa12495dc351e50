"""Fluent method-chain navigation.

A chain such as ``db.select().from(users).leftJoin(a, on).where(x)`` is a
nest of alternating ``call_expression`` and ``member_expression`` nodes
with the outermost call at the tip. Rather than walking parent and child
links on every question, a chain is linearized once into root-to-tip
segments and every check runs plain scans over that sequence. Any node
inside the chain linearizes to the same Chain, so counts never depend
on which segment triggered the check.
"""

from dataclasses import dataclass
from typing import Any

from .base import (
    TRANSPARENT_WRAPPERS,
    callee_identifier,
    is_call,
    is_member,
    member_object,
    member_property_name,
    unwrap_expression,
)


@dataclass(frozen=True)
class ChainSegment:
    """One link in a fluent call chain."""

    method_name: str
    node: Any  # call_expression when invoked, member_expression otherwise
    member: Any
    called: bool


@dataclass(frozen=True)
class Chain:
    """Linearized chain, root receiver first."""

    root: Any
    segments: tuple[ChainSegment, ...]
    tip: Any

    def names(self) -> list[str]:
        return [segment.method_name for segment in self.segments]

    def index_of(self, node: Any) -> int | None:
        """Position of the segment whose call or member node is ``node``."""
        for i, segment in enumerate(self.segments):
            if segment.node.id == node.id or segment.member.id == node.id:
                return i
        return None

    def segments_after(self, index: int) -> tuple[ChainSegment, ...]:
        return self.segments[index + 1:]

    def count(self, verbs) -> int:
        return sum(1 for segment in self.segments if segment.method_name in verbs)

    def has_any(self, verbs, after: int | None = None) -> bool:
        segments = self.segments if after is None else self.segments_after(after)
        return any(segment.method_name in verbs for segment in segments)

    def root_call_name(self) -> str | None:
        """Callee identifier of a call-rooted chain: ``uuid('id').notNull()`` -> ``uuid``."""
        return callee_identifier(self.root)


def _step_up(node: Any) -> Any:
    """Next outer chain node, or None when ``node`` is the tip."""
    parent = node.parent
    if parent is None:
        return None
    if parent.type == "member_expression":
        obj = parent.child_by_field_name("object")
        if obj is not None and obj.id == node.id:
            return parent
        return None
    if parent.type == "call_expression":
        function = parent.child_by_field_name("function")
        if function is not None and function.id == node.id:
            return parent
        return None
    if parent.type in TRANSPARENT_WRAPPERS:
        return parent
    return None


def find_chain_tip(node: Any) -> Any:
    """Walk outward through wrapping calls and property accesses to the chain tip."""
    current = node
    while True:
        outer = _step_up(current)
        if outer is None:
            return current
        current = outer


def linearize_from_tip(tip: Any) -> Chain:
    """Build the Chain whose outermost node is ``tip``."""
    segments = []
    current = unwrap_expression(tip)
    while current is not None:
        if is_call(current):
            function = unwrap_expression(current.child_by_field_name("function"))
            name = member_property_name(function)
            if name is None:
                break  # call of a bare identifier or computed member: chain root
            segments.append(ChainSegment(name, current, function, True))
            current = unwrap_expression(member_object(function))
        elif is_member(current):
            name = member_property_name(current)
            if name is None:
                break
            segments.append(ChainSegment(name, current, current, False))
            current = unwrap_expression(member_object(current))
        else:
            break

    segments.reverse()
    return Chain(root=current, segments=tuple(segments), tip=tip)


def chain_for(node: Any) -> Chain:
    """Linearize the whole chain that ``node`` belongs to."""
    return linearize_from_tip(find_chain_tip(node))


def find_chain_root(node: Any) -> Any:
    """Innermost receiver of the chain containing ``node`` (``db`` in ``db.a().b()``)."""
    return chain_for(node).root


def count_segments(node: Any, verbs) -> int:
    """Number of segments in ``node``'s chain whose method is in ``verbs``."""
    return chain_for(node).count(verbs)
