"""Depth-first tree walker with dispatch by node type."""

from collections import defaultdict
from collections.abc import Callable
from typing import Any

NodeHandler = Callable[[Any], None]
FinishHandler = Callable[[], None]


class TreeWalker:
    """Pre-order traversal of a tree-sitter tree.

    Handlers registered for a node type run before the walker descends
    into that node's children. Every node is visited exactly once. After
    the last node, finish handlers run in registration order.
    """

    def __init__(self):
        self._handlers: dict[str, list[NodeHandler]] = defaultdict(list)
        self._finish: list[FinishHandler] = []
        self.nodes_visited = 0

    def on(self, node_type: str, handler: NodeHandler) -> None:
        self._handlers[node_type].append(handler)

    def on_finish(self, handler: FinishHandler) -> None:
        self._finish.append(handler)

    def walk(self, root: Any) -> None:
        # Iterative: fluent chains can nest arbitrarily deep
        stack = [root]
        while stack:
            node = stack.pop()
            self.nodes_visited += 1
            for handler in self._handlers.get(node.type, ()):
                handler(node)
            stack.extend(reversed(node.children))

        for handler in self._finish:
            handler()
