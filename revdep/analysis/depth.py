"""Depth analyzer: longest chain from a root to a leaf."""

from __future__ import annotations

from revdep.models import GraphNode


def get_max_depth(root: GraphNode) -> tuple[int, list[str]]:
    """Return (depth, chain) for the deepest leaf below ``root``.

    A leaf has depth 1. Ties go to the first child reaching the maximum.
    Results are memoized per module id, so shared subtrees are measured once.
    CIRCULAR sentinels are leaves and are never memoized.
    """
    memo: dict[str, tuple[int, list[str]]] = {}

    # Iterative post-order: (node, children_done)
    stack: list[tuple[GraphNode, bool]] = [(root, False)]
    while stack:
        node, children_done = stack.pop()
        if not node.is_circular and node.path in memo:
            continue

        if not node.children:
            if not node.is_circular:
                memo[node.path] = (1, [node.path])
            continue

        if not children_done:
            stack.append((node, True))
            for child in reversed(node.children):
                if child.is_circular or child.path not in memo:
                    stack.append((child, False))
            continue

        best_depth, best_tail = 0, []
        for child in node.children:
            depth, tail = _measure(child, memo)
            if depth > best_depth:
                best_depth, best_tail = depth, tail
        memo[node.path] = (best_depth + 1, [node.path, *best_tail])

    return _measure(root, memo)


def _measure(node: GraphNode, memo: dict[str, tuple[int, list[str]]]) -> tuple[int, list[str]]:
    if node.is_circular:
        return 1, [node.path]
    return memo[node.path]
