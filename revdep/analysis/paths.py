"""Path resolver: walks parent links from a target node back to the root."""

from __future__ import annotations

import logging
from itertools import islice
from typing import Iterator

from revdep.errors import ConfigError
from revdep.models import GraphNode

logger = logging.getLogger(__name__)


def iter_paths_to_root(node: GraphNode, all_paths: bool = False) -> Iterator[list[str]]:
    """Yield entry -> target chains ending at ``node``.

    With ``all_paths`` every parent is followed at every step, in the order
    the parents were recorded. Otherwise only ``parents[0]`` is followed and
    exactly one chain is produced.
    """
    if not all_paths:
        chain = [node.path]
        current = node
        while current.parents:
            current = current.parents[0]
            chain.append(current.path)
        chain.reverse()
        yield chain
        return

    # Depth-first over parents; each entry is (node, suffix from node to target)
    stack: list[tuple[GraphNode, list[str]]] = [(node, [node.path])]
    while stack:
        current, suffix = stack.pop()
        if not current.parents:
            yield suffix
            continue
        for parent in reversed(current.parents):
            stack.append((parent, [parent.path, *suffix]))


def resolve_paths_to_root(
    node: GraphNode | None,
    all_paths: bool = False,
    max_paths: int | None = None,
) -> list[list[str]]:
    """Collect the chains from the root to ``node``.

    A target that is never reached yields no paths. A lone single-element
    chain means the target is the entry point itself, which does not count as
    depending on itself, so it also yields no paths.
    """
    if max_paths is not None and max_paths < 1:
        raise ConfigError(f"max_paths must be a positive integer, got {max_paths}")
    if node is None:
        return []

    paths = iter_paths_to_root(node, all_paths)
    if max_paths is not None:
        paths = islice(paths, max_paths)
    result = list(paths)

    if len(result) == 1 and len(result[0]) == 1:
        return []
    if max_paths is not None and len(result) == max_paths:
        logger.info("stopped path enumeration for %s at %d paths", node.path, max_paths)
    return result
