"""Graph builder: memoized, cycle-safe traversal of a dependency table from one entry point.

Each module gets exactly one GraphNode per traversal. A module reached again
through another import chain is not re-traversed; its node gains one more
parent instead. The set of modules on the current chain is passed down by
value, so sibling branches never see each other's state and a module that
appears twice on one chain closes a cycle and yields a fresh CIRCULAR
sentinel.

The traversal uses an explicit stack rather than recursion; visiting order,
parent order and cache timing match the recursive formulation (a node is
cached only once all of its children are done).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from revdep.errors import GraphConsistencyError
from revdep.extractor.builtins import package_name
from revdep.globs import GlobMatcher, create_glob_matchers, matches_any
from revdep.models import (
    CIRCULAR,
    DependencyTable,
    GraphBuildResult,
    GraphNode,
    is_node_modules_path,
)

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    node: GraphNode
    visited: frozenset[str]
    pending: list[str]
    index: int = 0


@dataclass
class GraphBuilder:
    table: DependencyTable
    target: str | None = None
    not_traverse: list[str] = field(default_factory=list)
    include_node_modules: bool = False
    cwd: Path | None = None

    def __post_init__(self):
        root = self.cwd or Path("/")
        self._skip_matchers: list[GlobMatcher] = create_glob_matchers(self.not_traverse, root)

    def build(self, entry_point: str) -> GraphBuildResult:
        logger.debug("building graph for %s", entry_point)
        self._packages: set[str] = set()
        # The entry point has nothing above it, so it is never a cache hit or a cycle
        root = self._enter(entry_point, frozenset(), None)
        result = GraphBuildResult(root=root.node)
        vertices = result.vertices
        stack = [root]

        while stack:
            frame = stack[-1]
            if frame.index >= len(frame.pending):
                stack.pop()
                vertices[frame.node.path] = frame.node
                if frame.node.path == self.target:
                    result.target = frame.node
                continue

            child_id = frame.pending[frame.index]
            frame.index += 1

            cached = vertices.get(child_id)
            if cached is not None:
                cached.parents.append(frame.node)
                frame.node.children.append(cached)
                continue

            if child_id in frame.visited:
                logger.debug("circular dependency: %s -> %s", frame.node.path, child_id)
                frame.node.children.append(GraphNode(path=CIRCULAR, parents=[frame.node]))
                continue

            child = self._enter(child_id, frame.visited, frame.node)
            frame.node.children.append(child.node)
            stack.append(child)

        return result

    def _enter(
        self,
        module_id: str,
        visited: frozenset[str],
        parent: GraphNode | None,
    ) -> _Frame:
        node = GraphNode(path=module_id, parents=[parent] if parent is not None else [])

        if module_id in self._packages:
            return _Frame(node=node, visited=visited, pending=[])

        if module_id not in self.table:
            raise GraphConsistencyError(module_id, parent.path if parent is not None else None)

        return _Frame(
            node=node,
            visited=visited | {module_id},
            pending=self._children_ids(module_id),
        )

    def _children_ids(self, module_id: str) -> list[str]:
        children: list[str] = []
        for edge in self.table[module_id] or []:
            target = edge.target_id
            if target is None:
                continue
            if is_node_modules_path(target):
                if not self.include_node_modules:
                    continue
                # External packages become terminal nodes named after the package
                target = package_name(edge.request)
                self._packages.add(target)
                if target in children:
                    continue
            elif self._skip_matchers and matches_any(target, self._skip_matchers):
                continue
            children.append(target)
        return children


def build_graph(
    table: DependencyTable,
    entry_point: str,
    target: str | None = None,
    not_traverse: list[str] | None = None,
    include_node_modules: bool = False,
    cwd: Path | None = None,
) -> GraphBuildResult:
    """Build the graph for one entry point and locate ``target`` in it."""
    builder = GraphBuilder(
        table=table,
        target=target,
        not_traverse=list(not_traverse or []),
        include_node_modules=include_node_modules,
        cwd=cwd,
    )
    return builder.build(entry_point)
