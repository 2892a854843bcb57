"""Table normalizer: drops builtins and node_modules entries from raw extractor output."""

from __future__ import annotations

from revdep.extractor.builtins import is_builtin
from revdep.models import DependencyEdge, DependencyTable, is_node_modules_path


def normalize_table(raw: DependencyTable, include_node_modules: bool = False) -> DependencyTable:
    """Return a canonical copy of ``raw``.

    Keys under node_modules are always dropped. Edges to builtins are
    dropped. Edges into node_modules are kept only when
    ``include_node_modules`` is set. Unresolved edges (``target_id`` None)
    and unanalyzed keys (value None) are preserved.
    """
    table: DependencyTable = {}

    for module_id, edges in raw.items():
        if is_node_modules_path(module_id) or is_builtin(module_id):
            continue
        if edges is None:
            table[module_id] = None
            continue

        cleaned: list[DependencyEdge] = []
        for edge in edges:
            if is_builtin(edge.request) and (edge.target_id is None or is_builtin(edge.target_id)):
                continue
            if is_node_modules_path(edge.target_id) and not include_node_modules:
                continue
            cleaned.append(DependencyEdge(
                target_id=edge.target_id,
                request=edge.request,
                type_only=edge.type_only,
            ))
        table[module_id] = cleaned

    return table


def referenced_ids(table: DependencyTable) -> set[str]:
    """Every non-null target id appearing anywhere as a dependency."""
    ids: set[str] = set()
    for edges in table.values():
        for edge in edges or []:
            if edge.target_id is not None:
                ids.add(edge.target_id)
    return ids
