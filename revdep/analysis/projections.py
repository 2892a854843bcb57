"""Projections of one entry point's dependency table."""

from __future__ import annotations

from revdep.models import DependencyTable, is_node_modules_path


def files_in_table(table: DependencyTable) -> list[str]:
    """Every module reachable from the entry point the table was built for."""
    return sorted(table)


def node_modules_in_table(table: DependencyTable) -> list[str]:
    """Distinct raw import requests that resolve into node_modules."""
    requests = {
        edge.request
        for edges in table.values() if edges is not None
        for edge in edges
        if is_node_modules_path(edge.target_id) and edge.request
    }
    return sorted(requests)
