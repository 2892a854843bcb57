"""Graph analysis over a dependency table."""

from revdep.analysis.cycles import find_cycles
from revdep.analysis.depth import get_max_depth
from revdep.analysis.entry_points import discover_entry_points, find_entry_points_in_table
from revdep.analysis.graph_builder import GraphBuilder, build_graph
from revdep.analysis.normalizer import normalize_table, referenced_ids
from revdep.analysis.paths import iter_paths_to_root, resolve_paths_to_root
from revdep.analysis.projections import files_in_table, node_modules_in_table

__all__ = [
    "GraphBuilder",
    "build_graph",
    "discover_entry_points",
    "files_in_table",
    "find_cycles",
    "find_entry_points_in_table",
    "get_max_depth",
    "iter_paths_to_root",
    "node_modules_in_table",
    "normalize_table",
    "referenced_ids",
    "resolve_paths_to_root",
]
