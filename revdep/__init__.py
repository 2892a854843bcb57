"""revdep: find the import chains through which entry points reach a module."""

from revdep.errors import (
    ConfigError,
    ExtractionError,
    FilesystemError,
    GraphConsistencyError,
    RevDepError,
)
from revdep.extractor import ExtractionCache
from revdep.models import (
    CIRCULAR,
    DependencyEdge,
    DependencyTable,
    GraphNode,
    ResolveConfig,
    ResolveResult,
)
from revdep.pipeline import (
    get_deps_table,
    get_entry_points,
    get_files_for_entry_point,
    get_node_modules_for_entry_point,
    resolve,
)

__version__ = "0.1.0"

__all__ = [
    "CIRCULAR",
    "ConfigError",
    "DependencyEdge",
    "DependencyTable",
    "ExtractionCache",
    "ExtractionError",
    "FilesystemError",
    "GraphConsistencyError",
    "GraphNode",
    "ResolveConfig",
    "ResolveResult",
    "RevDepError",
    "get_deps_table",
    "get_entry_points",
    "get_files_for_entry_point",
    "get_node_modules_for_entry_point",
    "resolve",
]
