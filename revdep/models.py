"""Data models for reverse dependency resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from revdep.errors import ConfigError

CIRCULAR = "CIRCULAR"

NODE_MODULES = "node_modules"

SOURCE_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts", ".mjs", ".cjs", ".js", ".jsx")


@dataclass(frozen=True)
class DependencyEdge:
    """One import edge: the raw specifier and the module it resolved to."""
    target_id: str | None
    request: str
    type_only: bool = False


DependencyTable = Dict[str, Optional[List[DependencyEdge]]]


@dataclass(eq=False)
class GraphNode:
    path: str
    children: list[GraphNode] = field(default_factory=list)
    parents: list[GraphNode] = field(default_factory=list)

    @property
    def is_circular(self) -> bool:
        return self.path == CIRCULAR

    def __repr__(self) -> str:
        return (
            f"GraphNode({self.path!r}, children={len(self.children)}, "
            f"parents={len(self.parents)})"
        )


@dataclass
class GraphBuildResult:
    """Result of one entry point's traversal."""
    root: GraphNode
    target: GraphNode | None = None
    vertices: dict[str, GraphNode] = field(default_factory=dict)


@dataclass
class ResolveResult:
    paths: list[list[list[str]]] = field(default_factory=list)  # per entry point
    entry_points: list[str] = field(default_factory=list)
    deps_table: DependencyTable = field(default_factory=dict)

    @property
    def has_results(self) -> bool:
        return any(self.paths)

    @property
    def total(self) -> int:
        return sum(len(p) for p in self.paths)


@dataclass(frozen=True)
class ExtractorOptions:
    """Options that change what an extractor produces for a given file."""
    cwd: Path = field(default_factory=lambda: Path(".").resolve())
    alias_config: Path | None = None
    include_node_modules: bool = False
    ignore_type_imports: bool = False


@dataclass
class ResolveConfig:
    """Configuration shared by the resolve, entry-points, files and node-modules operations."""
    cwd: Path = field(default_factory=lambda: Path("."))
    alias_config: Path | None = None
    deps_file: Path | None = None
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    all_paths: bool = False
    not_traverse: list[str] = field(default_factory=list)
    include_node_modules: bool = False
    ignore_type_imports: bool = False
    max_paths: int | None = None

    def __post_init__(self):
        if self.max_paths is not None and self.max_paths < 1:
            raise ConfigError(f"max_paths must be a positive integer, got {self.max_paths}")
        self.cwd = Path(self.cwd).expanduser().resolve()
        if self.alias_config is not None:
            self.alias_config = (self.cwd / self.alias_config).resolve()
        if self.deps_file is not None:
            self.deps_file = (self.cwd / self.deps_file).resolve()

    def extractor_options(self, include_node_modules: bool | None = None) -> ExtractorOptions:
        if include_node_modules is None:
            include_node_modules = self.include_node_modules
        return ExtractorOptions(
            cwd=self.cwd,
            alias_config=self.alias_config,
            include_node_modules=include_node_modules,
            ignore_type_imports=self.ignore_type_imports,
        )


def is_node_modules_path(module_id: str | None) -> bool:
    return bool(module_id) and NODE_MODULES in Path(module_id).parts


def has_source_extension(module_id: str) -> bool:
    return module_id.endswith(SOURCE_EXTENSIONS)
