"""Library operations: resolve, entry-points, files, node-modules and circular."""

from __future__ import annotations

import glob
import logging
import os
from pathlib import Path

from revdep.analysis.cycles import find_cycles
from revdep.analysis.depth import get_max_depth
from revdep.analysis.entry_points import discover_entry_points
from revdep.analysis.graph_builder import GraphBuilder
from revdep.analysis.normalizer import normalize_table
from revdep.analysis.paths import resolve_paths_to_root
from revdep.analysis.projections import files_in_table, node_modules_in_table
from revdep.extractor import ExtractionCache, get_extractor
from revdep.extractor.builtins import package_name
from revdep.models import DependencyTable, GraphBuildResult, ResolveConfig, ResolveResult

logger = logging.getLogger(__name__)


def remove_initial_dot(path: str) -> str:
    return path[2:] if path.startswith("./") else path


def to_module_id(path: str, cwd: Path) -> str:
    """Absolute module id for a user-supplied path."""
    return os.path.normpath(os.path.join(str(cwd), remove_initial_dot(path)))


def to_target_id(target: str, config: ResolveConfig) -> str:
    """Module id for a file target, or the package name in node-modules mode (``lodash/fp`` -> ``lodash``)."""
    target = remove_initial_dot(target)
    if config.include_node_modules and not target.startswith((".", "/")):
        if not (config.cwd / target).exists():
            return package_name(target)
    return to_module_id(target, config.cwd)


def get_deps_table(
    config: ResolveConfig,
    entry_points: list[str],
    include_node_modules: bool | None = None,
    cache: ExtractionCache | None = None,
) -> DependencyTable:
    """Extract and normalize the table reachable from the given entry points."""
    options = config.extractor_options(include_node_modules)
    extractor = get_extractor(options, deps_file=config.deps_file, cache=cache)
    entry_globs = [glob.escape(remove_initial_dot(e)) for e in entry_points]
    return normalize_table(
        extractor.extract(entry_globs),
        include_node_modules=options.include_node_modules,
    )


def get_entry_points(
    config: ResolveConfig,
    cache: ExtractionCache | None = None,
) -> tuple[list[str], DependencyTable]:
    """Discover entry points under ``config.cwd``; also returns the whole-tree table."""
    extractor = get_extractor(config.extractor_options(), deps_file=config.deps_file, cache=cache)
    return discover_entry_points(extractor, include=config.include, exclude=config.exclude)


def resolve(
    target: str,
    config: ResolveConfig,
    entry_points: list[str] | None = None,
    cache: ExtractionCache | None = None,
) -> ResolveResult:
    """Find the import chains from each entry point to ``target``.

    Entry points are discovered when none are given. The result holds one
    list of paths per entry point, empty where the target is unreachable.
    """
    if entry_points:
        entry_ids = list(dict.fromkeys(to_module_id(e, config.cwd) for e in entry_points))
        deps = get_deps_table(config, entry_ids, cache=cache)
    else:
        entry_ids, deps = get_entry_points(config, cache=cache)

    target_id = to_target_id(target, config)
    logger.debug("resolving %s from %d entry point(s)", target_id, len(entry_ids))

    result = ResolveResult(entry_points=entry_ids, deps_table=deps)
    for entry_point in entry_ids:
        graph = build_entry_point_graph(deps, entry_point, target_id, config)
        paths = resolve_paths_to_root(graph.target, config.all_paths, config.max_paths)
        logger.info("%s: %d path(s)", entry_point, len(paths))
        result.paths.append(paths)
    return result


def build_entry_point_graph(
    deps: DependencyTable,
    entry_point: str,
    target_id: str | None,
    config: ResolveConfig,
) -> GraphBuildResult:
    builder = GraphBuilder(
        table=deps,
        target=target_id,
        not_traverse=config.not_traverse,
        include_node_modules=config.include_node_modules,
        cwd=config.cwd,
    )
    return builder.build(entry_point)


def get_max_depths(
    result: ResolveResult,
    config: ResolveConfig,
) -> list[tuple[int, list[str]]]:
    """Deepest chain per entry point of a previous resolve."""
    return [
        get_max_depth(build_entry_point_graph(result.deps_table, entry_point, None, config).root)
        for entry_point in result.entry_points
    ]


def get_files_for_entry_point(
    entry_point: str,
    config: ResolveConfig,
    deps_table: DependencyTable | None = None,
    cache: ExtractionCache | None = None,
) -> list[str]:
    """Sorted list of every module the entry point transitively imports, itself included."""
    if deps_table is None:
        deps_table = get_deps_table(config, [to_module_id(entry_point, config.cwd)], cache=cache)
    return files_in_table(deps_table)


def get_node_modules_for_entry_point(
    entry_point: str,
    config: ResolveConfig,
    deps_table: DependencyTable | None = None,
    cache: ExtractionCache | None = None,
) -> list[str]:
    """Sorted distinct import requests of external packages used by the entry point."""
    if deps_table is None:
        deps_table = get_deps_table(
            config,
            [to_module_id(entry_point, config.cwd)],
            include_node_modules=True,
            cache=cache,
        )
    return node_modules_in_table(deps_table)


def get_circular(
    config: ResolveConfig,
    cache: ExtractionCache | None = None,
) -> tuple[list[list[str]], DependencyTable]:
    """Import cycles in the tree under ``config.cwd``, with the table they were found in."""
    _, deps = get_entry_points(config, cache=cache)
    cycles = find_cycles(deps)
    logger.info("found %d cycle(s) in %s", len(cycles), config.cwd)
    return cycles, deps
