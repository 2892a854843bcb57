"""Entry point discovery: modules never imported by anything else in the scanned tree."""

from __future__ import annotations

import glob
import logging
from pathlib import Path

from revdep.analysis.normalizer import normalize_table, referenced_ids
from revdep.extractor.base import BaseExtractor
from revdep.globs import create_glob_matchers, load_ignore_matchers, matches_any
from revdep.models import (
    DependencyTable,
    has_source_extension,
    is_node_modules_path,
)

logger = logging.getLogger(__name__)


def entry_point_globs(extractor: BaseExtractor, directories: list[Path] | None = None) -> list[str]:
    """One glob per directory for its direct children, plus the root glob."""
    root = extractor.cwd
    globs = ["*"]
    if directories is None:
        directories = extractor.list_directories()
    for directory in directories:
        globs.append(f"{glob.escape(directory.relative_to(root).as_posix())}/*")
    return globs


def find_entry_points_in_table(
    table: DependencyTable,
    cwd: Path,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> list[str]:
    """Table keys that are source files nobody references, filtered by globs."""
    referenced = referenced_ids(table)
    candidates = [
        module_id for module_id in table
        if has_source_extension(module_id)
        and not is_node_modules_path(module_id)
        and module_id not in referenced
    ]

    exclude_matchers = create_glob_matchers(exclude, cwd)
    if exclude_matchers:
        candidates = [c for c in candidates if not matches_any(c, exclude_matchers)]

    include_matchers = create_glob_matchers(include, cwd)
    if include_matchers:
        candidates = [c for c in candidates if matches_any(c, include_matchers)]

    return sorted(set(candidates))


def filter_ignored(
    entry_points: list[str],
    cwd: Path,
    directories: list[Path] | None = None,
) -> list[str]:
    ignore_matchers = load_ignore_matchers(cwd, directories)
    if not ignore_matchers:
        return entry_points
    return [e for e in entry_points if not matches_any(e, ignore_matchers)]


def discover_entry_points(
    extractor: BaseExtractor,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> tuple[list[str], DependencyTable]:
    """Scan the extractor's cwd and return (entry_points, whole-tree table).

    The table is returned so callers can reuse it instead of extracting again.
    """
    cwd = extractor.cwd
    directories = extractor.list_directories()
    globs = entry_point_globs(extractor, directories)
    logger.debug("discovering entry points with %d glob(s)", len(globs))

    table = normalize_table(
        extractor.extract(globs),
        include_node_modules=extractor.options.include_node_modules,
    )
    entry_points = find_entry_points_in_table(table, cwd, include=include, exclude=exclude)
    entry_points = filter_ignored(entry_points, cwd, directories)

    logger.info("found %d entry point(s) in %s", len(entry_points), cwd)
    return entry_points, table
