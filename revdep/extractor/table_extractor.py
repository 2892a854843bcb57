"""Extractor backed by a pre-extracted dependency table stored as JSON."""

from __future__ import annotations

import fnmatch
import json
import logging
import os
from pathlib import Path

from revdep.errors import ConfigError, ExtractionError, FilesystemError
from revdep.extractor.base import BaseExtractor, ExtractionCache
from revdep.models import (
    DependencyEdge,
    DependencyTable,
    ExtractorOptions,
    has_source_extension,
    is_node_modules_path,
)

logger = logging.getLogger(__name__)


def load_table(table_path: Path, cwd: Path) -> DependencyTable:
    """Load ``{id: [{"id": ..., "request": ...}, ...] | null}``; relative ids resolve against cwd."""
    try:
        text = table_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FilesystemError.from_os_error(exc, table_path) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in dependency table {table_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Dependency table {table_path} must be a JSON object")
    return table_from_dict(data, cwd)


def table_from_dict(data: dict, cwd: Path) -> DependencyTable:
    def absolute(module_id: str) -> str:
        return os.path.normpath(os.path.join(str(cwd), module_id))

    table: DependencyTable = {}
    for module_id, entries in data.items():
        key = absolute(module_id)
        if entries is None:
            table[key] = None
            continue
        if not isinstance(entries, list):
            raise ExtractionError(f"Dependencies of {module_id} must be a list or null", key)
        edges: list[DependencyEdge] = []
        for entry in entries:
            if not isinstance(entry, dict) or "request" not in entry:
                raise ExtractionError(f"Malformed dependency entry in {module_id}: {entry!r}", key)
            target = entry.get("id")
            edges.append(DependencyEdge(
                target_id=absolute(target) if target else None,
                request=entry["request"],
                type_only=bool(entry.get("typeOnly", False)),
            ))
        table[key] = edges
    return table


class TableExtractor(BaseExtractor):
    """Serves the sub-table reachable from the requested entry globs."""

    def __init__(
        self,
        options: ExtractorOptions,
        table: DependencyTable,
        cache: ExtractionCache | None = None,
        source_stamp: tuple[str, int] | None = None,
    ):
        super().__init__(options, cache)
        self.table = table
        # (path, mtime) of the file the table came from; in-memory tables are never cached
        self.source_stamp = source_stamp

    @classmethod
    def from_file(cls, options: ExtractorOptions, table_path: Path,
                  cache: ExtractionCache | None = None) -> TableExtractor:
        try:
            mtime = table_path.stat().st_mtime_ns
        except OSError as exc:
            raise FilesystemError.from_os_error(exc, table_path) from exc
        table = load_table(table_path, Path(options.cwd))
        return cls(options, table, cache, source_stamp=(str(table_path.resolve()), mtime))

    def expand_globs(self, entry_globs: list[str]) -> list[str]:
        found: list[str] = []
        seen: set[str] = set()
        for pattern in entry_globs:
            full_pattern = os.path.normpath(os.path.join(str(self.cwd), pattern))
            for module_id in sorted(self.table):
                if module_id in seen or is_node_modules_path(module_id):
                    continue
                if not has_source_extension(module_id):
                    continue
                # Emulate a single-level glob: "*" does not cross directories
                if module_id == full_pattern or (
                    fnmatch.fnmatchcase(os.path.dirname(module_id), os.path.dirname(full_pattern))
                    and fnmatch.fnmatchcase(os.path.basename(module_id), os.path.basename(full_pattern))
                ):
                    seen.add(module_id)
                    found.append(module_id)
        return found

    def list_directories(self) -> list[Path]:
        directories: set[Path] = set()
        for module_id in self.table:
            if is_node_modules_path(module_id):
                continue
            parent = Path(module_id).parent
            while parent != self.cwd and self.cwd in parent.parents:
                directories.add(parent)
                parent = parent.parent
        return sorted(directories)

    def knows(self, module_id: str) -> bool:
        return module_id in self.table

    def stamp(self, module_id: str) -> object:
        return self.source_stamp

    def scan_module(self, module_id: str) -> list[DependencyEdge] | None:
        edges = self.table[module_id]
        if edges is None:
            return None
        if self.options.ignore_type_imports:
            return [e for e in edges if not e.type_only]
        return list(edges)
