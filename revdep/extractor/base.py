"""Abstract base extractor."""

from __future__ import annotations

import abc
import errno
import glob
import logging
import os
from collections import deque
from pathlib import Path
from typing import Dict, Tuple

from revdep.errors import FilesystemError
from revdep.models import (
    NODE_MODULES,
    DependencyEdge,
    DependencyTable,
    ExtractorOptions,
    has_source_extension,
    is_node_modules_path,
)

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, ExtractorOptions]


class ExtractionCache:
    """Caller-owned memo of per-file scan results, keyed by (module id, options).

    Only what a file says about itself is stored (its import requests), never
    what they resolve to, so resolution always sees the current filesystem.
    Nothing is cached unless an instance is passed to an extractor. Entries
    carry a stamp (file mtime for source backends) and are ignored once the
    stamp changes.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, Tuple[object, list]] = {}

    def get(self, module_id: str, options: ExtractorOptions, stamp: object = None) -> list | None:
        entry = self._entries.get((module_id, options))
        if entry is None or entry[0] != stamp:
            return None
        return list(entry[1])

    def put(self, module_id: str, options: ExtractorOptions, scanned: list,
            stamp: object = None) -> None:
        self._entries[(module_id, options)] = (stamp, list(scanned))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class BaseExtractor(abc.ABC):
    """Base class for dependency extraction backends.

    Subclasses handle one module at a time in two steps: ``scan_module`` reads
    what the module itself declares (cacheable), ``link`` turns that into
    edges against the current filesystem. ``extract`` walks the import graph
    from the files matched by the entry globs and collects every first-party
    module it reaches into a dependency table.
    """

    def __init__(self, options: ExtractorOptions, cache: ExtractionCache | None = None):
        self.options = options
        self.cwd = Path(options.cwd)
        self.cache = cache

    def knows(self, module_id: str) -> bool:
        """Whether this backend can produce an entry for the module at all."""
        return True

    @abc.abstractmethod
    def scan_module(self, module_id: str) -> list | None:
        """Return what the module declares, or None if it is not analyzable."""

    def link(self, module_id: str, scanned: list | None) -> list[DependencyEdge] | None:
        """Turn scan results into edges; backends whose scan yields edges keep them."""
        return None if scanned is None else list(scanned)

    def parse_module(self, module_id: str) -> list[DependencyEdge] | None:
        """Return the outgoing edges of one module, or None if it is not analyzable."""
        return self.link(module_id, self._scan_cached(module_id))

    def expand_globs(self, entry_globs: list[str]) -> list[str]:
        """Resolve entry globs relative to cwd into module ids."""
        if not self.cwd.is_dir():
            raise FilesystemError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.cwd))
        found: list[str] = []
        seen: set[str] = set()
        for pattern in entry_globs:
            full_pattern = pattern if Path(pattern).is_absolute() else str(self.cwd / pattern)
            for match in sorted(glob.glob(full_pattern)):
                path = Path(match)
                if not path.is_file():
                    continue
                module_id = str(path.resolve())
                if module_id in seen or is_node_modules_path(module_id):
                    continue
                if not has_source_extension(module_id):
                    continue
                seen.add(module_id)
                found.append(module_id)
        return found

    def list_directories(self) -> list[Path]:
        """All directories below cwd, skipping node_modules and dot-directories."""
        directories: list[Path] = []
        pending = [self.cwd]
        while pending:
            current = pending.pop(0)
            try:
                entries = sorted(os.scandir(current), key=lambda e: e.name)
            except OSError as exc:
                raise FilesystemError.from_os_error(exc, current) from exc

            children = [
                Path(entry.path) for entry in entries
                if entry.name != NODE_MODULES
                and not entry.name.startswith(".")
                and entry.is_dir(follow_symlinks=False)
            ]
            directories.extend(children)
            pending.extend(children)
        return directories

    def extract(self, entry_globs: list[str]) -> DependencyTable:
        table: DependencyTable = {}
        queue = deque(self.expand_globs(entry_globs))
        logger.debug("extracting from %d entry file(s) in %s", len(queue), self.cwd)

        while queue:
            module_id = queue.popleft()
            if module_id in table or not self.knows(module_id):
                continue
            edges = self.parse_module(module_id)
            table[module_id] = edges

            for edge in edges or []:
                target = edge.target_id
                if target is None or target in table:
                    continue
                if is_node_modules_path(target):
                    continue
                queue.append(target)

        return table

    def stamp(self, module_id: str) -> object:
        """Value that changes whenever the module's scan result may have changed; None disables caching."""
        try:
            return os.stat(module_id).st_mtime_ns
        except OSError:
            return None

    def _scan_cached(self, module_id: str) -> list | None:
        stamp = self.stamp(module_id) if self.cache is not None else None
        if stamp is None:
            return self.scan_module(module_id)
        cached = self.cache.get(module_id, self.options, stamp)
        if cached is not None:
            return cached
        scanned = self.scan_module(module_id)
        if scanned is not None:
            self.cache.put(module_id, self.options, scanned, stamp)
        return scanned
