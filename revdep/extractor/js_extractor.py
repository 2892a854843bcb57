"""JavaScript/TypeScript import extractor using regex patterns."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path

from revdep.errors import ExtractionError, FilesystemError
from revdep.extractor.aliases import AliasConfig
from revdep.extractor.base import BaseExtractor, ExtractionCache
from revdep.extractor.builtins import is_builtin, package_name
from revdep.models import (
    NODE_MODULES,
    DependencyEdge,
    ExtractorOptions,
    has_source_extension,
)

logger = logging.getLogger(__name__)

# Patterns for ES module and CommonJS imports
_FROM_RE = re.compile(
    r"""(?:^|[;\n}])\s*(import|export)\s+(type\s+)?([\w$*{}\s,]*?)\s*from\s*['"]([^'"\n]+)['"]""",
)
_SIDE_EFFECT_RE = re.compile(
    r"""(?:^|[;\n}])\s*import\s*['"]([^'"\n]+)['"]""",
)
_REQUIRE_RE = re.compile(
    r"""\brequire\s*\(\s*['"]([^'"\n]+)['"]\s*\)""",
)
_DYNAMIC_IMPORT_RE = re.compile(
    r"""\bimport\s*\(\s*['"]([^'"\n]+)['"]\s*\)""",
)
_COMMENT_RE = re.compile(
    r"""('(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`)|/\*.*?\*/|//[^\n]*""",
    re.DOTALL,
)

RESOLVE_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts", ".js", ".jsx", ".mjs", ".cjs", ".json")

# "./a.js" written in a TypeScript source may point at "./a.ts"
_TS_SUBSTITUTES = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}


def _strip_comments(source: str) -> str:
    def keep_strings(m: re.Match) -> str:
        if m.group(1):
            return m.group(1)
        # Preserve line structure so anchors keep working
        return "\n" * m.group(0).count("\n")
    return _COMMENT_RE.sub(keep_strings, source)


def find_imports(source: str) -> list[tuple[str, bool]]:
    """Return (specifier, is_type_only) pairs in source order, first occurrence wins."""
    source = _strip_comments(source)
    found: list[tuple[int, str, bool]] = []

    for m in _FROM_RE.finditer(source):
        clause = m.group(3).strip()
        if m.group(1) == "export" and not (clause.startswith("*") or clause.startswith("{")):
            continue
        found.append((m.start(4), m.group(4), bool(m.group(2))))

    for m in _SIDE_EFFECT_RE.finditer(source):
        found.append((m.start(1), m.group(1), False))

    for m in _REQUIRE_RE.finditer(source):
        found.append((m.start(1), m.group(1), False))

    for m in _DYNAMIC_IMPORT_RE.finditer(source):
        found.append((m.start(1), m.group(1), False))

    found.sort(key=lambda f: f[0])

    imports: list[tuple[str, bool]] = []
    seen: set[str] = set()
    for _, request, type_only in found:
        if request in seen:
            continue
        seen.add(request)
        imports.append((request, type_only))
    return imports


class JsExtractor(BaseExtractor):
    """Resolves ES module and CommonJS imports of JS/TS sources to absolute paths."""

    def __init__(self, options: ExtractorOptions, cache: ExtractionCache | None = None):
        super().__init__(options, cache)
        self.aliases = AliasConfig.load(options.alias_config) if options.alias_config else None

    def scan_module(self, module_id: str) -> list[tuple[str, bool]] | None:
        """Import requests of one file as (specifier, is_type_only) pairs."""
        path = Path(module_id)
        if not has_source_extension(module_id):
            # Assets, JSON and other non-source files are terminal
            return []

        try:
            source = path.read_bytes().decode("utf-8")
        except OSError as exc:
            raise FilesystemError.from_os_error(exc, path) from exc
        except UnicodeDecodeError as exc:
            raise ExtractionError(f"Cannot decode {module_id}: {exc}", module_id) from exc

        imports = find_imports(source)
        if self.options.ignore_type_imports:
            imports = [(request, type_only) for request, type_only in imports if not type_only]
        return imports

    def link(self, module_id: str, scanned: list[tuple[str, bool]] | None) -> list[DependencyEdge] | None:
        if scanned is None:
            return None
        from_dir = Path(module_id).parent
        edges: list[DependencyEdge] = []
        for request, type_only in scanned:
            target = self.resolve_request(request, from_dir)
            if target is None and not is_builtin(request):
                logger.debug("unresolved import %r in %s", request, module_id)
            edges.append(DependencyEdge(target_id=target, request=request, type_only=type_only))

        logger.debug("linked %s: %d import(s)", module_id, len(edges))
        return edges

    def resolve_request(self, request: str, from_dir: Path) -> str | None:
        request = request.split("?", 1)[0]

        if request.startswith(".") or os.path.isabs(request):
            return self._resolve_file(os.path.join(str(from_dir), request))

        if self.aliases is not None:
            for candidate in self.aliases.candidates(request):
                resolved = self._resolve_file(candidate)
                if resolved is not None:
                    return resolved

        if is_builtin(request):
            return None
        return self._resolve_node_module(request, from_dir)

    def _resolve_file(self, candidate: str) -> str | None:
        found = self._existing_file(os.path.normpath(candidate))
        return os.path.realpath(found) if found is not None else None

    @staticmethod
    def _existing_file(candidate: str) -> str | None:
        if os.path.isfile(candidate):
            return candidate

        base, ext = os.path.splitext(candidate)
        for substitute in _TS_SUBSTITUTES.get(ext, ()):
            if os.path.isfile(base + substitute):
                return base + substitute

        for ext in RESOLVE_EXTENSIONS:
            if os.path.isfile(candidate + ext):
                return candidate + ext

        if os.path.isdir(candidate):
            for ext in RESOLVE_EXTENSIONS:
                index = os.path.join(candidate, "index" + ext)
                if os.path.isfile(index):
                    return index
        return None

    def _resolve_node_module(self, request: str, from_dir: Path) -> str | None:
        name = package_name(request)
        subpath = request[len(name):].lstrip("/")

        for directory in (from_dir, *from_dir.parents):
            package_dir = directory / NODE_MODULES / name
            if not package_dir.is_dir():
                continue
            if subpath:
                return self._resolve_file(str(package_dir / subpath)) or str(package_dir / subpath)
            return self._package_entry(package_dir)
        return None

    def _package_entry(self, package_dir: Path) -> str:
        manifest = package_dir / "package.json"
        if manifest.is_file():
            try:
                data = json.loads(manifest.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                logger.debug("unreadable package.json in %s", package_dir)
                data = {}
            for key in ("module", "main"):
                entry = data.get(key) if isinstance(data, dict) else None
                if isinstance(entry, str):
                    resolved = self._resolve_file(str(package_dir / entry))
                    if resolved is not None:
                        return resolved
        return self._resolve_file(str(package_dir)) or str(package_dir)
