"""Extractor registry and dispatcher."""

from __future__ import annotations

from pathlib import Path

from revdep.extractor.base import BaseExtractor, ExtractionCache
from revdep.extractor.js_extractor import JsExtractor, find_imports
from revdep.extractor.table_extractor import TableExtractor, load_table
from revdep.models import ExtractorOptions


def get_extractor(
    options: ExtractorOptions,
    deps_file: Path | None = None,
    cache: ExtractionCache | None = None,
) -> BaseExtractor:
    """Pick the backend: a pre-extracted JSON table when given, source parsing otherwise."""
    if deps_file is not None:
        return TableExtractor.from_file(options, deps_file, cache=cache)
    return JsExtractor(options, cache=cache)


__all__ = [
    "BaseExtractor",
    "ExtractionCache",
    "JsExtractor",
    "TableExtractor",
    "find_imports",
    "get_extractor",
    "load_table",
]
