"""Exception hierarchy for revdep.

Everything raised on purpose by the library inherits from RevDepError so the
CLI and web layers can catch it in one place. "No results" is never an error.
"""

from __future__ import annotations


class RevDepError(Exception):
    """Base exception for all revdep errors."""


class FilesystemError(RevDepError, OSError):
    """A directory or file could not be read."""

    @classmethod
    def from_os_error(cls, exc: OSError, path=None) -> FilesystemError:
        return cls(exc.errno, exc.strerror, str(path if path is not None else exc.filename))


class ExtractionError(RevDepError):
    """The dependency extractor failed to analyze a file."""

    def __init__(self, message: str, module_id: str | None = None):
        self.module_id = module_id
        super().__init__(message)


class ConfigError(RevDepError):
    """An alias config or pre-extracted table could not be loaded."""


class GraphConsistencyError(RevDepError):
    """A module referenced during traversal is missing from the dependency table."""

    def __init__(self, module_id: str, imported_from: str | None = None):
        self.module_id = module_id
        self.imported_from = imported_from
        message = f"Dependency '{module_id}' not found in dependency table"
        if imported_from:
            message += f" (imported from '{imported_from}')"
        super().__init__(message)
