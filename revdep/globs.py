"""Glob and .gitignore matching on module paths."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from revdep.errors import FilesystemError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobMatcher:
    pattern: str
    root: str
    any_component: bool = False  # plain name, matches a file or directory anywhere
    dir_only: bool = False

    def matches(self, module_id: str) -> bool:
        rel = _relative_posix(module_id, self.root)
        if rel is None:
            return False

        if self.any_component:
            parts = PurePosixPath(rel).parts
            candidates = parts[:-1] if self.dir_only else parts
            return any(fnmatch.fnmatchcase(part, self.pattern) for part in candidates)

        if self.dir_only:
            return fnmatch.fnmatchcase(rel, self.pattern + "/*")

        return fnmatch.fnmatchcase(rel, self.pattern) or fnmatch.fnmatchcase(rel, self.pattern + "/*")


def _relative_posix(module_id: str, root: str) -> str | None:
    try:
        return Path(module_id).relative_to(root).as_posix()
    except ValueError:
        return None


def create_glob_matchers(patterns: list[str] | None, root: Path | str) -> list[GlobMatcher]:
    """Compile user include/exclude globs.

    Patterns are matched against the path relative to ``root``. A leading
    ``**/`` also matches files directly in the root.
    """
    matchers: list[GlobMatcher] = []
    root = str(root)
    for pattern in patterns or []:
        pattern = pattern.strip()
        if pattern.startswith("./"):
            pattern = pattern[2:]
        if not pattern:
            continue
        if Path(pattern).is_absolute():
            rel = _relative_posix(pattern, root)
            if rel is None:
                continue
            pattern = rel
        matchers.append(GlobMatcher(pattern=pattern, root=root))
        if pattern.startswith("**/"):
            matchers.append(GlobMatcher(pattern=pattern[3:], root=root))
    return matchers


def matches_any(module_id: str, matchers: list[GlobMatcher]) -> bool:
    return any(m.matches(module_id) for m in matchers)


def parse_gitignore(content: str, root: Path | str) -> list[GlobMatcher]:
    """Compile .gitignore lines into matchers rooted at the ignore file's directory."""
    matchers: list[GlobMatcher] = []
    root = str(root)
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("!"):
            logger.debug("negated ignore pattern %r is not supported, skipping", line)
            continue

        dir_only = line.endswith("/")
        pattern = line.rstrip("/")
        if not pattern:
            continue

        if "/" in pattern:
            matchers.append(GlobMatcher(pattern=pattern.lstrip("/"), root=root, dir_only=dir_only))
            if pattern.startswith("**/"):
                matchers.append(GlobMatcher(pattern=pattern[3:], root=root, dir_only=dir_only))
        else:
            matchers.append(GlobMatcher(pattern=pattern, root=root, any_component=True, dir_only=dir_only))
    return matchers


def _read_ignore_file(directory: Path) -> list[GlobMatcher]:
    ignore_file = directory / ".gitignore"
    if not ignore_file.is_file():
        return []
    try:
        content = ignore_file.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FilesystemError.from_os_error(exc, ignore_file) from exc
    logger.debug("loaded ignore rules from %s", ignore_file)
    return parse_gitignore(content, directory)


def load_ignore_matchers(cwd: Path, directories: list[Path] | None = None) -> list[GlobMatcher]:
    """Collect .gitignore rules from ``cwd`` up to the repository root.

    Ignore files inside ``directories`` (subdirectories of ``cwd`` that were
    scanned) are read too, each rooted at its own directory.
    """
    matchers: list[GlobMatcher] = []
    directory = cwd.resolve()
    while True:
        matchers.extend(_read_ignore_file(directory))
        if (directory / ".git").is_dir() or directory.parent == directory:
            break
        directory = directory.parent

    for directory in directories or []:
        matchers.extend(_read_ignore_file(directory))
    return matchers
