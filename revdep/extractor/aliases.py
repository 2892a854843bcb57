"""Import alias configuration: tsconfig ``paths`` and bundler ``resolve.alias`` maps."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from revdep.errors import ConfigError

logger = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r'("(?:\\.|[^"\\])*")|/\*.*?\*/|//[^\n]*', re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


def _load_jsonc(text: str) -> dict:
    # Keep string literals intact, drop comments outside them
    text = _COMMENT_RE.sub(lambda m: m.group(1) or "", text)
    text = _TRAILING_COMMA_RE.sub(r"\1", text)
    return json.loads(text)


@dataclass
class AliasConfig:
    base_url: Path | None = None
    # Ordered (pattern, [replacement, ...]); patterns may contain one "*"
    paths: list[tuple[str, list[str]]] = field(default_factory=list)

    @classmethod
    def load(cls, config_path: Path) -> AliasConfig:
        try:
            text = config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read alias config {config_path}: {exc}") from exc
        try:
            data = _load_jsonc(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in alias config {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Alias config {config_path} must be a JSON object")
        return cls.from_dict(data, config_path.parent)

    @classmethod
    def from_dict(cls, data: dict, config_dir: Path) -> AliasConfig:
        config = cls()
        config_dir = config_dir.resolve()

        compiler_options = data.get("compilerOptions") or {}
        base_url = compiler_options.get("baseUrl")
        if base_url is not None:
            config.base_url = (config_dir / base_url).resolve()

        paths_root = config.base_url or config_dir
        for pattern, targets in (compiler_options.get("paths") or {}).items():
            if isinstance(targets, str):
                targets = [targets]
            config.paths.append((pattern, [str(paths_root / t) for t in targets]))

        alias_map = data.get("alias") or (data.get("resolve") or {}).get("alias") or {}
        for name, target in alias_map.items():
            # webpack's "name$" means exact match only
            exact = name.endswith("$")
            name = name.rstrip("$")
            target_path = str(config_dir / target)
            config.paths.append((name, [target_path]))
            if not exact:
                config.paths.append((f"{name}/*", [f"{target_path}/*"]))

        logger.debug("loaded %d alias pattern(s)", len(config.paths))
        return config

    def candidates(self, request: str) -> list[str]:
        """Absolute path candidates for a specifier, most specific pattern first."""
        matches: list[tuple[int, list[str]]] = []
        for pattern, targets in self.paths:
            if "*" in pattern:
                prefix, _, suffix = pattern.partition("*")
                if (
                    request.startswith(prefix)
                    and request.endswith(suffix)
                    and len(request) >= len(prefix) + len(suffix)
                ):
                    wildcard = request[len(prefix):len(request) - len(suffix)]
                    matches.append((len(prefix), [t.replace("*", wildcard, 1) for t in targets]))
            elif request == pattern:
                matches.append((len(pattern) + 1, list(targets)))

        matches.sort(key=lambda m: -m[0])
        result = [c for _, targets in matches for c in targets]
        if self.base_url is not None:
            result.append(str(self.base_url / request))
        return result
