"""Tests for the library operations on a small project written to disk."""

import json
from pathlib import Path

import pytest

from revdep.errors import ConfigError, FilesystemError, GraphConsistencyError
from revdep.extractor import ExtractionCache
from revdep.models import ResolveConfig
from revdep.pipeline import (
    get_circular,
    get_entry_points,
    get_files_for_entry_point,
    get_max_depths,
    get_node_modules_for_entry_point,
    remove_initial_dot,
    resolve,
    to_target_id,
)

PROJECT = {
    ".gitignore": "scripts/\n",
    "src/index.ts": "import { b } from './b'\nimport fs from 'fs'\nimport _ from 'lodash'\n",
    "src/b.ts": "import { c } from './c'\nexport const b = c\n",
    "src/c.ts": "export const c = 1\n",
    "src/other.ts": "import './c'\nimport type { T } from './types'\n",
    "src/types.ts": "export type T = string\n",
    "scripts/tool.ts": "import '../src/c'\n",
    "node_modules/lodash/package.json": json.dumps({"main": "index.js"}),
    "node_modules/lodash/index.js": "module.exports = {}\n",
}


def _write_project(root: Path, files: dict) -> Path:
    (root / ".git").mkdir(exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def project(tmp_path):
    return _write_project(tmp_path, PROJECT).resolve()


def _ids(root, *rels):
    return [str(root / rel) for rel in rels]


def test_remove_initial_dot():
    assert remove_initial_dot("./src/a.ts") == "src/a.ts"
    assert remove_initial_dot("src/a.ts") == "src/a.ts"
    assert remove_initial_dot("../a.ts") == "../a.ts"


def test_to_target_id(project):
    assert to_target_id("./src/c.ts", ResolveConfig(cwd=project)) == str(project / "src/c.ts")
    assert to_target_id("lodash", ResolveConfig(cwd=project)) == str(project / "lodash")
    assert to_target_id("lodash", ResolveConfig(cwd=project, include_node_modules=True)) == "lodash"
    packages = ResolveConfig(cwd=project, include_node_modules=True)
    assert to_target_id("lodash/fp", packages) == "lodash"
    assert to_target_id("@scope/ui/button", packages) == "@scope/ui"
    assert to_target_id("src/c.ts", ResolveConfig(cwd=project, include_node_modules=True)) == str(
        project / "src/c.ts"
    )


class TestEntryPoints:
    def test_discovers_unreferenced_sources(self, project):
        entry_points, table = get_entry_points(ResolveConfig(cwd=project))

        assert entry_points == _ids(project, "src/index.ts", "src/other.ts")
        assert str(project / "scripts/tool.ts") in table
        assert not any("node_modules" in key for key in table)

    def test_include_and_exclude(self, project):
        entry_points, _ = get_entry_points(ResolveConfig(cwd=project, include=["src/index.*"]))
        assert entry_points == _ids(project, "src/index.ts")

        entry_points, _ = get_entry_points(ResolveConfig(cwd=project, exclude=["**/other.ts"]))
        assert entry_points == _ids(project, "src/index.ts")

    def test_nested_gitignore_is_honored(self, project):
        _write_project(project, {
            "pkg/.gitignore": "gen/\n",
            "pkg/gen/x.ts": "export const x = 1\n",
            "pkg/main.ts": "export const m = 1\n",
        })
        entry_points, _ = get_entry_points(ResolveConfig(cwd=project))

        assert str(project / "pkg/main.ts") in entry_points
        assert str(project / "pkg/gen/x.ts") not in entry_points

    def test_type_only_imports_can_be_ignored(self, project):
        entry_points, _ = get_entry_points(ResolveConfig(cwd=project, ignore_type_imports=True))
        assert entry_points == _ids(project, "src/index.ts", "src/other.ts", "src/types.ts")

    def test_missing_cwd(self, tmp_path):
        config = ResolveConfig(cwd=tmp_path / "gone")
        with pytest.raises(FilesystemError):
            get_entry_points(config)


class TestResolve:
    def test_discovered_entry_points(self, project):
        result = resolve("src/c.ts", ResolveConfig(cwd=project))

        assert result.entry_points == _ids(project, "src/index.ts", "src/other.ts")
        assert result.paths == [
            [_ids(project, "src/index.ts", "src/b.ts", "src/c.ts")],
            [_ids(project, "src/other.ts", "src/c.ts")],
        ]
        assert result.total == 2

    def test_explicit_entry_points(self, project):
        result = resolve("./src/c.ts", ResolveConfig(cwd=project), entry_points=["./src/index.ts"])

        assert result.entry_points == _ids(project, "src/index.ts")
        assert result.paths == [[_ids(project, "src/index.ts", "src/b.ts", "src/c.ts")]]

    def test_entry_point_is_not_its_own_dependent(self, project):
        result = resolve("src/index.ts", ResolveConfig(cwd=project))
        assert result.paths == [[], []]
        assert not result.has_results

    def test_unreachable_target(self, project):
        result = resolve("scripts/tool.ts", ResolveConfig(cwd=project))
        assert not result.has_results
        assert result.total == 0

    def test_package_target(self, project):
        result = resolve("lodash", ResolveConfig(cwd=project, include_node_modules=True))
        assert result.paths == [[[str(project / "src/index.ts"), "lodash"]], []]

    def test_package_subpath_target(self, project):
        result = resolve("lodash/fp", ResolveConfig(cwd=project, include_node_modules=True))
        assert result.paths == [[[str(project / "src/index.ts"), "lodash"]], []]

    def test_type_only_imports_can_be_ignored(self, project):
        assert resolve("src/types.ts", ResolveConfig(cwd=project)).has_results
        assert not resolve("src/types.ts", ResolveConfig(cwd=project, ignore_type_imports=True)).has_results

    def test_not_traverse(self, project):
        result = resolve("src/c.ts", ResolveConfig(cwd=project, not_traverse=["src/b.ts"]))
        assert result.paths == [[], [_ids(project, "src/other.ts", "src/c.ts")]]

    @pytest.mark.parametrize("max_paths", [0, -1])
    def test_max_paths_must_be_positive(self, project, max_paths):
        with pytest.raises(ConfigError):
            ResolveConfig(cwd=project, all_paths=True, max_paths=max_paths)

    def test_max_paths_caps_each_entry_point(self, project):
        result = resolve("src/c.ts", ResolveConfig(cwd=project, all_paths=True, max_paths=1))
        assert [len(paths) for paths in result.paths] == [1, 1]

    def test_cache_is_filled(self, project):
        cache = ExtractionCache()
        resolve("src/c.ts", ResolveConfig(cwd=project), cache=cache)
        assert len(cache) > 0

    def test_max_depths(self, project):
        config = ResolveConfig(cwd=project)
        result = resolve("src/c.ts", config)
        assert get_max_depths(result, config) == [
            (3, _ids(project, "src/index.ts", "src/b.ts", "src/c.ts")),
            (2, _ids(project, "src/other.ts", "src/c.ts")),
        ]


class TestProjections:
    def test_files(self, project):
        files = get_files_for_entry_point("src/index.ts", ResolveConfig(cwd=project))
        assert files == _ids(project, "src/b.ts", "src/c.ts", "src/index.ts")

    def test_node_modules(self, project):
        config = ResolveConfig(cwd=project)
        assert get_node_modules_for_entry_point("src/index.ts", config) == ["lodash"]
        assert get_node_modules_for_entry_point("src/other.ts", config) == []


class TestCircular:
    def test_finds_cycles(self, project):
        _write_project(project, {
            "cycle/x.ts": "import { y } from './y'\n",
            "cycle/y.ts": "import { x } from './x'\n",
        })
        cycles, deps = get_circular(ResolveConfig(cwd=project))

        assert cycles == [_ids(project, "cycle/x.ts", "cycle/y.ts", "cycle/x.ts")]
        assert str(project / "cycle/x.ts") in deps

    def test_no_cycles(self, project):
        cycles, _ = get_circular(ResolveConfig(cwd=project))
        assert cycles == []

    def test_type_only_cycle_can_be_ignored(self, project):
        _write_project(project, {
            "cycle/x.ts": "import { y } from './y'\n",
            "cycle/y.ts": "import type { X } from './x'\n",
        })
        assert get_circular(ResolveConfig(cwd=project))[0]
        assert get_circular(ResolveConfig(cwd=project, ignore_type_imports=True))[0] == []


class TestDepsFile:
    def _config(self, root, table):
        (root / ".git").mkdir(exist_ok=True)
        (root / "deps.json").write_text(json.dumps(table))
        return ResolveConfig(cwd=root, deps_file=Path("deps.json"))

    def test_resolve_from_table(self, tmp_path):
        config = self._config(tmp_path, {
            "app.ts": [{"id": "lib.ts", "request": "./lib"}],
            "lib.ts": [],
        })
        root = tmp_path.resolve()
        result = resolve("lib.ts", config)
        assert result.entry_points == [str(root / "app.ts")]
        assert result.paths == [[[str(root / "app.ts"), str(root / "lib.ts")]]]

    def test_missing_dependency_raises(self, tmp_path):
        config = self._config(tmp_path, {
            "a.ts": [{"id": "b.ts", "request": "./b"}],
            "b.ts": [{"id": "missing.ts", "request": "./missing"}],
        })
        with pytest.raises(GraphConsistencyError) as exc_info:
            resolve("b.ts", config, entry_points=["a.ts"])
        assert exc_info.value.module_id == str(tmp_path.resolve() / "missing.ts")
        assert exc_info.value.imported_from == str(tmp_path.resolve() / "b.ts")
