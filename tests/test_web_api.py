"""Tests for the web API."""

import json

import pytest

# Only run if fastapi/httpx are installed
try:
    from fastapi.testclient import TestClient
    from revdep.web import create_app
    from revdep.web.state import state
    HAS_WEB = True
except ImportError:
    HAS_WEB = False

pytestmark = pytest.mark.skipif(not HAS_WEB, reason="web dependencies not installed")

PROJECT = {
    "src/index.ts": "import { b } from './b'\nimport _ from 'lodash'\n",
    "src/b.ts": "import { c } from './c'\n",
    "src/c.ts": "export const c = 1\n",
    "src/other.ts": "import './c'\n",
    "node_modules/lodash/package.json": json.dumps({"main": "index.js"}),
    "node_modules/lodash/index.js": "module.exports = {}\n",
}


@pytest.fixture
def client():
    state.reset()
    return TestClient(create_app())


@pytest.fixture
def project(tmp_path):
    (tmp_path / ".git").mkdir()
    for rel, content in PROJECT.items():
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return tmp_path.resolve()


def test_resolve(client, project):
    res = client.post("/api/resolve", json={"cwd": str(project), "target": "src/c.ts"})
    assert res.status_code == 200
    data = res.json()
    assert data["entry_points"] == [str(project / "src/index.ts"), str(project / "src/other.ts")]
    assert data["paths"][1] == [[str(project / "src/other.ts"), str(project / "src/c.ts")]]
    assert data["total"] == 2


def test_resolve_fills_shared_cache(client, project):
    client.post("/api/resolve", json={"cwd": str(project), "target": "src/c.ts"})
    assert len(state.cache) > 0

    res = client.delete("/api/cache")
    assert res.status_code == 200
    assert len(state.cache) == 0


def test_resolve_package(client, project):
    res = client.post("/api/resolve", json={
        "cwd": str(project),
        "target": "lodash",
        "include_node_modules": True,
        "entry_points": ["src/index.ts"],
    })
    assert res.status_code == 200
    assert res.json()["paths"] == [[[str(project / "src/index.ts"), "lodash"]]]


def test_entry_points(client, project):
    res = client.post("/api/entry-points", json={"cwd": str(project), "exclude": ["**/other.ts"]})
    assert res.status_code == 200
    assert res.json() == {"entry_points": [str(project / "src/index.ts")], "count": 1}


def test_files(client, project):
    res = client.post("/api/files", json={"cwd": str(project), "entry_point": "src/b.ts"})
    assert res.status_code == 200
    assert res.json()["files"] == [str(project / "src/b.ts"), str(project / "src/c.ts")]


def test_node_modules(client, project):
    res = client.post("/api/node-modules", json={"cwd": str(project), "entry_point": "src/index.ts"})
    assert res.status_code == 200
    assert res.json()["node_modules"] == ["lodash"]


def test_nonexistent_cwd(client):
    res = client.post("/api/entry-points", json={"cwd": "/nonexistent/path"})
    assert res.status_code == 404


def test_missing_dependency_is_422(client, tmp_path):
    (tmp_path / ".git").mkdir()
    (tmp_path / "deps.json").write_text(json.dumps({"a.ts": [{"id": "b.ts", "request": "./b"}]}))
    res = client.post("/api/resolve", json={
        "cwd": str(tmp_path),
        "deps_file": "deps.json",
        "target": "b.ts",
        "entry_points": ["a.ts"],
    })
    assert res.status_code == 422
    assert "not found in dependency table" in res.json()["detail"]


def test_bad_alias_config_is_400(client, project):
    (project / "tsconfig.json").write_text("{ nope")
    res = client.post("/api/files", json={
        "cwd": str(project),
        "alias_config": "tsconfig.json",
        "entry_point": "src/index.ts",
    })
    assert res.status_code == 400


def test_missing_field_is_rejected(client, project):
    res = client.post("/api/resolve", json={"cwd": str(project)})
    assert res.status_code == 422


@pytest.mark.parametrize("max_paths", [0, -1])
def test_non_positive_max_paths_is_rejected(client, project, max_paths):
    res = client.post("/api/resolve", json={
        "cwd": str(project),
        "target": "src/c.ts",
        "all": True,
        "max_paths": max_paths,
    })
    assert res.status_code == 422


def test_circular(client, project):
    (project / "src" / "c.ts").write_text("import { b } from './b'\n")
    res = client.post("/api/circular", json={"cwd": str(project)})
    assert res.status_code == 200
    assert res.json() == {
        "cycles": [[str(project / "src/b.ts"), str(project / "src/c.ts"), str(project / "src/b.ts")]],
        "count": 1,
    }
