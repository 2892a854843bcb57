"""FastAPI routes for the revdep JSON API."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from revdep.errors import FilesystemError, GraphConsistencyError, RevDepError
from revdep.models import ResolveConfig
from revdep.pipeline import (
    get_circular,
    get_entry_points,
    get_files_for_entry_point,
    get_node_modules_for_entry_point,
    resolve,
)
from revdep.web.state import state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# --- Request models ---

class ProjectRequest(BaseModel):
    cwd: str
    alias_config: str | None = None
    deps_file: str | None = None
    ignore_type_imports: bool = False


class EntryPointsRequest(ProjectRequest):
    include: list[str] = []
    exclude: list[str] = []


class ResolveRequest(EntryPointsRequest):
    target: str
    entry_points: list[str] = []
    all: bool = False
    not_traverse: list[str] = []
    include_node_modules: bool = False
    max_paths: int | None = Field(default=None, ge=1)


class EntryPointRequest(ProjectRequest):
    entry_point: str


# --- Helpers ---

def _config(req: ProjectRequest, **extra) -> ResolveConfig:
    cwd = Path(req.cwd).expanduser().resolve()
    if not cwd.is_dir():
        raise HTTPException(404, f"Directory not found: {cwd}")
    return ResolveConfig(
        cwd=cwd,
        alias_config=Path(req.alias_config) if req.alias_config else None,
        deps_file=Path(req.deps_file) if req.deps_file else None,
        ignore_type_imports=req.ignore_type_imports,
        **extra,
    )


async def _run(func, *args, **kwargs):
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except FilesystemError as e:
        raise HTTPException(404, str(e))
    except GraphConsistencyError as e:
        raise HTTPException(422, str(e))
    except RevDepError as e:
        raise HTTPException(400, str(e))


# --- Endpoints ---

@router.post("/resolve")
async def resolve_target(req: ResolveRequest):
    config = _config(
        req,
        include=req.include,
        exclude=req.exclude,
        all_paths=req.all,
        not_traverse=req.not_traverse,
        include_node_modules=req.include_node_modules,
        max_paths=req.max_paths,
    )
    result = await _run(resolve, req.target, config, req.entry_points or None, cache=state.cache)
    logger.info("resolved %s: %d path(s)", req.target, result.total)
    return {
        "target": req.target,
        "entry_points": result.entry_points,
        "paths": result.paths,
        "total": result.total,
    }


@router.post("/entry-points")
async def list_entry_points(req: EntryPointsRequest):
    config = _config(req, include=req.include, exclude=req.exclude)
    entry_points, _ = await _run(get_entry_points, config, cache=state.cache)
    return {"entry_points": entry_points, "count": len(entry_points)}


@router.post("/files")
async def list_files(req: EntryPointRequest):
    config = _config(req)
    files = await _run(get_files_for_entry_point, req.entry_point, config, cache=state.cache)
    return {"entry_point": req.entry_point, "files": files, "count": len(files)}


@router.post("/node-modules")
async def list_node_modules(req: EntryPointRequest):
    config = _config(req)
    requests = await _run(get_node_modules_for_entry_point, req.entry_point, config, cache=state.cache)
    return {"entry_point": req.entry_point, "node_modules": requests, "count": len(requests)}


@router.post("/circular")
async def list_circular(req: ProjectRequest):
    config = _config(req)
    cycles, _ = await _run(get_circular, config, cache=state.cache)
    return {"cycles": cycles, "count": len(cycles)}


@router.delete("/cache")
async def clear_cache():
    state.reset()
    return {"cleared": True}
