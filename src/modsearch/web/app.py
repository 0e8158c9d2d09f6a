"""FastAPI application exposing ModSearch to a desktop or browser UI."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from modsearch.config import AppConfig
from modsearch.errors import InvalidPatternError
from modsearch.exporter import FILE_SUFFIXES, export_result, normalize_format
from modsearch.history import SQLiteHistoryStore
from modsearch.ingestion.encoding import detect_and_decode
from modsearch.ingestion.stats import compute_file_stats
from modsearch.models import FileHandle, SearchOptions, SearchResult
from modsearch.search.orchestrator import Searcher
from modsearch.search.pattern import compile_pattern
from modsearch.utils.files import discover, partition_supported

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="ModSearch API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class ScanPayload(BaseModel):
    path: str


class StatsPayload(BaseModel):
    paths: List[str]


class ReadPayload(BaseModel):
    path: str


class SearchPayload(BaseModel):
    paths: List[str]
    query: str
    case_sensitive: bool = False
    whole_word: bool = False
    use_regex: bool = False
    include_unsupported: bool = False
    max_matches: int | None = None
    history_db: Path | None = None
    record_history: bool = True


class ExportPayload(SearchPayload):
    format: str = "text"
    record_history: bool = False


def _resolve_history_path(db: Path | None) -> Path:
    config = AppConfig(history_path=db if db is not None else AppConfig().history_path)
    return config.resolve_history_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _handle_dict(handle: FileHandle) -> dict[str, Any]:
    return {"path": handle.path, "name": handle.name, "is_file": handle.is_file}


def _search_options(payload: SearchPayload) -> SearchOptions:
    return SearchOptions(
        query=payload.query,
        case_sensitive=payload.case_sensitive,
        whole_word=payload.whole_word,
        use_regex=payload.use_regex,
    )


def _run_search(payload: SearchPayload, options: SearchOptions) -> tuple[SearchResult, List[FileHandle]]:
    handles = list(discover(payload.paths))
    if payload.include_unsupported:
        accepted, rejected = handles, []
    else:
        accepted, rejected = partition_supported(handles)

    defaults = AppConfig()
    config = AppConfig(
        max_matches_per_file=payload.max_matches or defaults.max_matches_per_file,
    )
    searcher = Searcher(guard=config.guard_policy(), concurrency=config.concurrency)
    result = searcher.search(accepted, options)

    if payload.record_history:
        resolved_db = _resolve_history_path(payload.history_db)
        _ensure_db_parent(resolved_db)
        store = SQLiteHistoryStore(resolved_db, limit=config.history_limit)
        try:
            store.append(payload.query)
        finally:
            store.close()

    return result, rejected


async def _search_or_400(payload: SearchPayload) -> tuple[SearchResult, List[FileHandle]]:
    if not payload.query.strip():
        raise HTTPException(status_code=400, detail="Empty query")
    if not payload.paths:
        raise HTTPException(status_code=400, detail="No path provided")
    if payload.max_matches is not None and payload.max_matches < 1:
        raise HTTPException(status_code=400, detail="max_matches must be at least 1")

    options = _search_options(payload)
    # Reject bad patterns before any directory is walked
    try:
        compile_pattern(options)
    except InvalidPatternError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return await asyncio.to_thread(_run_search, payload, options)


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/scan")
async def scan_directory(payload: ScanPayload) -> dict[str, Any]:
    """Recursively list files under a folder, split by supported extension."""
    root = Path(payload.path).expanduser()
    if not root.exists():
        raise HTTPException(status_code=404, detail=f"Path not found: {payload.path}")

    handles = await asyncio.to_thread(lambda: list(discover([root])))
    accepted, rejected = partition_supported(handles)
    return {
        "files": [_handle_dict(handle) for handle in accepted],
        "rejected": [_handle_dict(handle) for handle in rejected],
    }


@app.post("/stats")
async def file_stats(payload: StatsPayload) -> dict[str, Any]:
    stats = await asyncio.to_thread(compute_file_stats, payload.paths)
    return {"stats": [asdict(stat) for stat in stats]}


@app.post("/read")
async def read_file(payload: ReadPayload) -> dict[str, str]:
    path = Path(payload.path).expanduser()
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"File not found: {path}")

    try:
        data = await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        LOGGER.error("Unable to read %s: %s", path, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    content, encoding = detect_and_decode(data)
    return {"content": content, "encoding": encoding}


@app.post("/search")
async def search_files(payload: SearchPayload) -> dict[str, Any]:
    result, rejected = await _search_or_400(payload)
    return {"result": result.to_dict(), "rejected": [_handle_dict(handle) for handle in rejected]}


@app.post("/export", response_class=PlainTextResponse)
async def export_search(payload: ExportPayload) -> PlainTextResponse:
    try:
        kind = normalize_format(payload.format)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    result, _ = await _search_or_400(payload)
    media_type = "text/markdown" if kind == "markdown" else "text/plain"
    filename = f"search_results{FILE_SUFFIXES[kind]}"
    return PlainTextResponse(
        content=export_result(result, kind),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/history")
async def list_history(db: Path | None = None) -> dict[str, List[str]]:
    resolved_db = _resolve_history_path(db)
    if not resolved_db.exists():
        return {"history": []}

    store = SQLiteHistoryStore(resolved_db, limit=AppConfig().history_limit)
    try:
        entries = store.load()
    finally:
        store.close()
    return {"history": entries}


@app.delete("/history")
async def clear_history(db: Path | None = None) -> dict[str, Any]:
    resolved_db = _resolve_history_path(db)
    if not resolved_db.exists():
        return {"status": "ok", "removed_count": 0}

    store = SQLiteHistoryStore(resolved_db, limit=AppConfig().history_limit)
    try:
        removed = store.clear()
    finally:
        store.close()
    return {"status": "ok", "removed_count": removed}
