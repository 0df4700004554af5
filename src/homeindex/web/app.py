"""FastAPI application exposing ingestion, scanning and stats."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from homeindex.config import AppConfig
from homeindex.errors import InvalidInputError, UnsupportedTypeError
from homeindex.index.indexer import Indexer
from homeindex.index.scheduler import ScanScheduler
from homeindex.index.search import Searcher
from homeindex.models import DocumentInput

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="HomeIndex", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class DocumentPayload(BaseModel):
    title: str | None = None
    content: str | None = None
    filePath: str | None = None
    fileType: str | None = None


class SearchPayload(BaseModel):
    query: str
    limit: int = 10


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    if getattr(app.state, "indexer", None) is not None:
        return

    load_dotenv()
    config = AppConfig.from_env()
    config.ensure_directories()
    indexer = Indexer.from_config(config)
    app.state.indexer = indexer
    app.state.scheduler = None
    if config.enable_scheduler:
        scheduler = ScanScheduler(indexer, interval=config.scan_interval_seconds)
        scheduler.start()
        app.state.scheduler = scheduler


@app.on_event("shutdown")
async def shutdown_event() -> None:
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.stop()
    indexer = getattr(app.state, "indexer", None)
    if indexer is not None:
        indexer.close()
        app.state.indexer = None


def get_indexer(request: Request) -> Indexer:
    indexer = getattr(request.app.state, "indexer", None)
    if indexer is None:
        raise HTTPException(status_code=503, detail="Indexer is not ready")
    return indexer


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "HomeIndex is running"}


@app.post("/ingest/document")
async def ingest_document(payload: DocumentPayload, indexer: Indexer = Depends(get_indexer)) -> dict[str, Any]:
    document = DocumentInput(
        title=payload.title,
        content=payload.content,
        file_path=payload.filePath,
        file_type=payload.fileType,
    )
    try:
        result = await asyncio.to_thread(indexer.ingest_one, document)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (InvalidInputError, UnsupportedTypeError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        LOGGER.exception("Document ingestion failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to ingest document") from exc
    return result.to_dict()


@app.post("/scan")
async def scan_all(indexer: Indexer = Depends(get_indexer)) -> dict[str, Any]:
    try:
        result = await asyncio.to_thread(indexer.scan_and_ingest_all)
    except Exception as exc:
        LOGGER.exception("Scan failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to scan") from exc
    if result is None:
        return {"status": "skipped"}
    return {"status": "ok", **result.to_dict()}


@app.get("/stats")
async def get_stats(indexer: Indexer = Depends(get_indexer)) -> dict[str, Any]:
    return indexer.get_stats().to_dict()


@app.post("/search")
async def search(payload: SearchPayload, indexer: Indexer = Depends(get_indexer)) -> dict[str, Any]:
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    limit = max(1, min(payload.limit, 50))
    results = Searcher(indexer.store).search(query, limit=limit)
    return {"results": [asdict(result) for result in results]}
