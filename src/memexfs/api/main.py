"""FastAPI entrypoint exposing grep/read/ls and the tool table over HTTP."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ValidationError

from memexfs.agent.tools import GrepToolInput, ReadToolInput
from memexfs.core import MemexFS
from memexfs.errors import DocumentNotFound, InvalidPattern, UnknownTool
from memexfs.obs.tracing import TraceLog
from memexfs.types import ToolTrace

logger = logging.getLogger(__name__)

CORPUS_DIR_ENV = "MEMEX_CORPUS_DIR"


class ToolCallResponse(BaseModel):
    name: str
    result: str


def _load_from_env() -> MemexFS:
    root = os.getenv(CORPUS_DIR_ENV)
    if not root:
        raise RuntimeError(f"{CORPUS_DIR_ENV} is not set")
    return MemexFS.from_directory(root)


def create_app(fs: MemexFS | None = None) -> FastAPI:
    """Build the HTTP application around one MemexFS instance.

    Without an explicit instance the corpus is loaded from the directory named
    by ``MEMEX_CORPUS_DIR``. Run with ``uvicorn memexfs.api.main:create_app
    --factory``.

    The app records tool calls by chaining onto the instance's existing
    observer, so several apps built on one instance each see every call made
    through that instance.
    """

    memex = fs or _load_from_env()
    trace_log = TraceLog()
    previous = memex.tools.observer

    def _observe(trace: ToolTrace) -> None:
        trace_log.record(trace)
        if previous is not None:
            previous(trace)

    memex.tools.set_observer(_observe)

    app = FastAPI(title="MemexFS", version="0.1.0")

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "documents": memex.document_count(),
            "tokens": memex.token_count(),
        }

    @app.get("/tools")
    def tools() -> list[dict[str, Any]]:
        return [definition.model_dump() for definition in memex.tool_definitions()]

    @app.post("/tools/{name}")
    def call_tool(name: str, arguments: dict[str, Any]) -> ToolCallResponse:
        try:
            result = memex.call(name, arguments)
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc
        except (UnknownTool, DocumentNotFound) as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except InvalidPattern as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return ToolCallResponse(name=name, result=result)

    @app.post("/grep")
    def grep(request: GrepToolInput) -> dict[str, Any]:
        try:
            results = memex.grep(request.pattern, request.glob)
        except InvalidPattern as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"items": [asdict(result) for result in results]}

    @app.post("/read")
    def read(request: ReadToolInput) -> dict[str, Any]:
        try:
            content = memex.read(request.path, request.offset, request.limit)
        except DocumentNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"path": request.path, "content": content}

    @app.get("/ls")
    def ls(path: str = "") -> dict[str, Any]:
        return {"path": path, "entries": memex.ls(path)}

    @app.get("/traces")
    def traces(limit: int = Query(default=20, ge=1, le=1000)) -> dict[str, Any]:
        return {"items": [asdict(trace) for trace in trace_log.list_recent(limit)]}

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return trace_log.summary()

    logger.info("API ready with %d documents", memex.document_count())
    return app
