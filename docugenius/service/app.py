"""FastAPI application exposing documentation generation and storage."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from ..config import load_config
from ..errors import (
    CompletionError,
    ConfigError,
    DocuGeniusError,
    NoFilesError,
    PipelineError,
    SourceError,
)
from ..logging import get_logger
from ..models import ProgressEvent
from ..sources.github import GitHubSourceEnumerator
from ..stores.documents import DocumentStore
from ..workflow import DocumentationWorkflow, build_pipeline

WorkflowFactory = Callable[[Optional[str]], DocumentationWorkflow]

logger = get_logger("service")


class GenerateRequest(BaseModel):
    repository: str = Field(..., min_length=3, description="owner/repo or a github.com URL")
    user_id: Optional[str] = None
    token: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


class DeleteResponse(BaseModel):
    success: bool


def _default_factory(store: DocumentStore) -> WorkflowFactory:
    config = load_config(Path.cwd())

    def _factory(token: Optional[str]) -> DocumentationWorkflow:
        enumerator = GitHubSourceEnumerator(
            token,
            max_file_bytes=config.sources.max_file_bytes,
            max_files=config.sources.max_files,
        )
        return DocumentationWorkflow(enumerator, build_pipeline(config), store=store)

    return _factory


def _sse(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def create_app(
    workflow_factory: WorkflowFactory | None = None,
    store: DocumentStore | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing docugenius operations."""

    document_store = store if store is not None else DocumentStore()
    factory = workflow_factory if workflow_factory is not None else _default_factory(document_store)

    app = FastAPI(title="DocuGenius Service", version="1.0.0")

    async def get_store() -> DocumentStore:
        return document_store

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/documentation")
    async def generate_documentation(payload: GenerateRequest) -> Dict[str, Any]:
        workflow = factory(payload.token)
        result = await workflow.run(payload.repository, payload.user_id)
        return result.to_dict()

    @app.get("/documentation/stream")
    async def stream_documentation(
        repository: str = Query(..., min_length=3),
        user_id: Optional[str] = None,
        token: Optional[str] = None,
    ) -> StreamingResponse:
        workflow = factory(token)
        queue: asyncio.Queue[Optional[Dict[str, Any]]] = asyncio.Queue()
        last_progress = 0.0

        def _on_progress(event: ProgressEvent) -> None:
            nonlocal last_progress
            last_progress = event.progress
            # The pipeline reports its own failures; the stream emits one terminal frame below.
            if event.kind != "error":
                queue.put_nowait(event.to_dict())

        async def _produce() -> None:
            try:
                result = await workflow.run(repository, user_id, _on_progress)
            except DocuGeniusError as exc:
                logger.warning("Streaming generation for %s failed: %s", repository, exc)
                queue.put_nowait({"type": "error", "message": str(exc), "progress": last_progress})
            except Exception as exc:
                logger.exception("Streaming generation for %s crashed", repository)
                queue.put_nowait({"type": "error", "message": str(exc) or "Unknown error", "progress": last_progress})
            else:
                queue.put_nowait(
                    {
                        "type": "complete",
                        "message": "Documentation generated successfully!",
                        "progress": 100,
                        "data": result.to_dict(),
                    }
                )
            finally:
                queue.put_nowait(None)

        async def _events() -> AsyncIterator[str]:
            task = asyncio.create_task(_produce())
            try:
                while True:
                    item = await queue.get()
                    if item is None:
                        break
                    yield _sse(item)
            finally:
                if not task.done():
                    task.cancel()

        return StreamingResponse(
            _events(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    @app.get("/documentations")
    async def list_documentations(
        user_id: str = Query(..., min_length=1),
        documents: DocumentStore = Depends(get_store),
    ) -> Dict[str, List[Dict[str, Any]]]:
        return {"documentations": [record.summary() for record in documents.list(user_id)]}

    @app.get("/documentations/{doc_id}")
    async def get_documentation(
        doc_id: str,
        user_id: str = Query(..., min_length=1),
        documents: DocumentStore = Depends(get_store),
    ) -> Dict[str, Any]:
        record = documents.get(doc_id, user_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Documentation not found")
        return record.to_dict()

    @app.delete("/documentations/{doc_id}", response_model=DeleteResponse)
    async def delete_documentation(
        doc_id: str,
        user_id: str = Query(..., min_length=1),
        documents: DocumentStore = Depends(get_store),
    ) -> DeleteResponse:
        if not documents.delete(doc_id, user_id):
            raise HTTPException(status_code=404, detail="Documentation not found")
        return DeleteResponse(success=True)

    def _error(status_code: int) -> Callable[[Any, Exception], Any]:
        async def _handler(_: Any, exc: Exception) -> JSONResponse:
            return JSONResponse(status_code=status_code, content={"detail": str(exc)})

        return _handler

    app.add_exception_handler(NoFilesError, _error(404))
    app.add_exception_handler(ConfigError, _error(400))
    app.add_exception_handler(SourceError, _error(502))
    app.add_exception_handler(CompletionError, _error(502))
    app.add_exception_handler(PipelineError, _error(500))

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["GenerateRequest", "create_app", "run_service"]
