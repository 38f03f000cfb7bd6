"""Knowledge base endpoints: search, context, documents, statistics."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .....core.services import EmbeddingMaintenanceJob, RetrievalEngine
from ....common.exception_handler import get_status_for_error_code
from ..deps import get_engine, get_maintenance_job
from ..models import (
    ConfigResponse,
    ContextRequest,
    ContextResponse,
    ErrorResponse,
    OperationResponse,
    RegenerateResponse,
    SearchRequest,
    SearchResponse,
    SearchResultItem,
    StatsResponse,
    UploadRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/knowledge", tags=["knowledge"])


@router.get("/stats", response_model=StatsResponse)
def get_stats(engine: RetrievalEngine = Depends(get_engine)) -> StatsResponse:
    """Document, chunk and vector counts with embedding coverage."""
    return StatsResponse.model_validate(engine.get_stats().to_dict())


@router.get("/config", response_model=ConfigResponse)
def get_config(engine: RetrievalEngine = Depends(get_engine)) -> ConfigResponse:
    """Embedding model and vector store size."""
    return ConfigResponse(**engine.config_summary())


@router.post(
    "/search",
    response_model=SearchResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid query"},
        503: {"model": ErrorResponse, "description": "Embedding service unavailable"},
    },
)
def search(
    request: SearchRequest,
    engine: RetrievalEngine = Depends(get_engine),
) -> SearchResponse:
    """Semantic search over the knowledge base.

    Embedding failures propagate to the global handler, which answers 503.
    """
    results = engine.search(request.query, request.top_k)
    return SearchResponse(
        query=request.query,
        results=[SearchResultItem(**r.to_dict()) for r in results],
    )


@router.post("/context", response_model=ContextResponse)
def context_summary(
    request: ContextRequest,
    engine: RetrievalEngine = Depends(get_engine),
) -> ContextResponse:
    """Source-labelled context block used to ground drafting prompts."""
    return ContextResponse(summary=engine.get_context_summary(request.query))


@router.post(
    "/upload",
    response_model=OperationResponse,
    responses={400: {"model": OperationResponse}, 409: {"model": OperationResponse}},
)
def upload_document(
    request: UploadRequest,
    engine: RetrievalEngine = Depends(get_engine),
):
    """Add a document and embed its chunks."""
    result = engine.add_document(request.filename, request.content)
    if not result.success:
        return JSONResponse(
            status_code=get_status_for_error_code(result.code),
            content=result.to_dict(),
        )
    return OperationResponse(**result.to_dict())


@router.delete(
    "/{filename}",
    response_model=OperationResponse,
    responses={404: {"model": OperationResponse}},
)
def delete_document(
    filename: str,
    engine: RetrievalEngine = Depends(get_engine),
):
    """Delete a document and its vectors."""
    result = engine.delete_document(filename)
    if not result.success:
        return JSONResponse(
            status_code=get_status_for_error_code(result.code),
            content=result.to_dict(),
        )
    return OperationResponse(**result.to_dict())


@router.post("/regenerate-vectors", response_model=RegenerateResponse)
def regenerate_vectors(
    engine: RetrievalEngine = Depends(get_engine),
    job: EmbeddingMaintenanceJob = Depends(get_maintenance_job),
) -> RegenerateResponse:
    """Start backfilling missing vectors in the background."""
    already_running = job.running
    job.start_background()
    missing = len(engine.missing_chunk_ids())
    message = (
        "Vector backfill already in progress"
        if already_running
        else f"Vector backfill started for {missing} chunks"
    )
    logger.info(message)
    return RegenerateResponse(success=True, message=message, model=engine.embedder.model_name)
