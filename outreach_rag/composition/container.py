"""Composition root wiring adapters into the retrieval engine.

The engine is the process-wide knowledge base context: built once,
initialized before the first request, and injected into the API handlers
and CLI commands.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from ..adapters.outbound.document_store import FileDocumentStore
from ..adapters.outbound.embedding import HttpEmbeddingAdapter
from ..adapters.outbound.vector_store import JsonVectorStore
from ..common.rate_limiter import RateLimiter
from ..config import Settings, settings
from ..core.ports.embedding_port import EmbeddingPort
from ..core.services import EmbeddingMaintenanceJob, RetrievalEngine

logger = logging.getLogger(__name__)


def build_embedder(config: Settings) -> HttpEmbeddingAdapter:
    """Create the embedding adapter; raises ConfigurationError on missing settings."""
    return HttpEmbeddingAdapter(
        api_key=config.embedding_api_key,
        model_name=config.embedding_model,
        base_url=config.embedding_api_base,
        timeout=config.embedding_timeout_seconds,
        rate_limiter=RateLimiter(config.embedding_requests_per_minute),
    )


def build_engine(config: Settings, embedder: EmbeddingPort | None = None) -> RetrievalEngine:
    """Create an uninitialized engine from settings."""
    config.ensure_directories()
    document_store = FileDocumentStore(
        config.documents_dir,
        max_chunk_size=config.max_chunk_size,
        terminators=config.sentence_terminators,
    )
    vector_store = JsonVectorStore(config.vectors_file)
    return RetrievalEngine(
        document_store,
        vector_store,
        embedder or build_embedder(config),
        min_score=config.min_similarity,
        summary_top_k=config.default_top_k,
    )


def build_maintenance_job(engine: RetrievalEngine, config: Settings) -> EmbeddingMaintenanceJob:
    return EmbeddingMaintenanceJob(
        engine,
        batch_size=config.backfill_batch_size,
        delay_seconds=config.backfill_delay_seconds,
    )


@lru_cache
def get_engine() -> RetrievalEngine:
    logger.info("Initializing RetrievalEngine (composition root)...")
    engine = build_engine(settings)
    engine.initialize()
    return engine


@lru_cache
def get_maintenance_job() -> EmbeddingMaintenanceJob:
    logger.info("Initializing EmbeddingMaintenanceJob...")
    return build_maintenance_job(get_engine(), settings)


def startup() -> RetrievalEngine:
    """Initialize the engine and, if configured, start the startup backfill."""
    engine = get_engine()
    if settings.backfill_on_startup:
        get_maintenance_job().start_background()
    return engine
