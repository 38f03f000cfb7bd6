"""Retrieval engine: semantic search over the knowledge base.

The engine is the single context object owning the document store, the
vector store and the embedding provider for the lifetime of the process.
Every mutation of the vector store, and every save, happens under one
re-entrant lock. Embedding calls, the only slow operations, run outside it.
"""

import logging
import threading
from typing import Any

from ...common.utils import normalize_query
from ..domain import (
    Document,
    DocumentSummary,
    KnowledgeStats,
    OperationResult,
    SearchResult,
)
from ..domain.exceptions import (
    DocumentError,
    EmbeddingServiceError,
    EmptyQueryError,
    ValidationError,
    VectorStoreError,
)
from ..domain.utils import cosine_similarity
from ..ports.document_store_port import DocumentStorePort
from ..ports.embedding_port import EmbeddingPort
from ..ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 0.1
DEFAULT_SUMMARY_TOP_K = 3


class RetrievalEngine:
    """Turns free-text queries into ranked knowledge base chunks."""

    NO_RELEVANT_INFORMATION = "No relevant information found in the knowledge base."
    SEARCH_UNAVAILABLE = "Knowledge base search is currently unavailable."

    def __init__(
        self,
        document_store: DocumentStorePort,
        vector_store: VectorStorePort,
        embedder: EmbeddingPort,
        *,
        min_score: float = DEFAULT_MIN_SCORE,
        summary_top_k: int = DEFAULT_SUMMARY_TOP_K,
    ) -> None:
        """Initialize the engine.

        Args:
            document_store: Registry of documents and their chunks.
            vector_store: Chunk id -> embedding map.
            embedder: Embedding provider used for queries and chunks.
            min_score: Results scoring at or below this are discarded.
            summary_top_k: Number of results rendered by get_context_summary.
        """
        self.document_store = document_store
        self.vector_store = vector_store
        self.embedder = embedder
        self.min_score = min_score
        self.summary_top_k = summary_top_k
        self.lock = threading.RLock()
        self._initialized = False

    @property
    def is_ready(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Rehydrate vectors, load documents and drop orphaned vectors.

        Must run once before the engine serves any request.
        """
        with self.lock:
            self.vector_store.load()
            self.document_store.load_all()
            pruned = self.prune_orphans()
            self._initialized = True

        logger.info(
            "Retrieval engine ready: %d documents, %d vectors (%d orphaned vectors pruned)",
            len(self.document_store.list()),
            self.vector_store.size(),
            pruned,
        )

    # ------------------------------------------------------------------
    # Vector bookkeeping shared with the maintenance job
    # ------------------------------------------------------------------

    def snapshot_chunks(self) -> list[tuple[Document, int, str, str]]:
        """Consistent copy of ``(document, index, chunk_id, text)`` for iteration."""
        with self.lock:
            return list(self.document_store.iter_chunks())

    def has_vector(self, chunk_id: str) -> bool:
        with self.lock:
            return chunk_id in self.vector_store

    def store_chunk_vector(
        self,
        document: Document,
        chunk_id: str,
        vector: list[float],
        *,
        persist: bool = False,
    ) -> bool:
        """Store a freshly computed chunk vector.

        The vector is dropped when the document was deleted (or replaced)
        while the embedding call was in flight, or when another caller
        already stored a vector for the chunk.

        Returns:
            True if the vector was stored.
        """
        with self.lock:
            if self.document_store.get(document.filename) is not document:
                logger.debug("Discarding vector for %s: document no longer registered", chunk_id)
                return False
            if chunk_id in self.vector_store:
                return False
            self.vector_store.set(chunk_id, vector)
            if persist:
                self.persist()
            return True

    def persist(self) -> bool:
        """Save the vector store, logging instead of raising on failure.

        Returns:
            True if the save succeeded.
        """
        with self.lock:
            try:
                self.vector_store.save()
            except VectorStoreError as e:
                logger.error("Failed to persist vector store (%s): %s", e.error_code, e.message)
                return False
        return True

    def missing_chunk_ids(self) -> list[str]:
        """Chunk ids that currently have no vector, in document then chunk order."""
        with self.lock:
            return [
                chunk_id
                for _, _, chunk_id, _ in self.document_store.iter_chunks()
                if chunk_id not in self.vector_store
            ]

    def prune_orphans(self) -> int:
        """Delete vectors whose chunk no longer exists and persist if any were removed.

        Returns:
            Number of vectors removed.
        """
        with self.lock:
            live = {chunk_id for _, _, chunk_id, _ in self.document_store.iter_chunks()}
            orphans = [chunk_id for chunk_id in self.vector_store.keys() if chunk_id not in live]
            for chunk_id in orphans:
                self.vector_store.delete(chunk_id)
            if orphans:
                logger.info("Pruning %d orphaned vectors", len(orphans))
                self.persist()
        return len(orphans)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: str, top_k: int = DEFAULT_SUMMARY_TOP_K) -> list[SearchResult]:
        """Rank knowledge base chunks by cosine similarity to the query.

        Chunks without a stored vector are embedded on demand, stored and
        persisted immediately, so search results never depend on the
        background backfill having caught up.

        Args:
            query: Free-text query.
            top_k: Maximum number of results.

        Returns:
            Results scoring above ``min_score``, highest first. Ties keep
            document then chunk order.

        Raises:
            EmptyQueryError: If the query is blank.
            EmbeddingServiceError: If the query itself cannot be embedded.
        """
        normalized = normalize_query(query)
        if not normalized:
            raise EmptyQueryError("Query cannot be empty")
        if top_k <= 0:
            return []

        chunks = self.snapshot_chunks()
        if not chunks:
            return []

        query_vector = self.embedder.embed(normalized)

        results: list[SearchResult] = []
        for document, _, chunk_id, text in chunks:
            vector = self.vector_store.get(chunk_id)
            if vector is None:
                vector = self._embed_on_demand(document, chunk_id, text)
                if vector is None:
                    continue

            score = cosine_similarity(query_vector, vector)
            if score > self.min_score:
                results.append(SearchResult(document=document.filename, content=text, score=score))

        # list.sort is stable, so equal scores keep iteration order
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:top_k]

    def _embed_on_demand(self, document: Document, chunk_id: str, text: str) -> list[float] | None:
        try:
            vector = self.embedder.embed(text)
        except EmbeddingServiceError as e:
            logger.warning(
                "Skipping chunk %s, embedding failed (%s): %s", chunk_id, e.error_code, e.message
            )
            return None

        if self.store_chunk_vector(document, chunk_id, vector, persist=True):
            return vector
        # Stored concurrently by someone else, or the document is gone
        return self.vector_store.get(chunk_id)

    def get_context_summary(self, query: str) -> str:
        """Render the top results as a source-labelled context block.

        Used by the outbound and inbound drafting features to ground LLM
        prompts. Returns ``NO_RELEVANT_INFORMATION`` when nothing matches and
        ``SEARCH_UNAVAILABLE`` when the query cannot be embedded.
        """
        try:
            results = self.search(query, self.summary_top_k)
        except EmptyQueryError:
            return self.NO_RELEVANT_INFORMATION
        except EmbeddingServiceError as e:
            logger.error("Context search failed (%s): %s", e.error_code, e.message)
            return self.SEARCH_UNAVAILABLE

        if not results:
            return self.NO_RELEVANT_INFORMATION

        parts = ["Relevant knowledge base content:\n\n"]
        for result in results:
            parts.append(f"[Source: {result.document}]\n{result.content}\n\n")
        return "".join(parts)

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def add_document(self, filename: str, content: str) -> OperationResult:
        """Register a document and embed its chunks.

        Chunks whose embedding fails are left for the backfill job; the
        document add itself is never rolled back.
        """
        with self.lock:
            try:
                document = self.document_store.add(filename, content)
            except (DocumentError, ValidationError) as e:
                logger.warning("Rejected document %r (%s): %s", filename, e.error_code, e.message)
                return OperationResult(success=False, error=e.message, code=e.error_code)
            except OSError as e:
                logger.error("Failed to write document %r: %s", filename, e)
                return OperationResult(
                    success=False,
                    error=f"Failed to write document: {e}",
                    code=DocumentError.error_code,
                )

        logger.info(
            "Embedding %d chunks of new document %s", len(document.chunks), document.filename
        )
        stored = 0
        for chunk_id, text in zip(document.chunk_ids(), document.chunks):
            try:
                vector = self.embedder.embed(text)
            except EmbeddingServiceError as e:
                logger.warning(
                    "Embedding failed for %s (%s): %s", chunk_id, e.error_code, e.message
                )
                continue
            if self.store_chunk_vector(document, chunk_id, vector):
                stored += 1

        self.persist()
        logger.info(
            "Document %s added, %d/%d chunks vectorized",
            document.filename,
            stored,
            len(document.chunks),
        )
        return OperationResult(success=True, chunks=len(document.chunks), vectors=stored)

    def delete_document(self, filename: str) -> OperationResult:
        """Remove a document and cascade-delete its chunk vectors."""
        with self.lock:
            try:
                document = self.document_store.delete(filename)
            except DocumentError as e:
                logger.warning("Cannot delete %r (%s): %s", filename, e.error_code, e.message)
                return OperationResult(success=False, error=e.message, code=e.error_code)
            except OSError as e:
                logger.error("Failed to remove document file %r: %s", filename, e)
                return OperationResult(
                    success=False,
                    error=f"Failed to remove document: {e}",
                    code=DocumentError.error_code,
                )

            removed = 0
            for chunk_id in document.chunk_ids():
                if chunk_id in self.vector_store:
                    self.vector_store.delete(chunk_id)
                    removed += 1
            self.persist()

        logger.info("Document %s deleted with %d vectors", filename, removed)
        return OperationResult(success=True, chunks=len(document.chunks), vectors=removed)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_stats(self) -> KnowledgeStats:
        with self.lock:
            documents = self.document_store.list()
            total_chunks = sum(len(d.chunks) for d in documents)
            total_vectors = self.vector_store.size()

        percent = round(total_vectors / total_chunks * 100, 1) if total_chunks else 0.0
        return KnowledgeStats(
            total_documents=len(documents),
            total_chunks=total_chunks,
            total_vectors=total_vectors,
            vector_coverage=f"{percent:.1f}%" if total_chunks else "0%",
            coverage_percent=percent,
            documents=[
                DocumentSummary(name=d.filename, size=d.size, chunks=len(d.chunks))
                for d in documents
            ],
        )

    def config_summary(self) -> dict[str, Any]:
        """Embedding configuration and store sizes for the admin dashboard."""
        stats = self.get_stats()
        return {
            "embedding_model": self.embedder.model_name,
            "vector_store_size": stats.total_vectors,
            "documents_count": stats.total_documents,
            "total_chunks": stats.total_chunks,
            "vector_coverage": stats.vector_coverage,
        }
