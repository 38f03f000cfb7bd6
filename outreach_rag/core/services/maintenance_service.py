"""Background reconciliation of the vector store against the document chunks."""

import logging
import threading
import time
from collections.abc import Callable

from ..domain.exceptions import EmbeddingServiceError
from .retrieval_service import RetrievalEngine

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_DELAY_SECONDS = 0.5


class EmbeddingMaintenanceJob:
    """Backfills vectors for chunks that lack one.

    The vector store is persisted every ``batch_size`` generated vectors and
    once at the end, so an interrupted run loses at most one batch. Runs
    are serialized: a second trigger waits for the first and then finds
    nothing left to embed.
    """

    def __init__(
        self,
        engine: RetrievalEngine,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the job.

        Args:
            engine: Engine whose stores are reconciled.
            batch_size: Generated vectors between intermediate saves.
            delay_seconds: Pause between embedding calls (provider rate limits).
            sleep: Sleep function, injectable for tests.
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.engine = engine
        self.batch_size = batch_size
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._run_lock = threading.Lock()
        self._thread_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def backfill_missing(self) -> int:
        """Embed and store every chunk that has no vector yet.

        Per-chunk embedding failures are logged and skipped.

        Returns:
            Number of vectors generated.
        """
        with self._run_lock:
            generated = 0
            calls = 0

            for document, _, chunk_id, text in self.engine.snapshot_chunks():
                if self.engine.has_vector(chunk_id):
                    continue

                if calls and self.delay_seconds > 0:
                    self._sleep(self.delay_seconds)
                calls += 1

                try:
                    vector = self.engine.embedder.embed(text)
                except EmbeddingServiceError as e:
                    logger.warning(
                        "Backfill skipped %s (%s): %s", chunk_id, e.error_code, e.message
                    )
                    continue

                if not self.engine.store_chunk_vector(document, chunk_id, vector):
                    continue

                generated += 1
                if generated % self.batch_size == 0:
                    self.engine.persist()
                    logger.info("Generated and saved %d vectors so far", generated)

            if generated:
                self.engine.persist()
                logger.info("Backfill complete: %d vectors generated", generated)

        return generated

    def ensure_all_embeddings(self) -> int:
        """Report coverage and backfill when any chunk lacks a vector.

        Returns:
            Number of vectors generated.
        """
        missing = self.engine.missing_chunk_ids()
        total = len(self.engine.snapshot_chunks())
        if not missing:
            logger.info("All %d chunks already have vectors", total)
            return 0

        logger.info("%d/%d chunks are missing vectors, starting backfill", len(missing), total)
        return self.backfill_missing()

    def start_background(self) -> threading.Thread:
        """Fire-and-forget backfill on a daemon thread.

        Returns the already running thread when a backfill is in progress.
        """
        with self._thread_lock:
            if self._thread is not None and self._thread.is_alive():
                logger.info("Backfill already running, not starting another")
                return self._thread

            self._thread = threading.Thread(
                target=self._run_in_background,
                name="embedding-backfill",
                daemon=True,
            )
            self._thread.start()
            return self._thread

    def _run_in_background(self) -> None:
        try:
            self.ensure_all_embeddings()
        except Exception:
            logger.exception("Background embedding backfill failed")
