"""
Pytest configuration and shared fixtures.
"""

import re
from pathlib import Path

import pytest

from outreach_rag.adapters.outbound.document_store import FileDocumentStore
from outreach_rag.adapters.outbound.vector_store import JsonVectorStore
from outreach_rag.core.domain.exceptions import EmbeddingServiceError
from outreach_rag.core.ports.embedding_port import EmbeddingPort
from outreach_rag.core.services import EmbeddingMaintenanceJob, RetrievalEngine


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (API surface, no network)")
    config.addinivalue_line("markers", "slow: Slow tests (threads, large data)")


class StubEmbedder(EmbeddingPort):
    """Deterministic embedder for tests.

    Texts listed in ``vectors`` get that exact vector. Anything else is
    embedded as a bag of words over a vocabulary grown on first sight, so
    texts sharing words score higher than texts that share none. Texts
    containing any of the ``fail_on`` markers raise EmbeddingServiceError.
    """

    DIMENSIONS = 512

    def __init__(self, vectors=None, fail_on=None, model_name="stub-embedding-001"):
        self.vectors = dict(vectors or {})
        self.fail_on = set(fail_on or ())
        self._model_name = model_name
        self._vocabulary: dict[str, int] = {}
        self.calls: list[str] = []
        self.on_embed = None

    @property
    def model_name(self) -> str:
        return self._model_name

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.on_embed is not None:
            self.on_embed(text)
        if any(marker in text for marker in self.fail_on):
            raise EmbeddingServiceError("stub embedding failure", context={"text": text[:40]})
        if text in self.vectors:
            return list(self.vectors[text])

        vector = [0.0] * self.DIMENSIONS
        for word in re.findall(r"[a-z]+", text.lower()):
            index = self._vocabulary.setdefault(word, len(self._vocabulary))
            vector[index] += 1.0
        return vector


@pytest.fixture
def docs_dir(tmp_path) -> Path:
    """Empty knowledge base directory."""
    path = tmp_path / "knowledge_base"
    path.mkdir()
    return path


@pytest.fixture
def vectors_file(docs_dir) -> Path:
    return docs_dir / "vectors.json"


@pytest.fixture
def embedder() -> StubEmbedder:
    return StubEmbedder()


@pytest.fixture
def make_engine(docs_dir, vectors_file, embedder):
    """Factory building an initialized engine over the temp knowledge base."""

    def _make(max_chunk_size: int = 500, min_score: float = 0.1, stub=None) -> RetrievalEngine:
        engine = RetrievalEngine(
            FileDocumentStore(docs_dir, max_chunk_size=max_chunk_size),
            JsonVectorStore(vectors_file),
            stub or embedder,
            min_score=min_score,
        )
        engine.initialize()
        return engine

    return _make


@pytest.fixture
def engine(make_engine) -> RetrievalEngine:
    return make_engine()


@pytest.fixture
def sleeps() -> list[float]:
    """Records delays requested by the maintenance job."""
    return []


@pytest.fixture
def maintenance_job(engine, sleeps) -> EmbeddingMaintenanceJob:
    return EmbeddingMaintenanceJob(engine, batch_size=10, delay_seconds=0.5, sleep=sleeps.append)
