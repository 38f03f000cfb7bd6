"""Unit tests for RetrievalEngine."""

import json
import math

import pytest

from outreach_rag.adapters.outbound.vector_store import JsonVectorStore
from outreach_rag.core.domain.exceptions import EmbeddingServiceError, EmptyQueryError
from outreach_rag.core.services import RetrievalEngine

pytestmark = pytest.mark.unit


def unit_vector(cosine: float) -> list[float]:
    """2-d unit vector whose cosine with [1, 0] is ``cosine``."""
    return [cosine, math.sqrt(1 - cosine**2)]


@pytest.fixture
def fruit_kb(docs_dir, vectors_file, embedder):
    """Three single-chunk documents with precomputed vectors."""
    (docs_dir / "a.txt").write_text("Apple notes.", encoding="utf-8")
    (docs_dir / "b.txt").write_text("Banana notes.", encoding="utf-8")
    (docs_dir / "c.txt").write_text("Cherry notes.", encoding="utf-8")
    vectors_file.write_text(
        json.dumps(
            [
                ["a.txt_0", unit_vector(0.5)],
                ["b.txt_0", unit_vector(0.05)],
                ["c.txt_0", unit_vector(0.9)],
            ]
        ),
        encoding="utf-8",
    )
    embedder.vectors["which fruit"] = [1.0, 0.0]


class TestSearch:
    """Tests for semantic search."""

    def test_ranking_threshold_and_top_k(self, fruit_kb, make_engine, embedder):
        """Results are sorted by score, cut at top_k and filtered by threshold."""
        engine = make_engine()

        results = engine.search("which fruit", top_k=2)

        assert [r.document for r in results] == ["c.txt", "a.txt"]
        assert results[0].score == pytest.approx(0.9)
        assert results[1].score == pytest.approx(0.5)
        # Stored vectors are used, only the query is embedded
        assert embedder.calls == ["which fruit"]

    def test_below_threshold_is_excluded(self, fruit_kb, make_engine):
        engine = make_engine()

        results = engine.search("which fruit", top_k=10)

        assert [r.document for r in results] == ["c.txt", "a.txt"]

    def test_fever_query_finds_ablation_faq(self, engine):
        engine.add_document("ablation_faq.md", "Patients report fever after ablation.")
        engine.add_document("pricing.txt", "The premium plan costs 99 EUR per month.")

        results = engine.search("post-surgical fever", top_k=3)

        assert results[0].document == "ablation_faq.md"
        assert results[0].content == "Patients report fever after ablation."
        assert "pricing.txt" not in [r.document for r in results]

    def test_ties_keep_document_order(self, engine):
        engine.add_document("first.txt", "Same words here.")
        engine.add_document("second.txt", "Same words here.")

        results = engine.search("same words", top_k=5)

        assert [r.document for r in results] == ["first.txt", "second.txt"]
        assert results[0].score == pytest.approx(results[1].score)

    def test_empty_knowledge_base_returns_nothing(self, engine, embedder):
        """No documents means no results and no embedding call."""
        assert engine.search("anything") == []
        assert embedder.calls == []

    def test_non_positive_top_k_returns_nothing(self, fruit_kb, make_engine):
        engine = make_engine()

        assert engine.search("which fruit", top_k=0) == []

    @pytest.mark.parametrize("query", ["", "   ", "\n\t"])
    def test_blank_query_raises(self, engine, query):
        with pytest.raises(EmptyQueryError):
            engine.search(query)

    def test_query_embedding_failure_propagates(self, engine, embedder):
        engine.add_document("faq.md", "Shipping takes two days.")
        embedder.fail_on.add("boom")

        with pytest.raises(EmbeddingServiceError):
            engine.search("boom shipping")

    def test_lazily_embeds_missing_vectors(self, docs_dir, vectors_file, make_engine, embedder):
        """Chunks without vectors are embedded during search and persisted."""
        (docs_dir / "faq.md").write_text("Shipping takes two days.", encoding="utf-8")
        engine = make_engine()
        assert engine.get_stats().total_vectors == 0

        results = engine.search("shipping days")

        assert [r.document for r in results] == ["faq.md"]
        assert engine.has_vector("faq.md_0")
        persisted = JsonVectorStore(vectors_file)
        persisted.load()
        assert "faq.md_0" in persisted

    def test_lazy_embedding_failure_skips_chunk(self, docs_dir, make_engine, embedder):
        (docs_dir / "good.txt").write_text("Shipping is fast.", encoding="utf-8")
        (docs_dir / "bad.txt").write_text("Shipping POISON text.", encoding="utf-8")
        engine = make_engine()
        embedder.fail_on.add("POISON")

        results = engine.search("shipping")

        assert [r.document for r in results] == ["good.txt"]
        assert not engine.has_vector("bad.txt_0")

    def test_deleted_document_is_not_resurrected(self, docs_dir, make_engine, embedder):
        """A document deleted while its chunk is being embedded stays deleted."""
        (docs_dir / "doomed.txt").write_text("Alpha content.", encoding="utf-8")
        engine = make_engine()

        def delete_mid_flight(text):
            if text == "Alpha content.":
                engine.delete_document("doomed.txt")

        embedder.on_embed = delete_mid_flight

        results = engine.search("alpha content")

        assert results == []
        assert not engine.has_vector("doomed.txt_0")
        assert engine.get_stats().total_documents == 0


class TestContextSummary:
    """Tests for get_context_summary."""

    def test_renders_source_labelled_block(self, engine):
        engine.add_document("ablation_faq.md", "Patients report fever after ablation.")
        engine.add_document("pricing.txt", "The premium plan costs 99 EUR per month.")

        summary = engine.get_context_summary("post-surgical fever")

        assert summary == (
            "Relevant knowledge base content:\n\n"
            "[Source: ablation_faq.md]\nPatients report fever after ablation.\n\n"
        )

    def test_no_match(self, engine):
        engine.add_document("pricing.txt", "The premium plan costs 99 EUR per month.")

        assert engine.get_context_summary("fever") == RetrievalEngine.NO_RELEVANT_INFORMATION

    def test_blank_query(self, engine):
        assert engine.get_context_summary("  ") == RetrievalEngine.NO_RELEVANT_INFORMATION

    def test_embedding_failure_returns_sentinel(self, engine, embedder):
        """Drafting callers get a sentinel string instead of an exception."""
        engine.add_document("faq.md", "Shipping takes two days.")
        embedder.fail_on.add("shipping")

        assert engine.get_context_summary("shipping") == RetrievalEngine.SEARCH_UNAVAILABLE


class TestDocumentLifecycle:
    """Tests for add_document and delete_document."""

    NOTES = "Alpha one.\nBeta two.\nGamma three.\nDelta four.\n"

    def test_add_embeds_every_chunk(self, make_engine, vectors_file):
        engine = make_engine(max_chunk_size=12)

        result = engine.add_document("notes.txt", self.NOTES)

        assert result.success
        assert (result.chunks, result.vectors) == (4, 4)
        assert sorted(engine.vector_store.keys()) == [f"notes.txt_{i}" for i in range(4)]
        assert vectors_file.exists()

    def test_partial_embedding_failure_gives_75_percent_coverage(self, make_engine, embedder):
        """A failed chunk does not roll back the add; coverage reports the gap."""
        engine = make_engine(max_chunk_size=12)
        embedder.fail_on.add("Gamma")

        result = engine.add_document("notes.txt", self.NOTES)
        stats = engine.get_stats()

        assert result.success
        assert result.vectors == 3
        assert stats.total_chunks == 4
        assert stats.total_vectors == 3
        assert stats.vector_coverage == "75.0%"
        assert stats.coverage_percent == 75.0
        assert engine.missing_chunk_ids() == ["notes.txt_2"]

    def test_duplicate_add_fails_without_side_effects(self, engine, embedder):
        engine.add_document("faq.md", "First.")
        calls_before = len(embedder.calls)

        result = engine.add_document("faq.md", "Second.")

        assert not result.success
        assert result.code == "RAG_DOC_002"
        assert len(embedder.calls) == calls_before

    def test_invalid_name_fails(self, engine):
        result = engine.add_document("../escape.txt", "content")

        assert not result.success
        assert result.code == "RAG_VAL_003"

    def test_delete_cascades_to_vectors(self, make_engine, vectors_file, docs_dir):
        engine = make_engine(max_chunk_size=12)
        engine.add_document("notes.txt", self.NOTES)
        engine.add_document("keep.txt", "Keep me.")

        result = engine.delete_document("notes.txt")

        assert result.success
        assert result.vectors == 4
        assert list(engine.vector_store.keys()) == ["keep.txt_0"]
        assert not (docs_dir / "notes.txt").exists()
        persisted = JsonVectorStore(vectors_file)
        persisted.load()
        assert list(persisted.keys()) == ["keep.txt_0"]

    def test_delete_unknown_document(self, engine):
        result = engine.delete_document("ghost.txt")

        assert not result.success
        assert result.code == "RAG_DOC_003"

    def test_state_survives_restart(self, make_engine, embedder):
        """A fresh engine reuses persisted vectors instead of re-embedding."""
        make_engine().add_document("faq.md", "Shipping takes two days.")
        embedder.calls.clear()

        restarted = make_engine()
        results = restarted.search("shipping")

        assert [r.document for r in results] == ["faq.md"]
        assert embedder.calls == ["shipping"]


class TestInitializeAndStats:
    """Tests for startup reconciliation and statistics."""

    def test_initialize_prunes_orphaned_vectors(self, docs_dir, vectors_file, make_engine):
        (docs_dir / "a.txt").write_text("Alpha.", encoding="utf-8")
        vectors_file.write_text(
            json.dumps([["a.txt_0", [1.0, 0.0]], ["gone.txt_0", [0.0, 1.0]]]), encoding="utf-8"
        )

        engine = make_engine()

        assert list(engine.vector_store.keys()) == ["a.txt_0"]
        on_disk = json.loads(vectors_file.read_text(encoding="utf-8"))
        assert [pair[0] for pair in on_disk] == ["a.txt_0"]

    def test_corrupt_vector_file_starts_empty(self, docs_dir, vectors_file, make_engine):
        (docs_dir / "a.txt").write_text("Alpha.", encoding="utf-8")
        vectors_file.write_text("{broken", encoding="utf-8")

        engine = make_engine()

        assert engine.is_ready
        assert engine.get_stats().total_vectors == 0
        assert engine.missing_chunk_ids() == ["a.txt_0"]

    def test_empty_stats(self, engine):
        stats = engine.get_stats()

        assert stats.total_documents == 0
        assert stats.total_chunks == 0
        assert stats.vector_coverage == "0%"
        assert stats.coverage_percent == 0.0

    def test_stats_document_listing(self, engine):
        engine.add_document("faq.md", "Shipping takes two days.")

        stats = engine.get_stats().to_dict()

        assert stats["documents"] == [{"name": "faq.md", "size": 24, "chunks": 1}]
        assert stats["vector_coverage"] == "100.0%"

    def test_config_summary(self, engine):
        engine.add_document("faq.md", "Shipping takes two days.")

        summary = engine.config_summary()

        assert summary == {
            "embedding_model": "stub-embedding-001",
            "vector_store_size": 1,
            "documents_count": 1,
            "total_chunks": 1,
            "vector_coverage": "100.0%",
        }
