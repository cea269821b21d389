# FILE: tests/test_retrieval.py
"""Tests for RAG answers and similarity search."""

from unittest.mock import patch

import pytest

from ai_tutorial import retrieval
from ai_tutorial.exceptions import AIServiceError, VectorStoreError
from ai_tutorial.schemas import SearchHit


class TestRagQuery:
    """Test grounded answer generation."""

    def test_prompt_contains_question_and_top_chunks(self, fake_client, seeded_repo):
        question = "Every engagement starts with a free discovery call."
        resp = retrieval.rag_query(fake_client, seeded_repo, question)
        assert resp.success is True
        assert resp.message == "RAG response generated successfully"
        prompt = fake_client.last_prompt
        assert f"QUESTION:\n{question}" in prompt
        documents_block = prompt.split("DOCUMENTS:\n", 1)[1].rstrip("\n")
        # default top_k is 2: the exact match plus one neighbour, newline separated
        assert documents_block.startswith(question + "\n")
        assert documents_block.count("\n") == 1

    def test_explicit_top_k(self, fake_client, seeded_repo):
        retrieval.rag_query(fake_client, seeded_repo, "office hours", top_k=3)
        documents_block = fake_client.last_prompt.split("DOCUMENTS:\n", 1)[1].rstrip("\n")
        assert len(documents_block.split("\n")) == 3

    def test_empty_store_still_answers(self, fake_client, repo):
        resp = retrieval.rag_query(fake_client, repo, "anything?")
        assert resp.success is True
        assert fake_client.last_prompt.rstrip("\n").endswith("DOCUMENTS:")

    def test_model_failure_is_ai_error(self, make_client, seeded_repo):
        client = make_client(error=RuntimeError("model unavailable"))
        with pytest.raises(AIServiceError, match="Failed to generate RAG response"):
            retrieval.rag_query(client, seeded_repo, "What services do you offer?")

    def test_search_failure_is_vector_store_error(self, fake_client, seeded_repo):
        with patch.object(seeded_repo, "find_similar", side_effect=VectorStoreError("index gone")):
            with pytest.raises(VectorStoreError):
                retrieval.rag_query(fake_client, seeded_repo, "What services do you offer?")
        assert fake_client.calls == []


class TestSearch:
    """Test raw similarity search."""

    def test_hits_ordered_with_scores(self, seeded_repo):
        resp = retrieval.search(seeded_repo, "Our office is open Monday to Friday.", top_k=2)
        hits = resp.data
        assert resp.message == "Found 2 similar documents"
        assert all(isinstance(h, SearchHit) for h in hits)
        assert hits[0].content == "Our office is open Monday to Friday."
        assert hits[0].metadata == {"filename": "hours.md"}
        assert hits[0].id
        assert hits[0].score >= hits[1].score

    def test_default_top_k_bounded_by_store(self, seeded_repo):
        assert len(retrieval.search(seeded_repo, "anything").data) == 3

    def test_build_context(self, faq_docs):
        context = retrieval.build_context(faq_docs[:2])
        assert context == (
            "We offer cloud architecture and custom software development.\n"
            "Every engagement starts with a free discovery call."
        )
