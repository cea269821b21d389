"""Retrieval-augmented generation over the persisted similarity index.

This module implements:
- build_context: join retrieved chunk texts into the {documents} block
- rag_query: top-k search -> rag-prompt-template -> grounded answer
- search: top-k search returned as SearchHit records

Search failures surface as VectorStoreError; model failures as AIServiceError.
"""
import logging
import time
from typing import List, Optional

from langchain_core.documents import Document

from ai_tutorial.config import settings
from ai_tutorial.exceptions import AIServiceError
from ai_tutorial.generation import ChatClient
from ai_tutorial.obs import Trace, span
from ai_tutorial.schemas import ApiResponse, SearchHit
from ai_tutorial.utils import load_template
from ai_tutorial.vector_store import VectorStoreRepository

logger = logging.getLogger(__name__)


def build_context(documents: List[Document]) -> str:
    return "\n".join(d.page_content for d in documents)


def rag_query(
    client: ChatClient,
    repo: VectorStoreRepository,
    question: str,
    top_k: Optional[int] = None,
) -> ApiResponse:
    """Answer a question grounded in the most similar stored chunks.

    Args:
        client: Chat client.
        repo: Similarity index.
        question: User question.
        top_k: Chunks to inject; defaults to settings.RAG_TOP_K.

    Returns:
        ApiResponse: The model's answer.
    """
    t0 = time.time()
    k = top_k or settings.RAG_TOP_K
    trace = Trace("rag_query", input={"question": question, "top_k": k})

    with span("rag.retrieve", {"top_k": k}):
        hits = repo.find_similar(question, k)
    documents = [doc for doc, _ in hits]
    trace.event("retrieval_result", {
        "num_documents": len(documents),
        "top_score": hits[0][1] if hits else None,
    })

    try:
        prompt = load_template("rag-prompt-template.txt").format(
            input=question, documents=build_context(documents)
        )
        answer = client.prompt(prompt)
    except Exception as e:
        logger.error("Failed to generate RAG response: %s", e, exc_info=True)
        raise AIServiceError(f"Failed to generate RAG response: {e}") from e

    latency_ms = int((time.time() - t0) * 1000)
    trace.generation("answer", prompt=question, output=answer, metadata={"documents": len(documents)})
    trace.end(output={"latency_ms": latency_ms})
    logger.info("RAG answer generated from %d chunks in %d ms", len(documents), latency_ms)
    return ApiResponse.ok(answer, "RAG response generated successfully")


def search(repo: VectorStoreRepository, question: str, top_k: Optional[int] = None) -> ApiResponse:
    """Return the closest stored chunks with their similarity scores."""
    k = top_k or settings.SEARCH_TOP_K
    with span("rag.retrieve", {"top_k": k}):
        hits = repo.find_similar(question, k)
    results = [
        SearchHit(id=doc.id, content=doc.page_content, metadata=doc.metadata, score=float(score))
        for doc, score in hits
    ]
    return ApiResponse.ok(results, f"Found {len(results)} similar documents")
