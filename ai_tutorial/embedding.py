"""Embedding utilities wrapping OpenAI's embeddings API.

Provides:
- embed_texts: Batched embedding for a list of strings.
- embed_query: Convenience helper to embed a single query string.
- OpenAIEmbedding: LangChain Embeddings adapter so the vector store can call
  the helpers above.

Models and batch size are configured via ai_tutorial.config.settings.
"""
from typing import List

from langchain_core.embeddings import Embeddings

from ai_tutorial.config import settings
from ai_tutorial.generation import get_client


def embed_texts(texts: List[str]) -> List[List[float]]:
    """Embed a batch of texts using the configured OpenAI embedding model.

    Args:
        texts: List of input strings to embed.

    Returns:
        List[List[float]]: One embedding vector per input text, in input order.
    """
    if not texts:
        return []
    client = get_client()
    size = max(1, settings.EMBEDDING_BATCH_SIZE)
    vectors: List[List[float]] = []
    for start in range(0, len(texts), size):
        resp = client.embeddings.create(
            model=settings.OPENAI_EMBEDDING_MODEL, input=texts[start:start + size]
        )
        vectors.extend(d.embedding for d in resp.data)
    return vectors


def embed_query(text: str) -> List[float]:
    """Embed a single query string and return its embedding vector.

    Args:
        text: The query to embed.

    Returns:
        List[float]: The embedding vector for the query.
    """
    client = get_client()
    resp = client.embeddings.create(model=settings.OPENAI_EMBEDDING_MODEL, input=[text])
    return resp.data[0].embedding


class OpenAIEmbedding(Embeddings):
    """Embeddings implementation backed by embed_texts/embed_query."""

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return embed_texts(texts)

    def embed_query(self, text: str) -> List[float]:
        return embed_query(text)
