"""File-backed similarity index.

Wraps LangChain's InMemoryVectorStore (embeddings held in memory, persisted as a
single JSON file) and centralizes its lifecycle:
- VectorStoreRepository: add/search/delete/list operations that translate
  library failures into VectorStoreError, plus save() to the configured path.
- bootstrap: load the index from disk if present, otherwise build it from the
  bundled FAQ document and save it.
- get_vector_store: FastAPI dependency resolving the repository attached to the app.

Paths are read from ai_tutorial.config.settings.
"""
import logging
import threading
import uuid
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from fastapi import Request
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_core.vectorstores import InMemoryVectorStore
from langchain_text_splitters import TextSplitter

from ai_tutorial.config import settings
from ai_tutorial.exceptions import VectorStoreError
from ai_tutorial.obs import span
from ai_tutorial.utils import split_documents

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class VectorStoreRepository:
    """Similarity index operations with uniform error handling.

    All access to the underlying store goes through a lock: request handlers run
    in a thread pool and the store is a plain dict. Embedding calls are remote,
    so they run before the lock is taken and only the dict access is serialized.
    """

    def __init__(self, store: InMemoryVectorStore, path: PathLike):
        self._store = store
        self.path = Path(path)
        self._lock = threading.RLock()

    def store_documents(self, documents: Sequence[Document]) -> List[str]:
        """Embed and add documents.

        Returns:
            List[str]: Identifiers assigned to the stored documents.
        """
        try:
            logger.info("Storing %d documents in vector store", len(documents))
            with span("vector_store.embed", {"documents": len(documents)}):
                vectors = self._store.embeddings.embed_documents([d.page_content for d in documents])
            entries = [
                {"id": d.id or str(uuid.uuid4()), "vector": v, "text": d.page_content, "metadata": d.metadata}
                for d, v in zip(documents, vectors)
            ]
            with self._lock, span("vector_store.add", {"documents": len(entries)}):
                for entry in entries:
                    self._store.store[entry["id"]] = entry
            ids = [e["id"] for e in entries]
            logger.info("Successfully stored %d documents", len(ids))
            return ids
        except Exception as e:
            logger.error("Failed to store documents in vector store: %s", e, exc_info=True)
            raise VectorStoreError(f"Failed to store documents: {e}") from e

    def find_similar(self, query: str, top_k: int) -> List[Tuple[Document, float]]:
        """Return up to top_k (document, cosine similarity) pairs, closest first."""
        try:
            logger.debug("Performing similarity search (top_k=%d)", top_k)
            with span("vector_store.embed_query"):
                vector = self._store.embeddings.embed_query(query)
            with self._lock, span("vector_store.search", {"top_k": top_k}):
                results = self._store.similarity_search_with_score_by_vector(vector, k=top_k)
            logger.debug("Found %d similar documents", len(results))
            return results
        except Exception as e:
            logger.error("Failed to perform similarity search: %s", e, exc_info=True)
            raise VectorStoreError(f"Failed to search vector store: {e}") from e

    def delete_documents(self, ids: Sequence[str]) -> List[str]:
        """Delete documents by id.

        Returns:
            List[str]: The ids that were present and removed.
        """
        try:
            logger.info("Deleting %d documents from vector store", len(ids))
            with self._lock:
                present = [i for i in ids if i in self._store.store]
                self._store.delete(list(ids))
            logger.info("Successfully deleted %d documents", len(present))
            return present
        except Exception as e:
            logger.error("Failed to delete documents from vector store: %s", e, exc_info=True)
            raise VectorStoreError(f"Failed to delete documents: {e}") from e

    def find_all(self) -> List[Document]:
        """Return every stored chunk (without embeddings)."""
        try:
            with self._lock:
                entries = list(self._store.store.values())
            return [
                Document(id=e["id"], page_content=e["text"], metadata=dict(e.get("metadata") or {}))
                for e in entries
            ]
        except Exception as e:
            logger.error("Failed to retrieve all documents: %s", e, exc_info=True)
            raise VectorStoreError(f"Failed to retrieve documents: {e}") from e

    def count(self) -> int:
        with self._lock:
            return len(self._store.store)

    def has_documents(self) -> bool:
        return self.count() > 0

    def save(self) -> None:
        """Write the whole index to self.path, creating the parent directory."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock:
                self._store.dump(str(self.path))
            logger.info("Saved vector store with %d documents to %s", self.count(), self.path)
        except Exception as e:
            logger.error("Failed to save vector store to %s: %s", self.path, e, exc_info=True)
            raise VectorStoreError(f"Failed to save vector store: {e}") from e

    @classmethod
    def load(cls, path: PathLike, embedding: Embeddings) -> "VectorStoreRepository":
        """Load a previously saved index."""
        try:
            store = InMemoryVectorStore.load(str(path), embedding)
        except Exception as e:
            logger.error("Failed to load vector store from %s: %s", path, e, exc_info=True)
            raise VectorStoreError(f"Failed to load vector store: {e}") from e
        repo = cls(store, path)
        logger.info("Loaded vector store with %d documents from %s", repo.count(), path)
        return repo


def bootstrap(
    embedding: Embeddings,
    path: Optional[PathLike] = None,
    seed_path: Optional[PathLike] = None,
    splitter: Optional[TextSplitter] = None,
) -> VectorStoreRepository:
    """Load the persisted index, or build it from the seed document and save it.

    Args:
        embedding: Embedding model used for new chunks and queries.
        path: Index file; defaults to settings.VECTOR_STORE_PATH.
        seed_path: Seed document; defaults to settings.FAQ_DOCUMENT_PATH.
        splitter: Text splitter; defaults to the configured token splitter.

    Returns:
        VectorStoreRepository: Ready for search.
    """
    path = Path(path or settings.VECTOR_STORE_PATH)
    if path.exists():
        logger.info("Loading vector store from file: %s", path)
        return VectorStoreRepository.load(path, embedding)

    logger.info("Vector store file %s does not exist; building it from seed document", path)
    seed = Path(seed_path or settings.FAQ_DOCUMENT_PATH)
    try:
        text = seed.read_text(encoding="utf-8")
    except OSError as e:
        raise VectorStoreError(f"Failed to read seed document {seed}: {e}") from e

    repo = VectorStoreRepository(InMemoryVectorStore(embedding=embedding), path)
    source = Document(page_content=text, metadata={"filename": seed.name})
    try:
        chunks = split_documents([source], splitter)
    except Exception as e:
        raise VectorStoreError(f"Failed to split seed document {seed}: {e}") from e
    repo.store_documents(chunks)
    repo.save()
    return repo


def get_vector_store(request: Request) -> VectorStoreRepository:
    """FastAPI dependency returning the repository created at startup."""
    repo = getattr(request.app.state, "vector_store", None)
    if repo is None:
        raise VectorStoreError("Vector store is not initialized")
    return repo
