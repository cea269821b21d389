"""Document ingestion and management for the similarity index.

This module implements:
- ingest_file: validate an uploaded text file and store it as chunks
- ingest_text: store raw text under a title
- process: build metadata, split, embed, store and persist one document
- list_documents / statistics: summaries grouped by source filename
- delete_documents: remove chunks by id

Every mutation saves the index so it survives a restart.
"""
import logging
import time
from collections import Counter, defaultdict
from typing import Any, Dict, List, Optional

from langchain_core.documents import Document
from langchain_text_splitters import TextSplitter

from ai_tutorial.config import settings
from ai_tutorial.exceptions import AIServiceError, InputValidationError, VectorStoreError
from ai_tutorial.schemas import ApiResponse
from ai_tutorial.utils import build_splitter, file_extension, split_documents, utcnow_iso
from ai_tutorial.vector_store import VectorStoreRepository

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("txt", "md", "markdown", "text", "log", "csv", "json", "xml", "html", "htm")
DEFAULT_TITLE = "Text Document"
UNKNOWN_FILENAME = "unknown"


def is_supported(filename: Optional[str]) -> bool:
    return file_extension(filename) in SUPPORTED_EXTENSIONS


def _validate_file(filename: Optional[str], raw: bytes) -> None:
    if not raw:
        raise InputValidationError("File is empty")
    limit = settings.MAX_UPLOAD_BYTES
    if len(raw) > limit:
        raise InputValidationError(
            f"File size exceeds maximum allowed size of {limit // 1024 // 1024}MB"
        )
    if not is_supported(filename):
        raise InputValidationError(
            "Unsupported file format. Supported formats: " + ", ".join(SUPPORTED_EXTENSIONS)
        )


def build_source(title: str, size: int, user_metadata: Optional[str] = None) -> str:
    """Describe where a document came from, e.g. "title=faq.txt, size=120, ingestionTime=...".

    User supplied metadata is appended verbatim when present.
    """
    source = f"title={title}, size={size}, ingestionTime={utcnow_iso()}"
    if user_metadata and user_metadata.strip():
        source += f", userMetadata={user_metadata}"
    return source


def process(
    repo: VectorStoreRepository,
    content: str,
    title: str,
    source: str,
    splitter: Optional[TextSplitter] = None,
) -> ApiResponse:
    """Split a document into chunks, store them and save the index.

    Args:
        repo: Similarity index.
        content: Full document text.
        title: Stored as the chunks' "filename" metadata.
        source: Provenance string (see build_source).
        splitter: Text splitter; defaults to the configured token splitter.

    Returns:
        ApiResponse: Ingestion summary with chunk ids and timing.
    """
    t0 = time.time()
    metadata = {
        "filename": title,
        "source": source,
        "ingestion_time": utcnow_iso(),
        "original_length": len(content),
    }
    document = Document(page_content=content, metadata=metadata)
    chunks = split_documents([document], splitter or build_splitter())
    ids = repo.store_documents(chunks)
    repo.save()

    processing_time_ms = int((time.time() - t0) * 1000)
    logger.info(
        "Successfully processed document '%s' into %d chunks in %d ms", title, len(chunks), processing_time_ms
    )
    result = {
        "filename": title,
        "original_length": len(content),
        "chunk_count": len(chunks),
        "chunk_ids": ids,
        "processing_time_ms": processing_time_ms,
        "metadata": metadata,
        "timestamp": utcnow_iso(),
    }
    return ApiResponse.ok(result, "Document processed and stored successfully")


def ingest_file(
    repo: VectorStoreRepository,
    filename: Optional[str],
    raw: bytes,
    metadata: Optional[str] = None,
    splitter: Optional[TextSplitter] = None,
    title: Optional[str] = None,
) -> ApiResponse:
    """Validate and ingest an uploaded file.

    The format check uses filename; the chunks are stored under title when one
    is given, otherwise under filename.

    Raises:
        InputValidationError: Empty, oversized, unsupported or non UTF-8 file.
        AIServiceError: Any other ingestion failure.
    """
    logger.info("Starting document ingestion for file: %s", filename)
    _validate_file(filename, raw)
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InputValidationError(f"File is not valid UTF-8 text: {e}") from e
    logger.debug("Extracted %d characters from file", len(content))

    name = title or filename
    try:
        return process(repo, content, name, build_source(name, len(raw), metadata), splitter)
    except Exception as e:
        logger.error("Failed to ingest document %s: %s", name, e, exc_info=True)
        raise AIServiceError(f"Document ingestion failed: {e}") from e


def ingest_text(
    repo: VectorStoreRepository,
    content: str,
    title: Optional[str] = None,
    metadata: Optional[str] = None,
    splitter: Optional[TextSplitter] = None,
) -> ApiResponse:
    if not content or not content.strip():
        raise InputValidationError("Content cannot be blank")
    title = title if title and title.strip() else DEFAULT_TITLE
    logger.info("Starting text content ingestion with %d characters", len(content))
    try:
        return process(repo, content, title, build_source(title, len(content), metadata), splitter)
    except Exception as e:
        logger.error("Failed to ingest text content: %s", e, exc_info=True)
        raise AIServiceError(f"Text content ingestion failed: {e}") from e


def _filename(doc: Document) -> str:
    return str(doc.metadata.get("filename") or UNKNOWN_FILENAME)


def list_documents(repo: VectorStoreRepository) -> ApiResponse:
    """Group stored chunks by filename.

    Each entry carries the first chunk's metadata and the summed chunk length.
    """
    try:
        groups: Dict[str, List[Document]] = defaultdict(list)
        for doc in repo.find_all():
            groups[_filename(doc)].append(doc)
        listing: List[Dict[str, Any]] = [
            {
                "filename": filename,
                "chunk_count": len(chunks),
                "metadata": chunks[0].metadata,
                "total_characters": sum(len(c.page_content) for c in chunks),
            }
            for filename, chunks in groups.items()
        ]
    except Exception as e:
        logger.error("Failed to list documents: %s", e, exc_info=True)
        raise VectorStoreError(f"Failed to retrieve document list: {e}") from e
    logger.info("Retrieved information for %d documents", len(listing))
    return ApiResponse.ok(listing, "Document list retrieved successfully")


def delete_documents(repo: VectorStoreRepository, ids_csv: Optional[str]) -> ApiResponse:
    """Delete chunks given a comma separated id list.

    Raises:
        InputValidationError: No non-blank id in ids_csv.
        VectorStoreError: The store failed to delete or save.
    """
    ids = [i.strip() for i in (ids_csv or "").split(",") if i.strip()]
    if not ids:
        raise InputValidationError("No valid document IDs provided")

    logger.info("Deleting documents with IDs: %s", ids)
    try:
        removed = repo.delete_documents(ids)
        repo.save()
    except VectorStoreError:
        raise
    except Exception as e:
        logger.error("Failed to delete documents: %s", e, exc_info=True)
        raise VectorStoreError(f"Failed to delete documents: {e}") from e
    if len(removed) < len(ids):
        logger.warning("%d of %d ids were not present in the store", len(ids) - len(removed), len(ids))

    result = {"deleted_ids": ids, "count": len(ids), "timestamp": utcnow_iso()}
    return ApiResponse.ok(result, "Documents deleted successfully")


def statistics(repo: VectorStoreRepository) -> ApiResponse:
    try:
        documents = repo.find_all()
        lengths = [len(d.page_content) for d in documents]
        filenames = [_filename(d) for d in documents]
        stats = {
            "total_documents": len(documents),
            "total_characters": sum(lengths),
            "unique_files": len(set(filenames)),
            "average_chunk_size": sum(lengths) / len(lengths) if lengths else 0.0,
            "file_types": dict(Counter(file_extension(f) for f in filenames)),
            "has_documents": repo.has_documents(),
            "timestamp": utcnow_iso(),
        }
    except Exception as e:
        logger.error("Failed to retrieve document statistics: %s", e, exc_info=True)
        raise VectorStoreError(f"Failed to retrieve statistics: {e}") from e
    logger.info(
        "Retrieved statistics for %d documents from %d unique files",
        stats["total_documents"], stats["unique_files"],
    )
    return ApiResponse.ok(stats, "Document statistics retrieved successfully")
