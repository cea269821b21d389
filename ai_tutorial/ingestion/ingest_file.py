"""Local file ingestor.

Reads a text file from disk, splits it into token chunks, embeds them with the
configured OpenAI embedding model and adds them to the persisted similarity
index (loading it, or building it from the FAQ seed, first).

Supported formats are the same as the upload endpoint: txt, md, markdown, text,
log, csv, json, xml, html, htm.

Usage:
  python -m ai_tutorial.ingestion.ingest_file --path docs/handbook.md
  python -m ai_tutorial.ingestion.ingest_file --path notes.txt --title "Team notes" --metadata "owner=ops"

Configuration:
- Index file: ai_tutorial.config.settings.VECTOR_STORE_PATH
- Embeddings: ai_tutorial.config.settings.OPENAI_EMBEDDING_MODEL
- Chunk params: ai_tutorial.config.settings.CHUNK_SIZE, CHUNK_OVERLAP
"""
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ai_tutorial.documents import ingest_file as ingest_upload
from ai_tutorial.embedding import OpenAIEmbedding
from ai_tutorial.vector_store import VectorStoreRepository, bootstrap

logger = logging.getLogger(__name__)


def ingest_path(
    repo: VectorStoreRepository,
    path: Path,
    title: Optional[str] = None,
    metadata: Optional[str] = None,
) -> Dict[str, Any]:
    """Ingest one local file into repo and return the ingestion summary.

    Args:
        repo: Target similarity index (saved after the chunks are added).
        path: File to read.
        title: Stored filename; defaults to the file's name. The format check
            always uses the file's own extension.
        metadata: Free-form text appended to the chunks' source metadata.
    """
    raw = path.read_bytes()
    logger.info("Read %d bytes from %s", len(raw), path)
    return ingest_upload(repo, path.name, raw, metadata, title=title).data


def main():
    parser = argparse.ArgumentParser(description="Ingest a local text file into the similarity index.")
    parser.add_argument("--path", required=True, help="File to ingest (txt, md, csv, json, html, ...)")
    parser.add_argument("--title", default=None, help="Name stored with the chunks (default: file name)")
    parser.add_argument("--metadata", default=None, help="Optional free-form metadata")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger.info("Starting file ingestion for %s", args.path)

    repo = bootstrap(OpenAIEmbedding())
    try:
        result = ingest_path(repo, Path(args.path), args.title, args.metadata)
        logger.info(
            "Completed ingestion: chunks=%d, file=%s, total_documents=%d",
            result["chunk_count"], result["filename"], repo.count(),
        )
        print(f"[INGEST-FILE] {args.path} -> {result['chunk_count']} chunks")
    except Exception:
        logger.exception("Ingestion failed for %s", args.path)
        raise


if __name__ == "__main__":
    main()
