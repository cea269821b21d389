"""Utility helpers for text chunking, prompt resources and file names.

This module provides:
- build_splitter: token splitter configured from settings (tiktoken encoding)
- split_documents: split LangChain documents into overlapping token chunks
- load_template / load_document: bundled prompt templates and context documents
- file_extension: lower-cased extension of a file name
- utcnow_iso: timestamp string used in ingestion metadata
"""
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from langchain_core.documents import Document
from langchain_core.prompts import PromptTemplate
from langchain_text_splitters import TextSplitter, TokenTextSplitter

from ai_tutorial.config import DOCS_DIR, PROMPTS_DIR, settings


def build_splitter(chunk_size: Optional[int] = None, chunk_overlap: Optional[int] = None) -> TextSplitter:
    """Create a token-based splitter.

    Overlap is clamped below chunk_size; the splitter rejects overlap >= size.

    Args:
        chunk_size: Tokens per chunk; defaults to settings.CHUNK_SIZE.
        chunk_overlap: Tokens shared by consecutive chunks; defaults to settings.CHUNK_OVERLAP.

    Returns:
        TextSplitter: A TokenTextSplitter using settings.TOKEN_ENCODING.
    """
    size = max(1, chunk_size or settings.CHUNK_SIZE)
    overlap = settings.CHUNK_OVERLAP if chunk_overlap is None else chunk_overlap
    overlap = max(0, min(overlap, size - 1))
    return TokenTextSplitter(
        encoding_name=settings.TOKEN_ENCODING,
        chunk_size=size,
        chunk_overlap=overlap,
    )


def split_documents(documents: List[Document], splitter: Optional[TextSplitter] = None) -> List[Document]:
    """Split documents into chunks, copying each source document's metadata.

    Whitespace-only chunks are dropped.
    """
    splitter = splitter or build_splitter()
    chunks = splitter.split_documents(documents)
    return [c for c in chunks if c.page_content.strip()]


@lru_cache(maxsize=None)
def load_template(name: str) -> PromptTemplate:
    """Load a {placeholder} prompt template from the bundled prompts directory."""
    return PromptTemplate.from_file(PROMPTS_DIR / name, encoding="utf-8")


@lru_cache(maxsize=None)
def load_document(name: str) -> str:
    """Read a bundled context document."""
    return (DOCS_DIR / name).read_text(encoding="utf-8")


def file_extension(filename: Optional[str]) -> str:
    """Return the lower-cased extension without the dot, or "" if there is none.

    Args:
        filename: File name or path.

    Returns:
        str: e.g. "txt" for "notes.TXT"; "" for "README" or "archive.".
    """
    if not filename:
        return ""
    name = Path(filename).name
    dot = name.rfind(".")
    if dot == -1 or dot == len(name) - 1:
        return ""
    return name[dot + 1:].lower()


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
