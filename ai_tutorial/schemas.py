"""Pydantic request/response schemas for the API.

Defines the public contracts used by the FastAPI endpoints:
- ApiResponse: Uniform {success, message, data} envelope returned by every endpoint.
- PromptRequest: Free-text prompt for chat generation.
- ContextInjectionRequest: Prompt plus a flag controlling context injection.
- QueryRequest: RAG query or similarity search with an optional result count.
- IngestTextRequest: Raw text to split, embed and store.
- Author: Typed target for the structured-output demo.
- SearchHit: One similarity search result.
"""
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")

DEFAULT_SUCCESS_MESSAGE = "Request processed successfully"
DEFAULT_FAILURE_MESSAGE = "Request failed"


class ApiResponse(BaseModel, Generic[T]):
    """Standard response envelope.

    Attributes:
        success: True when the operation completed without raising.
        message: Human-readable summary of the outcome.
        data: Payload on success; the error text on failure.
    """
    success: bool
    message: str
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: Any, message: str = DEFAULT_SUCCESS_MESSAGE) -> "ApiResponse":
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, error_message: str, message: str = DEFAULT_FAILURE_MESSAGE) -> "ApiResponse":
        return cls(success=False, message=message, data=error_message)


def _not_blank(value: str, label: str) -> str:
    if not value.strip():
        raise ValueError(f"{label} cannot be blank")
    return value


class PromptRequest(BaseModel):
    """Request body for AI prompt generation.

    Attributes:
        prompt: Input prompt for the model to process.
    """
    prompt: str = Field(..., min_length=1, max_length=500, examples=["Tell me a Dad joke"])

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Prompt")


class ContextInjectionRequest(BaseModel):
    """Request body for the context injection (prompt stuffing) demo.

    Attributes:
        prompt: Question about the 2024 summer olympics.
        stuffit: Whether to inject the bundled sports document as context.
    """
    prompt: str = Field(
        ...,
        min_length=1,
        max_length=500,
        examples=["What sports are being included in the 2024 summer olympics?"],
    )
    stuffit: bool = False

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Prompt")


class QueryRequest(BaseModel):
    """Request body for RAG query and similarity search.

    Attributes:
        query: The user question.
        top_k: Optional number of chunks to retrieve (server default otherwise).
    """
    query: str = Field(..., min_length=1, max_length=500, examples=["What services do you offer?"])
    top_k: Optional[int] = Field(default=None, ge=1, le=20)

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Query")


class IngestTextRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    title: Optional[str] = Field(default=None, max_length=255)
    metadata: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Content")


class Author(BaseModel):
    """An author and the books they wrote."""
    author: str = Field(description="Full name of the author")
    books: List[str] = Field(description="Titles of books written by the author")


class SearchHit(BaseModel):
    """A chunk returned by similarity search.

    Attributes:
        id: Identifier of the stored chunk.
        content: Chunk text.
        metadata: Metadata attached at ingestion (filename, source, ...).
        score: Cosine similarity to the query; higher is closer.
    """
    id: Optional[str] = None
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    score: float
