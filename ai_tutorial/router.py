"""API route definitions.

Routers (mounted under /api/v1 by ai_tutorial.main):
- chat: guarded free-form generation
- prompts: prompt engineering demos (simple, template, system message, context injection)
- output: structured output demos (list, map, typed object)
- rag: retrieval-augmented answers and raw similarity search
- documents: ingestion and management of the similarity index

Handlers are thin: they validate request shape and delegate to the service
modules, which return ApiResponse envelopes or raise domain exceptions.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile

from ai_tutorial import chat, documents, prompting, retrieval, structured
from ai_tutorial.config import settings
from ai_tutorial.exceptions import InputValidationError
from ai_tutorial.generation import ChatClient, get_chat_client
from ai_tutorial.schemas import (
    ApiResponse,
    Author,
    ContextInjectionRequest,
    IngestTextRequest,
    PromptRequest,
    QueryRequest,
    SearchHit,
)
from ai_tutorial.vector_store import VectorStoreRepository, get_vector_store

chat_router = APIRouter(prefix="/chat", tags=["chat"])
prompts_router = APIRouter(prefix="/prompts", tags=["prompts"])
output_router = APIRouter(prefix="/output", tags=["output"])
rag_router = APIRouter(prefix="/rag", tags=["rag"])
documents_router = APIRouter(prefix="/documents", tags=["documents"])

ROUTERS = (chat_router, prompts_router, output_router, rag_router, documents_router)


def _not_blank(value: str, name: str) -> str:
    # Query(min_length=1) still accepts whitespace-only values
    if not value.strip():
        raise InputValidationError(f"{name} cannot be blank")
    return value


# --- chat -------------------------------------------------------------------

@chat_router.post("/generate", response_model=ApiResponse[str])
def generate(req: PromptRequest, client: ChatClient = Depends(get_chat_client)):
    return chat.generate_response(client, req.prompt)


@chat_router.get("/basic", response_model=ApiResponse[str])
def basic(
    message: str = Query("Tell me a Dad joke", min_length=1, max_length=500),
    client: ChatClient = Depends(get_chat_client),
):
    return chat.generate_response(client, _not_blank(message, "message"))


# --- prompts ----------------------------------------------------------------

@prompts_router.get("/simple", response_model=ApiResponse[str])
def simple(client: ChatClient = Depends(get_chat_client)):
    return prompting.simple_prompt(client)


@prompts_router.get("/template", response_model=ApiResponse[str])
def template(
    genre: str = Query("tech", min_length=1, max_length=50),
    client: ChatClient = Depends(get_chat_client),
):
    return prompting.template_prompt(client, _not_blank(genre, "genre"))


@prompts_router.get("/external-template", response_model=ApiResponse[str])
def external_template(
    genre: str = Query("tech", min_length=1, max_length=50),
    client: ChatClient = Depends(get_chat_client),
):
    return prompting.external_template_prompt(client, _not_blank(genre, "genre"))


@prompts_router.get("/system-message", response_model=ApiResponse[str])
def system_message(client: ChatClient = Depends(get_chat_client)):
    return prompting.system_message_prompt(client)


@prompts_router.post("/context-injection", response_model=ApiResponse[str])
def context_injection(req: ContextInjectionRequest, client: ChatClient = Depends(get_chat_client)):
    return prompting.stuff_the_prompt(client, req.prompt, req.stuffit)


# --- output -----------------------------------------------------------------
# /songs and /books are declared before /{author} so they are not captured by it.

@output_router.get("/songs", response_model=ApiResponse[List[str]])
def songs(
    artist: str = Query("Taylor Swift", min_length=1, max_length=100),
    client: ChatClient = Depends(get_chat_client),
):
    return structured.songs(client, _not_blank(artist, "artist"))


@output_router.get("/books", response_model=ApiResponse[Author])
def books(
    author: str = Query("Ken Kousen", min_length=1, max_length=100),
    client: ChatClient = Depends(get_chat_client),
):
    return structured.author_books(client, _not_blank(author, "author"))


@output_router.get("/{author}", response_model=ApiResponse[Dict[str, Any]])
def author_links(
    author: str = Path(..., min_length=1, max_length=100),
    client: ChatClient = Depends(get_chat_client),
):
    return structured.author_links(client, _not_blank(author, "author"))


# --- rag --------------------------------------------------------------------

@rag_router.post("/query", response_model=ApiResponse[str])
def rag_query(
    req: QueryRequest,
    client: ChatClient = Depends(get_chat_client),
    repo: VectorStoreRepository = Depends(get_vector_store),
):
    return retrieval.rag_query(client, repo, req.query, req.top_k)


@rag_router.post("/search", response_model=ApiResponse[List[SearchHit]])
def rag_search(req: QueryRequest, repo: VectorStoreRepository = Depends(get_vector_store)):
    return retrieval.search(repo, req.query, req.top_k)


# --- documents --------------------------------------------------------------

@documents_router.post("/upload", response_model=ApiResponse[Dict[str, Any]])
def upload(
    file: UploadFile = File(...),
    metadata: Optional[str] = Form(None),
    repo: VectorStoreRepository = Depends(get_vector_store),
):
    """Ingest an uploaded text file (txt, md, csv, json, html, ...) into the index."""
    # One byte past the limit is enough to reject oversized uploads.
    raw = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    return documents.ingest_file(repo, file.filename, raw, metadata)


@documents_router.post("/ingest-text", response_model=ApiResponse[Dict[str, Any]])
def ingest_text(req: IngestTextRequest, repo: VectorStoreRepository = Depends(get_vector_store)):
    return documents.ingest_text(repo, req.content, req.title, req.metadata)


@documents_router.get("/list", response_model=ApiResponse[List[Dict[str, Any]]])
def list_documents(repo: VectorStoreRepository = Depends(get_vector_store)):
    return documents.list_documents(repo)


@documents_router.delete("/delete", response_model=ApiResponse[Dict[str, Any]])
def delete_documents(
    ids: str = Query(..., description="Comma separated chunk ids"),
    repo: VectorStoreRepository = Depends(get_vector_store),
):
    return documents.delete_documents(repo, _not_blank(ids, "ids"))


@documents_router.get("/stats", response_model=ApiResponse[Dict[str, Any]])
def stats(repo: VectorStoreRepository = Depends(get_vector_store)):
    return documents.statistics(repo)
