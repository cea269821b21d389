"""Application package containing the API, configuration, AI demos, the similarity
index and supporting utilities.

Submodules overview:
- main: FastAPI application bootstrap, error handlers and lifecycle.
- router: API route definitions, dependencies, and handlers.
- config: Application settings and environment variable loading.
- exceptions: Domain exceptions and their HTTP status codes.
- schemas: Pydantic request/response models and the ApiResponse envelope.
- security: Input sanitization and content filtering.
- generation: Chat model client (OpenAI SDK).
- embedding: Embedding utilities and the LangChain embeddings adapter.
- chat: Guarded free-form chat.
- prompting: Prompt template and context injection demos.
- structured: Structured output demos (list, map, typed object).
- vector_store: File-backed similarity index and its bootstrap.
- retrieval: Retrieval-augmented generation and similarity search.
- documents: Document ingestion and management.
- ingestion: Command-line ingestors.
- obs: Observability utilities (tracing/spans).
- utils: Chunking, bundled resources and small helpers.
"""
