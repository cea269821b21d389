"""FastAPI application entrypoint.

Configures logging and CORS, mounts the API routers under /api/v1, maps domain
exceptions to ApiResponse error envelopes, and manages the similarity index:
loaded (or built from the bundled FAQ) at startup, saved at shutdown.
"""
import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ai_tutorial.config import settings
from ai_tutorial.embedding import OpenAIEmbedding
from ai_tutorial.exceptions import SecurityRejectionError, TutorialError
from ai_tutorial.router import ROUTERS
from ai_tutorial.schemas import ApiResponse
from ai_tutorial.vector_store import bootstrap

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(
    title="AI Tutorial API",
    version="0.1.0",
    description="Chat, prompt engineering, structured output and RAG demos over OpenAI-compatible models.",
)
app.state.vector_store = None

# Allow UI (localhost:8501) and any dev origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # keep simple for demo; tighten for prod
    allow_methods=["*"],
    allow_credentials=True,
    allow_headers=["*"],
)

for r in ROUTERS:
    app.include_router(r, prefix=API_PREFIX)


def _envelope(status_code: int, body: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(TutorialError)
async def handle_tutorial_error(request: Request, exc: TutorialError) -> JSONResponse:
    if isinstance(exc, SecurityRejectionError):
        logger.warning("Security validation failed on %s: %s", request.url.path, exc.message)
        return _envelope(exc.status_code, ApiResponse.error(exc.public_message, exc.title))
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.title, request.url.path, exc.message, exc_info=exc)
    else:
        logger.warning("%s on %s: %s", exc.title, request.url.path, exc.message)
    return _envelope(exc.status_code, ApiResponse.error(exc.message, exc.title))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report constraint failures as 400 with "field: message; " pairs."""
    detail = ""
    for err in exc.errors():
        field = err.get("loc", ["request"])[-1]
        detail += f"{field}: {err.get('msg', 'invalid value')}; "
    logger.warning("Validation error on %s: %s", request.url.path, detail)
    return _envelope(400, ApiResponse.error(detail, "Validation Error"))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected error on %s: %s", request.url.path, exc, exc_info=exc)
    return _envelope(500, ApiResponse.error("An unexpected error occurred", "Internal Server Error"))


@app.on_event("startup")
def on_startup() -> None:
    """Load the persisted similarity index, building it from the FAQ on first run."""
    try:
        app.state.vector_store = bootstrap(OpenAIEmbedding())
    except Exception:
        # RAG and document endpoints answer with Vector Store Error until restart
        logger.exception("Vector store initialization failed")
        app.state.vector_store = None


@app.on_event("shutdown")
def on_shutdown() -> None:
    repo = app.state.vector_store
    if repo is None:
        return
    try:
        repo.save()
    except Exception:
        logger.exception("Failed to save vector store on shutdown")


@app.get("/health", response_model=ApiResponse[Dict[str, Any]])
def health():
    """Liveness probe endpoint.

    Returns:
        ApiResponse: {"status": "ok"} and whether the similarity index is loaded.
    """
    return ApiResponse.ok(
        {"status": "ok", "vector_store": app.state.vector_store is not None},
        "Service is healthy",
    )
