"""Application configuration and environment-driven settings.

Defines the Settings class based on pydantic-settings to centralize configuration for:
- API keys, endpoint and model names
- Generation knobs (temperature, output token cap)
- The persisted similarity index and its seed document
- Chunking parameters for the token splitter
- Retrieval defaults and input limits
- Optional observability (Langfuse)

A warning is logged if OPENAI_API_KEY is not set when not running in Docker.
"""
import logging
import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
RESOURCES_DIR = PACKAGE_DIR / "resources"
PROMPTS_DIR = RESOURCES_DIR / "prompts"
DOCS_DIR = RESOURCES_DIR / "docs"


class Settings(BaseSettings):
    """Strongly-typed application settings loaded from environment variables.

    Uses pydantic-settings to populate fields from a .env file or process env.
    See individual field names for semantics and safe defaults.
    """
    # Required
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API key")
    # Empty means the public OpenAI endpoint; any OpenAI-compatible server works (e.g. Ollama)
    OPENAI_BASE_URL: str = ""

    # Models
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_BATCH_SIZE: int = 256

    # Generation
    TEMPERATURE: float = 0.7
    MAX_OUTPUT_TOKENS: int = 1024

    # Similarity index
    VECTOR_STORE_PATH: str = "data/vectorstore.json"
    FAQ_DOCUMENT_PATH: str = str(DOCS_DIR / "consultancy-faq.txt")

    # Chunking (tokens)
    CHUNK_SIZE: int = 800
    CHUNK_OVERLAP: int = 400
    TOKEN_ENCODING: str = "cl100k_base"

    # Retrieval
    RAG_TOP_K: int = 2
    SEARCH_TOP_K: int = 5

    # Limits
    MAX_INPUT_LENGTH: int = 2000
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    LOG_LEVEL: str = "INFO"

    # Observability (optional)
    LANGFUSE_HOST: str = ""
    LANGFUSE_PUBLIC_KEY: str = ""
    LANGFUSE_SECRET_KEY: str = ""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


settings = Settings()

# Safety check for local dev (inside the API container this must be set)
if os.environ.get("RUNNING_IN_DOCKER", "0") == "0":
    if not settings.OPENAI_API_KEY:
        # Avoid raising to allow local scaffolding before setting .env
        logger.warning("OPENAI_API_KEY not set. Set it in .env before calling any model endpoint.")
