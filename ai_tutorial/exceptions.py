"""Domain exception types.

Each exception maps to one HTTP status in ai_tutorial.main:
- AIServiceError: chat/prompt/structured-output failures (503)
- VectorStoreError: embedding, search or persistence failures (500)
- InputValidationError: bad arguments caught in service code (400)
- SecurityRejectionError: sanitizer or content filter rejection (400, masked)
"""
from typing import Optional


class TutorialError(Exception):
    """Base class for all application errors."""

    status_code = 500
    title = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.title
        super().__init__(self.message)


class AIServiceError(TutorialError):
    """A call into the chat model, or the processing of its output, failed."""

    status_code = 503
    title = "AI Service Error"


class VectorStoreError(TutorialError):
    """Embedding, similarity search or index persistence failed."""

    status_code = 500
    title = "Vector Store Error"


class InputValidationError(TutorialError):
    status_code = 400
    title = "Input Validation Error"


class SecurityRejectionError(TutorialError):
    """Input was rejected by the sanitizer or the content filter.

    The message is logged but never returned to the client.
    """

    status_code = 400
    title = "Request Validation Error"
    public_message = "Request contains invalid or inappropriate content"
