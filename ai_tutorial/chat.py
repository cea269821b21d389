"""Guarded chat generation.

generate_response runs the full request path for free-form chat:
sanitize input -> content-filter input -> model call -> content-filter reply.
"""
import logging
from typing import Optional

from ai_tutorial.exceptions import AIServiceError, SecurityRejectionError
from ai_tutorial.generation import ChatClient
from ai_tutorial.schemas import ApiResponse
from ai_tutorial.security import ContentFilter, InputSanitizer

logger = logging.getLogger(__name__)

_sanitizer = InputSanitizer()
_content_filter = ContentFilter()


def generate_response(
    client: ChatClient,
    message: str,
    sanitizer: Optional[InputSanitizer] = None,
    content_filter: Optional[ContentFilter] = None,
) -> ApiResponse:
    """Generate a reply to a user message with input and output safety checks.

    Args:
        client: Chat client used for the model call.
        message: Raw user message.
        sanitizer: Input sanitizer (module default if omitted).
        content_filter: Content filter (module default if omitted).

    Returns:
        ApiResponse: The (possibly redacted) reply text.

    Raises:
        SecurityRejectionError: Input failed sanitization or was blocked by the filter.
        AIServiceError: The model call failed.
    """
    sanitizer = sanitizer or _sanitizer
    content_filter = content_filter or _content_filter
    logger.info("Generating AI response for message with length: %d", len(message or ""))

    try:
        sanitized = sanitizer.sanitize(message)
        verdict = content_filter.filter(sanitized)
        if verdict.blocked:
            logger.warning(
                "Content blocked (%s): %s", verdict.reason, sanitizer.safe_log_string(sanitized)
            )
            raise SecurityRejectionError(f"Request blocked: {verdict.reason}")

        reply = client.prompt(verdict.filtered_content)

        # Replies are never blocked, only masked/redacted
        final = content_filter.filter(reply).filtered_content or ""
    except SecurityRejectionError:
        raise
    except Exception as e:
        logger.error("Failed to generate AI response: %s", e, exc_info=True)
        raise AIServiceError(f"Failed to generate response: {e}") from e

    logger.info("AI response generated successfully, response length: %d", len(final))
    return ApiResponse.ok(final, "AI response generated successfully")
