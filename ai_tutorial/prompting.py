"""Prompt engineering demonstrations.

Each function builds a prompt a different way and returns the model reply:
- simple_prompt: a fixed user message
- template_prompt: inline template with a {genre} placeholder
- external_template_prompt: the same template loaded from a bundled file
- system_message_prompt: a system message constraining the model's persona
- stuff_the_prompt: context injection, optionally filling {context} with a bundled document

Any failure is reported as AIServiceError.
"""
import logging
from contextlib import contextmanager

from langchain_core.prompts import PromptTemplate

from ai_tutorial.exceptions import AIServiceError
from ai_tutorial.generation import ChatClient, system_message, user_message
from ai_tutorial.schemas import ApiResponse
from ai_tutorial.utils import load_document, load_template

logger = logging.getLogger(__name__)

YOUTUBE_TEMPLATE = """
List 10 of the most popular Youtubers in {genre} along with their current subscriber counts.
If you don't know the answer, just say "I don't know".
"""

COMEDIAN_SYSTEM_PROMPT = (
    "You are a world class comedian. Your task is to tell dad jokes. "
    "If someone asks you about any other jokes, tell them you only tell dad jokes."
)


@contextmanager
def _ai_errors(action: str):
    try:
        yield
    except AIServiceError:
        raise
    except Exception as e:
        logger.error("Failed to %s: %s", action, e, exc_info=True)
        raise AIServiceError(f"Failed to {action}: {e}") from e


def simple_prompt(client: ChatClient) -> ApiResponse:
    with _ai_errors("generate simple prompt response"):
        reply = client.prompt("Tell me a dad joke")
    return ApiResponse.ok(reply, "Simple prompt response generated successfully")


def template_prompt(client: ChatClient, genre: str) -> ApiResponse:
    """Fill an inline template's {genre} placeholder at request time."""
    with _ai_errors("generate YouTube list"):
        prompt = PromptTemplate.from_template(YOUTUBE_TEMPLATE).format(genre=genre)
        reply = client.prompt(prompt)
    return ApiResponse.ok(reply, "YouTube list generated successfully")


def external_template_prompt(client: ChatClient, genre: str) -> ApiResponse:
    """Same as template_prompt, with the template text kept in resources/prompts."""
    with _ai_errors("generate YouTube extended list"):
        prompt = load_template("youtube.txt").format(genre=genre)
        reply = client.prompt(prompt)
    return ApiResponse.ok(reply, "YouTube extended list generated successfully")


def system_message_prompt(client: ChatClient) -> ApiResponse:
    """Ask for a serious joke while the system message only allows dad jokes."""
    with _ai_errors("generate dad joke"):
        reply = client.call([
            system_message(COMEDIAN_SYSTEM_PROMPT),
            user_message("Tell me a serious joke about the universe"),
        ])
    return ApiResponse.ok(reply, "Dad joke generated successfully")


def stuff_the_prompt(client: ChatClient, question: str, stuffit: bool) -> ApiResponse:
    """Answer a question about the 2024 olympics, with or without injected context.

    Args:
        client: Chat client.
        question: User question.
        stuffit: When True, {context} is the bundled olympic sports document;
            otherwise it is empty and the model relies on its own knowledge.
    """
    with _ai_errors("generate Olympic sports information"):
        context = load_document("olympic-sports.txt") if stuffit else ""
        logger.info("Context injection %s (%d chars)", "enabled" if stuffit else "disabled", len(context))
        prompt = load_template("olympic-sports.txt").format(question=question, context=context)
        reply = client.prompt(prompt)
    return ApiResponse.ok(reply, "Olympic sports information generated successfully")
