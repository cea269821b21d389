"""Structured output demonstrations.

The converter's format instructions are injected into the prompt through a
{format} placeholder and the reply is parsed by the same converter:
- songs: comma separated list -> List[str]
- author_links: JSON object -> Dict[str, Any]
- author_books: JSON matching the Author schema -> Author
"""
import logging
from typing import Any, Dict

from langchain_core.output_parsers import (
    BaseOutputParser,
    CommaSeparatedListOutputParser,
    JsonOutputParser,
    PydanticOutputParser,
)
from langchain_core.prompts import PromptTemplate

from ai_tutorial.exceptions import AIServiceError
from ai_tutorial.generation import ChatClient
from ai_tutorial.schemas import ApiResponse, Author

logger = logging.getLogger(__name__)

SONGS_TEMPLATE = """
Please give me a list of the top 10 songs by {artist}. If you don't know the answer, just say "I don't know".
{format}
"""

AUTHOR_LINKS_TEMPLATE = """
Generate a list of links for the author {author}. Include the author's name as the key and any social network links as the object.
{format}
"""

AUTHOR_BOOKS_TEMPLATE = """
Generate a list of books written by the author {author}. If you are not positive that the book belongs to this author, please don't include it.
{format}
"""


def _generate(client: ChatClient, template: str, parser: BaseOutputParser, action: str, **variables: str) -> Any:
    try:
        prompt = PromptTemplate.from_template(template).format(
            format=parser.get_format_instructions(), **variables
        )
        content = client.prompt(prompt)
        return parser.parse(content)
    except Exception as e:
        logger.error("Failed to generate %s: %s", action, e, exc_info=True)
        raise AIServiceError(f"Failed to generate {action}: {e}") from e


def songs(client: ChatClient, artist: str) -> ApiResponse:
    result = _generate(client, SONGS_TEMPLATE, CommaSeparatedListOutputParser(), "songs list", artist=artist)
    return ApiResponse.ok(result, "Songs list generated successfully")


def author_links(client: ChatClient, author: str) -> ApiResponse:
    result = _generate(client, AUTHOR_LINKS_TEMPLATE, JsonOutputParser(), "author links", author=author)
    if not isinstance(result, dict):
        raise AIServiceError(
            f"Failed to generate author links: expected a JSON object, got {type(result).__name__}"
        )
    links: Dict[str, Any] = result
    return ApiResponse.ok(links, "Author links generated successfully")


def author_books(client: ChatClient, author: str) -> ApiResponse:
    parser = PydanticOutputParser(pydantic_object=Author)
    result = _generate(client, AUTHOR_BOOKS_TEMPLATE, parser, "author books", author=author)
    return ApiResponse.ok(result, "Author books generated successfully")
