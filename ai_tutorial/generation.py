"""Chat completion client built on the OpenAI SDK.

Provides:
- get_client: Cached OpenAI client (shared with ai_tutorial.embedding)
- ChatClient: Thin wrapper sending a message list and returning the reply text
- get_chat_client: Cached ChatClient used as a FastAPI dependency

Configuration is read from ai_tutorial.config.settings.
"""
import logging
from typing import Dict, List, Optional

from openai import OpenAI

from ai_tutorial.config import settings
from ai_tutorial.obs import span

logger = logging.getLogger(__name__)

Message = Dict[str, str]

_client: Optional[OpenAI] = None
_chat_client: Optional["ChatClient"] = None


def get_client() -> OpenAI:
    """Return a cached OpenAI client using the configured API key and endpoint.

    Returns:
        OpenAI: Client instance reused across calls.
    """
    global _client
    if _client is None:
        _client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL or None,
        )
    return _client


def system_message(content: str) -> Message:
    return {"role": "system", "content": content}


def user_message(content: str) -> Message:
    return {"role": "user", "content": content}


class ChatClient:
    """Sends prompts to the configured chat model.

    Exceptions raised by the SDK propagate unchanged; services decide how to
    classify them.
    """

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self._client = client
        self.model = model or settings.OPENAI_MODEL
        self.temperature = settings.TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.MAX_OUTPUT_TOKENS

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_client()
        return self._client

    def call(self, messages: List[Message]) -> str:
        """Run one chat completion.

        Args:
            messages: Ordered role/content dicts (system first, if any).

        Returns:
            str: The reply text, stripped; empty string if the model returned none.
        """
        prompt_chars = sum(len(m.get("content", "")) for m in messages)
        logger.info("Calling %s with %d messages (%d chars)", self.model, len(messages), prompt_chars)
        with span("llm.chat", {"model": self.model, "messages": len(messages)}):
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        content = resp.choices[0].message.content or ""
        logger.info("Model replied with %d chars", len(content))
        return content.strip()

    def prompt(self, text: str, system: Optional[str] = None) -> str:
        """Send a single user message, optionally preceded by a system message."""
        messages: List[Message] = []
        if system:
            messages.append(system_message(system))
        messages.append(user_message(text))
        return self.call(messages)


def get_chat_client() -> ChatClient:
    """FastAPI dependency returning the process-wide ChatClient."""
    global _chat_client
    if _chat_client is None:
        _chat_client = ChatClient()
    return _chat_client
