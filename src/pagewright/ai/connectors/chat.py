"""Shared implementation for langchain chat model connectors."""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from langchain_core.messages import HumanMessage

from .base import AgentConnector, AgentResponse

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel

logger = logging.getLogger(__name__)


def _chunk_text(content: str | list[Any]) -> str:
    """Flatten a message chunk's content; providers send either a string or content blocks."""
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ChatModelConnector(AgentConnector):
    """Connector backed by a langchain chat model.

    The response is streamed and the chunks are concatenated in arrival order
    before anything downstream sees them.
    """

    def __init__(self, model_name: str | None = None, **kwargs: Any) -> None:
        super().__init__(model_name, **kwargs)
        self._client: BaseChatModel | None = None

    @abstractmethod
    def _create_client(self) -> BaseChatModel:
        """Build the langchain chat model."""

    @property
    def client(self) -> BaseChatModel:
        """Get or create the langchain client."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def invoke(self, prompt: str, session_id: str | None = None) -> AgentResponse:
        session_id = session_id or self.new_session_id()

        try:
            completion = "".join(_chunk_text(chunk.content) for chunk in self.client.stream([HumanMessage(prompt)]))
        except Exception as e:  # noqa: BLE001
            logger.error(
                "Agent invocation failed: %s",
                e,
                extra={"model": self.model_name, "prompt_length": len(prompt)},
            )
            return AgentResponse.failure(str(e), error_code=e.__class__.__name__, session_id=session_id)

        return AgentResponse(success=True, completion=completion, session_id=session_id)
