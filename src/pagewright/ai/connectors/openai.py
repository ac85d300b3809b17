"""OpenAI connector using langchain."""

from __future__ import annotations

import os
from typing import ClassVar

from langchain_openai import ChatOpenAI

from .chat import ChatModelConnector


class OpenAIConnector(ChatModelConnector):
    """Connector for OpenAI models via langchain."""

    DEFAULT_MODEL: ClassVar[str] = "gpt-4o"

    def _create_client(self) -> ChatOpenAI:
        return ChatOpenAI(
            model=self.model_name,
            api_key=os.getenv("OPENAI_API_KEY"),
            **self.config,
        )

    @property
    def is_available(self) -> bool:
        return os.getenv("OPENAI_API_KEY") is not None
