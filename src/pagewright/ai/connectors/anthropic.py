"""Anthropic Claude connector using langchain."""

from __future__ import annotations

import os
from typing import ClassVar

from langchain_anthropic import ChatAnthropic

from .chat import ChatModelConnector


class AnthropicConnector(ChatModelConnector):
    """Connector for Anthropic Claude models via langchain."""

    DEFAULT_MODEL: ClassVar[str] = "claude-3-5-sonnet-20241022"

    def _create_client(self) -> ChatAnthropic:
        return ChatAnthropic(
            model_name=self.model_name,
            api_key=os.getenv("ANTHROPIC_API_KEY"),
            **self.config,
        )

    @property
    def is_available(self) -> bool:
        """Check if Anthropic API key is available."""
        return os.getenv("ANTHROPIC_API_KEY") is not None
