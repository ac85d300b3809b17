"""Agent connector package for different providers."""

from .anthropic import AnthropicConnector
from .base import AgentConnector, AgentResponse
from .bedrock import BedrockAgentConnector
from .factory import connector_from_config, create_connector, get_available_providers
from .openai import OpenAIConnector

__all__ = [
    "AgentConnector",
    "AgentResponse",
    "AnthropicConnector",
    "BedrockAgentConnector",
    "OpenAIConnector",
    "connector_from_config",
    "create_connector",
    "get_available_providers",
]
