"""Factory for creating agent connectors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .anthropic import AnthropicConnector
from .bedrock import BedrockAgentConnector
from .openai import OpenAIConnector

if TYPE_CHECKING:
    from pagewright.core.config import AgentConfig

    from .base import AgentConnector

# Registry of available connectors
CONNECTOR_REGISTRY: dict[str, type[AgentConnector]] = {
    "anthropic": AnthropicConnector,
    "claude": AnthropicConnector,  # Alias
    "openai": OpenAIConnector,
    "gpt": OpenAIConnector,  # Alias
    "bedrock": BedrockAgentConnector,
}


def create_connector(provider: str, model_name: str | None = None, **kwargs: Any) -> AgentConnector:
    """Create a connector for the specified provider.

    Args:
        provider: The agent provider (anthropic, openai, bedrock, ...)
        model_name: Optional specific model name
        **kwargs: Additional configuration for the connector

    Raises:
        ValueError: If provider is not supported
    """
    provider_lower = provider.lower()

    if provider_lower not in CONNECTOR_REGISTRY:
        available = ", ".join(CONNECTOR_REGISTRY.keys())
        raise ValueError(f"Unsupported provider '{provider}'. Available: {available}")

    return CONNECTOR_REGISTRY[provider_lower](model_name=model_name, **kwargs)


def connector_from_config(config: AgentConfig) -> AgentConnector:
    """Create the connector described by the ``agent`` config section."""
    if config.connector.lower() == "bedrock":
        return create_connector(
            config.connector,
            config.model,
            agent_id=config.agent_id,
            agent_alias_id=config.agent_alias_id,
            region=config.region,
        )
    return create_connector(
        config.connector,
        config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


def get_available_providers() -> list[str]:
    """Get list of available providers."""
    return list(CONNECTOR_REGISTRY.keys())
