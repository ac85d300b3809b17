"""Agent integration: connectors and prompt templates."""
