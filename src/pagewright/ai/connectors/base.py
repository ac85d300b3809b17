"""Base connector interface for the generative agent."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel


class AgentResponse(BaseModel):
    """Result of one agent invocation."""

    success: bool
    completion: str = ""
    session_id: str | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failure(cls, error: str, error_code: str | None = None, session_id: str | None = None) -> AgentResponse:
        return cls(success=False, error=error, error_code=error_code, session_id=session_id)


class AgentConnector(ABC):
    """Abstract base class for agent connectors.

    ``invoke`` is a blocking request/response exchange. Implementations report
    provider errors as ``success=False`` responses instead of raising, and never
    retry.
    """

    DEFAULT_MODEL: ClassVar[str | None] = None

    def __init__(self, model_name: str | None = None, **kwargs: Any) -> None:
        """Initialize the connector."""
        self.model_name = model_name or self.DEFAULT_MODEL
        self.config = kwargs

    @staticmethod
    def new_session_id() -> str:
        return str(uuid.uuid4())

    @abstractmethod
    def invoke(self, prompt: str, session_id: str | None = None) -> AgentResponse:
        """Send ``prompt`` to the agent and return its full completion."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the connector is available (API key set, etc.)."""
