"""AWS Bedrock agent connector using boto3."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import AgentConnector, AgentResponse

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class BedrockAgentConnector(AgentConnector):
    """Connector for a Bedrock agent (``bedrock-agent-runtime`` ``invoke_agent``).

    The agent keeps conversation state server-side, keyed by the session id.
    """

    def __init__(
        self,
        model_name: str | None = None,
        *,
        agent_id: str | None = None,
        agent_alias_id: str | None = None,
        region: str = "us-east-1",
        client: Any | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(model_name, **kwargs)
        self.agent_id = agent_id or os.getenv("BEDROCK_AGENT_ID")
        self.agent_alias_id = agent_alias_id or os.getenv("BEDROCK_AGENT_ALIAS_ID")
        self.region = region
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("bedrock-agent-runtime", region_name=self.region)
        return self._client

    @staticmethod
    def _collect_completion(events: Iterable[dict[str, Any]]) -> str:
        """Concatenate chunk payloads in the order the event stream delivers them."""
        parts = []
        for event in events:
            chunk = event.get("chunk")
            if chunk and "bytes" in chunk:
                data = chunk["bytes"]
                parts.append(data.decode("utf-8") if isinstance(data, bytes) else str(data))
        return "".join(parts)

    def invoke(self, prompt: str, session_id: str | None = None) -> AgentResponse:
        session_id = session_id or self.new_session_id()

        if not self.agent_id or not self.agent_alias_id:
            return AgentResponse.failure("Bedrock agent id and alias id must be configured", session_id=session_id)

        try:
            response = self.client.invoke_agent(
                agentId=self.agent_id,
                agentAliasId=self.agent_alias_id,
                sessionId=session_id,
                inputText=prompt,
            )
            completion = self._collect_completion(response["completion"])
        except ClientError as e:
            error = e.response.get("Error", {})
            logger.error(
                "Bedrock agent invocation failed: %s (%s)", error.get("Message", str(e)), error.get("Code")
            )
            return AgentResponse.failure(
                error.get("Message", str(e)), error_code=error.get("Code"), session_id=session_id
            )
        except (BotoCoreError, KeyError) as e:
            logger.error("Unexpected error during Bedrock agent invocation: %s", e)
            return AgentResponse.failure(str(e), error_code=e.__class__.__name__, session_id=session_id)

        return AgentResponse(success=True, completion=completion, session_id=response.get("sessionId", session_id))

    @property
    def is_available(self) -> bool:
        return bool(self.agent_id and self.agent_alias_id)
