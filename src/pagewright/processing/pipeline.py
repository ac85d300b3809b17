"""Orchestrates agent calls and the HTML transforms."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from pagewright.core.config import ProcessingConfig, PromptTemplates
from pagewright.core.errors import FailureReason
from pagewright.processing import minifier, sanitizer, validator
from pagewright.processing.extractor import extract
from pagewright.processing.models import (
    Outcome,
    ProcessingFailure,
    ProcessingOutcome,
    ProcessingResult,
    Unchanged,
    ValidationReport,
)

if TYPE_CHECKING:
    from pagewright.ai.connectors.base import AgentConnector

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(html|prompt)\}")


def byte_size(html: str) -> int:
    return len(html.encode("utf-8"))


def fill_template(template: str, **values: str) -> str:
    """Substitute placeholders in one pass, so values are never re-expanded."""
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


class HtmlPipeline:
    """Turns agent responses into sanitized, validated HTML.

    Each call is independent: the pipeline keeps no state between invocations
    beyond the injected agent, configuration and prompt templates.
    """

    def __init__(
        self,
        agent: AgentConnector,
        config: ProcessingConfig,
        prompts: PromptTemplates | None = None,
    ) -> None:
        self.agent = agent
        self.config = config
        self.prompts = prompts or PromptTemplates()

    def validate(self, html: str) -> ValidationReport:
        return validator.validate(html, self.config)

    def modify(self, existing_html: str, prompt: str, session_id: str | None = None) -> ProcessingOutcome:
        """Modify existing HTML content based on a user prompt."""
        size_before = byte_size(existing_html)
        if size_before > self.config.max_html_size:
            logger.warning("Rejected HTML of %d bytes (limit %d)", size_before, self.config.max_html_size)
            return ProcessingFailure(
                reason=FailureReason.SIZE_EXCEEDED,
                message=f"HTML content exceeds maximum allowed size ({size_before} > {self.config.max_html_size} bytes)",
                prompt=prompt,
                session_id=session_id,
            )

        input_report = self.validate(existing_html)
        if not input_report.valid:
            logger.warning("Invalid HTML provided for modification: %s", "; ".join(input_report.errors))

        request = fill_template(self.prompts.modify_html, html=existing_html, prompt=prompt)
        return self._run(request, prompt, session_id, original_html=existing_html, size_before=size_before)

    def create(self, prompt: str, session_id: str | None = None) -> ProcessingOutcome:
        """Create new HTML content based on a user prompt."""
        request = fill_template(self.prompts.create_html, prompt=prompt)
        return self._run(request, prompt, session_id)

    def _run(
        self,
        request: str,
        prompt: str,
        session_id: str | None,
        original_html: str | None = None,
        size_before: int = 0,
    ) -> ProcessingOutcome:
        try:
            response = self.agent.invoke(request, session_id)
        except Exception as e:  # noqa: BLE001
            logger.error("Agent connector raised during invocation: %s", e)
            return ProcessingFailure(
                reason=FailureReason.AGENT_FAILURE,
                message=str(e),
                prompt=prompt,
                error_code=e.__class__.__name__,
                session_id=session_id,
            )

        if not response.success:
            return ProcessingFailure(
                reason=FailureReason.AGENT_FAILURE,
                message=response.error or "Agent invocation failed",
                prompt=prompt,
                error_code=response.error_code,
                session_id=response.session_id or session_id,
            )

        html = extract(response.completion)
        if not html:
            logger.warning("[%s] agent response yielded no HTML", FailureReason.EXTRACTION_EMPTY)

        if self.config.sanitize_output:
            html = self._apply("sanitization", sanitizer.sanitize(html))
        if self.config.minify_output:
            html = self._apply("minification", minifier.minify(html))

        return ProcessingResult(
            html=html,
            prompt=prompt,
            original_html=original_html,
            size_before=size_before,
            size_after=byte_size(html),
            validation=self.validate(html),
            session_id=response.session_id or session_id,
        )

    @staticmethod
    def _apply(stage: str, outcome: Outcome) -> str:
        if isinstance(outcome, Unchanged) and outcome.error is not None:
            logger.warning("HTML %s fell back to its input: %s", stage, outcome.error)
        return outcome.html
