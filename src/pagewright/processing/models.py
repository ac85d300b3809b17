"""Value types produced by the processing pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict

from pagewright.core.errors import FailureReason


def _dedupe(messages: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(messages))


class ValidationReport(BaseModel):
    """Structured, purely informational validation result."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @classmethod
    def build(cls, errors: list[str], warnings: list[str]) -> ValidationReport:
        """Deduplicate both lists, keeping first occurrences in order."""
        errors_ = _dedupe(errors)
        return cls(valid=not errors_, errors=errors_, warnings=_dedupe(warnings))

    @classmethod
    def parse_failure(cls, message: str) -> ValidationReport:
        return cls(valid=False, errors=(f"Failed to parse HTML: {message}",))


class ProcessingResult(BaseModel):
    """Successful pipeline outcome."""

    model_config = ConfigDict(frozen=True)

    success: Literal[True] = True
    html: str
    prompt: str
    original_html: str | None = None
    size_before: int = 0
    size_after: int
    validation: ValidationReport
    session_id: str | None = None

    @property
    def metadata(self) -> dict:
        """Validation and size stats, as persisted alongside a modification."""
        return {
            "validation": self.validation.model_dump(mode="json"),
            "size_before": self.size_before,
            "size_after": self.size_after,
        }


class ProcessingFailure(BaseModel):
    """Failed pipeline outcome. Carries no partial result."""

    model_config = ConfigDict(frozen=True)

    success: Literal[False] = False
    reason: FailureReason
    message: str
    prompt: str
    error_code: str | None = None
    session_id: str | None = None


ProcessingOutcome = ProcessingResult | ProcessingFailure


@dataclass(frozen=True)
class Transformed:
    """A stage produced new HTML."""

    html: str
    changed: bool = True


@dataclass(frozen=True)
class Unchanged:
    """A stage fell back to its input."""

    html: str
    error: str | None = None
    changed: bool = False


Outcome = Transformed | Unchanged
