"""Error types shared across pagewright."""

from __future__ import annotations

from enum import StrEnum


class FailureReason(StrEnum):
    """Stable reason tags carried by every caller-visible failure."""

    SIZE_EXCEEDED = "size_exceeded"
    AGENT_FAILURE = "agent_failure"
    EXTRACTION_EMPTY = "extraction_empty"
    PARSE_FAILURE = "parse_failure"
    STORAGE_FAILURE = "storage_failure"
    NOT_FOUND = "not_found"
    APPLY_INCONSISTENCY = "apply_inconsistency"
    PERMISSION_DENIED = "permission_denied"
    PERSISTENCE_FAILURE = "persistence_failure"


class PagewrightError(Exception):
    """Base class for errors that are surfaced to callers."""

    reason: FailureReason = FailureReason.PARSE_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.reason}] {self.message}"


class StorageFailure(PagewrightError):
    """Object storage put/get/list/delete failed."""

    reason = FailureReason.STORAGE_FAILURE


class ArtifactNotFound(StorageFailure):
    """The requested blob does not exist."""


class NotFound(PagewrightError):
    reason = FailureReason.NOT_FOUND


class ApplyInconsistency(PagewrightError):
    """The page + modification update could not be committed as one unit."""

    reason = FailureReason.APPLY_INCONSISTENCY


class PermissionDenied(PagewrightError):
    reason = FailureReason.PERMISSION_DENIED


class LedgerFailure(PagewrightError):
    """A ledger or site database write could not be committed."""

    reason = FailureReason.PERSISTENCE_FAILURE


class ConfigLoadingError(Exception):
    """Raised when pagewright.yaml is missing or malformed."""
