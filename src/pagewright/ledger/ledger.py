"""Persistence of pipeline outcomes and the apply transition."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from pagewright.core.errors import ApplyInconsistency, LedgerFailure, NotFound

from .models import ModificationRecord, PromptHistoryEntry, SitePage

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

    from pagewright.processing.models import ProcessingFailure, ProcessingResult

logger = logging.getLogger(__name__)


class ModificationContext(BaseModel):
    """Caller-supplied facts about a pipeline invocation."""

    site_id: int
    title: str
    author_id: int | None = None
    page_id: int | None = None


@dataclass(frozen=True)
class AppliedModification:
    page: SitePage
    record: ModificationRecord
    storage_path: str | None = None


class ModificationLedger:
    """Immutable modification records plus an append-only prompt log.

    Every agent invocation leaves exactly one prompt history entry. Records
    change after creation only to gain a storage path or through ``apply``.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def record(self, result: ProcessingResult, context: ModificationContext) -> ModificationRecord:
        """Persist a successful result together with its prompt history entry."""
        try:
            with self.session_factory.begin() as session:
                record = ModificationRecord(
                    user_id=context.author_id,
                    site_id=context.site_id,
                    source_page_id=context.page_id,
                    title=context.title,
                    prompt=result.prompt,
                    original_html=result.original_html,
                    modified_html=result.html,
                    session_id=result.session_id,
                    meta=result.metadata,
                )
                session.add(record)
                session.flush()

                session.add(
                    PromptHistoryEntry(
                        user_id=context.author_id,
                        modification_id=record.id,
                        prompt=result.prompt,
                        response=result.html,
                        session_id=result.session_id,
                        meta=result.metadata,
                        success=True,
                    )
                )
        except SQLAlchemyError as e:
            logger.error("Recording a modification for site %d failed: %s", context.site_id, e)
            raise LedgerFailure(f"Could not record the modification for site {context.site_id}: {e}") from e

        logger.info("Recorded modification %d for site %d", record.id, record.site_id)
        return record

    def record_failure(self, failure: ProcessingFailure, context: ModificationContext) -> PromptHistoryEntry:
        """Log a failed attempt. No modification record is created."""
        try:
            with self.session_factory.begin() as session:
                entry = PromptHistoryEntry(
                    user_id=context.author_id,
                    modification_id=None,
                    prompt=failure.prompt,
                    response=None,
                    session_id=failure.session_id,
                    meta={"reason": str(failure.reason), "error_code": failure.error_code, "site_id": context.site_id},
                    success=False,
                    error_message=failure.message[:1024],
                )
                session.add(entry)
        except SQLAlchemyError as e:
            logger.error("Logging a failed attempt for site %d failed: %s", context.site_id, e)
            raise LedgerFailure(f"Could not log the failed attempt for site {context.site_id}: {e}") from e

        logger.info("Recorded failed attempt (%s) for site %d", failure.reason, context.site_id)
        return entry

    def attach_storage_path(self, record_id: int, path: str) -> ModificationRecord:
        with self.session_factory.begin() as session:
            record = session.get(ModificationRecord, record_id)
            if record is None:
                raise NotFound(f"Modification {record_id} not found")
            record.storage_path = path
        return record

    def apply(self, record_id: int, page_id: int) -> AppliedModification:
        """Publish a modification's HTML to a page.

        The page content and the record's applied state are written in one
        transaction; on any failure neither changes.
        """
        try:
            with self.session_factory.begin() as session:
                record = session.get(ModificationRecord, record_id, with_for_update=True)
                if record is None:
                    raise NotFound(f"Modification {record_id} not found")

                page = session.get(SitePage, page_id, with_for_update=True)
                if page is None:
                    raise NotFound(f"Page {page_id} not found")
                if page.site_id != record.site_id:
                    raise NotFound(f"Page {page_id} does not belong to site {record.site_id}")

                page.description = record.modified_html
                record.mark_applied(page.id)
                session.flush()
        except SQLAlchemyError as e:
            logger.error("Applying modification %d to page %d failed: %s", record_id, page_id, e)
            raise ApplyInconsistency(f"Could not apply modification {record_id} to page {page_id}: {e}") from e

        logger.info("Applied modification %d to page %d", record_id, page_id)
        return AppliedModification(page=page, record=record)

    def get(self, record_id: int) -> ModificationRecord:
        """Load a record with its prompt history; the result is detached from any session."""
        with self.session_factory() as session:
            record = session.get(ModificationRecord, record_id, options=[selectinload(ModificationRecord.history)])
        if record is None:
            raise NotFound(f"Modification {record_id} not found")
        return record

    def history(self, site_id: int, page_id: int | None = None, limit: int = 20) -> list[ModificationRecord]:
        """Modifications for a site (optionally one page), newest first."""
        query = select(ModificationRecord).where(ModificationRecord.site_id == site_id)
        if page_id is not None:
            query = query.where(
                or_(ModificationRecord.page_id == page_id, ModificationRecord.source_page_id == page_id)
            )
        query = query.order_by(ModificationRecord.created_at.desc(), ModificationRecord.id.desc()).limit(limit)

        with self.session_factory() as session:
            return list(session.scalars(query))

    def prompt_history(
        self,
        session_id: str | None = None,
        success: bool | None = None,
        limit: int = 50,
    ) -> list[PromptHistoryEntry]:
        query = select(PromptHistoryEntry)
        if session_id is not None:
            query = query.where(PromptHistoryEntry.session_id == session_id)
        if success is not None:
            query = query.where(PromptHistoryEntry.success == success)
        query = query.order_by(PromptHistoryEntry.created_at.desc(), PromptHistoryEntry.id.desc()).limit(limit)

        with self.session_factory() as session:
            return list(session.scalars(query))
