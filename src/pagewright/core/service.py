"""Editor service: runs the pipeline and persists what it produces."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from pydantic import BaseModel

from pagewright.core.errors import LedgerFailure, NotFound, PermissionDenied, StorageFailure
from pagewright.ledger.ledger import ModificationContext
from pagewright.processing.models import ProcessingFailure, ProcessingOutcome

if TYPE_CHECKING:
    from pagewright.core.authorization import Authorizer
    from pagewright.ledger.ledger import AppliedModification, ModificationLedger
    from pagewright.ledger.models import ModificationRecord
    from pagewright.ledger.sites import SiteRepository
    from pagewright.processing.pipeline import HtmlPipeline
    from pagewright.storage.artifacts import ArtifactStore

logger = logging.getLogger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    return _NON_SLUG_CHARS.sub("-", text.lower()).strip("-") or "page"


class EditRequest(BaseModel):
    """One create or modify request, as a CLI or HTTP layer would receive it."""

    prompt: str
    site_id: int
    title: str
    html: str | None = None
    author_id: int | None = None
    page_id: int | None = None
    session_id: str | None = None
    save_to_storage: bool = False

    @property
    def context(self) -> ModificationContext:
        return ModificationContext(
            site_id=self.site_id, title=self.title, author_id=self.author_id, page_id=self.page_id
        )


@dataclass(frozen=True)
class EditOutcome:
    success: bool
    html: str | None = None
    record: ModificationRecord | None = None
    failure: ProcessingFailure | None = None
    storage_path: str | None = None


class EditorService:
    """The pipeline's caller: records every attempt and optionally stores the result."""

    def __init__(
        self,
        pipeline: HtmlPipeline,
        ledger: ModificationLedger,
        sites: SiteRepository,
        artifacts: ArtifactStore | None = None,
        authorizer: Authorizer | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.ledger = ledger
        self.sites = sites
        self.artifacts = artifacts
        self.authorizer = authorizer

    def modify(self, request: EditRequest) -> EditOutcome:
        if request.html is None:
            raise ValueError("modify requires the existing HTML")
        self._require_site(request.site_id)
        outcome = self.pipeline.modify(request.html, request.prompt, request.session_id)
        return self._persist(outcome, request)

    def create(self, request: EditRequest) -> EditOutcome:
        self._require_site(request.site_id)
        outcome = self.pipeline.create(request.prompt, request.session_id)
        return self._persist(outcome, request)

    def _require_site(self, site_id: int) -> None:
        # Must run before the agent is invoked.
        if self.sites.get_site_name(site_id) is None:
            raise NotFound(f"Site {site_id} not found")

    def _persist(self, outcome: ProcessingOutcome, request: EditRequest) -> EditOutcome:
        context = request.context

        if isinstance(outcome, ProcessingFailure):
            self.ledger.record_failure(outcome, context)
            return EditOutcome(success=False, failure=outcome)

        try:
            record = self.ledger.record(outcome, context)
        except LedgerFailure as e:
            # The agent has already run; its attempt still gets a history entry.
            self.ledger.record_failure(
                ProcessingFailure(
                    reason=e.reason, message=e.message, prompt=outcome.prompt, session_id=outcome.session_id
                ),
                context,
            )
            raise

        if request.save_to_storage and self.artifacts is not None:
            filename = f"{slugify(request.title)}-{int(time.time())}.html"
            try:
                stored = self.artifacts.store(
                    outcome.html,
                    filename,
                    request.site_id,
                    {"modification_id": record.id, "title": request.title, "prompt": request.prompt},
                )
            except StorageFailure as e:
                logger.error("Storing modification %d failed: %s", record.id, e)
            else:
                record = self.ledger.attach_storage_path(record.id, stored.path)

        return EditOutcome(success=True, html=outcome.html, record=record, storage_path=record.storage_path)

    def apply(
        self,
        record_id: int,
        page_id: int,
        actor_id: int | None = None,
        save_to_storage: bool = False,
    ) -> AppliedModification:
        """Publish a modification to a page, after checking the actor may edit it.

        With ``save_to_storage`` the published HTML is also written under the
        page's canonical artifact name. A storage failure is logged; the apply
        itself has already been committed.
        """
        if self.authorizer is not None:
            page = self.sites.get_page(page_id)
            if page is None:
                raise NotFound(f"Page {page_id} not found")
            if not self.authorizer.can_modify(actor_id, page):
                raise PermissionDenied("You do not have permission to modify this page.")

        applied = self.ledger.apply(record_id, page_id)

        if save_to_storage and self.artifacts is not None:
            try:
                stored = self.artifacts.store_page(
                    applied.record.modified_html,
                    applied.page.site_id,
                    applied.page.id,
                    {"modification_id": applied.record.id, "title": applied.page.title},
                )
            except StorageFailure as e:
                logger.error("Storing page %d after apply failed: %s", page_id, e)
            else:
                applied = replace(applied, storage_path=stored.path)

        return applied

    def get(self, record_id: int) -> ModificationRecord:
        return self.ledger.get(record_id)

    def history(self, site_id: int, page_id: int | None = None, limit: int = 20) -> list[ModificationRecord]:
        return self.ledger.history(site_id, page_id, limit)
