"""Tests for the editor service and page authorization."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import Mock

import pytest

from pagewright.ai.connectors.base import AgentConnector, AgentResponse
from pagewright.core import service as service_module
from pagewright.core.authorization import TeamAuthorizer
from pagewright.core.config import ProcessingConfig
from pagewright.core.errors import FailureReason, LedgerFailure, NotFound, PermissionDenied, StorageFailure
from pagewright.core.service import EditorService, EditRequest, slugify
from pagewright.ledger import Applied, ModificationLedger, SitePage, SiteRepository
from pagewright.processing.pipeline import HtmlPipeline
from pagewright.storage import ArtifactStore, LocalObjectStorage


@pytest.fixture
def agent() -> Mock:
    agent = Mock(spec=AgentConnector)
    agent.invoke.return_value = AgentResponse(
        success=True, completion="```html\n<main><h1>Welcome</h1></main>\n```", session_id="session-42"
    )
    return agent


@pytest.fixture
def site_id(sites: SiteRepository) -> int:
    return sites.create_site("acme").id


@pytest.fixture
def page(sites: SiteRepository, site_id: int) -> SitePage:
    return sites.create_page(site_id, "Home", "<main><h1>Hello</h1></main>")


@pytest.fixture
def artifacts(tmp_path: Path, sites: SiteRepository) -> ArtifactStore:
    return ArtifactStore(LocalObjectStorage(tmp_path / "storage"), sites)


@pytest.fixture
def make_service(
    agent: Mock, ledger: ModificationLedger, sites: SiteRepository, artifacts: ArtifactStore
) -> Callable[..., EditorService]:
    def build(**kwargs: object) -> EditorService:
        kwargs.setdefault("artifacts", artifacts)
        return EditorService(HtmlPipeline(agent, ProcessingConfig()), ledger, sites, **kwargs)

    return build


def test_slugify() -> None:
    """Titles become lower-case, dash-separated file stems."""
    assert slugify("Summer Sale: 50% off!") == "summer-sale-50-off"
    assert slugify("  --  ") == "page"


class TestEditing:
    """Test cases for create and modify."""

    def test_create_records_modification(
        self, make_service: Callable[..., EditorService], ledger: ModificationLedger, site_id: int
    ) -> None:
        """A successful create is recorded and returned."""
        outcome = make_service().create(EditRequest(prompt="A welcome page", site_id=site_id, title="Welcome"))

        assert outcome.success is True
        assert outcome.html == "<main><h1>Welcome</h1></main>"
        assert outcome.record.title == "Welcome"
        assert outcome.record.session_id == "session-42"
        assert outcome.storage_path is None
        assert [r.id for r in ledger.history(site_id)] == [outcome.record.id]

    def test_modify_with_storage(
        self,
        make_service: Callable[..., EditorService],
        artifacts: ArtifactStore,
        ledger: ModificationLedger,
        site_id: int,
        page: SitePage,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Saving stores the HTML under a timestamped name and links it to the record."""
        monkeypatch.setattr(service_module.time, "time", lambda: 1_700_000_000.5)

        outcome = make_service().modify(
            EditRequest(
                prompt="Say welcome",
                site_id=site_id,
                title="Home Page",
                html=page.description,
                page_id=page.id,
                save_to_storage=True,
            )
        )

        assert outcome.storage_path == "acme/pages/home-page-1700000000.html"
        assert outcome.record.original_html == page.description
        assert outcome.record.source_page_id == page.id
        assert ledger.get(outcome.record.id).storage_path == outcome.storage_path

        stored = artifacts.retrieve(outcome.storage_path)
        assert stored.html == outcome.html
        assert stored.metadata == {
            "modification_id": outcome.record.id,
            "title": "Home Page",
            "prompt": "Say welcome",
        }

    def test_storage_failure_keeps_record(
        self, make_service: Callable[..., EditorService], ledger: ModificationLedger, site_id: int
    ) -> None:
        """A storage error is logged and the record stays without a path."""
        broken_store = Mock(spec=ArtifactStore)
        broken_store.store.side_effect = StorageFailure("disk full")

        outcome = make_service(artifacts=broken_store).create(
            EditRequest(prompt="page", site_id=site_id, title="T", save_to_storage=True)
        )

        assert outcome.success is True
        assert outcome.storage_path is None
        assert ledger.get(outcome.record.id).storage_path is None

    def test_failure_is_logged_not_recorded(
        self,
        make_service: Callable[..., EditorService],
        agent: Mock,
        ledger: ModificationLedger,
        site_id: int,
    ) -> None:
        """Pipeline failures write prompt history only."""
        agent.invoke.return_value = AgentResponse.failure("model overloaded", error_code="Overloaded")

        outcome = make_service().create(EditRequest(prompt="page", site_id=site_id, title="T"))

        assert outcome.success is False
        assert outcome.failure.reason == FailureReason.AGENT_FAILURE
        assert outcome.record is None
        assert ledger.history(site_id) == []
        assert len(ledger.prompt_history(success=False)) == 1

    def test_unknown_site_is_rejected_before_the_agent_runs(
        self, make_service: Callable[..., EditorService], agent: Mock, ledger: ModificationLedger
    ) -> None:
        """Nothing is invoked or logged for a site that does not exist."""
        with pytest.raises(NotFound):
            make_service().create(EditRequest(prompt="p", site_id=999, title="t"))

        agent.invoke.assert_not_called()
        assert ledger.prompt_history() == []

    def test_ledger_failure_still_logs_the_attempt(
        self,
        make_service: Callable[..., EditorService],
        agent: Mock,
        ledger: ModificationLedger,
        site_id: int,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """When the success cannot be recorded, the invocation is logged as failed and the error propagates."""

        def broken_record(*args: object) -> None:
            raise LedgerFailure("database is locked")

        monkeypatch.setattr(ledger, "record", broken_record)

        with pytest.raises(LedgerFailure):
            make_service().create(EditRequest(prompt="page", site_id=site_id, title="T"))

        assert agent.invoke.call_count == 1
        [entry] = ledger.prompt_history()
        assert entry.success is False
        assert entry.session_id == "session-42"
        assert entry.meta["reason"] == FailureReason.PERSISTENCE_FAILURE
        assert entry.error_message == "database is locked"

    def test_modify_requires_html(self, make_service: Callable[..., EditorService], site_id: int) -> None:
        with pytest.raises(ValueError):
            make_service().modify(EditRequest(prompt="p", site_id=site_id, title="T"))


class TestApply:
    """Test cases for authorized publishing."""

    @pytest.fixture
    def service(self, make_service: Callable[..., EditorService], sites: SiteRepository) -> EditorService:
        return make_service(authorizer=TeamAuthorizer(sites))

    @pytest.fixture
    def record_id(self, service: EditorService, site_id: int) -> int:
        return service.create(EditRequest(prompt="page", site_id=site_id, title="T")).record.id

    def test_member_may_apply(
        self, service: EditorService, sites: SiteRepository, site_id: int, page: SitePage, record_id: int
    ) -> None:
        """Site members can publish to the site's pages."""
        user = sites.create_user("editor")
        sites.add_member(site_id, user.id)

        applied = service.apply(record_id, page.id, user.id)

        assert applied.record.status == Applied(page.id)
        assert sites.get_page(page.id).description == "<main><h1>Welcome</h1></main>"

    def test_super_admin_may_apply(
        self, service: EditorService, sites: SiteRepository, page: SitePage, record_id: int
    ) -> None:
        """Super admins need no membership."""
        admin = sites.create_user("root", is_super_admin=True)

        assert service.apply(record_id, page.id, admin.id).page.id == page.id

    def test_outsider_is_denied(
        self, service: EditorService, sites: SiteRepository, page: SitePage, record_id: int
    ) -> None:
        """Non-members and anonymous callers cannot publish, and nothing changes."""
        outsider = sites.create_user("outsider")

        with pytest.raises(PermissionDenied):
            service.apply(record_id, page.id, outsider.id)
        with pytest.raises(PermissionDenied):
            service.apply(record_id, page.id, None)

        assert sites.get_page(page.id).description == "<main><h1>Hello</h1></main>"
        assert service.get(record_id).is_published is False

    def test_apply_can_store_the_page(
        self,
        service: EditorService,
        sites: SiteRepository,
        artifacts: ArtifactStore,
        page: SitePage,
        record_id: int,
    ) -> None:
        """Saving on apply writes the published HTML under the page's canonical name."""
        admin = sites.create_user("root", is_super_admin=True)

        applied = service.apply(record_id, page.id, admin.id, save_to_storage=True)

        assert applied.storage_path == f"acme/pages/page_{page.id}.html"
        stored = artifacts.retrieve(applied.storage_path)
        assert stored.html == "<main><h1>Welcome</h1></main>"
        assert stored.metadata == {"modification_id": record_id, "title": "Home"}

    def test_apply_storage_failure_keeps_the_apply(
        self,
        make_service: Callable[..., EditorService],
        sites: SiteRepository,
        page: SitePage,
        record_id: int,
    ) -> None:
        """A storage error after apply is logged; the page is still published."""
        broken_store = Mock(spec=ArtifactStore)
        broken_store.store_page.side_effect = StorageFailure("disk full")

        applied = make_service(artifacts=broken_store).apply(record_id, page.id, save_to_storage=True)

        assert applied.storage_path is None
        assert applied.record.status == Applied(page.id)
        assert sites.get_page(page.id).description == "<main><h1>Welcome</h1></main>"

    def test_unknown_page(self, service: EditorService, record_id: int) -> None:
        with pytest.raises(NotFound):
            service.apply(record_id, 404, 1)

    def test_history_passthrough(self, service: EditorService, site_id: int, record_id: int) -> None:
        assert [r.id for r in service.history(site_id)] == [record_id]
