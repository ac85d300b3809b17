"""Shared fixtures: a SQLite-backed ledger and site database per test."""

from collections.abc import Callable
from pathlib import Path

import pytest
from sqlalchemy.orm import Session, sessionmaker

from pagewright.ledger import ModificationLedger, SiteRepository, create_session_factory
from pagewright.processing.models import ProcessingResult, ValidationReport


@pytest.fixture
def session_factory(tmp_path: Path) -> sessionmaker[Session]:
    return create_session_factory(f"sqlite:///{tmp_path / 'pagewright.db'}")


@pytest.fixture
def sites(session_factory: sessionmaker[Session]) -> SiteRepository:
    return SiteRepository(session_factory)


@pytest.fixture
def ledger(session_factory: sessionmaker[Session]) -> ModificationLedger:
    return ModificationLedger(session_factory)


def _make_result(
    html: str = "<p>new</p>",
    prompt: str = "make it new",
    original_html: str | None = "<p>old</p>",
    session_id: str | None = "session-1",
) -> ProcessingResult:
    """Build a successful pipeline result without running the pipeline."""
    return ProcessingResult(
        html=html,
        prompt=prompt,
        original_html=original_html,
        size_before=len((original_html or "").encode("utf-8")),
        size_after=len(html.encode("utf-8")),
        validation=ValidationReport(valid=True),
        session_id=session_id,
    )


@pytest.fixture
def make_result() -> Callable[..., ProcessingResult]:
    return _make_result
