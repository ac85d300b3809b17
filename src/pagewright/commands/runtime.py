"""Wiring of config into the services the commands use."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import typer
from rich.console import Console
from rich.markup import escape

from pagewright.ai.connectors import connector_from_config
from pagewright.core.authorization import TeamAuthorizer
from pagewright.core.config import PagewrightConfig, StorageConfig
from pagewright.core.errors import ConfigLoadingError, PagewrightError
from pagewright.core.service import EditorService
from pagewright.ledger import ModificationLedger, SiteRepository, create_session_factory
from pagewright.processing.pipeline import HtmlPipeline
from pagewright.storage import ArtifactStore, LocalObjectStorage, ObjectStorage, S3ObjectStorage

console = Console()


def build_storage(config: StorageConfig) -> ObjectStorage:
    if config.backend == "s3":
        if not config.bucket:
            raise ConfigLoadingError("storage.bucket must be set when storage.backend is s3")
        return S3ObjectStorage(config.bucket, region=config.region, endpoint_url=config.endpoint_url)
    return LocalObjectStorage(config.root)


@dataclass
class Runtime:
    config: PagewrightConfig
    sites: SiteRepository
    ledger: ModificationLedger
    artifacts: ArtifactStore

    @classmethod
    def from_config(cls, config: PagewrightConfig) -> Runtime:
        session_factory = create_session_factory(config.database.url, echo=config.database.echo)
        sites = SiteRepository(session_factory)
        return cls(
            config=config,
            sites=sites,
            ledger=ModificationLedger(session_factory),
            artifacts=ArtifactStore(build_storage(config.storage), sites, public_url=config.storage.public_url),
        )

    def pipeline(self) -> HtmlPipeline:
        agent = connector_from_config(self.config.agent)
        return HtmlPipeline(agent, self.config.processing, self.config.prompts)

    def service(self) -> EditorService:
        return EditorService(
            self.pipeline(),
            self.ledger,
            self.sites,
            artifacts=self.artifacts,
            authorizer=TeamAuthorizer(self.sites),
        )


def load_runtime() -> Runtime:
    return Runtime.from_config(PagewrightConfig.load_config())


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn pagewright errors into a red message and exit code 1."""
    try:
        yield
    except ConfigLoadingError as e:
        console.print(f"[red]❌ Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except PagewrightError as e:
        console.print(f"[red]❌ {escape(e.reason.value)}:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
