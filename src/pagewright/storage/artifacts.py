"""Site-scoped HTML artifacts with optional JSON metadata sidecars.

Layout::

    {site_name}/pages/{name}.html       # content
    {site_name}/pages/{name}.meta.json  # optional metadata

Storing overwrites. Versioning lives in the modification ledger, not in
blob paths.
"""

from __future__ import annotations

import json
import logging
import posixpath
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, Field

from pagewright.core.errors import ArtifactNotFound, StorageFailure

if TYPE_CHECKING:
    from pagewright.storage.backends import ObjectStorage

logger = logging.getLogger(__name__)

HTML_SUFFIX = ".html"
METADATA_SUFFIX = ".meta.json"
PAGES_DIR = "pages"


class SiteDirectory(Protocol):
    def get_site_name(self, site_id: int) -> str | None: ...


@dataclass(frozen=True)
class ArtifactLocation:
    """Where an HTML blob and its metadata sidecar live."""

    path: str
    metadata_path: str

    @classmethod
    def for_name(cls, site_name: str, logical_name: str) -> ArtifactLocation:
        filename = normalize_filename(logical_name)
        return cls.from_path(posixpath.join(site_name, PAGES_DIR, filename))

    @classmethod
    def from_path(cls, path: str) -> ArtifactLocation:
        directory, filename = posixpath.split(path)
        stem = filename[: -len(HTML_SUFFIX)] if filename.endswith(HTML_SUFFIX) else posixpath.splitext(filename)[0]
        return cls(path=path, metadata_path=posixpath.join(directory, stem + METADATA_SUFFIX))


def normalize_filename(logical_name: str) -> str:
    """Ensure the name ends with ``.html`` exactly once."""
    name = logical_name.strip().strip("/")
    if not name or ".." in name.split("/"):
        raise StorageFailure(f"Invalid artifact name: {logical_name!r}")
    return name if name.endswith(HTML_SUFFIX) else name + HTML_SUFFIX


class StoredArtifact(BaseModel):
    path: str
    size: int
    url: str | None = None


class ArtifactEntry(BaseModel):
    path: str
    filename: str
    size: int
    last_modified: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
    url: str | None = None


class RetrievedArtifact(BaseModel):
    path: str
    html: str
    size: int
    last_modified: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
    url: str | None = None


class ArtifactStore:
    """Stores generated HTML per site in an object storage backend."""

    def __init__(self, storage: ObjectStorage, sites: SiteDirectory, public_url: str | None = None) -> None:
        self.storage = storage
        self.sites = sites
        self.public_url = public_url.rstrip("/") if public_url else None

    def url_for(self, path: str) -> str | None:
        return f"{self.public_url}/{path}" if self.public_url else None

    def _site_name(self, site_id: int) -> str:
        site_name = self.sites.get_site_name(site_id)
        if not site_name:
            raise StorageFailure(f"Site not found: {site_id}")
        return site_name

    def _read_metadata(self, location: ArtifactLocation) -> dict[str, Any]:
        """Missing sidecars mean no metadata; unreadable ones are logged and ignored."""
        if not self.storage.exists(location.metadata_path):
            return {}
        try:
            metadata = json.loads(self.storage.get(location.metadata_path).decode("utf-8"))
        except ArtifactNotFound:
            return {}
        except (ValueError, StorageFailure) as e:
            logger.warning("Ignoring unreadable metadata sidecar %s: %s", location.metadata_path, e)
            return {}
        return metadata if isinstance(metadata, dict) else {}

    def store(
        self,
        html: str,
        logical_name: str,
        site_id: int,
        metadata: dict[str, Any] | None = None,
    ) -> StoredArtifact:
        """Store HTML for a site, overwriting any existing artifact of the same name."""
        location = ArtifactLocation.for_name(self._site_name(site_id), logical_name)
        data = html.encode("utf-8")

        self.storage.put(location.path, data, content_type="text/html; charset=utf-8")

        if metadata:
            try:
                self.storage.put(
                    location.metadata_path,
                    json.dumps(metadata, indent=4, default=str).encode("utf-8"),
                    content_type="application/json",
                )
            except StorageFailure:
                logger.warning("Stored %s but its metadata sidecar could not be written", location.path)
                raise
        elif self.storage.exists(location.metadata_path):
            self.storage.delete(location.metadata_path)

        logger.info("Stored %s (%d bytes)", location.path, len(data))
        return StoredArtifact(path=location.path, size=len(data), url=self.url_for(location.path))

    def store_page(
        self,
        html: str,
        site_id: int,
        page_id: int,
        metadata: dict[str, Any] | None = None,
    ) -> StoredArtifact:
        """Store HTML under the canonical name for a site page."""
        return self.store(html, f"page_{page_id}", site_id, metadata)

    def retrieve(self, path: str) -> RetrievedArtifact:
        location = ArtifactLocation.from_path(path)
        html = self.storage.get(location.path).decode("utf-8")
        return RetrievedArtifact(
            path=location.path,
            html=html,
            size=len(html.encode("utf-8")),
            last_modified=self.storage.last_modified(location.path),
            metadata=self._read_metadata(location),
            url=self.url_for(location.path),
        )

    def list(self, site_id: int) -> list[ArtifactEntry]:
        """List all HTML artifacts for a site."""
        prefix = posixpath.join(self._site_name(site_id), PAGES_DIR) + "/"
        entries = []
        for path in self.storage.list(prefix):
            if not path.endswith(HTML_SUFFIX):
                continue
            location = ArtifactLocation.from_path(path)
            entries.append(
                ArtifactEntry(
                    path=path,
                    filename=posixpath.basename(path),
                    size=self.storage.size(path),
                    last_modified=self.storage.last_modified(path),
                    metadata=self._read_metadata(location),
                    url=self.url_for(path),
                )
            )
        return entries

    def delete(self, path: str) -> None:
        """Delete an artifact and then its sidecar.

        A sidecar that survives the primary blob is logged, not raised; the next
        store or delete of the same name cleans it up.
        """
        location = ArtifactLocation.from_path(path)
        if not self.storage.exists(location.path):
            raise ArtifactNotFound(f"HTML file not found: {path}")

        if not self.storage.delete(location.path):
            raise StorageFailure(f"Failed to delete HTML file: {path}")

        try:
            if self.storage.exists(location.metadata_path) and not self.storage.delete(location.metadata_path):
                logger.warning("Deleted %s but left its metadata sidecar behind", location.path)
        except StorageFailure as e:
            logger.warning("Deleted %s but could not remove its metadata sidecar: %s", location.path, e)
