"""Object storage backends and the site artifact store."""

from .artifacts import ArtifactEntry, ArtifactLocation, ArtifactStore, RetrievedArtifact, StoredArtifact
from .backends import LocalObjectStorage, ObjectStorage, S3ObjectStorage

__all__ = [
    "ArtifactEntry",
    "ArtifactLocation",
    "ArtifactStore",
    "LocalObjectStorage",
    "ObjectStorage",
    "RetrievedArtifact",
    "S3ObjectStorage",
    "StoredArtifact",
]
