"""Object storage backends.

Both backends speak plain ``/``-separated keys and raise ``StorageFailure``
(or ``ArtifactNotFound`` for missing keys) instead of backend-specific errors.
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from pagewright.core.errors import ArtifactNotFound, StorageFailure

logger = logging.getLogger(__name__)


class ObjectStorage(ABC):
    """Durable blob storage."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        """Store ``data`` under ``key``, replacing any existing object."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the object's bytes; raise ``ArtifactNotFound`` if missing."""

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def list(self, prefix: str = "") -> list[str]:
        """Keys under ``prefix``, sorted."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete the object. Returns False if the backend refused."""

    @abstractmethod
    def last_modified(self, key: str) -> datetime: ...

    @abstractmethod
    def size(self, key: str) -> int: ...


class LocalObjectStorage(ObjectStorage):
    """Filesystem-backed storage rooted at ``base_path``."""

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        parts = [part for part in key.split("/") if part]
        if not parts or any(part in (".", "..") for part in parts):
            raise StorageFailure(f"Invalid object key: {key!r}")
        return self.base_path.joinpath(*parts)

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Each writer gets its own temp file; the last replace wins.
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp.write(data)
            try:
                os.replace(tmp.name, path)
            except OSError:
                Path(tmp.name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageFailure(f"Failed to write {key}: {e}") from e

    def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ArtifactNotFound(f"Object not found: {key}") from e
        except OSError as e:
            raise StorageFailure(f"Failed to read {key}: {e}") from e

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def list(self, prefix: str = "") -> list[str]:
        if not self.base_path.exists():
            return []
        keys = (
            path.relative_to(self.base_path).as_posix()
            for path in self.base_path.rglob("*")
            if path.is_file() and not path.name.endswith(".tmp")
        )
        return sorted(key for key in keys if key.startswith(prefix))

    def delete(self, key: str) -> bool:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Failed to delete %s: %s", key, e)
            return False
        return True

    def last_modified(self, key: str) -> datetime:
        try:
            return datetime.fromtimestamp(self._path(key).stat().st_mtime, tz=UTC)
        except FileNotFoundError as e:
            raise ArtifactNotFound(f"Object not found: {key}") from e

    def size(self, key: str) -> int:
        try:
            return self._path(key).stat().st_size
        except FileNotFoundError as e:
            raise ArtifactNotFound(f"Object not found: {key}") from e


class S3ObjectStorage(ObjectStorage):
    """S3-compatible storage (AWS S3, MinIO, ...)."""

    def __init__(
        self,
        bucket_name: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.s3_client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            config=Config(region_name=region, signature_version="s3v4", retries={"max_attempts": 3, "mode": "standard"}),
        )

    @staticmethod
    def _is_missing(error: ClientError) -> bool:
        return error.response.get("Error", {}).get("Code") in ("NoSuchKey", "404", "NotFound")

    def _head(self, key: str) -> dict[str, Any]:
        try:
            return self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if self._is_missing(e):
                raise ArtifactNotFound(f"Object not found: {key}") from e
            raise StorageFailure(f"Failed to stat {key}: {e}") from e

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        try:
            self.s3_client.put_object(Bucket=self.bucket_name, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to put object %s: %s", key, e)
            raise StorageFailure(f"Failed to store {key}: {e}") from e

    def get(self, key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if self._is_missing(e):
                raise ArtifactNotFound(f"Object not found: {key}") from e
            logger.error("Failed to get object %s: %s", key, e)
            raise StorageFailure(f"Failed to retrieve {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageFailure(f"Failed to retrieve {key}: {e}") from e

    def exists(self, key: str) -> bool:
        try:
            self._head(key)
        except ArtifactNotFound:
            return False
        return True

    def list(self, prefix: str = "") -> list[str]:
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            keys = [
                obj["Key"]
                for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix)
                for obj in page.get("Contents", [])
            ]
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to list objects under %s: %s", prefix, e)
            raise StorageFailure(f"Failed to list {prefix}: {e}") from e
        return sorted(keys)

    def delete(self, key: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to delete object %s: %s", key, e)
            return False
        return True

    def last_modified(self, key: str) -> datetime:
        return self._head(key)["LastModified"]

    def size(self, key: str) -> int:
        return self._head(key)["ContentLength"]
