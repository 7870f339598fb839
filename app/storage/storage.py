"""
Storage backends for uploaded files.

This module provides:
- MinIOStorage: Production storage using MinIO object storage
- get_storage_backend: Factory function to get the appropriate backend

The storage backend is selected based on the USE_LOCAL_STORAGE setting.
"""

from __future__ import annotations

import io

from loguru import logger
from minio import Minio
from minio.error import S3Error

from filecast_core.config import settings
from filecast_core.infrastructure.minio import get_minio_client
from filecast_core.runtime.errors import FileNotFoundInStoreError, StorageUnavailableError

from .storage_protocol import StorageBackend

# S3 error codes that mean "no such object" rather than a store failure
_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchObject"}


class MinIOStorage:
    """
    MinIO-based storage for production deployments.

    All files live flat in one bucket, keyed by file name. Uploading an
    existing name overwrites it. Implements the StorageBackend protocol.

    Usage:
        storage = MinIOStorage()
        storage.upload("report.pdf", content)
        content = storage.fetch("report.pdf")
    """

    def __init__(self, client: Minio | None = None, bucket: str | None = None):
        """
        Initialize the MinIO storage service.

        Args:
            client: MinIO client (defaults to the shared connector instance).
            bucket: Bucket name (defaults to settings.MINIO_BUCKET).
        """
        self._client = client or get_minio_client()
        self.bucket = bucket or settings.MINIO_BUCKET

        self.ensure_bucket_exists()

    def ensure_bucket_exists(self) -> None:
        """Create bucket if it doesn't exist."""
        try:
            if not self._client.bucket_exists(self.bucket):
                self._client.make_bucket(self.bucket)
                logger.info(f"Created MinIO bucket '{self.bucket}'")
        except Exception as e:
            logger.warning(f"Could not ensure bucket '{self.bucket}' exists: {e}")

    def upload(self, name: str, content: bytes) -> None:
        """
        Upload content to MinIO under name.

        Raises:
            StorageUnavailableError: If MinIO is unreachable or rejects the write.
        """
        logger.info(f"Uploading {len(content)} bytes to {self.bucket}/{name}")

        try:
            self._client.put_object(
                bucket_name=self.bucket,
                object_name=name,
                data=io.BytesIO(content),
                length=len(content),
                content_type="application/octet-stream",
            )
        except Exception as e:
            logger.error(f"Upload of {self.bucket}/{name} failed: {type(e).__name__}: {e}")
            raise StorageUnavailableError("upload", name, cause=e) from e

        logger.info(f"Uploaded {self.bucket}/{name}")

    def fetch(self, name: str) -> bytes:
        """
        Download an object from MinIO.

        Raises:
            FileNotFoundInStoreError: If no object has that name.
            StorageUnavailableError: On any other MinIO failure.
        """
        logger.info(f"Downloading {self.bucket}/{name}")

        try:
            response = self._client.get_object(self.bucket, name)
        except S3Error as e:
            if e.code in _NOT_FOUND_CODES:
                raise FileNotFoundInStoreError(name, cause=e) from e
            raise StorageUnavailableError("fetch", name, cause=e) from e
        except Exception as e:
            raise StorageUnavailableError("fetch", name, cause=e) from e

        try:
            content = response.read()
        except Exception as e:
            raise StorageUnavailableError("fetch", name, cause=e) from e
        finally:
            response.close()
            response.release_conn()

        return content

    def list_names(self) -> list[str]:
        """
        List all object names in the bucket.

        Raises:
            StorageUnavailableError: If the listing cannot be read.
        """
        try:
            return [
                obj.object_name
                for obj in self._client.list_objects(self.bucket, recursive=True)
                if not obj.is_dir
            ]
        except Exception as e:
            logger.error(f"Listing bucket '{self.bucket}' failed: {type(e).__name__}: {e}")
            raise StorageUnavailableError("list", cause=e) from e


def get_storage_backend() -> StorageBackend:
    """
    Factory function to get the appropriate storage backend.

    Uses the USE_LOCAL_STORAGE setting to decide. Defaults to MinIO.

    Returns:
        StorageBackend: The configured storage backend instance.
    """
    if settings.USE_LOCAL_STORAGE:
        from .local_storage import LocalStorage

        logger.info("Using LocalStorage backend")
        return LocalStorage(base_path=settings.LOCAL_STORAGE_PATH, bucket=settings.MINIO_BUCKET)
    else:
        logger.info("Using MinIOStorage backend")
        return MinIOStorage()
