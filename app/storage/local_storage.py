"""
Local filesystem storage backend.

This implementation stores files on the local filesystem,
useful for development and testing without MinIO.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from loguru import logger

from filecast_core.runtime.errors import (
    FileNotFoundInStoreError,
    InvalidFileNameError,
    StorageUnavailableError,
)

_TEMP_PREFIX = ".upload-"


class LocalStorage:
    """
    File-system based storage for local development.

    Each bucket is a directory under base_path; each file is stored flat
    inside it under its own name. Writes land in a temporary file that is
    atomically renamed over the target, so readers see either the old or
    the new bytes and concurrent writers resolve last-writer-wins.

    Usage:
        storage = LocalStorage(base_path="/tmp/filecast-storage")
        storage.upload("doc.pdf", content)
        content = storage.fetch("doc.pdf")
    """

    def __init__(self, base_path: str = "/tmp/filecast-storage", bucket: str = "uploads"):
        """
        Initialize local storage.

        Args:
            base_path: Root directory for all buckets.
            bucket: Bucket name (used as subdirectory).
        """
        self.base_path = Path(base_path)
        self.bucket = bucket
        self.bucket_path = self.base_path / bucket
        self.bucket_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalStorage initialized at {self.bucket_path}")

    def _path_for(self, name: str) -> Path:
        if "\x00" in name:
            raise InvalidFileNameError(name)
        try:
            target = (self.bucket_path / name).resolve()
        except (ValueError, OSError) as e:
            raise InvalidFileNameError(name) from e
        if target.parent != self.bucket_path.resolve() or name.startswith(_TEMP_PREFIX):
            raise InvalidFileNameError(name)
        return target

    def upload(self, name: str, content: bytes) -> None:
        """
        Write content to <bucket>/<name>, replacing any previous file.

        Raises:
            StorageUnavailableError: If the filesystem write fails.
        """
        target = self._path_for(name)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=self.bucket_path, prefix=_TEMP_PREFIX, delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageUnavailableError("upload", name, cause=e) from e

        logger.info(f"Uploaded to {self.bucket}/{name}")

    def fetch(self, name: str) -> bytes:
        """
        Read a file from the bucket directory.

        Raises:
            FileNotFoundInStoreError: If the file doesn't exist.
            StorageUnavailableError: If it exists but cannot be read.
        """
        try:
            target = self._path_for(name)
        except InvalidFileNameError as e:
            raise FileNotFoundInStoreError(name, cause=e) from e

        try:
            content = target.read_bytes()
        except FileNotFoundError as e:
            raise FileNotFoundInStoreError(name, cause=e) from e
        except OSError as e:
            raise StorageUnavailableError("fetch", name, cause=e) from e

        logger.info(f"Downloaded {self.bucket}/{name}")
        return content

    def list_names(self) -> list[str]:
        try:
            return [
                entry.name
                for entry in self.bucket_path.iterdir()
                if entry.is_file() and not entry.name.startswith(_TEMP_PREFIX)
            ]
        except OSError as e:
            raise StorageUnavailableError("list", cause=e) from e
