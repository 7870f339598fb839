"""
File flow orchestrator.

Coordinates one upload end to end:

    RECEIVING -> PERSISTING -> NOTIFYING -> COMPLETED
                     |
                     +-> FAILED

The orchestrator keeps no state of its own between requests; everything
durable goes through the storage backend and every client update goes
through the notification hub. Listing and downloading delegate straight
to storage with no caching.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Awaitable, Callable, Protocol

from loguru import logger
from starlette.concurrency import run_in_threadpool

from app.notifications.hub import NotificationHub
from app.notifications.schemas import FileAvailable
from app.storage.storage_protocol import StorageBackend
from filecast_core.config import settings
from filecast_core.runtime.errors import (
    InvalidFileNameError,
    PayloadTooLargeError,
    ServiceError,
    StorageUnavailableError,
    UploadCancelledError,
)

from .schemas import UploadResult, UploadState


class AsyncReadable(Protocol):
    """Source of upload bytes, e.g. fastapi.UploadFile."""

    async def read(self, size: int = -1) -> bytes: ...


def normalize_file_name(raw_name: str | None) -> str:
    """
    Reduce a client-supplied file name to a flat object name.

    Any directory components (POSIX or Windows style) are dropped.

    Raises:
        InvalidFileNameError: If nothing usable remains.
    """
    if raw_name is None:
        raise InvalidFileNameError(raw_name)
    name = PurePosixPath(raw_name.replace("\\", "/")).name.strip()
    if name in ("", ".", ".."):
        raise InvalidFileNameError(raw_name)
    return name


class FileFlowOrchestrator:
    """
    Runs the upload -> persist -> notify flow and serves listing/downloads.

    Usage:
        orchestrator = FileFlowOrchestrator(storage, hub)
        result = await orchestrator.upload_file(upload.filename, upload)
        names = await orchestrator.list_files()
        content = await orchestrator.download_file("report.pdf")
    """

    def __init__(
        self,
        storage: StorageBackend,
        hub: NotificationHub,
        max_upload_bytes: int | None = None,
        chunk_size: int | None = None,
    ):
        self.storage = storage
        self.hub = hub
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES
        self.chunk_size = chunk_size or settings.UPLOAD_CHUNK_BYTES

    @staticmethod
    def _enter(name: str, state: UploadState) -> UploadState:
        logger.debug(f"Upload '{name}' -> {state.value}")
        return state

    async def receive(self, source: AsyncReadable) -> bytes:
        """
        Read the whole upload into memory, refusing anything over the size bound.

        Raises:
            PayloadTooLargeError: As soon as more than max_upload_bytes arrive.
        """
        buffer = bytearray()
        while True:
            chunk = await source.read(self.chunk_size)
            if not chunk:
                break
            buffer.extend(chunk)
            if len(buffer) > self.max_upload_bytes:
                raise PayloadTooLargeError(self.max_upload_bytes)
        return bytes(buffer)

    async def upload_file(
        self,
        raw_name: str | None,
        source: AsyncReadable,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> UploadResult:
        """
        Receive an upload and hand it to store_and_notify().

        Args:
            raw_name: File name as sent by the client.
            source: Readable upload body.
            is_disconnected: Optional probe for the uploading client having gone away.

        Returns:
            UploadResult: The stored name and size.
        """
        name = normalize_file_name(raw_name)
        self._enter(name, UploadState.RECEIVING)

        try:
            content = await self.receive(source)
        except PayloadTooLargeError:
            self._enter(name, UploadState.FAILED)
            logger.warning(f"Rejected '{name}': larger than {self.max_upload_bytes} bytes")
            raise

        return await self.store_and_notify(name, content, is_disconnected=is_disconnected)

    async def store_and_notify(
        self,
        name: str,
        content: bytes,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> UploadResult:
        """
        Persist content under name, then broadcast that it is available.

        A broadcast problem never fails the upload. A client disconnect is
        only honoured before the store write starts; once written, the file
        stays and the broadcast still fires.

        Raises:
            PayloadTooLargeError: If content is over the size bound.
            UploadCancelledError: If the client disconnected before persisting.
            StorageUnavailableError: If the store write failed.
        """
        if len(content) > self.max_upload_bytes:
            self._enter(name, UploadState.FAILED)
            raise PayloadTooLargeError(self.max_upload_bytes)

        if is_disconnected is not None and await is_disconnected():
            self._enter(name, UploadState.FAILED)
            logger.info(f"Client went away before '{name}' was persisted; skipping write")
            raise UploadCancelledError(name)

        self._enter(name, UploadState.PERSISTING)
        try:
            await run_in_threadpool(self.storage.upload, name, content)
        except ServiceError:
            self._enter(name, UploadState.FAILED)
            raise
        except Exception as e:
            self._enter(name, UploadState.FAILED)
            raise StorageUnavailableError("upload", name, cause=e) from e

        self._enter(name, UploadState.NOTIFYING)
        notified = 0
        try:
            report = await self.hub.broadcast(FileAvailable(name=name))
            notified = report.delivered
        except Exception as e:
            logger.warning(f"Broadcast for '{name}' failed: {type(e).__name__}: {e}")

        state = self._enter(name, UploadState.COMPLETED)
        logger.info(f"Stored '{name}' ({len(content)} bytes), notified {notified} client(s)")
        return UploadResult(name=name, size=len(content), state=state, notified=notified)

    async def list_files(self) -> list[str]:
        """Names currently in storage, re-read on every call."""
        try:
            return await run_in_threadpool(self.storage.list_names)
        except ServiceError:
            raise
        except Exception as e:
            raise StorageUnavailableError("list", cause=e) from e

    async def download_file(self, name: str) -> bytes:
        """
        Fetch the stored bytes for name.

        Raises:
            FileNotFoundInStoreError: If name was never uploaded.
            StorageUnavailableError: On any other storage failure.
        """
        try:
            return await run_in_threadpool(self.storage.fetch, name)
        except ServiceError:
            raise
        except Exception as e:
            raise StorageUnavailableError("fetch", name, cause=e) from e
