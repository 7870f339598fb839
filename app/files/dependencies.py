"""
FastAPI dependencies for the file routes.

Storage is built lazily on first request so importing the app has no
side effects; tests swap these out via app.dependency_overrides.
"""

from fastapi import Depends

from app.notifications.hub import NotificationHub, get_notification_hub
from app.storage.storage import get_storage_backend
from app.storage.storage_protocol import StorageBackend

from .orchestrator import FileFlowOrchestrator

_storage_service: StorageBackend | None = None


def get_storage_service() -> StorageBackend:
    """Lazily construct storage backend to avoid side effects at import."""
    global _storage_service
    if _storage_service is None:
        _storage_service = get_storage_backend()
    return _storage_service


def get_orchestrator(
    storage: StorageBackend = Depends(get_storage_service),
    hub: NotificationHub = Depends(get_notification_hub),
) -> FileFlowOrchestrator:
    return FileFlowOrchestrator(storage=storage, hub=hub)
