# Storage gateway

from .local_storage import LocalStorage
from .storage import MinIOStorage, get_storage_backend
from .storage_protocol import StorageBackend

__all__ = [
    "StorageBackend",
    "MinIOStorage",
    "LocalStorage",
    "get_storage_backend",
]
