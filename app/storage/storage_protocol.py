"""
Storage backend protocol for uploaded files.

Defines the interface the file flow depends on so that MinIO,
the local filesystem, or a test double can be used interchangeably.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """
    Storage gateway over a single bucket.

    Implementations raise StorageUnavailableError when the store cannot
    be reached or refuses the operation, and FileNotFoundInStoreError
    from fetch() when the name is absent.
    """

    bucket: str

    def upload(self, name: str, content: bytes) -> None:
        """
        Store content under name, replacing any existing object.

        Args:
            name: Object name inside the bucket.
            content: The file content as bytes.
        """
        ...

    def fetch(self, name: str) -> bytes:
        """
        Return the exact bytes last stored under name.

        Args:
            name: Object name inside the bucket.

        Returns:
            bytes: The file content.
        """
        ...

    def list_names(self) -> list[str]:
        """
        Return every object name currently in the bucket, in no particular order.
        """
        ...
