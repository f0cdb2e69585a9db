"""
Blob Storage Repository Interface

Abstract interface for the object store holding burn file contents.
The domain layer never sees bytes: clients move data directly through
time-limited transfer handles, and the service only issues handles,
checks existence and deletes.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .value_objects import TransferHandle


class IBlobStorageRepository(ABC):
    """
    Unified interface for blob storage operations.

    Contract Guarantees:
    - delete() is idempotent: deleting an absent key returns True
    - exists() never raises for unknown keys
    - Keys are relative to the storage root (e.g. 'burns/<burn_id>')

    Implementations raise TransientStoreError when the backing service is
    unavailable.
    """

    @abstractmethod
    def issue_upload_handle(
        self, key: str, content_type: str, ttl_seconds: int
    ) -> TransferHandle:
        """
        Issue a handle a client can use to upload the blob.

        Args:
            key: Storage key
            content_type: MIME type the client must send
            ttl_seconds: Validity of the handle

        Returns:
            TransferHandle for a PUT request
        """
        pass  # pragma: no cover

    @abstractmethod
    def issue_download_handle(
        self, key: str, file_name: str, ttl_seconds: int, content_type: Optional[str] = None
    ) -> TransferHandle:
        """
        Issue a handle a client can use to download the blob.

        Args:
            key: Storage key
            file_name: Name presented to the downloader
            ttl_seconds: Validity of the handle
            content_type: MIME type served with the download, if known

        Returns:
            TransferHandle for a GET request
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if the blob was deleted or did not exist, False on failure
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass  # pragma: no cover
