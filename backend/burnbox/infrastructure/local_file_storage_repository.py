"""
Local File Storage Repository Implementation

Concrete implementation of IBlobStorageRepository for local development.
Blobs live under a base directory and transfer handles are HMAC-signed
URLs pointing back at the API's blob endpoint.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional

from burnbox.domain.file_storage.signed_url_service import SignedUrlService
from burnbox.domain.file_storage.storage_repository import IBlobStorageRepository
from burnbox.domain.file_storage.value_objects import TransferHandle

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class LocalFileStorageRepository(IBlobStorageRepository):
    """
    Local filesystem implementation of IBlobStorageRepository.

    Attributes:
        base_path: Base directory for blob storage
        signer: SignedUrlService issuing and validating transfer URLs
    """

    def __init__(self, base_path: str = "/tmp/burnbox", signer: Optional[SignedUrlService] = None):
        """
        Initialize the local file storage repository.

        Args:
            base_path: Base directory for blob storage (default: /tmp/burnbox)
            signer: Signed URL service (defaults to one configured from env)
        """
        self.base_path = Path(base_path)
        self.signer = signer or SignedUrlService()
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create storage directory: {self.base_path}"
            ) from e

    def _resolve(self, key: str) -> Optional[Path]:
        """Map a key to a path inside base_path, or None if it escapes it."""
        if not key or not key.strip():
            return None
        base = self.base_path.resolve()
        full_path = (base / key).resolve()
        if base != full_path and base not in full_path.parents:
            return None
        return full_path

    def issue_upload_handle(self, key: str, content_type: str, ttl_seconds: int) -> TransferHandle:
        return self.signer.generate_signed_url(
            key, "PUT", ttl_seconds, headers={"Content-Type": content_type}
        )

    def issue_download_handle(
        self, key: str, file_name: str, ttl_seconds: int, content_type: Optional[str] = None
    ) -> TransferHandle:
        # The blob endpoint reads the served name and type back from the signed query
        return self.signer.generate_signed_url(
            key, "GET", ttl_seconds, params={"filename": file_name, "type": content_type}
        )

    def delete(self, key: str) -> bool:
        """
        Delete a blob from disk.

        Idempotent: a missing file is reported as deleted.
        """
        full_path = self._resolve(key)
        if full_path is None:
            return True
        try:
            full_path.unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.error(f"Failed to delete blob {key}: {e}")
            return False

    def exists(self, key: str) -> bool:
        full_path = self._resolve(key)
        return full_path is not None and full_path.is_file()

    # Used by the blob endpoint that stands in for a real object store

    def save(self, key: str, content: BinaryIO) -> int:
        """
        Write a blob from a stream.

        Returns:
            Number of bytes written

        Raises:
            ValueError: If the key is empty or escapes the base directory
        """
        full_path = self._resolve(key)
        if full_path is None:
            raise ValueError(f"Invalid storage key: {key!r}")

        full_path.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        with open(full_path, "wb") as f:
            while True:
                chunk = content.read(CHUNK_SIZE)
                if not chunk:
                    break
                f.write(chunk)
                written += len(chunk)
        return written

    def open(self, key: str) -> Optional[BinaryIO]:
        """
        Open a blob for reading.

        Returns:
            Binary stream the caller must close, or None if missing
        """
        full_path = self._resolve(key)
        if full_path is None or not full_path.is_file():
            return None
        return open(full_path, "rb")
