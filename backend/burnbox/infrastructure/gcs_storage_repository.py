"""
Google Cloud Storage Repository Implementation

Concrete implementation of IBlobStorageRepository for Google Cloud Storage.
Clients upload and download directly against GCS through v4 signed URLs;
this process only signs URLs, checks existence and deletes.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound
from google.cloud.storage.retry import DEFAULT_RETRY

from burnbox.domain.errors import TransientStoreError
from burnbox.domain.file_storage.storage_repository import IBlobStorageRepository
from burnbox.domain.file_storage.value_objects import TransferHandle

logger = logging.getLogger(__name__)


class GCSStorageRepository(IBlobStorageRepository):
    """
    Google Cloud Storage implementation of IBlobStorageRepository.

    Thread Safety:
        This implementation is thread-safe. The GCS client handles concurrent
        operations safely.

    Attributes:
        bucket_name: Name of the GCS bucket for blob storage
        client: Google Cloud Storage client instance
        bucket: GCS bucket object
    """

    def __init__(self, bucket_name: str, client: Optional[storage.Client] = None):
        """
        Initialize the GCS storage repository.

        Args:
            bucket_name: Name of the GCS bucket to use for storage
            client: Optional pre-built client (defaults to ambient credentials)

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)

    def _sign(self, key: str, method: str, ttl_seconds: int, **kwargs) -> TransferHandle:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
        try:
            url = self.bucket.blob(key).generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=ttl_seconds),
                method=method,
                **kwargs,
            )
        except GoogleCloudError as e:
            raise TransientStoreError(f"Failed to sign {method} URL for {key}", e) from e
        headers = {}
        if "content_type" in kwargs:
            headers["Content-Type"] = kwargs["content_type"]
        return TransferHandle(url=url, method=method, expires_at=expires_at, headers=headers)

    def issue_upload_handle(self, key: str, content_type: str, ttl_seconds: int) -> TransferHandle:
        return self._sign(key, "PUT", ttl_seconds, content_type=content_type)

    def issue_download_handle(
        self, key: str, file_name: str, ttl_seconds: int, content_type: Optional[str] = None
    ) -> TransferHandle:
        safe_name = file_name.replace('"', "")
        extra = {"response_type": content_type} if content_type else {}
        return self._sign(
            key,
            "GET",
            ttl_seconds,
            response_disposition=f'attachment; filename="{safe_name}"',
            **extra,
        )

    def delete(self, key: str) -> bool:
        """
        Delete a blob from GCS.

        Idempotent: a missing blob is reported as deleted.
        """
        if not key or not key.strip():
            return True
        try:
            self.bucket.blob(key).delete(retry=DEFAULT_RETRY)
            return True
        except NotFound:
            return True
        except GoogleCloudError as e:
            logger.error(f"Failed to delete blob {key} from GCS: {e}")
            return False

    def exists(self, key: str) -> bool:
        if not key or not key.strip():
            return False
        try:
            return self.bucket.blob(key).exists(retry=DEFAULT_RETRY)
        except GoogleCloudError as e:
            raise TransientStoreError(f"Failed to check blob {key}", e) from e
