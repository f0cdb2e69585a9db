"""
Storage Factory

Factory for creating the blob storage implementation based on environment.

Selection Logic:
- If GCS_BUCKET_NAME is configured, attempt to use GCS storage
- Otherwise, fall back to local filesystem storage
"""

import logging
import os
from typing import Optional

from burnbox.domain.file_storage.signed_url_service import SignedUrlService
from burnbox.domain.file_storage.storage_repository import IBlobStorageRepository
from burnbox.infrastructure.local_file_storage_repository import LocalFileStorageRepository

logger = logging.getLogger(__name__)


class StorageFactory:
    """Factory for creating blob storage repository implementations."""

    @staticmethod
    def create_storage(signer: Optional[SignedUrlService] = None) -> IBlobStorageRepository:
        """
        Create storage repository based on environment configuration.

        Args:
            signer: Signed URL service for the local backend

        Returns:
            IBlobStorageRepository implementation (either local or GCS)

        Environment Variables:
            GCS_BUCKET_NAME: If set, enables GCS storage
            BLOB_DIR: Base directory for local storage (default: /tmp/burnbox)
        """
        gcs_bucket_name = os.getenv("GCS_BUCKET_NAME")

        if gcs_bucket_name:
            return StorageFactory._create_gcs_storage(gcs_bucket_name, signer)
        return StorageFactory._create_local_storage(signer)

    @staticmethod
    def _create_local_storage(signer: Optional[SignedUrlService] = None) -> IBlobStorageRepository:
        blob_dir = os.getenv("BLOB_DIR", "/tmp/burnbox")
        try:
            storage = LocalFileStorageRepository(blob_dir, signer=signer)
        except OSError as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e

        logger.info(f"Storage factory: Using local filesystem storage at {blob_dir}")
        return storage

    @staticmethod
    def _create_gcs_storage(
        bucket_name: str, signer: Optional[SignedUrlService] = None
    ) -> IBlobStorageRepository:
        """
        Create Google Cloud Storage repository.

        Falls back to local storage if the client cannot be built.
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("GCS_BUCKET_NAME cannot be empty")

        try:
            from burnbox.config.gcs_config import get_gcs_client
            from burnbox.infrastructure.gcs_storage_repository import GCSStorageRepository

            storage = GCSStorageRepository(bucket_name, client=get_gcs_client())
            logger.info(f"Storage factory: Using GCS storage with bucket {bucket_name}")
            return storage

        except Exception as e:
            logger.warning(f"Failed to initialize GCS storage: {e}")
            logger.warning("Falling back to local filesystem storage")
            return StorageFactory._create_local_storage(signer)
