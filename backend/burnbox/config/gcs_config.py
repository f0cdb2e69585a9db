"""
Google Cloud Storage Configuration

Builds the storage client used to sign burn transfer URLs. The client is
created on first use and shared by the blob repository and /health.
"""

import logging
import os
from typing import Optional

from google.cloud import storage
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


class GCSConfig:
    """GCS settings read from the environment."""

    def __init__(self):
        self.bucket_name = os.getenv("GCS_BUCKET_NAME")
        self.credentials_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        self.project = os.getenv("GCS_PROJECT")

    @property
    def enabled(self) -> bool:
        return bool(self.bucket_name and self.bucket_name.strip())


_client: Optional[storage.Client] = None
_bucket_name: Optional[str] = None


def _build_client(config: GCSConfig) -> storage.Client:
    # V4 signing needs a private key, so an explicit key file wins over ambient credentials
    if config.credentials_path and os.path.exists(config.credentials_path):
        credentials = service_account.Credentials.from_service_account_file(
            config.credentials_path
        )
        logger.info(f"GCS client using service account key {config.credentials_path}")
        return storage.Client(project=config.project, credentials=credentials)

    logger.info("GCS client using default credentials")
    return storage.Client(project=config.project)


def get_gcs_client(config: Optional[GCSConfig] = None) -> Optional[storage.Client]:
    """
    Return the shared client, creating it on first call.

    Returns:
        Client, or None when no bucket is configured

    Raises:
        google.auth.exceptions.DefaultCredentialsError: If no credentials are available
    """
    global _client, _bucket_name

    if _client is not None:
        return _client

    config = config or GCSConfig()
    if not config.enabled:
        logger.info("GCS_BUCKET_NAME not set, blobs stay on local disk")
        return None

    _client = _build_client(config)
    _bucket_name = config.bucket_name
    return _client


def is_gcs_enabled() -> bool:
    return _client is not None and _bucket_name is not None


def gcs_health_check() -> bool:
    """Check that the burn bucket is reachable with the current credentials."""
    if not is_gcs_enabled():
        return False

    try:
        return _client.bucket(_bucket_name).exists()
    except Exception as e:
        logger.warning(f"GCS health check failed for bucket {_bucket_name}: {e}")
        return False
