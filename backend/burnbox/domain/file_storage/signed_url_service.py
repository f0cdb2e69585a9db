"""
Signed URL Service

Service for generating time-limited signed URLs for blob transfers.
Used by the local storage backend, whose blobs are served by the API itself.
"""

import hashlib
import hmac
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from urllib.parse import quote, urlencode

from .value_objects import TransferHandle

# Query parameters that travel with a signed URL and are covered by its signature
SIGNED_PARAMS = ("filename", "type")


class SignedUrlService:
    """
    Service for generating and validating signed URLs.

    A signature binds the HTTP method, the storage key, the expiry
    timestamp and any SIGNED_PARAMS, so a download link cannot be replayed
    as an upload link or served under another name.
    """

    def __init__(
        self, secret_key: Optional[str] = None, base_url: Optional[str] = None
    ):
        """
        Initialize SignedUrlService.

        Args:
            secret_key: Secret key for HMAC signing (uses SECRET_KEY env var or generates if not provided)
            base_url: Base URL of the blob endpoint. Falls back to
                ``PUBLIC_API_URL`` + '/api/v1/blobs', then to the relative
                path '/api/v1/blobs'.
        """
        self.secret_key = (
            secret_key or os.getenv("SECRET_KEY") or self._generate_secret_key()
        )
        if base_url:
            self.base_url = base_url.rstrip("/")
        else:
            api_base = os.getenv("PUBLIC_API_URL")
            if api_base:
                self.base_url = api_base.rstrip("/") + "/api/v1/blobs"
            else:
                self.base_url = "/api/v1/blobs"

    @staticmethod
    def _generate_secret_key(length: int = 32) -> str:
        """Generate a cryptographically secure secret key."""
        return secrets.token_hex(length)

    def generate_signed_url(
        self,
        key: str,
        method: str,
        ttl_seconds: int,
        headers: Optional[Dict[str, str]] = None,
        now: Optional[datetime] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> TransferHandle:
        """
        Generate a signed URL for one blob transfer.

        Args:
            key: Storage key
            method: HTTP method the URL is valid for
            ttl_seconds: Time to live in seconds
            headers: Headers the client must send with the request
            now: Issue time (defaults to current UTC time)
            params: Extra query parameters to sign (names from SIGNED_PARAMS)

        Returns:
            TransferHandle with the signed URL

        Raises:
            ValueError: If a parameter name is not in SIGNED_PARAMS
        """
        params = {k: v for k, v in (params or {}).items() if v}
        unknown = set(params) - set(SIGNED_PARAMS)
        if unknown:
            raise ValueError(f"Unsupported signed parameters: {sorted(unknown)}")

        issued_at = now or datetime.now(timezone.utc)
        expires_at = (issued_at + timedelta(seconds=ttl_seconds)).replace(microsecond=0)
        expires = int(expires_at.timestamp())
        signature = self._generate_signature(method, key, expires, params)
        query = urlencode({**params, "expires": expires, "signature": signature})
        url = f"{self.base_url}/{quote(key)}?{query}"
        return TransferHandle(
            url=url, method=method.upper(), expires_at=expires_at, headers=headers or {}
        )

    def _generate_signature(
        self, method: str, key: str, expires: int, params: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Generate HMAC-SHA256 signature for method, key, expiry and params.

        Returns:
            HMAC signature as hex string
        """
        message = f"{method.upper()}:{key}:{expires}"
        for name in sorted(params or {}):
            message += f":{name}={params[name]}"
        return hmac.new(
            self.secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    def validate_signature(
        self,
        method: str,
        key: str,
        expires: int,
        signature: str,
        now: Optional[datetime] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> bool:
        """
        Validate a signed request.

        Args:
            method: HTTP method of the request
            key: Storage key from the URL
            expires: Expiry timestamp from the URL
            signature: Signature from the URL
            params: SIGNED_PARAMS values from the URL

        Returns:
            True if the signature matches and has not expired
        """
        if not signature:
            return False
        params = {k: v for k, v in (params or {}).items() if v}
        expected_signature = self._generate_signature(method, key, expires, params)

        # Use constant-time comparison to prevent timing attacks
        if not hmac.compare_digest(signature, expected_signature):
            return False

        current = now or datetime.now(timezone.utc)
        return current.timestamp() < expires
