"""
Burn Record Entities

Domain entity for a shareable, self-destructing file.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..quota.value_objects import UNLIMITED_DOWNLOADS, Tier
from .value_objects import ANONYMOUS_OWNER, BurnStatus, RetireReason

# Pro uploads are flagged as encrypted at rest
PRO_ENCRYPTION_ALGORITHM = "AES-256-GCM"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class BurnRecord:
    """
    Entity describing one burn: the file metadata, its download ceiling and
    its retirement latch.

    Everything except ``current_downloads`` and the retirement fields is
    immutable after creation. Expiry is never written into ``is_retired``;
    it is evaluated against the clock on every read.
    """
    burn_id: str
    short_code: str
    file_name: str
    file_size_bytes: int
    content_type: str
    storage_key: str
    created_at: datetime
    expires_at: datetime
    max_downloads: int
    current_downloads: int = 0
    password_hash: Optional[str] = None
    tier: Tier = Tier.FREE
    owner_id: str = ANONYMOUS_OWNER
    is_retired: bool = False
    retire_reason: Optional[RetireReason] = None
    retired_at: Optional[datetime] = None
    uploader_email: Optional[str] = None
    uploader_ip: Optional[str] = None
    custom_message: Optional[str] = None
    download_notifications: bool = True
    watermark: bool = False
    is_encrypted: bool = False
    encryption_algorithm: Optional[str] = None

    @classmethod
    def create(
        cls,
        burn_id: str,
        short_code: str,
        file_name: str,
        file_size_bytes: int,
        content_type: str,
        ttl_seconds: int,
        max_downloads: int,
        tier: Tier,
        owner_id: str = ANONYMOUS_OWNER,
        password_hash: Optional[str] = None,
        uploader_email: Optional[str] = None,
        uploader_ip: Optional[str] = None,
        custom_message: Optional[str] = None,
        download_notifications: bool = True,
        watermark: bool = False,
        now: Optional[datetime] = None,
    ) -> 'BurnRecord':
        """
        Factory method to create a new active burn record.

        Watermarking and encryption are pro features: a free record never
        carries them, whatever was requested.

        Args:
            burn_id: Unique record identifier
            short_code: Shareable alias
            file_name: Original file name
            file_size_bytes: Declared file size
            content_type: MIME type of the upload
            ttl_seconds: Lifetime from now
            max_downloads: Download ceiling or UNLIMITED_DOWNLOADS
            tier: Tier of the uploader
            owner_id: Owner id or "anonymous"
            password_hash: Optional credential hash
            download_notifications: Notify the uploader on each download
            watermark: Requested watermarking (pro only)
            now: Creation time (defaults to current UTC time)

        Returns:
            New BurnRecord with ``current_downloads == 0``
        """
        created_at = now or utc_now()
        is_pro = tier == Tier.PRO
        return cls(
            burn_id=burn_id,
            short_code=short_code,
            file_name=file_name,
            file_size_bytes=file_size_bytes,
            content_type=content_type,
            storage_key=f"burns/{burn_id}",
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=ttl_seconds),
            max_downloads=max_downloads,
            password_hash=password_hash,
            tier=tier,
            owner_id=owner_id or ANONYMOUS_OWNER,
            uploader_email=uploader_email,
            uploader_ip=uploader_ip,
            custom_message=custom_message,
            download_notifications=download_notifications,
            watermark=bool(watermark) and is_pro,
            is_encrypted=is_pro,
            encryption_algorithm=PRO_ENCRYPTION_ALGORITHM if is_pro else None,
        )

    @property
    def is_unlimited(self) -> bool:
        return self.max_downloads == UNLIMITED_DOWNLOADS

    @property
    def requires_password(self) -> bool:
        return self.password_hash is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the deadline has passed."""
        return (now or utc_now()) >= self.expires_at

    def is_at_ceiling(self) -> bool:
        """Check if the download ceiling has been reached."""
        return not self.is_unlimited and self.current_downloads >= self.max_downloads

    def remaining_downloads(self) -> Optional[int]:
        """
        Downloads left before the ceiling.

        Returns:
            Remaining count, or None when unlimited
        """
        if self.is_unlimited:
            return None
        return max(0, self.max_downloads - self.current_downloads)

    def gone_reason(self, now: Optional[datetime] = None) -> Optional[RetireReason]:
        """
        Reason this record can no longer be consumed, if any.

        A retired record reports its stored reason. An unretired record that
        is past its deadline or at its ceiling is treated as gone too.
        """
        if self.is_retired:
            return self.retire_reason or RetireReason.MANUAL
        if self.is_expired(now):
            return RetireReason.EXPIRED
        if self.is_at_ceiling():
            return RetireReason.MAX_DOWNLOADS
        return None

    def display_status(self, now: Optional[datetime] = None) -> BurnStatus:
        reason = self.gone_reason(now)
        if reason is None:
            return BurnStatus.ACTIVE
        return BurnStatus.for_reason(reason)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "burn_id": self.burn_id,
            "short_code": self.short_code,
            "file_name": self.file_name,
            "file_size_bytes": self.file_size_bytes,
            "content_type": self.content_type,
            "storage_key": self.storage_key,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "max_downloads": self.max_downloads,
            "current_downloads": self.current_downloads,
            "password_hash": self.password_hash,
            "tier": self.tier.value,
            "owner_id": self.owner_id,
            "is_retired": self.is_retired,
            "retire_reason": self.retire_reason.value if self.retire_reason else None,
            "retired_at": self.retired_at.isoformat() if self.retired_at else None,
            "uploader_email": self.uploader_email,
            "uploader_ip": self.uploader_ip,
            "custom_message": self.custom_message,
            "download_notifications": self.download_notifications,
            "watermark": self.watermark,
            "is_encrypted": self.is_encrypted,
            "encryption_algorithm": self.encryption_algorithm,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'BurnRecord':
        """Create BurnRecord from dictionary."""
        reason = data.get("retire_reason")
        return cls(
            burn_id=data["burn_id"],
            short_code=data["short_code"],
            file_name=data["file_name"],
            file_size_bytes=int(data["file_size_bytes"]),
            content_type=data.get("content_type") or "application/octet-stream",
            storage_key=data["storage_key"],
            created_at=_parse_datetime(data["created_at"]),
            expires_at=_parse_datetime(data["expires_at"]),
            max_downloads=int(data["max_downloads"]),
            current_downloads=int(data.get("current_downloads") or 0),
            password_hash=data.get("password_hash"),
            tier=Tier.from_claim(data.get("tier")),
            owner_id=data.get("owner_id") or ANONYMOUS_OWNER,
            is_retired=bool(data.get("is_retired")),
            retire_reason=RetireReason(reason) if reason else None,
            retired_at=_parse_datetime(data.get("retired_at")),
            uploader_email=data.get("uploader_email"),
            uploader_ip=data.get("uploader_ip"),
            custom_message=data.get("custom_message"),
            download_notifications=bool(data.get("download_notifications", True)),
            watermark=bool(data.get("watermark")),
            is_encrypted=bool(data.get("is_encrypted")),
            encryption_algorithm=data.get("encryption_algorithm"),
        )
