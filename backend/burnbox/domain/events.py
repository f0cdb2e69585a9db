"""
Domain Events

Immutable records of burn lifecycle transitions, published by
BurnLifecycleService and consumed by infrastructure handlers.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (the burn id)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class BurnCreatedEvent(DomainEvent):
    """
    Event emitted when a burn record is persisted.

    Attributes:
        short_code: Shareable alias
        tier: Uploader tier
        max_downloads: Download ceiling (-1 for unlimited)
        expires_at: Deadline
    """
    short_code: str
    tier: str
    max_downloads: int
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "short_code": self.short_code,
            "tier": self.tier,
            "max_downloads": self.max_downloads,
            "expires_at": self.expires_at.isoformat(),
        })
        return base_dict


@dataclass(frozen=True)
class BurnConsumedEvent(DomainEvent):
    """
    Event emitted when a download is counted.

    Attributes:
        download_count: Count after the increment
        remaining_downloads: Downloads left, None when unlimited
    """
    download_count: int
    remaining_downloads: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "download_count": self.download_count,
            "remaining_downloads": self.remaining_downloads,
        })
        return base_dict


@dataclass(frozen=True)
class DownloadRejectedEvent(DomainEvent):
    """
    Event emitted when a consume attempt is refused.

    Attributes:
        reason: Failure reason recorded in the audit log
    """
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict["reason"] = self.reason
        return base_dict


@dataclass(frozen=True)
class BurnRetiredEvent(DomainEvent):
    """
    Event emitted when the retirement latch flips.

    Attributes:
        reason: Retirement reason
        blob_deleted: Whether the blob was removed
    """
    reason: str
    blob_deleted: bool

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "reason": self.reason,
            "blob_deleted": self.blob_deleted,
        })
        return base_dict


@dataclass(frozen=True)
class BlobDeletionFailedEvent(DomainEvent):
    """
    Event emitted when a blob could not be removed during retirement.

    Attributes:
        storage_key: Key of the blob left behind
        error_message: Human-readable error message
    """
    storage_key: str
    error_message: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "storage_key": self.storage_key,
            "error_message": self.error_message,
        })
        return base_dict
