"""
Burn Service Requests and Results

Value objects passed into and returned from BurnLifecycleService.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from burnbox.domain.burn_records.entities import BurnRecord
from burnbox.domain.file_storage.value_objects import TransferHandle

DEFAULT_EXPIRES_IN_SECONDS = 24 * 60 * 60
DEFAULT_MAX_DOWNLOADS = 5
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class CreateBurnRequest:
    """
    Unvalidated request to create a burn.

    Values are kept as received; the service validates them.
    """
    file_name: Any
    file_size_bytes: Any
    content_type: Optional[str] = DEFAULT_CONTENT_TYPE
    expires_in_seconds: Any = DEFAULT_EXPIRES_IN_SECONDS
    max_downloads: Any = DEFAULT_MAX_DOWNLOADS
    password: Optional[str] = None
    uploader_email: Optional[str] = None
    uploader_ip: Optional[str] = None
    custom_message: Optional[str] = None
    download_notifications: Any = True
    watermark: Any = False


@dataclass
class CreateBurnResult:
    record: BurnRecord
    upload_handle: TransferHandle
    share_url: str


@dataclass
class ConsumeResult:
    """
    Outcome of a successful consume.

    ``remaining_downloads`` is None for unlimited burns. ``will_be_deleted``
    is True when this was the last permitted download.
    """
    record: BurnRecord
    download_handle: TransferHandle
    remaining_downloads: Optional[int]
    will_be_deleted: bool


@dataclass
class BurnListResult:
    burns: List[BurnRecord]
    owner_id: str
    tier: str
    as_of: datetime


@dataclass
class ReapResult:
    """Counters reported by one reaper pass."""
    expired_burns_retired: int = 0
    blobs_deleted: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expired_burns_retired": self.expired_burns_retired,
            "blobs_deleted": self.blobs_deleted,
            "errors": list(self.errors),
        }
