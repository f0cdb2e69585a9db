"""
Domain Entity Fixtures

Factory functions for burn records and a controllable clock.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from burnbox.domain.burn_records.entities import BurnRecord
from burnbox.domain.burn_records.value_objects import RetireReason
from burnbox.domain.quota.value_objects import Tier

BASE_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = BASE_TIME):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


def create_burn_record(
    burn_id: str = "burn-1",
    short_code: str = "AbCd1234",
    file_name: str = "report.pdf",
    file_size_bytes: int = 1024,
    ttl_seconds: int = 3600,
    max_downloads: int = 1,
    tier: Tier = Tier.FREE,
    owner_id: str = "user-1",
    password_hash: Optional[str] = None,
    current_downloads: int = 0,
    retire_reason: Optional[RetireReason] = None,
    watermark: bool = False,
    download_notifications: bool = True,
    now: datetime = BASE_TIME,
) -> BurnRecord:
    """
    Create a BurnRecord with sensible defaults.

    Passing ``retire_reason`` returns an already retired record.
    """
    record = BurnRecord.create(
        burn_id=burn_id,
        short_code=short_code,
        file_name=file_name,
        file_size_bytes=file_size_bytes,
        content_type="application/pdf",
        ttl_seconds=ttl_seconds,
        max_downloads=max_downloads,
        tier=tier,
        owner_id=owner_id,
        password_hash=password_hash,
        watermark=watermark,
        download_notifications=download_notifications,
        now=now,
    )
    record.current_downloads = current_downloads
    if retire_reason is not None:
        record.is_retired = True
        record.retire_reason = retire_reason
        record.retired_at = now
    return record
