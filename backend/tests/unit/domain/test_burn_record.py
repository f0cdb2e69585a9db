"""
Unit tests for the BurnRecord entity

Tests creation, derived status, remaining downloads and serialization.
"""

from datetime import timedelta

import pytest

from burnbox.domain.burn_records.entities import PRO_ENCRYPTION_ALGORITHM, BurnRecord
from burnbox.domain.burn_records.value_objects import (
    ANONYMOUS_OWNER,
    BurnStatus,
    CallerIdentity,
    IncrementRejection,
    IncrementResult,
    RetireReason,
)
from burnbox.domain.quota.value_objects import UNLIMITED_DOWNLOADS, Tier
from tests.fixtures import BASE_TIME, create_burn_record


class TestCreate:
    def test_new_record_is_active_with_zero_downloads(self):
        record = create_burn_record(ttl_seconds=600, max_downloads=3)

        assert record.current_downloads == 0
        assert not record.is_retired
        assert record.expires_at == BASE_TIME + timedelta(seconds=600)
        assert record.storage_key == "burns/burn-1"
        assert record.display_status(BASE_TIME) == BurnStatus.ACTIVE

    def test_missing_owner_becomes_anonymous(self):
        record = BurnRecord.create(
            burn_id="b", short_code="s", file_name="f", file_size_bytes=1,
            content_type="text/plain", ttl_seconds=60, max_downloads=1,
            tier=Tier.FREE, owner_id=None, now=BASE_TIME,
        )
        assert record.owner_id == ANONYMOUS_OWNER


class TestDerivedState:
    def test_expiry_is_inclusive_of_the_deadline(self):
        record = create_burn_record(ttl_seconds=60)

        assert not record.is_expired(BASE_TIME + timedelta(seconds=59))
        assert record.is_expired(BASE_TIME + timedelta(seconds=60))

    def test_remaining_downloads(self):
        record = create_burn_record(max_downloads=3, current_downloads=1)
        assert record.remaining_downloads() == 2

    def test_unlimited_has_no_remaining_count_and_no_ceiling(self):
        record = create_burn_record(max_downloads=UNLIMITED_DOWNLOADS, current_downloads=10_000)

        assert record.is_unlimited
        assert record.remaining_downloads() is None
        assert not record.is_at_ceiling()

    def test_requires_password_follows_hash(self):
        assert not create_burn_record().requires_password
        assert create_burn_record(password_hash="pbkdf2:sha256:1$s$d").requires_password

    @pytest.mark.parametrize("kwargs,now_offset,expected", [
        ({}, 0, BurnStatus.ACTIVE),
        ({}, 3600, BurnStatus.EXPIRED),
        ({"current_downloads": 1}, 0, BurnStatus.MAX_DOWNLOADS),
        ({"retire_reason": RetireReason.MANUAL}, 0, BurnStatus.DELETED),
        ({"retire_reason": RetireReason.MAX_DOWNLOADS}, 0, BurnStatus.MAX_DOWNLOADS),
        ({"retire_reason": RetireReason.EXPIRED}, 0, BurnStatus.EXPIRED),
        # A stored reason wins over the clock
        ({"retire_reason": RetireReason.MANUAL}, 7200, BurnStatus.DELETED),
    ])
    def test_display_status(self, kwargs, now_offset, expected):
        record = create_burn_record(ttl_seconds=3600, max_downloads=1, **kwargs)
        now = BASE_TIME + timedelta(seconds=now_offset)

        assert record.display_status(now) == expected

    def test_gone_reason_is_none_while_active(self):
        assert create_burn_record().gone_reason(BASE_TIME) is None


class TestProFeatures:
    def test_watermark_is_dropped_for_free_tier(self):
        record = create_burn_record(tier=Tier.FREE, watermark=True)

        assert record.watermark is False
        assert record.is_encrypted is False
        assert record.encryption_algorithm is None

    def test_pro_tier_keeps_watermark_and_encryption(self):
        record = create_burn_record(tier=Tier.PRO, watermark=True)

        assert record.watermark is True
        assert record.is_encrypted is True
        assert record.encryption_algorithm == PRO_ENCRYPTION_ALGORITHM


class TestSerialization:
    def test_dict_round_trip_keeps_retirement(self):
        record = create_burn_record(
            password_hash="pbkdf2:sha256:1$s$d",
            tier=Tier.PRO,
            retire_reason=RetireReason.MAX_DOWNLOADS,
            watermark=True,
            download_notifications=False,
            current_downloads=1,
        )
        restored = BurnRecord.from_dict(record.to_dict())

        assert restored == record

    def test_records_without_sharing_options_get_defaults(self):
        data = create_burn_record().to_dict()
        for key in ("download_notifications", "watermark", "is_encrypted", "encryption_algorithm"):
            data.pop(key)

        restored = BurnRecord.from_dict(data)

        assert restored.download_notifications is True
        assert restored.watermark is False
        assert restored.is_encrypted is False
        assert restored.encryption_algorithm is None

    def test_naive_timestamps_are_read_as_utc(self):
        data = create_burn_record().to_dict()
        data["created_at"] = "2024-01-15T12:00:00"
        data["expires_at"] = "2024-01-15T13:00:00"

        restored = BurnRecord.from_dict(data)

        assert restored.expires_at == BASE_TIME + timedelta(hours=1)


class TestValueObjects:
    def test_anonymous_caller(self):
        caller = CallerIdentity.anonymous()

        assert not caller.is_authenticated
        assert caller.effective_owner == ANONYMOUS_OWNER

    def test_literal_anonymous_owner_is_not_authenticated(self):
        assert not CallerIdentity(owner_id=ANONYMOUS_OWNER).is_authenticated

    def test_increment_result_gone_reason(self):
        assert IncrementResult.ok(1).accepted
        assert IncrementResult.rejected(IncrementRejection.EXPIRED).gone_reason() == "expired"
        assert IncrementResult.rejected(IncrementRejection.MAX_DOWNLOADS).gone_reason() == "max-downloads"
        retired = IncrementResult.rejected(IncrementRejection.RETIRED, RetireReason.MANUAL)
        assert retired.gone_reason() == "manual"

    def test_status_for_reason(self):
        assert BurnStatus.for_reason(RetireReason.MANUAL) == BurnStatus.DELETED
