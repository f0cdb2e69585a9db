"""
Burn Lifecycle Service

Application service that orchestrates creating, inspecting, consuming,
deleting and reaping burn records. Coordinates the quota policy, the record
store, the blob store and the audit log, and publishes domain events for
every state transition.
"""

import logging
import time
from typing import Callable, List, Optional

from burnbox.domain.audit.entities import DownloadAttempt
from burnbox.domain.audit.services import AuditLog
from burnbox.domain.burn_records.credentials import CredentialGuard
from burnbox.domain.burn_records.entities import BurnRecord, utc_now
from burnbox.domain.burn_records.identifiers import IdentifierGenerator, build_share_url
from burnbox.domain.burn_records.repositories import BurnRepository
from burnbox.domain.burn_records.value_objects import (
    BurnStatus,
    CallerIdentity,
    IncrementRejection,
    RequesterInfo,
    RetireReason,
)
from burnbox.domain.errors import (
    BurnGoneError,
    BurnNotFoundError,
    ConflictError,
    ForbiddenError,
    NamespaceExhaustedError,
    QuotaExceededError,
    TransientStoreError,
    UnauthorizedError,
    ValidationError,
)
from burnbox.domain.events import (
    BlobDeletionFailedEvent,
    BurnConsumedEvent,
    BurnCreatedEvent,
    BurnRetiredEvent,
    DownloadRejectedEvent,
)
from burnbox.domain.file_storage.storage_repository import IBlobStorageRepository
from burnbox.domain.file_storage.value_objects import TransferHandle
from burnbox.domain.quota.services import QuotaPolicy
from burnbox.domain.quota.value_objects import UNLIMITED_DOWNLOADS

from .event_publisher import EventPublisher
from .results import (
    DEFAULT_CONTENT_TYPE,
    BurnListResult,
    ConsumeResult,
    CreateBurnRequest,
    CreateBurnResult,
    ReapResult,
)

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("all",) + tuple(status.value for status in BurnStatus)
DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100

PASSWORD_REQUIRED = "password-required"
PASSWORD_INCORRECT = "password-incorrect"
HANDLE_UNAVAILABLE = "handle-unavailable"


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class BurnLifecycleService:
    """
    Application service for the burn record lifecycle.

    Holds no counters or locks of its own: the record store's atomic
    increment is the only synchronisation point between concurrent
    consumers.
    """

    def __init__(
        self,
        burn_repository: BurnRepository,
        blob_storage: IBlobStorageRepository,
        audit_log: AuditLog,
        event_publisher: EventPublisher,
        quota_policy: Optional[QuotaPolicy] = None,
        identifiers: Optional[IdentifierGenerator] = None,
        credentials: Optional[CredentialGuard] = None,
        public_base_url: str = "https://burn.snapitsoftware.com",
        transfer_ttl_seconds: int = 3600,
        handle_retry_attempts: int = 3,
        handle_retry_backoff: float = 0.1,
        reaper_batch_size: int = 100,
        clock: Callable = utc_now,
    ):
        """
        Initialize Burn Lifecycle Service with dependencies.

        Args:
            burn_repository: Record store
            blob_storage: Blob store
            audit_log: Download attempt log
            event_publisher: Application service for event publishing
            quota_policy: Tier ceilings (defaults to the built-in table)
            identifiers: Burn id and short code generator
            credentials: Password hashing
            public_base_url: Base of the share links handed to uploaders
            transfer_ttl_seconds: Validity of upload and download handles
            handle_retry_attempts: Attempts to issue a download handle after a counted download
            handle_retry_backoff: Initial delay between those attempts, doubled each time
            reaper_batch_size: Records retired per reaper pass
            clock: Callable returning the current UTC time
        """
        self.burn_repository = burn_repository
        self.blob_storage = blob_storage
        self.audit_log = audit_log
        self.event_publisher = event_publisher
        self.quota_policy = quota_policy or QuotaPolicy()
        self.identifiers = identifiers or IdentifierGenerator()
        self.credentials = credentials or CredentialGuard()
        self.public_base_url = public_base_url
        self.transfer_ttl_seconds = transfer_ttl_seconds
        self.handle_retry_attempts = max(1, handle_retry_attempts)
        self.handle_retry_backoff = handle_retry_backoff
        self.reaper_batch_size = reaper_batch_size
        self.clock = clock

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: CreateBurnRequest, caller: CallerIdentity) -> CreateBurnResult:
        """
        Create a burn record and issue an upload handle.

        Args:
            request: Requested file metadata and limits
            caller: Identity and tier of the uploader

        Returns:
            CreateBurnResult with the record, upload handle and share URL

        Raises:
            ValidationError: If a field is missing or malformed
            QuotaExceededError: If the request breaches a tier ceiling
            NamespaceExhaustedError: If no unique short code could be found
        """
        self._validate_create(request)

        verdict = self.quota_policy.evaluate(
            caller.tier,
            request.file_size_bytes,
            request.expires_in_seconds,
            request.max_downloads,
        )
        if not verdict:
            logger.info(
                f"Quota rejected burn for owner={caller.effective_owner}: {verdict.message}"
            )
            raise QuotaExceededError(verdict)

        password_hash = self.credentials.hash(request.password) if request.password else None
        record = self._persist_new_record(request, caller, password_hash)

        upload_handle = self.blob_storage.issue_upload_handle(
            record.storage_key, record.content_type, self.transfer_ttl_seconds
        )

        self.event_publisher.publish(BurnCreatedEvent(
            aggregate_id=record.burn_id,
            occurred_at=record.created_at,
            short_code=record.short_code,
            tier=record.tier.value,
            max_downloads=record.max_downloads,
            expires_at=record.expires_at,
        ))

        return CreateBurnResult(
            record=record,
            upload_handle=upload_handle,
            share_url=build_share_url(self.public_base_url, record.short_code),
        )

    def _validate_create(self, request: CreateBurnRequest) -> None:
        if not isinstance(request.file_name, str) or not request.file_name.strip():
            raise ValidationError("fileName is required", field="file_name")
        if not _is_int(request.file_size_bytes) or request.file_size_bytes <= 0:
            raise ValidationError("fileSize must be a positive integer", field="file_size")
        if not _is_int(request.expires_in_seconds) or request.expires_in_seconds <= 0:
            raise ValidationError("expiresIn must be a positive integer", field="expires_in")
        max_downloads = request.max_downloads
        if not _is_int(max_downloads) or (max_downloads <= 0 and max_downloads != UNLIMITED_DOWNLOADS):
            raise ValidationError(
                "maxDownloads must be a positive integer or -1 for unlimited",
                field="max_downloads",
            )
        if request.password is not None and not isinstance(request.password, str):
            raise ValidationError("password must be a string", field="password")
        if not isinstance(request.watermark, bool):
            raise ValidationError("watermark must be a boolean", field="watermark")
        if not isinstance(request.download_notifications, bool):
            raise ValidationError(
                "downloadNotifications must be a boolean", field="download_notifications"
            )

    def _persist_new_record(
        self, request: CreateBurnRequest, caller: CallerIdentity, password_hash: Optional[str]
    ) -> BurnRecord:
        """Generate identifiers and store the record, retrying on collisions."""
        for attempt in range(1, self.identifiers.max_attempts + 1):
            record = BurnRecord.create(
                burn_id=self.identifiers.new_id(),
                short_code=self.identifiers.new_short_code(self.burn_repository.short_code_exists),
                file_name=request.file_name.strip(),
                file_size_bytes=request.file_size_bytes,
                content_type=request.content_type or DEFAULT_CONTENT_TYPE,
                ttl_seconds=request.expires_in_seconds,
                max_downloads=request.max_downloads,
                tier=caller.tier,
                owner_id=caller.effective_owner,
                password_hash=password_hash,
                uploader_email=request.uploader_email,
                uploader_ip=request.uploader_ip,
                custom_message=request.custom_message,
                download_notifications=request.download_notifications,
                watermark=request.watermark,
                now=self.clock(),
            )
            try:
                self.burn_repository.create(record)
                return record
            except ConflictError as e:
                logger.warning(f"Identifier collision on attempt {attempt}: {e}")

        raise NamespaceExhaustedError(
            f"Could not store burn after {self.identifiers.max_attempts} attempts"
        )

    # ------------------------------------------------------------------
    # Inspect
    # ------------------------------------------------------------------

    def inspect(self, key: str) -> BurnRecord:
        """
        Read a burn's metadata without changing it.

        Raises:
            BurnNotFoundError: If no record matches
            BurnGoneError: If the record is retired, expired or exhausted
        """
        record = self._resolve(key)
        reason = record.gone_reason(self.clock())
        if reason is not None:
            raise BurnGoneError(reason.value)
        return record

    # ------------------------------------------------------------------
    # Consume
    # ------------------------------------------------------------------

    def consume(
        self,
        key: str,
        password: Optional[str] = None,
        requester: Optional[RequesterInfo] = None,
    ) -> ConsumeResult:
        """
        Count one download and issue a download handle.

        Args:
            key: Burn id or short code
            password: Plaintext password, if the burn has one
            requester: Requester details for the audit log

        Returns:
            ConsumeResult with the download handle and remaining downloads

        Raises:
            ValidationError: If the password is not a string
            BurnNotFoundError: If no record matches
            BurnGoneError: If the burn can no longer be downloaded
            UnauthorizedError: If the password is missing or wrong
            TransientStoreError: If a store is unavailable
        """
        if password is not None and not isinstance(password, str):
            raise ValidationError("password must be a string", field="password")

        requester = requester or RequesterInfo()
        now = self.clock()
        record = self._resolve(key)

        reason = record.gone_reason(now)
        if reason is not None:
            if not record.is_retired:
                self._retire(record, reason, now)
            self._reject(record, requester, reason.value, now)
            raise BurnGoneError(reason.value)

        if record.requires_password:
            if not password:
                self._reject(record, requester, PASSWORD_REQUIRED, now)
                raise UnauthorizedError("Password required")
            if not self.credentials.verify(password, record.password_hash):
                self._reject(record, requester, PASSWORD_INCORRECT, now)
                raise UnauthorizedError("Incorrect password")

        result = self.burn_repository.increment_download_if_allowed(record.burn_id, now)
        if not result.accepted:
            if result.rejection == IncrementRejection.NOT_FOUND:
                raise BurnNotFoundError(f"Burn {key} not found")
            gone = result.gone_reason()
            if result.rejection != IncrementRejection.RETIRED:
                self._retire(record, RetireReason(gone), now)
            self._reject(record, requester, gone, now)
            raise BurnGoneError(gone)

        record.current_downloads = result.new_count
        will_be_deleted = record.is_at_ceiling()

        try:
            handle = self._issue_download_handle(record)
        except TransientStoreError:
            # The download stays counted; the requester cannot get it back.
            self.audit_log.record_attempt(
                record.burn_id, requester, False, HANDLE_UNAVAILABLE, now
            )
            if will_be_deleted:
                self._retire(record, RetireReason.MAX_DOWNLOADS, now)
            raise

        self.audit_log.record_attempt(record.burn_id, requester, True, now=now)
        self.event_publisher.publish(BurnConsumedEvent(
            aggregate_id=record.burn_id,
            occurred_at=now,
            download_count=record.current_downloads,
            remaining_downloads=record.remaining_downloads(),
        ))

        if will_be_deleted:
            self._retire(record, RetireReason.MAX_DOWNLOADS, now)

        return ConsumeResult(
            record=record,
            download_handle=handle,
            remaining_downloads=record.remaining_downloads(),
            will_be_deleted=will_be_deleted,
        )

    def _issue_download_handle(self, record: BurnRecord) -> TransferHandle:
        """Issue a download handle, retrying transient failures. Never re-counts."""
        delay = self.handle_retry_backoff
        for attempt in range(1, self.handle_retry_attempts + 1):
            try:
                return self.blob_storage.issue_download_handle(
                    record.storage_key,
                    record.file_name,
                    self.transfer_ttl_seconds,
                    content_type=record.content_type,
                )
            except TransientStoreError as e:
                if attempt == self.handle_retry_attempts:
                    logger.error(
                        f"Giving up issuing download handle for burn {record.burn_id}: {e}"
                    )
                    raise
                logger.warning(
                    f"Download handle attempt {attempt} failed for burn {record.burn_id}: {e}"
                )
                time.sleep(delay)
                delay *= 2

    def _reject(self, record: BurnRecord, requester: RequesterInfo, reason: str, now) -> None:
        self.audit_log.record_attempt(record.burn_id, requester, False, reason, now)
        self.event_publisher.publish(DownloadRejectedEvent(
            aggregate_id=record.burn_id, occurred_at=now, reason=reason
        ))

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(self, key: str, caller: CallerIdentity) -> BurnRecord:
        """
        Manually retire a burn and delete its blob.

        Raises:
            UnauthorizedError: If the caller is anonymous
            BurnNotFoundError: If no record matches
            ForbiddenError: If the caller does not own the burn
            BurnGoneError: If the burn is already retired or expired
        """
        if not caller.is_authenticated:
            raise UnauthorizedError("Authentication required")

        record = self._resolve(key)
        if record.owner_id != caller.owner_id:
            raise ForbiddenError("Only the owner can delete this burn")
        if record.is_retired:
            raise BurnGoneError((record.retire_reason or RetireReason.MANUAL).value)

        now = self.clock()
        if record.is_expired(now):
            self._retire(record, RetireReason.EXPIRED, now)
            raise BurnGoneError(RetireReason.EXPIRED.value)

        if not self._retire(record, RetireReason.MANUAL, now):
            # Another request retired it first; report its reason
            current = self.burn_repository.find_by_id_or_short_code(record.burn_id)
            reason = current.retire_reason if current and current.retire_reason else RetireReason.MANUAL
            raise BurnGoneError(reason.value)

        return record

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def list_burns(
        self,
        caller: CallerIdentity,
        status_filter: Optional[str] = "all",
        limit: Optional[int] = DEFAULT_LIST_LIMIT,
    ) -> BurnListResult:
        """
        List the caller's burns, newest first.

        The limit is applied before the status filter, so a filtered page
        can hold fewer than ``limit`` entries.

        Raises:
            UnauthorizedError: If the caller is anonymous
            ValidationError: If the filter or limit is invalid
        """
        if not caller.is_authenticated:
            raise UnauthorizedError("Authentication required")

        status_filter = status_filter or "all"
        if status_filter not in STATUS_FILTERS:
            raise ValidationError(
                f"status must be one of: {', '.join(STATUS_FILTERS)}", field="status"
            )
        if limit is None:
            limit = DEFAULT_LIST_LIMIT
        if not _is_int(limit) or limit <= 0:
            raise ValidationError("limit must be a positive integer", field="limit")
        limit = min(limit, MAX_LIST_LIMIT)

        now = self.clock()
        burns = self.burn_repository.list_by_owner(caller.owner_id, limit)
        if status_filter != "all":
            burns = [b for b in burns if b.display_status(now).value == status_filter]

        return BurnListResult(
            burns=burns, owner_id=caller.owner_id, tier=caller.tier.value, as_of=now
        )

    def list_attempts(self, key: str, caller: CallerIdentity) -> List[DownloadAttempt]:
        """
        Return the download attempt log of one of the caller's burns.

        Raises:
            UnauthorizedError: If the caller is anonymous
            BurnNotFoundError: If no record matches
            ForbiddenError: If the caller does not own the burn
        """
        if not caller.is_authenticated:
            raise UnauthorizedError("Authentication required")
        record = self._resolve(key)
        if record.owner_id != caller.owner_id:
            raise ForbiddenError("Only the owner can view download attempts")
        return self.audit_log.attempts_for(record.burn_id)

    # ------------------------------------------------------------------
    # Reaper
    # ------------------------------------------------------------------

    def reap_expired(self, batch_size: Optional[int] = None) -> ReapResult:
        """
        Retire expired burns nobody has touched and delete their blobs.

        Returns:
            ReapResult with counters and per-record errors
        """
        now = self.clock()
        result = ReapResult()
        records = self.burn_repository.find_expired_active(now, batch_size or self.reaper_batch_size)

        for record in records:
            try:
                blob_deleted = self._delete_blob(record)
                if blob_deleted:
                    result.blobs_deleted += 1
                if self._flip_latch(record, RetireReason.EXPIRED, now, blob_deleted):
                    result.expired_burns_retired += 1
            except TransientStoreError as e:
                result.errors.append(f"{record.burn_id}: {e}")
                logger.warning(f"Reaper could not retire burn {record.burn_id}: {e}")

        if records:
            logger.info(
                f"Reaper retired {result.expired_burns_retired} of {len(records)} expired burns"
            )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def now(self):
        return self.clock()

    def share_url_for(self, record: BurnRecord) -> str:
        return build_share_url(self.public_base_url, record.short_code)

    def _resolve(self, key: str) -> BurnRecord:
        record = self.burn_repository.find_by_id_or_short_code(key) if key else None
        if record is None:
            raise BurnNotFoundError(f"Burn {key} not found")
        return record

    def _retire(self, record: BurnRecord, reason: RetireReason, now) -> bool:
        """
        Delete the blob, then flip the latch.

        Returns:
            True if this call performed the transition
        """
        blob_deleted = self._delete_blob(record)
        return self._flip_latch(record, reason, now, blob_deleted)

    def _flip_latch(self, record: BurnRecord, reason: RetireReason, now, blob_deleted: bool) -> bool:
        flipped = self.burn_repository.retire(record.burn_id, reason, now)
        if flipped:
            record.is_retired = True
            record.retire_reason = reason
            record.retired_at = now
            self.event_publisher.publish(BurnRetiredEvent(
                aggregate_id=record.burn_id,
                occurred_at=now,
                reason=reason.value,
                blob_deleted=blob_deleted,
            ))
        return flipped

    def _delete_blob(self, record: BurnRecord) -> bool:
        """Delete a burn's blob. Failures are reported, never raised."""
        error_message = None
        try:
            if self.blob_storage.delete(record.storage_key):
                return True
            error_message = "storage reported failure"
        except Exception as e:
            error_message = str(e) or e.__class__.__name__

        logger.error(f"Failed to delete blob {record.storage_key}: {error_message}")
        self.event_publisher.publish(BlobDeletionFailedEvent(
            aggregate_id=record.burn_id,
            occurred_at=self.clock(),
            storage_key=record.storage_key,
            error_message=error_message,
        ))
        return False
