"""
API Namespaces - Organized endpoint groups
"""

from typing import Optional

from flask import current_app, request, send_file
from flask_restx import Namespace, Resource

from burnbox.api.v1.models import (
    attempts_response,
    burn_list_response,
    burn_metadata,
    create_burn_request,
    create_burn_response,
    delete_response,
    download_request,
    download_response,
    error_response,
)
from burnbox.application.results import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_EXPIRES_IN_SECONDS,
    DEFAULT_MAX_DOWNLOADS,
    CreateBurnRequest,
)
from burnbox.domain.burn_records.entities import BurnRecord
from burnbox.domain.burn_records.value_objects import CallerIdentity, RequesterInfo
from burnbox.domain.errors import (
    DomainError,
    ErrorCategory,
    create_error_response,
    error_response_for,
)
from burnbox.domain.file_storage.signed_url_service import SIGNED_PARAMS
from burnbox.domain.file_storage.storage_repository import IBlobStorageRepository
from burnbox.domain.quota.value_objects import Tier
from burnbox.infrastructure.local_file_storage_repository import LocalFileStorageRepository

USER_ID_HEADER = "X-User-Id"
USER_TIER_HEADER = "X-User-Tier"


# =============================================================================
# Request helpers
# =============================================================================

def caller_identity() -> CallerIdentity:
    """Identity claim injected by the upstream authorizer."""
    owner_id = (request.headers.get(USER_ID_HEADER) or "").strip() or None
    tier = Tier.from_claim(request.headers.get(USER_TIER_HEADER)) if owner_id else Tier.FREE
    return CallerIdentity(owner_id=owner_id, tier=tier)


def client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def _burn_service():
    return getattr(current_app, "burn_service", None)


def _service_unavailable():
    return create_error_response(
        ErrorCategory.SERVICE_UNAVAILABLE,
        "Burn service not initialized",
        status_code=503,
    )


def _unexpected_error(operation: str, e: Exception):
    current_app.logger.exception(f"Unexpected error in {operation}: {str(e)}")
    return create_error_response(
        ErrorCategory.SYSTEM_ERROR,
        f"Unexpected error: {str(e)}",
        status_code=500,
    )


def _max_downloads_label(value: int):
    return "unlimited" if value == -1 else value


# =============================================================================
# Serializers
# =============================================================================

def serialize_burn(record: BurnRecord, now) -> dict:
    """Public metadata for a burn. Never includes the password hash."""
    return {
        "burnId": record.burn_id,
        "shortLink": record.short_code,
        "fileName": record.file_name,
        "fileSize": record.file_size_bytes,
        "contentType": record.content_type,
        "uploadedAt": record.created_at.isoformat(),
        "expiresAt": record.expires_at.isoformat(),
        "currentDownloads": record.current_downloads,
        "maxDownloads": _max_downloads_label(record.max_downloads),
        "requiresPassword": record.requires_password,
        "customMessage": record.custom_message,
        "isExpired": record.is_expired(now),
        "isDeleted": record.is_retired,
        "tier": record.tier.value,
        "watermark": record.watermark,
        "downloadNotifications": record.download_notifications,
        "isEncrypted": record.is_encrypted,
        "encryptionAlgorithm": record.encryption_algorithm,
        "status": record.display_status(now).value,
    }


def serialize_list_item(record: BurnRecord, now, share_url: str) -> dict:
    data = serialize_burn(record, now)
    data.update({
        "deleteReason": record.retire_reason.value if record.retire_reason else None,
        "shareUrl": share_url,
    })
    return data


# =============================================================================
# Burn Namespace - Burn lifecycle operations
# =============================================================================

burn_ns = Namespace("burns", description="Self-destructing file operations")


@burn_ns.route("/")
class BurnCollection(Resource):
    """Create and list burns"""

    @burn_ns.doc("create_burn")
    @burn_ns.expect(create_burn_request)
    @burn_ns.response(201, "Created", create_burn_response)
    @burn_ns.response(400, "Bad Request", error_response)
    @burn_ns.response(403, "Plan Limit Exceeded", error_response)
    @burn_ns.response(503, "Service Unavailable", error_response)
    def post(self):
        """
        Create a burn

        Validates the request against the caller's tier, stores the record and
        returns a signed upload URL plus the share link.
        """
        service = _burn_service()
        if service is None:
            return _service_unavailable()

        data = request.get_json(silent=True) or {}
        expires_in = data.get("expiresIn")
        max_downloads = data.get("maxDownloads")
        burn_request = CreateBurnRequest(
            file_name=data.get("fileName"),
            file_size_bytes=data.get("fileSize"),
            content_type=data.get("contentType") or DEFAULT_CONTENT_TYPE,
            expires_in_seconds=DEFAULT_EXPIRES_IN_SECONDS if expires_in is None else expires_in,
            max_downloads=DEFAULT_MAX_DOWNLOADS if max_downloads is None else max_downloads,
            password=data.get("password") or None,
            uploader_email=data.get("ownerEmail"),
            uploader_ip=client_ip(),
            custom_message=data.get("customMessage"),
            download_notifications=data.get("downloadNotifications", True),
            watermark=data.get("watermark", False),
        )

        try:
            result = service.create(burn_request, caller_identity())
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error("create burn", e)

        record = result.record
        return {
            "burnId": record.burn_id,
            "shortLink": record.short_code,
            "uploadHandle": result.upload_handle.to_dict(),
            "uploadUrl": result.upload_handle.url,
            "shareUrl": result.share_url,
            "expiresAt": record.expires_at.isoformat(),
            "maxDownloads": _max_downloads_label(record.max_downloads),
            "tier": record.tier.value,
        }, 201

    @burn_ns.doc("list_burns", params={
        "status": "all, active, expired, max-downloads or deleted",
        "limit": "Maximum number of burns (default 50, max 100)",
    })
    @burn_ns.response(200, "Success", burn_list_response)
    @burn_ns.response(401, "Authentication Required", error_response)
    def get(self):
        """
        List the caller's burns, newest first
        """
        service = _burn_service()
        if service is None:
            return _service_unavailable()

        limit = request.args.get("limit")
        try:
            limit = int(limit) if limit is not None else None
        except ValueError:
            return create_error_response(
                ErrorCategory.INVALID_REQUEST,
                "limit must be a positive integer",
                {"field": "limit"},
                status_code=400,
            )

        try:
            result = service.list_burns(caller_identity(), request.args.get("status"), limit)
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error("list burns", e)

        burns = [
            serialize_list_item(record, result.as_of, service.share_url_for(record))
            for record in result.burns
        ]
        return {
            "burns": burns,
            "count": len(burns),
            "userId": result.owner_id,
            "tier": result.tier,
        }, 200


@burn_ns.route("/<string:key>")
@burn_ns.param("key", "Burn id or short code")
class Burn(Resource):
    """Single burn operations"""

    @burn_ns.doc("get_burn")
    @burn_ns.response(200, "Success", burn_metadata)
    @burn_ns.response(404, "Burn Not Found", error_response)
    @burn_ns.response(410, "Burn Gone", error_response)
    def get(self, key):
        """
        Get burn metadata

        Read-only: viewing metadata never counts as a download.
        """
        service = _burn_service()
        if service is None:
            return _service_unavailable()

        try:
            record = service.inspect(key)
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error(f"get burn {key}", e)

        return serialize_burn(record, service.now()), 200

    @burn_ns.doc("delete_burn")
    @burn_ns.response(200, "Deleted", delete_response)
    @burn_ns.response(401, "Authentication Required", error_response)
    @burn_ns.response(403, "Not Owner", error_response)
    @burn_ns.response(404, "Burn Not Found", error_response)
    @burn_ns.response(410, "Burn Gone", error_response)
    def delete(self, key):
        """
        Burn a file now

        Deletes the stored file and permanently retires the link. Owner only.
        """
        service = _burn_service()
        if service is None:
            return _service_unavailable()

        try:
            record = service.delete(key, caller_identity())
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error(f"delete burn {key}", e)

        return {
            "success": True,
            "message": "Burn deleted successfully",
            "burnId": record.burn_id,
        }, 200


@burn_ns.route("/<string:key>/download")
@burn_ns.param("key", "Burn id or short code")
class BurnDownload(Resource):
    """Consume a burn"""

    @burn_ns.doc("download_burn")
    @burn_ns.expect(download_request)
    @burn_ns.response(200, "Success", download_response)
    @burn_ns.response(401, "Password Required", error_response)
    @burn_ns.response(404, "Burn Not Found", error_response)
    @burn_ns.response(410, "Burn Gone", error_response)
    @burn_ns.response(503, "Service Unavailable", error_response)
    def post(self, key):
        """
        Download a burn

        Counts one download and returns a signed URL valid for a short time.
        When the last permitted download is taken the file is destroyed.
        """
        service = _burn_service()
        if service is None:
            return _service_unavailable()

        data = request.get_json(silent=True) or {}
        requester = RequesterInfo(
            ip=client_ip(),
            user_agent=request.headers.get("User-Agent", "unknown"),
            email=data.get("email"),
        )

        try:
            result = service.consume(key, data.get("password"), requester)
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error(f"download burn {key}", e)

        record = result.record
        remaining = result.remaining_downloads
        return {
            "downloadHandle": result.download_handle.to_dict(),
            "downloadUrl": result.download_handle.url,
            "fileName": record.file_name,
            "fileSize": record.file_size_bytes,
            "expiresIn": service.transfer_ttl_seconds,
            "remainingDownloads": "unlimited" if remaining is None else remaining,
            "willBeDeleted": result.will_be_deleted,
            "message": (
                "This was the final download. File has been deleted."
                if result.will_be_deleted else None
            ),
        }, 200


@burn_ns.route("/<string:key>/attempts")
@burn_ns.param("key", "Burn id or short code")
class BurnAttempts(Resource):
    """Download audit trail"""

    @burn_ns.doc("list_download_attempts")
    @burn_ns.response(200, "Success", attempts_response)
    @burn_ns.response(401, "Authentication Required", error_response)
    @burn_ns.response(403, "Not Owner", error_response)
    @burn_ns.response(404, "Burn Not Found", error_response)
    def get(self, key):
        """
        List every download attempt for one of the caller's burns
        """
        service = _burn_service()
        if service is None:
            return _service_unavailable()

        try:
            record_attempts = service.list_attempts(key, caller_identity())
        except DomainError as e:
            return error_response_for(e)
        except Exception as e:
            return _unexpected_error(f"list attempts for {key}", e)

        attempts = [
            {
                "attemptId": a.attempt_id,
                "attemptedAt": a.attempted_at.isoformat(),
                "requesterIp": a.requester_ip,
                "userAgent": a.user_agent,
                "requesterEmail": a.requester_email,
                "success": a.success,
                "failureReason": a.failure_reason,
            }
            for a in record_attempts
        ]
        burn_id = record_attempts[0].burn_id if record_attempts else key
        return {"burnId": burn_id, "attempts": attempts, "count": len(attempts)}, 200


# =============================================================================
# Blob Namespace - Signed transfers for the local storage backend
# =============================================================================

blob_ns = Namespace("blobs", description="Signed blob transfers (local storage only)")


def _local_storage() -> Optional[LocalFileStorageRepository]:
    container = getattr(current_app, "container", None)
    if container is None:
        return None
    storage = container.resolve(IBlobStorageRepository)
    return storage if isinstance(storage, LocalFileStorageRepository) else None


def _check_signature(storage: LocalFileStorageRepository, key: str):
    """Return an error response if the request is not validly signed, else None."""
    expires = request.args.get("expires", type=int)
    signature = request.args.get("signature", "")
    params = {name: request.args.get(name) for name in SIGNED_PARAMS}
    if expires is None or not storage.signer.validate_signature(
        request.method, key, expires, signature, params=params
    ):
        current_app.logger.warning(f"[BLOBS] Invalid or expired signature for {key}")
        return create_error_response(
            ErrorCategory.INVALID_SIGNATURE, "Invalid or expired signature", status_code=403
        )
    return None


@blob_ns.route("/<path:key>")
@blob_ns.param("key", "Storage key")
class Blob(Resource):
    """Upload or download a blob through a signed URL"""

    @blob_ns.doc("upload_blob")
    @blob_ns.response(201, "Stored")
    @blob_ns.response(403, "Invalid Signature", error_response)
    @blob_ns.response(404, "Local Storage Disabled", error_response)
    def put(self, key):
        """Store the request body under the signed key"""
        storage = _local_storage()
        if storage is None:
            return create_error_response(
                ErrorCategory.BURN_NOT_FOUND, "Local blob storage is not enabled", status_code=404
            )

        invalid = _check_signature(storage, key)
        if invalid:
            return invalid

        try:
            written = storage.save(key, request.stream)
        except ValueError as e:
            return create_error_response(ErrorCategory.INVALID_REQUEST, str(e), status_code=400)
        except Exception as e:
            return _unexpected_error(f"upload blob {key}", e)

        current_app.logger.info(f"[BLOBS] Stored {written} bytes at {key}")
        return {"key": key, "size": written}, 201

    @blob_ns.doc("download_blob")
    @blob_ns.response(200, "File content")
    @blob_ns.response(403, "Invalid Signature", error_response)
    @blob_ns.response(404, "Blob Not Found", error_response)
    def get(self, key):
        """Stream the blob stored under the signed key"""
        storage = _local_storage()
        if storage is None:
            return create_error_response(
                ErrorCategory.BURN_NOT_FOUND, "Local blob storage is not enabled", status_code=404
            )

        invalid = _check_signature(storage, key)
        if invalid:
            return invalid

        stream = storage.open(key)
        if stream is None:
            return create_error_response(
                ErrorCategory.BURN_GONE, "File no longer exists", status_code=410
            )

        return send_file(
            stream,
            as_attachment=True,
            download_name=request.args.get("filename") or key.rsplit("/", 1)[-1],
            mimetype=request.args.get("type") or DEFAULT_CONTENT_TYPE,
        )
