"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields

from burnbox.api.v1 import api

# =============================================================================
# Request Models
# =============================================================================

create_burn_request = api.model(
    "CreateBurnRequest",
    {
        "fileName": fields.String(required=True, description="Original file name", example="report.pdf"),
        "fileSize": fields.Integer(required=True, description="File size in bytes", example=1048576),
        "contentType": fields.String(description="MIME type", example="application/pdf"),
        "expiresIn": fields.Integer(description="Lifetime in seconds", default=86400),
        "maxDownloads": fields.Integer(
            description="Download limit, -1 for unlimited (pro only)", default=5
        ),
        "password": fields.String(description="Optional password"),
        "ownerEmail": fields.String(description="Uploader email"),
        "customMessage": fields.String(description="Message shown to recipients"),
        "downloadNotifications": fields.Boolean(
            description="Notify the uploader on each download", default=True
        ),
        "watermark": fields.Boolean(description="Watermark downloads (pro only)", default=False),
    },
)

download_request = api.model(
    "DownloadRequest",
    {
        "password": fields.String(description="Password, if the burn has one"),
        "email": fields.String(description="Downloader email for the audit log"),
    },
)

# =============================================================================
# Response Models
# =============================================================================

transfer_handle = api.model(
    "TransferHandle",
    {
        "url": fields.String(description="Signed URL"),
        "method": fields.String(description="HTTP method", enum=["GET", "PUT"]),
        "expiresAt": fields.String(description="When the URL expires (ISO timestamp)"),
        "headers": fields.Raw(description="Headers the client must send"),
    },
)

create_burn_response = api.model(
    "CreateBurnResponse",
    {
        "burnId": fields.String(description="Burn identifier"),
        "shortLink": fields.String(description="Short code"),
        "uploadHandle": fields.Nested(transfer_handle),
        "uploadUrl": fields.String(description="Signed upload URL"),
        "shareUrl": fields.String(description="Link to hand to recipients"),
        "expiresAt": fields.String(description="Deadline (ISO timestamp)"),
        "maxDownloads": fields.Raw(description="Download limit or 'unlimited'"),
        "tier": fields.String(enum=["free", "pro"]),
    },
)

burn_metadata = api.model(
    "BurnMetadata",
    {
        "burnId": fields.String(),
        "shortLink": fields.String(),
        "fileName": fields.String(),
        "fileSize": fields.Integer(),
        "contentType": fields.String(),
        "uploadedAt": fields.String(),
        "expiresAt": fields.String(),
        "currentDownloads": fields.Integer(),
        "maxDownloads": fields.Raw(description="Download limit or 'unlimited'"),
        "requiresPassword": fields.Boolean(),
        "customMessage": fields.String(allow_null=True),
        "isExpired": fields.Boolean(),
        "isDeleted": fields.Boolean(),
        "tier": fields.String(),
        "watermark": fields.Boolean(),
        "downloadNotifications": fields.Boolean(),
        "isEncrypted": fields.Boolean(),
        "encryptionAlgorithm": fields.String(allow_null=True),
        "status": fields.String(enum=["active", "expired", "max-downloads", "deleted"]),
    },
)

burn_list_item = api.inherit(
    "BurnListItem",
    burn_metadata,
    {
        "deleteReason": fields.String(allow_null=True),
        "shareUrl": fields.String(),
    },
)

burn_list_response = api.model(
    "BurnListResponse",
    {
        "burns": fields.List(fields.Nested(burn_list_item)),
        "count": fields.Integer(),
        "userId": fields.String(),
        "tier": fields.String(),
    },
)

download_response = api.model(
    "DownloadResponse",
    {
        "downloadHandle": fields.Nested(transfer_handle),
        "downloadUrl": fields.String(description="Signed download URL"),
        "fileName": fields.String(),
        "fileSize": fields.Integer(),
        "expiresIn": fields.Integer(description="Seconds the URL stays valid"),
        "remainingDownloads": fields.Raw(description="Downloads left or 'unlimited'"),
        "willBeDeleted": fields.Boolean(),
        "message": fields.String(allow_null=True),
    },
)

delete_response = api.model(
    "DeleteResponse",
    {
        "success": fields.Boolean(),
        "message": fields.String(),
        "burnId": fields.String(),
    },
)

attempt_model = api.model(
    "DownloadAttempt",
    {
        "attemptId": fields.String(),
        "attemptedAt": fields.String(),
        "requesterIp": fields.String(),
        "userAgent": fields.String(),
        "requesterEmail": fields.String(allow_null=True),
        "success": fields.Boolean(),
        "failureReason": fields.String(allow_null=True),
    },
)

attempts_response = api.model(
    "DownloadAttemptsResponse",
    {
        "burnId": fields.String(),
        "attempts": fields.List(fields.Nested(attempt_model)),
        "count": fields.Integer(),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing message"),
        "action": fields.String(description="Suggested next step"),
        "detail": fields.String(description="Technical detail", allow_null=True),
        "reason": fields.String(description="Retirement reason for 410 responses", allow_null=True),
        "field": fields.String(description="Offending field for 400/403 responses", allow_null=True),
    },
)
