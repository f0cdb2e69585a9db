"""
Unit tests for the burn API endpoints.

Tests the API layer with a mocked BurnLifecycleService.
Validates request parsing, response formatting and status codes.
"""

from datetime import timedelta

import pytest
from flask import Flask
from flask_restx import Api

from burnbox.api.v1.namespaces import blob_ns, burn_ns
from burnbox.application.results import BurnListResult, ConsumeResult, CreateBurnResult
from burnbox.domain.audit.entities import DownloadAttempt
from burnbox.domain.burn_records.value_objects import CallerIdentity, RetireReason
from burnbox.domain.errors import (
    BurnGoneError,
    BurnNotFoundError,
    ForbiddenError,
    QuotaExceededError,
    TransientStoreError,
    UnauthorizedError,
    ValidationError,
)
from burnbox.domain.file_storage.value_objects import TransferHandle
from burnbox.domain.quota.value_objects import QuotaVerdict, Tier
from tests.fixtures import BASE_TIME, create_burn_record

HANDLE_EXPIRY = BASE_TIME + timedelta(hours=1)


@pytest.fixture
def flask_app(mock_burn_service):
    """Create Flask app for testing."""
    app = Flask(__name__)
    app.config['TESTING'] = True

    api = Api(app, version='1.0', title='BurnBox API', doc='/doc')
    api.add_namespace(burn_ns, path='/api/v1/burns')
    api.add_namespace(blob_ns, path='/api/v1/blobs')

    app.burn_service = mock_burn_service
    app.container = None
    return app


@pytest.fixture
def client(flask_app):
    """Create test client."""
    return flask_app.test_client()


def _handle(method="GET"):
    return TransferHandle(url=f"https://blobs.test/x?{method}", method=method, expires_at=HANDLE_EXPIRY)


# =============================================================================
# POST /api/v1/burns/
# =============================================================================

class TestCreateBurn:
    def test_create_returns_201(self, client, mock_burn_service):
        record = create_burn_record(max_downloads=5)
        mock_burn_service.create.return_value = CreateBurnResult(
            record=record, upload_handle=_handle("PUT"), share_url="https://burn.test/d/AbCd1234"
        )

        response = client.post('/api/v1/burns/', json={
            "fileName": "report.pdf",
            "fileSize": 1024,
            "contentType": "application/pdf",
            "expiresIn": 3600,
            "maxDownloads": 5,
            "password": "hunter2",
        }, headers={"X-User-Id": "user-1", "X-User-Tier": "pro"})

        assert response.status_code == 201
        data = response.get_json()
        assert data["burnId"] == "burn-1"
        assert data["shortLink"] == "AbCd1234"
        assert data["uploadUrl"] == "https://blobs.test/x?PUT"
        assert data["uploadHandle"]["method"] == "PUT"
        assert data["shareUrl"] == "https://burn.test/d/AbCd1234"
        assert data["maxDownloads"] == 5

        burn_request, caller = mock_burn_service.create.call_args[0]
        assert burn_request.password == "hunter2"
        assert burn_request.expires_in_seconds == 3600
        assert caller == CallerIdentity(owner_id="user-1", tier=Tier.PRO)

    def test_create_applies_defaults(self, client, mock_burn_service):
        mock_burn_service.create.return_value = CreateBurnResult(
            record=create_burn_record(), upload_handle=_handle("PUT"), share_url="u"
        )

        client.post('/api/v1/burns/', json={"fileName": "a.txt", "fileSize": 10})

        burn_request, caller = mock_burn_service.create.call_args[0]
        assert burn_request.expires_in_seconds == 86400
        assert burn_request.max_downloads == 5
        assert burn_request.content_type == "application/octet-stream"
        assert burn_request.password is None
        assert burn_request.download_notifications is True
        assert burn_request.watermark is False
        assert not caller.is_authenticated

    def test_create_forwards_sharing_options(self, client, mock_burn_service):
        mock_burn_service.create.return_value = CreateBurnResult(
            record=create_burn_record(), upload_handle=_handle("PUT"), share_url="u"
        )

        client.post('/api/v1/burns/', json={
            "fileName": "a.txt",
            "fileSize": 10,
            "watermark": True,
            "downloadNotifications": False,
        }, headers={"X-User-Id": "user-pro", "X-User-Tier": "pro"})

        burn_request, _ = mock_burn_service.create.call_args[0]
        assert burn_request.watermark is True
        assert burn_request.download_notifications is False

    def test_unlimited_is_labelled(self, client, mock_burn_service):
        mock_burn_service.create.return_value = CreateBurnResult(
            record=create_burn_record(max_downloads=-1, tier=Tier.PRO),
            upload_handle=_handle("PUT"),
            share_url="u",
        )

        response = client.post('/api/v1/burns/', json={"fileName": "a", "fileSize": 1, "maxDownloads": -1})

        assert response.get_json()["maxDownloads"] == "unlimited"

    def test_quota_violation_is_403(self, client, mock_burn_service):
        verdict = QuotaVerdict.violation("file_size", 100, "File size exceeds free tier limit of 100MB")
        mock_burn_service.create.side_effect = QuotaExceededError(verdict)

        response = client.post('/api/v1/burns/', json={"fileName": "a", "fileSize": 10 ** 12})

        assert response.status_code == 403
        data = response.get_json()
        assert data["error"] == "quota_exceeded"
        assert data["field"] == "file_size"

    def test_forwarded_ip_is_recorded(self, client, mock_burn_service):
        mock_burn_service.create.return_value = CreateBurnResult(
            record=create_burn_record(), upload_handle=_handle("PUT"), share_url="u"
        )

        client.post(
            '/api/v1/burns/',
            json={"fileName": "a", "fileSize": 1},
            headers={"X-Forwarded-For": "198.51.100.1, 10.0.0.1"},
        )

        burn_request, _ = mock_burn_service.create.call_args[0]
        assert burn_request.uploader_ip == "198.51.100.1"

    def test_service_unavailable(self, client, flask_app):
        flask_app.burn_service = None

        response = client.post('/api/v1/burns/', json={"fileName": "a", "fileSize": 1})

        assert response.status_code == 503


# =============================================================================
# GET /api/v1/burns/<key>
# =============================================================================

class TestGetBurn:
    def test_returns_metadata_without_password_hash(self, client, mock_burn_service):
        mock_burn_service.inspect.return_value = create_burn_record(
            password_hash="pbkdf2:sha256:1$s$d", max_downloads=3, current_downloads=1
        )

        response = client.get('/api/v1/burns/AbCd1234')

        assert response.status_code == 200
        data = response.get_json()
        assert data["requiresPassword"] is True
        assert data["currentDownloads"] == 1
        assert data["maxDownloads"] == 3
        assert data["status"] == "active"
        assert "passwordHash" not in data
        assert "pbkdf2" not in response.get_data(as_text=True)

    def test_reports_pro_features_and_flags(self, client, mock_burn_service):
        mock_burn_service.inspect.return_value = create_burn_record(tier=Tier.PRO, watermark=True)
        mock_burn_service.now.return_value = BASE_TIME

        data = client.get('/api/v1/burns/AbCd1234').get_json()

        assert data["watermark"] is True
        assert data["isEncrypted"] is True
        assert data["encryptionAlgorithm"] == "AES-256-GCM"
        assert data["downloadNotifications"] is True
        assert data["isExpired"] is False
        assert data["isDeleted"] is False

    def test_not_found(self, client, mock_burn_service):
        mock_burn_service.inspect.side_effect = BurnNotFoundError("missing")

        assert client.get('/api/v1/burns/nope').status_code == 404

    def test_gone_carries_reason(self, client, mock_burn_service):
        mock_burn_service.inspect.side_effect = BurnGoneError("expired")

        response = client.get('/api/v1/burns/AbCd1234')

        assert response.status_code == 410
        assert response.get_json()["reason"] == "expired"

    def test_unexpected_error_is_500(self, client, mock_burn_service):
        mock_burn_service.inspect.side_effect = RuntimeError("boom")

        response = client.get('/api/v1/burns/AbCd1234')

        assert response.status_code == 500
        assert response.get_json()["error"] == "system_error"


# =============================================================================
# POST /api/v1/burns/<key>/download
# =============================================================================

class TestDownload:
    def test_final_download(self, client, mock_burn_service):
        record = create_burn_record(current_downloads=1)
        mock_burn_service.consume.return_value = ConsumeResult(
            record=record, download_handle=_handle(), remaining_downloads=0, will_be_deleted=True
        )

        response = client.post(
            '/api/v1/burns/AbCd1234/download',
            json={"password": "pw", "email": "bob@example.com"},
            headers={"User-Agent": "pytest-agent"},
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["downloadUrl"] == "https://blobs.test/x?GET"
        assert data["remainingDownloads"] == 0
        assert data["willBeDeleted"] is True
        assert data["expiresIn"] == 3600
        assert "final download" in data["message"]

        key, password, requester = mock_burn_service.consume.call_args[0]
        assert key == "AbCd1234"
        assert password == "pw"
        assert requester.user_agent == "pytest-agent"
        assert requester.email == "bob@example.com"

    def test_unlimited_remaining(self, client, mock_burn_service):
        mock_burn_service.consume.return_value = ConsumeResult(
            record=create_burn_record(max_downloads=-1),
            download_handle=_handle(),
            remaining_downloads=None,
            will_be_deleted=False,
        )

        data = client.post('/api/v1/burns/AbCd1234/download').get_json()

        assert data["remainingDownloads"] == "unlimited"
        assert data["message"] is None

    @pytest.mark.parametrize("error,status", [
        (UnauthorizedError("Password required"), 401),
        (BurnGoneError("max-downloads"), 410),
        (BurnNotFoundError("missing"), 404),
        (TransientStoreError("down"), 503),
        (ValidationError("password must be a string", field="password"), 400),
    ])
    def test_errors(self, client, mock_burn_service, error, status):
        mock_burn_service.consume.side_effect = error

        response = client.post('/api/v1/burns/AbCd1234/download', json={})

        assert response.status_code == status


# =============================================================================
# DELETE /api/v1/burns/<key>
# =============================================================================

class TestDeleteBurn:
    def test_delete(self, client, mock_burn_service):
        mock_burn_service.delete.return_value = create_burn_record()

        response = client.delete('/api/v1/burns/AbCd1234', headers={"X-User-Id": "user-1"})

        assert response.status_code == 200
        assert response.get_json() == {
            "success": True,
            "message": "Burn deleted successfully",
            "burnId": "burn-1",
        }
        key, caller = mock_burn_service.delete.call_args[0]
        assert caller.owner_id == "user-1"

    def test_forbidden(self, client, mock_burn_service):
        mock_burn_service.delete.side_effect = ForbiddenError("not yours")

        assert client.delete('/api/v1/burns/AbCd1234', headers={"X-User-Id": "x"}).status_code == 403

    def test_unauthenticated(self, client, mock_burn_service):
        mock_burn_service.delete.side_effect = UnauthorizedError("Authentication required")

        assert client.delete('/api/v1/burns/AbCd1234').status_code == 401


# =============================================================================
# GET /api/v1/burns/
# =============================================================================

class TestListBurns:
    def test_list(self, client, mock_burn_service):
        deleted = create_burn_record(burn_id="b2", short_code="Zz", retire_reason=RetireReason.MANUAL)
        mock_burn_service.list_burns.return_value = BurnListResult(
            burns=[deleted], owner_id="user-1", tier="free", as_of=BASE_TIME
        )

        response = client.get(
            '/api/v1/burns/?status=deleted&limit=10', headers={"X-User-Id": "user-1"}
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["count"] == 1
        assert data["userId"] == "user-1"
        item = data["burns"][0]
        assert item["status"] == "deleted"
        assert item["isDeleted"] is True
        assert item["deleteReason"] == "manual"
        assert item["shareUrl"] == "https://burn.test/d/Zz"
        caller, status, limit = mock_burn_service.list_burns.call_args[0]
        assert (status, limit) == ("deleted", 10)

    def test_non_numeric_limit(self, client, mock_burn_service):
        response = client.get('/api/v1/burns/?limit=lots', headers={"X-User-Id": "user-1"})

        assert response.status_code == 400
        mock_burn_service.list_burns.assert_not_called()

    def test_requires_identity(self, client, mock_burn_service):
        mock_burn_service.list_burns.side_effect = UnauthorizedError("Authentication required")

        assert client.get('/api/v1/burns/').status_code == 401


# =============================================================================
# GET /api/v1/burns/<key>/attempts
# =============================================================================

def test_list_attempts(client, mock_burn_service):
    attempt = DownloadAttempt.record(
        burn_id="burn-1", attempted_at=BASE_TIME, requester_ip="1.2.3.4",
        user_agent="ua", success=False, failure_reason="password-incorrect",
    )
    mock_burn_service.list_attempts.return_value = [attempt]

    response = client.get('/api/v1/burns/AbCd1234/attempts', headers={"X-User-Id": "user-1"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["burnId"] == "burn-1"
    assert data["attempts"][0]["failureReason"] == "password-incorrect"
