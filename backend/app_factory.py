"""
Application Factory

Builds the BurnBox Flask app: Redis and Celery, the storage backend chosen
from the environment, the lifecycle service and the /api/v1 blueprint.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from burnbox.application.burn_service import BurnLifecycleService
from burnbox.application.dependency_container import DependencyContainer
from burnbox.application.event_publisher import EventPublisher
from burnbox.config.burn_config import BurnConfig
from burnbox.config.celery_config import make_celery
from burnbox.config.gcs_config import gcs_health_check, is_gcs_enabled
from burnbox.config.redis_config import (
    get_redis_repository,
    init_redis,
    redis_health_check,
)
from burnbox.domain.audit import AuditLog
from burnbox.domain.audit.repositories import DownloadAttemptRepository
from burnbox.domain.burn_records.credentials import CredentialGuard
from burnbox.domain.burn_records.identifiers import IdentifierGenerator
from burnbox.domain.burn_records.repositories import BurnRepository
from burnbox.domain.file_storage import SignedUrlService
from burnbox.domain.file_storage.storage_repository import IBlobStorageRepository
from burnbox.domain.quota import QuotaPolicy
from burnbox.infrastructure.redis_audit_repository import RedisDownloadAttemptRepository
from burnbox.infrastructure.redis_burn_repository import RedisBurnRepository
from burnbox.infrastructure.storage_factory import StorageFactory

logger = logging.getLogger(__name__)


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Create Flask app
    app = Flask(__name__)

    # Configure CORS
    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                "allow_headers": [
                    "Content-Type",
                    "Authorization",
                    "X-User-Id",
                    "X-User-Tier",
                ],
                "expose_headers": ["Content-Type"],
                "supports_credentials": True,
                "max_age": 3600,
            }
        },
    )

    # Initialize infrastructure
    _initialize_infrastructure(app)

    # Initialize services
    _initialize_services(app)

    # Register blueprints
    _register_blueprints(app, config)

    # Register health check endpoint
    _register_health_endpoint(app)

    return app


def _initialize_infrastructure(app: Flask) -> None:
    """
    Initialize infrastructure components (Redis, Celery).

    Args:
        app: Flask application
    """
    try:
        init_redis()
        logger.info("Redis initialized successfully")

        app.celery = make_celery(app)
        logger.info("Celery initialized successfully")
    except Exception as e:
        logger.warning(f"Could not initialize infrastructure: {e}")
        app.celery = None


def _initialize_services(app: Flask) -> None:
    """
    Initialize application services and attach them to the app through a
    DependencyContainer.

    API routes read ``current_app.burn_service``; tasks resolve services from
    ``flask_app.container``.

    Args:
        app: Flask application
    """
    try:
        container = DependencyContainer()
        burn_config = BurnConfig.from_env()

        # Infrastructure
        redis_repo = get_redis_repository()
        container.register_singleton(type(redis_repo), redis_repo)

        burn_repository = RedisBurnRepository(redis_repo)
        attempt_repository = RedisDownloadAttemptRepository(redis_repo)
        container.register_singleton(BurnRepository, burn_repository)
        container.register_singleton(DownloadAttemptRepository, attempt_repository)

        signed_url_service = SignedUrlService()
        container.register_singleton(SignedUrlService, signed_url_service)

        storage_repository = StorageFactory.create_storage(signer=signed_url_service)
        container.register_singleton(IBlobStorageRepository, storage_repository)

        # Events
        event_publisher = EventPublisher()
        container.setup_event_handlers(event_publisher)
        container.register_singleton(EventPublisher, event_publisher)

        # Domain services
        audit_log = AuditLog(attempt_repository)
        quota_policy = QuotaPolicy(burn_config.tier_limits())
        container.register_singleton(AuditLog, audit_log)
        container.register_singleton(QuotaPolicy, quota_policy)

        # Application services
        burn_service = BurnLifecycleService(
            burn_repository=burn_repository,
            blob_storage=storage_repository,
            audit_log=audit_log,
            event_publisher=event_publisher,
            quota_policy=quota_policy,
            identifiers=IdentifierGenerator(
                short_code_length=burn_config.short_code_length,
                max_attempts=burn_config.short_code_max_attempts,
            ),
            credentials=CredentialGuard(iterations=burn_config.password_hash_iterations),
            public_base_url=burn_config.public_base_url,
            transfer_ttl_seconds=burn_config.transfer_handle_ttl_seconds,
            reaper_batch_size=burn_config.reaper_batch_size,
        )
        container.register_singleton(BurnLifecycleService, burn_service)

        app.container = container
        app.burn_service = burn_service

        logger.info(f"Registered services: {', '.join(container.registered_names())}")

    except Exception as e:
        logger.warning(f"Could not initialize services: {e}")
        app.container = None
        app.burn_service = None


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from burnbox.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Args:
        app: Flask application instance

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "redis": "unknown",
        "storage": "unknown",
        "celery": "unknown",
    }

    # Check Redis connectivity
    try:
        if redis_health_check():
            health_status["redis"] = "connected"
        else:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["redis"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    # Check blob storage
    if is_gcs_enabled():
        if gcs_health_check():
            health_status["storage"] = "gcs"
        else:
            health_status["storage"] = "gcs unreachable"
            health_status["status"] = "degraded"
    else:
        health_status["storage"] = "local"

    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"
        health_status["status"] = "degraded"

    if getattr(app, "burn_service", None) is None:
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
