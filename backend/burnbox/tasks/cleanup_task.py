"""
Cleanup Task

Celery beat task that retires expired burns nobody has touched and
deletes their blobs. Thin wrapper that delegates to BurnLifecycleService.
"""

import logging

from celery_app import celery_app

# Configure logging
logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="tasks.reap_expired_burns")
def reap_expired_burns(self):
    """
    Periodic reaper for expired burns.

    Runs on the Celery beat schedule (REAPER_INTERVAL_SECONDS). Burns that
    are consumed or deleted are retired inline; this task only covers the
    ones that expire without anyone asking for them again.

    Returns:
        dict: Reaper statistics with counts and errors. Never raises.
    """
    logger.info("Starting reaper task")

    stats = {
        "expired_burns_retired": 0,
        "blobs_deleted": 0,
        "errors": [],
    }

    try:
        # Services come from the DependencyContainer, never instantiated here
        from celery_app import flask_app
        from burnbox.application.burn_service import BurnLifecycleService

        container = flask_app.container
        if container is None:
            raise RuntimeError("Application services are not initialized")

        burn_service = container.resolve(BurnLifecycleService)
        stats = burn_service.reap_expired().to_dict()

        logger.info(
            f"Reaper completed - Retired: {stats['expired_burns_retired']}, "
            f"Blobs deleted: {stats['blobs_deleted']}, "
            f"Errors: {len(stats['errors'])}"
        )

    except Exception as e:
        error_msg = f"Reaper task failed: {e}"
        stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    return stats
