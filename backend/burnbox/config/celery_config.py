"""
Celery Configuration

Celery runs a single periodic job here: the expiry reaper. Beat enqueues
it on its own queue so a slow pass never delays other work.
"""

import os

from celery import Celery
from kombu import Queue

REAPER_TASK = "tasks.reap_expired_burns"
REAPER_QUEUE = "reaper"


def celery_settings() -> dict:
    """
    Celery settings from environment variables.

    The reaper's hard time limit stays below its beat interval so two
    passes never overlap on a single worker.
    """
    broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    interval = float(os.getenv("REAPER_INTERVAL_SECONDS", 300))

    return {
        "broker_url": broker_url,
        "result_backend": os.getenv("CELERY_RESULT_BACKEND", broker_url),
        "task_serializer": "json",
        "result_serializer": "json",
        "accept_content": ["json"],
        "timezone": "UTC",
        "enable_utc": True,
        "task_acks_late": True,
        "worker_prefetch_multiplier": 1,
        "worker_concurrency": int(os.getenv("CELERY_WORKER_CONCURRENCY", 2)),
        "task_default_queue": "default",
        "task_queues": (
            Queue("default", routing_key="default"),
            Queue(REAPER_QUEUE, routing_key=REAPER_QUEUE),
        ),
        "task_routes": {REAPER_TASK: {"queue": REAPER_QUEUE}},
        "beat_schedule": {
            "reap-expired-burns": {"task": REAPER_TASK, "schedule": interval},
        },
        "task_time_limit": int(os.getenv("CELERY_TASK_TIME_LIMIT", max(interval - 20, 30))),
        "task_soft_time_limit": int(os.getenv("CELERY_TASK_SOFT_TIME_LIMIT", max(interval - 60, 20))),
        "result_expires": 3600,
    }


def make_celery(app):
    """
    Create the Celery app bound to a Flask application.

    Tasks run inside ``app.app_context()`` so they can reach the
    DependencyContainer the factory attached to the Flask app.
    """
    celery = Celery(app.import_name)
    celery.conf.update(celery_settings())

    class ContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery
