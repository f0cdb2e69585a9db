"""
Celery entry point for the reaper worker and beat scheduler.

    celery -A celery_app worker -B -Q default,reaper
"""

from app_factory import create_app

# Tasks resolve BurnLifecycleService from this app's container
flask_app = create_app()
celery_app = flask_app.celery

# Imported by name when the worker boots; a direct import here would be circular
celery_app.conf.imports = ("burnbox.tasks.cleanup_task",)
