"""
Audit Domain

Append-only log of download attempts.
"""

from .entities import DownloadAttempt
from .repositories import DownloadAttemptRepository
from .services import AuditLog

__all__ = [
    'AuditLog',
    'DownloadAttempt',
    'DownloadAttemptRepository',
]
