"""
Audit Services
"""

import logging
from datetime import datetime
from typing import List, Optional

from ..burn_records.value_objects import RequesterInfo
from .entities import DownloadAttempt
from .repositories import DownloadAttemptRepository

logger = logging.getLogger(__name__)


class AuditLog:
    """
    Records every consume attempt.

    Writes are best-effort: a failing audit store is logged and never
    changes the outcome of the consume that triggered it.
    """

    def __init__(self, repository: DownloadAttemptRepository):
        self.repository = repository

    def record_attempt(
        self,
        burn_id: str,
        requester: RequesterInfo,
        success: bool,
        failure_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[DownloadAttempt]:
        """
        Append one attempt to the burn's log.

        Args:
            burn_id: Burn identifier
            requester: Requester ip, user agent and email
            success: Whether the consume succeeded
            failure_reason: Reason recorded for refused attempts
            now: Attempt time

        Returns:
            The stored DownloadAttempt, or None if the write failed
        """
        attempt = DownloadAttempt.record(
            burn_id=burn_id,
            attempted_at=now or datetime.now().astimezone(),
            requester_ip=requester.ip,
            user_agent=requester.user_agent,
            success=success,
            failure_reason=failure_reason,
            requester_email=requester.email,
        )
        try:
            self.repository.append(attempt)
        except Exception as e:
            logger.error(f"Failed to record download attempt for burn {burn_id}: {e}")
            return None
        return attempt

    def attempts_for(self, burn_id: str, limit: int = 100) -> List[DownloadAttempt]:
        return self.repository.list_for_burn(burn_id, limit)
