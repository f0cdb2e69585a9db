"""
Audit Entities
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DownloadAttempt:
    """
    One consume attempt against a burn record, successful or not.

    Append-only: there is no API to change or remove an attempt.
    """
    attempt_id: str
    burn_id: str
    attempted_at: datetime
    requester_ip: str
    user_agent: str
    success: bool
    failure_reason: Optional[str] = None
    requester_email: Optional[str] = None

    @classmethod
    def record(
        cls,
        burn_id: str,
        attempted_at: datetime,
        requester_ip: str,
        user_agent: str,
        success: bool,
        failure_reason: Optional[str] = None,
        requester_email: Optional[str] = None,
    ) -> 'DownloadAttempt':
        return cls(
            attempt_id=str(uuid.uuid4()),
            burn_id=burn_id,
            attempted_at=attempted_at,
            requester_ip=requester_ip,
            user_agent=user_agent,
            success=success,
            failure_reason=None if success else failure_reason,
            requester_email=requester_email,
        )

    def to_dict(self) -> dict:
        return {
            "attempt_id": self.attempt_id,
            "burn_id": self.burn_id,
            "attempted_at": self.attempted_at.isoformat(),
            "requester_ip": self.requester_ip,
            "user_agent": self.user_agent,
            "success": self.success,
            "failure_reason": self.failure_reason,
            "requester_email": self.requester_email,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DownloadAttempt':
        return cls(
            attempt_id=data["attempt_id"],
            burn_id=data["burn_id"],
            attempted_at=datetime.fromisoformat(data["attempted_at"]),
            requester_ip=data.get("requester_ip") or "unknown",
            user_agent=data.get("user_agent") or "unknown",
            success=bool(data["success"]),
            failure_reason=data.get("failure_reason"),
            requester_email=data.get("requester_email"),
        )
