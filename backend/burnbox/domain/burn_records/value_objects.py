"""
Burn Record Value Objects

Immutable value objects for retirement reasons, display status,
caller identity and atomic increment outcomes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..quota.value_objects import Tier

ANONYMOUS_OWNER = "anonymous"


class RetireReason(Enum):
    """Why a burn record was retired. Set exactly once."""
    EXPIRED = "expired"
    MAX_DOWNLOADS = "max-downloads"
    MANUAL = "manual"


class BurnStatus(Enum):
    """
    Display status derived at read time.

    This is a projection of the record, never stored.
    """
    ACTIVE = "active"
    EXPIRED = "expired"
    MAX_DOWNLOADS = "max-downloads"
    DELETED = "deleted"

    @classmethod
    def for_reason(cls, reason: RetireReason) -> 'BurnStatus':
        return {
            RetireReason.EXPIRED: cls.EXPIRED,
            RetireReason.MAX_DOWNLOADS: cls.MAX_DOWNLOADS,
            RetireReason.MANUAL: cls.DELETED,
        }[reason]


@dataclass(frozen=True)
class CallerIdentity:
    """
    Identity and tier claim injected by the authorization collaborator.

    Trusted as-is. ``owner_id`` is None for unauthenticated callers.
    """
    owner_id: Optional[str] = None
    tier: Tier = Tier.FREE

    @classmethod
    def anonymous(cls) -> 'CallerIdentity':
        return cls(owner_id=None, tier=Tier.FREE)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.owner_id) and self.owner_id != ANONYMOUS_OWNER

    @property
    def effective_owner(self) -> str:
        """Owner id recorded on new burns."""
        return self.owner_id if self.is_authenticated else ANONYMOUS_OWNER


@dataclass(frozen=True)
class RequesterInfo:
    """Who is attempting a consume, for the audit trail."""
    ip: str = "unknown"
    user_agent: str = "unknown"
    email: Optional[str] = None


class IncrementRejection(Enum):
    """Why the atomic compare-and-increment refused to count a download."""
    NOT_FOUND = "not_found"
    RETIRED = "retired"
    EXPIRED = "expired"
    MAX_DOWNLOADS = "max-downloads"


@dataclass(frozen=True)
class IncrementResult:
    """
    Outcome of ``increment_download_if_allowed``.

    Either ``new_count`` is set, or ``rejection`` explains the refusal.
    ``retire_reason`` carries the stored reason when the record was
    already retired.
    """
    new_count: Optional[int] = None
    rejection: Optional[IncrementRejection] = None
    retire_reason: Optional[RetireReason] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None

    @classmethod
    def ok(cls, new_count: int) -> 'IncrementResult':
        return cls(new_count=new_count)

    @classmethod
    def rejected(
        cls, rejection: IncrementRejection, retire_reason: Optional[RetireReason] = None
    ) -> 'IncrementResult':
        return cls(rejection=rejection, retire_reason=retire_reason)

    def gone_reason(self) -> str:
        """Retirement reason a rejected consumer should be told."""
        if self.retire_reason is not None:
            return self.retire_reason.value
        if self.rejection == IncrementRejection.EXPIRED:
            return RetireReason.EXPIRED.value
        return RetireReason.MAX_DOWNLOADS.value
