"""
Quota Value Objects

Immutable value objects for tiers and their ceilings with zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Sentinel for "no download ceiling" (pro tier only)
UNLIMITED_DOWNLOADS = -1

MIB = 1024 * 1024
GIB = 1024 * MIB


class Tier(Enum):
    """Caller tier enumeration."""
    FREE = "free"
    PRO = "pro"

    @classmethod
    def from_claim(cls, value: Optional[str]) -> 'Tier':
        """
        Parse a tier claim from the authorization collaborator.

        Unknown or missing claims fall back to the free tier.
        """
        if isinstance(value, Tier):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.FREE


@dataclass(frozen=True)
class TierLimits:
    """
    Ceilings for a single tier.

    A ``max_downloads`` of None means the tier has no download ceiling.
    """
    tier: Tier
    max_file_size_bytes: int
    max_ttl_seconds: int
    max_downloads: Optional[int] = None
    allows_unlimited_downloads: bool = False

    def __post_init__(self):
        """Validate limit values."""
        if self.max_file_size_bytes <= 0:
            raise ValueError(f"File size ceiling must be positive, got {self.max_file_size_bytes}")
        if self.max_ttl_seconds <= 0:
            raise ValueError(f"TTL ceiling must be positive, got {self.max_ttl_seconds}")
        if self.max_downloads is not None and self.max_downloads <= 0:
            raise ValueError(f"Download ceiling must be positive, got {self.max_downloads}")

    def describe_size(self) -> str:
        if self.max_file_size_bytes >= GIB and self.max_file_size_bytes % GIB == 0:
            return f"{self.max_file_size_bytes // GIB}GB"
        return f"{self.max_file_size_bytes // MIB}MB"

    def describe_ttl(self) -> str:
        """Up to one day is stated in hours, longer ceilings in whole days."""
        if self.max_ttl_seconds > 86400:
            return f"{self.max_ttl_seconds // 86400} days"
        if self.max_ttl_seconds < 3600:
            return f"{self.max_ttl_seconds // 60} minutes"
        hours = self.max_ttl_seconds // 3600
        return "1 hour" if hours == 1 else f"{hours} hours"


FREE_LIMITS = TierLimits(
    tier=Tier.FREE,
    max_file_size_bytes=100 * MIB,
    max_ttl_seconds=24 * 60 * 60,
    max_downloads=5,
)

PRO_LIMITS = TierLimits(
    tier=Tier.PRO,
    max_file_size_bytes=10 * GIB,
    max_ttl_seconds=30 * 24 * 60 * 60,
    allows_unlimited_downloads=True,
)


@dataclass(frozen=True)
class QuotaVerdict:
    """
    Outcome of a quota evaluation.

    When ``ok`` is False, ``ceiling`` names the breached limit
    ("file_size", "expires_in" or "max_downloads") and ``limit`` its value.
    """
    ok: bool
    ceiling: Optional[str] = None
    limit: Optional[int] = None
    message: Optional[str] = None

    @classmethod
    def allowed(cls) -> 'QuotaVerdict':
        return cls(ok=True)

    @classmethod
    def violation(cls, ceiling: str, limit: int, message: str) -> 'QuotaVerdict':
        return cls(ok=False, ceiling=ceiling, limit=limit, message=message)

    def __bool__(self) -> bool:
        return self.ok
