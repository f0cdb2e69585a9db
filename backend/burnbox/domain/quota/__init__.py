"""
Quota Domain

Tier ceilings for file size, lifetime and download count.
"""

from .services import QuotaPolicy
from .value_objects import (
    FREE_LIMITS,
    PRO_LIMITS,
    UNLIMITED_DOWNLOADS,
    QuotaVerdict,
    Tier,
    TierLimits,
)

__all__ = [
    'QuotaPolicy',
    'QuotaVerdict',
    'Tier',
    'TierLimits',
    'FREE_LIMITS',
    'PRO_LIMITS',
    'UNLIMITED_DOWNLOADS',
]
