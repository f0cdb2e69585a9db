"""
Quota Services

Pure policy mapping a caller's tier to its size, lifetime and download ceilings.
"""

from typing import Dict, Optional

from .value_objects import (
    FREE_LIMITS,
    PRO_LIMITS,
    UNLIMITED_DOWNLOADS,
    QuotaVerdict,
    Tier,
    TierLimits,
)


class QuotaPolicy:
    """
    Domain service evaluating burn requests against tier ceilings.

    Deterministic and free of I/O; the limits table is injected so it can
    be driven from configuration.
    """

    def __init__(self, limits: Optional[Dict[Tier, TierLimits]] = None):
        """
        Initialize QuotaPolicy.

        Args:
            limits: Mapping of tier to ceilings, defaults to the built-in table
        """
        self.limits = limits or {Tier.FREE: FREE_LIMITS, Tier.PRO: PRO_LIMITS}

    def limits_for(self, tier: Tier) -> TierLimits:
        return self.limits.get(tier, self.limits[Tier.FREE])

    def evaluate(
        self,
        tier: Tier,
        file_size_bytes: int,
        requested_ttl_seconds: int,
        requested_max_downloads: int,
    ) -> QuotaVerdict:
        """
        Check a request against the ceilings of the caller's tier.

        Checks run in a fixed order (size, lifetime, downloads) and the first
        breach is reported.

        Args:
            tier: Caller tier
            file_size_bytes: Declared file size
            requested_ttl_seconds: Requested lifetime
            requested_max_downloads: Requested ceiling, or UNLIMITED_DOWNLOADS

        Returns:
            QuotaVerdict, ok or carrying the breached ceiling
        """
        limits = self.limits_for(tier)
        label = limits.tier.value

        if file_size_bytes > limits.max_file_size_bytes:
            return QuotaVerdict.violation(
                "file_size",
                limits.max_file_size_bytes,
                f"File size exceeds {label} tier limit of {limits.describe_size()}",
            )

        if requested_ttl_seconds > limits.max_ttl_seconds:
            return QuotaVerdict.violation(
                "expires_in",
                limits.max_ttl_seconds,
                f"Expiration time exceeds {label} tier limit of {limits.describe_ttl()}",
            )

        if requested_max_downloads == UNLIMITED_DOWNLOADS:
            if not limits.allows_unlimited_downloads:
                return QuotaVerdict.violation(
                    "max_downloads",
                    limits.max_downloads,
                    f"Unlimited downloads are not available on the {label} tier",
                )
        elif limits.max_downloads is not None and requested_max_downloads > limits.max_downloads:
            return QuotaVerdict.violation(
                "max_downloads",
                limits.max_downloads,
                f"Max downloads exceeds {label} tier limit of {limits.max_downloads}",
            )

        return QuotaVerdict.allowed()
