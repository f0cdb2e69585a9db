"""
Burn Configuration

Environment-based configuration for tier ceilings, identifiers,
credentials and transfer handles.
"""

import os
from dataclasses import dataclass
from typing import Dict

from burnbox.domain.quota.value_objects import (
    FREE_LIMITS,
    PRO_LIMITS,
    Tier,
    TierLimits,
)


@dataclass
class BurnConfig:
    """
    Burn lifecycle configuration from environment variables.

    Tier ceilings default to the built-in free and pro limits.
    """

    free_max_file_size: int
    free_max_expiration: int
    free_max_downloads: int
    pro_max_file_size: int
    pro_max_expiration: int

    public_base_url: str
    transfer_handle_ttl_seconds: int
    password_hash_iterations: int
    short_code_length: int
    short_code_max_attempts: int
    reaper_batch_size: int

    @classmethod
    def from_env(cls) -> 'BurnConfig':
        """
        Load configuration from environment variables.

        Returns:
            BurnConfig instance with loaded configuration
        """
        return cls(
            free_max_file_size=int(os.getenv('FREE_MAX_FILE_SIZE', FREE_LIMITS.max_file_size_bytes)),
            free_max_expiration=int(os.getenv('FREE_MAX_EXPIRATION', FREE_LIMITS.max_ttl_seconds)),
            free_max_downloads=int(os.getenv('FREE_MAX_DOWNLOADS', FREE_LIMITS.max_downloads)),
            pro_max_file_size=int(os.getenv('PRO_MAX_FILE_SIZE', PRO_LIMITS.max_file_size_bytes)),
            pro_max_expiration=int(os.getenv('PRO_MAX_EXPIRATION', PRO_LIMITS.max_ttl_seconds)),
            public_base_url=os.getenv('PUBLIC_BASE_URL', 'https://burn.snapitsoftware.com'),
            transfer_handle_ttl_seconds=int(os.getenv('TRANSFER_HANDLE_TTL_SECONDS', '3600')),
            password_hash_iterations=int(os.getenv('PASSWORD_HASH_ITERATIONS', '200000')),
            short_code_length=int(os.getenv('SHORT_CODE_LENGTH', '8')),
            short_code_max_attempts=int(os.getenv('SHORT_CODE_MAX_ATTEMPTS', '5')),
            reaper_batch_size=int(os.getenv('REAPER_BATCH_SIZE', '100')),
        )

    def tier_limits(self) -> Dict[Tier, TierLimits]:
        """Build the limits table for QuotaPolicy."""
        return {
            Tier.FREE: TierLimits(
                tier=Tier.FREE,
                max_file_size_bytes=self.free_max_file_size,
                max_ttl_seconds=self.free_max_expiration,
                max_downloads=self.free_max_downloads,
            ),
            Tier.PRO: TierLimits(
                tier=Tier.PRO,
                max_file_size_bytes=self.pro_max_file_size,
                max_ttl_seconds=self.pro_max_expiration,
                allows_unlimited_downloads=True,
            ),
        }
