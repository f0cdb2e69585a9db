"""
Burn Records Domain

Entities, value objects and repository interface for self-destructing
file records.
"""

from .credentials import CredentialGuard
from .entities import BurnRecord
from .identifiers import IdentifierGenerator, build_share_url
from .repositories import BurnRepository
from .value_objects import (
    ANONYMOUS_OWNER,
    BurnStatus,
    CallerIdentity,
    IncrementRejection,
    IncrementResult,
    RequesterInfo,
    RetireReason,
)

__all__ = [
    'BurnRecord',
    'BurnRepository',
    'BurnStatus',
    'CallerIdentity',
    'CredentialGuard',
    'IdentifierGenerator',
    'IncrementRejection',
    'IncrementResult',
    'RequesterInfo',
    'RetireReason',
    'ANONYMOUS_OWNER',
    'build_share_url',
]
