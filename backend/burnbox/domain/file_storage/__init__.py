"""
File Storage Domain

Blob store contract and transfer handles.
"""

from .signed_url_service import SignedUrlService
from .storage_repository import IBlobStorageRepository
from .value_objects import TransferHandle

__all__ = [
    'IBlobStorageRepository',
    'SignedUrlService',
    'TransferHandle',
]
