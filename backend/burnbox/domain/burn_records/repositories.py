"""
Burn Record Repositories

Repository interface for burn record persistence.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entities import BurnRecord
from .value_objects import IncrementResult, RetireReason


class BurnRepository(ABC):
    """
    Abstract repository interface for burn records.

    Implementations translate store outages into TransientStoreError.
    """

    @abstractmethod
    def create(self, record: BurnRecord) -> None:
        """
        Persist a new burn record and its short code index.

        Args:
            record: BurnRecord to persist

        Raises:
            ConflictError: If the burn id or short code already exists
        """
        pass

    @abstractmethod
    def find_by_id_or_short_code(self, key: str) -> Optional[BurnRecord]:
        """
        Resolve a burn id or short code to a record.

        Args:
            key: Burn id or short code

        Returns:
            BurnRecord if found, None otherwise
        """
        pass

    @abstractmethod
    def short_code_exists(self, short_code: str) -> bool:
        pass

    @abstractmethod
    def increment_download_if_allowed(self, burn_id: str, now: datetime) -> IncrementResult:
        """
        Atomically count one download if the record is still consumable.

        The check and the increment happen as one indivisible step: the
        record must exist, not be retired, not be past its deadline and
        (unless unlimited) be below its ceiling.

        Args:
            burn_id: Burn identifier
            now: Current time used for the expiry check

        Returns:
            IncrementResult with the new count or the rejection reason
        """
        pass

    @abstractmethod
    def retire(self, burn_id: str, reason: RetireReason, now: datetime) -> bool:
        """
        Flip the retirement latch.

        Idempotent: the first reason wins and later calls change nothing.

        Returns:
            True only for the call that performed the transition
        """
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: str, limit: int) -> List[BurnRecord]:
        """
        List an owner's burns, newest first.

        Args:
            owner_id: Owner identifier
            limit: Maximum number of records

        Returns:
            List of BurnRecord
        """
        pass

    @abstractmethod
    def find_expired_active(self, now: datetime, limit: int) -> List[BurnRecord]:
        """
        Find unretired records whose deadline has passed.

        Args:
            now: Current time
            limit: Maximum number of records

        Returns:
            List of BurnRecord, oldest deadline first
        """
        pass
