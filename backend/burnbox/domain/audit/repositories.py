"""
Audit Repositories

Repository interface for the append-only download attempt log.
"""

from abc import ABC, abstractmethod
from typing import List

from .entities import DownloadAttempt


class DownloadAttemptRepository(ABC):
    """Abstract repository interface for download attempts."""

    @abstractmethod
    def append(self, attempt: DownloadAttempt) -> None:
        """
        Append an attempt to the burn's log.

        Args:
            attempt: DownloadAttempt to store
        """
        pass

    @abstractmethod
    def list_for_burn(self, burn_id: str, limit: int = 100) -> List[DownloadAttempt]:
        """
        List the most recent attempts for a burn in the order they were recorded.

        Args:
            burn_id: Burn identifier
            limit: Maximum number of attempts; older ones are dropped first

        Returns:
            List of DownloadAttempt, oldest first
        """
        pass
