"""
Redis Audit Repository Implementation

Stores download attempts as an append-only Redis list per burn.
"""

import json
import logging
from typing import List

from burnbox.domain.audit.entities import DownloadAttempt
from burnbox.domain.audit.repositories import DownloadAttemptRepository

logger = logging.getLogger(__name__)


class RedisDownloadAttemptRepository(DownloadAttemptRepository):
    """Redis-based implementation of DownloadAttemptRepository."""

    def __init__(self, redis_repository):
        self.redis_repo = redis_repository
        self.key_prefix = "burn_attempts"

    def _key(self, burn_id: str) -> str:
        return self.redis_repo._make_key(f"{self.key_prefix}:{burn_id}")

    def append(self, attempt: DownloadAttempt) -> None:
        with self.redis_repo.translate_errors("append attempt"):
            self.redis_repo.redis.rpush(self._key(attempt.burn_id), json.dumps(attempt.to_dict()))

    def list_for_burn(self, burn_id: str, limit: int = 100) -> List[DownloadAttempt]:
        with self.redis_repo.translate_errors("list attempts"):
            rows = self.redis_repo.redis.lrange(self._key(burn_id), -limit, -1)

        attempts = []
        for row in rows:
            try:
                attempts.append(DownloadAttempt.from_dict(json.loads(row)))
            except (KeyError, ValueError) as e:
                logger.error(f"Skipping unreadable attempt for burn {burn_id}: {e}")
        return attempts
