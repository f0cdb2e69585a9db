"""
Redis Burn Repository Implementation

Concrete Redis-based implementation of BurnRepository.
Every state transition runs as a single Lua script so the check and the
write can never interleave with another request.

Key layout (before the global prefix):
    burn:<burn_id>          JSON record
    burn_short:<code>       burn_id
    burn_owner:<owner_id>   sorted set of burn_ids scored by creation time
    burn_expiry             sorted set of active burn_ids scored by deadline
"""

import json
import logging
from datetime import datetime
from typing import List, Optional

from burnbox.domain.burn_records.entities import BurnRecord
from burnbox.domain.burn_records.repositories import BurnRepository
from burnbox.domain.burn_records.value_objects import (
    IncrementRejection,
    IncrementResult,
    RetireReason,
)
from burnbox.domain.errors import ConflictError

logger = logging.getLogger(__name__)

EXPIRY_INDEX = "burn_expiry"

CREATE_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 or redis.call('EXISTS', KEYS[2]) == 1 then
    return 0
end
redis.call('SET', KEYS[1], ARGV[1])
redis.call('SET', KEYS[2], ARGV[2])
redis.call('ZADD', KEYS[3], ARGV[3], ARGV[2])
redis.call('ZADD', KEYS[4], ARGV[4], ARGV[2])
return 1
"""

INCREMENT_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return {'not_found', ''}
end

local record = cjson.decode(data)
if record['is_retired'] == true then
    local reason = record['retire_reason']
    if reason == nil or reason == cjson.null then
        reason = 'manual'
    end
    return {'retired', reason}
end

if tonumber(ARGV[1]) >= tonumber(record['expires_at_ts']) then
    return {'expired', ''}
end

local max_downloads = tonumber(record['max_downloads'])
local current = tonumber(record['current_downloads'])
if max_downloads ~= -1 and current >= max_downloads then
    return {'max-downloads', ''}
end

current = current + 1
record['current_downloads'] = current
redis.call('SET', KEYS[1], cjson.encode(record))
return {'ok', tostring(current)}
"""

RETIRE_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return 0
end

local record = cjson.decode(data)
if record['is_retired'] == true then
    return 0
end

record['is_retired'] = true
record['retire_reason'] = ARGV[1]
record['retired_at'] = ARGV[2]
redis.call('SET', KEYS[1], cjson.encode(record))
redis.call('ZREM', KEYS[2], ARGV[3])
return 1
"""


def _decode(value) -> str:
    return value.decode('utf-8') if isinstance(value, bytes) else str(value)


class RedisBurnRepository(BurnRepository):
    """
    Redis-based implementation of BurnRepository.

    Records are never removed; retirement only flips the latch and drops
    the record from the expiry index.
    """

    def __init__(self, redis_repository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository

    @staticmethod
    def _record_key(burn_id: str) -> str:
        return f"burn:{burn_id}"

    @staticmethod
    def _short_key(short_code: str) -> str:
        return f"burn_short:{short_code}"

    @staticmethod
    def _owner_key(owner_id: str) -> str:
        return f"burn_owner:{owner_id}"

    @staticmethod
    def _serialize(record: BurnRecord) -> dict:
        data = record.to_dict()
        # Numeric deadline for the Lua expiry check
        data["expires_at_ts"] = record.expires_at.timestamp()
        return data

    def _deserialize(self, data: Optional[dict]) -> Optional[BurnRecord]:
        if data is None:
            return None
        data.pop("expires_at_ts", None)
        try:
            return BurnRecord.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error deserializing burn {data.get('burn_id')}: {e}")
            return None

    def create(self, record: BurnRecord) -> None:
        created = self.redis_repo.eval_script(
            CREATE_SCRIPT,
            [
                self._record_key(record.burn_id),
                self._short_key(record.short_code),
                self._owner_key(record.owner_id),
                EXPIRY_INDEX,
            ],
            [
                json.dumps(self._serialize(record)),
                record.burn_id,
                record.created_at.timestamp(),
                record.expires_at.timestamp(),
            ],
        )
        if created != 1:
            raise ConflictError(
                f"Burn {record.burn_id} or short code {record.short_code} already exists"
            )

    def find_by_id_or_short_code(self, key: str) -> Optional[BurnRecord]:
        if not key:
            return None
        record = self._deserialize(self.redis_repo.get_json(self._record_key(key)))
        if record is not None:
            return record

        burn_id = self.redis_repo.get_str(self._short_key(key))
        if burn_id is None:
            return None
        return self._deserialize(self.redis_repo.get_json(self._record_key(burn_id)))

    def short_code_exists(self, short_code: str) -> bool:
        return self.redis_repo.exists(self._short_key(short_code))

    def increment_download_if_allowed(self, burn_id: str, now: datetime) -> IncrementResult:
        status, value = self.redis_repo.eval_script(
            INCREMENT_SCRIPT, [self._record_key(burn_id)], [now.timestamp()]
        )
        status, value = _decode(status), _decode(value)

        if status == "ok":
            return IncrementResult.ok(int(value))
        if status == "retired":
            return IncrementResult.rejected(IncrementRejection.RETIRED, RetireReason(value))
        return IncrementResult.rejected(IncrementRejection(status))

    def retire(self, burn_id: str, reason: RetireReason, now: datetime) -> bool:
        result = self.redis_repo.eval_script(
            RETIRE_SCRIPT,
            [self._record_key(burn_id), EXPIRY_INDEX],
            [reason.value, now.isoformat(), burn_id],
        )
        return result == 1

    def _get_many(self, burn_ids: List[str]) -> List[BurnRecord]:
        rows = self.redis_repo.get_many_json([self._record_key(b) for b in burn_ids])
        records = (self._deserialize(row) for row in rows)
        return [record for record in records if record is not None]

    def list_by_owner(self, owner_id: str, limit: int) -> List[BurnRecord]:
        redis = self.redis_repo
        with redis.translate_errors("list_by_owner"):
            ids = redis.redis.zrevrange(redis._make_key(self._owner_key(owner_id)), 0, limit - 1)
        return self._get_many([_decode(i) for i in ids])

    def find_expired_active(self, now: datetime, limit: int) -> List[BurnRecord]:
        redis = self.redis_repo
        with redis.translate_errors("find_expired_active"):
            ids = redis.redis.zrangebyscore(
                redis._make_key(EXPIRY_INDEX), "-inf", now.timestamp(), start=0, num=limit
            )
        records = self._get_many([_decode(i) for i in ids])
        return [r for r in records if not r.is_retired]
