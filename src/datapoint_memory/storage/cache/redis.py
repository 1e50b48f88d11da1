"""
Redis TTL cache implementation.

Shares deduplication and rate-limit state between several processes that
feed the same vector store. Expiry is delegated to Redis key TTLs.
"""

import json
import logging
from typing import Any, Optional

try:
    import redis
except ImportError:
    redis = None  # type: ignore

logger = logging.getLogger(__name__)


class RedisTTLCache:
    """
    Redis implementation of the TTLCache protocol.

    Values are JSON-encoded and written with ``SET key value PX ttl``, so
    Redis drops them once the window has passed. Memory is bounded by the
    TTLs rather than an entry count.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        default_ttl: Optional[float] = None,
        key_prefix: str = "datapoint-memory:",
        client: Optional[Any] = None,
    ):
        """
        Initialize the Redis cache.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            default_ttl: TTL in seconds for set() calls without one (None = no expiry)
            key_prefix: Prefix for Redis keys (default: "datapoint-memory:")
            client: Pre-built Redis client (overrides host/port/db)
        """
        if client is None:
            if redis is None:
                raise ImportError(
                    "redis package is required for RedisTTLCache. "
                    "Install with: pip install datapoint-memory[redis]"
                )
            client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

            try:
                client.ping()
            except redis.ConnectionError as e:
                logger.error(f"Failed to connect to Redis: {e}")
                raise

        self.client = client
        self._default_ttl = default_ttl
        self._key_prefix = key_prefix

        logger.info(f"RedisTTLCache initialized (prefix={key_prefix}, default_ttl={default_ttl})")

    def _get_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def has(self, key: str) -> bool:
        return bool(self.client.exists(self._get_key(key)))

    def get(self, key: str) -> Optional[Any]:
        raw = self.client.get(self._get_key(key))
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to deserialize cache value for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        px = max(1, int(ttl * 1000)) if ttl is not None else None
        self.client.set(self._get_key(key), json.dumps(value), px=px)

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(self._get_key(key)))

    def clear(self) -> None:
        keys = list(self.client.scan_iter(match=f"{self._key_prefix}*"))
        if keys:
            self.client.delete(*keys)
        logger.info(f"Cleared {len(keys)} cache keys")

    def size(self) -> int:
        return sum(1 for _ in self.client.scan_iter(match=f"{self._key_prefix}*"))
