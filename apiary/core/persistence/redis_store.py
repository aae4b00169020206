"""
Redis persistence adapter.

Documents are stored as JSON strings under `<prefix><key>`. The client is
created from `Config.REDIS_URL` unless one is injected.
"""

from __future__ import annotations

from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

from apiary.core.logging.logger import get_logger
from apiary.core.persistence.base import JSONDocument, PersistenceAdapter
from apiary.modules.shared.exceptions import PersistenceError

logger = get_logger(__name__)


class RedisPersistence(PersistenceAdapter):
    name = "redis"

    def __init__(
        self,
        url: Optional[str] = None,
        key_prefix: str = "apiary:",
        client: Optional[Redis] = None,
    ) -> None:
        if client is None:
            if url is None:
                raise ValueError("RedisPersistence needs a url or a client")
            client = Redis.from_url(url, decode_responses=True)
        self._client = client
        self._prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def load(self, key: str) -> Optional[JSONDocument]:
        try:
            raw = self._client.get(self._key(key))
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
        except (RedisError, UnicodeDecodeError) as exc:
            logger.warning(
                "Redis load failed",
                extra={"storage_key": key, "error_type": type(exc).__name__},
            )
            raise PersistenceError("load", key, exc) from exc

        return self._decode(key, raw)

    def save(self, key: str, document: JSONDocument) -> None:
        payload = self._encode(key, document)
        try:
            self._client.set(self._key(key), payload)
        except RedisError as exc:
            logger.warning(
                "Redis save failed",
                extra={"storage_key": key, "error_type": type(exc).__name__},
            )
            raise PersistenceError("save", key, exc) from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except RedisError as exc:
            raise PersistenceError("delete", key, exc) from exc

    def close(self) -> None:
        self._client.close()
