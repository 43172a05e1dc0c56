"""
Valkey (Redis protocol) store for session records.

Sessions are JSON documents under "session:<token>" keys with a TTL. The
connection URL comes from Vault, and the client pings on construction so a
bad URL stops startup instead of failing the first request.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """JSON key/value access to Valkey through redis-py."""

    def __init__(self, url: str):
        """
        Raises:
            redis.ConnectionError: If the server is unreachable
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("Connected to Valkey")

    def ping(self) -> bool:
        """Raises redis.ConnectionError if the server is gone."""
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        return self._client.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        if expire_seconds is None:
            self._client.set(key, value)
        else:
            self._client.setex(key, expire_seconds, value)

    def delete(self, key: str) -> bool:
        """True if the key existed."""
        return self._client.delete(key) > 0

    def set_json(self, key: str, value: dict | list, expire_seconds: int | None = None) -> None:
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key: str) -> dict | list | None:
        """
        Decoded value, or None if the key is missing.

        Raises:
            ValueError: If the stored value is not JSON
        """
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}") from e

    def close(self) -> None:
        self._client.close()
