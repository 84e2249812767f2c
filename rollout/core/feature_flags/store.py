"""Feature Store.

Key-value storage backends for encoded feature records:
- In-memory store
- Redis store

The store only sees opaque strings. Any object providing ``get``, ``set``,
``mget`` and ``delete`` with these semantics can be handed to
:class:`~rollout.core.feature_flags.client.Rollout`, including a plain
``redis.Redis(decode_responses=True)`` client.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import redis

logger = logging.getLogger(__name__)


class FeatureStore(ABC):
    """Abstract base class for feature storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the value stored at key, or None when absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value at key."""
        pass

    @abstractmethod
    def mget(self, keys: Sequence[str]) -> List[Optional[str]]:
        """Get several keys; result order matches ``keys``."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Missing keys are ignored."""
        pass


class InMemoryFeatureStore(FeatureStore):
    """Dict-backed store for tests and single-process use."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(data or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def mget(self, keys: Sequence[str]) -> List[Optional[str]]:
        with self._lock:
            return [self._data.get(key) for key in keys]

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)


class RedisFeatureStore(FeatureStore):
    """Redis-backed store. Connection and command errors propagate."""

    def __init__(self, client: Any):
        self.client = client

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "RedisFeatureStore":
        kwargs.setdefault("decode_responses", True)
        client = redis.Redis.from_url(url, **kwargs)
        logger.info(f"Redis feature store configured: {url}")
        return cls(client)

    @staticmethod
    def _decode(value: Any) -> Optional[str]:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def get(self, key: str) -> Optional[str]:
        return self._decode(self.client.get(key))

    def set(self, key: str, value: str) -> None:
        self.client.set(key, value)

    def mget(self, keys: Sequence[str]) -> List[Optional[str]]:
        if not keys:
            return []
        return [self._decode(value) for value in self.client.mget(list(keys))]

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def ping(self) -> bool:
        return bool(self.client.ping())


__all__ = ["FeatureStore", "InMemoryFeatureStore", "RedisFeatureStore"]
