"""In-memory response cache for LLM results.

Entries live for a fixed TTL (one hour by default) and the map is bounded by
``maxsize``. The cache is handed to the invoker through its constructor so a
test, or a deployment that wants no caching, can pass ``NullResponseCache``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0


def generate_cache_key(prompt: str, system_prompt: str) -> str:
    """Order-sensitive 32-bit rolling hash of ``prompt + system_prompt``.

    Not cryptographic: collisions are possible and tolerated.
    """
    value = 0
    for char in prompt + system_prompt:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return f"ai_{value}"


@dataclass
class CacheEntry:
    key: str
    data: Any
    timestamp: float


class ResponseCache:
    """TTL bounded cache of parsed LLM responses."""

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        maxsize: int = 512,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._timer = timer
        self._entries: TTLCache[str, CacheEntry] = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._timer() - entry.timestamp >= self.ttl:
            return None
        return entry.data

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(key=key, data=value, timestamp=self._timer())

    def clear(self) -> None:
        self._entries.clear()
        logger.info("AI response cache cleared")

    def stats(self) -> Dict[str, Any]:
        keys: List[str] = list(self._entries.keys())
        return {"size": len(keys), "keys": keys}

    def __len__(self) -> int:
        return len(self._entries)


class NullResponseCache:
    """Cache stand-in that never stores anything."""

    ttl = 0.0

    def get(self, key: str) -> Optional[Any]:
        return None

    def put(self, key: str, value: Any) -> None:
        return None

    def clear(self) -> None:
        return None

    def stats(self) -> Dict[str, Any]:
        return {"size": 0, "keys": []}

    def __len__(self) -> int:
        return 0
