"""
缓存层 – 进程内 TTL 缓存
键 → (值, 写入时间)。读取时校验新鲜度，过期条目由定时清理任务回收。
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


def make_cache_key(namespace: str, *parts: str) -> str:
    """生成规范化缓存键"""
    raw = ":".join([namespace] + list(parts))
    if len(raw) > 200:
        raw = namespace + ":" + hashlib.md5(raw.encode()).hexdigest()
    return raw


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


class TTLCache:
    """
    单一 TTL 的内存缓存

    - get 只返回未过期的值，过期条目不会在读取时删除
    - set 无条件覆盖旧条目
    - sweep 删除所有过期条目，返回删除数量
    不做 LRU / 容量限制，数据量由跟踪的品种数决定。
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at < self._ttl

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry, self._clock()):
            logger.debug(f"缓存已过期: {key}")
            return None
        logger.debug(f"缓存命中: {key}")
        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())
        logger.debug(f"缓存写入: {key}")

    def sweep(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if not self._is_fresh(e, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> dict:
        return {
            "size": len(self._entries),
            "keys": list(self._entries.keys()),
            "ttl_seconds": self._ttl,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
