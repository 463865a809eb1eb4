"""
缓存定时清理任务
由应用生命周期持有：启动时 start()，关闭时 stop()。
漏掉一次清理只会推迟内存回收，过期判断在读取时已经完成。
"""

import asyncio
import logging
from typing import Optional

from market_gateway.layers.cache import TTLCache

logger = logging.getLogger(__name__)


class CacheSweeper:
    def __init__(self, cache: TTLCache, interval_seconds: float = 3600):
        self._cache = cache
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        removed = self._cache.sweep()
        logger.info(f"过期缓存已清理: {removed} 条，当前 {len(self._cache)} 条")
        return removed

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
            logger.info(f"缓存清理任务已启动（间隔 {self._interval}s）")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("缓存清理任务已停止")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.run_once()
            except Exception as exc:
                logger.error(f"缓存清理失败: {exc}", exc_info=True)
