"""
缓存管理路由
GET  /api/cache/stats     - 缓存统计（条目、键、进程内存）
POST /api/cache/clear     - 清空缓存
POST /api/cache/sweep     - 立即清理过期条目
"""

import logging

import psutil
from fastapi import APIRouter, Depends

from market_gateway.dependencies import get_cache, get_sweeper
from market_gateway.layers.cache import TTLCache
from market_gateway.models.response import ApiResponse
from market_gateway.scheduler import CacheSweeper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cache", tags=["缓存管理"])


def _memory_usage() -> dict:
    try:
        mem = psutil.Process().memory_info()
        return {"rss": mem.rss, "vms": mem.vms}
    except psutil.Error as exc:
        logger.debug(f"读取进程内存失败: {exc}")
        return {}


@router.get("/stats", response_model=ApiResponse)
async def cache_stats(cache: TTLCache = Depends(get_cache)):
    stats = cache.stats()
    stats["memory_usage"] = _memory_usage()
    return ApiResponse.ok(data=stats)


@router.post("/clear", response_model=ApiResponse)
async def clear_cache(cache: TTLCache = Depends(get_cache)):
    cleared = cache.clear()
    logger.info(f"缓存已清空: {cleared} 条")
    return ApiResponse.ok(data={"cleared": cleared, "size": len(cache)}, message="缓存已清空")


@router.post("/sweep", response_model=ApiResponse)
async def sweep_cache(sweeper: CacheSweeper = Depends(get_sweeper)):
    removed = sweeper.run_once()
    return ApiResponse.ok(data={"removed": removed}, message=f"已清理 {removed} 条过期缓存")
