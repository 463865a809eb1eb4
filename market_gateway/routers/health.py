"""健康检查路由"""

import time

from fastapi import APIRouter, Depends

from market_gateway import __version__
from market_gateway.dependencies import get_cache
from market_gateway.layers.cache import TTLCache

router = APIRouter(tags=["健康检查"])


@router.get("/health")
@router.get("/api/health")
async def health(cache: TTLCache = Depends(get_cache)):
    """服务健康检查，附带当前缓存条目数"""
    return {
        "success": True,
        "data": {
            "status": "ok",
            "version": __version__,
            "timestamp": int(time.time()),
            "service": "Market Gateway",
            "cache_size": len(cache),
        },
        "message": "服务运行正常",
    }


@router.get("/healthz")
async def healthz():
    """Kubernetes liveness probe"""
    return {"status": "ok"}
