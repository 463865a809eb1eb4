"""
Market Gateway 行情聚合网关
独立 FastAPI 应用程序入口

启动方式:
    uvicorn market_gateway.main:app --host 0.0.0.0 --port 3001
    python -m market_gateway.main
"""

import logging
import time
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from market_gateway import __version__
from market_gateway.config import settings
from market_gateway.layers.cache import TTLCache
from market_gateway.layers.providers import build_provider_chains
from market_gateway.models.response import ApiResponse
from market_gateway.routers import cache, health, market
from market_gateway.scheduler import CacheSweeper
from market_gateway.services.market_service import MarketAggregator

# ── 日志配置 ──────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── 生命周期管理 ──────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用启动/关闭生命周期钩子：创建并释放缓存、HTTP 客户端与清理任务"""
    logger.info("=" * 60)
    logger.info(f"🚀 Market Gateway v{__version__} 启动中")
    logger.info(f"   Port        : {settings.PORT}")
    logger.info(f"   Environment : {settings.ENVIRONMENT}")
    logger.info(f"   Cache TTL   : {settings.CACHE_TTL_MINUTES} 分钟")
    for name, configured in settings.provider_key_status().items():
        logger.info(f"   {name:<12}: {'✓' if configured else '✗'}")
    logger.info("=" * 60)

    client = httpx.AsyncClient(
        timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        headers={"User-Agent": f"market-gateway/{__version__}"},
    )
    cache_store = TTLCache(ttl_seconds=settings.CACHE_TTL_SECONDS)
    sweeper = CacheSweeper(cache_store, interval_seconds=settings.CACHE_SWEEP_INTERVAL_SECONDS)

    app.state.cache = cache_store
    app.state.sweeper = sweeper
    app.state.aggregator = MarketAggregator(
        cache_store, build_provider_chains(settings, client), settings
    )
    await sweeper.start()

    yield

    logger.info("🔄 行情网关正在关闭...")
    await sweeper.stop()
    cache_store.clear()
    await client.aclose()
    logger.info("✅ 行情网关已关闭")


# ── 应用实例 ──────────────────────────────────────────────
app = FastAPI(
    title="Market Gateway 行情聚合网关",
    description=(
        "聚合多家数据提供商的行情数据：\n"
        "- 🪙 加密货币（CoinGecko）\n"
        "- 📈 股票 / 指数（FMP → Alpha Vantage → Yahoo Finance）\n"
        "- 🛢️ 大宗商品（Alpha Vantage WTI / metals.live 黄金）\n"
        "- 🏦 宏观指标（FRED）\n\n"
        "短时 TTL 缓存，数据源失败或缺少 API Key 时自动降级。"
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS 中间件 ───────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── 请求计时中间件 ─────────────────────────────────────────
@app.middleware("http")
async def add_process_time(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = f"{(time.time() - start) * 1000:.1f}ms"
    return response


# ── 全局异常处理 ──────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"未处理的异常: {exc}", exc_info=True)
    message = str(exc) if settings.IS_DEVELOPMENT else "请求处理失败，请稍后重试"
    return JSONResponse(
        status_code=500,
        content=ApiResponse.fail(error="内部服务错误", message=message).model_dump(),
    )


# ── 注册路由 ──────────────────────────────────────────────
app.include_router(health.router)
app.include_router(market.router)
app.include_router(cache.router)


# ── 根路由 ───────────────────────────────────────────────
@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": "Market Gateway",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


# ── 直接运行入口 ──────────────────────────────────────────
if __name__ == "__main__":
    uvicorn.run(
        "market_gateway.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
