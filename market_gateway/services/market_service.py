"""
行情聚合服务
组合缓存层与提供商链：命中缓存直接返回，未命中时按链获取并写入缓存。
失败结果不会写入缓存；兜底常量会写入缓存，避免 TTL 内反复请求已失效的数据源。
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from market_gateway.config import GatewaySettings
from market_gateway.layers.acquisition import DataRequest
from market_gateway.layers.cache import TTLCache
from market_gateway.layers.providers import DomainChains
from market_gateway.models.market import (
    CommodityBasket,
    EconomicIndicators,
    MarketSnapshot,
    Quote,
)

logger = logging.getLogger(__name__)

CRYPTO_NS = "crypto"
STOCK_NS = "stock"
COMMODITIES_NS = "commodities"
ECONOMIC_NS = "economic"

FALLBACK_SOURCE = "fallback"


class MarketAggregator:
    """按数据域聚合行情"""

    def __init__(self, cache: TTLCache, chains: DomainChains, settings: GatewaySettings):
        self._cache = cache
        self._chains = chains
        self._settings = settings

    async def _read_through(
        self,
        request: DataRequest,
        loader: Callable[[DataRequest], Awaitable[Optional[Any]]],
    ) -> Optional[Any]:
        key = request.cache_key
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        value = await loader(request)
        if value is not None:
            self._cache.set(key, value)
        return value

    # ── 单数据域 ──────────────────────────────────────────

    async def get_crypto(self) -> Optional[Dict[str, Quote]]:
        async def load(request: DataRequest):
            return (await self._chains.crypto.run(request)).value

        return await self._read_through(DataRequest(CRYPTO_NS), load)

    async def get_equity(self, symbol: str) -> Optional[Quote]:
        async def load(request: DataRequest):
            return (await self._chains.equity.run(request)).value

        return await self._read_through(DataRequest(STOCK_NS, symbol.upper()), load)

    async def get_commodities(self) -> CommodityBasket:
        async def load(request: DataRequest):
            oil, gold = await asyncio.gather(
                self._chains.oil.run(DataRequest(COMMODITIES_NS, "oil")),
                self._chains.gold.run(DataRequest(COMMODITIES_NS, "gold")),
            )
            gold_quote = gold.value
            if gold_quote is None:
                gold_quote = Quote(
                    price=self._settings.GOLD_FALLBACK_PRICE,
                    change_percent=self._settings.GOLD_YTD_CHANGE,
                    source=FALLBACK_SOURCE,
                )
            return CommodityBasket(oil=oil.value, gold=gold_quote)

        return await self._read_through(DataRequest(COMMODITIES_NS), load)

    async def get_economic(self) -> EconomicIndicators:
        async def load(request: DataRequest):
            result = await self._chains.buffett.run(request)
            if result.ok:
                buffett, source = result.value, result.source
            else:
                buffett, source = self._settings.BUFFETT_INDICATOR_FALLBACK, FALLBACK_SOURCE
            return EconomicIndicators(
                buffett_indicator=buffett,
                china_bond_yield=self._settings.CHINA_BOND_YIELD,
                btc_correlation=self._settings.BTC_CORRELATION,
                source=source,
            )

        return await self._read_through(DataRequest(ECONOMIC_NS), load)

    # ── 聚合快照 ──────────────────────────────────────────

    async def get_snapshot(self, symbol: Optional[str] = None) -> MarketSnapshot:
        """并发获取四个数据域；任一数据域异常只会使该字段为空"""
        symbol = symbol or self._settings.SNAPSHOT_EQUITY_SYMBOL
        results = await asyncio.gather(
            self.get_crypto(),
            self.get_equity(symbol),
            self.get_commodities(),
            self.get_economic(),
            return_exceptions=True,
        )
        names = ("crypto", "equity", "commodities", "economic")
        values = {}
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error(f"快照数据域 {name} 获取异常: {result!r}", exc_info=result)
                result = None
            values[name] = result

        crypto = values["crypto"]
        equity = values["equity"]
        commodities = values["commodities"]
        economic = values["economic"]
        return MarketSnapshot(
            crypto=crypto,
            equity=equity,
            commodities=commodities,
            economic=economic,
            timestamp=datetime.now(tz=timezone.utc),
            sources={
                "crypto": _first_source(crypto),
                "equity": equity.source if equity else None,
                "commodities": commodities.source_label() if commodities else None,
                "economic": economic.source if economic else None,
            },
        )


def _first_source(basket: Optional[Dict[str, Quote]]) -> Optional[str]:
    if not basket:
        return None
    return next(iter(basket.values())).source
