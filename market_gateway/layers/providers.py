"""
数据提供商适配器
CoinGecko / Financial Modeling Prep / Alpha Vantage / Yahoo Finance (yfinance) /
metals.live / FRED，各自把响应整理为统一结构。
"""

import asyncio
import math
from dataclasses import dataclass
from typing import Dict, List

import httpx
import yfinance as yf

from market_gateway.config import GatewaySettings
from market_gateway.layers.acquisition import (
    DataRequest,
    ProviderAdapter,
    ProviderChain,
    ProviderError,
)
from market_gateway.models.market import Quote

COINGECKO_URL = "https://api.coingecko.com/api/v3/simple/price"
FMP_QUOTE_URL = "https://financialmodelingprep.com/api/v3/quote/{symbol}"
ALPHAVANTAGE_URL = "https://www.alphavantage.co/query"
METALS_GOLD_URL = "https://api.metals.live/v1/spot/gold"
FRED_OBSERVATIONS_URL = "https://api.stlouisfed.org/fred/series/observations"

BUFFETT_INDICATOR_SERIES = "DDDM01USA156NWDB"


# ── 加密货币 ──────────────────────────────────────────────

class CoinGeckoAdapter(ProviderAdapter):
    """CoinGecko simple/price，无需 API Key"""

    source = "coingecko"

    def __init__(self, client: httpx.AsyncClient, coin_ids: List[str], timeout: float = 10.0):
        super().__init__(client, timeout=timeout)
        self._coin_ids = list(coin_ids)

    async def fetch(self, request: DataRequest) -> Dict[str, Quote]:
        data = await self._get_json(
            COINGECKO_URL,
            params={
                "ids": ",".join(self._coin_ids),
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_market_cap": "true",
            },
        )
        basket = {}
        for coin_id, item in data.items():
            basket[coin_id] = Quote(
                price=float(item["usd"]),
                change_percent=float(item.get("usd_24h_change") or 0.0),
                market_cap=item.get("usd_market_cap"),
                source=self.source,
            )
        if not basket:
            raise ProviderError("CoinGecko 返回空数据")
        return basket


# ── 股票 ──────────────────────────────────────────────────

class FMPQuoteAdapter(ProviderAdapter):
    """Financial Modeling Prep 实时报价"""

    source = "fmp"
    requires_key = True

    async def fetch(self, request: DataRequest) -> Quote:
        data = await self._get_json(
            FMP_QUOTE_URL.format(symbol=request.symbol),
            params={"apikey": self._api_key},
        )
        row = data[0]
        return Quote(
            price=float(row["price"]),
            change_percent=float(row["changesPercentage"]),
            source=self.source,
        )


class AlphaVantageQuoteAdapter(ProviderAdapter):
    """Alpha Vantage GLOBAL_QUOTE"""

    source = "alphavantage"
    requires_key = True

    async def fetch(self, request: DataRequest) -> Quote:
        data = await self._get_json(
            ALPHAVANTAGE_URL,
            params={
                "function": "GLOBAL_QUOTE",
                "symbol": request.symbol,
                "apikey": self._api_key,
            },
        )
        quote = data["Global Quote"]
        return Quote(
            price=float(quote["05. price"]),
            change_percent=float(quote["10. change percent"].rstrip("%")),
            source=self.source,
        )


class YahooQuoteAdapter(ProviderAdapter):
    """Yahoo Finance（通过 yfinance），作为股票报价的最后兜底"""

    source = "yahoo"

    async def fetch(self, request: DataRequest) -> Quote:
        price, previous_close = await asyncio.to_thread(self._fast_info, request.symbol)
        if not previous_close:
            raise ProviderError(f"{request.symbol} 缺少昨收价")
        return Quote(
            price=float(price),
            change_percent=(price - previous_close) / previous_close * 100,
            source=self.source,
        )

    @staticmethod
    def _fast_info(symbol: str):
        info = yf.Ticker(symbol).fast_info
        return info.last_price, info.previous_close


# ── 大宗商品 ──────────────────────────────────────────────

class AlphaVantageWTIAdapter(ProviderAdapter):
    """Alpha Vantage WTI 原油日线，涨跌幅使用配置的年内涨跌"""

    source = "alphavantage"
    requires_key = True

    def __init__(self, client, api_key: str = "", timeout: float = 10.0, ytd_change: float = 0.0):
        super().__init__(client, api_key=api_key, timeout=timeout)
        self._ytd_change = ytd_change

    async def fetch(self, request: DataRequest) -> Quote:
        data = await self._get_json(
            ALPHAVANTAGE_URL,
            params={"function": "WTI", "interval": "daily", "apikey": self._api_key},
        )
        latest = data["data"][0]
        return Quote(
            price=float(latest["value"]),
            change_percent=self._ytd_change,
            source=self.source,
        )


class MetalsLiveGoldAdapter(ProviderAdapter):
    """metals.live 黄金现货价，涨跌幅使用配置的年内涨跌"""

    source = "metals.live"

    def __init__(self, client, timeout: float = 10.0, ytd_change: float = 0.0):
        super().__init__(client, timeout=timeout)
        self._ytd_change = ytd_change

    async def fetch(self, request: DataRequest) -> Quote:
        data = await self._get_json(METALS_GOLD_URL)
        # 接口有时返回 [{"gold": 2650.1}] 形式
        if isinstance(data, list):
            data = data[0]
        price = data.get("price", data.get("gold"))
        if price is None:
            raise ProviderError("metals.live 响应缺少价格字段")
        return Quote(price=float(price), change_percent=self._ytd_change, source=self.source)


# ── 宏观经济 ──────────────────────────────────────────────

class FredSeriesAdapter(ProviderAdapter):
    """FRED 序列最新观测值"""

    source = "fred"
    requires_key = True

    def __init__(self, client, api_key: str = "", timeout: float = 10.0,
                 series_id: str = BUFFETT_INDICATOR_SERIES):
        super().__init__(client, api_key=api_key, timeout=timeout)
        self._series_id = series_id

    async def fetch(self, request: DataRequest) -> float:
        data = await self._get_json(
            FRED_OBSERVATIONS_URL,
            params={
                "series_id": self._series_id,
                "api_key": self._api_key,
                "file_type": "json",
                "limit": 1,
                "sort_order": "desc",
            },
        )
        # FRED 用 "." 表示缺失值，float() 会抛 ValueError
        value = float(data["observations"][0]["value"])
        if not math.isfinite(value):
            raise ProviderError(f"FRED {self._series_id} 返回非有限值: {value}")
        return value


# ── 提供商链装配 ──────────────────────────────────────────

@dataclass
class DomainChains:
    crypto: ProviderChain
    equity: ProviderChain
    oil: ProviderChain
    gold: ProviderChain
    buffett: ProviderChain


def build_provider_chains(settings: GatewaySettings, client: httpx.AsyncClient) -> DomainChains:
    """按配置装配各数据域的提供商链（顺序即优先级）"""
    timeout = settings.PROVIDER_TIMEOUT_SECONDS
    return DomainChains(
        crypto=ProviderChain("crypto", [
            CoinGeckoAdapter(client, settings.CRYPTO_IDS, timeout=timeout),
        ]),
        equity=ProviderChain("equity", [
            FMPQuoteAdapter(client, settings.FMP_API_KEY, timeout),
            AlphaVantageQuoteAdapter(client, settings.ALPHA_VANTAGE_KEY, timeout),
            YahooQuoteAdapter(client, timeout=timeout),
        ]),
        oil=ProviderChain("oil", [
            AlphaVantageWTIAdapter(
                client, settings.ALPHA_VANTAGE_KEY, timeout, ytd_change=settings.OIL_YTD_CHANGE
            ),
        ]),
        gold=ProviderChain("gold", [
            MetalsLiveGoldAdapter(client, timeout, ytd_change=settings.GOLD_YTD_CHANGE),
        ]),
        buffett=ProviderChain("buffett_indicator", [
            FredSeriesAdapter(client, settings.FRED_API_KEY, timeout),
        ]),
    )
