"""
行情数据路由
GET /api/market-data        - 聚合快照（加密货币 / 股票 / 大宗商品 / 宏观）
GET /api/crypto             - 加密货币
GET /api/stocks/{symbol}    - 单只股票 / 指数报价
GET /api/commodities        - 大宗商品
GET /api/economic           - 宏观经济指标
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from market_gateway.dependencies import get_aggregator
from market_gateway.models.response import ApiResponse
from market_gateway.services.market_service import MarketAggregator

router = APIRouter(prefix="/api", tags=["行情数据"])


def _dump(value) -> ApiResponse:
    if value is None:
        return ApiResponse.no_data()
    if isinstance(value, dict):
        return ApiResponse.ok(data={k: v.model_dump(mode="json") for k, v in value.items()})
    return ApiResponse.ok(data=value.model_dump(mode="json"))


@router.get("/market-data", response_model=ApiResponse)
async def market_data(
    symbol: Optional[str] = Query(default=None, description="快照中的股票代码，默认 ^GSPC"),
    aggregator: MarketAggregator = Depends(get_aggregator),
):
    """聚合行情快照；单个数据域失败时该字段为 null"""
    snapshot = await aggregator.get_snapshot(symbol)
    return ApiResponse.ok(data=snapshot.model_dump(mode="json"), message="获取行情快照成功")


@router.get("/crypto", response_model=ApiResponse)
async def crypto(aggregator: MarketAggregator = Depends(get_aggregator)):
    return _dump(await aggregator.get_crypto())


@router.get("/stocks/{symbol}", response_model=ApiResponse)
async def stock_quote(symbol: str, aggregator: MarketAggregator = Depends(get_aggregator)):
    return _dump(await aggregator.get_equity(symbol))


@router.get("/commodities", response_model=ApiResponse)
async def commodities(aggregator: MarketAggregator = Depends(get_aggregator)):
    return _dump(await aggregator.get_commodities())


@router.get("/economic", response_model=ApiResponse)
async def economic(aggregator: MarketAggregator = Depends(get_aggregator)):
    return _dump(await aggregator.get_economic())
