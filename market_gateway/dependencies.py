"""路由依赖：从应用状态取出生命周期内创建的组件"""

from fastapi import Request

from market_gateway.layers.cache import TTLCache
from market_gateway.scheduler import CacheSweeper
from market_gateway.services.market_service import MarketAggregator


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


def get_aggregator(request: Request) -> MarketAggregator:
    return request.app.state.aggregator


def get_sweeper(request: Request) -> CacheSweeper:
    return request.app.state.sweeper
