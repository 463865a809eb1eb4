"""行情领域模型"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Quote(BaseModel):
    """数据提供商返回的标准化报价，NaN / inf 视为无效响应"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    price: float
    change_percent: float
    source: str
    market_cap: Optional[float] = None


class CommodityBasket(BaseModel):
    model_config = ConfigDict(frozen=True)

    oil: Optional[Quote] = None
    gold: Optional[Quote] = None

    def source_label(self) -> Optional[str]:
        sources = [q.source for q in (self.oil, self.gold) if q is not None]
        return "+".join(sources) if sources else None


class EconomicIndicators(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    buffett_indicator: float
    china_bond_yield: float
    btc_correlation: float
    source: str


class MarketSnapshot(BaseModel):
    """聚合行情快照，每次请求临时构建，不写入缓存"""

    crypto: Optional[Dict[str, Quote]] = None
    equity: Optional[Quote] = None
    commodities: Optional[CommodityBasket] = None
    economic: Optional[EconomicIndicators] = None
    timestamp: datetime
    sources: Dict[str, Optional[str]] = Field(default_factory=dict)
