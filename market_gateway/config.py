"""
行情网关配置模块
支持从环境变量 / .env 读取配置，API Key 缺失时对应数据提供商自动停用
"""

from functools import lru_cache
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    """行情网关配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── 基础配置 ──────────────────────────────────────────
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "https://yourdomain.com"]
    )

    # ── 数据源 API Key（留空即停用该数据源） ────────────────
    ALPHA_VANTAGE_KEY: str = Field(default="")
    FRED_API_KEY: str = Field(default="")
    FMP_API_KEY: str = Field(default="")
    PROVIDER_TIMEOUT_SECONDS: float = Field(default=10.0)

    # ── 缓存配置 ──────────────────────────────────────────
    CACHE_TTL_MINUTES: float = Field(default=5)
    CACHE_SWEEP_INTERVAL_SECONDS: float = Field(default=3600)

    # ── 行情范围 ──────────────────────────────────────────
    CRYPTO_IDS: List[str] = Field(
        default_factory=lambda: [
            "bitcoin", "ethereum", "tether", "usd-coin", "binance-usd", "dai",
        ]
    )
    SNAPSHOT_EQUITY_SYMBOL: str = Field(default="^GSPC")

    # ── 兜底默认值（数据源全部不可用时使用） ────────────────
    GOLD_FALLBACK_PRICE: float = Field(default=2650.0)
    GOLD_YTD_CHANGE: float = Field(default=28.5)
    OIL_YTD_CHANGE: float = Field(default=-9.0)
    BUFFETT_INDICATOR_FALLBACK: float = Field(default=185.0)
    CHINA_BOND_YIELD: float = Field(default=1.71)
    BTC_CORRELATION: float = Field(default=0.72)

    # ── 日志配置 ──────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO")

    @property
    def CACHE_TTL_SECONDS(self) -> float:
        return self.CACHE_TTL_MINUTES * 60

    @property
    def IS_DEVELOPMENT(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT.lower() == "development"

    def provider_key_status(self) -> Dict[str, bool]:
        """各数据源 API Key 是否已配置"""
        return {
            "alphavantage": bool(self.ALPHA_VANTAGE_KEY),
            "fred": bool(self.FRED_API_KEY),
            "fmp": bool(self.FMP_API_KEY),
        }


@lru_cache
def get_settings() -> GatewaySettings:
    """获取全局配置（单例）"""
    return GatewaySettings()


settings = get_settings()
