"""
数据获取层
按优先级依次调用数据提供商适配器，返回第一个成功的标准化结果。
单个适配器的失败（超时、网络错误、非 2xx、字段缺失）只在本层记录，不向上抛出。
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Union

import httpx

from market_gateway.layers.cache import make_cache_key

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """数据提供商返回了无法使用的响应"""


@dataclass(frozen=True)
class DataRequest:
    """一次逻辑数据请求：命名空间 + 可选参数（如股票代码）"""

    namespace: str
    symbol: Optional[str] = None

    @property
    def cache_key(self) -> str:
        if self.symbol is None:
            return make_cache_key(self.namespace)
        return make_cache_key(self.namespace, self.symbol)


@dataclass(frozen=True)
class ProviderFailure:
    source: str
    reason: str
    skipped: bool = False


@dataclass
class ChainResult:
    """提供商链执行结果；value 为 None 表示无数据"""

    value: Any = None
    source: Optional[str] = None
    failures: List[ProviderFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None


class ProviderAdapter(ABC):
    """
    数据提供商适配器基类

    子类设置 `source`，需要 API Key 时设置 `requires_key = True`，
    并实现 `fetch()` 把原始响应转换为标准结构。
    """

    source: str = ""
    requires_key: bool = False

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str = "",
        timeout: float = 10.0,
    ):
        self._client = client
        self._api_key = api_key
        self._timeout = timeout

    @property
    def enabled(self) -> bool:
        return not self.requires_key or bool(self._api_key)

    @abstractmethod
    async def fetch(self, request: DataRequest) -> Any:
        """请求数据源并返回标准化结果；响应不可用时抛出异常"""

    async def _get_json(self, url: str, **kwargs) -> Any:
        resp = await self._client.get(url, **kwargs)
        resp.raise_for_status()
        return resp.json()

    async def attempt(self, request: DataRequest) -> Union[Any, ProviderFailure]:
        """调用数据源，成功返回标准化结果，失败返回 ProviderFailure（不抛异常）"""
        if not self.enabled:
            logger.debug(f"跳过 {self.source}：未配置 API Key")
            return ProviderFailure(self.source, "未配置 API Key", skipped=True)
        try:
            result = await asyncio.wait_for(self.fetch(request), timeout=self._timeout)
        except asyncio.TimeoutError:
            reason = f"请求超时（{self._timeout}s）"
        except httpx.HTTPStatusError as exc:
            reason = f"HTTP {exc.response.status_code}"
        except httpx.HTTPError as exc:
            reason = f"网络错误: {exc!r}"
        except (KeyError, IndexError, TypeError, ValueError, ProviderError) as exc:
            reason = f"响应格式异常: {exc!r}"
        except Exception as exc:
            logger.error(f"{self.source} 适配器未知错误: {exc}", exc_info=True)
            reason = f"未知错误: {exc!r}"
        else:
            if result is None:
                reason = "响应为空"
            else:
                return result
        logger.warning(f"数据获取失败（来源：{self.source}，请求：{request.cache_key}）: {reason}")
        return ProviderFailure(self.source, reason)


class ProviderChain:
    """按优先级排列的适配器链，遇到第一个成功结果即停止"""

    def __init__(self, name: str, adapters: Sequence[ProviderAdapter]):
        self.name = name
        self.adapters = list(adapters)

    async def run(self, request: DataRequest) -> ChainResult:
        failures: List[ProviderFailure] = []
        for adapter in self.adapters:
            outcome = await adapter.attempt(request)
            if isinstance(outcome, ProviderFailure):
                failures.append(outcome)
                continue
            logger.info(f"{self.name} 数据获取成功（来源：{adapter.source}）")
            return ChainResult(value=outcome, source=adapter.source, failures=failures)

        logger.warning(
            f"{self.name} 所有数据源均不可用: "
            + ", ".join(f"{f.source}={f.reason}" for f in failures)
        )
        return ChainResult(failures=failures)
