"""统一 API 响应模型"""

from typing import Any, Optional
from pydantic import BaseModel

NO_DATA_MESSAGE = "暂无数据"


class ApiResponse(BaseModel):
    """网关响应封装；data 为 None 表示该数据域当前没有可用数据"""
    success: bool = True
    data: Optional[Any] = None
    message: str = ""
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "success") -> "ApiResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def no_data(cls, message: str = NO_DATA_MESSAGE) -> "ApiResponse":
        return cls(success=True, data=None, message=message)

    @classmethod
    def fail(cls, error: str, message: str = "failed") -> "ApiResponse":
        return cls(success=False, error=error, message=message)
