"""
Market Gateway 行情聚合网关
聚合多家第三方数据源的行情，提供 HTTP 接口

架构分层：
  数据获取层 (Acquisition)  → 按优先级调用数据提供商，失败自动降级到下一个
  缓存层     (Cache)        → 进程内 TTL 缓存 + 定时清理
  聚合服务   (Aggregator)   → 按数据域读穿缓存，组装行情快照
"""

__version__ = "1.0.0"
