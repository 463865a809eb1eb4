"""
数据流分层架构
  Layer 1 – Acquisition  : 提供商适配器与降级链
  Layer 2 – Cache        : 进程内 TTL 缓存
"""
