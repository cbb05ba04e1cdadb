from .monitoring import MonitoringMiddleware

__all__ = ["MonitoringMiddleware"]
