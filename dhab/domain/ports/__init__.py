from .health_check import IHealthCheckService

__all__ = ["IHealthCheckService"]
