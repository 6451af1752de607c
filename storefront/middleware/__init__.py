"""Middleware modules for production-ready features"""
from storefront.middleware.monitoring import (
    MonitoringMiddleware,
    record_auth_failure,
    record_revocation_registry_size,
)

__all__ = [
    "MonitoringMiddleware",
    "record_auth_failure",
    "record_revocation_registry_size",
]
