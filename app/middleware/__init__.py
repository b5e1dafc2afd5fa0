"""
Middleware package for security and request processing
"""
from .security import SecurityHeadersMiddleware
from .timeout import RequestTimeoutMiddleware

__all__ = [
    "SecurityHeadersMiddleware",
    "RequestTimeoutMiddleware",
]
