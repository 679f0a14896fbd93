"""
Middleware wrapped around the request handler.

Usage:
    from shorturl.middleware import MiddlewarePipeline, LoggingMiddleware

    pipeline = MiddlewarePipeline().add(LoggingMiddleware())
    handle = pipeline.wrap(handler.handle)
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
