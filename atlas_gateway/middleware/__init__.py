"""Middleware for the gateway."""

from .cors import CORSHeadersMiddleware
from .request_logging import RequestLoggingMiddleware

__all__ = ["CORSHeadersMiddleware", "RequestLoggingMiddleware"]
