"""Generic upstream proxy pipeline."""

from .adapter import Endpoint, ProviderAdapter, ProxyRequest
from .client import BoundedHttpClient
from .engine import ProxyEngine, ProxyOutcome

__all__ = [
    "Endpoint",
    "ProviderAdapter",
    "ProxyRequest",
    "BoundedHttpClient",
    "ProxyEngine",
    "ProxyOutcome",
]
