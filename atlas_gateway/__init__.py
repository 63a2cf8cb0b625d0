"""Voter Atlas data gateway: CORS-enabled proxies for public-data APIs."""

__version__ = "1.0.0"
