"""
Adapters package for the catalog service.

Contains the HTTP client wrapper for the upstream catalog API. The adapter
only moves bytes: it reports network failures distinctly from non-success
statuses and leaves status interpretation to its callers.
"""

from .upstream_client import UpstreamClient, UpstreamNetworkError, UpstreamResponse

__all__ = ["UpstreamClient", "UpstreamNetworkError", "UpstreamResponse"]
