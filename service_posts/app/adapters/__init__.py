"""
Adapters package for the Posts Gateway.

Contains the HTTP client wrapping the upstream placeholder API. Adapters
encapsulate base URLs, response parsing and the mapping of transport
failures to shared errors. No retries are performed.
"""

from .placeholder_client import PlaceholderClient

__all__ = [
    "PlaceholderClient",
]
