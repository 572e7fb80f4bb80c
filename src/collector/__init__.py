"""
Keyword Opportunity Engine - Keyword Data Package

Thin async gateway to the Ahrefs API:
- Organic keywords for a competitor domain
- Matching terms for a batch of seed phrases
- SERP overview for the vendor's own rank
"""

from .client import AhrefsClient, AhrefsError

__all__ = [
    "AhrefsClient",
    "AhrefsError",
]
