"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .audit_event import InMemoryAuditEventRepository
from .offer import InMemoryDriverOfferRepository

__all__ = [
    "InMemoryDriverOfferRepository",
    "InMemoryAuditEventRepository",
]
