"""
PostgreSQL Repository Implementations.

Production implementations using psycopg 3 and raw parameterized SQL.
"""

from .audit_event import PostgresAuditEventRepository
from .offer import PostgresDriverOfferRepository

__all__ = [
    "PostgresDriverOfferRepository",
    "PostgresAuditEventRepository",
]
