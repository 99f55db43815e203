"""
============================================================
TARJETA CRC
============================================================
Class: app.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (Postgres e InMemory)
  en un único punto de importación.
- Mantener una API estable para el composition root (container.py).

Collaborators:
- Repositorios Postgres (SQL crudo)
- Repositorios InMemory (tests / dev local)
============================================================
"""

# ---------------------------
# In-memory implementations
# Usados para tests unitarios rápidos (APP_ENV=test).
# No persisten datos tras reiniciar la app.
# ---------------------------
from .in_memory import InMemoryAuditEventRepository, InMemoryDriverOfferRepository

# ---------------------------
# Postgres implementations
# Persistencia real; el CAS de transiciones vive en el UPDATE condicional.
# ---------------------------
from .postgres import PostgresAuditEventRepository, PostgresDriverOfferRepository

__all__ = [
    # Postgres
    "PostgresDriverOfferRepository",
    "PostgresAuditEventRepository",
    # In-memory
    "InMemoryDriverOfferRepository",
    "InMemoryAuditEventRepository",
]
