"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/__init__.py
===============================================================================

Name:
    Routers Package (HTTP)

Responsibilities:
    - Exponer routers segmentados por contexto para ser incluidos por el
      router principal.
    - Mantener importaciones limpias y explícitas.

Collaborators:
    - routers.offers (moderación)
    - routers.driver_offers
    - routers.public_offers
    - routers.admin

Notas:
    - Este archivo NO define endpoints. Solo re-exporta routers.
===============================================================================
"""

from .admin import router as admin_router
from .driver_offers import router as driver_offers_router
from .offers import router as offers_router
from .public_offers import router as public_offers_router

__all__ = [
    "admin_router",
    "driver_offers_router",
    "offers_router",
    "public_offers_router",
]
