"""
===============================================================================
TARJETA CRC — router.py (Router raíz / Composición)
===============================================================================

Responsabilidades:
  - Definir el APIRouter raíz que se incluye en FastAPI (app.include_router).
  - Centralizar responses RFC7807 para OpenAPI.
  - Componer routers por contexto (moderación/conductor/público/admin).

Colaboradores:
  - crosscutting.error_responses.OPENAPI_ERROR_RESPONSES
  - routers.* (sub-routers por feature)

Notas:
  - Este router se incluye desde app/api/main.py con prefix="/v1".
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter

from ....crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from .routers import (
    admin_router,
    driver_offers_router,
    offers_router,
    public_offers_router,
)


def build_router() -> APIRouter:
    """
    Construye el router raíz v1.

    Se puede invocar en tests para verificar que incluye todo.
    """
    api_router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)

    api_router.include_router(offers_router)
    api_router.include_router(driver_offers_router)
    api_router.include_router(public_offers_router)
    api_router.include_router(admin_router)

    return api_router


router = build_router()

__all__ = ["router", "build_router"]
