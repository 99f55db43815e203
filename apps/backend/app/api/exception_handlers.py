"""
===============================================================================
TARJETA CRC — app/api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir errores de moderación a respuestas HTTP RFC7807 con un code
    estable, para que el panel distinga “ya revisada” vs “falta motivo”
    vs “no existe”.
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos en errores no controlados.

Mapeo:
  ValidationError        -> 422 VALIDATION_ERROR
  IllegalTransitionError -> 409 ILLEGAL_TRANSITION
  ConflictError          -> 409 CONFLICT
  NotFoundError          -> 404 NOT_FOUND
  ForbiddenError         -> 403 FORBIDDEN
  StorageError           -> 503 STORAGE_ERROR
  (resto)                -> 500 INTERNAL_ERROR

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: ModerationError y derivadas
  - crosscutting.config.get_settings (para decidir nivel de detalle)
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
)
from ..crosscutting.exceptions import (
    ConflictError,
    ForbiddenError,
    IllegalTransitionError,
    ModerationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from ..crosscutting.logger import logger

# (tipo, status, code, nivel de log). El orden importa: subclases primero.
_MAPPING: tuple[tuple[type[ModerationError], int, ErrorCode, int], ...] = (
    (ValidationError, 422, ErrorCode.VALIDATION_ERROR, logging.INFO),
    (IllegalTransitionError, 409, ErrorCode.ILLEGAL_TRANSITION, logging.INFO),
    (ConflictError, 409, ErrorCode.CONFLICT, logging.INFO),
    (NotFoundError, 404, ErrorCode.NOT_FOUND, logging.INFO),
    (ForbiddenError, 403, ErrorCode.FORBIDDEN, logging.WARNING),
    (StorageError, 503, ErrorCode.STORAGE_ERROR, logging.ERROR),
)


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _details_for(exc: ModerationError) -> dict[str, Any]:
    """Detalles específicos por tipo (estado actual, campo inválido...)."""
    details: dict[str, Any] = {"error_id": exc.error_id}
    if isinstance(exc, ValidationError) and exc.field:
        details["field"] = exc.field
    if isinstance(exc, IllegalTransitionError):
        details["current_status"] = exc.current_status
        details["requested"] = exc.requested_status
    if isinstance(exc, ConflictError):
        details["expected_status"] = exc.expected_status
        details["current_status"] = exc.actual_status
    return {k: v for k, v in details.items() if v is not None}


async def moderation_error_handler(
    request: Request, exc: ModerationError
) -> JSONResponse:
    """Handler único para la jerarquía ModerationError."""
    status_code, code, level = 500, ErrorCode.INTERNAL_ERROR, logging.ERROR
    for exc_type, mapped_status, mapped_code, mapped_level in _MAPPING:
        if isinstance(exc, exc_type):
            status_code, code, level = mapped_status, mapped_code, mapped_level
            break

    request_id = _request_id_from(request)
    logger.log(
        level,
        "Error de moderación",
        extra={
            "error_code": code.value,
            "error_id": exc.error_id,
            "detail": exc.message,
            "status_code": status_code,
        },
    )

    detail = exc.message
    if status_code >= 500 and get_settings().is_production():
        detail = "Falla de persistencia. Reintentar más tarde."

    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=detail,
        errors=[{**_details_for(exc), "request_id": request_id}],
    )
    return await app_exception_handler(request, app_exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Errores de schema (pydantic) con el mismo formato RFC7807."""
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "msg": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    app_exc = AppHTTPException(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Request inválido",
        errors=errors,
    )
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler defensivo para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta genérica (evita filtrar internos).
    """
    request_id = _request_id_from(request)
    settings = get_settings()

    logger.error(
        "Excepción no controlada",
        exc_info=True,
        extra={"request_id": request_id, "error": str(exc)},
    )

    detail = str(exc) if not settings.is_production() else "Error interno."

    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=detail,
        errors=[{"request_id": request_id}],
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Importante:
      - AppHTTPException debe registrarse para respetar RFC7807.
      - Exception genérica se registra al final como fallback.
    """
    app.add_exception_handler(ModerationError, moderation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
