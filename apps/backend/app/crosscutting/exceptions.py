# apps/backend/app/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores de moderación)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable (el cliente distingue "ya revisada" vs "falta motivo")
- error_id para correlación con logs
- message “humana” (sin filtrar secretos)

Taxonomía
---------
- ValidationError        : input inválido (motivo vacío, asientos fuera de rango)
- IllegalTransitionError : transición no definida para el estado actual
- ConflictError          : el check optimista falló (otro moderador ganó)
- NotFoundError          : oferta inexistente
- StorageError           : falla de persistencia

Validation/IllegalTransition son errores del caller y NUNCA se reintentan.
Conflict se resuelve re-leyendo el estado (nunca reintento ciego).

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  ModerationError + subclases

Responsabilidades:
  - Estandarizar errores internos que luego se mapean a HTTP
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a AppHTTPException)
  - domain/offer_state_machine.py (lanza IllegalTransition/Validation)
  - infrastructure/repositories/* (lanzan Conflict/NotFound/Storage)
===============================================================================
"""

from __future__ import annotations

from uuid import UUID, uuid4


class ModerationError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      ModerationError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + error_id + message

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "MODERATION_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class ValidationError(ModerationError):
    """Input inválido (motivo de rechazo vacío, asientos no positivos, etc.)."""

    error_code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, *, field: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


class IllegalTransitionError(ModerationError):
    """La transición pedida no existe para el estado actual."""

    error_code: str = "ILLEGAL_TRANSITION"

    def __init__(
        self,
        message: str,
        *,
        offer_id: UUID | None = None,
        current_status: str | None = None,
        requested_status: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.offer_id = offer_id
        self.current_status = current_status
        self.requested_status = requested_status


class ConflictError(ModerationError):
    """El check optimista falló: la oferta ya no está en el estado esperado."""

    error_code: str = "CONFLICT"

    def __init__(
        self,
        message: str,
        *,
        offer_id: UUID | None = None,
        expected_status: str | None = None,
        actual_status: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.offer_id = offer_id
        self.expected_status = expected_status
        self.actual_status = actual_status


class NotFoundError(ModerationError):
    """Recurso inexistente (oferta desconocida)."""

    error_code: str = "NOT_FOUND"

    def __init__(self, message: str, *, resource: str = "Offer", identifier: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.resource = resource
        self.identifier = identifier


class ForbiddenError(ModerationError):
    """El actor no es dueño del recurso (operaciones del conductor)."""

    error_code: str = "FORBIDDEN"


class StorageError(ModerationError):
    """Errores de persistencia (conexión, query, timeout, pool)."""

    error_code: str = "STORAGE_ERROR"
