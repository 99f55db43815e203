"""app.infrastructure.services.retry

Name: Retry Helper with Exponential Backoff + Jitter

Qué es
------
Utilidad de resiliencia para escrituras de auditoría (y cualquier IO de
persistencia que el caller quiera reintentar). Implementa:
  - Clasificación de errores: **transient** (reintentar) vs **permanent** (fail-fast)
  - Decorator de `tenacity` para aplicar exponential backoff + jitter
  - Logging estructurado de cada intento (incluye request_id del contexto)

CRC (Component Card)
--------------------
Component: retry helper
Responsibilities:
  - Decidir qué errores son reintentables
  - Proveer un decorator estándar (tenacity) con backoff+jitter
  - Loguear intentos con contexto útil para debugging
Collaborators:
  - tenacity (motor de retry)
  - crosscutting.config.get_settings (attempts/delays)
  - app.audit.AuditTrail (consumidor principal)
Constraints:
  - Reintentar SOLO fallas de almacenamiento/red
  - NUNCA reintentar errores del caller (Validation, IllegalTransition,
    Conflict, NotFound): reintentarlos no cambia el resultado
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ...context import request_id_var
from ...crosscutting.config import get_settings
from ...crosscutting.exceptions import (
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from ...crosscutting.logger import logger

T = TypeVar("T")

# R: Errores del caller: el mismo input siempre da el mismo resultado.
PERMANENT_ERRORS: tuple[type[BaseException], ...] = (
    ValidationError,
    IllegalTransitionError,
    ConflictError,
    NotFoundError,
)

# R: Fallas de IO que pueden desaparecer en el próximo intento.
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    StorageError,
    TimeoutError,
    ConnectionError,
    OSError,
)


def is_transient_error(exception: BaseException) -> bool:
    """R: Decide si un error es transitorio (reintentar) o permanente (fail-fast).

    Reglas (en orden):
      1) Errores del caller: False.
      2) Errores de almacenamiento / timeouts / conexión: True.
      3) Errores de psycopg operacionales (conexión caída, serialización): True.
      4) Default: fail-fast (False).
    """
    if isinstance(exception, PERMANENT_ERRORS):
        return False

    if isinstance(exception, TRANSIENT_ERRORS):
        return True

    # R: psycopg.OperationalError cubre conexión perdida / admin shutdown.
    exception_name = type(exception).__name__.lower()
    if any(p in exception_name for p in ("operational", "timeout", "connection")):
        return True

    return False


def _log_retry(retry_state: RetryCallState) -> None:
    """R: Loguea cada intento antes de dormir (before_sleep)."""
    fn = getattr(retry_state, "fn", None)
    fn_name = getattr(fn, "__name__", "unknown")
    wait_time = (
        retry_state.next_action.sleep
        if getattr(retry_state, "next_action", None) is not None
        else 0
    )

    exc: Optional[BaseException] = None
    if getattr(retry_state, "outcome", None) is not None:
        exc = retry_state.outcome.exception()

    logger.warning(
        "Reintentando escritura",
        extra={
            "function": fn_name,
            "attempt": retry_state.attempt_number,
            "wait_seconds": round(float(wait_time), 2),
            "request_id": request_id_var.get() or None,
            "error": str(exc) if exc else None,
            "error_type": type(exc).__name__ if exc else None,
        },
    )


def create_retry_decorator(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """R: Crea un decorator `tenacity` con exponential backoff + jitter.

    Config:
      - stop: `stop_after_attempt(max_attempts)`
      - wait: `wait_exponential_jitter(initial=base_delay, max=max_delay)`
      - retry: solo si `is_transient_error(exception)`
      - reraise: True (propaga la última excepción original)
    """
    settings = get_settings()

    _max_attempts = (
        settings.retry_max_attempts if max_attempts is None else max_attempts
    )
    _base_delay = (
        settings.retry_base_delay_seconds if base_delay is None else float(base_delay)
    )
    _max_delay = (
        settings.retry_max_delay_seconds if max_delay is None else float(max_delay)
    )

    if _max_attempts <= 0:
        raise ValueError("max_attempts must be > 0")
    if _base_delay < 0:
        raise ValueError("base_delay must be >= 0")
    if _max_delay < 0:
        raise ValueError("max_delay must be >= 0")

    return retry(
        stop=stop_after_attempt(_max_attempts),
        wait=wait_exponential_jitter(
            initial=_base_delay,
            max=_max_delay,
            jitter=_base_delay,
        ),
        retry=retry_if_exception(is_transient_error),
        before_sleep=_log_retry,
        reraise=True,
    )
