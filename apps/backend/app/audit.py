"""
===============================================================================
TARJETA CRC — app/audit.py (Trail de auditoría)
===============================================================================

Responsabilidades:
  - Construir eventos de auditoría con formato consistente
    (actor/action/target/metadata + ip/user-agent del request).
  - Enmascarar PII del payload ANTES de persistir (domain.masking).
  - append(): escritura con reintentos (tenacity); si se agotan -> StorageError.
  - record(): “best-effort” para los casos de uso. Si append() falla:
      * log ERROR estructurado
      * métrica de fallas
      * el evento queda en un backlog acotado para reintentarse luego
    Nunca lanza excepción: la transición ya commiteada es la fuente de verdad.

Colaboradores:
  - app.domain.audit.AuditEvent
  - app.domain.repositories.AuditEventRepository
  - app.domain.masking.mask_payload
  - app.infrastructure.services.retry.create_retry_decorator
  - app.context.get_client_info
  - app.crosscutting.metrics (fallas, descartes, tamaño del backlog)

Decisiones de seguridad:
  - Las claves sensibles (phone, email, token...) nunca llegan al storage.
  - "reason" se guarda en claro (los motivos de rechazo no son PII).
  - Metadata se sanitiza a valores serializables; lo no serializable se stringifica.
===============================================================================
"""

from __future__ import annotations

import dataclasses
from collections import deque
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from threading import Lock
from typing import Any, Deque
from uuid import UUID, uuid4

from .context import get_client_info
from .crosscutting.exceptions import StorageError
from .crosscutting.logger import logger
from .crosscutting.metrics import (
    record_audit_dropped,
    record_audit_write_failure,
    set_audit_pending,
)
from .domain.audit import AuditEvent
from .domain.masking import mask_payload
from .domain.repositories import AuditEventRepository
from .infrastructure.services.retry import create_retry_decorator

# Claves que se guardan sin enmascarar.
UNMASKED_KEYS: tuple[str, ...] = ("reason",)


def _sanitize(value: Any) -> Any:
    """
    Convierte valores a tipos serializables para JSON.
    - primitives -> OK
    - dict/list -> sanitiza recursivamente
    - Decimal/UUID/fechas/enums -> string
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, Enum):
        return _sanitize(value.value)

    if isinstance(value, (datetime, date)):
        return value.isoformat()

    if isinstance(value, dict):
        return {str(k): _sanitize(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [_sanitize(v) for v in value]

    if isinstance(value, (Decimal, UUID)):
        return str(value)

    return str(value)


class AuditTrail:
    """
    Trail append-only de acciones sobre ofertas.

    Thread-safe: el backlog se protege con un lock propio.
    """

    def __init__(
        self,
        repository: AuditEventRepository,
        *,
        max_attempts: int | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
        pending_max: int = 1000,
    ) -> None:
        self._repository = repository
        self._write = create_retry_decorator(
            max_attempts=max_attempts, base_delay=base_delay, max_delay=max_delay
        )(self._write_once)
        self._pending: Deque[AuditEvent] = deque()
        self._pending_lock = Lock()
        self._pending_max = max(pending_max, 0)

    # ------------------------------------------------------------------
    # Construcción
    # ------------------------------------------------------------------
    def build_event(
        self,
        *,
        action: str,
        actor: str,
        target_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
        target_version: int | None = None,
    ) -> AuditEvent:
        """
        Evento listo para persistir (metadata ya enmascarada).

        created_at se fija acá: es la hora de la acción aunque la escritura
        se demore (reintentos / backlog).
        """
        ip, user_agent = get_client_info()
        return AuditEvent(
            id=uuid4(),
            actor=actor,
            action=action,
            target_id=target_id,
            metadata=self._mask(metadata or {}),
            ip=ip,
            user_agent=user_agent,
            created_at=datetime.now(timezone.utc),
            target_version=target_version,
        )

    @staticmethod
    def _mask(metadata: dict[str, Any]) -> dict[str, Any]:
        return mask_payload(_sanitize(metadata), preserve=UNMASKED_KEYS)

    # ------------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------------
    def _write_once(self, event: AuditEvent) -> None:
        self._repository.record_event(event)

    def append(self, event: AuditEvent) -> AuditEvent:
        """
        Enmascara y persiste un evento (con reintentos).

        Raises:
            StorageError: si la escritura falla tras agotar los reintentos.
        """
        masked = dataclasses.replace(
            event,
            metadata=self._mask(event.metadata),
            created_at=event.created_at or datetime.now(timezone.utc),
        )
        try:
            self._write(masked)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(
                f"No se pudo persistir el evento de auditoría: {exc}",
                original_error=exc,
            ) from exc
        return masked

    def record(
        self,
        *,
        action: str,
        actor: str,
        target_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
        target_version: int | None = None,
    ) -> AuditEvent:
        """
        Registra una acción (best-effort). Nunca lanza excepción.

        Si hay eventos pendientes se intentan primero; mientras el backlog
        no se vacíe, los eventos nuevos se encolan detrás para conservar
        el orden de commit.
        """
        event = self.build_event(
            action=action,
            actor=actor,
            target_id=target_id,
            metadata=metadata,
            target_version=target_version,
        )

        if self.pending_count:
            self.flush_pending()
            if self.pending_count:
                with self._pending_lock:
                    self._enqueue_locked(event)
                return event

        try:
            self.append(event)
        except StorageError as exc:
            record_audit_write_failure(action)
            with self._pending_lock:
                self._enqueue_locked(event)
                pending = len(self._pending)
            logger.error(
                "Falló la escritura del evento de auditoría",
                extra={
                    "action": action,
                    "target_id": str(target_id) if target_id else None,
                    "event_id": str(event.id),
                    "pending": pending,
                    "error": str(exc),
                },
            )
        return event

    # ------------------------------------------------------------------
    # Backlog
    # ------------------------------------------------------------------
    @property
    def pending_count(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def flush_pending(self) -> int:
        """
        Reintenta los eventos pendientes en orden. Se detiene en la primera
        falla. Devuelve cuántos se persistieron.
        """
        written = 0
        with self._pending_lock:
            while self._pending:
                event = self._pending[0]
                try:
                    self.append(event)
                except StorageError as exc:
                    logger.warning(
                        "Backlog de auditoría sigue sin poder escribirse",
                        extra={"pending": len(self._pending), "error": str(exc)},
                    )
                    break
                self._pending.popleft()
                written += 1
            set_audit_pending(len(self._pending))

        if written:
            logger.info("Backlog de auditoría reintentado", extra={"written": written})
        return written

    def _enqueue_locked(self, event: AuditEvent) -> None:
        if self._pending_max == 0:
            self._drop(event)
            return
        while len(self._pending) >= self._pending_max:
            self._drop(self._pending.popleft())
        self._pending.append(event)
        set_audit_pending(len(self._pending))

    @staticmethod
    def _drop(event: AuditEvent) -> None:
        record_audit_dropped()
        logger.error(
            "Evento de auditoría descartado (backlog lleno)",
            extra={
                "action": event.action,
                "event_id": str(event.id),
                "target_id": str(event.target_id) if event.target_id else None,
            },
        )
