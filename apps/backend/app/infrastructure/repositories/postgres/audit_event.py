"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/audit_event.py
============================================================
Class: PostgresAuditEventRepository

Responsibilities:
  - Persistir eventos de auditoría en PostgreSQL (tabla audit_events).
  - Listar eventos con filtros opcionales (actor, action_prefix, oferta, fechas).
  - Orden cronológico estable: created_at ASC, seq ASC.
  - Filtrando por oferta: target_version ASC primero (orden de commit de las
    transiciones, válido aunque escriban varios workers o haya backlog).

Collaborators:
  - app.domain.audit.AuditEvent (entidad de dominio)
  - psycopg_pool.ConnectionPool (pool de conexiones)
  - psycopg.types.json.Json (JSON seguro hacia PostgreSQL)
  - crosscutting.exceptions.StorageError (contrato de errores infra)

Constraints / Notes:
  - Repo puro: NO decide qué auditar ni enmascara (eso es app/audit.py).
  - Queries SIEMPRE parametrizadas.
  - seq (bigserial) desempata eventos con el mismo created_at.
============================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable
from uuid import UUID

from psycopg.types.json import Json
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import StorageError
from ....crosscutting.logger import logger
from ....domain.audit import AuditEvent


class PostgresAuditEventRepository:
    """Repositorio PostgreSQL para auditoría (audit_events)."""

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object],
        error_message: str,
        extra: dict[str, object],
    ) -> list[tuple]:
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as exc:
            logger.exception(error_message, extra={**extra, "error": str(exc)})
            raise StorageError(f"{error_message}: {exc}", original_error=exc) from exc

    # ------------------------------------------------------------
    # Escritura (append-only)
    # ------------------------------------------------------------
    def record_event(self, event: AuditEvent) -> None:
        """
        Inserta un evento de auditoría.

        Si falla, se propaga StorageError; AuditTrail decide si reintentar
        o dejarlo en el backlog.
        """
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                conn.execute(
                    """
                    INSERT INTO audit_events
                        (id, actor, action, target_id, metadata, ip, user_agent,
                         created_at, target_version)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, COALESCE(%s, now()), %s)
                    """,
                    (
                        event.id,
                        event.actor,
                        event.action,
                        event.target_id,
                        Json(event.metadata or {}),
                        event.ip,
                        event.user_agent,
                        event.created_at,
                        event.target_version,
                    ),
                )
        except Exception as exc:
            logger.error(
                "PostgresAuditEventRepository: Failed to record audit event",
                extra={
                    "event_id": str(event.id),
                    "action": event.action,
                    "error": str(exc),
                },
            )
            raise StorageError(
                f"Failed to record audit event: {exc}", original_error=exc
            ) from exc

    # ------------------------------------------------------------
    # Lectura (listado con filtros)
    # ------------------------------------------------------------
    def list_events(
        self,
        *,
        actor_id: str | None = None,
        action_prefix: str | None = None,
        target_id: UUID | None = None,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditEvent]:
        """
        Lista eventos con filtros opcionales.

        - actor_id: match exacto.
        - action_prefix: LIKE prefix ("offer." -> "offer.%").
        - start_at / end_at: rango inclusivo sobre created_at.
        """
        if limit <= 0:
            return []
        offset = max(offset, 0)

        conditions: list[str] = []
        params: list[object] = []

        if actor_id:
            conditions.append("actor = %s")
            params.append(actor_id)
        if action_prefix:
            conditions.append("action LIKE %s")
            params.append(f"{action_prefix}%")
        if target_id is not None:
            conditions.append("target_id = %s")
            params.append(target_id)
        if start_at is not None:
            conditions.append("created_at >= %s")
            params.append(start_at)
        if end_at is not None:
            conditions.append("created_at <= %s")
            params.append(end_at)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        order_by = (
            "ORDER BY target_version ASC NULLS LAST, created_at ASC, seq ASC"
            if target_id is not None
            else "ORDER BY created_at ASC, seq ASC"
        )

        rows = self._fetchall(
            query=f"""
                SELECT id, actor, action, target_id, metadata, ip, user_agent,
                       created_at, target_version
                FROM audit_events
                {where_clause}
                {order_by}
                LIMIT %s OFFSET %s
            """,
            params=[*params, limit, offset],
            error_message="PostgresAuditEventRepository: Failed to list audit events",
            extra={
                "actor_id": actor_id,
                "action_prefix": action_prefix,
                "target_id": str(target_id) if target_id else None,
                "limit": limit,
                "offset": offset,
            },
        )

        return [
            AuditEvent(
                id=event_id,
                actor=actor,
                action=action,
                target_id=target,
                metadata=metadata or {},
                ip=ip,
                user_agent=user_agent,
                created_at=created_at,
                target_version=target_version,
            )
            for (
                event_id,
                actor,
                action,
                target,
                metadata,
                ip,
                user_agent,
                created_at,
                target_version,
            ) in rows
        ]
