"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/admin.py
===============================================================================

Name:
    Admin Router

Responsibilities:
    - Endpoints administrativos del backend.
    - Hoy: Auditoría (consulta de eventos de moderación).
    - Validaciones de borde (rangos de fechas).
    - Enforce del scope audit:read.

Collaborators:
    - domain.repositories.AuditEventRepository
    - container.get_audit_repository
    - identity.auth.require_scope
    - schemas.admin

===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.container import get_audit_repository
from app.domain.repositories import AuditEventRepository
from app.identity.auth import Actor, require_scope
from fastapi import APIRouter, Depends, Query

from ..dependencies import ensure_date_range
from ..schemas.admin import AuditEventRes, AuditEventsRes

router = APIRouter()


def _to_audit_event_res(event) -> AuditEventRes:
    """
    Adapter: AuditEvent (dominio) -> DTO HTTP.
    """
    return AuditEventRes(
        id=event.id,
        actor=event.actor,
        action=event.action,
        target_id=event.target_id,
        metadata=event.metadata or {},
        ip=event.ip,
        user_agent=event.user_agent,
        created_at=event.created_at,
    )


@router.get(
    "/admin/audit",
    response_model=AuditEventsRes,
    tags=["audit"],
)
def list_audit_events(
    actor_id: str | None = Query(None),
    action_prefix: str | None = Query(None),
    target_id: UUID | None = Query(None),
    start_at: datetime | None = Query(None),
    end_at: datetime | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
    _actor: Actor | None = Depends(require_scope("audit:read")),
):
    start_at, end_at = ensure_date_range(start_at, end_at)

    events = audit_repo.list_events(
        actor_id=actor_id,
        action_prefix=action_prefix,
        target_id=target_id,
        start_at=start_at,
        end_at=end_at,
        limit=limit,
        offset=offset,
    )

    next_offset = offset + limit if len(events) == limit else None
    return AuditEventsRes(
        events=[_to_audit_event_res(e) for e in events],
        next_offset=next_offset,
    )
