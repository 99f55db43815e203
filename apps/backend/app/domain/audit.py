"""
===============================================================================
TARJETA CRC — domain/audit.py
===============================================================================

Módulo:
    Modelos de Auditoría (Dominio)

Responsabilidades:
    - Definir la estructura de un evento de auditoría (AuditEvent).
    - Mantener el contrato de auditoría independiente de infraestructura.

Colaboradores:
    - domain.repositories.AuditEventRepository: persiste y lista eventos.
    - app/audit.py: emite eventos (enmascarado + reintentos).
    - infra repos: mapean hacia/desde DB.

Notas:
    - Append-only: no se edita ni se borra.
    - metadata llega ya enmascarada (sin PII en claro).
    - ip/user_agent identifican el request que originó la acción.
    - created_at es el momento de la acción, no el de la escritura: un evento
      que pasa por el backlog conserva su hora original.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """Evento de auditoría: quién hizo qué sobre qué oferta (inmutable)."""

    id: UUID
    actor: str
    action: str
    target_id: UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    ip: str | None = None
    user_agent: str | None = None
    created_at: datetime | None = None
    # R: version de la oferta tras la transición auditada (orden de commit).
    target_version: int | None = None
