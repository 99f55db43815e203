"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en application/interfaces.
    - Mantener estable el “surface area” del dominio.

Colaboradores:
    - domain.entities: DriverOffer, OfferStop, OfferStatus, StatisticsSnapshot
    - domain.offer_state_machine: transiciones permitidas
    - domain.masking: enmascarado de PII para auditoría
    - domain.repositories: puertos de persistencia

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .audit import AuditEvent
from .entities import (
    DriverOffer,
    OfferStatus,
    OfferStop,
    StatisticsSnapshot,
)
from .masking import REDACTION_MARKER, mask_payload
from .offer_state_machine import (
    ALLOWED_TRANSITIONS,
    OfferAction,
    can_transition,
    check_transition,
    resolve_target,
)
from .repositories import AuditEventRepository, DriverOfferRepository

__all__ = [
    # Entities
    "DriverOffer",
    "OfferStop",
    "OfferStatus",
    "StatisticsSnapshot",
    "AuditEvent",
    # State machine
    "ALLOWED_TRANSITIONS",
    "OfferAction",
    "can_transition",
    "check_transition",
    "resolve_target",
    # Masking
    "REDACTION_MARKER",
    "mask_payload",
    # Ports
    "DriverOfferRepository",
    "AuditEventRepository",
]
