"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (DriverOffer, OfferStop, StatisticsSnapshot)

Responsabilidades:
    - Definir estructuras centrales del negocio (sin infraestructura).
    - Centralizar las invariantes de una oferta (asientos, precios, motivo de
      rechazo, par reviewed_by/reviewed_at) en un único chequeo reutilizable.
    - Derivar el snapshot de estadísticas desde conteos por estado.

Colaboradores:
    - domain.offer_state_machine: decide qué transiciones de estado existen.
    - domain.repositories: persisten/recuperan estas entidades.
    - application/usecases: construyen/consumen estas entidades.

Principios:
    - Sin dependencias a DB/FastAPI.
    - Datos + comportamiento mínimo (no “anemia total”, pero sin lógica pesada).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Mapping, Optional
from uuid import UUID

from ..crosscutting.exceptions import ValidationError


def _utcnow() -> datetime:
    """Fecha/hora UTC (helper interno)."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class OfferStatus(str, Enum):
    """Estados del ciclo de vida de una oferta (los únicos observables)."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    PUBLISHED = "published"
    REJECTED = "rejected"
    ARCHIVED = "archived"


# ---------------------------------------------------------------------------
# DriverOffer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OfferStop:
    """Parada intermedia de la ruta (ordenada por order_no)."""

    order_no: int
    label_text: str
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass
class DriverOffer:
    """
    Oferta de viaje publicada por un conductor.

    Importante:
      - status/rejection_reason/reviewed_* solo cambian vía transición del store.
      - Los repositorios devuelven instancias nuevas en cada escritura
        (snapshots), nunca mutan la que tiene el caller.
    """

    id: UUID
    driver_id: str
    from_text: str
    to_text: str
    start_at: datetime
    seats_total: int
    seats_free: int
    price_per_seat: Decimal
    currency: str = "UZS"
    status: OfferStatus = OfferStatus.DRAFT

    # Ruta
    from_lat: Optional[float] = None
    from_lng: Optional[float] = None
    to_lat: Optional[float] = None
    to_lng: Optional[float] = None
    stops: List[OfferStop] = field(default_factory=list)

    # Comercial
    front_price_per_seat: Optional[Decimal] = None
    note: Optional[str] = None

    # Moderación
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    # Auditoría
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # R: +1 por transición commiteada; ordena la auditoría de la oferta.
    version: int = 1

    @property
    def is_reviewed(self) -> bool:
        """True si algún moderador actuó sobre la oferta al menos una vez."""
        return self.reviewed_by is not None

    def check_invariants(self) -> None:
        """
        Valida las invariantes de la entidad. Lanza ValidationError.

        Se invoca antes de cada escritura en el store: una oferta que no
        las cumple nunca llega a persistirse.
        """
        if self.seats_total <= 0:
            raise ValidationError("seats_total debe ser positivo", field="seats_total")
        if not 0 <= self.seats_free <= self.seats_total:
            raise ValidationError(
                "seats_free debe estar entre 0 y seats_total", field="seats_free"
            )
        if self.price_per_seat < 0:
            raise ValidationError(
                "price_per_seat no puede ser negativo", field="price_per_seat"
            )
        if (
            self.front_price_per_seat is not None
            and self.front_price_per_seat < self.price_per_seat
        ):
            raise ValidationError(
                "front_price_per_seat no puede ser menor que price_per_seat",
                field="front_price_per_seat",
            )

        has_reason = bool(self.rejection_reason and self.rejection_reason.strip())
        if self.status == OfferStatus.REJECTED and not has_reason:
            raise ValidationError(
                "Una oferta rechazada requiere rejection_reason",
                field="rejection_reason",
            )
        if self.status != OfferStatus.REJECTED and self.rejection_reason is not None:
            raise ValidationError(
                "rejection_reason solo aplica a ofertas rechazadas",
                field="rejection_reason",
            )

        if (self.reviewed_by is None) != (self.reviewed_at is None):
            raise ValidationError(
                "reviewed_by y reviewed_at deben estar ambos presentes o ausentes",
                field="reviewed_by",
            )


# ---------------------------------------------------------------------------
# Estadísticas
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatisticsSnapshot:
    """
    Agregado derivado (no persistido): conteos por estado.

    Invariante: total == suma de los conteos por estado, incluso sin ofertas.
    """

    draft: int = 0
    pending_review: int = 0
    approved: int = 0
    published: int = 0
    rejected: int = 0
    archived: int = 0

    @property
    def total(self) -> int:
        return (
            self.draft
            + self.pending_review
            + self.approved
            + self.published
            + self.rejected
            + self.archived
        )

    @classmethod
    def from_counts(cls, counts: Mapping[OfferStatus, int]) -> "StatisticsSnapshot":
        return cls(
            **{status.value: int(counts.get(status, 0)) for status in OfferStatus}
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            **{status.value: getattr(self, status.value) for status in OfferStatus},
        }
