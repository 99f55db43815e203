"""
===============================================================================
TARJETA CRC — schemas/offers.py
===============================================================================

Módulo:
    Schemas HTTP para Ofertas de conductor (moderación + conductor + público)

Responsabilidades:
    - Definir DTOs de request/response para ofertas.
    - Validación de forma (tipos, rangos) en el borde.
    - Las reglas de negocio (asientos, fechas, motivo) viven en los casos de uso.

Colaboradores:
    - domain.entities.OfferStatus
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from app.domain.entities import OfferStatus
from pydantic import BaseModel, Field, field_validator

# -----------------------------------------------------------------------------
# Requests (moderación)
# -----------------------------------------------------------------------------


class ApproveOfferReq(BaseModel):
    """Body opcional de approve."""

    auto_publish: bool = Field(
        default=False,
        description="Publicar directamente (pending_review -> published)",
    )


class RejectOfferReq(BaseModel):
    """El motivo se valida en el caso de uso (vacío => 422 field=reason)."""

    reason: str | None = Field(default=None, description="Motivo del rechazo")


# -----------------------------------------------------------------------------
# Requests (conductor)
# -----------------------------------------------------------------------------


class OfferStopReq(BaseModel):
    order_no: int = Field(..., ge=1)
    label_text: str = Field(..., min_length=1, max_length=200)
    lat: float | None = None
    lng: float | None = None

    @field_validator("label_text")
    @classmethod
    def _strip_label(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("label_text no puede estar vacío")
        return v


class CreateOfferReq(BaseModel):
    """Alta de oferta por el conductor (queda en draft o pending_review)."""

    from_text: str = Field(..., min_length=1, max_length=200)
    to_text: str = Field(..., min_length=1, max_length=200)
    start_at: datetime
    seats_total: int
    seats_free: int | None = None
    price_per_seat: Decimal
    front_price_per_seat: Decimal | None = None
    currency: str | None = Field(default=None, max_length=8)
    from_lat: float | None = None
    from_lng: float | None = None
    to_lat: float | None = None
    to_lng: float | None = None
    stops: list[OfferStopReq] = Field(default_factory=list, max_length=20)
    note: str | None = Field(default=None, max_length=1000)
    submit: bool = Field(
        default=False, description="Enviar a revisión en el mismo request"
    )


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class OfferStopRes(BaseModel):
    order_no: int
    label_text: str
    lat: float | None = None
    lng: float | None = None


class OfferRes(BaseModel):
    id: UUID
    driver_id: str
    from_text: str
    to_text: str
    from_lat: float | None = None
    from_lng: float | None = None
    to_lat: float | None = None
    to_lng: float | None = None
    start_at: datetime
    seats_total: int
    seats_free: int
    price_per_seat: Decimal
    front_price_per_seat: Decimal | None = None
    currency: str
    note: str | None = None
    status: OfferStatus
    rejection_reason: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    stops: list[OfferStopRes] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OfferEnvelopeRes(BaseModel):
    offer: OfferRes


class OffersListRes(BaseModel):
    offers: list[OfferRes]
    total: int


class StatisticsRes(BaseModel):
    statistics: dict[str, int]
