"""
===============================================================================
TARJETA CRC — dependencies.py (Dependencias y helpers comunes)
===============================================================================

Responsabilidades:
  - Centralizar helpers que se repiten en routers:
      * parseo del filtro de estados (lista separada por comas)
      * validación de rangos de fecha
      * conversión DriverOffer (dominio) -> DTO HTTP

Colaboradores:
  - crosscutting.error_responses (RFC7807 factories)
  - domain.entities (OfferStatus, DriverOffer)
  - schemas.offers
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone

from app.crosscutting.error_responses import validation_error
from app.domain.entities import DriverOffer, OfferStatus

from .schemas.offers import OfferRes, OfferStopRes


def parse_status_filter(raw: str | None) -> list[OfferStatus]:
    """
    "pending_review,approved" -> [PENDING_REVIEW, APPROVED].

    Vacío/None => sin filtro. Valor desconocido => 422.
    """
    if not raw:
        return []

    statuses: list[OfferStatus] = []
    for part in raw.split(","):
        value = part.strip().lower()
        if not value:
            continue
        try:
            status = OfferStatus(value)
        except ValueError:
            allowed = ", ".join(s.value for s in OfferStatus)
            raise validation_error(
                f"Estado inválido: {value}",
                errors=[{"field": "status", "msg": f"Valores permitidos: {allowed}"}],
            ) from None
        if status not in statuses:
            statuses.append(status)
    return statuses


def as_utc(value: datetime | None) -> datetime | None:
    """R: Fecha de query sin offset => UTC (mismo criterio que start_at al crear)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_date_range(
    start: datetime | None, end: datetime | None
) -> tuple[datetime | None, datetime | None]:
    """Normaliza ambos extremos a UTC y exige start <= end."""
    start, end = as_utc(start), as_utc(end)
    if start and end and start > end:
        raise validation_error("'from' debe ser anterior a 'to'")
    return start, end


def to_offer_res(offer: DriverOffer) -> OfferRes:
    """Adapter DriverOffer -> OfferRes (no expone campos internos)."""
    return OfferRes(
        id=offer.id,
        driver_id=offer.driver_id,
        from_text=offer.from_text,
        to_text=offer.to_text,
        from_lat=offer.from_lat,
        from_lng=offer.from_lng,
        to_lat=offer.to_lat,
        to_lng=offer.to_lng,
        start_at=offer.start_at,
        seats_total=offer.seats_total,
        seats_free=offer.seats_free,
        price_per_seat=offer.price_per_seat,
        front_price_per_seat=offer.front_price_per_seat,
        currency=offer.currency,
        note=offer.note,
        status=offer.status,
        rejection_reason=offer.rejection_reason,
        reviewed_by=offer.reviewed_by,
        reviewed_at=offer.reviewed_at,
        stops=[
            OfferStopRes(
                order_no=s.order_no, label_text=s.label_text, lat=s.lat, lng=s.lng
            )
            for s in sorted(offer.stops, key=lambda s: s.order_no)
        ],
        created_at=offer.created_at,
        updated_at=offer.updated_at,
    )
