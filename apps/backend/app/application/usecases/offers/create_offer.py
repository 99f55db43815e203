"""
===============================================================================
USE CASE: Create Offer (driver)
===============================================================================

Name:
    Create Driver Offer Use Case

Business Goal:
    Registrar una oferta de viaje de un conductor, ya sea como borrador
    (`draft`) o enviada directamente a revisión (`pending_review`).

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    CreateOfferUseCase

Responsibilities:
    - Validar el input (asientos, precios, textos, fecha de salida, paradas).
    - Completar defaults (seats_free = seats_total, currency).
    - Persistir vía DriverOfferRepository.create_offer.
    - Auditar `offer.create`.

Collaborators:
    - DriverOfferRepository
    - AuditTrail
    - crosscutting.exceptions.ValidationError

-------------------------------------------------------------------------------
INPUTS / OUTPUTS
-------------------------------------------------------------------------------
Inputs:
    - CreateOfferInput (ver dataclass)
Outputs:
    - DriverOffer creado (status draft | pending_review)

Reglas de validación (ValidationError):
    - 1 <= seats_total <= max_seats
    - 0 <= seats_free <= seats_total (default: seats_total)
    - price_per_seat >= 0
    - front_price_per_seat, si viene, >= price_per_seat
    - from_text / to_text no vacíos
    - start_at >= now + min_advance
    - coordenadas dentro de rango; order_no de paradas únicos
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import uuid4

from ....audit import AuditTrail
from ....crosscutting.exceptions import ValidationError
from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_moderation_action
from ....domain.entities import DriverOffer, OfferStatus, OfferStop
from ....domain.offer_state_machine import OfferAction
from ....domain.repositories import DriverOfferRepository


@dataclass
class CreateOfferInput:
    driver_id: str
    from_text: str
    to_text: str
    start_at: datetime
    seats_total: int
    price_per_seat: Decimal
    seats_free: Optional[int] = None
    currency: Optional[str] = None
    from_lat: Optional[float] = None
    from_lng: Optional[float] = None
    to_lat: Optional[float] = None
    to_lng: Optional[float] = None
    stops: List[OfferStop] = field(default_factory=list)
    front_price_per_seat: Optional[Decimal] = None
    note: Optional[str] = None
    submit: bool = False


class CreateOfferUseCase:
    """
    Use Case (Application Service / Command):
        Crea una oferta validada y la deja en draft o pending_review.
    """

    def __init__(
        self,
        offer_repository: DriverOfferRepository,
        audit_trail: AuditTrail,
        *,
        max_seats: int = 8,
        min_advance_minutes: int = 0,
        default_currency: str = "UZS",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._offers = offer_repository
        self._audit = audit_trail
        self._max_seats = max_seats
        self._min_advance = timedelta(minutes=min_advance_minutes)
        self._default_currency = default_currency
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def execute(self, input_data: CreateOfferInput) -> DriverOffer:
        try:
            offer = self._build(input_data)
        except ValidationError:
            record_moderation_action(OfferAction.CREATE.value, "validation")
            raise

        created = self._offers.create_offer(offer)

        self._audit.record(
            action=OfferAction.CREATE.value,
            actor=input_data.driver_id,
            target_id=created.id,
            metadata={
                "status": created.status.value,
                "seats_total": created.seats_total,
                "price_per_seat": created.price_per_seat,
                "currency": created.currency,
            },
            target_version=created.version,
        )
        record_moderation_action(OfferAction.CREATE.value, "success")
        logger.info(
            "Oferta creada",
            extra={"offer_id": str(created.id), "status": created.status.value},
        )
        return created

    # =========================================================================
    # Validación
    # =========================================================================
    def _build(self, data: CreateOfferInput) -> DriverOffer:
        from_text = (data.from_text or "").strip()
        to_text = (data.to_text or "").strip()
        if not from_text:
            raise ValidationError("from_text es obligatorio", field="from_text")
        if not to_text:
            raise ValidationError("to_text es obligatorio", field="to_text")

        if not 1 <= data.seats_total <= self._max_seats:
            raise ValidationError(
                f"seats_total debe estar entre 1 y {self._max_seats}",
                field="seats_total",
            )
        seats_free = data.seats_total if data.seats_free is None else data.seats_free
        if not 0 <= seats_free <= data.seats_total:
            raise ValidationError(
                "seats_free debe estar entre 0 y seats_total", field="seats_free"
            )

        price = Decimal(data.price_per_seat)
        if price < 0:
            raise ValidationError(
                "price_per_seat no puede ser negativo", field="price_per_seat"
            )
        front_price = (
            Decimal(data.front_price_per_seat)
            if data.front_price_per_seat is not None
            else None
        )
        if front_price is not None and front_price < price:
            raise ValidationError(
                "front_price_per_seat debe ser >= price_per_seat",
                field="front_price_per_seat",
            )

        start_at = data.start_at
        if start_at.tzinfo is None:
            start_at = start_at.replace(tzinfo=timezone.utc)
        if start_at < self._clock() + self._min_advance:
            raise ValidationError(
                "start_at no puede estar en el pasado", field="start_at"
            )

        currency = (data.currency or self._default_currency).strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError("currency debe ser un código de 3 letras", field="currency")

        self._check_coordinates(data.from_lat, data.from_lng, "from")
        self._check_coordinates(data.to_lat, data.to_lng, "to")

        stops = sorted(data.stops, key=lambda s: s.order_no)
        order_numbers = [s.order_no for s in stops]
        if len(set(order_numbers)) != len(order_numbers):
            raise ValidationError("order_no de paradas repetido", field="stops")
        for stop in stops:
            if not stop.label_text.strip():
                raise ValidationError("label_text de parada vacío", field="stops")
            self._check_coordinates(stop.lat, stop.lng, "stops")

        return DriverOffer(
            id=uuid4(),
            driver_id=data.driver_id,
            from_text=from_text,
            to_text=to_text,
            from_lat=data.from_lat,
            from_lng=data.from_lng,
            to_lat=data.to_lat,
            to_lng=data.to_lng,
            start_at=start_at,
            seats_total=data.seats_total,
            seats_free=seats_free,
            price_per_seat=price,
            front_price_per_seat=front_price,
            currency=currency,
            note=(data.note or "").strip() or None,
            status=OfferStatus.PENDING_REVIEW if data.submit else OfferStatus.DRAFT,
            stops=stops,
        )

    @staticmethod
    def _check_coordinates(lat: float | None, lng: float | None, field_name: str) -> None:
        if lat is not None and not -90 <= lat <= 90:
            raise ValidationError("latitud fuera de rango", field=field_name)
        if lng is not None and not -180 <= lng <= 180:
            raise ValidationError("longitud fuera de rango", field=field_name)
