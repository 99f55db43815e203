"""
USE CASE: List Published Offers (public)

Ofertas `published` con salida no pasada, filtrables por origen/destino
(substring, case-insensitive) y por día. Orden: start_at ASC.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable

from ....crosscutting.exceptions import ValidationError
from ....domain.repositories import DriverOfferRepository
from ..moderation.list_offers import DEFAULT_LIMIT, MAX_LIMIT, OfferPage


@dataclass
class ListPublishedOffersInput:
    from_text: str | None = None
    to_text: str | None = None
    day: date | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0


class ListPublishedOffersUseCase:
    def __init__(
        self,
        offer_repository: DriverOfferRepository,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._offers = offer_repository
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def execute(self, input_data: ListPublishedOffersInput) -> OfferPage:
        if not 1 <= input_data.limit <= MAX_LIMIT:
            raise ValidationError(
                f"limit debe estar entre 1 y {MAX_LIMIT}", field="limit"
            )
        if input_data.offset < 0:
            raise ValidationError("offset no puede ser negativo", field="offset")

        offers, total = self._offers.list_published_offers(
            now=self._clock(),
            from_text=(input_data.from_text or "").strip() or None,
            to_text=(input_data.to_text or "").strip() or None,
            day=input_data.day,
            limit=input_data.limit,
            offset=input_data.offset,
        )
        return OfferPage(offers=offers, total=total)
