"""
===============================================================================
USE CASE: List Offers (admin)
===============================================================================

Business Goal:
    Listado paginado para el panel de moderación, filtrable por estado,
    rango de fechas (start_at) y búsqueda de texto en origen/destino.

Contrato:
    - Orden: created_at DESC (más recientes primero).
    - limit en [1, MAX_LIMIT]; offset >= 0. Fuera de rango -> ValidationError.
    - date_from > date_to -> ValidationError.
    - Devuelve (ofertas, total) donde total ignora limit/offset.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Sequence

from ....crosscutting.exceptions import ValidationError
from ....domain.entities import DriverOffer, OfferStatus
from ....domain.repositories import DriverOfferRepository

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


@dataclass
class ListOffersInput:
    statuses: Sequence[OfferStatus] = field(default_factory=list)
    date_from: datetime | None = None
    date_to: datetime | None = None
    search: str | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0


@dataclass
class OfferPage:
    offers: List[DriverOffer]
    total: int


class ListOffersUseCase:
    def __init__(self, offer_repository: DriverOfferRepository) -> None:
        self._offers = offer_repository

    def execute(self, input_data: ListOffersInput) -> OfferPage:
        if not 1 <= input_data.limit <= MAX_LIMIT:
            raise ValidationError(
                f"limit debe estar entre 1 y {MAX_LIMIT}", field="limit"
            )
        if input_data.offset < 0:
            raise ValidationError("offset no puede ser negativo", field="offset")
        if (
            input_data.date_from is not None
            and input_data.date_to is not None
            and input_data.date_from > input_data.date_to
        ):
            raise ValidationError("from debe ser <= to", field="from")

        search = (input_data.search or "").strip() or None
        offers, total = self._offers.list_offers(
            statuses=list(input_data.statuses) or None,
            date_from=input_data.date_from,
            date_to=input_data.date_to,
            search=search,
            limit=input_data.limit,
            offset=input_data.offset,
        )
        return OfferPage(offers=offers, total=total)
