"""
USE CASE: Get Offer (admin detail)
"""

from __future__ import annotations

from uuid import UUID

from ....crosscutting.exceptions import NotFoundError
from ....domain.entities import DriverOffer
from ....domain.repositories import DriverOfferRepository


class GetOfferUseCase:
    def __init__(self, offer_repository: DriverOfferRepository) -> None:
        self._offers = offer_repository

    def execute(self, offer_id: UUID) -> DriverOffer:
        offer = self._offers.get_offer(offer_id)
        if offer is None:
            raise NotFoundError(
                f"Offer {offer_id} no encontrada", identifier=str(offer_id)
            )
        return offer
