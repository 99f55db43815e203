"""
USE CASE: Publish Offer

approved -> published. Auditoría: `offer.publish`.
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import DriverOffer
from ....domain.offer_state_machine import OfferAction
from .offer_command import OfferCommandUseCase


class PublishOfferUseCase(OfferCommandUseCase):
    action = OfferAction.PUBLISH

    def execute(self, offer_id: UUID, actor_id: str) -> DriverOffer:
        return self._apply(offer_id, actor_id=actor_id)
