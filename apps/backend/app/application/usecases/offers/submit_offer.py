"""
===============================================================================
USE CASE: Submit Offer (driver)
===============================================================================

Business Goal:
    El conductor envía su borrador a revisión, o reenvía una oferta rechazada.

Contrato:
    - {draft, rejected} -> pending_review.
    - Solo el dueño (driver_id == actor) puede enviarla -> ForbiddenError.
    - No es una revisión: reviewed_by/reviewed_at no cambian.
    - El historial previo (`offer.reject`) se conserva; se agrega `offer.submit`.
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....crosscutting.exceptions import ForbiddenError
from ....domain.entities import DriverOffer
from ....domain.offer_state_machine import OfferAction
from ..moderation.offer_command import OfferCommandUseCase


class SubmitOfferUseCase(OfferCommandUseCase):
    action = OfferAction.SUBMIT

    def execute(self, offer_id: UUID, driver_id: str) -> DriverOffer:
        return self._apply(offer_id, actor_id=driver_id, review=False)

    def _check_actor(self, offer: DriverOffer, actor_id: str) -> None:
        if offer.driver_id != actor_id:
            raise ForbiddenError("Solo el conductor dueño puede enviar la oferta")
