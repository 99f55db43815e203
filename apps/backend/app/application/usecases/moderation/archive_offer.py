"""
USE CASE: Archive Offer

{approved, published, rejected} -> archived (terminal).
Auditoría: `offer.archive`.

Nota: archivar no toca seats_free; la moderación solo cambia status y
campos de revisión. rejection_reason se limpia al salir de `rejected`.
"""

from __future__ import annotations

from uuid import UUID

from ....domain.entities import DriverOffer
from ....domain.offer_state_machine import OfferAction
from .offer_command import OfferCommandUseCase


class ArchiveOfferUseCase(OfferCommandUseCase):
    action = OfferAction.ARCHIVE

    def execute(self, offer_id: UUID, actor_id: str) -> DriverOffer:
        return self._apply(offer_id, actor_id=actor_id)
