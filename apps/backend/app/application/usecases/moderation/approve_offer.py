"""
===============================================================================
USE CASE: Approve Offer
===============================================================================

Business Goal:
    Aprobar una oferta en revisión. Con auto_publish=True la oferta pasa
    directamente a `published`.

Contrato:
    - Requiere estado actual = pending_review.
    - Destino: approved (o published si auto_publish).
    - Auditoría: `offer.approve` y, si se autopublicó, `offer.publish`
      como segunda entrada (trail granular por acción).

Errores:
    - NotFoundError: id desconocido
    - IllegalTransitionError: el estado leído no es pending_review
    - ConflictError: otro moderador cambió la oferta entre lectura y escritura
===============================================================================
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from ....domain.entities import DriverOffer, OfferStatus
from ....domain.offer_state_machine import OfferAction
from .offer_command import AuditEntries, OfferCommandUseCase


class ApproveOfferUseCase(OfferCommandUseCase):
    action = OfferAction.APPROVE

    def execute(
        self, offer_id: UUID, actor_id: str, auto_publish: bool = False
    ) -> DriverOffer:
        return self._apply(
            offer_id,
            actor_id=actor_id,
            auto_publish=auto_publish,
        )

    def _audit_entries(
        self, before: DriverOffer, after: DriverOffer, **details: Any
    ) -> AuditEntries:
        auto_published = after.status == OfferStatus.PUBLISHED
        entries: AuditEntries = [
            (
                OfferAction.APPROVE,
                {
                    "from_status": before.status.value,
                    "to_status": after.status.value,
                    "auto_publish": auto_published,
                },
            )
        ]
        if auto_published:
            entries.append(
                (
                    OfferAction.PUBLISH,
                    {
                        "from_status": OfferStatus.APPROVED.value,
                        "to_status": OfferStatus.PUBLISHED.value,
                        "auto_publish": True,
                    },
                )
            )
        return entries
