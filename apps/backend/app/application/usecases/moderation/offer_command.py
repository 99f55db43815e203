"""
===============================================================================
USE CASE BASE: Offer Status Command
===============================================================================

Name:
    OfferCommandUseCase (base compartida de approve/reject/publish/archive/submit)

Business Goal:
    Aplicar UNA acción sobre una oferta respetando la máquina de estados y
    dejando rastro de auditoría en el mismo orden en que se commitean las
    transiciones.

Flujo (en orden):
    1) Leer la oferta                       -> NotFoundError si no existe
    2) Resolver destino desde el estado leído -> IllegalTransitionError
    3) Bajo el lock de la oferta:
         a) transition() compare-and-set   -> ConflictError si alguien ganó
         b) auditoría (best-effort, nunca revierte la transición)
    4) Métrica de outcome + log

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    OfferCommandUseCase

Responsibilities:
    - Orquestar lectura + transición + auditoría.
    - Clasificar el resultado para la métrica moderation_actions_total.

Collaborators:
    - DriverOfferRepository (get_offer, transition)
    - AuditTrail (record)
    - PerOfferLocks (orden de auditoría por oferta)
    - offer_state_machine.resolve_target
===============================================================================
"""

from __future__ import annotations

from typing import Any, List, Tuple
from uuid import UUID

from ....audit import AuditTrail
from ....crosscutting.exceptions import (
    ConflictError,
    ForbiddenError,
    IllegalTransitionError,
    ModerationError,
    NotFoundError,
    ValidationError,
)
from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_moderation_action
from ....domain.entities import DriverOffer
from ....domain.offer_state_machine import OfferAction, resolve_target
from ....domain.repositories import DriverOfferRepository
from ...offer_locks import PerOfferLocks

AuditEntries = List[Tuple[OfferAction, dict[str, Any]]]

_OUTCOMES: Tuple[Tuple[type[ModerationError], str], ...] = (
    (ValidationError, "validation"),
    (IllegalTransitionError, "illegal"),
    (ConflictError, "conflict"),
    (NotFoundError, "not_found"),
    (ForbiddenError, "forbidden"),
)


def outcome_label(exc: BaseException) -> str:
    """Label de baja cardinalidad para la métrica de acciones."""
    for exc_type, label in _OUTCOMES:
        if isinstance(exc, exc_type):
            return label
    return "error"


class OfferCommandUseCase:
    """
    Base de los comandos de estado. Las subclases definen `action` y, si
    hace falta, validan el input antes de leer la oferta.
    """

    action: OfferAction

    def __init__(
        self,
        offer_repository: DriverOfferRepository,
        audit_trail: AuditTrail,
        locks: PerOfferLocks | None = None,
    ) -> None:
        self._offers = offer_repository
        self._audit = audit_trail
        self._locks = locks or PerOfferLocks()

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------
    def _check_actor(self, offer: DriverOffer, actor_id: str) -> None:
        """Hook de autorización sobre la oferta leída (moderadores: sin check)."""

    def _audit_entries(
        self, before: DriverOffer, after: DriverOffer, **details: Any
    ) -> AuditEntries:
        return [
            (
                self.action,
                {"from_status": before.status.value, "to_status": after.status.value},
            )
        ]

    # -------------------------------------------------------------------------
    # Flujo común
    # -------------------------------------------------------------------------
    def _apply(
        self,
        offer_id: UUID,
        *,
        actor_id: str,
        auto_publish: bool = False,
        rejection_reason: str | None = None,
        review: bool = True,
        **details: Any,
    ) -> DriverOffer:
        try:
            current = self._offers.get_offer(offer_id)
            if current is None:
                raise NotFoundError(
                    f"Offer {offer_id} no encontrada", identifier=str(offer_id)
                )

            self._check_actor(current, actor_id)

            target = resolve_target(
                self.action,
                current.status,
                auto_publish=auto_publish,
                offer_id=offer_id,
            )

            with self._locks.hold(offer_id):
                updated = self._offers.transition(
                    offer_id,
                    from_status=current.status,
                    to_status=target,
                    actor_id=actor_id,
                    rejection_reason=rejection_reason,
                    review=review,
                )
                for action, metadata in self._audit_entries(
                    current, updated, **details
                ):
                    self._audit.record(
                        action=action.value,
                        actor=actor_id,
                        target_id=offer_id,
                        metadata=metadata,
                        target_version=updated.version,
                    )
        except ModerationError as exc:
            outcome = outcome_label(exc)
            record_moderation_action(self.action.value, outcome)
            logger.info(
                "Acción sobre oferta rechazada",
                extra={
                    "action": self.action.value,
                    "offer_id": str(offer_id),
                    "outcome": outcome,
                    "error_code": exc.error_code,
                },
            )
            raise

        record_moderation_action(self.action.value, "success")
        logger.info(
            "Acción sobre oferta aplicada",
            extra={
                "action": self.action.value,
                "offer_id": str(offer_id),
                "from_status": current.status.value,
                "to_status": updated.status.value,
            },
        )
        return updated
