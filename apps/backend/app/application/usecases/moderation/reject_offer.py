"""
===============================================================================
USE CASE: Reject Offer
===============================================================================

Business Goal:
    Rechazar una oferta en revisión dejando un motivo legible para el conductor.

Contrato:
    - El motivo (trimmed) es obligatorio y se valida ANTES de leer la oferta:
      un motivo vacío siempre es ValidationError, sin escrituras.
    - Requiere estado actual = pending_review.
    - Auditoría: `offer.reject` con el motivo en claro.
===============================================================================
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from ....crosscutting.exceptions import ValidationError
from ....crosscutting.metrics import record_moderation_action
from ....domain.entities import DriverOffer
from ....domain.offer_state_machine import OfferAction
from .offer_command import AuditEntries, OfferCommandUseCase

DEFAULT_MAX_REASON_CHARS = 1000


class RejectOfferUseCase(OfferCommandUseCase):
    action = OfferAction.REJECT

    def __init__(
        self,
        *args: Any,
        max_reason_chars: int = DEFAULT_MAX_REASON_CHARS,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._max_reason_chars = max_reason_chars

    def execute(self, offer_id: UUID, actor_id: str, reason: str | None) -> DriverOffer:
        cleaned = self._validate_reason(reason)
        return self._apply(
            offer_id,
            actor_id=actor_id,
            rejection_reason=cleaned,
            reason=cleaned,
        )

    def _validate_reason(self, reason: str | None) -> str:
        cleaned = (reason or "").strip()
        if not cleaned:
            record_moderation_action(self.action.value, "validation")
            raise ValidationError(
                "El motivo de rechazo es obligatorio", field="reason"
            )
        if len(cleaned) > self._max_reason_chars:
            record_moderation_action(self.action.value, "validation")
            raise ValidationError(
                f"El motivo excede {self._max_reason_chars} caracteres",
                field="reason",
            )
        return cleaned

    def _audit_entries(
        self, before: DriverOffer, after: DriverOffer, **details: Any
    ) -> AuditEntries:
        return [
            (
                OfferAction.REJECT,
                {
                    "from_status": before.status.value,
                    "to_status": after.status.value,
                    "reason": details.get("reason"),
                },
            )
        ]
