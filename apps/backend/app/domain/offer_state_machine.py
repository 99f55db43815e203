"""
===============================================================================
TARJETA CRC — domain/offer_state_machine.py
===============================================================================

Módulo:
    Máquina de estados de moderación de ofertas

Responsabilidades:
    - Declarar el conjunto cerrado de transiciones permitidas.
    - Validar una transición pedida ANTES de escribir nada:
        * arista inexistente          -> IllegalTransitionError
        * rechazo sin motivo no vacío -> ValidationError
    - Resolver el estado destino de cada acción (approve/reject/publish/...).

Colaboradores:
    - domain.entities.OfferStatus
    - infrastructure.repositories.*: llaman check_transition() dentro de transition().
    - application.usecases.*: resuelven el destino a partir del estado observado.

Diagrama:
    draft          --(submit)-->            pending_review
    rejected       --(submit)-->            pending_review
    pending_review --(approve)-->           approved
    pending_review --(approve, auto)-->     published
    pending_review --(reject, motivo)-->    rejected
    approved       --(publish)-->           published
    {approved, published, rejected} --(archive)--> archived
    archived: terminal
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping
from uuid import UUID

from ..crosscutting.exceptions import IllegalTransitionError, ValidationError
from .entities import OfferStatus


class OfferAction(str, Enum):
    """Acciones que mueven una oferta; el valor es el nombre de auditoría."""

    CREATE = "offer.create"
    SUBMIT = "offer.submit"
    APPROVE = "offer.approve"
    PUBLISH = "offer.publish"
    REJECT = "offer.reject"
    ARCHIVE = "offer.archive"


ALLOWED_TRANSITIONS: Mapping[OfferStatus, frozenset[OfferStatus]] = {
    OfferStatus.DRAFT: frozenset({OfferStatus.PENDING_REVIEW}),
    OfferStatus.PENDING_REVIEW: frozenset(
        {OfferStatus.APPROVED, OfferStatus.PUBLISHED, OfferStatus.REJECTED}
    ),
    OfferStatus.APPROVED: frozenset({OfferStatus.PUBLISHED, OfferStatus.ARCHIVED}),
    OfferStatus.PUBLISHED: frozenset({OfferStatus.ARCHIVED}),
    OfferStatus.REJECTED: frozenset(
        {OfferStatus.PENDING_REVIEW, OfferStatus.ARCHIVED}
    ),
    OfferStatus.ARCHIVED: frozenset(),
}

# Estados desde los que cada acción tiene una arista definida.
_ACTION_SOURCES: Mapping[OfferAction, frozenset[OfferStatus]] = {
    OfferAction.SUBMIT: frozenset({OfferStatus.DRAFT, OfferStatus.REJECTED}),
    OfferAction.APPROVE: frozenset({OfferStatus.PENDING_REVIEW}),
    OfferAction.REJECT: frozenset({OfferStatus.PENDING_REVIEW}),
    OfferAction.PUBLISH: frozenset({OfferStatus.APPROVED}),
    OfferAction.ARCHIVE: frozenset(
        {OfferStatus.APPROVED, OfferStatus.PUBLISHED, OfferStatus.REJECTED}
    ),
}


def can_transition(from_status: OfferStatus, to_status: OfferStatus) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def check_transition(
    from_status: OfferStatus,
    to_status: OfferStatus,
    *,
    rejection_reason: str | None = None,
    offer_id: UUID | None = None,
) -> None:
    """
    Valida una transición antes de cualquier escritura.

    Raises:
        IllegalTransitionError: si la arista no existe.
        ValidationError: si es un rechazo sin motivo (vacío o solo espacios).
    """
    if not can_transition(from_status, to_status):
        raise IllegalTransitionError(
            f"Transición no permitida: {from_status.value} -> {to_status.value}",
            offer_id=offer_id,
            current_status=from_status.value,
            requested_status=to_status.value,
        )

    if to_status == OfferStatus.REJECTED and not (rejection_reason or "").strip():
        raise ValidationError(
            "El motivo de rechazo es obligatorio", field="reason"
        )


def resolve_target(
    action: OfferAction,
    current: OfferStatus,
    *,
    auto_publish: bool = False,
    offer_id: UUID | None = None,
) -> OfferStatus:
    """
    Devuelve el estado destino de `action` aplicada sobre `current`.

    Raises:
        IllegalTransitionError: si la acción no aplica al estado observado
            (ej: approve sobre una oferta ya rechazada).
    """
    sources = _ACTION_SOURCES.get(action, frozenset())
    if current not in sources:
        expected = ", ".join(sorted(s.value for s in sources)) or "-"
        raise IllegalTransitionError(
            f"No se puede aplicar {action.value} a una oferta en estado "
            f"{current.value} (requiere: {expected})",
            offer_id=offer_id,
            current_status=current.value,
            requested_status=action.value,
        )

    if action == OfferAction.SUBMIT:
        return OfferStatus.PENDING_REVIEW
    if action == OfferAction.APPROVE:
        return OfferStatus.PUBLISHED if auto_publish else OfferStatus.APPROVED
    if action == OfferAction.REJECT:
        return OfferStatus.REJECTED
    if action == OfferAction.PUBLISH:
        return OfferStatus.PUBLISHED
    return OfferStatus.ARCHIVED
