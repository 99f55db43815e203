"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/offers.py
===============================================================================

Class/Module:
    Driver Offers Moderation Router (admin)

Responsibilities:
    - Exponer la cola de moderación: listado filtrado, detalle y estadísticas.
    - Exponer las acciones approve/reject/publish/archive.
    - Convertir requests HTTP -> inputs de casos de uso.
    - Enforce de scopes en el borde (offers:read / offers:moderate).

Collaborators:
    - app.application.usecases (List/Get/Statistics + comandos de moderación)
    - app.identity.auth (require_scope, require_actor)
    - app.container (factories DI)
    - schemas.offers (DTOs Pydantic)

Notas:
    - Los errores de dominio (ModerationError) NO se traducen aquí: los
      maneja api.exception_handlers con RFC7807.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.application.usecases import (
    ApproveOfferUseCase,
    ArchiveOfferUseCase,
    GetOfferStatisticsUseCase,
    GetOfferUseCase,
    ListOffersInput,
    ListOffersUseCase,
    PublishOfferUseCase,
    RejectOfferUseCase,
)
from app.container import (
    get_approve_offer_use_case,
    get_archive_offer_use_case,
    get_get_offer_use_case,
    get_list_offers_use_case,
    get_offer_statistics_use_case,
    get_publish_offer_use_case,
    get_reject_offer_use_case,
)
from app.identity.auth import Actor, require_actor, require_scope
from fastapi import APIRouter, Body, Depends, Query

from ..dependencies import ensure_date_range, parse_status_filter, to_offer_res
from ..schemas.offers import (
    ApproveOfferReq,
    OfferEnvelopeRes,
    OffersListRes,
    RejectOfferReq,
    StatisticsRes,
)

router = APIRouter(prefix="/admin/driver-offers", tags=["moderation"])


# -----------------------------------------------------------------------------
# Lecturas
# -----------------------------------------------------------------------------


@router.get("", response_model=OffersListRes)
def list_offers(
    status: str | None = Query(
        None, description="Estados separados por coma (pending_review,approved)"
    ),
    date_from: datetime | None = Query(None, alias="from"),
    date_to: datetime | None = Query(None, alias="to"),
    search: str | None = Query(None, max_length=200),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    use_case: ListOffersUseCase = Depends(get_list_offers_use_case),
    _actor: Actor | None = Depends(require_scope("offers:read")),
):
    statuses = parse_status_filter(status)
    date_from, date_to = ensure_date_range(date_from, date_to)

    page = use_case.execute(
        ListOffersInput(
            statuses=statuses,
            date_from=date_from,
            date_to=date_to,
            search=search,
            limit=limit,
            offset=offset,
        )
    )
    return OffersListRes(
        offers=[to_offer_res(o) for o in page.offers],
        total=page.total,
    )


@router.get("/statistics", response_model=StatisticsRes)
def get_statistics(
    use_case: GetOfferStatisticsUseCase = Depends(get_offer_statistics_use_case),
    _actor: Actor | None = Depends(require_scope("offers:read")),
):
    snapshot = use_case.execute()
    return StatisticsRes(statistics=snapshot.as_dict())


@router.get("/{offer_id}", response_model=OfferEnvelopeRes)
def get_offer(
    offer_id: UUID,
    use_case: GetOfferUseCase = Depends(get_get_offer_use_case),
    _actor: Actor | None = Depends(require_scope("offers:read")),
):
    return OfferEnvelopeRes(offer=to_offer_res(use_case.execute(offer_id)))


# -----------------------------------------------------------------------------
# Acciones de moderación
# -----------------------------------------------------------------------------


@router.patch("/{offer_id}/approve", response_model=OfferEnvelopeRes)
def approve_offer(
    offer_id: UUID,
    req: ApproveOfferReq | None = Body(None),
    use_case: ApproveOfferUseCase = Depends(get_approve_offer_use_case),
    actor: Actor = Depends(require_actor("offers:moderate")),
):
    auto_publish = bool(req and req.auto_publish)
    offer = use_case.execute(offer_id, actor.actor_id, auto_publish=auto_publish)
    return OfferEnvelopeRes(offer=to_offer_res(offer))


@router.patch("/{offer_id}/reject", response_model=OfferEnvelopeRes)
def reject_offer(
    offer_id: UUID,
    req: RejectOfferReq | None = Body(None),
    use_case: RejectOfferUseCase = Depends(get_reject_offer_use_case),
    actor: Actor = Depends(require_actor("offers:moderate")),
):
    offer = use_case.execute(offer_id, actor.actor_id, req.reason if req else None)
    return OfferEnvelopeRes(offer=to_offer_res(offer))


@router.patch("/{offer_id}/publish", response_model=OfferEnvelopeRes)
def publish_offer(
    offer_id: UUID,
    use_case: PublishOfferUseCase = Depends(get_publish_offer_use_case),
    actor: Actor = Depends(require_actor("offers:moderate")),
):
    return OfferEnvelopeRes(offer=to_offer_res(use_case.execute(offer_id, actor.actor_id)))


@router.patch("/{offer_id}/archive", response_model=OfferEnvelopeRes)
def archive_offer(
    offer_id: UUID,
    use_case: ArchiveOfferUseCase = Depends(get_archive_offer_use_case),
    actor: Actor = Depends(require_actor("offers:moderate")),
):
    return OfferEnvelopeRes(offer=to_offer_res(use_case.execute(offer_id, actor.actor_id)))
