"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/driver_offers.py
===============================================================================

Class/Module:
    Driver Offers Router (lado conductor)

Responsibilities:
    - Alta de ofertas por el conductor autenticado (draft o pending_review).
    - Envío a revisión (draft/rejected -> pending_review), solo el dueño.

Collaborators:
    - app.application.usecases (CreateOfferUseCase, SubmitOfferUseCase)
    - app.identity.auth.require_actor (scope offers:write)
    - app.container (factories DI)
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from app.application.usecases import (
    CreateOfferInput,
    CreateOfferUseCase,
    SubmitOfferUseCase,
)
from app.container import get_create_offer_use_case, get_submit_offer_use_case
from app.domain.entities import OfferStop
from app.identity.auth import Actor, require_actor
from fastapi import APIRouter, Depends

from ..dependencies import to_offer_res
from ..schemas.offers import CreateOfferReq, OfferEnvelopeRes

router = APIRouter(prefix="/driver/offers", tags=["driver"])


@router.post("", response_model=OfferEnvelopeRes, status_code=201)
def create_offer(
    req: CreateOfferReq,
    use_case: CreateOfferUseCase = Depends(get_create_offer_use_case),
    actor: Actor = Depends(require_actor("offers:write")),
):
    # R: El conductor es siempre el actor autenticado (no se acepta en el body).
    offer = use_case.execute(
        CreateOfferInput(
            driver_id=actor.actor_id,
            from_text=req.from_text,
            to_text=req.to_text,
            start_at=req.start_at,
            seats_total=req.seats_total,
            seats_free=req.seats_free,
            price_per_seat=req.price_per_seat,
            front_price_per_seat=req.front_price_per_seat,
            currency=req.currency,
            from_lat=req.from_lat,
            from_lng=req.from_lng,
            to_lat=req.to_lat,
            to_lng=req.to_lng,
            stops=[
                OfferStop(
                    order_no=s.order_no, label_text=s.label_text, lat=s.lat, lng=s.lng
                )
                for s in req.stops
            ],
            note=req.note,
            submit=req.submit,
        )
    )
    return OfferEnvelopeRes(offer=to_offer_res(offer))


@router.patch("/{offer_id}/submit", response_model=OfferEnvelopeRes)
def submit_offer(
    offer_id: UUID,
    use_case: SubmitOfferUseCase = Depends(get_submit_offer_use_case),
    actor: Actor = Depends(require_actor("offers:write")),
):
    return OfferEnvelopeRes(offer=to_offer_res(use_case.execute(offer_id, actor.actor_id)))
