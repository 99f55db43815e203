"""
Public Offers Router

GET /public/offers: ofertas publicadas y vigentes, sin auth.
"""

from __future__ import annotations

from datetime import date

from app.application.usecases import (
    ListPublishedOffersInput,
    ListPublishedOffersUseCase,
)
from app.container import get_list_published_offers_use_case
from fastapi import APIRouter, Depends, Query

from ..dependencies import to_offer_res
from ..schemas.offers import OffersListRes

router = APIRouter(prefix="/public/offers", tags=["public"])


@router.get("", response_model=OffersListRes)
def list_published_offers(
    from_text: str | None = Query(None, max_length=200),
    to_text: str | None = Query(None, max_length=200),
    day: date | None = Query(None, alias="date"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    use_case: ListPublishedOffersUseCase = Depends(
        get_list_published_offers_use_case
    ),
):
    page = use_case.execute(
        ListPublishedOffersInput(
            from_text=from_text,
            to_text=to_text,
            day=day,
            limit=limit,
            offset=offset,
        )
    )
    return OffersListRes(offers=[to_offer_res(o) for o in page.offers], total=page.total)
