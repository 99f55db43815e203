"""
Name: Driver Offer Use Case Tests

Responsibilities:
  - Offer creation rules (seats, price, start_at, currency, stops, coordinates)
  - Submit / resubmit by the owner only
  - Public listing of published offers
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.application.offer_locks import PerOfferLocks
from app.application.usecases import (
    ApproveOfferUseCase,
    CreateOfferInput,
    CreateOfferUseCase,
    ListPublishedOffersInput,
    ListPublishedOffersUseCase,
    RejectOfferUseCase,
    SubmitOfferUseCase,
)
from app.crosscutting.exceptions import (
    ForbiddenError,
    IllegalTransitionError,
    ValidationError,
)
from app.domain.entities import OfferStatus, OfferStop

pytestmark = pytest.mark.unit

S = OfferStatus
NOW = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def create(offer_repository, audit_trail):
    return CreateOfferUseCase(
        offer_repository, audit_trail, max_seats=8, min_advance_minutes=30, clock=lambda: NOW
    )


def _input(**overrides) -> CreateOfferInput:
    data = dict(
        driver_id="driver-7",
        from_text=" Tashkent ",
        to_text="Fergana",
        start_at=NOW + timedelta(hours=6),
        seats_total=3,
        price_per_seat=Decimal("90000"),
    )
    data.update(overrides)
    return CreateOfferInput(**data)


class TestCreateOffer:
    def test_creates_draft_with_defaults(self, create, audit_repository):
        offer = create.execute(_input())

        assert offer.status == S.DRAFT
        assert offer.from_text == "Tashkent"
        assert offer.seats_free == 3
        assert offer.currency == "UZS"
        assert offer.reviewed_by is None

        [event] = audit_repository.get_all_events()
        assert event.action == "offer.create"
        assert event.actor == "driver-7"
        assert event.metadata["status"] == "draft"

    def test_submit_flag_creates_pending_review(self, create):
        assert create.execute(_input(submit=True)).status == S.PENDING_REVIEW

    def test_naive_start_at_is_treated_as_utc(self, create):
        naive = (NOW + timedelta(hours=2)).replace(tzinfo=None)

        offer = create.execute(_input(start_at=naive))

        assert offer.start_at.tzinfo is not None
        assert offer.start_at == NOW + timedelta(hours=2)

    def test_stops_are_sorted_by_order_no(self, create):
        offer = create.execute(
            _input(
                stops=[
                    OfferStop(order_no=2, label_text="Kokand"),
                    OfferStop(order_no=1, label_text="Angren"),
                ]
            )
        )

        assert [s.label_text for s in offer.stops] == ["Angren", "Kokand"]

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"from_text": "  "}, "from_text"),
            ({"to_text": ""}, "to_text"),
            ({"seats_total": 0}, "seats_total"),
            ({"seats_total": 9}, "seats_total"),
            ({"seats_free": 4}, "seats_free"),
            ({"seats_free": -1}, "seats_free"),
            ({"price_per_seat": Decimal("-1")}, "price_per_seat"),
            (
                {"front_price_per_seat": Decimal("80000")},
                "front_price_per_seat",
            ),
            ({"start_at": NOW - timedelta(minutes=1)}, "start_at"),
            ({"start_at": NOW + timedelta(minutes=10)}, "start_at"),
            ({"currency": "US"}, "currency"),
            ({"from_lat": 91.0}, "from"),
            ({"to_lng": -181.0}, "to"),
            (
                {
                    "stops": [
                        OfferStop(order_no=1, label_text="A"),
                        OfferStop(order_no=1, label_text="B"),
                    ]
                },
                "stops",
            ),
        ],
    )
    def test_invalid_input(self, create, offer_repository, audit_repository, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            create.execute(_input(**overrides))

        assert exc_info.value.field == field
        assert offer_repository.count_by_status()[S.DRAFT] == 0
        assert audit_repository.get_all_events() == []


class TestSubmitOffer:
    @pytest.fixture
    def submit(self, offer_repository, audit_trail):
        return SubmitOfferUseCase(offer_repository, audit_trail, PerOfferLocks())

    def test_owner_submits_draft(self, seed_offer, submit, audit_repository):
        offer = seed_offer(status=S.DRAFT, driver_id="driver-7")

        updated = submit.execute(offer.id, "driver-7")

        assert updated.status == S.PENDING_REVIEW
        assert updated.reviewed_by is None
        assert [e.action for e in audit_repository.get_all_events()] == [
            "offer.submit"
        ]

    def test_other_driver_is_forbidden(self, seed_offer, submit, offer_repository):
        offer = seed_offer(status=S.DRAFT, driver_id="driver-7")

        with pytest.raises(ForbiddenError):
            submit.execute(offer.id, "driver-8")

        assert offer_repository.get_offer(offer.id).status == S.DRAFT

    def test_submit_pending_offer_is_illegal(self, seed_offer, submit):
        offer = seed_offer(driver_id="driver-7")

        with pytest.raises(IllegalTransitionError):
            submit.execute(offer.id, "driver-7")

    def test_resubmit_after_reject_keeps_history(
        self, seed_offer, submit, offer_repository, audit_trail, audit_repository
    ):
        offer = seed_offer(driver_id="driver-7")
        RejectOfferUseCase(offer_repository, audit_trail).execute(
            offer.id, "mod-1", "Blurry photo"
        )

        resubmitted = submit.execute(offer.id, "driver-7")

        assert resubmitted.status == S.PENDING_REVIEW
        assert resubmitted.rejection_reason is None
        # El último revisor se conserva hasta la próxima revisión.
        assert resubmitted.reviewed_by == "mod-1"
        assert [e.action for e in audit_repository.get_all_events()] == [
            "offer.reject",
            "offer.submit",
        ]

        approved = ApproveOfferUseCase(offer_repository, audit_trail).execute(
            offer.id, "mod-2"
        )
        assert approved.status == S.APPROVED
        assert approved.reviewed_by == "mod-2"


class TestListPublishedOffers:
    def test_only_future_published_offers_sorted_by_start(
        self, seed_offer, offer_repository
    ):
        later = seed_offer(status=S.PUBLISHED, start_at=NOW + timedelta(days=2))
        sooner = seed_offer(status=S.PUBLISHED, start_at=NOW + timedelta(hours=3))
        seed_offer(status=S.PUBLISHED, start_at=NOW - timedelta(hours=3))
        seed_offer(status=S.APPROVED, start_at=NOW + timedelta(hours=3))

        page = ListPublishedOffersUseCase(offer_repository, clock=lambda: NOW).execute(
            ListPublishedOffersInput()
        )

        assert page.total == 2
        assert [o.id for o in page.offers] == [sooner.id, later.id]

    def test_filters_by_route_text(self, seed_offer, offer_repository):
        seed_offer(
            status=S.PUBLISHED,
            start_at=NOW + timedelta(days=1),
            from_text="Tashkent",
            to_text="Bukhara",
        )
        seed_offer(
            status=S.PUBLISHED,
            start_at=NOW + timedelta(days=1),
            from_text="Tashkent",
            to_text="Nukus",
        )

        page = ListPublishedOffersUseCase(offer_repository, clock=lambda: NOW).execute(
            ListPublishedOffersInput(from_text="tash", to_text="BUKH")
        )

        assert page.total == 1
        assert page.offers[0].to_text == "Bukhara"

    def test_rejects_bad_limit(self, offer_repository):
        with pytest.raises(ValidationError):
            ListPublishedOffersUseCase(offer_repository).execute(
                ListPublishedOffersInput(limit=0)
            )

    def test_empty_store(self, offer_repository):
        page = ListPublishedOffersUseCase(offer_repository, clock=lambda: NOW).execute(
            ListPublishedOffersInput()
        )

        assert page.offers == []
        assert page.total == 0
