"""
Name: PostgreSQL Repository Integration Tests

Responsibilities:
  - Round trip offers with stops through driver_offers / driver_offer_stops
  - Compare-and-set transitions (Conflict / NotFound) against real rows
  - Audit events listed oldest first; per offer in commit order (target_version)
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from app.crosscutting.exceptions import ConflictError, NotFoundError
from app.domain.audit import AuditEvent
from app.domain.entities import DriverOffer, OfferStatus, OfferStop
from app.infrastructure.repositories import (
    PostgresAuditEventRepository,
    PostgresDriverOfferRepository,
)

pytestmark = pytest.mark.integration


def _offer(**overrides) -> DriverOffer:
    data = dict(
        id=uuid4(),
        driver_id="driver-1",
        from_text="Tashkent",
        to_text="Samarkand",
        start_at=datetime.now(timezone.utc) + timedelta(days=1),
        seats_total=4,
        seats_free=4,
        price_per_seat=Decimal("120000.00"),
        status=OfferStatus.PENDING_REVIEW,
        stops=[OfferStop(order_no=1, label_text="Jizzakh")],
    )
    data.update(overrides)
    return DriverOffer(**data)


def test_create_and_get_offer(db_pool):
    repo = PostgresDriverOfferRepository(db_pool)
    offer = repo.create_offer(_offer())

    fetched = repo.get_offer(offer.id)

    assert fetched.status == OfferStatus.PENDING_REVIEW
    assert fetched.price_per_seat == Decimal("120000.00")
    assert [s.label_text for s in fetched.stops] == ["Jizzakh"]


def test_transition_compare_and_set(db_pool):
    repo = PostgresDriverOfferRepository(db_pool)
    offer = repo.create_offer(_offer())

    approved = repo.transition(
        offer.id,
        from_status=OfferStatus.PENDING_REVIEW,
        to_status=OfferStatus.APPROVED,
        actor_id="mod-1",
    )
    assert approved.reviewed_by == "mod-1"
    assert (offer.version, approved.version) == (1, 2)

    with pytest.raises(ConflictError):
        repo.transition(
            offer.id,
            from_status=OfferStatus.PENDING_REVIEW,
            to_status=OfferStatus.APPROVED,
            actor_id="mod-2",
        )

    with pytest.raises(NotFoundError):
        repo.transition(
            uuid4(),
            from_status=OfferStatus.PENDING_REVIEW,
            to_status=OfferStatus.APPROVED,
            actor_id="mod-2",
        )


def test_statistics_and_listing(db_pool):
    repo = PostgresDriverOfferRepository(db_pool)
    repo.create_offer(_offer())
    repo.create_offer(_offer(status=OfferStatus.DRAFT, from_text="Bukhara"))

    counts = repo.count_by_status()
    offers, total = repo.list_offers(search="bukh")

    assert counts[OfferStatus.PENDING_REVIEW] == 1
    assert counts[OfferStatus.DRAFT] == 1
    assert total == 1
    assert offers[0].from_text == "Bukhara"


def test_audit_events_oldest_first(db_pool):
    repo = PostgresAuditEventRepository(db_pool)
    target = uuid4()
    for action in ("offer.approve", "offer.publish"):
        repo.record_event(
            AuditEvent(id=uuid4(), actor="mod-1", action=action, target_id=target)
        )

    events = repo.list_events(target_id=target)

    assert [e.action for e in events] == ["offer.approve", "offer.publish"]


def test_audit_events_of_offer_follow_target_version(db_pool):
    repo = PostgresAuditEventRepository(db_pool)
    target = uuid4()
    t0 = datetime.now(timezone.utc)
    # R: el evento de la versión 2 se escribe después (backlog de otro worker).
    repo.record_event(
        AuditEvent(
            id=uuid4(),
            actor="mod-2",
            action="offer.publish",
            target_id=target,
            created_at=t0 + timedelta(seconds=1),
            target_version=3,
        )
    )
    repo.record_event(
        AuditEvent(
            id=uuid4(),
            actor="mod-1",
            action="offer.approve",
            target_id=target,
            created_at=t0 + timedelta(seconds=2),
            target_version=2,
        )
    )

    events = repo.list_events(target_id=target)

    assert [(e.action, e.target_version) for e in events] == [
        ("offer.approve", 2),
        ("offer.publish", 3),
    ]
