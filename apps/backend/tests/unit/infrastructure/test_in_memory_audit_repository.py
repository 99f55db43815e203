"""
Name: In-Memory Audit Repository Tests

Responsibilities:
  - Events of one offer are listed in the order their transitions committed
    (target_version), even when a lower version is written later
  - Unfiltered listing is oldest first by time of the action
  - Date filters are inclusive
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from app.domain.audit import AuditEvent
from app.infrastructure.repositories import InMemoryAuditEventRepository

pytestmark = pytest.mark.unit

T0 = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)


def _event(action: str, *, target=None, version=None, at=T0) -> AuditEvent:
    return AuditEvent(
        id=uuid4(),
        actor="mod-1",
        action=action,
        target_id=target,
        created_at=at,
        target_version=version,
    )


def test_target_listing_follows_commit_order():
    repo = InMemoryAuditEventRepository()
    offer_id = uuid4()

    # R: otro worker escribió publish antes de que approve saliera del backlog.
    repo.record_event(
        _event("offer.publish", target=offer_id, version=3, at=T0 + timedelta(seconds=1))
    )
    repo.record_event(
        _event("offer.approve", target=offer_id, version=2, at=T0 + timedelta(seconds=2))
    )
    repo.record_event(_event("offer.create", target=offer_id, version=1))

    events = repo.list_events(target_id=offer_id)

    assert [e.action for e in events] == ["offer.create", "offer.approve", "offer.publish"]


def test_same_version_keeps_write_order():
    repo = InMemoryAuditEventRepository()
    offer_id = uuid4()

    repo.record_event(_event("offer.approve", target=offer_id, version=2))
    repo.record_event(_event("offer.publish", target=offer_id, version=2))

    events = repo.list_events(target_id=offer_id)

    assert [e.action for e in events] == ["offer.approve", "offer.publish"]


def test_unfiltered_listing_is_oldest_first():
    repo = InMemoryAuditEventRepository()

    repo.record_event(_event("offer.archive", target=uuid4(), at=T0 + timedelta(minutes=5)))
    repo.record_event(_event("offer.approve", target=uuid4(), at=T0))

    events = repo.list_events()

    assert [e.action for e in events] == ["offer.approve", "offer.archive"]


def test_date_range_is_inclusive():
    repo = InMemoryAuditEventRepository()
    for minutes in (0, 10, 20):
        repo.record_event(_event(f"offer.{minutes}", at=T0 + timedelta(minutes=minutes)))

    events = repo.list_events(
        start_at=T0 + timedelta(minutes=10), end_at=T0 + timedelta(minutes=20)
    )

    assert [e.action for e in events] == ["offer.10", "offer.20"]
