"""
Name: Concurrent Moderation Tests

Responsibilities:
  - Two moderators acting on the same offer: exactly one wins, the other
    gets ConflictError, and only the winner is audited
  - Per-offer locks do not block unrelated offers
"""

import threading

import pytest

from app.application.offer_locks import PerOfferLocks
from app.application.usecases import ApproveOfferUseCase, RejectOfferUseCase
from app.crosscutting.exceptions import ConflictError
from app.domain.entities import OfferStatus

pytestmark = pytest.mark.unit


class ReadBarrierRepository:
    """R: Delegates to the real store; get_offer waits until every caller has read."""

    def __init__(self, inner, parties: int) -> None:
        self._inner = inner
        self._barrier = threading.Barrier(parties, timeout=5)

    def get_offer(self, offer_id):
        offer = self._inner.get_offer(offer_id)
        self._barrier.wait()
        return offer

    def __getattr__(self, item):
        return getattr(self._inner, item)


def _run_in_threads(*targets):
    errors: list[BaseException] = []
    results: list[object] = []
    lock = threading.Lock()

    def wrap(fn):
        def runner():
            try:
                value = fn()
            except BaseException as exc:
                with lock:
                    errors.append(exc)
            else:
                with lock:
                    results.append(value)

        return runner

    threads = [threading.Thread(target=wrap(t)) for t in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return results, errors


def test_two_approvals_one_conflict(seed_offer, offer_repository, audit_trail, audit_repository):
    offer = seed_offer()
    repo = ReadBarrierRepository(offer_repository, parties=2)
    use_case = ApproveOfferUseCase(repo, audit_trail, PerOfferLocks())

    results, errors = _run_in_threads(
        lambda: use_case.execute(offer.id, "mod-a"),
        lambda: use_case.execute(offer.id, "mod-b"),
    )

    assert len(results) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], ConflictError)

    stored = offer_repository.get_offer(offer.id)
    assert stored.status == OfferStatus.APPROVED
    assert stored.reviewed_by == results[0].reviewed_by

    events = audit_repository.get_all_events()
    assert [e.action for e in events] == ["offer.approve"]
    assert events[0].actor == stored.reviewed_by


def test_approve_racing_reject_leaves_consistent_state(
    seed_offer, offer_repository, audit_trail, audit_repository
):
    offer = seed_offer()
    repo = ReadBarrierRepository(offer_repository, parties=2)
    locks = PerOfferLocks()
    approve = ApproveOfferUseCase(repo, audit_trail, locks)
    reject = RejectOfferUseCase(repo, audit_trail, locks)

    results, errors = _run_in_threads(
        lambda: approve.execute(offer.id, "mod-a"),
        lambda: reject.execute(offer.id, "mod-b", "Suspicious price"),
    )

    assert len(results) == 1
    assert [type(e) for e in errors] == [ConflictError]

    stored = offer_repository.get_offer(offer.id)
    [event] = audit_repository.get_all_events()
    if stored.status == OfferStatus.REJECTED:
        assert stored.rejection_reason == "Suspicious price"
        assert event.action == "offer.reject"
    else:
        assert stored.status == OfferStatus.APPROVED
        assert stored.rejection_reason is None
        assert event.action == "offer.approve"


def test_locks_for_different_offers_are_independent(seed_offer):
    locks = PerOfferLocks()
    first = seed_offer()
    second = seed_offer()
    acquired = threading.Event()

    with locks.hold(first.id):
        def other():
            with locks.hold(second.id):
                acquired.set()

        t = threading.Thread(target=other)
        t.start()
        t.join(timeout=2)

    assert acquired.is_set()
    assert locks.active() == 0
