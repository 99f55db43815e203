"""
Name: Offer State Machine Tests

Responsibilities:
  - Validate the allowed transition graph
  - Validate action -> target resolution from the observed status
  - Validate rejection reason checks
"""

import pytest

from app.crosscutting.exceptions import IllegalTransitionError, ValidationError
from app.domain.entities import OfferStatus
from app.domain.offer_state_machine import (
    ALLOWED_TRANSITIONS,
    OfferAction,
    can_transition,
    check_transition,
    resolve_target,
)

pytestmark = pytest.mark.unit

S = OfferStatus

_EXPECTED_EDGES = {
    (S.DRAFT, S.PENDING_REVIEW),
    (S.PENDING_REVIEW, S.APPROVED),
    (S.PENDING_REVIEW, S.PUBLISHED),
    (S.PENDING_REVIEW, S.REJECTED),
    (S.APPROVED, S.PUBLISHED),
    (S.APPROVED, S.ARCHIVED),
    (S.PUBLISHED, S.ARCHIVED),
    (S.REJECTED, S.PENDING_REVIEW),
    (S.REJECTED, S.ARCHIVED),
}


def test_graph_matches_expected_edges():
    edges = {(src, dst) for src, dsts in ALLOWED_TRANSITIONS.items() for dst in dsts}
    assert edges == _EXPECTED_EDGES


@pytest.mark.parametrize("src", list(OfferStatus))
@pytest.mark.parametrize("dst", list(OfferStatus))
def test_can_transition_only_for_known_edges(src, dst):
    assert can_transition(src, dst) is ((src, dst) in _EXPECTED_EDGES)


def test_archived_is_terminal():
    assert all(not can_transition(S.ARCHIVED, dst) for dst in OfferStatus)


def test_check_transition_rejects_unknown_edge_with_statuses():
    with pytest.raises(IllegalTransitionError) as exc_info:
        check_transition(S.ARCHIVED, S.PUBLISHED)

    assert exc_info.value.current_status == "archived"
    assert exc_info.value.requested_status == "published"


@pytest.mark.parametrize("reason", [None, "", "   ", "\n\t"])
def test_check_transition_requires_reason_for_reject(reason):
    with pytest.raises(ValidationError) as exc_info:
        check_transition(S.PENDING_REVIEW, S.REJECTED, rejection_reason=reason)

    assert exc_info.value.field == "reason"


def test_check_transition_edge_is_checked_before_reason():
    """R: An illegal edge wins over a missing reason."""
    with pytest.raises(IllegalTransitionError):
        check_transition(S.DRAFT, S.REJECTED, rejection_reason="")


def test_check_transition_accepts_reject_with_reason():
    check_transition(S.PENDING_REVIEW, S.REJECTED, rejection_reason="Price too high")


class TestResolveTarget:
    def test_approve_goes_to_approved(self):
        assert resolve_target(OfferAction.APPROVE, S.PENDING_REVIEW) == S.APPROVED

    def test_approve_with_auto_publish_goes_to_published(self):
        assert (
            resolve_target(OfferAction.APPROVE, S.PENDING_REVIEW, auto_publish=True)
            == S.PUBLISHED
        )

    def test_reject_publish_archive_submit(self):
        assert resolve_target(OfferAction.REJECT, S.PENDING_REVIEW) == S.REJECTED
        assert resolve_target(OfferAction.PUBLISH, S.APPROVED) == S.PUBLISHED
        assert resolve_target(OfferAction.ARCHIVE, S.PUBLISHED) == S.ARCHIVED
        assert resolve_target(OfferAction.SUBMIT, S.REJECTED) == S.PENDING_REVIEW

    @pytest.mark.parametrize(
        "action,current",
        [
            (OfferAction.APPROVE, S.REJECTED),
            (OfferAction.APPROVE, S.APPROVED),
            (OfferAction.REJECT, S.APPROVED),
            (OfferAction.PUBLISH, S.PENDING_REVIEW),
            (OfferAction.PUBLISH, S.PUBLISHED),
            (OfferAction.ARCHIVE, S.PENDING_REVIEW),
            (OfferAction.ARCHIVE, S.DRAFT),
            (OfferAction.ARCHIVE, S.ARCHIVED),
            (OfferAction.SUBMIT, S.PENDING_REVIEW),
        ],
    )
    def test_action_not_applicable_raises_illegal_transition(self, action, current):
        with pytest.raises(IllegalTransitionError) as exc_info:
            resolve_target(action, current)

        assert exc_info.value.current_status == current.value

    def test_every_resolved_target_is_an_allowed_edge(self):
        for action in OfferAction:
            if action == OfferAction.CREATE:
                continue
            for current in OfferStatus:
                try:
                    target = resolve_target(action, current)
                except IllegalTransitionError:
                    continue
                assert can_transition(current, target)
