"""
Name: Domain Entity Tests

Responsibilities:
  - Validate DriverOffer invariants (seats, prices, rejection reason, review pair)
  - Validate StatisticsSnapshot totals and serialization
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.crosscutting.exceptions import ValidationError
from app.domain.entities import OfferStatus, StatisticsSnapshot

pytestmark = pytest.mark.unit


class TestDriverOfferInvariants:
    def test_valid_offer_passes(self, make_offer):
        make_offer().check_invariants()

    def test_new_offer_defaults(self, make_offer):
        offer = make_offer(status=OfferStatus.DRAFT)

        assert offer.rejection_reason is None
        assert offer.reviewed_by is None
        assert offer.is_reviewed is False

    @pytest.mark.parametrize("seats_total", [0, -1])
    def test_seats_total_must_be_positive(self, make_offer, seats_total):
        with pytest.raises(ValidationError) as exc_info:
            make_offer(seats_total=seats_total, seats_free=0).check_invariants()
        assert exc_info.value.field == "seats_total"

    @pytest.mark.parametrize("seats_free", [-1, 5])
    def test_seats_free_within_bounds(self, make_offer, seats_free):
        with pytest.raises(ValidationError) as exc_info:
            make_offer(seats_total=4, seats_free=seats_free).check_invariants()
        assert exc_info.value.field == "seats_free"

    def test_price_cannot_be_negative(self, make_offer):
        with pytest.raises(ValidationError):
            make_offer(price_per_seat=Decimal("-1")).check_invariants()

    def test_front_price_cannot_be_below_price(self, make_offer):
        with pytest.raises(ValidationError) as exc_info:
            make_offer(
                price_per_seat=Decimal("100000"), front_price_per_seat=Decimal("99999")
            ).check_invariants()
        assert exc_info.value.field == "front_price_per_seat"

    def test_front_price_equal_to_price_is_valid(self, make_offer):
        make_offer(
            price_per_seat=Decimal("100000"), front_price_per_seat=Decimal("100000")
        ).check_invariants()

    def test_rejected_requires_reason(self, make_offer):
        with pytest.raises(ValidationError):
            make_offer(status=OfferStatus.REJECTED).check_invariants()

    def test_rejected_with_blank_reason_is_invalid(self, make_offer):
        with pytest.raises(ValidationError):
            make_offer(
                status=OfferStatus.REJECTED, rejection_reason="   "
            ).check_invariants()

    def test_reason_only_allowed_when_rejected(self, make_offer):
        with pytest.raises(ValidationError):
            make_offer(
                status=OfferStatus.APPROVED, rejection_reason="left over"
            ).check_invariants()

    def test_review_fields_go_together(self, make_offer):
        with pytest.raises(ValidationError):
            make_offer(reviewed_by="moderator-1").check_invariants()

        with pytest.raises(ValidationError):
            make_offer(reviewed_at=datetime.now(timezone.utc)).check_invariants()

    def test_reviewed_offer(self, make_offer):
        offer = make_offer(
            status=OfferStatus.APPROVED,
            reviewed_by="moderator-1",
            reviewed_at=datetime.now(timezone.utc),
        )
        offer.check_invariants()
        assert offer.is_reviewed is True


class TestStatisticsSnapshot:
    def test_empty_snapshot_is_all_zero(self):
        snapshot = StatisticsSnapshot.from_counts({})

        assert snapshot.total == 0
        assert snapshot.as_dict() == {
            "total": 0,
            "draft": 0,
            "pending_review": 0,
            "approved": 0,
            "published": 0,
            "rejected": 0,
            "archived": 0,
        }

    def test_total_is_sum_of_counts(self):
        snapshot = StatisticsSnapshot.from_counts(
            {
                OfferStatus.DRAFT: 1,
                OfferStatus.PENDING_REVIEW: 3,
                OfferStatus.PUBLISHED: 2,
                OfferStatus.ARCHIVED: 4,
            }
        )

        assert snapshot.total == 10
        assert snapshot.pending_review == 3
        assert snapshot.approved == 0
        assert snapshot.as_dict()["total"] == 10
