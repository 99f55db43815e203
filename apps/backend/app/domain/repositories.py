"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for the domain layer (ports).
- Keep the application/domain independent from infrastructure (PostgreSQL, in-memory).
- Enable dependency inversion and straightforward unit testing (stub repositories).

Collaborators
- domain.entities: DriverOffer, OfferStatus
- domain.audit: AuditEvent
- infrastructure.repositories: postgres/*, in_memory/* implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Implementations MUST match method signatures exactly.
- Status changes go ONLY through `transition()`: there is no generic update.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- Listing methods return (page, total) so callers can paginate without a
  second round-trip.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Protocol, Sequence, Tuple
from uuid import UUID

from .audit import AuditEvent
from .entities import DriverOffer, OfferStatus


class DriverOfferRepository(Protocol):
    """
    R: Interface for offer persistence.

    Implementations must provide:
      - Snapshot reads (callers never share mutable state with the store)
      - Compare-and-set status transitions, serialized per offer
      - Aggregated counts per status
    """

    def create_offer(self, offer: DriverOffer) -> DriverOffer:
        """R: Persist a new offer (invariants checked before writing)."""
        ...

    def get_offer(self, offer_id: UUID) -> Optional[DriverOffer]:
        """R: Get an offer snapshot by ID (None if unknown)."""
        ...

    def list_offers(
        self,
        *,
        statuses: Sequence[OfferStatus] | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[DriverOffer], int]:
        """
        R: Admin listing, newest first (created_at DESC).

        Args:
            statuses: Keep only offers in these statuses (None = all)
            date_from/date_to: Range over start_at (inclusive)
            search: Case-insensitive substring over from_text/to_text
        """
        ...

    def list_published_offers(
        self,
        *,
        now: datetime,
        from_text: str | None = None,
        to_text: str | None = None,
        day: date | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[DriverOffer], int]:
        """R: Public listing: published offers starting at/after `now`, soonest first."""
        ...

    def transition(
        self,
        offer_id: UUID,
        *,
        from_status: OfferStatus,
        to_status: OfferStatus,
        actor_id: str,
        rejection_reason: str | None = None,
        review: bool = True,
    ) -> DriverOffer:
        """
        R: Atomic compare-and-set on status.

        Order of checks:
            1) edge exists              -> IllegalTransitionError
            2) reason for rejected      -> ValidationError
            3) current == from_status   -> ConflictError / NotFoundError
            4) write                    -> StorageError on failure

        When `review` is True, reviewed_by/reviewed_at are stamped with
        actor_id/now. rejection_reason is set on rejected and cleared otherwise.
        """
        ...

    def count_by_status(self) -> Dict[OfferStatus, int]:
        """R: Count offers grouped by status (missing statuses = 0)."""
        ...

    def ping(self) -> bool:
        """R: Readiness check for the backing store."""
        ...


class AuditEventRepository(Protocol):
    """R: Interface for audit event persistence (append-only)."""

    def record_event(self, event: AuditEvent) -> None:
        """R: Persist an audit event."""
        ...

    def list_events(
        self,
        *,
        actor_id: str | None = None,
        action_prefix: str | None = None,
        target_id: UUID | None = None,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditEvent]:
        """R: Fetch audit events (oldest first) with optional filters."""
        ...
