"""
In-Memory Audit Event Repository for testing and development.

NOT FOR PRODUCTION USE - data is lost on restart.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from threading import Lock
from typing import List
from uuid import UUID

from ....domain.audit import AuditEvent


class InMemoryAuditEventRepository:
    """
    In-memory implementation of AuditEventRepository.

    Append-only. list_events() returns oldest first (created_at = time of the
    action, insertion order breaks ties). Filtered by target, events follow
    the offer version they were recorded at, i.e. the commit order of the
    transitions.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._events: List[AuditEvent] = []

    def record_event(self, event: AuditEvent) -> None:
        """Persist an audit event (created_at defaults to now)."""
        stored = dataclasses.replace(
            event,
            metadata=dict(event.metadata or {}),
            created_at=event.created_at or datetime.now(timezone.utc),
        )
        with self._lock:
            self._events.append(stored)

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
    ) -> List[AuditEvent]:
        """List audit events (oldest first) with filters."""
        if limit <= 0:
            return []

        with self._lock:
            indexed = list(enumerate(self._events))

        if target_id is not None:
            indexed.sort(
                key=lambda item: (
                    item[1].target_version is None,
                    item[1].target_version or 0,
                    item[1].created_at,
                    item[0],
                )
            )
        else:
            indexed.sort(key=lambda item: (item[1].created_at, item[0]))
        results = [event for _, event in indexed]

        if actor_id:
            results = [e for e in results if e.actor == actor_id]
        if action_prefix:
            results = [e for e in results if e.action.startswith(action_prefix)]
        if target_id is not None:
            results = [e for e in results if e.target_id == target_id]
        if start_at is not None:
            results = [e for e in results if e.created_at >= start_at]
        if end_at is not None:
            results = [e for e in results if e.created_at <= end_at]

        offset = max(offset, 0)
        return results[offset : offset + limit]

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def get_all_events(self) -> List[AuditEvent]:
        with self._lock:
            return list(self._events)
