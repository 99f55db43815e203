"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/offer.py
============================================================
Class: InMemoryDriverOfferRepository

Responsibilities:
  - Almacenar ofertas en memoria (tests / local dev).
  - Implementar transition() como compare-and-set atómico por oferta:
      * lock por oferta (nunca bloquea ofertas no relacionadas)
      * lock corto de registro para crear/buscar locks y la "tabla"
  - Mantener ordering determinístico alineado con Postgres:
      admin:   ORDER BY created_at DESC, id DESC
      público: ORDER BY start_at ASC, id ASC

Collaborators:
  - domain.entities.DriverOffer, OfferStatus
  - domain.offer_state_machine.check_transition
  - domain.repositories.DriverOfferRepository (contrato a implementar)

Constraints / Notes:
  - Snapshots: cada escritura crea una instancia NUEVA (dataclasses.replace)
    y cada lectura devuelve una copia; el caller nunca comparte estado.
  - check_invariants() corre antes de cada escritura.
============================================================
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime, timezone
from threading import Lock
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from ....crosscutting.exceptions import ConflictError, NotFoundError, ValidationError
from ....domain.entities import DriverOffer, OfferStatus
from ....domain.offer_state_machine import check_transition
from ....domain.repositories import DriverOfferRepository


def _snapshot(offer: DriverOffer) -> DriverOffer:
    """R: Copia con lista de paradas propia (las paradas son inmutables)."""
    return dataclasses.replace(offer, stops=list(offer.stops))


class InMemoryDriverOfferRepository(DriverOfferRepository):
    """
    Repositorio in-memory, thread-safe, para ofertas.

    Modelo mental:
    - _offers es la "tabla" (UUID -> DriverOffer), protegida por _registry_lock.
    - _offer_locks serializa read-compare-write de UNA oferta.
    """

    def __init__(self) -> None:
        self._registry_lock = Lock()
        self._offers: Dict[UUID, DriverOffer] = {}
        self._offer_locks: Dict[UUID, Lock] = {}

    # =========================================================
    # Helpers internos
    # =========================================================
    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _lock_for(self, offer_id: UUID) -> Lock:
        with self._registry_lock:
            lock = self._offer_locks.get(offer_id)
            if lock is None:
                lock = Lock()
                self._offer_locks[offer_id] = lock
            return lock

    def _values(self) -> List[DriverOffer]:
        with self._registry_lock:
            return list(self._offers.values())

    @staticmethod
    def _matches_text(value: str, needle: str | None) -> bool:
        return not needle or needle.lower() in value.lower()

    @staticmethod
    def _page(
        items: Iterable[DriverOffer], limit: int, offset: int
    ) -> Tuple[List[DriverOffer], int]:
        items = list(items)
        offset = max(offset, 0)
        if limit <= 0:
            return [], len(items)
        page = items[offset : offset + limit]
        return [_snapshot(o) for o in page], len(items)

    # =========================================================
    # Escrituras
    # =========================================================
    def create_offer(self, offer: DriverOffer) -> DriverOffer:
        """Crea la oferta; created_at/updated_at se setean aquí."""
        now = self._now()
        created = dataclasses.replace(
            offer, stops=list(offer.stops), created_at=now, updated_at=now, version=1
        )
        created.check_invariants()

        with self._registry_lock:
            if created.id in self._offers:
                raise ValidationError(
                    f"Offer {created.id} ya existe", field="id"
                )
            self._offers[created.id] = created
        return _snapshot(created)

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
        # 1-2) arista + motivo: antes de tocar nada
        check_transition(
            from_status,
            to_status,
            rejection_reason=rejection_reason,
            offer_id=offer_id,
        )

        # 3) compare-and-set bajo el lock de esta oferta
        with self._lock_for(offer_id):
            with self._registry_lock:
                current = self._offers.get(offer_id)
            if current is None:
                raise NotFoundError(
                    f"Offer {offer_id} no encontrada", identifier=str(offer_id)
                )
            if current.status != from_status:
                raise ConflictError(
                    f"Offer {offer_id} está en {current.status.value}, "
                    f"se esperaba {from_status.value}",
                    offer_id=offer_id,
                    expected_status=from_status.value,
                    actual_status=current.status.value,
                )

            now = self._now()
            changes: dict = {
                "status": to_status,
                "rejection_reason": (
                    rejection_reason.strip()
                    if to_status == OfferStatus.REJECTED and rejection_reason
                    else None
                ),
                "updated_at": now,
                "version": current.version + 1,
            }
            if review:
                changes["reviewed_by"] = actor_id
                changes["reviewed_at"] = now

            updated = dataclasses.replace(current, stops=list(current.stops), **changes)
            updated.check_invariants()

            # 4) escritura
            with self._registry_lock:
                self._offers[offer_id] = updated
            return _snapshot(updated)

    # =========================================================
    # Lecturas
    # =========================================================
    def get_offer(self, offer_id: UUID) -> Optional[DriverOffer]:
        with self._registry_lock:
            offer = self._offers.get(offer_id)
        return _snapshot(offer) if offer is not None else None

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
        wanted = set(statuses) if statuses else None

        def predicate(o: DriverOffer) -> bool:
            if wanted is not None and o.status not in wanted:
                return False
            if date_from is not None and o.start_at < date_from:
                return False
            if date_to is not None and o.start_at > date_to:
                return False
            if search and not (
                self._matches_text(o.from_text, search)
                or self._matches_text(o.to_text, search)
            ):
                return False
            return True

        # Empate en created_at: gana la insertada después (orden del dict).
        ranked = sorted(
            ((pos, o) for pos, o in enumerate(self._values()) if predicate(o)),
            key=lambda item: (item[1].created_at, item[0]),
            reverse=True,
        )
        return self._page((o for _, o in ranked), limit, offset)

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
        def predicate(o: DriverOffer) -> bool:
            if o.status != OfferStatus.PUBLISHED or o.start_at < now:
                return False
            if not self._matches_text(o.from_text, from_text):
                return False
            if not self._matches_text(o.to_text, to_text):
                return False
            if day is not None and o.start_at.astimezone(timezone.utc).date() != day:
                return False
            return True

        items = sorted(
            (o for o in self._values() if predicate(o)),
            key=lambda o: (o.start_at, str(o.id)),
        )
        return self._page(items, limit, offset)

    def count_by_status(self) -> Dict[OfferStatus, int]:
        counts: Dict[OfferStatus, int] = {status: 0 for status in OfferStatus}
        for offer in self._values():
            counts[offer.status] += 1
        return counts

    def ping(self) -> bool:
        return True

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        with self._registry_lock:
            self._offers.clear()
            self._offer_locks.clear()
