"""
===============================================================================
TARJETA CRC — application/offer_locks.py
===============================================================================

Clase:
    PerOfferLocks

Responsabilidades:
    - Serializar, por oferta, la secuencia "transición + auditoría" para que
      los eventos de una misma oferta queden en orden de commit.
    - Nunca bloquear ofertas no relacionadas (un lock por id).

Colaboradores:
    - application/usecases/moderation/offer_command.py
    - container.py (instancia única por proceso)

Notas:
    - No reemplaza el compare-and-set del store: dos moderadores que leyeron
      el mismo estado siguen resolviéndose por ConflictError.
    - Los locks se crean bajo demanda y se liberan cuando nadie los usa.
===============================================================================
"""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator, Tuple
from uuid import UUID


class PerOfferLocks:
    def __init__(self) -> None:
        self._registry_lock = Lock()
        # offer_id -> (lock, usuarios activos)
        self._locks: Dict[UUID, Tuple[Lock, int]] = {}

    @contextmanager
    def hold(self, offer_id: UUID) -> Iterator[None]:
        with self._registry_lock:
            lock, users = self._locks.get(offer_id, (None, 0))
            if lock is None:
                lock = Lock()
            self._locks[offer_id] = (lock, users + 1)

        try:
            with lock:
                yield
        finally:
            with self._registry_lock:
                _, users = self._locks[offer_id]
                if users <= 1:
                    del self._locks[offer_id]
                else:
                    self._locks[offer_id] = (lock, users - 1)

    def active(self) -> int:
        """Cantidad de ofertas con lock en uso (diagnóstico/tests)."""
        with self._registry_lock:
            return len(self._locks)
