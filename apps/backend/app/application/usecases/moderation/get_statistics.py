"""
===============================================================================
USE CASE: Offer Statistics
===============================================================================

Business Goal:
    Conteos por estado para el dashboard, recalculados en cada llamada.

Contrato:
    - Un único count_by_status() por snapshot; sin cache ni locking.
    - total == suma de los conteos por estado (también con cero ofertas).
    - Tolera un store mutándose en paralelo (consistencia eventual).
===============================================================================
"""

from __future__ import annotations

from ....domain.entities import StatisticsSnapshot
from ....domain.repositories import DriverOfferRepository


class GetOfferStatisticsUseCase:
    def __init__(self, offer_repository: DriverOfferRepository) -> None:
        self._offers = offer_repository

    def execute(self) -> StatisticsSnapshot:
        return StatisticsSnapshot.from_counts(self._offers.count_by_status())
