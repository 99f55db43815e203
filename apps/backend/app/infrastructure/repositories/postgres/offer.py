"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/offer.py
============================================================
Class: PostgresDriverOfferRepository

Responsibilities:
- Acceso a datos de ofertas en PostgreSQL (SQL crudo, psycopg 3).
- transition() como compare-and-set en UNA sentencia:
    UPDATE driver_offers SET ... WHERE id = %s AND status = %s RETURNING ...
  Si no devuelve fila, una lectura posterior distingue NotFound vs Conflict.
- Cada transición incrementa `version`: es el orden de commit por oferta
  que usa la auditoría (válido entre procesos/workers).
- Listados admin/público con total para paginar.
- Conteos por estado para estadísticas.

Collaborators:
- domain.entities.DriverOffer, OfferStop, OfferStatus
- domain.offer_state_machine.check_transition
- crosscutting.exceptions (StorageError y errores de moderación)
- psycopg_pool.ConnectionPool (vía infrastructure/db/pool.get_pool)
- Tablas: driver_offers, driver_offer_stops

Constraints / Notes:
- Queries siempre parametrizadas; los WHERE se arman solo con fragmentos fijos.
- Errores de moderación atraviesan intactos; todo lo demás -> StorageError.
- Ordenamiento determinístico en todos los listados.
============================================================
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import (
    ConflictError,
    ModerationError,
    NotFoundError,
    StorageError,
)
from ....crosscutting.logger import logger
from ....domain.entities import DriverOffer, OfferStatus, OfferStop
from ....domain.offer_state_machine import check_transition


class PostgresDriverOfferRepository:
    """R: Implementación PostgreSQL del repositorio de ofertas."""

    _SELECT_COLUMNS = """
        id, driver_id, from_text, from_lat, from_lng, to_text, to_lat, to_lng,
        start_at, seats_total, seats_free, price_per_seat, front_price_per_seat,
        currency, note, status, rejection_reason, reviewed_by, reviewed_at,
        created_at, updated_at, version
    """

    def __init__(self, pool: Optional[ConnectionPool] = None):
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    # =========================================================
    # Mapping
    # =========================================================
    @staticmethod
    def _row_to_offer(row: tuple, stops: List[OfferStop]) -> DriverOffer:
        (
            offer_id,
            driver_id,
            from_text,
            from_lat,
            from_lng,
            to_text,
            to_lat,
            to_lng,
            start_at,
            seats_total,
            seats_free,
            price_per_seat,
            front_price_per_seat,
            currency,
            note,
            status,
            rejection_reason,
            reviewed_by,
            reviewed_at,
            created_at,
            updated_at,
            version,
        ) = row

        return DriverOffer(
            id=offer_id,
            driver_id=driver_id,
            from_text=from_text,
            from_lat=from_lat,
            from_lng=from_lng,
            to_text=to_text,
            to_lat=to_lat,
            to_lng=to_lng,
            start_at=start_at,
            seats_total=seats_total,
            seats_free=seats_free,
            price_per_seat=price_per_seat,
            front_price_per_seat=front_price_per_seat,
            currency=currency,
            note=note,
            status=OfferStatus(status),
            rejection_reason=rejection_reason,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
            created_at=created_at,
            updated_at=updated_at,
            version=version,
            stops=stops,
        )

    # =========================================================
    # Helpers de ejecución (DRY + errores consistentes)
    # =========================================================
    def _fetchall(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> list[tuple]:
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except ModerationError:
            raise
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise StorageError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _fetchone(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> tuple | None:
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except ModerationError:
            raise
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise StorageError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _load_stops(self, offer_ids: Sequence[UUID]) -> Dict[UUID, List[OfferStop]]:
        if not offer_ids:
            return {}
        rows = self._fetchall(
            query="""
                SELECT offer_id, order_no, label_text, lat, lng
                FROM driver_offer_stops
                WHERE offer_id = ANY(%s)
                ORDER BY offer_id, order_no
            """,
            params=[list(offer_ids)],
            context_msg="PostgresDriverOfferRepository: Failed to load stops",
            extra={"offers": len(offer_ids)},
        )
        stops: Dict[UUID, List[OfferStop]] = {}
        for offer_id, order_no, label_text, lat, lng in rows:
            stops.setdefault(offer_id, []).append(
                OfferStop(order_no=order_no, label_text=label_text, lat=lat, lng=lng)
            )
        return stops

    def _rows_to_offers(self, rows: list[tuple]) -> List[DriverOffer]:
        stops = self._load_stops([r[0] for r in rows])
        return [self._row_to_offer(r, stops.get(r[0], [])) for r in rows]

    def _select_page(
        self,
        *,
        conditions: list[str],
        params: list[object],
        order_by: str,
        limit: int,
        offset: int,
        context_msg: str,
    ) -> Tuple[List[DriverOffer], int]:
        """
        R: SELECT paginado + COUNT(*) con los mismos filtros.

        conditions/order_by se construyen SOLO desde este repositorio.
        """
        where_sql = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        count_row = self._fetchone(
            query=f"SELECT COUNT(*) FROM driver_offers {where_sql}",
            params=params,
            context_msg=context_msg,
            extra={"where_sql": where_sql},
        )
        total = int(count_row[0]) if count_row else 0
        if limit <= 0 or total == 0:
            return [], total

        rows = self._fetchall(
            query=f"""
                SELECT {self._SELECT_COLUMNS}
                FROM driver_offers
                {where_sql}
                {order_by}
                LIMIT %s OFFSET %s
            """,
            params=[*params, limit, max(offset, 0)],
            context_msg=context_msg,
            extra={"where_sql": where_sql, "limit": limit, "offset": offset},
        )
        return self._rows_to_offers(rows), total

    # =========================================================
    # Public API — escrituras
    # =========================================================
    def create_offer(self, offer: DriverOffer) -> DriverOffer:
        """R: Inserta oferta + paradas en una transacción."""
        offer.check_invariants()
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                with conn.transaction():
                    row = conn.execute(
                        f"""
                        INSERT INTO driver_offers (
                            id, driver_id, from_text, from_lat, from_lng,
                            to_text, to_lat, to_lng, start_at, seats_total,
                            seats_free, price_per_seat, front_price_per_seat,
                            currency, note, status, created_at, updated_at
                        )
                        VALUES (
                            %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                            %s, %s, %s, %s, %s, %s, now(), now()
                        )
                        RETURNING {self._SELECT_COLUMNS}
                        """,
                        (
                            offer.id,
                            offer.driver_id,
                            offer.from_text,
                            offer.from_lat,
                            offer.from_lng,
                            offer.to_text,
                            offer.to_lat,
                            offer.to_lng,
                            offer.start_at,
                            offer.seats_total,
                            offer.seats_free,
                            offer.price_per_seat,
                            offer.front_price_per_seat,
                            offer.currency,
                            offer.note,
                            offer.status.value,
                        ),
                    ).fetchone()
                    for stop in offer.stops:
                        conn.execute(
                            """
                            INSERT INTO driver_offer_stops
                                (offer_id, order_no, label_text, lat, lng)
                            VALUES (%s, %s, %s, %s, %s)
                            """,
                            (offer.id, stop.order_no, stop.label_text, stop.lat, stop.lng),
                        )
        except ModerationError:
            raise
        except Exception as exc:
            logger.exception(
                "PostgresDriverOfferRepository: Failed to create offer",
                extra={"offer_id": str(offer.id), "error": str(exc)},
            )
            raise StorageError(
                f"Failed to create offer: {exc}", original_error=exc
            ) from exc

        return self._row_to_offer(row, sorted(offer.stops, key=lambda s: s.order_no))

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
        R: Compare-and-set atómico sobre status.

        La condición `status = %s` en el UPDATE es el check optimista: si otro
        moderador cambió la oferta, no se actualiza ninguna fila.
        """
        check_transition(
            from_status,
            to_status,
            rejection_reason=rejection_reason,
            offer_id=offer_id,
        )

        reason = (
            rejection_reason.strip()
            if to_status == OfferStatus.REJECTED and rejection_reason
            else None
        )
        review_sql = (
            "reviewed_by = %s, reviewed_at = now(),"
            if review
            else ""
        )
        review_params: list[object] = [actor_id] if review else []

        row = self._fetchone(
            query=f"""
                UPDATE driver_offers
                SET status = %s,
                    rejection_reason = %s,
                    {review_sql}
                    updated_at = now(),
                    version = version + 1
                WHERE id = %s AND status = %s
                RETURNING {self._SELECT_COLUMNS}
            """,
            params=[
                to_status.value,
                reason,
                *review_params,
                offer_id,
                from_status.value,
            ],
            context_msg="PostgresDriverOfferRepository: Failed to transition offer",
            extra={
                "offer_id": str(offer_id),
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )

        if row is None:
            current = self._fetchone(
                query="SELECT status FROM driver_offers WHERE id = %s",
                params=[offer_id],
                context_msg="PostgresDriverOfferRepository: Failed to read status",
                extra={"offer_id": str(offer_id)},
            )
            if current is None:
                raise NotFoundError(
                    f"Offer {offer_id} no encontrada", identifier=str(offer_id)
                )
            raise ConflictError(
                f"Offer {offer_id} está en {current[0]}, "
                f"se esperaba {from_status.value}",
                offer_id=offer_id,
                expected_status=from_status.value,
                actual_status=current[0],
            )

        return self._rows_to_offers([row])[0]

    # =========================================================
    # Public API — lecturas
    # =========================================================
    def get_offer(self, offer_id: UUID) -> Optional[DriverOffer]:
        row = self._fetchone(
            query=f"SELECT {self._SELECT_COLUMNS} FROM driver_offers WHERE id = %s",
            params=[offer_id],
            context_msg="PostgresDriverOfferRepository: Failed to get offer",
            extra={"offer_id": str(offer_id)},
        )
        if row is None:
            return None
        return self._rows_to_offers([row])[0]

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
        """R: Listado admin (created_at DESC)."""
        conditions: list[str] = []
        params: list[object] = []

        if statuses:
            conditions.append("status = ANY(%s)")
            params.append([s.value for s in statuses])
        if date_from is not None:
            conditions.append("start_at >= %s")
            params.append(date_from)
        if date_to is not None:
            conditions.append("start_at <= %s")
            params.append(date_to)
        if search:
            conditions.append("(from_text ILIKE %s OR to_text ILIKE %s)")
            pattern = f"%{search}%"
            params.extend([pattern, pattern])

        return self._select_page(
            conditions=conditions,
            params=params,
            order_by="ORDER BY created_at DESC, id DESC",
            limit=limit,
            offset=offset,
            context_msg="PostgresDriverOfferRepository: Failed to list offers",
        )

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
        """R: Listado público (start_at ASC)."""
        conditions: list[str] = ["status = %s", "start_at >= %s"]
        params: list[object] = [OfferStatus.PUBLISHED.value, now]

        if from_text:
            conditions.append("from_text ILIKE %s")
            params.append(f"%{from_text}%")
        if to_text:
            conditions.append("to_text ILIKE %s")
            params.append(f"%{to_text}%")
        if day is not None:
            day_start = datetime.combine(day, time.min, tzinfo=timezone.utc)
            conditions.append("start_at >= %s AND start_at < %s")
            params.extend([day_start, day_start + timedelta(days=1)])

        return self._select_page(
            conditions=conditions,
            params=params,
            order_by="ORDER BY start_at ASC, id ASC",
            limit=limit,
            offset=offset,
            context_msg="PostgresDriverOfferRepository: Failed to list published offers",
        )

    def count_by_status(self) -> Dict[OfferStatus, int]:
        rows = self._fetchall(
            query="SELECT status, COUNT(*) FROM driver_offers GROUP BY status",
            params=[],
            context_msg="PostgresDriverOfferRepository: Failed to count offers",
            extra={},
        )
        counts: Dict[OfferStatus, int] = {status: 0 for status in OfferStatus}
        for status, count in rows:
            counts[OfferStatus(status)] = int(count)
        return counts

    def ping(self) -> bool:
        try:
            self._fetchone(
                query="SELECT 1",
                params=[],
                context_msg="PostgresDriverOfferRepository: ping failed",
                extra={},
            )
        except StorageError:
            return False
        return True
