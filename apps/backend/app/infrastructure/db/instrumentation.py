"""
===============================================================================
CRC CARD — infrastructure/db/instrumentation.py
===============================================================================

Clases:
  - TimedConnection (Proxy)
  - InstrumentedConnectionPool (Facade/Proxy)

Responsabilidades:
  - Medir duración de conn.execute(...) sin tocar repositorios.
  - Loguear slow queries (solo el tipo de statement, nunca parámetros).
  - Healthcheck opcional al adquirir conexión (SELECT 1).

Colaboradores:
  - crosscutting.logger / crosscutting.metrics
  - psycopg_pool.ConnectionPool (pool real)
===============================================================================
"""

from __future__ import annotations

import time
from typing import Any, ContextManager

from ...crosscutting.logger import logger
from ...crosscutting.metrics import observe_db_query_duration
from .errors import DatabaseConnectionError


def _statement_kind(sql: Any) -> str:
    """Primer keyword del statement (SELECT/UPDATE/...), baja cardinalidad."""
    parts = str(sql).lstrip().split(None, 1)
    return parts[0].upper() if parts else "UNKNOWN"


class TimedConnection:
    """
    Proxy de conexión: intercepta execute() para medir tiempo.

    El resto del API (transaction(), commit(), cursor()...) se delega al
    conn real vía __getattr__.
    """

    def __init__(self, inner_conn, *, slow_query_seconds: float) -> None:
        self._conn = inner_conn
        self._slow = slow_query_seconds

    def execute(self, sql, *args, **kwargs):
        start = time.perf_counter()
        try:
            return self._conn.execute(sql, *args, **kwargs)
        finally:
            elapsed = time.perf_counter() - start
            kind = _statement_kind(sql)
            observe_db_query_duration(kind, elapsed)
            if elapsed >= self._slow:
                logger.warning(
                    "DB query lenta",
                    extra={"kind": kind, "seconds": round(elapsed, 4)},
                )

    def __getattr__(self, item: str):
        return getattr(self._conn, item)


class _ConnectionContext(ContextManager[TimedConnection]):
    def __init__(
        self, inner_ctx, *, slow_query_seconds: float, healthcheck: bool
    ) -> None:
        self._inner_ctx = inner_ctx
        self._slow = slow_query_seconds
        self._healthcheck = healthcheck

    def __enter__(self) -> TimedConnection:
        try:
            conn = self._inner_ctx.__enter__()
        except Exception as exc:
            raise DatabaseConnectionError(
                "No se pudo adquirir conexión DB.", original_error=exc
            ) from exc

        if self._healthcheck:
            try:
                conn.execute("SELECT 1")
            except Exception as exc:
                self._inner_ctx.__exit__(type(exc), exc, exc.__traceback__)
                raise DatabaseConnectionError(
                    "Conexión DB no respondió al healthcheck.", original_error=exc
                ) from exc

        return TimedConnection(conn, slow_query_seconds=self._slow)

    def __exit__(self, exc_type, exc, tb) -> bool:
        return self._inner_ctx.__exit__(exc_type, exc, tb)


class InstrumentedConnectionPool:
    """
    Facade del pool real.

    Los repositorios siguen haciendo `with pool.connection() as conn:`,
    pero `conn` es un TimedConnection.
    """

    def __init__(
        self,
        inner_pool,
        *,
        slow_query_seconds: float = 0.25,
        healthcheck: bool = True,
    ) -> None:
        self._pool = inner_pool
        self._slow_seconds = float(slow_query_seconds)
        self._healthcheck = healthcheck

    def connection(self, *args, **kwargs) -> ContextManager[TimedConnection]:
        inner_ctx = self._pool.connection(*args, **kwargs)
        return _ConnectionContext(
            inner_ctx,
            slow_query_seconds=self._slow_seconds,
            healthcheck=self._healthcheck,
        )

    def __getattr__(self, item: str):
        return getattr(self._pool, item)
