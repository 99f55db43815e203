"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones PostgreSQL (singleton por proceso)

Responsabilidades:
  - Inicializar, exponer y cerrar el pool de conexiones.
  - Configurar cada conexión nueva (statement_timeout, zona horaria UTC).
  - Devolver un pool instrumentado (timing y slow queries sin tocar repos).

Colaboradores:
  - psycopg_pool.ConnectionPool
  - infrastructure/db/instrumentation.InstrumentedConnectionPool
  - api/main.py (lifespan: init_pool/close_pool)

Principios:
  - Fail-fast (doble init, uso sin init)
  - Encapsulación (pool global único)
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Optional

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger
from .errors import PoolAlreadyInitializedError, PoolNotInitializedError
from .instrumentation import InstrumentedConnectionPool

_pool: Optional[InstrumentedConnectionPool] = None
_pool_lock = threading.Lock()


def _configure_connection(conn) -> None:
    """Configura cada conexión creada por el pool."""
    conn.execute("SET TIME ZONE 'UTC'")

    # Guardrail contra queries colgadas (0 = sin límite)
    timeout_ms = int(get_settings().db_statement_timeout_ms)
    if timeout_ms > 0:
        conn.execute(f"SET statement_timeout = {timeout_ms}")
    conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int):
    """
    Inicializa el pool (una vez por proceso).

    Raises:
        PoolAlreadyInitializedError: si ya había un pool activo.
    """
    global _pool

    with _pool_lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("El pool ya fue inicializado.")

        # Lazy import: los tests con repos in-memory no necesitan libpq.
        from psycopg_pool import ConnectionPool

        logger.info(
            "Inicializando pool DB",
            extra={"min_size": min_size, "max_size": max_size},
        )

        real_pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_configure_connection,
            open=True,
        )

        settings = get_settings()
        _pool = InstrumentedConnectionPool(
            real_pool,
            slow_query_seconds=settings.db_slow_query_seconds,
            healthcheck=settings.db_healthcheck_on_acquire,
        )

        logger.info("Pool DB inicializado")
        return _pool


def get_pool() -> InstrumentedConnectionPool:
    """Retorna el pool instrumentado singleton."""
    if _pool is None:
        raise PoolNotInitializedError(
            "Pool no inicializado. Llamar init_pool() primero."
        )
    return _pool


def close_pool() -> None:
    """Cierra el pool (idempotente)."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            logger.info("Cerrando pool DB")
            try:
                _pool.close()
            finally:
                _pool = None
            logger.info("Pool DB cerrado")
