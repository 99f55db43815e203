"""
Name: Database Pool Tests

Responsibilities:
  - Test pool lifecycle (init, get, close)
  - Test connection instrumentation (timing proxy, healthcheck, error wrapping)
  - Offline unit tests (no real DB)

Notes:
  - Uses mocking for psycopg_pool.ConnectionPool
"""

from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from app.crosscutting.exceptions import StorageError
from app.infrastructure.db.errors import (
    DatabaseConnectionError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)
from app.infrastructure.db.instrumentation import (
    InstrumentedConnectionPool,
    TimedConnection,
)


@pytest.fixture(autouse=True)
def _clean_pool():
    from app.infrastructure.db.pool import close_pool

    close_pool()
    yield
    close_pool()


@pytest.mark.unit
class TestPoolLifecycle:
    """Test pool initialization and cleanup."""

    def test_init_pool_wraps_real_pool(self):
        from app.infrastructure.db.pool import get_pool, init_pool

        with patch("psycopg_pool.ConnectionPool") as MockPool:
            real = MagicMock()
            MockPool.return_value = real

            result = init_pool("postgresql://test", min_size=2, max_size=10)

            MockPool.assert_called_once()
            assert MockPool.call_args.kwargs["min_size"] == 2
            assert MockPool.call_args.kwargs["max_size"] == 10
            assert isinstance(result, InstrumentedConnectionPool)
            assert get_pool() is result

    def test_init_pool_twice_raises_error(self):
        from app.infrastructure.db.pool import init_pool

        with patch("psycopg_pool.ConnectionPool"):
            init_pool("postgresql://test", min_size=1, max_size=2)

            with pytest.raises(PoolAlreadyInitializedError):
                init_pool("postgresql://test", min_size=1, max_size=2)

    def test_get_pool_without_init_raises_error(self):
        from app.infrastructure.db.pool import get_pool

        with pytest.raises(PoolNotInitializedError):
            get_pool()

    def test_pool_errors_are_storage_errors(self):
        assert issubclass(PoolNotInitializedError, StorageError)
        assert issubclass(DatabaseConnectionError, StorageError)

    def test_close_pool_clears_singleton(self):
        from app.infrastructure.db.pool import close_pool, get_pool, init_pool

        with patch("psycopg_pool.ConnectionPool") as MockPool:
            real = MagicMock()
            MockPool.return_value = real
            init_pool("postgresql://test", min_size=1, max_size=2)

            close_pool()

            real.close.assert_called_once()
            with pytest.raises(PoolNotInitializedError):
                get_pool()

    def test_close_pool_is_idempotent(self):
        from app.infrastructure.db.pool import close_pool

        close_pool()
        close_pool()


def _fake_pool(conn):
    pool = MagicMock()

    @contextmanager
    def connection(*args, **kwargs):
        yield conn

    pool.connection.side_effect = connection
    return pool


@pytest.mark.unit
class TestInstrumentation:
    def test_connection_is_timed_proxy(self):
        conn = MagicMock()
        pool = InstrumentedConnectionPool(_fake_pool(conn), healthcheck=False)

        with pool.connection() as wrapped:
            assert isinstance(wrapped, TimedConnection)
            wrapped.execute("SELECT 1 FROM driver_offers")
            wrapped.commit()

        conn.execute.assert_called_once_with("SELECT 1 FROM driver_offers")
        conn.commit.assert_called_once()

    def test_healthcheck_runs_on_acquire(self):
        conn = MagicMock()
        pool = InstrumentedConnectionPool(_fake_pool(conn), healthcheck=True)

        with pool.connection():
            pass

        conn.execute.assert_called_once_with("SELECT 1")

    def test_failed_healthcheck_raises_connection_error(self):
        conn = MagicMock()
        conn.execute.side_effect = RuntimeError("server closed the connection")
        pool = InstrumentedConnectionPool(_fake_pool(conn), healthcheck=True)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            with pool.connection():
                pass

        assert isinstance(exc_info.value.original_error, RuntimeError)

    def test_acquire_failure_raises_connection_error(self):
        pool = MagicMock()
        pool.connection.return_value.__enter__.side_effect = TimeoutError("pool timeout")
        instrumented = InstrumentedConnectionPool(pool)

        with pytest.raises(DatabaseConnectionError):
            with instrumented.connection():
                pass

    def test_slow_query_is_logged(self):
        conn = MagicMock()
        pool = InstrumentedConnectionPool(
            _fake_pool(conn), slow_query_seconds=0, healthcheck=False
        )

        with patch("app.infrastructure.db.instrumentation.logger") as log:
            with pool.connection() as wrapped:
                wrapped.execute("UPDATE driver_offers SET status = 'approved'")

        log.warning.assert_called_once()
        assert log.warning.call_args.kwargs["extra"]["kind"] == "UPDATE"
