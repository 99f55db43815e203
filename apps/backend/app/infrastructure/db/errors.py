"""
===============================================================================
CRC CARD — infrastructure/db/errors.py
===============================================================================

Componente:
  Errores tipados del Pool/Conectividad

Responsabilidades:
  - Evitar RuntimeError genéricos en el ciclo de vida del pool.
  - Heredar de StorageError: cualquier falla de pool se reporta como 503
    y el retry de auditoría la considera transitoria.
===============================================================================
"""

from ...crosscutting.exceptions import StorageError


class DatabasePoolError(StorageError):
    """Base de errores de pool de base de datos."""


class PoolAlreadyInitializedError(DatabasePoolError):
    """Se intentó inicializar el pool más de una vez."""


class PoolNotInitializedError(DatabasePoolError):
    """Se intentó usar el pool sin init_pool()."""


class DatabaseConnectionError(DatabasePoolError):
    """Error al adquirir o validar una conexión del pool."""
